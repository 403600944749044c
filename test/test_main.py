"""
Driver loop tests: one program per turn, fresh state every turn
"""

import pytest
import main
from main import (
  run_turn, run_interactive_mode, run_script_file, parse_file, read_line,
  LINE, INTERRUPTED, EOF, FAILURE, PROMPT,
)
from interpreter import create_debug_interpreter


def scripted_reader(lines, ending=(EOF,)):
  """Line reader that replays lines, then returns the given ending"""
  results = [(LINE, line) for line in lines] + [ending]
  prompts = []

  def read_line(prompt):
    prompts.append(prompt)
    return results.pop(0)

  read_line.prompts = prompts
  return read_line


def run_session(lines, ending=(EOF,)):
  output = []
  status = run_interactive_mode(
    read_line=scripted_reader(lines, ending), write=output.append)
  return status, output


class TestTurns:
  """End-to-end scenarios for a single turn"""

  @pytest.mark.parametrize("source,expected", [
    ("x := 3; y := x + 4", "{x: 3, y: 7}"),
    ("x := 10; while x > 0 do x := x - 1", "{x: 0}"),
    ("if 1 = 1 then x := 1 else x := 2", "{x: 1}"),
    ("skip", "{}"),
  ])
  def test_bindings(self, parser, interpreter, source, expected):
    assert run_turn(source, parser, interpreter) == expected

  def test_unbound_variable(self, parser, interpreter):
    assert run_turn("y := x + 1", parser, interpreter) == "Runtime error: Unbound variable: x"

  def test_division_by_zero(self, parser, interpreter):
    assert run_turn("x := 1 / 0", parser, interpreter) == "Runtime error: Division by zero"

  def test_syntax_error(self, parser, interpreter):
    report = run_turn("x := ", parser, interpreter)
    assert report.startswith("Parse error: Syntax error at line 1")

  def test_debug_shows_partial_state(self, parser):
    report = run_turn("a := 1; b := a / 0", parser, create_debug_interpreter())
    assert "Runtime error: Division by zero" in report
    assert "State at error: {a: 1}" in report


class TestInteractiveMode:
  """Test the read-eval-print loop"""

  def test_state_does_not_persist_between_turns(self):
    status, output = run_session(["x := 5", "y := x + 1"])
    assert status == 0
    assert output == ["{x: 5}", "Runtime error: Unbound variable: x", "\nGoodbye!"]

  def test_errors_do_not_stop_the_loop(self):
    status, output = run_session(["x := ", "x := 1 / 0", "x := 2"])
    assert status == 0
    assert output[0].startswith("Parse error:")
    assert output[1:] == ["Runtime error: Division by zero", "{x: 2}", "\nGoodbye!"]

  def test_interrupt_exits_cleanly(self):
    status, output = run_session(["x := 1"], ending=(INTERRUPTED,))
    assert status == 0
    assert output == ["{x: 1}", "\nGoodbye!"]

  def test_input_failure_is_fatal(self):
    status, output = run_session([], ending=(FAILURE, "device not ready"))
    assert status == 1
    assert output == ["Input error: device not ready"]

  def test_blank_lines_are_skipped(self):
    status, output = run_session(["", "   "])
    assert output == ["\nGoodbye!"]

  def test_prompt(self):
    reader = scripted_reader(["skip"])
    run_interactive_mode(read_line=reader, write=lambda text: None)
    assert reader.prompts == [PROMPT, PROMPT]
    assert PROMPT == ">> "

  def test_parse_command_does_not_evaluate(self):
    status, output = run_session([":parse x := 1 / 0"])
    assert output[0] == "Assign('x')\n  BinaryOp(DIV)\n    Val(1)\n    Val(0)"

  def test_parse_command_reports_syntax_errors(self):
    status, output = run_session([":parse x = 1"])
    assert output[0].startswith("Parse error:")

  @pytest.mark.parametrize("line", [":parse", ":parse   ", "  :parse"])
  def test_parse_command_without_program_shows_usage(self, line):
    status, output = run_session([line])
    assert output == ["Usage: :parse <program>", "\nGoodbye!"]

  def test_deep_nesting_is_reported_and_loop_continues(self):
    nested = "{" * 500 + "x := 1" + "}" * 500
    status, output = run_session([nested, "y := 2"])
    assert status == 0
    assert "nested too deeply" in output[0]
    assert output[1:] == ["{y: 2}", "\nGoodbye!"]

  def test_interrupt_during_turn_exits_cleanly(self, monkeypatch):
    class InterruptedInterpreter:
      debug = False

      def run(self, program):
        raise KeyboardInterrupt

    monkeypatch.setattr(main, "create_interpreter", InterruptedInterpreter)
    status, output = run_session(["while true do skip", "x := 1"])
    assert status == 0
    assert output == ["\nGoodbye!"]

  def test_help_command(self):
    status, output = run_session([":help"])
    assert output[0] == "REPL Commands:"
    assert output[-1] == "\nGoodbye!"


class TestScriptMode:
  """Test running and parsing script files"""

  def test_each_line_runs_with_fresh_state(self, tmp_path, capsys):
    script = tmp_path / "prog.imp"
    script.write_text("# counting\nx := 2; y := x * x\n\nz := 7\n")
    run_script_file(str(script))
    assert capsys.readouterr().out == "2: {x: 2, y: 4}\n4: {z: 7}\n"

  def test_runtime_error_exits_with_status_1(self, tmp_path, capsys):
    script = tmp_path / "bad.imp"
    script.write_text("x := 1\ny := x\n")
    with pytest.raises(SystemExit) as exc_info:
      run_script_file(str(script))
    assert exc_info.value.code == 1
    assert "line 2: Unbound variable: x" in capsys.readouterr().out

  def test_parse_file_prints_trees(self, tmp_path, capsys):
    script = tmp_path / "prog.imp"
    script.write_text("skip\n")
    parse_file(str(script))
    out = capsys.readouterr().out
    assert "Line 1: skip" in out
    assert "Skip" in out

  def test_parse_file_rejects_deep_nesting(self, tmp_path, capsys):
    script = tmp_path / "deep.imp"
    script.write_text("{" * 500 + "skip" + "}" * 500 + "\n")
    with pytest.raises(SystemExit) as exc_info:
      parse_file(str(script))
    assert exc_info.value.code == 1
    assert "line 1: program is nested too deeply" in capsys.readouterr().out

  def test_syntax_error_names_the_script(self, tmp_path, capsys):
    script = tmp_path / "typo.imp"
    script.write_text("x = 1\n")
    with pytest.raises(SystemExit):
      run_script_file(str(script))
    assert f"Syntax error in {script} at line 1, column 3" in capsys.readouterr().out


class TestLineReader:
  """Test mapping terminal input onto line results"""

  def fake_input(self, monkeypatch, outcome):
    def fake(prompt):
      if isinstance(outcome, BaseException):
        raise outcome
      return outcome
    monkeypatch.setattr("builtins.input", fake)

  def test_line(self, monkeypatch):
    self.fake_input(monkeypatch, "x := 1")
    assert read_line(PROMPT) == (LINE, "x := 1")

  def test_empty_line(self, monkeypatch):
    self.fake_input(monkeypatch, "")
    assert read_line(PROMPT) == (LINE, "")

  def test_interrupt(self, monkeypatch):
    self.fake_input(monkeypatch, KeyboardInterrupt())
    assert read_line(PROMPT) == (INTERRUPTED,)

  def test_end_of_input(self, monkeypatch):
    self.fake_input(monkeypatch, EOFError())
    assert read_line(PROMPT) == (EOF,)

  def test_failure_carries_detail(self, monkeypatch):
    self.fake_input(monkeypatch, OSError("bad fd"))
    assert read_line(PROMPT) == (FAILURE, "bad fd")

  def test_prompt_is_passed_through(self, monkeypatch):
    prompts = []
    monkeypatch.setattr("builtins.input", lambda prompt: prompts.append(prompt) or "skip")
    read_line(PROMPT)
    assert prompts == [PROMPT]

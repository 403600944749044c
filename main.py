"""
IMP Programming Language - Main Entry Point
An interactive evaluator for a small imperative language
"""

import sys
import argparse
import os
from pathlib import Path
from typing import Callable, List, Tuple

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import KEYWORDS, ImpParser, create_parser, create_debug_parser
from interpreter import ImpInterpreter, create_interpreter, create_debug_interpreter
from error_handling import ImpSyntaxError, ImpRuntimeError
from syntax import pretty_print_ast, format_program
from utilities import format_bindings, truncate_display


VERSION = "IMP v0.1.0"
PROMPT = ">> "
HISTORY_FILE = "~/.imp_history"
REPL_COMMANDS = [":parse", ":help"]
NESTING_ERROR = "program is nested too deeply"

# Line reader results
LINE = "LINE"
INTERRUPTED = "INTERRUPTED"
EOF = "EOF"
FAILURE = "FAILURE"

LineResult = Tuple


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='IMP - an interactive evaluator for a small imperative language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s                        # Interactive mode
  %(prog)s script.imp             # Run each line of a script as a program
  %(prog)s --parse script.imp     # Parse each line and show its syntax tree
  %(prog)s -i --debug             # Interactive mode with evaluation trace
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='IMP script file, one program per line'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show syntax trees (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for parsing and evaluation'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


# ============================================================================
# TURNS
# ============================================================================

def run_turn(line: str, parser: ImpParser, interpreter: ImpInterpreter) -> str:
  """
  Parse and evaluate one program against a fresh state.
  Returns the text to report: the final bindings or an error message.
  """
  try:
    program = parser.parse(line)
  except ImpSyntaxError as e:
    return f"Parse error: {e}"
  except RecursionError:
    return f"Parse error: {NESTING_ERROR}"

  try:
    state = interpreter.run(program)
  except ImpRuntimeError as e:
    report = f"Runtime error: {e.message}"
    if interpreter.debug and e.state:
      report += f"\n  State at error: {truncate_display(format_bindings(e.state))}"
    return report
  except RecursionError:
    return f"Runtime error: {NESTING_ERROR}"

  return format_bindings(state)


def script_lines(script_path: str) -> List[Tuple[int, str]]:
  """Numbered program lines of a script, skipping blanks and comments"""
  with open(script_path, 'r', encoding='utf-8') as f:
    lines = f.read().split('\n')
  return [(num, line) for num, line in enumerate(lines, 1)
          if line.strip() and not line.strip().startswith('#')]


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse every line of a script and show the syntax trees"""
  try:
    parser = create_debug_parser() if debug else create_parser()

    print(f"Parsing {script_path}...")
    for line_num, line in script_lines(script_path):
      program = parser.parse(line, script_path)
      print(f"\nLine {line_num}: {format_program(program)}")
      print(pretty_print_ast(program), end="")

  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    sys.exit(1)
  except ImpSyntaxError as e:
    print(f"Parse error in '{script_path}' line {line_num}: {e}")
    sys.exit(1)
  except RecursionError:
    print(f"Error in '{script_path}' line {line_num}: {NESTING_ERROR}")
    sys.exit(1)


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run each line of a script as an independent program"""
  try:
    parser = create_debug_parser() if debug else create_parser()
    interpreter = create_debug_interpreter() if debug else create_interpreter()

    for line_num, line in script_lines(script_path):
      program = parser.parse(line, script_path)
      state = interpreter.run(program)
      print(f"{line_num}: {format_bindings(state)}")

  except FileNotFoundError:
    print(f"Error: Script file '{script_path}' not found")
    print(f"  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Permission denied reading '{script_path}'")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{script_path}': {e}")
    print(f"  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)
  except ImpSyntaxError as e:
    print(f"Parse error in '{script_path}' line {line_num}: {e}")
    sys.exit(1)
  except ImpRuntimeError as e:
    print(f"Runtime error in '{script_path}' line {line_num}: {e.message}")
    if debug and e.state:
      print(f"\nState at error:")
      for name, value in e.state.items():
        print(f"  {name} = {value}")
    sys.exit(1)
  except RecursionError:
    print(f"Error in '{script_path}' line {line_num}: {NESTING_ERROR}")
    sys.exit(1)


# ============================================================================
# INTERACTIVE MODE
# ============================================================================

def setup_readline() -> None:
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run, no history yet

  readline.set_history_length(1000)

  completions = KEYWORDS + REPL_COMMANDS

  def completer(text, state):
    options = [word for word in completions if word.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def read_line(prompt: str) -> LineResult:
  """Read one line from the terminal as a (kind, ...) result"""
  try:
    return (LINE, input(prompt))
  except KeyboardInterrupt:
    return (INTERRUPTED,)
  except EOFError:
    return (EOF,)
  except OSError as e:
    return (FAILURE, str(e))


def show_help(write: Callable[[str], None]) -> None:
  write("REPL Commands:")
  write("  :parse <program>  - Show the syntax tree without running it")
  write("  :help             - Show this help")
  write("  Ctrl-C / Ctrl-D   - Exit")
  write("")
  write("Each line is a separate program run with empty state:")
  write("  x := 3; y := x + 4                   - Assignment and sequencing")
  write("  if x < 1 then y := 1 else skip       - Conditional (else required)")
  write("  x := 10; while x > 0 do x := x - 1   - While loop")
  write("  { a := 1; b := 2 }                   - Block")
  write("  not b, b and c, b or c               - Boolean connectives")


def run_interactive_mode(
    debug: bool = False,
    read_line: Callable[[str], LineResult] = read_line,
    write: Callable[[str], None] = print,
) -> int:
  """Run the read-eval-print loop; returns the process exit status"""
  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    result = read_line(PROMPT)
    kind = result[0]

    if kind in (INTERRUPTED, EOF):
      write("\nGoodbye!")
      return 0
    if kind == FAILURE:
      write(f"Input error: {result[1]}")
      return 1

    code = result[1]
    if not code.strip():
      continue

    if code.strip() == ":help":
      show_help(write)
      continue

    try:
      if code.strip().startswith(":parse"):
        source = code.strip()[len(":parse"):]
        if not source.strip():
          write("Usage: :parse <program>")
          continue
        try:
          program = parser.parse(source)
          write(pretty_print_ast(program).rstrip("\n"))
        except ImpSyntaxError as e:
          write(f"Parse error: {e}")
        except RecursionError:
          write(f"Parse error: {NESTING_ERROR}")
        continue

      write(run_turn(code, parser, interpreter))
    except KeyboardInterrupt:
      write("\nGoodbye!")
      return 0
    except Exception as e:
      write(f"Unexpected error: {e}")
      if debug:
        import traceback
        traceback.print_exc()


def show_language_info() -> None:
  """Show IMP language information"""
  print(VERSION)
  print("=" * 50)
  print("A small imperative language with:")
  print("• 64-bit integer arithmetic (+ - * /, wrapping)")
  print("• Boolean guards (and, or, not, comparisons)")
  print("• Assignment, sequencing, if-then-else, while")
  print()
  print("Type ':help' for commands. State does not carry over between lines.")
  print()


def main() -> None:
  """Main entry point for IMP"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    if args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)
    return

  if not args.interactive:
    show_language_info()
  if READLINE_AVAILABLE:
    setup_readline()
  sys.exit(run_interactive_mode(debug=args.debug))


if __name__ == "__main__":
  main()

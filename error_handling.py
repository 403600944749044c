"""
Error handling for the IMP parser and evaluator
Syntax errors enhanced with source context, plus the runtime error taxonomy
"""

from typing import List, Optional, Dict
from pyparsing import ParseBaseException
import re


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_syntax_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable syntax error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_syntax_error(error: Dict, filename: str = "<input>") -> str:
    """Format syntax error as string; named files appear in the header"""
    where = f" in {filename}" if filename != "<input>" else ""
    error_msg = f"Syntax error{where} at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"{error['context']}\n"

    if error['suggestions']:
        error_msg += f"  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg.rstrip('\n')


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ here")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseBaseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", exc.msg)
    if expected_match:
        return [expected_match.group(1)]
    return []


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of input"
    return "unknown"


def generate_suggestions(got: str, source_line: str) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if got.startswith("'=") and not got.startswith("'=="):
        suggestions.append("Assignment is written 'x := e', not 'x = e'")

    if "&&" in source_line or "||" in source_line:
        suggestions.append("Boolean connectives are the keywords 'and' and 'or'")

    if re.search(r"!(?!=)", source_line):
        suggestions.append("Boolean negation is the keyword 'not'")

    if re.search(r"\bif\b", source_line) and not re.search(r"\belse\b", source_line):
        suggestions.append("Conditionals need an 'else' branch; use 'else skip' for an empty one")

    if re.search(r"\bwhile\b", source_line) and not re.search(r"\bdo\b", source_line):
        suggestions.append("While loops are written 'while b do s'")

    if source_line.count("{") != source_line.count("}"):
        suggestions.append("Unbalanced braces in block")

    return suggestions


def enhance_parse_exception_dict(exc: ParseBaseException, source_text: str) -> Dict:
    """Convert pyparsing exception to enhanced IMP error dict"""
    line_num = exc.lineno
    col_num = exc.column
    lines = source_text.split('\n')
    source_line = lines[line_num - 1] if line_num <= len(lines) else ""

    context = get_context_lines(source_text, line_num, col_num)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(got, source_line)

    return make_syntax_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class ImpSyntaxError(Exception):
    """Syntax error reported by the parser, with source position"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None,
                 filename: str = "<input>"):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        self.filename = filename
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_syntax_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_syntax_error(error_dict, self.filename)


class ImpErrorHandler:
    """Turns pyparsing failures on one source text into ImpSyntaxError"""
    def __init__(self, source_text: str, filename: str = "<input>"):
        self.source_text = source_text
        self.filename = filename

    def enhance_parse_exception(self, exc: ParseBaseException) -> ImpSyntaxError:
        """Convert pyparsing exception to enhanced IMP error"""
        error_dict = enhance_parse_exception_dict(exc, self.source_text)
        return ImpSyntaxError(filename=self.filename, **error_dict)


class ImpRuntimeError(Exception):
    """Evaluation failure; terminal for the program being run.

    `state` is filled in by run_program with a copy of the bindings as they
    were when evaluation stopped.
    """
    def __init__(self, message: str):
        self.message = message
        self.state: Optional[Dict[str, int]] = None
        super().__init__(message)


class UnboundVariable(ImpRuntimeError):
    """Read of a variable that has not been assigned in this execution"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unbound variable: {name}")


class DivisionByZero(ImpRuntimeError):
    """Division whose right operand evaluated to 0"""
    def __init__(self):
        super().__init__("Division by zero")

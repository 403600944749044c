"""
Utilities module for the IMP interpreter
Fixed-width integer arithmetic and result formatting helpers
"""

from typing import Dict


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


# ==================== FIXED-WIDTH ARITHMETIC ====================

def wrap_int64(value: int) -> int:
  """
  Reduce an unbounded Python int to a 64-bit two's complement value

  Args:
    value: Any integer

  Returns:
    The integer congruent to value modulo 2**64 in [INT64_MIN, INT64_MAX]

  Examples:
    wrap_int64(INT64_MAX + 1) -> INT64_MIN
    wrap_int64(-1) -> -1
  """
  return ((value - INT64_MIN) & 0xFFFFFFFFFFFFFFFF) + INT64_MIN


def truncating_div(lhs: int, rhs: int) -> int:
  """
  Integer division rounding toward zero, wrapped to 64 bits

  Python's // floors, so the quotient is computed on magnitudes and the
  sign applied afterwards.

  Args:
    lhs: Dividend
    rhs: Divisor, must be non-zero

  Returns:
    The truncated quotient

  Examples:
    truncating_div(7, 2) -> 3
    truncating_div(-7, 2) -> -3
    truncating_div(INT64_MIN, -1) -> INT64_MIN
  """
  quotient = abs(lhs) // abs(rhs)
  if (lhs < 0) != (rhs < 0):
    quotient = -quotient
  return wrap_int64(quotient)


# ==================== FORMATTING ====================

def format_bindings(state: Dict[str, int]) -> str:
  """
  Render a final state as a bindings map

  Examples:
    format_bindings({"x": 3, "y": 7}) -> "{x: 3, y: 7}"
    format_bindings({}) -> "{}"
  """
  return "{" + ", ".join(f"{name}: {value}" for name, value in state.items()) + "}"


def truncate_display(text: str, limit: int = 60) -> str:
  """Shorten a value for one-line display"""
  if len(text) > limit:
    return text[:limit - 3] + "..."
  return text

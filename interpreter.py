"""
IMP Interpreter
Tree-walking evaluation of arithmetic, boolean and statement forms
against an explicitly passed variable state
"""

from typing import Dict, Optional

from syntax import (
  AExpr, BExpr, Stmt, BinOp, Cmp,
  Val, Var, BinaryOp, Neg,
  Bool, And, Or, Not, Compare,
  Skip, Assign, Seq, If, While,
  iter_statements,
)
from utilities import wrap_int64, truncating_div
from error_handling import ImpRuntimeError, UnboundVariable, DivisionByZero


# ============================================================================
# STATE STORE
# ============================================================================

def make_state() -> Dict[str, int]:
  """Create an empty state for one program execution"""
  return {}


def state_get(state: Dict[str, int], name: str) -> Optional[int]:
  """Look up a variable, None when it has never been assigned"""
  return state.get(name)


def state_set(state: Dict[str, int], name: str, value: int) -> None:
  """Insert or overwrite a binding"""
  state[name] = wrap_int64(value)


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def apply_binop(op: BinOp, lhs: int, rhs: int) -> int:
  """Apply an arithmetic operator with 64-bit wrap-around"""
  if op is BinOp.ADD:
    return wrap_int64(lhs + rhs)
  elif op is BinOp.SUB:
    return wrap_int64(lhs - rhs)
  elif op is BinOp.MULT:
    return wrap_int64(lhs * rhs)
  elif op is BinOp.DIV:
    if rhs == 0:
      raise DivisionByZero()
    return truncating_div(lhs, rhs)
  raise ValueError(f"Unknown arithmetic operator: {op!r}")


def apply_cmp(op: Cmp, lhs: int, rhs: int) -> bool:
  if op is Cmp.EQ:
    return lhs == rhs
  elif op is Cmp.NEQ:
    return lhs != rhs
  elif op is Cmp.LE:
    return lhs <= rhs
  elif op is Cmp.LT:
    return lhs < rhs
  elif op is Cmp.GE:
    return lhs >= rhs
  elif op is Cmp.GT:
    return lhs > rhs
  raise ValueError(f"Unknown comparison operator: {op!r}")


def eval_aexpr(aexpr: AExpr, state: Dict[str, int]) -> int:
  """Evaluate an arithmetic expression; operands left to right"""
  if isinstance(aexpr, Val):
    return wrap_int64(aexpr.value)
  elif isinstance(aexpr, Var):
    value = state_get(state, aexpr.name)
    if value is None:
      raise UnboundVariable(aexpr.name)
    return value
  elif isinstance(aexpr, BinaryOp):
    lhs = eval_aexpr(aexpr.lhs, state)
    rhs = eval_aexpr(aexpr.rhs, state)
    return apply_binop(aexpr.op, lhs, rhs)
  elif isinstance(aexpr, Neg):
    return wrap_int64(-eval_aexpr(aexpr.operand, state))
  raise TypeError(f"Not an arithmetic expression: {aexpr!r}")


def eval_bexpr(bexpr: BExpr, state: Dict[str, int]) -> bool:
  """
  Evaluate a boolean expression.
  'and' / 'or' always evaluate both operands, left first.
  """
  if isinstance(bexpr, Bool):
    return bexpr.value
  elif isinstance(bexpr, And):
    lhs = eval_bexpr(bexpr.lhs, state)
    rhs = eval_bexpr(bexpr.rhs, state)
    return lhs and rhs
  elif isinstance(bexpr, Or):
    lhs = eval_bexpr(bexpr.lhs, state)
    rhs = eval_bexpr(bexpr.rhs, state)
    return lhs or rhs
  elif isinstance(bexpr, Not):
    return not eval_bexpr(bexpr.operand, state)
  elif isinstance(bexpr, Compare):
    lhs = eval_aexpr(bexpr.lhs, state)
    rhs = eval_aexpr(bexpr.rhs, state)
    return apply_cmp(bexpr.op, lhs, rhs)
  raise TypeError(f"Not a boolean expression: {bexpr!r}")


def eval_stmt(stmt: Stmt, state: Dict[str, int], debug: bool = False) -> None:
  """
  Execute a statement, mutating state in place.
  Sequences stop at the first failure; earlier assignments are kept.
  """
  if debug:
    print(f"Evaluating: {type(stmt).__name__}")

  if isinstance(stmt, Skip):
    return
  elif isinstance(stmt, Assign):
    value = eval_aexpr(stmt.aexpr, state)
    state_set(state, stmt.name, value)
    if debug:
      print(f"  {stmt.name} <- {value}")
  elif isinstance(stmt, Seq):
    for member in stmt.stmts:
      eval_stmt(member, state, debug)
  elif isinstance(stmt, If):
    if eval_bexpr(stmt.guard, state):
      eval_stmt(stmt.then_branch, state, debug)
    else:
      eval_stmt(stmt.else_branch, state, debug)
  elif isinstance(stmt, While):
    while eval_bexpr(stmt.guard, state):
      eval_stmt(stmt.body, state, debug)
  else:
    raise TypeError(f"Not a statement: {stmt!r}")


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def run_program(program: Stmt, debug: bool = False) -> Dict[str, int]:
  """
  Run a program against a fresh state and return the final bindings.
  On failure the ImpRuntimeError carries a copy of the partial state.
  """
  state = make_state()
  try:
    for stmt in iter_statements(program):
      eval_stmt(stmt, state, debug)
  except ImpRuntimeError as e:
    e.state = dict(state)
    raise
  return state


class ImpInterpreter:
  """Runs parsed programs, each against its own fresh state"""

  def __init__(self, debug: bool = False):
    self.debug = debug

  def run(self, program: Stmt) -> Dict[str, int]:
    return run_program(program, self.debug)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False) -> ImpInterpreter:
  """Factory function returning an interpreter"""
  return ImpInterpreter(debug=debug)


def create_debug_interpreter() -> ImpInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)

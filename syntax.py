"""
IMP Abstract Syntax
Immutable syntax tree nodes for arithmetic, boolean and statement forms
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple, Union

from utilities import INT64_MIN, INT64_MAX


# ============================================================================
# OPERATORS
# ============================================================================

class BinOp(Enum):
  """Binary arithmetic operators"""
  ADD = "+"
  SUB = "-"
  MULT = "*"
  DIV = "/"


class Cmp(Enum):
  """Integer comparison operators"""
  EQ = "="
  NEQ = "!="
  LE = "<="
  LT = "<"
  GE = ">="
  GT = ">"


# ============================================================================
# ARITHMETIC EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Val:
  value: int


@dataclass(frozen=True)
class Var:
  name: str


@dataclass(frozen=True)
class BinaryOp:
  op: BinOp
  lhs: 'AExpr'
  rhs: 'AExpr'


@dataclass(frozen=True)
class Neg:
  operand: 'AExpr'


AExpr = Union[Val, Var, BinaryOp, Neg]


# ============================================================================
# BOOLEAN EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Bool:
  value: bool


@dataclass(frozen=True)
class And:
  lhs: 'BExpr'
  rhs: 'BExpr'


@dataclass(frozen=True)
class Or:
  lhs: 'BExpr'
  rhs: 'BExpr'


@dataclass(frozen=True)
class Not:
  operand: 'BExpr'


@dataclass(frozen=True)
class Compare:
  op: Cmp
  lhs: AExpr
  rhs: AExpr


BExpr = Union[Bool, And, Or, Not, Compare]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Skip:
  pass


@dataclass(frozen=True)
class Assign:
  name: str
  aexpr: AExpr


@dataclass(frozen=True)
class Seq:
  stmts: Tuple['Stmt', ...]


@dataclass(frozen=True)
class If:
  guard: BExpr
  then_branch: 'Stmt'
  else_branch: 'Stmt'


@dataclass(frozen=True)
class While:
  guard: BExpr
  body: 'Stmt'


Stmt = Union[Skip, Assign, Seq, If, While]


def iter_statements(stmt: Stmt) -> Iterator[Stmt]:
  """Iterate the top-level statements of a program root.

  A Seq yields its members in source order, anything else yields itself.
  """
  if isinstance(stmt, Seq):
    return iter(stmt.stmts)
  return iter((stmt,))


# ============================================================================
# CONSTRUCTION HELPERS
# ============================================================================

def to_aexpr(value: Union[int, str, AExpr]) -> AExpr:
  """Lift an int to a literal and a str to a variable reference"""
  if isinstance(value, bool):
    raise TypeError(f"Expected arithmetic expression, got bool {value!r}")
  if isinstance(value, int):
    return Val(value)
  if isinstance(value, str):
    return Var(value)
  return value


def to_bexpr(value: Union[bool, BExpr]) -> BExpr:
  if isinstance(value, bool):
    return Bool(value)
  return value


def add(lhs, rhs) -> BinaryOp:
  return BinaryOp(BinOp.ADD, to_aexpr(lhs), to_aexpr(rhs))


def sub(lhs, rhs) -> BinaryOp:
  return BinaryOp(BinOp.SUB, to_aexpr(lhs), to_aexpr(rhs))


def mult(lhs, rhs) -> BinaryOp:
  return BinaryOp(BinOp.MULT, to_aexpr(lhs), to_aexpr(rhs))


def div(lhs, rhs) -> BinaryOp:
  return BinaryOp(BinOp.DIV, to_aexpr(lhs), to_aexpr(rhs))


def neg(operand) -> Neg:
  return Neg(to_aexpr(operand))


def and_(lhs, rhs) -> And:
  return And(to_bexpr(lhs), to_bexpr(rhs))


def or_(lhs, rhs) -> Or:
  return Or(to_bexpr(lhs), to_bexpr(rhs))


def not_(operand) -> Not:
  return Not(to_bexpr(operand))


def compare(op: Cmp, lhs, rhs) -> Compare:
  return Compare(op, to_aexpr(lhs), to_aexpr(rhs))


def assign(name: str, aexpr) -> Assign:
  return Assign(name, to_aexpr(aexpr))


def ite(guard, then_branch: Stmt, else_branch: Stmt) -> If:
  """if-then-else; both branches are required"""
  return If(to_bexpr(guard), then_branch, else_branch)


def while_(guard, body: Stmt) -> While:
  return While(to_bexpr(guard), body)


def seq(stmts) -> Seq:
  """Build a sequence from any iterable of statements"""
  return Seq(tuple(stmts))


# ============================================================================
# PRINTING
# ============================================================================

def pretty_print_ast(node, indent: int = 0) -> str:
  """Pretty print a syntax tree for debugging"""
  pad = "  " * indent
  name = type(node).__name__

  if isinstance(node, (Val, Bool)):
    return f"{pad}{name}({node.value!r})\n"
  if isinstance(node, Var):
    return f"{pad}{name}({node.name!r})\n"
  if isinstance(node, Skip):
    return f"{pad}{name}\n"
  if isinstance(node, Assign):
    return f"{pad}{name}({node.name!r})\n" + pretty_print_ast(node.aexpr, indent + 1)
  if isinstance(node, (BinaryOp, Compare)):
    return (f"{pad}{name}({node.op.name})\n"
            + pretty_print_ast(node.lhs, indent + 1)
            + pretty_print_ast(node.rhs, indent + 1))

  result = f"{pad}{name}\n"
  if isinstance(node, (And, Or)):
    children = [node.lhs, node.rhs]
  elif isinstance(node, (Neg, Not)):
    children = [node.operand]
  elif isinstance(node, Seq):
    children = list(node.stmts)
  elif isinstance(node, If):
    children = [node.guard, node.then_branch, node.else_branch]
  elif isinstance(node, While):
    children = [node.guard, node.body]
  else:
    raise TypeError(f"Not a syntax node: {node!r}")

  for child in children:
    result += pretty_print_ast(child, indent + 1)
  return result


def format_program(node) -> str:
  """Render a syntax tree back into source text.

  Expressions come out fully parenthesized, so the result parses back to a
  tree that evaluates the same way.
  """
  if isinstance(node, Val):
    # negative literals only come from construction helpers
    if node.value == INT64_MIN:
      return f"(-{INT64_MAX} - 1)"
    return str(node.value) if node.value >= 0 else f"(-{-node.value})"
  if isinstance(node, Var):
    return node.name
  if isinstance(node, BinaryOp):
    return f"({format_program(node.lhs)} {node.op.value} {format_program(node.rhs)})"
  if isinstance(node, Neg):
    return f"(-{format_program(node.operand)})"

  if isinstance(node, Bool):
    return "true" if node.value else "false"
  if isinstance(node, And):
    return f"({format_program(node.lhs)} and {format_program(node.rhs)})"
  if isinstance(node, Or):
    return f"({format_program(node.lhs)} or {format_program(node.rhs)})"
  if isinstance(node, Not):
    return f"(not {format_program(node.operand)})"
  if isinstance(node, Compare):
    return f"({format_program(node.lhs)} {node.op.value} {format_program(node.rhs)})"

  if isinstance(node, Skip):
    return "skip"
  if isinstance(node, Assign):
    return f"{node.name} := {format_program(node.aexpr)}"
  if isinstance(node, Seq):
    return "{ " + "; ".join(format_program(s) for s in node.stmts) + " }"
  if isinstance(node, If):
    return (f"if {format_program(node.guard)} then {format_program(node.then_branch)}"
            f" else {format_program(node.else_branch)}")
  if isinstance(node, While):
    return f"while {format_program(node.guard)} do {format_program(node.body)}"

  raise TypeError(f"Not a syntax node: {node!r}")

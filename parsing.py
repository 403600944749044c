"""
IMP Programming Language Parser
pyparsing grammar turning one line of source text into a syntax tree
"""

from typing import Dict

from pyparsing import (
    Forward, Keyword, Literal, MatchFirst, Opt, ParseBaseException,
    ParseFatalException, ParserElement, Regex, StringEnd, Suppress,
    ZeroOrMore, infix_notation, one_of, OpAssoc, python_style_comment,
)

# Enable packrat parsing for performance
ParserElement.enable_packrat()

from syntax import (
    BinOp, Cmp, Stmt,
    Val, Var, BinaryOp, Neg,
    Bool, And, Or, Not, Compare,
    Skip, Assign, Seq, If, While,
    pretty_print_ast,
)
from utilities import INT64_MAX
from error_handling import ImpErrorHandler


KEYWORDS = [
    "skip", "if", "then", "else", "while", "do",
    "true", "false", "and", "or", "not",
]

BINOPS: Dict[str, BinOp] = {op.value: op for op in BinOp}

CMP_OPS: Dict[str, Cmp] = {
    "=": Cmp.EQ, "==": Cmp.EQ,
    "!=": Cmp.NEQ, "<>": Cmp.NEQ,
    "<=": Cmp.LE, "<": Cmp.LT,
    ">=": Cmp.GE, ">": Cmp.GT,
}


# ============================================================================
# PARSE ACTIONS
# ============================================================================

def make_val(s: str, loc: int, t) -> Val:
    value = int(t[0])
    if value > INT64_MAX:
        raise ParseFatalException(s, loc, f"Integer literal {t[0]} does not fit in 64 bits")
    return Val(value)


def make_prefix(node_type):
    """Parse action for a right-associative prefix operator level"""
    def action(t):
        items = t[0]
        node = items[-1]
        for _ in items[:-1]:
            node = node_type(node)
        return node
    return action


def make_arith_chain(t):
    """Fold 'a op b op c' to the left"""
    items = t[0]
    node = items[0]
    for i in range(1, len(items), 2):
        node = BinaryOp(BINOPS[items[i]], node, items[i + 1])
    return node


def make_bool_chain(node_type):
    def action(t):
        items = t[0]
        node = items[0]
        for i in range(2, len(items), 2):
            node = node_type(node, items[i])
        return node
    return action


def make_seq(t):
    """A lone statement stays as-is; two or more become a Seq"""
    if len(t) == 1:
        return t[0]
    return Seq(tuple(t))


# ============================================================================
# GRAMMAR
# ============================================================================

class ImpGrammar:
    """IMP grammar definition using pyparsing"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup arithmetic, boolean and statement rules"""

        reserved = MatchFirst([Keyword(k) for k in KEYWORDS])
        identifier = (~reserved + Regex(r"[A-Za-z_][A-Za-z0-9_]*")).set_name("identifier")

        # Arithmetic expressions
        integer = Regex(r"\d+").set_name("integer").set_parse_action(make_val)
        variable = identifier.copy().set_parse_action(lambda t: Var(t[0]))

        aexpr = infix_notation(
            integer | variable,
            [
                (Literal("-"), 1, OpAssoc.RIGHT, make_prefix(Neg)),
                (one_of("* /"), 2, OpAssoc.LEFT, make_arith_chain),
                (one_of("+ -"), 2, OpAssoc.LEFT, make_arith_chain),
            ],
        ).set_name("arithmetic expression")

        # Boolean expressions
        true_lit = Keyword("true").set_parse_action(lambda: Bool(True))
        false_lit = Keyword("false").set_parse_action(lambda: Bool(False))
        cmp_op = one_of(list(CMP_OPS))
        comparison = (aexpr + cmp_op + aexpr).set_parse_action(
            lambda t: Compare(CMP_OPS[t[1]], t[0], t[2])
        )

        bexpr = infix_notation(
            true_lit | false_lit | comparison,
            [
                (Keyword("not"), 1, OpAssoc.RIGHT, make_prefix(Not)),
                (Keyword("and"), 2, OpAssoc.LEFT, make_bool_chain(And)),
                (Keyword("or"), 2, OpAssoc.LEFT, make_bool_chain(Or)),
            ],
        ).set_name("boolean expression")

        # Statements
        stmt = Forward().set_name("statement")
        stmt_list = (
            stmt + ZeroOrMore(Suppress(";") + stmt) + Opt(Suppress(";"))
        ).set_parse_action(make_seq)

        skip_stmt = Keyword("skip").set_parse_action(lambda: Skip())
        assign_stmt = (identifier + Suppress(":=") + aexpr).set_parse_action(
            lambda t: Assign(t[0], t[1])
        )
        block = (Suppress("{") + Opt(stmt_list) + Suppress("}")).set_parse_action(
            lambda t: t[0] if t else Skip()
        )
        if_stmt = (
            Suppress(Keyword("if")) + bexpr +
            Suppress(Keyword("then")) + stmt +
            Suppress(Keyword("else")) + stmt
        ).set_parse_action(lambda t: If(t[0], t[1], t[2]))
        while_stmt = (
            Suppress(Keyword("while")) + bexpr + Suppress(Keyword("do")) + stmt
        ).set_parse_action(lambda t: While(t[0], t[1]))

        stmt <<= if_stmt | while_stmt | block | skip_stmt | assign_stmt

        program = stmt_list + StringEnd()
        program.ignore(python_style_comment)

        self.aexpr = aexpr
        self.bexpr = bexpr
        self.stmt = stmt
        self.program = program

    def parse_program(self, text: str, filename: str = "<input>") -> Stmt:
        """Parse a whole program, raising ImpSyntaxError on failure"""
        try:
            result = self.program.parse_string(text, parse_all=True)
        except ParseBaseException as e:
            raise ImpErrorHandler(text, filename).enhance_parse_exception(e) from e

        program = result[0]
        if self.debug:
            print("Parsed:")
            print(pretty_print_ast(program), end="")
        return program


class ImpParser:
    """Parser front end used by the driver loop"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.grammar = ImpGrammar(debug)

    def parse(self, text: str, filename: str = "<input>") -> Stmt:
        """Parse one program; raises ImpSyntaxError"""
        return self.grammar.parse_program(text, filename)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> ImpParser:
    """Create an IMP parser"""
    return ImpParser(debug=debug)


def create_debug_parser() -> ImpParser:
    """Create an IMP parser with debug enabled"""
    return ImpParser(debug=True)

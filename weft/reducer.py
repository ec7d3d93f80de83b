"""
Reduction of syntax trees to canonical algebraic form.

The Reducer is a syntax-tree visitor whose every handler returns a
Result. It folds integer literals and symbols into atoms, and applies
simplification rules as it folds each binary operator:

    +   int + int          -> Int
        int + rational     -> Rational (either order)
        otherwise          -> Sum(...).gather()
    *   sum * atom         -> distribute the atom over the sum
        otherwise          -> Product
    /   int / int          -> Rational (Int when whole)
        otherwise          -> Quotient
    -                      -> Difference (no folding)
    ^                      -> Power

Symbols stay symbolic: the Reducer never consults an Environment.
Syntax forms with no algebraic counterpart (floats, literals, vectors,
calls, relations, logic, assignment) reduce to a Failure naming the form.

    reduce(parse("a * (b + c)"))   # Success(Sum(Product(a, b), Product(a, c)))
"""

import logging
from fractions import Fraction

from .algebra import (
    Difference, Expression, Int, Power, Product, Quotient, Rational, Sum, Sym,
    number,
)
from .errors import InvalidOperatorError, algebra_error
from .result import Failure, Success
from .syntax import Expr, ExprVisitor
from .tokens import TokenKind

logger = logging.getLogger(__name__)

UNSUPPORTED_OPERATORS = {
    TokenKind.PERCENT: "percent",
    TokenKind.REM: "rem",
    TokenKind.MOD: "mod",
}


def _unsupported(form: str):
    return Failure(algebra_error(f"Cannot reduce {form}: not an algebraic form"))


class Reducer(ExprVisitor):
    """Folds a syntax tree into an algebraic Expression."""

    def reduce_node(self, node):
        """
        Reduce any parse result payload.

        Returns:
            Success(Expression) or Failure(Err)
        """
        if not isinstance(node, Expr):
            return _unsupported(f"a {type(node).__name__.lower()}")
        return node.accept(self)

    def visit_integer(self, node):
        return Success(Int(node.value))

    def visit_variable(self, node):
        return Success(Sym(node.name.lexeme))

    def visit_binary(self, node):
        # The right operand is only reduced once the left has succeeded.
        return node.left.accept(self).chain(
            lambda a: node.right.accept(self).chain(
                lambda b: self.combine(node.op, a, b)))

    def combine(self, op, a: Expression, b: Expression):
        kind = op.kind
        if kind is TokenKind.PLUS:
            return Success(self.add(a, b))
        if kind is TokenKind.STAR:
            return Success(self.multiply(a, b))
        if kind is TokenKind.SLASH:
            return self.divide(a, b, op.line)
        if kind is TokenKind.MINUS:
            return Success(Difference([a, b]))
        if kind is TokenKind.CARET:
            return Success(Power([a, b]))
        if kind in UNSUPPORTED_OPERATORS:
            return Failure(algebra_error(
                f"On line {op.line}, the operator “{op.lexeme}” "
                f"({UNSUPPORTED_OPERATORS[kind]}) has no algebraic reduction", op.line))
        raise InvalidOperatorError(f"Invalid operand: {op.lexeme}")

    def add(self, a: Expression, b: Expression) -> Expression:
        if isinstance(a, Int) and isinstance(b, Int):
            return Int(a.value + b.value)
        if isinstance(a, Int) and isinstance(b, Rational):
            return number(Fraction(a.value) + b.value)
        if isinstance(a, Rational) and isinstance(b, Int):
            return number(a.value + Fraction(b.value))
        return Sum([a, b]).gather()

    def multiply(self, a: Expression, b: Expression) -> Expression:
        if isinstance(a, Sum) and b.is_atom():
            return a.right_distribute(b)
        if a.is_atom() and isinstance(b, Sum):
            return b.left_distribute(a)
        return Product([a, b])

    def divide(self, a: Expression, b: Expression, line: int):
        if isinstance(a, Int) and isinstance(b, Int):
            if b.value == 0:
                return Failure(algebra_error(
                    f"On line {line}, while reducing: Division by zero", line))
            return Success(number(Fraction(a.value, b.value)))
        return Success(Quotient([a, b]))

    def visit_group(self, node):
        def tick(c: Expression) -> Expression:
            if not c.is_atom():
                c.tick_paren()
            return c
        return node.inner.accept(self).map(tick)

    def visit_float(self, node):
        return _unsupported("a float")

    def visit_literal(self, node):
        return _unsupported("a literal")

    def visit_vector(self, node):
        return _unsupported("a vector")

    def visit_matrix(self, node):
        return _unsupported("a matrix")

    def visit_fn_call(self, node):
        return _unsupported("a function call")

    def visit_native_call(self, node):
        return _unsupported(f"a native call ({node.name})")

    def visit_relation(self, node):
        return _unsupported("a relation")

    def visit_logical(self, node):
        return _unsupported("a logical expression")

    def visit_not(self, node):
        return _unsupported("a negation")

    def visit_assign(self, node):
        return _unsupported("an assignment")


def reduce(parse_result):
    """
    Reduce the payload of a parse result.

    Args:
        parse_result: Success(Expr) or Failure(Err), as returned by parse

    Returns:
        Success(Expression) or Failure(Err); a parse failure passes through
    """
    out = parse_result.chain(Reducer().reduce_node)
    if out:
        logger.debug("reduced to %s", out.value)
    else:
        logger.debug("reduction failed: %s", out.error)
    return out

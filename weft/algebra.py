"""
Algebraic expressions for WEFT.

The reducer folds a syntax tree into this canonical form. There are two
classes of node:

    atoms      Int, Rational, Sym
    compounds  Sum, Product, Difference, Quotient, Power, Factorial, FunCall

Generic algorithms walk any node without a type switch through
``operand_count()`` (Nothing for atoms, Some(arity) for compounds) and
``operand(i)``:

    node = Sum([Int(1), Sym("x")])
    node.operand_count()          # Some(2)
    node.operand(1)               # Some(Sym('x'))
    Int(3).operand_count()        # Nothing

Trees are immutable by convention: ``gather``, ``substitute`` and the
distribute methods return new nodes. The one exception is
``paren_level``, which ``tick_paren`` raises in place whenever the
source wrapped the node in a group. It only affects printing; equality
and hashing ignore it.
"""

from abc import ABC, abstractmethod
from fractions import Fraction
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import runtime_error
from .numerics import add, apply_native, as_float, divide, factorial, multiply, power, subtract
from .result import Failure, Nothing, Some, Success


class Expression(ABC):
    """Base class of algebraic expression nodes."""

    def __init__(self):
        self.paren_level = 0

    # ------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------

    @abstractmethod
    def accept(self, visitor: 'ExpressionVisitor') -> Any:
        ...

    def operand_count(self):
        """Nothing for atoms, Some(arity) for compounds."""
        return Nothing

    def operand(self, i: int):
        """Some(child) at index i, or Nothing."""
        return Nothing

    def operands(self) -> List['Expression']:
        return []

    def is_atom(self) -> bool:
        return True

    def for_each_child(self, fn: Callable[['Expression'], Any]):
        """Call fn on each immediate operand, left to right."""
        for child in self.operands():
            fn(child)

    def tick_paren(self) -> 'Expression':
        self.paren_level += 1
        return self

    @abstractmethod
    def copy(self) -> 'Expression':
        """A deep, independent copy keeping paren_level."""

    # ------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------

    @abstractmethod
    def key(self) -> Tuple:
        """Structural identity, ignoring paren_level."""

    def equals(self, other: 'Expression') -> bool:
        return isinstance(other, Expression) and self.key() == other.key()

    def __eq__(self, other):
        if not isinstance(other, Expression):
            return NotImplemented
        return self.equals(other)

    def __hash__(self):
        return hash(self.key())

    # ------------------------------------------------------------
    # Queries and rewriting
    # ------------------------------------------------------------

    def free_of(self, target: 'Expression') -> bool:
        """True if target occurs nowhere in this tree."""
        return all(not sub.equals(target) for sub in self.subexpressions())

    def substitute(self, target: 'Expression', replacement: 'Expression') -> 'Expression':
        """Replace every occurrence of target with a copy of replacement."""
        if self.equals(target):
            return replacement.copy()
        return self.copy()

    def subexpressions(self) -> Iterator['Expression']:
        """This node followed by all its descendants, in pre-order."""
        yield self
        for child in self.operands():
            yield from child.subexpressions()

    def __str__(self) -> str:
        return format_expression(self)


# ============================================================
# Atoms
# ============================================================

class Int(Expression):
    def __init__(self, value: int):
        super().__init__()
        self.value = value

    def accept(self, visitor):
        return visitor.visit_int(self)

    def copy(self) -> 'Int':
        out = Int(self.value)
        out.paren_level = self.paren_level
        return out

    def key(self) -> Tuple:
        return ("int", self.value)

    def __repr__(self) -> str:
        return f"Int({self.value})"


class Rational(Expression):
    """A fraction kept in lowest terms."""

    def __init__(self, value: Union[Fraction, Tuple[int, int]]):
        super().__init__()
        if isinstance(value, tuple):
            value = Fraction(*value)
        self.value = Fraction(value)

    @property
    def numerator(self) -> int:
        return self.value.numerator

    @property
    def denominator(self) -> int:
        return self.value.denominator

    def accept(self, visitor):
        return visitor.visit_rational(self)

    def copy(self) -> 'Rational':
        out = Rational(self.value)
        out.paren_level = self.paren_level
        return out

    def key(self) -> Tuple:
        return ("rational", self.value)

    def __repr__(self) -> str:
        return f"Rational({self.value})"


class Sym(Expression):
    def __init__(self, name: str):
        super().__init__()
        self.name = name

    def accept(self, visitor):
        return visitor.visit_sym(self)

    def copy(self) -> 'Sym':
        out = Sym(self.name)
        out.paren_level = self.paren_level
        return out

    def key(self) -> Tuple:
        return ("sym", self.name)

    def __repr__(self) -> str:
        return f"Sym({self.name!r})"


def number(value: Union[int, Fraction]) -> Expression:
    """Int for whole values, Rational otherwise."""
    value = Fraction(value)
    if value.denominator == 1:
        return Int(value.numerator)
    return Rational(value)


def is_number(node: Expression) -> bool:
    return isinstance(node, (Int, Rational))


def numeric_value(node: Expression) -> Fraction:
    return Fraction(node.value)


# ============================================================
# Compounds
# ============================================================

class Compound(Expression):
    """A node with an ordered list of operands."""

    op = "?"
    arity: Optional[int] = None

    def __init__(self, args: Sequence[Expression]):
        super().__init__()
        args = list(args)
        if self.arity is not None and len(args) != self.arity:
            raise ValueError(
                f"{type(self).__name__} takes {self.arity} operands, got {len(args)}")
        self.args = args

    def rebuild(self, args: Sequence[Expression]) -> 'Compound':
        """A node of the same kind over new operands."""
        return type(self)(args)

    def operand_count(self):
        return Some(len(self.args))

    def operand(self, i: int):
        if 0 <= i < len(self.args):
            return Some(self.args[i])
        return Nothing

    def operands(self) -> List[Expression]:
        return list(self.args)

    def is_atom(self) -> bool:
        return False

    def copy(self) -> 'Compound':
        out = self.rebuild([a.copy() for a in self.args])
        out.paren_level = self.paren_level
        return out

    def key(self) -> Tuple:
        return (self.op,) + tuple(a.key() for a in self.args)

    def substitute(self, target: Expression, replacement: Expression) -> Expression:
        if self.equals(target):
            return replacement.copy()
        out = self.rebuild([a.substitute(target, replacement) for a in self.args])
        out.paren_level = self.paren_level
        return out

    def __repr__(self) -> str:
        inner = ", ".join(repr(a) for a in self.args)
        return f"{type(self).__name__}({inner})"


class Sum(Compound):
    op = "+"

    @property
    def terms(self) -> List[Expression]:
        return self.args

    def accept(self, visitor):
        return visitor.visit_sum(self)

    def gather(self) -> Expression:
        """
        Canonicalize this sum.

        Nested sums are flattened. Integer and rational terms fold into a
        single constant placed where the first constant appeared (and
        dropped when zero, unless nothing else remains). Terms with the same
        base merge by adding coefficients, where a product with a leading
        number counts that number as the coefficient:

            x + 2 + x + 3     ->  2*x + 5
            2*x + y + 3*x     ->  5*x + y
            x + 1 + (-1)*x    ->  1

        Returns the single remaining term instead of a one-term sum.
        """
        flat: List[Expression] = []
        _flatten_into(self, flat)

        constant = Fraction(0)
        constant_at: Optional[int] = None
        # base key -> [coefficient, base, first term, member count]
        groups: Dict[Tuple, List[Any]] = {}
        order: List[Tuple] = []
        for term in flat:
            if is_number(term):
                constant += numeric_value(term)
                if constant_at is None:
                    constant_at = len(order)
                continue
            coefficient, base = _split_coefficient(term)
            k = base.key()
            if k in groups:
                groups[k][0] += coefficient
                groups[k][3] += 1
            else:
                groups[k] = [coefficient, base, term, 1]
                order.append(k)

        out: List[Expression] = []
        for i, k in enumerate(order):
            if constant_at == i and constant != 0:
                out.append(number(constant))
            coefficient, base, first, count = groups[k]
            if count == 1:
                out.append(first)
            elif coefficient == 0:
                continue
            elif coefficient == 1:
                out.append(base)
            else:
                out.append(Product([number(coefficient), base]))
        if constant_at == len(order) and constant != 0:
            out.append(number(constant))

        if not out:
            return number(constant)
        if len(out) == 1:
            return out[0]
        return Sum(out)

    def left_distribute(self, factor: Expression) -> Expression:
        """``factor * (a + b)`` as ``factor*a + factor*b``."""
        return Sum([Product([factor.copy(), t]) for t in self.terms]).gather()

    def right_distribute(self, factor: Expression) -> Expression:
        """``(a + b) * factor`` as ``a*factor + b*factor``."""
        return Sum([Product([t, factor.copy()]) for t in self.terms]).gather()


def _flatten_into(node: Expression, out: List[Expression]):
    for term in node.operands():
        if isinstance(term, Sum):
            _flatten_into(term, out)
        else:
            out.append(term)


def _split_coefficient(term: Expression) -> Tuple[Fraction, Expression]:
    """(coefficient, base) of a sum term."""
    if isinstance(term, Product) and len(term.factors) >= 2 and is_number(term.factors[0]):
        rest = term.factors[1:]
        base = rest[0] if len(rest) == 1 else Product(rest)
        if not is_number(base):
            return numeric_value(term.factors[0]), base
    return Fraction(1), term


class Product(Compound):
    op = "*"

    @property
    def factors(self) -> List[Expression]:
        return self.args

    def accept(self, visitor):
        return visitor.visit_product(self)


class Difference(Compound):
    op = "-"
    arity = 2

    @property
    def minuend(self) -> Expression:
        return self.args[0]

    @property
    def subtrahend(self) -> Expression:
        return self.args[1]

    def accept(self, visitor):
        return visitor.visit_difference(self)


class Quotient(Compound):
    op = "/"
    arity = 2

    @property
    def dividend(self) -> Expression:
        return self.args[0]

    @property
    def divisor(self) -> Expression:
        return self.args[1]

    def accept(self, visitor):
        return visitor.visit_quotient(self)


class Power(Compound):
    op = "^"
    arity = 2

    @property
    def base(self) -> Expression:
        return self.args[0]

    @property
    def exponent(self) -> Expression:
        return self.args[1]

    def accept(self, visitor):
        return visitor.visit_power(self)


class Factorial(Compound):
    op = "!"
    arity = 1

    @property
    def arg(self) -> Expression:
        return self.args[0]

    def accept(self, visitor):
        return visitor.visit_factorial(self)


class FunCall(Compound):
    """A named function applied to arguments: ``f(x, y)``."""

    op = "fun"

    def __init__(self, name: str, args: Sequence[Expression]):
        super().__init__(args)
        self.name = name

    def rebuild(self, args: Sequence[Expression]) -> 'FunCall':
        return FunCall(self.name, args)

    def key(self) -> Tuple:
        return (self.op, self.name) + tuple(a.key() for a in self.args)

    def accept(self, visitor):
        return visitor.visit_fun_call(self)

    def __repr__(self) -> str:
        inner = ", ".join(repr(a) for a in self.args)
        return f"FunCall({self.name!r}, [{inner}])"


class ExpressionVisitor(ABC):
    """One handler per algebraic node kind."""

    @abstractmethod
    def visit_int(self, node: Int): ...

    @abstractmethod
    def visit_rational(self, node: Rational): ...

    @abstractmethod
    def visit_sym(self, node: Sym): ...

    @abstractmethod
    def visit_sum(self, node: Sum): ...

    @abstractmethod
    def visit_product(self, node: Product): ...

    @abstractmethod
    def visit_difference(self, node: Difference): ...

    @abstractmethod
    def visit_quotient(self, node: Quotient): ...

    @abstractmethod
    def visit_power(self, node: Power): ...

    @abstractmethod
    def visit_factorial(self, node: Factorial): ...

    @abstractmethod
    def visit_fun_call(self, node: FunCall): ...


# ============================================================
# Printing
# ============================================================

def _precedence(node: Expression) -> int:
    if isinstance(node, (Int, Rational)) and node.value < 0:
        return 0
    if isinstance(node, (Sum, Difference)):
        return 1
    if isinstance(node, (Product, Quotient, Rational)):
        return 2
    if isinstance(node, Power):
        return 3
    if isinstance(node, Factorial):
        return 4
    return 5


class _Printer(ExpressionVisitor):

    def show(self, node: Expression) -> str:
        text = node.accept(self)
        return "(" * node.paren_level + text + ")" * node.paren_level

    def child(self, parent: Expression, index: int, child: Expression) -> str:
        text = self.show(child)
        if child.paren_level:
            return text
        p, q = _precedence(parent), _precedence(child)
        if isinstance(parent, Power):
            # right-associative
            wrap = q <= p if index == 0 else q < p
        else:
            wrap = q < p if index == 0 else q <= p
        return f"({text})" if wrap else text

    def infix(self, node: Compound, sep: str) -> str:
        return sep.join(self.child(node, i, a) for i, a in enumerate(node.args))

    def visit_int(self, node):
        return str(node.value)

    def visit_rational(self, node):
        return f"{node.numerator}/{node.denominator}"

    def visit_sym(self, node):
        return node.name

    def visit_sum(self, node):
        return self.infix(node, "+")

    def visit_product(self, node):
        return self.infix(node, "*")

    def visit_difference(self, node):
        return self.infix(node, "-")

    def visit_quotient(self, node):
        return self.infix(node, "/")

    def visit_power(self, node):
        return self.infix(node, "^")

    def visit_factorial(self, node):
        return self.child(node, 0, node.arg) + "!"

    def visit_fun_call(self, node):
        return node.name + "(" + ",".join(self.show(a) for a in node.args) + ")"


def format_expression(expression: Expression) -> str:
    """
    Re-serialize an expression to infix text.

    Recorded groupings are printed as they were written; otherwise
    parentheses appear only where precedence needs them, so the text
    parses back to the same structure.

    Examples:
        Sum([Sym("a"), Product([Int(2), Sym("b")])])   -> a+2*b
        Product([Int(2), Sum([Sym("a"), Sym("b")])])   -> 2*(a+b)
        Power([Power([Sym("a"), Int(2)]), Int(3)])     -> (a^2)^3
    """
    return _Printer().show(expression)


# ============================================================
# Numeric evaluation
# ============================================================

class _Unbound(Exception):
    pass


class _Evaluator(ExpressionVisitor):

    def __init__(self, bindings: Dict[str, Any]):
        self.bindings = bindings

    def visit_int(self, node):
        return node.value

    def visit_rational(self, node):
        return as_float(node.value)

    def visit_sym(self, node):
        if node.name not in self.bindings:
            raise _Unbound(f"Unbound symbol “{node.name}”")
        return self.bindings[node.name]

    def visit_sum(self, node):
        total = 0
        for t in node.terms:
            total = add(total, t.accept(self))
        return total

    def visit_product(self, node):
        total = 1
        for f in node.factors:
            total = multiply(total, f.accept(self))
        return total

    def visit_difference(self, node):
        return subtract(node.minuend.accept(self), node.subtrahend.accept(self))

    def visit_quotient(self, node):
        return divide(node.dividend.accept(self), node.divisor.accept(self))

    def visit_power(self, node):
        return power(node.base.accept(self), node.exponent.accept(self))

    def visit_factorial(self, node):
        return factorial(node.arg.accept(self))

    def visit_fun_call(self, node):
        args = [a.accept(self) for a in node.args]
        out = apply_native(node.name, args)
        if out is None:
            raise _Unbound(f"Cannot evaluate the function “{node.name}” with {len(args)} argument(s)")
        return out


def evaluate(expression: Expression, bindings: Optional[Dict[str, Any]] = None):
    """
    Numerically evaluate an expression.

    Args:
        expression: The tree to evaluate
        bindings: Values for the symbols it contains

    Returns:
        Success(float) or a runtime Failure naming the unbound symbol
    """
    try:
        value = expression.accept(_Evaluator(bindings or {}))
    except _Unbound as e:
        return Failure(runtime_error(str(e)))
    return Success(as_float(value))

"""Tests for the algebraic expression model."""

from fractions import Fraction

import pytest

from weft.algebra import (
    Difference, Expression, ExpressionVisitor, Factorial, FunCall, Int, Power,
    Product, Quotient, Rational, Sum, Sym, evaluate, format_expression, number,
)
from weft.errors import RUNTIME
from weft.result import Nothing, Some


class TestAtoms:
    """Tests for Int, Rational and Sym."""

    def test_rational_lowest_terms(self):
        """Rationals are normalized."""
        r = Rational((6, 4))
        assert (r.numerator, r.denominator) == (3, 2)
        assert r == Rational(Fraction(3, 2))

    def test_number(self):
        """number() picks Int for whole values."""
        assert number(Fraction(4, 2)) == Int(2)
        assert number(Fraction(1, 3)) == Rational((1, 3))
        assert isinstance(number(5), Int)

    def test_atoms_have_no_operands(self):
        """Atoms report Nothing for their operand count."""
        assert Int(3).operand_count() is Nothing
        assert Sym("x").operand(0) is Nothing
        assert Sym("x").is_atom()

    def test_kinds_differ(self):
        """Atoms of different kinds never compare equal."""
        assert Int(1) != Sym("1")


class TestCompounds:
    """Tests for the generic compound protocol."""

    def test_operand_access(self):
        """operand_count and operand return Options."""
        node = Sum([Int(1), Sym("x")])
        assert node.operand_count() == Some(2)
        assert node.operand(1) == Some(Sym("x"))
        assert node.operand(2) is Nothing

    def test_fixed_arity(self):
        """Binary and unary nodes check their operand count."""
        with pytest.raises(ValueError):
            Difference([Int(1)])
        with pytest.raises(ValueError):
            Factorial([Int(1), Int(2)])

    def test_named_accessors(self):
        """Compounds expose their operands by role."""
        q = Quotient([Sym("a"), Sym("b")])
        assert (q.dividend, q.divisor) == (Sym("a"), Sym("b"))
        p = Power([Sym("a"), Int(2)])
        assert (p.base, p.exponent) == (Sym("a"), Int(2))
        d = Difference([Sym("a"), Sym("b")])
        assert (d.minuend, d.subtrahend) == (Sym("a"), Sym("b"))

    def test_for_each_child_is_shallow(self):
        """for_each_child visits immediate operands only."""
        seen = []
        Sum([Product([Sym("a"), Sym("b")]), Sym("c")]).for_each_child(seen.append)
        assert seen == [Product([Sym("a"), Sym("b")]), Sym("c")]

    def test_subexpressions_pre_order(self):
        """subexpressions yields the node then its descendants."""
        node = Sum([Product([Sym("a"), Sym("b")]), Sym("c")])
        assert [format_expression(s) for s in node.subexpressions()] == [
            "a*b+c", "a*b", "a", "b", "c",
        ]


class TestEquality:
    """Tests for structural equality."""

    def test_structural(self):
        """Equal shapes compare equal."""
        assert Sum([Sym("a"), Int(1)]) == Sum([Sym("a"), Int(1)])
        assert Sum([Sym("a"), Int(1)]) != Product([Sym("a"), Int(1)])

    def test_ignores_paren_level(self):
        """paren_level has no effect on equality or hashing."""
        plain = Sum([Sym("a"), Sym("b")])
        grouped = Sum([Sym("a"), Sym("b")]).tick_paren()
        assert grouped.paren_level == 1
        assert plain == grouped
        assert plain.equals(grouped)
        assert hash(plain) == hash(grouped)

    def test_fun_call_name_matters(self):
        """Function calls compare by name too."""
        assert FunCall("sin", [Sym("x")]) != FunCall("cos", [Sym("x")])

    def test_not_equal_to_other_types(self):
        """Expressions never equal plain values."""
        assert Int(1) != 1


class TestCopyAndRewrite:
    """Tests for copy, substitute and free_of."""

    def test_copy_is_deep(self):
        """A copy shares no nodes with the original."""
        original = Sum([Product([Sym("a"), Sym("b")]), Sym("c")]).tick_paren()
        duplicate = original.copy()
        assert duplicate == original
        assert duplicate is not original
        assert duplicate.args[0] is not original.args[0]
        assert duplicate.paren_level == 1

    def test_copy_independent_parens(self):
        """Ticking a copy leaves the original alone."""
        original = Product([Sym("a"), Sym("b")])
        original.copy().tick_paren()
        assert original.paren_level == 0

    def test_substitute(self):
        """Every occurrence of the target is replaced."""
        node = Sum([Sym("x"), Product([Int(2), Sym("x")])])
        out = node.substitute(Sym("x"), Int(3))
        assert out == Sum([Int(3), Product([Int(2), Int(3)])])
        assert node == Sum([Sym("x"), Product([Int(2), Sym("x")])])

    def test_free_of(self):
        """free_of looks through the whole tree."""
        node = Power([Sum([Sym("a"), Int(1)]), Int(2)])
        assert not node.free_of(Sym("a"))
        assert node.free_of(Sym("b"))


class TestGather:
    """Tests for Sum.gather()."""

    def test_flattens(self):
        """Nested sums are flattened."""
        node = Sum([Sym("a"), Sum([Sym("b"), Sum([Sym("c")])])]).gather()
        assert node == Sum([Sym("a"), Sym("b"), Sym("c")])

    def test_folds_constants(self):
        """Numbers fold into one constant at the first constant's position."""
        node = Sum([Sym("x"), Int(2), Sym("y"), Rational((1, 2))]).gather()
        assert node == Sum([Sym("x"), Rational((5, 2)), Sym("y")])

    def test_merges_like_terms(self):
        """Like terms merge by adding coefficients."""
        assert Sum([Sym("x"), Sym("x")]).gather() == Product([Int(2), Sym("x")])
        node = Sum([Product([Int(2), Sym("x")]), Sym("y"), Product([Int(3), Sym("x")])]).gather()
        assert node == Sum([Product([Int(5), Sym("x")]), Sym("y")])

    def test_cancellation(self):
        """Terms whose coefficients cancel disappear."""
        node = Sum([Sym("x"), Int(1), Product([Int(-1), Sym("x")])]).gather()
        assert node == Int(1)

    def test_zero_constant_dropped(self):
        """A zero constant is omitted unless it is all that remains."""
        assert Sum([Sym("x"), Int(0)]).gather() == Sym("x")
        assert Sum([Int(0), Int(0)]).gather() == Int(0)

    def test_distribute(self):
        """left_distribute and right_distribute give sums of products."""
        s = Sum([Sym("b"), Sym("c")])
        assert s.left_distribute(Sym("a")) == Sum([
            Product([Sym("a"), Sym("b")]), Product([Sym("a"), Sym("c")])])
        assert s.right_distribute(Sym("a")) == Sum([
            Product([Sym("b"), Sym("a")]), Product([Sym("c"), Sym("a")])])


class TestFormat:
    """Tests for format_expression()."""

    @pytest.mark.parametrize("node,text", [
        (Sum([Sym("a"), Product([Int(2), Sym("b")])]), "a+2*b"),
        (Product([Int(2), Sum([Sym("a"), Sym("b")])]), "2*(a+b)"),
        (Power([Power([Sym("a"), Int(2)]), Int(3)]), "(a^2)^3"),
        (Power([Sym("a"), Power([Int(2), Int(3)])]), "a^2^3"),
        (Difference([Sym("a"), Difference([Sym("b"), Sym("c")])]), "a-(b-c)"),
        (Difference([Difference([Sym("a"), Sym("b")]), Sym("c")]), "a-b-c"),
        (Quotient([Sym("a"), Product([Sym("b"), Sym("c")])]), "a/(b*c)"),
        (Rational((3, 2)), "3/2"),
        (Product([Sym("x"), Rational((1, 2))]), "x*(1/2)"),
        (Factorial([Sum([Sym("n"), Int(1)])]), "(n+1)!"),
        (FunCall("sin", [Sum([Sym("x"), Int(1)])]), "sin(x+1)"),
    ])
    def test_minimal_parens(self, node, text):
        """Parentheses appear only where precedence needs them."""
        assert format_expression(node) == text

    def test_recorded_parens(self):
        """paren_level pairs are printed as written."""
        node = Sum([Sym("a"), Sym("b")]).tick_paren().tick_paren()
        assert format_expression(node) == "((a+b))"
        assert str(node) == "((a+b))"


class TestEvaluate:
    """Tests for numeric evaluation."""

    def test_evaluate(self):
        """Symbols take their values from the bindings."""
        node = Sum([Power([Sym("x"), Int(2)]), Quotient([Int(1), Int(2)])])
        assert evaluate(node, {"x": 3}).unwrap() == 9.5

    def test_unbound_symbol(self):
        """An unbound symbol is a runtime failure."""
        result = evaluate(Sym("y"))
        assert not result
        assert result.error.kind == RUNTIME
        assert "“y”" in result.error.message

    def test_functions(self):
        """Function calls and factorials evaluate natively."""
        assert evaluate(FunCall("sqrt", [Int(16)])).unwrap() == 4.0
        assert evaluate(Factorial([Int(5)])).unwrap() == 120.0

    def test_huge_values(self):
        """Values too large for a float evaluate to infinity."""
        huge = Power([Int(10), Int(400)])
        assert evaluate(Product([Sym("x"), huge]), {"x": 0.5}).unwrap() == float("inf")
        assert evaluate(Difference([Sym("x"), huge]), {"x": 0.5}).unwrap() == float("-inf")
        assert evaluate(Sum([huge, Sym("x")]), {"x": 0.5}).unwrap() == float("inf")
        assert evaluate(Rational(Fraction(10 ** 400, 3))).unwrap() == float("inf")


class TestVisitor:
    """Tests for the visitor contract."""

    def test_incomplete_visitor_rejected(self):
        """A visitor missing a handler cannot be instantiated."""
        class Partial(ExpressionVisitor):
            def visit_int(self, node):
                return node.value

        with pytest.raises(TypeError):
            Partial()

    def test_counting_visitor(self):
        """A complete visitor sees every node kind."""
        class Counter(ExpressionVisitor):
            def leaf(self, node):
                return 1

            def branch(self, node):
                return 1 + sum(a.accept(self) for a in node.args)

            visit_int = visit_rational = visit_sym = leaf
            visit_sum = visit_product = visit_difference = branch
            visit_quotient = visit_power = visit_factorial = visit_fun_call = branch

        node = Sum([Product([Int(2), Sym("x")]), Rational((1, 2))])
        assert node.accept(Counter()) == 5
        assert isinstance(node, Expression)

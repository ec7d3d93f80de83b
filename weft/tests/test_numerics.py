"""Tests for the shared numeric primitives."""

import math

from weft.numerics import (
    NATIVES, add, apply_native, as_float, divide, factorial, modulo, multiply,
    percent, power, remainder, subtract,
)


class TestArithmetic:
    """Tests for the IEEE-style operators."""

    def test_divide_by_zero(self):
        """Division by zero gives signed infinity or nan."""
        assert divide(1, 0) == math.inf
        assert divide(-1, 0) == -math.inf
        assert math.isnan(divide(0, 0))

    def test_divide(self):
        """Ordinary division is true division."""
        assert divide(7, 2) == 3.5

    def test_power(self):
        """Integer powers stay exact, others go through floats."""
        assert power(2, 10) == 1024
        assert isinstance(power(2, 10), int)
        assert power(4, 0.5) == 2.0
        assert power(0, -1) == math.inf
        assert math.isnan(power(-8, 1 / 3))

    def test_power_overflow(self):
        """Results too large for a float are infinite."""
        assert power(10.0, 400) == math.inf

    def test_rem_and_mod(self):
        """rem takes the dividend's sign, mod the divisor's."""
        assert remainder(-7, 3) == -1.0
        assert modulo(-7, 3) == 2
        assert math.isnan(remainder(1, 0))
        assert math.isnan(modulo(1, 0))

    def test_percent(self):
        """a % b is a as a percentage of b."""
        assert percent(1, 4) == 25.0


class TestHugeIntegers:
    """Tests for whole numbers too large for a float."""

    def test_as_float(self):
        """Huge integers convert to a signed infinity."""
        assert as_float(10 ** 400) == math.inf
        assert as_float(-10 ** 400) == -math.inf
        assert as_float(3) == 3.0

    def test_divide(self):
        """Dividing a huge integer overflows to infinity."""
        assert divide(10 ** 400, 3) == math.inf
        assert divide(-10 ** 400, 3) == -math.inf
        assert divide(10 ** 400, 0) == math.inf
        assert divide(1.0, 10 ** 400) == 0.0
        assert divide(10 ** 400, 10 ** 399) == 10.0

    def test_mixed_with_floats(self):
        """Mixing a huge integer with a float follows IEEE infinities."""
        assert multiply(2.0, 10 ** 400) == math.inf
        assert multiply(-2.0, 10 ** 400) == -math.inf
        assert add(10 ** 400, 0.5) == math.inf
        assert subtract(0.5, 10 ** 400) == -math.inf
        assert math.isnan(multiply(0.0, 10 ** 400))

    def test_integers_stay_exact(self):
        """Integer arithmetic never leaves the integers."""
        assert multiply(10 ** 400, 2) == 2 * 10 ** 400
        assert add(10 ** 400, 1) - 10 ** 400 == 1

    def test_rem_and_mod(self):
        """rem and mod of a huge integer by a float give nan."""
        assert math.isnan(remainder(10 ** 400, 3.0))
        assert math.isnan(modulo(10 ** 400, 3.0))


class TestFactorial:
    """Tests for factorial()."""

    def test_whole(self):
        """Whole numbers use the exact factorial."""
        assert factorial(5) == 120
        assert factorial(0) == 1
        assert factorial(4.0) == 24

    def test_limits(self):
        """Negative whole numbers give nan, huge ones infinity."""
        assert math.isnan(factorial(-1))
        assert factorial(171) == math.inf

    def test_gamma(self):
        """Fractional arguments use Gamma(x + 1)."""
        assert math.isclose(factorial(0.5), math.gamma(1.5))


class TestNatives:
    """Tests for the native function table."""

    def test_table(self):
        """Every native function is present."""
        assert set(NATIVES) == {
            "+", "-", "!", "sin", "cos", "tan", "log", "ln", "sqrt", "exp", "abs",
        }

    def test_apply(self):
        """Natives apply to a single argument."""
        assert apply_native("sqrt", [16]) == 4.0
        assert apply_native("abs", [-3]) == 3
        assert apply_native("-", [2]) == -2
        assert apply_native("log", [1000]) == 3.0

    def test_domain_errors(self):
        """Math domain errors give nan, log of zero gives -inf."""
        assert math.isnan(apply_native("sqrt", [-1]))
        assert apply_native("ln", [0]) == -math.inf
        assert math.isnan(apply_native("ln", [-1]))

    def test_wrong_arity_or_unknown(self):
        """None signals a call that cannot apply."""
        assert apply_native("sqrt", [1, 2]) is None
        assert apply_native("nope", [1]) is None

    def test_overflow(self):
        """exp of a large number is infinite."""
        assert apply_native("exp", [1000]) == math.inf

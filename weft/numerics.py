"""
Numeric primitives shared by the interpreter and the algebraic evaluator.

Arithmetic follows IEEE floats rather than raising: dividing by zero gives
a signed infinity (or nan for 0/0), results too large for a float give
infinity, and math domain errors (sqrt(-1), a negative base raised to a
fractional power) give nan.

Native functions live in a fold-function table keyed by name. A handler
takes the list of evaluated arguments and returns None when it cannot
apply (wrong arity):

    NATIVES["sqrt"]([16])     -> 4.0
    NATIVES["sqrt"]([1, 2])   -> None
"""

import math
import operator
from typing import Callable, Dict, List, Optional, Union

NumericType = Union[int, float]
NativeHandler = Callable[[List[NumericType]], Optional[NumericType]]

# Largest n whose factorial still fits in a float
MAX_FACTORIAL = 170

# Integer powers beyond this exponent are computed in floating point
MAX_EXACT_EXPONENT = 1024


def as_float(x: NumericType) -> float:
    """Convert to float; integers too large for a float become a signed infinity."""
    try:
        return float(x)
    except OverflowError:
        return math.inf if x > 0 else -math.inf


def _mixed(op: Callable[[NumericType, NumericType], NumericType],
           a: NumericType, b: NumericType) -> NumericType:
    # int op float converts the int, which overflows for huge ints
    try:
        return op(a, b)
    except OverflowError:
        return op(as_float(a), as_float(b))


def add(a: NumericType, b: NumericType) -> NumericType:
    return _mixed(operator.add, a, b)


def subtract(a: NumericType, b: NumericType) -> NumericType:
    return _mixed(operator.sub, a, b)


def multiply(a: NumericType, b: NumericType) -> NumericType:
    return _mixed(operator.mul, a, b)


def divide(a: NumericType, b: NumericType) -> NumericType:
    if b == 0:
        a = as_float(a)
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    try:
        return a / b
    except OverflowError:
        if isinstance(a, int) and isinstance(b, int):
            return math.inf if (a > 0) == (b > 0) else -math.inf
        return as_float(a) / as_float(b)


def power(a: NumericType, b: NumericType) -> NumericType:
    if isinstance(a, int) and isinstance(b, int) and 0 <= b <= MAX_EXACT_EXPONENT:
        return a ** b
    if a == 0 and b < 0:
        return math.inf
    try:
        return math.pow(a, b)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def remainder(a: NumericType, b: NumericType) -> NumericType:
    """Remainder with the sign of the dividend (``rem``)."""
    if b == 0:
        return math.nan
    try:
        return _mixed(math.fmod, a, b)
    except ValueError:
        return math.nan


def modulo(a: NumericType, b: NumericType) -> NumericType:
    """Remainder with the sign of the divisor (``mod``)."""
    if b == 0:
        return math.nan
    return _mixed(lambda x, y: ((x % y) + y) % y, a, b)


def percent(a: NumericType, b: NumericType) -> NumericType:
    """``a % b``: a as a percentage of b."""
    return divide(100 * a, b)


def factorial(x: NumericType) -> NumericType:
    """n! for whole n, Gamma(x + 1) otherwise."""
    if isinstance(x, int) or (isinstance(x, float) and x.is_integer()):
        n = int(x)
        if n < 0:
            return math.nan
        if n > MAX_FACTORIAL:
            return math.inf
        return math.factorial(n)
    try:
        return math.gamma(x + 1)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan


def _log(f: Callable[[float], float]) -> Callable[[float], float]:
    def handler(x):
        if x == 0:
            return -math.inf
        return f(x)
    return handler


def unary_only(f: Callable[[NumericType], NumericType]) -> NativeHandler:
    """Create a unary-only handler that maps domain errors to nan."""
    def handler(args: List[NumericType]) -> Optional[NumericType]:
        if len(args) != 1:
            return None
        try:
            return f(args[0])
        except OverflowError:
            return math.inf
        except ValueError:
            return math.nan
    return handler


NATIVES: Dict[str, NativeHandler] = {
    "+": unary_only(lambda x: +x),
    "-": unary_only(lambda x: -x),
    "!": unary_only(factorial),
    "sin": unary_only(math.sin),
    "cos": unary_only(math.cos),
    "tan": unary_only(math.tan),
    "log": unary_only(_log(math.log10)),
    "ln": unary_only(_log(math.log)),
    "sqrt": unary_only(math.sqrt),
    "exp": unary_only(math.exp),
    "abs": unary_only(abs),
}


def apply_native(name: str, args: List[NumericType]) -> Optional[NumericType]:
    """Apply a native function; None when unknown or called with the wrong arity."""
    handler = NATIVES.get(name)
    if handler is None:
        return None
    return handler(args)

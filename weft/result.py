"""
Option and Result containers for WEFT.

Expected failures (malformed source, unsupported reductions, unbound
names) travel as values instead of exceptions. Every stage of the
pipeline returns a Result, and callers compose stages with ``map`` and
``chain``:

    parsed = parse("a * (b + c)")          # Success(Binary(...))
    reduced = parsed.chain(reducer.reduce_node)
    if reduced:
        print(reduced.unwrap())

Success values are truthy and failures falsy, so results read naturally
in conditionals. Option works the same way with ``Some`` and the falsy
``Nothing`` singleton.
"""

from typing import Any, Callable, Generic, Iterable, List, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class UnwrapError(ValueError):
    """Raised when unwrapping an absent Option or a failed Result."""

    def __init__(self, message: str, error: Any = None):
        super().__init__(message)
        self.error = error


# ============================================================
# Option
# ============================================================

class Some(Generic[T]):
    """A present Option value."""

    __slots__ = ('value',)

    def __init__(self, value: T):
        self.value = value

    def __bool__(self) -> bool:
        return True

    def is_some(self) -> bool:
        return True

    def is_none(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> 'Some[U]':
        """Transform the contained value."""
        return Some(fn(self.value))

    def chain(self, fn: Callable[[T], Any]) -> Any:
        """Sequence a computation that itself returns an Option."""
        return fn(self.value)

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def __eq__(self, other):
        if isinstance(other, Some):
            return self.value == other.value
        return False

    def __hash__(self):
        return hash(("Some", self.value))

    def __repr__(self) -> str:
        return f"Some({self.value!r})"


class _Nothing:
    """
    Singleton representing an absent Option value.

    Nothing is falsy, so an Option can be tested directly:

        if count := node.operand_count():
            ...
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def is_some(self) -> bool:
        return False

    def is_none(self) -> bool:
        return True

    def map(self, fn: Callable) -> '_Nothing':
        return self

    def chain(self, fn: Callable) -> '_Nothing':
        return self

    def unwrap(self):
        raise UnwrapError("Called unwrap on Nothing")

    def unwrap_or(self, default: Any) -> Any:
        return default

    def __repr__(self) -> str:
        return "Nothing"


Nothing = _Nothing()


def some(value: T) -> Some[T]:
    """Wrap a value as a present Option."""
    return Some(value)


# ============================================================
# Result
# ============================================================

class Success(Generic[T]):
    """The success ("right") variant of a Result."""

    __slots__ = ('value',)

    def __init__(self, value: T):
        self.value = value

    def __bool__(self) -> bool:
        return True

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> 'Success[U]':
        """Transform the success value."""
        return Success(fn(self.value))

    def chain(self, fn: Callable[[T], Any]) -> Any:
        """
        Sequence a dependent computation that returns a Result.

        Example:
            parse(src).chain(reducer.reduce_node)
        """
        return fn(self.value)

    flat_map = chain

    def map_error(self, fn: Callable) -> 'Success[T]':
        return self

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def __eq__(self, other):
        if isinstance(other, Success):
            return self.value == other.value
        return False

    def __hash__(self):
        return hash(("Success", self.value))

    def __repr__(self) -> str:
        return f"Success({self.value!r})"


class Failure(Generic[E]):
    """
    The failure ("left") variant of a Result.

    ``map`` and ``chain`` on a Failure never call their callback and
    return the very same Failure object, so the error payload survives
    any number of composition steps untouched.
    """

    __slots__ = ('value',)

    def __init__(self, error: E):
        self.value = error

    @property
    def error(self) -> E:
        return self.value

    def __bool__(self) -> bool:
        return False

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def map(self, fn: Callable) -> 'Failure[E]':
        return self

    def chain(self, fn: Callable) -> 'Failure[E]':
        return self

    flat_map = chain

    def map_error(self, fn: Callable[[E], Any]) -> 'Failure':
        """Transform the error payload."""
        return Failure(fn(self.value))

    def unwrap(self):
        raise UnwrapError(f"Called unwrap on a failure: {self.value}", self.value)

    def unwrap_or(self, default: Any) -> Any:
        return default

    def __eq__(self, other):
        if isinstance(other, Failure):
            return self.value == other.value
        return False

    def __hash__(self):
        return hash(("Failure", self.value))

    def __repr__(self) -> str:
        return f"Failure({self.value!r})"


def success(value: T) -> Success[T]:
    """Wrap a value as a successful Result."""
    return Success(value)


def failure(error: E) -> Failure[E]:
    """Wrap an error as a failed Result."""
    return Failure(error)


def sequence(results: Iterable) -> Any:
    """
    Collect an iterable of Results into a Result of a list.

    Stops at (and returns) the first failure encountered.

    Examples:
        sequence([Success(1), Success(2)]) -> Success([1, 2])
        sequence([Success(1), Failure(e)]) -> Failure(e)
    """
    values: List[Any] = []
    for result in results:
        if result.is_failure():
            return result
        values.append(result.value)
    return Success(values)

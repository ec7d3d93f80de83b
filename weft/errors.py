"""
Error values and exceptions for WEFT.

Recoverable problems are described by ``Err`` values carried inside a
``Failure``. The exception classes here are only raised where there is
no Result channel to carry them (the plain numeric callable produced by
``compile``) or where the condition is a programming error rather than
bad input.
"""

from typing import Optional

# Error kinds
LEXICAL = "lexical"
SYNTAX = "syntax"
BINDING = "binding"
RESOLVER = "resolver"
ALGEBRA = "algebra"
RUNTIME = "runtime"

ERROR_KINDS = (LEXICAL, SYNTAX, BINDING, RESOLVER, ALGEBRA, RUNTIME)


class Err:
    """
    A structured error message.

    Attributes:
        message: Human-readable description
        kind: One of ERROR_KINDS
        line: Source line the error originates from, if known
    """

    __slots__ = ('message', 'kind', 'line')

    def __init__(self, message: str, kind: str, line: Optional[int] = None):
        if kind not in ERROR_KINDS:
            raise ValueError(f"Unknown error kind: {kind}")
        self.message = message
        self.kind = kind
        self.line = line

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.line is None:
            return f"Err({self.kind}: {self.message!r})"
        return f"Err({self.kind}, line {self.line}: {self.message!r})"

    def __eq__(self, other):
        if isinstance(other, Err):
            return (self.message, self.kind, self.line) == (other.message, other.kind, other.line)
        return False

    def __hash__(self):
        return hash((self.message, self.kind, self.line))


def lexical_error(message: str, line: Optional[int] = None) -> Err:
    return Err(message, LEXICAL, line)


def syntax_error(message: str, line: Optional[int] = None) -> Err:
    return Err(message, SYNTAX, line)


def binding_error(message: str, line: Optional[int] = None) -> Err:
    return Err(message, BINDING, line)


def resolver_error(message: str, line: Optional[int] = None) -> Err:
    return Err(message, RESOLVER, line)


def algebra_error(message: str, line: Optional[int] = None) -> Err:
    return Err(message, ALGEBRA, line)


def runtime_error(message: str, line: Optional[int] = None) -> Err:
    return Err(message, RUNTIME, line)


class WeftError(Exception):
    """Base class for WEFT exceptions."""


class EvaluationError(WeftError):
    """
    Raised when numeric evaluation fails outside a Result context.

    The underlying Err is available as ``error``.
    """

    def __init__(self, error: Err):
        super().__init__(error.message)
        self.error = error


class InvalidOperatorError(WeftError):
    """Raised when the reducer meets an operator token it has no rule for."""

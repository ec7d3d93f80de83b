"""
Lexically scoped variable bindings.

An Environment is one scope: a mapping of names to values plus a
reference to the enclosing scope. Lookups and assignments walk the chain
outward; ``get_at``/``assign_at`` jump straight to the scope a resolver
already identified by its distance.

    globals_ = Environment()
    globals_.define("x", 1)
    inner = Environment(globals_)
    inner.get(token(TokenKind.SYMBOL, "x", 3))   # Success(1)

Reading or assigning an unbound name yields a ``binding`` Failure.
"""

from typing import Any, Dict, List, Optional

from .errors import binding_error
from .result import Failure, Success
from .tokens import Token


def _message(line: Optional[int], message: str) -> str:
    if line is None:
        return f"From the environment: {message}"
    return f"On line {line}, from the environment: {message}"


class Environment:
    """
    A single scope in a chain of scopes.

    Args:
        parent: The enclosing scope, or None for the global scope
    """

    def __init__(self, parent: Optional['Environment'] = None):
        self.values: Dict[str, Any] = {}
        self.parent = parent

    def define(self, name: str, value: Any) -> Any:
        """Bind ``name`` in this scope, replacing any existing binding here."""
        self.values[name] = value
        return value

    def get(self, name: Token):
        """
        Look up a name, searching outward through enclosing scopes.

        Returns:
            Success(value) or a binding Failure
        """
        scope: Optional[Environment] = self
        while scope is not None:
            if name.lexeme in scope.values:
                return Success(scope.values[name.lexeme])
            scope = scope.parent
        return Failure(binding_error(_message(
            name.line,
            f"The user asked for the value of “{name.lexeme}”, "
            f"but no such name is defined."), name.line))

    def assign(self, name: Token, value: Any):
        """
        Rebind an existing name in the nearest scope that defines it.

        Never creates a binding.

        Returns:
            Success(value) or a binding Failure
        """
        scope: Optional[Environment] = self
        while scope is not None:
            if name.lexeme in scope.values:
                scope.values[name.lexeme] = value
                return Success(value)
            scope = scope.parent
        return Failure(binding_error(_message(
            name.line,
            f"The user sought to assign a value to “{name.lexeme}”, "
            f"but no such name is defined to begin with."), name.line))

    def ancestor(self, distance: int) -> 'Environment':
        """Return the scope ``distance`` parent links away."""
        scope = self
        for _ in range(distance):
            if scope.parent is None:
                raise ValueError(f"No enclosing scope at distance {distance}")
            scope = scope.parent
        return scope

    def get_at(self, distance: int, name: str):
        scope = self.ancestor(distance)
        if name in scope.values:
            return Success(scope.values[name])
        return Failure(binding_error(_message(
            None, f"No binding for “{name}” at distance {distance}.")))

    def assign_at(self, distance: int, name: Token, value: Any):
        scope = self.ancestor(distance)
        if name.lexeme not in scope.values:
            return Failure(binding_error(_message(
                name.line,
                f"No binding for “{name.lexeme}” at distance {distance}."), name.line))
        scope.values[name.lexeme] = value
        return Success(value)

    def names(self) -> List[str]:
        """Names bound directly in this scope."""
        return list(self.values)

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def __repr__(self) -> str:
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return f"Environment(depth={depth}, names={self.names()})"

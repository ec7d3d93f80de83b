"""Tests for Environment scope chains."""

import pytest

from weft.environment import Environment
from weft.errors import BINDING
from weft.tokens import TokenKind, token


def sym(name, line=1):
    return token(TokenKind.SYMBOL, name, line)


class TestDefineAndGet:
    """Tests for define() and get()."""

    def test_define_then_get(self):
        """A name defined in a scope is visible there."""
        child = Environment(Environment())
        child.define("x", 1)
        assert child.get(sym("x")).unwrap() == 1

    def test_define_returns_value(self):
        """define returns the bound value."""
        assert Environment().define("x", 5) == 5

    def test_get_through_parent(self):
        """Lookups walk outward to enclosing scopes."""
        parent = Environment()
        parent.define("x", 1)
        child = Environment(parent)
        assert child.get(sym("x")).unwrap() == 1

    def test_inner_shadows_outer(self):
        """The nearest binding wins."""
        parent = Environment()
        parent.define("x", 1)
        child = Environment(parent)
        child.define("x", 2)
        assert child.get(sym("x")).unwrap() == 2
        assert parent.get(sym("x")).unwrap() == 1

    def test_define_overwrites_current_scope_only(self):
        """define never touches an enclosing scope."""
        parent = Environment()
        parent.define("x", 1)
        child = Environment(parent)
        child.define("x", 2)
        child.define("x", 3)
        assert parent.values == {"x": 1}
        assert child.values == {"x": 3}

    def test_get_undefined_fails_with_line(self):
        """An unbound name is a binding failure carrying its line."""
        result = Environment(Environment()).get(sym("ghost", 7))
        assert not result
        assert result.error.kind == BINDING
        assert result.error.line == 7
        assert result.error.message.startswith("On line 7, from the environment:")
        assert "“ghost”" in result.error.message


class TestAssign:
    """Tests for assign()."""

    def test_assign_existing(self):
        """assign mutates the scope that owns the name."""
        parent = Environment()
        parent.define("x", 1)
        child = Environment(parent)
        assert child.assign(sym("x"), 9).unwrap() == 9
        assert parent.values["x"] == 9
        assert "x" not in child

    def test_assign_undefined_fails(self):
        """assign never creates a binding."""
        env = Environment()
        result = env.assign(sym("x", 3), 1)
        assert not result
        assert result.error.kind == BINDING
        assert result.error.line == 3
        assert "no such name is defined to begin with" in result.error.message
        assert "x" not in env


class TestDistance:
    """Tests for ancestor(), get_at() and assign_at()."""

    def chain(self):
        grandparent = Environment()
        grandparent.define("x", "outer")
        parent = Environment(grandparent)
        child = Environment(parent)
        return grandparent, parent, child

    def test_ancestor(self):
        """ancestor walks the given number of parent links."""
        grandparent, parent, child = self.chain()
        assert child.ancestor(0) is child
        assert child.ancestor(1) is parent
        assert child.ancestor(2) is grandparent

    def test_ancestor_past_root(self):
        """Walking past the global scope is a programming error."""
        _, _, child = self.chain()
        with pytest.raises(ValueError):
            child.ancestor(3)

    def test_get_at_matches_direct_get(self):
        """get_at(1) from a scope equals get on its parent."""
        grandparent, parent, child = self.chain()
        assert parent.get_at(1, "x") == grandparent.get(sym("x"))
        assert child.get_at(2, "x").unwrap() == "outer"

    def test_get_at_wrong_distance(self):
        """get_at does not search; a miss is a failure."""
        _, _, child = self.chain()
        assert not child.get_at(1, "x")

    def test_get_at_miss_message(self):
        """A get_at miss has no line to report."""
        _, _, child = self.chain()
        result = child.get_at(1, "x")
        assert result.error.kind == BINDING
        assert result.error.message.startswith("From the environment:")
        assert "line" not in result.error.message

    def test_assign_at(self):
        """assign_at writes straight into the scope at that distance."""
        grandparent, _, child = self.chain()
        assert child.assign_at(2, sym("x"), "new").unwrap() == "new"
        assert grandparent.values["x"] == "new"

    def test_assign_at_missing(self):
        """assign_at fails when the scope lacks the name."""
        _, _, child = self.chain()
        assert not child.assign_at(0, sym("x"), 1)


class TestIntrospection:
    """Tests for names(), in and repr."""

    def test_names_and_contains(self):
        """names lists this scope's bindings only."""
        parent = Environment()
        parent.define("a", 1)
        child = Environment(parent)
        child.define("b", 2)
        assert child.names() == ["b"]
        assert "b" in child and "a" not in child

    def test_repr(self):
        """repr shows depth and names."""
        child = Environment(Environment())
        child.define("y", 0)
        assert repr(child) == "Environment(depth=1, names=['y'])"

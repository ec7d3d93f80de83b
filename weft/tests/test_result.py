"""Tests for Option and Result containers."""

import pytest

from weft.result import (
    Some, Nothing, Success, Failure, UnwrapError,
    some, success, failure, sequence,
)


class TestOption:
    """Tests for Some and Nothing."""

    def test_some_is_truthy(self):
        """Some is truthy, Nothing is falsy."""
        assert Some(0)
        assert not Nothing

    def test_nothing_is_singleton(self):
        """Nothing is a single shared object."""
        assert type(Nothing)() is Nothing

    def test_map(self):
        """map transforms Some and skips Nothing."""
        assert some(2).map(lambda x: x * 3) == Some(6)
        assert Nothing.map(lambda x: x * 3) is Nothing

    def test_chain(self):
        """chain sequences Option-returning computations."""
        assert Some(4).chain(lambda x: Some(x + 1)) == Some(5)
        assert Some(4).chain(lambda x: Nothing) is Nothing

    def test_unwrap(self):
        """unwrap returns the value or raises on Nothing."""
        assert Some("a").unwrap() == "a"
        with pytest.raises(UnwrapError):
            Nothing.unwrap()

    def test_unwrap_or(self):
        """unwrap_or falls back on Nothing only."""
        assert Some(1).unwrap_or(9) == 1
        assert Nothing.unwrap_or(9) == 9


class TestResult:
    """Tests for Success and Failure."""

    def test_truthiness(self):
        """Success is truthy, Failure is falsy."""
        assert success(None)
        assert not failure("boom")

    def test_chain_on_success_applies_function(self):
        """chain on Success(s) equals f(s)."""
        f = lambda x: Success(x * 2)
        assert Success(21).chain(f) == f(21)

    def test_flat_map_alias(self):
        """flat_map is chain."""
        assert Success(1).flat_map(lambda x: Success(x + 1)) == Success(2)

    def test_failure_map_returns_same_object(self):
        """map on a Failure returns that very Failure."""
        f = Failure("payload")
        assert f.map(lambda x: x + 1) is f

    def test_failure_chain_never_calls(self):
        """chain on a Failure does not invoke its callback."""
        calls = []

        def callback(x):
            calls.append(x)
            return Success(x)

        f = Failure("payload")
        assert f.chain(callback) is f
        assert calls == []

    def test_error_payload(self):
        """Failure exposes its payload as value and error."""
        f = Failure("bad")
        assert f.value == "bad"
        assert f.error == "bad"

    def test_map_error(self):
        """map_error transforms failures only."""
        assert Failure("bad").map_error(str.upper) == Failure("BAD")
        s = Success(1)
        assert s.map_error(str.upper) is s

    def test_unwrap_failure_carries_error(self):
        """unwrap on a Failure raises UnwrapError with the payload."""
        with pytest.raises(UnwrapError) as info:
            Failure("bad").unwrap()
        assert info.value.error == "bad"

    def test_predicates(self):
        """is_success and is_failure agree with the variant."""
        assert Success(1).is_success() and not Success(1).is_failure()
        assert Failure(1).is_failure() and not Failure(1).is_success()

    def test_success_and_failure_not_equal(self):
        """A Success never equals a Failure with the same payload."""
        assert Success(1) != Failure(1)


class TestSequence:
    """Tests for sequence()."""

    def test_all_success(self):
        """All successes collect into a list."""
        assert sequence([Success(1), Success(2)]) == Success([1, 2])

    def test_stops_at_first_failure(self):
        """The first failure is returned as is."""
        first = Failure("first")
        assert sequence([Success(1), first, Failure("second")]) is first

    def test_empty(self):
        """An empty iterable gives an empty list."""
        assert sequence([]) == Success([])

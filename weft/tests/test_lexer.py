"""Tests for the lexer and implicit multiplication."""

import pytest

from weft.errors import LEXICAL
from weft.lexer import scan, implicit_multiplication
from weft.tokens import Token, TokenKind, token


def kinds(source):
    return [t.kind for t in scan(source).unwrap()]


def lexemes(source):
    return [t.lexeme for t in scan(source).unwrap()]


class TestScan:
    """Tests for scan()."""

    def test_ends_with_eof(self):
        """Every token list ends with EOF."""
        assert kinds("") == [TokenKind.EOF]
        assert kinds("1")[-1] is TokenKind.EOF

    def test_operators(self):
        """Single and two-character operators."""
        assert kinds("+ - * / ^ % == != <= >= -> = < > !")[:-1] == [
            TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH,
            TokenKind.CARET, TokenKind.PERCENT, TokenKind.DEQ, TokenKind.NEQ,
            TokenKind.LEQ, TokenKind.GEQ, TokenKind.ARROW, TokenKind.EQ,
            TokenKind.LT, TokenKind.GT, TokenKind.BANG,
        ]

    def test_numbers(self):
        """Integers, floats and scientific literals."""
        assert kinds("12 1.5 .5 1.2E3 4E-2")[:-1] == [
            TokenKind.INT, TokenKind.FLOAT, TokenKind.FLOAT,
            TokenKind.SCIENTIFIC, TokenKind.SCIENTIFIC,
        ]
        assert lexemes("1.2E3 4E-2")[:2] == ["1.2E3", "4E-2"]

    def test_digit_separators(self):
        """Separators group three digits and are removed from the lexeme."""
        toks = scan("1_000_000").unwrap()
        assert toks[0] == Token(TokenKind.INT, "1000000", 1)

    def test_bad_separator_group(self):
        """A group of other than three digits is a lexical failure."""
        result = scan("1_00")
        assert not result
        assert result.error.kind == LEXICAL
        assert "Expected 3 digits after separator" in result.error.message

    def test_bad_separator_before(self):
        """A long group followed by another separator fails."""
        result = scan("1_0000_000")
        assert "Expected 3 digits before separator" in result.error.message

    def test_keywords_and_named_operators(self):
        """Keywords and named operators are recognized."""
        assert kinds("let fn if then else while for begin end return print")[:-1] == [
            TokenKind.LET, TokenKind.FN, TokenKind.IF, TokenKind.THEN,
            TokenKind.ELSE, TokenKind.WHILE, TokenKind.FOR, TokenKind.BEGIN,
            TokenKind.END, TokenKind.RETURN, TokenKind.PRINT,
        ]
        assert kinds("and or not xor nor nand xnor rem mod")[:-1] == [
            TokenKind.AND, TokenKind.OR, TokenKind.NOT, TokenKind.XOR,
            TokenKind.NOR, TokenKind.NAND, TokenKind.XNOR, TokenKind.REM,
            TokenKind.MOD,
        ]

    def test_literals(self):
        """true, false, null, nan and inf."""
        assert kinds("true false null nan inf")[:-1] == [
            TokenKind.BOOL, TokenKind.BOOL, TokenKind.NULL, TokenKind.NAN, TokenKind.INF,
        ]

    def test_native_function_names(self):
        """Native function names scan as CALL tokens."""
        assert kinds("sin sqrt abs")[:-1] == [TokenKind.CALL] * 3

    def test_symbols(self):
        """Latin, Greek and $-prefixed names are symbols."""
        toks = scan("x1 α $y").unwrap()
        assert [t.kind for t in toks[:-1]] == [TokenKind.SYMBOL] * 3
        assert [t.lexeme for t in toks[:-1]] == ["x1", "α", "$y"]

    def test_string(self):
        """Strings drop their quotes."""
        toks = scan('"hello world"').unwrap()
        assert toks[0].kind is TokenKind.STRING
        assert toks[0].lexeme == "hello world"

    def test_unterminated_string(self):
        """An unterminated string is a lexical failure."""
        result = scan('"abc')
        assert not result
        assert "Unterminated string" in result.error.message

    def test_unknown_character(self):
        """Unknown characters fail with their line."""
        result = scan("1 +\n2 @ 3")
        assert not result
        assert result.error.line == 2
        assert result.error.message.startswith("On line 2, while scanning:")
        assert "“@”" in result.error.message

    def test_line_numbers(self):
        """Tokens carry the line they start on."""
        toks = scan("a\nb\n\nc").unwrap()
        assert [t.line for t in toks[:3]] == [1, 2, 4]

    def test_dangling_comma_dropped(self):
        """A comma between two closing brackets is removed."""
        assert lexemes("[[1,2],]")[:-1] == ["[", "[", "1", ",", "2", "]", "]"]


class TestImplicitMultiplication:
    """Tests for the implicit multiplication pass."""

    def imul(self, source):
        return [t.lexeme for t in implicit_multiplication(scan(source).unwrap())][:-1]

    def test_number_symbol(self):
        """2x becomes 2 * x."""
        assert self.imul("2x") == ["2", "*", "x"]

    def test_number_group_and_native(self):
        """2(x) and 2sin(x) get a star after the number."""
        assert self.imul("2(x)") == ["2", "*", "(", "x", ")"]
        assert self.imul("2sin(x)") == ["2", "*", "sin", "(", "x", ")"]

    def test_closing_paren(self):
        """(a)(b) and (a)b multiply."""
        assert self.imul("(a)(b)") == ["(", "a", ")", "*", "(", "b", ")"]
        assert self.imul("(a)b") == ["(", "a", ")", "*", "b"]

    def test_two_symbols(self):
        """x y becomes x * y."""
        assert self.imul("x y") == ["x", "*", "y"]

    def test_call_untouched(self):
        """A symbol followed by ( is a call, not a product."""
        assert self.imul("f(x)") == ["f", "(", "x", ")"]

    def test_inserted_star_has_line(self):
        """The inserted token takes the line of the following token."""
        toks = implicit_multiplication(scan("2\nx").unwrap())
        assert toks[1] == token(TokenKind.STAR, "*", 2)

    def test_empty(self):
        """An empty list stays empty."""
        assert implicit_multiplication([]) == []


class TestToken:
    """Tests for Token."""

    def test_immutable(self):
        """Tokens cannot be modified."""
        t = token(TokenKind.SYMBOL, "x", 1)
        with pytest.raises(AttributeError):
            t.lexeme = "y"
        assert t.lexeme == "x"

    def test_copy(self):
        """copy replaces selected fields."""
        t = token(TokenKind.SYMBOL, "x", 1).copy(lexeme="y")
        assert t == Token(TokenKind.SYMBOL, "y", 1)

"""
Token definitions for the WEFT lexer.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable


class TokenKind(Enum):
    # utility
    EOF = "eof"

    # paired delimiters
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"

    # single delimiters
    COMMA = ","
    DOT = "."
    SEMICOLON = ";"
    COLON = ":"

    # operators
    MINUS = "-"
    PLUS = "+"
    SLASH = "/"
    STAR = "*"
    BANG = "!"
    EQ = "="
    GT = ">"
    LT = "<"
    CARET = "^"
    PERCENT = "%"
    DEQ = "=="
    LEQ = "<="
    GEQ = ">="
    NEQ = "!="
    ARROW = "->"

    # literals
    INT = "int"
    FLOAT = "float"
    SCIENTIFIC = "scientific"
    STRING = "string"
    BOOL = "bool"
    NULL = "null"
    NAN = "nan"
    INF = "inf"

    SYMBOL = "symbol"

    # named operators
    REM = "rem"
    MOD = "mod"
    AND = "and"
    OR = "or"
    NOT = "not"
    XOR = "xor"
    NOR = "nor"
    NAND = "nand"
    XNOR = "xnor"

    # keywords
    FN = "fn"
    LET = "let"
    BEGIN = "begin"
    END = "end"
    IF = "if"
    THEN = "then"
    ELSE = "else"
    WHILE = "while"
    FOR = "for"
    RETURN = "return"
    PRINT = "print"

    # native function name
    CALL = "call"


KEYWORDS: Dict[str, TokenKind] = {
    "true": TokenKind.BOOL,
    "false": TokenKind.BOOL,
    "null": TokenKind.NULL,
    "nan": TokenKind.NAN,
    "inf": TokenKind.INF,
    "rem": TokenKind.REM,
    "mod": TokenKind.MOD,
    "and": TokenKind.AND,
    "or": TokenKind.OR,
    "not": TokenKind.NOT,
    "xor": TokenKind.XOR,
    "nor": TokenKind.NOR,
    "nand": TokenKind.NAND,
    "xnor": TokenKind.XNOR,
    "fn": TokenKind.FN,
    "let": TokenKind.LET,
    "begin": TokenKind.BEGIN,
    "end": TokenKind.END,
    "if": TokenKind.IF,
    "then": TokenKind.THEN,
    "else": TokenKind.ELSE,
    "while": TokenKind.WHILE,
    "for": TokenKind.FOR,
    "return": TokenKind.RETURN,
    "print": TokenKind.PRINT,
}

NATIVE_FUNCTIONS: FrozenSet[str] = frozenset({
    "sin", "cos", "tan", "log", "ln", "sqrt", "exp", "abs",
})

NUMERIC_KINDS = frozenset({TokenKind.INT, TokenKind.FLOAT, TokenKind.SCIENTIFIC})

CLOSING_DELIMITERS = frozenset({TokenKind.RPAREN, TokenKind.RBRACE, TokenKind.RBRACKET})


class Token:
    """
    A lexeme with its classification and source line.

    Tokens are immutable once created; ``copy`` returns a new token with
    selected fields replaced.
    """

    __slots__ = ('kind', 'lexeme', 'line')

    def __init__(self, kind: TokenKind, lexeme: str, line: int = -1):
        object.__setattr__(self, 'kind', kind)
        object.__setattr__(self, 'lexeme', lexeme)
        object.__setattr__(self, 'line', line)

    def __setattr__(self, name, value):
        raise AttributeError("Token is immutable")

    def copy(self, kind: TokenKind = None, lexeme: str = None, line: int = None) -> 'Token':
        return Token(
            self.kind if kind is None else kind,
            self.lexeme if lexeme is None else lexeme,
            self.line if line is None else line,
        )

    def is_(self, kind: TokenKind) -> bool:
        return self.kind is kind

    def among(self, kinds: Iterable[TokenKind]) -> bool:
        return self.kind in kinds

    def is_number(self) -> bool:
        return self.kind in NUMERIC_KINDS

    def is_closing(self) -> bool:
        """True for ``)``, ``]`` and ``}``."""
        return self.kind in CLOSING_DELIMITERS

    def __eq__(self, other):
        if isinstance(other, Token):
            return (self.kind, self.lexeme, self.line) == (other.kind, other.lexeme, other.line)
        return False

    def __hash__(self):
        return hash((self.kind, self.lexeme, self.line))

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.lexeme!r}, {self.line})"

    def __str__(self) -> str:
        return self.lexeme


def token(kind: TokenKind, lexeme: str, line: int = -1) -> Token:
    """Return a new token."""
    return Token(kind, lexeme, line)

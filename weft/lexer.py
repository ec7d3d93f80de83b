"""
Lexical analysis for WEFT source text.

``scan`` turns source text into a list of tokens terminated by an EOF
token. Malformed input (an unknown character, a badly placed digit
separator, an unterminated string) yields a Failure carrying a lexical
Err; no exception escapes.

Implicit multiplication is a separate pass over the token list so that
callers can switch it off:

    scan("2x + 1").map(implicit_multiplication)
    # 2 * x + 1
"""

from typing import List, Optional

from .errors import Err, lexical_error
from .result import Failure, Success
from .tokens import KEYWORDS, NATIVE_FUNCTIONS, Token, TokenKind

SINGLE_CHARACTER = {
    ':': TokenKind.COLON,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '[': TokenKind.LBRACKET,
    ']': TokenKind.RBRACKET,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    ',': TokenKind.COMMA,
    '.': TokenKind.DOT,
    '+': TokenKind.PLUS,
    '*': TokenKind.STAR,
    '%': TokenKind.PERCENT,
    ';': TokenKind.SEMICOLON,
    '/': TokenKind.SLASH,
    '^': TokenKind.CARET,
}

# Characters that may be followed by '=' (or '>' for '-') to form a two-character operator
DIPTHONGS = {
    '-': ('>', TokenKind.ARROW, TokenKind.MINUS),
    '!': ('=', TokenKind.NEQ, TokenKind.BANG),
    '=': ('=', TokenKind.DEQ, TokenKind.EQ),
    '<': ('=', TokenKind.LEQ, TokenKind.LT),
    '>': ('=', TokenKind.GEQ, TokenKind.GT),
}


class _LexicalFailure(Exception):
    def __init__(self, error: Err):
        super().__init__(error.message)
        self.error = error


def is_letter(c: str) -> bool:
    """Latin letters, Greek letters, underscore and the ``$`` prefix."""
    if not c:
        return False
    return ('a' <= c <= 'z' or 'A' <= c <= 'Z' or c == '_' or c == '$'
            or 'Α' <= c <= 'ω')


def is_digit(c: str) -> bool:
    return bool(c) and '0' <= c <= '9'


class Scanner:
    """Single-pass scanner over a source string."""

    def __init__(self, source: str):
        self.source = source
        self.start = 0
        self.current = 0
        self.line = 1

    # ------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------

    def at_end(self) -> bool:
        return self.current >= len(self.source)

    def tick(self) -> str:
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self, ahead: int = 0) -> str:
        index = self.current + ahead
        if index >= len(self.source):
            return ""
        return self.source[index]

    def match(self, expected: str) -> bool:
        if self.peek() != expected:
            return False
        self.current += 1
        return True

    def slice(self) -> str:
        return self.source[self.start:self.current]

    def token(self, kind: TokenKind, lexeme: Optional[str] = None) -> Token:
        return Token(kind, self.slice() if lexeme is None else lexeme, self.line)

    def fail(self, message: str):
        raise _LexicalFailure(lexical_error(
            f"On line {self.line}, while scanning: {message}", self.line))

    # ------------------------------------------------------------
    # Token scanners
    # ------------------------------------------------------------

    def skip_whitespace(self):
        while not self.at_end():
            c = self.peek()
            if c in ' \r\t':
                self.tick()
            elif c == '\n':
                self.line += 1
                self.tick()
            else:
                return

    def string(self) -> Token:
        while self.peek() != '"' and not self.at_end():
            if self.peek() == '\n':
                self.line += 1
            self.tick()
        if self.at_end():
            self.fail("Unterminated string")
        self.tick()  # closing quote
        return self.token(TokenKind.STRING, self.slice()[1:-1])

    def number(self, kind: TokenKind) -> Token:
        while is_digit(self.peek()):
            self.tick()

        # Digit separators: 1_000_000
        if self.peek() == '_' and is_digit(self.peek(1)):
            self.tick()
            digits = 0
            while is_digit(self.peek()):
                self.tick()
                digits += 1
                if self.peek() == '_' and is_digit(self.peek(1)):
                    if digits != 3:
                        self.fail("Expected 3 digits before separator")
                    self.tick()
                    digits = 0
            if digits != 3:
                self.fail("Expected 3 digits after separator")

        if self.peek() == '.' and is_digit(self.peek(1)):
            self.tick()
            kind = TokenKind.FLOAT
            while is_digit(self.peek()):
                self.tick()

        # Scientific: [number] E [+|-] [int]
        if self.peek() == 'E':
            if is_digit(self.peek(1)):
                kind = TokenKind.SCIENTIFIC
                self.tick()
                while is_digit(self.peek()):
                    self.tick()
            elif self.peek(1) in ('+', '-') and is_digit(self.peek(2)):
                kind = TokenKind.SCIENTIFIC
                self.tick()
                self.tick()
                while is_digit(self.peek()):
                    self.tick()

        return self.token(kind, self.slice().replace('_', ''))

    def word(self) -> Token:
        while is_letter(self.peek()) or is_digit(self.peek()):
            self.tick()
        text = self.slice()
        if text in NATIVE_FUNCTIONS:
            return self.token(TokenKind.CALL)
        return self.token(KEYWORDS.get(text, TokenKind.SYMBOL))

    def scan_token(self) -> Token:
        self.skip_whitespace()
        self.start = self.current
        if self.at_end():
            return self.token(TokenKind.EOF, "EOF")
        c = self.tick()
        if is_letter(c):
            return self.word()
        if is_digit(c):
            return self.number(TokenKind.INT)
        if c == '.' and is_digit(self.peek()):
            return self.number(TokenKind.FLOAT)
        if c == '"':
            return self.string()
        if c in DIPTHONGS:
            follower, pair, single = DIPTHONGS[c]
            return self.token(pair if self.match(follower) else single)
        kind = SINGLE_CHARACTER.get(c)
        if kind is None:
            self.fail(f"Unknown token “{c}”")
        return self.token(kind)

    def tokens(self) -> List[Token]:
        out: List[Token] = []
        while True:
            tok = self.scan_token()
            out.append(tok)
            if tok.is_(TokenKind.EOF):
                break
        return drop_dangling_commas(out)


def drop_dangling_commas(tokens: List[Token]) -> List[Token]:
    """Remove a comma sitting between two closing delimiters: ``[[1,2],]``."""
    out: List[Token] = []
    for i, tok in enumerate(tokens):
        if (tok.is_(TokenKind.COMMA) and 0 < i < len(tokens) - 1
                and tokens[i - 1].is_closing() and tokens[i + 1].is_closing()):
            continue
        out.append(tok)
    return out


def scan(source: str):
    """
    Tokenize source text.

    Returns:
        Success(list of tokens ending with EOF) or Failure(Err)
    """
    try:
        return Success(Scanner(source).tokens())
    except _LexicalFailure as e:
        return Failure(e.error)


def implicit_multiplication(tokens: List[Token]) -> List[Token]:
    """
    Insert explicit ``*`` tokens where multiplication is implied.

    Inserted between:
        ``)`` and a symbol or ``(``     (a+b)x, (a)(b)
        a number and a symbol, ``(`` or native function name    2x, 2(x), 2sin(x)
        two symbols                      x y
    """
    if not tokens:
        return []
    out: List[Token] = []
    for now, nxt in zip(tokens, tokens[1:]):
        out.append(now)
        star = nxt.copy(TokenKind.STAR, "*")
        if now.is_(TokenKind.RPAREN):
            if nxt.among((TokenKind.SYMBOL, TokenKind.LPAREN)):
                out.append(star)
        elif now.is_number():
            if nxt.among((TokenKind.SYMBOL, TokenKind.LPAREN, TokenKind.CALL)):
                out.append(star)
        elif now.is_(TokenKind.SYMBOL) and nxt.is_(TokenKind.SYMBOL):
            out.append(star)
    out.append(tokens[-1])
    return out

"""
Parser for WEFT.

A precedence-climbing parser over the token list produced by the lexer.
Each token kind may have a prefix rule (how it starts an expression), an
infix rule (how it continues one) and a binding power. Binding powers,
low to high:

    assignment < or < nor < and < nand < xor < xnor < not
      < (== !=) < (< > <= >=) < (+ -) < (* /) < (% rem mod)
      < ^ < postfix ! < call

``^`` and ``=`` are right-associative; everything else associates left.
Prefix ``-`` and ``+`` bind at the additive level, so ``-a*b`` parses as
``-(a*b)``.

Parse failures never raise out of this module: ``parse_tokens`` and
``parse_program_tokens`` return ``Failure(Err)`` with a message of the
form "On line N, while parsing SOURCE: MESSAGE".
"""

import math
from enum import IntEnum
from typing import Callable, Dict, List, Optional

from .errors import Err, syntax_error
from .result import Failure, Success
from .syntax import (
    AssignExpr, Binary, BlockStmt, Expr, ExprStmt, Float, FnCall, FnStmt,
    Group, IfStmt, Integer, LetStmt, Literal, LogicalExpr, MatrixExpr,
    NativeCall, NotExpr, PrintStmt, Program, RelationExpr, ReturnStmt, Stmt,
    Variable, VectorExpr, WhileStmt,
)
from .tokens import Token, TokenKind


class Precedence(IntEnum):
    NIL = 0
    LOWEST = 1
    ASSIGN = 2
    OR = 3
    NOR = 4
    AND = 5
    NAND = 6
    XOR = 7
    XNOR = 8
    NOT = 9
    EQ = 10
    REL = 11
    SUM = 12
    PROD = 13
    QUOT = 14
    POW = 15
    POSTFIX = 16
    CALL = 17


BINDING_POWER: Dict[TokenKind, Precedence] = {
    TokenKind.EQ: Precedence.ASSIGN,
    TokenKind.OR: Precedence.OR,
    TokenKind.NOR: Precedence.NOR,
    TokenKind.AND: Precedence.AND,
    TokenKind.NAND: Precedence.NAND,
    TokenKind.XOR: Precedence.XOR,
    TokenKind.XNOR: Precedence.XNOR,
    TokenKind.DEQ: Precedence.EQ,
    TokenKind.NEQ: Precedence.EQ,
    TokenKind.LT: Precedence.REL,
    TokenKind.GT: Precedence.REL,
    TokenKind.LEQ: Precedence.REL,
    TokenKind.GEQ: Precedence.REL,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.STAR: Precedence.PROD,
    TokenKind.SLASH: Precedence.PROD,
    TokenKind.PERCENT: Precedence.QUOT,
    TokenKind.REM: Precedence.QUOT,
    TokenKind.MOD: Precedence.QUOT,
    TokenKind.CARET: Precedence.POW,
    TokenKind.BANG: Precedence.POSTFIX,
    TokenKind.LPAREN: Precedence.CALL,
}


class _ParseFailure(Exception):
    def __init__(self, error: Err):
        super().__init__(error.message)
        self.error = error


class Parser:
    """
    Parses a token list into expressions or statements.

    A Parser is single-use: construct it with the tokens, then call
    ``expression_only()`` or ``program()`` once.

    Args:
        tokens: Tokens ending with an EOF token
    """

    def __init__(self, tokens: List[Token]):
        if not tokens or not tokens[-1].is_(TokenKind.EOF):
            line = tokens[-1].line if tokens else 1
            tokens = list(tokens) + [Token(TokenKind.EOF, "EOF", line)]
        self.tokens = tokens
        self.current = 0

        self.prefix_rules: Dict[TokenKind, Callable[[Token], Expr]] = {
            TokenKind.INT: self.atom,
            TokenKind.FLOAT: self.atom,
            TokenKind.NAN: self.atom,
            TokenKind.INF: self.atom,
            TokenKind.SYMBOL: self.atom,
            TokenKind.BOOL: self.atom,
            TokenKind.STRING: self.atom,
            TokenKind.NULL: self.atom,
            TokenKind.SCIENTIFIC: self.scientific,
            TokenKind.LPAREN: self.group,
            TokenKind.LBRACKET: self.vector,
            TokenKind.MINUS: self.prefix,
            TokenKind.PLUS: self.prefix,
            TokenKind.NOT: self.logical_not,
            TokenKind.CALL: self.native,
        }
        self.infix_rules: Dict[TokenKind, Callable[[Token, Expr], Expr]] = {
            TokenKind.EQ: self.assign,
            TokenKind.DEQ: self.compare,
            TokenKind.NEQ: self.compare,
            TokenKind.LT: self.compare,
            TokenKind.GT: self.compare,
            TokenKind.LEQ: self.compare,
            TokenKind.GEQ: self.compare,
            TokenKind.PLUS: self.infix,
            TokenKind.MINUS: self.infix,
            TokenKind.STAR: self.infix,
            TokenKind.SLASH: self.infix,
            TokenKind.PERCENT: self.infix,
            TokenKind.REM: self.infix,
            TokenKind.MOD: self.infix,
            TokenKind.CARET: self.right_infix,
            TokenKind.AND: self.logic_infix,
            TokenKind.OR: self.logic_infix,
            TokenKind.XOR: self.logic_infix,
            TokenKind.NOR: self.logic_infix,
            TokenKind.NAND: self.logic_infix,
            TokenKind.XNOR: self.logic_infix,
            TokenKind.BANG: self.postfix,
            TokenKind.LPAREN: self.call,
        }

    # ------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------

    @property
    def peek(self) -> Token:
        return self.tokens[self.current]

    def at_end(self) -> bool:
        return self.peek.is_(TokenKind.EOF)

    def advance(self) -> Token:
        tok = self.tokens[self.current]
        if not self.at_end():
            self.current += 1
        return tok

    def check(self, kind: TokenKind) -> bool:
        return self.peek.is_(kind)

    def match(self, kind: TokenKind) -> bool:
        if self.check(kind):
            self.advance()
            return True
        return False

    def fail(self, message: str, source: str):
        line = self.peek.line
        raise _ParseFailure(syntax_error(
            f"On line {line}, while parsing {source}: {message}", line))

    def expect(self, kind: TokenKind, message: str, source: str) -> Token:
        if not self.check(kind):
            self.fail(message, source)
        return self.advance()

    # ------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------

    def expression(self, min_bp: Precedence = Precedence.LOWEST) -> Expr:
        tok = self.advance()
        rule = self.prefix_rules.get(tok.kind)
        if rule is None:
            self.fail(f"Unexpected token “{tok.lexeme}”", "an expression")
        left = rule(tok)
        while min_bp < BINDING_POWER.get(self.peek.kind, Precedence.NIL):
            tok = self.advance()
            left = self.infix_rules[tok.kind](tok, left)
        return left

    def atom(self, tok: Token) -> Expr:
        kind = tok.kind
        if kind is TokenKind.INT:
            return Integer(int(tok.lexeme))
        if kind is TokenKind.FLOAT:
            return Float(float(tok.lexeme))
        if kind is TokenKind.NAN:
            return Float(math.nan)
        if kind is TokenKind.INF:
            return Float(math.inf)
        if kind is TokenKind.SYMBOL:
            return Variable(tok)
        if kind is TokenKind.BOOL:
            return Literal(tok.lexeme == "true")
        if kind is TokenKind.STRING:
            return Literal(tok.lexeme)
        return Literal(None)

    def scientific(self, tok: Token) -> Expr:
        """``1.5E3`` becomes ``1.5 * 10 ^ 3``."""
        mantissa, exponent = tok.lexeme.split("E")
        base = Float(float(mantissa)) if "." in mantissa else Integer(int(mantissa))
        power = Binary(tok.copy(TokenKind.CARET, "^"), Integer(10), Integer(int(exponent)))
        return Binary(tok.copy(TokenKind.STAR, "*"), base, power)

    def group(self, tok: Token) -> Expr:
        inner = self.expression()
        self.expect(TokenKind.RPAREN, "Expected “)” to close the group", "a group")
        return Group(inner)

    def vector(self, tok: Token) -> Expr:
        source = "a vector"
        elements: List[Expr] = []
        if not self.check(TokenKind.RBRACKET):
            elements.append(self.expression())
            while self.match(TokenKind.COMMA):
                elements.append(self.expression())
        self.expect(TokenKind.RBRACKET, "Expected a right bracket “]” to close the vector", source)

        rows = [e for e in elements if isinstance(e, VectorExpr)]
        if not rows:
            return VectorExpr(elements, tok.line)
        if len(rows) != len(elements):
            self.fail("Encountered a matrix row that is not a vector", source)
        col_count = len(rows[0].elements)
        if any(len(r.elements) != col_count for r in rows):
            self.fail("Encountered a jagged matrix, which is prohibited", source)
        return MatrixExpr(rows, len(rows), col_count)

    def prefix(self, tok: Token) -> Expr:
        operand = self.expression(Precedence.SUM)
        return NativeCall(tok.lexeme, [operand], tok.line)

    def logical_not(self, tok: Token) -> Expr:
        return NotExpr(self.expression(Precedence.NOT))

    def arguments(self, source: str) -> List[Expr]:
        args: List[Expr] = []
        if not self.check(TokenKind.RPAREN):
            args.append(self.expression())
            while self.match(TokenKind.COMMA):
                args.append(self.expression())
        self.expect(TokenKind.RPAREN, f"Expected “)” to close the arguments, got “{self.peek.lexeme}”", source)
        return args

    def native(self, tok: Token) -> Expr:
        self.expect(TokenKind.LPAREN, "Expected “(” to open the arguments", "a native call")
        return NativeCall(tok.lexeme, self.arguments("a native call"), tok.line)

    def infix(self, op: Token, left: Expr) -> Expr:
        right = self.expression(BINDING_POWER[op.kind])
        return Binary(op, left, right)

    def right_infix(self, op: Token, left: Expr) -> Expr:
        right = self.expression(Precedence(BINDING_POWER[op.kind] - 1))
        return Binary(op, left, right)

    def compare(self, op: Token, left: Expr) -> Expr:
        right = self.expression(BINDING_POWER[op.kind])
        return RelationExpr(op, left, right)

    def logic_infix(self, op: Token, left: Expr) -> Expr:
        right = self.expression(BINDING_POWER[op.kind])
        return LogicalExpr(op, left, right)

    def assign(self, op: Token, left: Expr) -> Expr:
        if not isinstance(left, Variable):
            self.fail("Invalid assignment target", "an assignment")
        return AssignExpr(left, self.expression(Precedence.LOWEST))

    def postfix(self, op: Token, left: Expr) -> Expr:
        return NativeCall("!", [left], op.line)

    def call(self, op: Token, left: Expr) -> Expr:
        return FnCall(left, self.arguments("a call"), op.line)

    # ------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------

    def terminator(self, source: str):
        """Consume a ``;``, which may be omitted before EOF, ``end`` or ``else``."""
        if self.match(TokenKind.SEMICOLON):
            return
        if self.at_end() or self.check(TokenKind.END) or self.check(TokenKind.ELSE):
            return
        self.fail("Expected “;” to end the statement", source)

    def statement(self) -> Stmt:
        if self.match(TokenKind.LET):
            return self.let_statement()
        if self.match(TokenKind.FN):
            return self.fn_statement()
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.BEGIN):
            return self.block()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.FOR):
            return self.for_statement()
        if self.match(TokenKind.RETURN):
            value = self.expression()
            self.terminator("a return statement")
            return ReturnStmt(value)
        if self.match(TokenKind.PRINT):
            value = self.expression()
            self.terminator("a print statement")
            return PrintStmt(value)
        return self.expression_statement()

    def expression_statement(self) -> ExprStmt:
        expression = self.expression()
        self.terminator("an expression statement")
        return ExprStmt(expression)

    def type_text(self, stop: TokenKind) -> str:
        parts = []
        while not self.check(stop) and not self.at_end():
            parts.append(self.advance().lexeme)
        return " ".join(parts)

    def let_statement(self) -> LetStmt:
        source = "a variable declaration"
        name = self.expect(TokenKind.SYMBOL, "Expected a symbol for the variable’s name", source)
        type_name = "_"
        if self.match(TokenKind.COLON):
            type_name = self.type_text(TokenKind.EQ)
        self.expect(TokenKind.EQ, "Expected the assignment operator “=”", source)
        initializer = self.expression()
        self.terminator(source)
        return LetStmt(name, initializer, type_name)

    def fn_statement(self) -> FnStmt:
        source = "a function declaration"
        name = self.expect(TokenKind.SYMBOL, "Expected a symbol for the function’s name", source)
        self.expect(TokenKind.LPAREN, "Expected “(” to begin the parameter list", source)
        params: List[Token] = []
        if not self.check(TokenKind.RPAREN):
            params.append(self.expect(TokenKind.SYMBOL, "Expected a symbol as a parameter", source))
            while self.match(TokenKind.COMMA):
                params.append(self.expect(TokenKind.SYMBOL, "Expected a symbol as a parameter", source))
        self.expect(TokenKind.RPAREN, "Expected “)” to close the parameter list", source)

        param_types = return_type = ""
        if self.match(TokenKind.COLON):
            param_types = self.type_text(TokenKind.ARROW)
            self.expect(TokenKind.ARROW, "Expected “->” to separate the return type", source)
            return_type = self.type_text(TokenKind.EQ)
        self.expect(TokenKind.EQ, "Expected “=” to separate the function’s body", source)
        body = self.statement()
        return FnStmt(name, params, body, param_types, return_type)

    def if_statement(self) -> IfStmt:
        condition = self.expression()
        self.expect(TokenKind.THEN, "Expected “then” after the if condition", "an if-statement")
        then_branch = self.statement()
        else_branch = None
        if self.match(TokenKind.ELSE):
            else_branch = self.statement()
        return IfStmt(condition, then_branch, else_branch)

    def block(self) -> BlockStmt:
        statements: List[Stmt] = []
        while not self.check(TokenKind.END) and not self.at_end():
            statements.append(self.statement())
        self.expect(TokenKind.END, "Expected closing “end”", "a block")
        return BlockStmt(statements)

    def while_statement(self) -> WhileStmt:
        condition = self.expression()
        self.expect(TokenKind.BEGIN, "Expected a block after the condition", "a while loop")
        return WhileStmt(condition, self.block())

    def for_statement(self) -> Stmt:
        """``for (init; cond; step) begin ... end`` desugars to a while loop."""
        source = "a for loop"
        self.expect(TokenKind.LPAREN, "Expected “(” after the keyword “for”", source)
        init: Optional[Stmt] = None
        if self.match(TokenKind.SEMICOLON):
            pass
        elif self.match(TokenKind.LET):
            init = self.let_statement()
        else:
            init = self.expression_statement()

        condition: Expr = Literal(True)
        if not self.check(TokenKind.SEMICOLON):
            condition = self.expression()
        self.expect(TokenKind.SEMICOLON, "Expected “;” after the loop condition", source)

        increment: Optional[Expr] = None
        if not self.check(TokenKind.RPAREN):
            increment = self.expression()
        self.expect(TokenKind.RPAREN, "Expected “)” after the loop’s clauses", source)
        self.expect(TokenKind.BEGIN, "Expected a block after the loop’s clauses", source)

        body = self.block()
        if increment is not None:
            body.statements.append(ExprStmt(increment))
        loop: Stmt = WhileStmt(condition, body)
        if init is not None:
            loop = BlockStmt([init, loop])
        return loop

    # ------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------

    def expression_only(self) -> Expr:
        """Parse one expression, optionally followed by ``;``, then EOF."""
        node = self.expression()
        self.match(TokenKind.SEMICOLON)
        if not self.at_end():
            self.fail(f"Unexpected token “{self.peek.lexeme}” after the expression", "an expression")
        return node

    def program(self) -> Program:
        statements: List[Stmt] = []
        while not self.at_end():
            statements.append(self.statement())
        return Program(statements)


def parse_tokens(tokens: List[Token]):
    """
    Parse a lone expression.

    Returns:
        Success(Expr) or Failure(Err)
    """
    try:
        return Success(Parser(tokens).expression_only())
    except _ParseFailure as e:
        return Failure(e.error)


def parse_program_tokens(tokens: List[Token]):
    """
    Parse a sequence of statements.

    Returns:
        Success(Program) or Failure(Err)
    """
    try:
        return Success(Parser(tokens).program())
    except _ParseFailure as e:
        return Failure(e.error)


def parse_source_tokens(tokens: List[Token]):
    """
    Parse tokens as a lone expression if they form one, else as a program.

    Returns:
        Success(Expr), Success(Program) or Failure(Err)
    """
    as_expression = parse_tokens(tokens)
    if as_expression:
        return as_expression
    return parse_program_tokens(tokens)

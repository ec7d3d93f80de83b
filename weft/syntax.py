"""
Syntax tree for WEFT.

The parser produces two families of nodes:

    Expr  - Integer, Float, Literal, Variable, Group, Binary, AssignExpr,
            RelationExpr, LogicalExpr, NotExpr, FnCall, NativeCall,
            VectorExpr, MatrixExpr
    Stmt  - ExprStmt, LetStmt, FnStmt, BlockStmt, IfStmt, WhileStmt,
            ReturnStmt, PrintStmt

Each node is a small dataclass whose ``accept`` dispatches to the matching
``visit_*`` method of a visitor. ExprVisitor and StmtVisitor declare every
handler abstract, so a visitor that forgets a node kind cannot be
instantiated.

Nodes compare and hash by identity: the resolver keys its table of
lexical distances on the node objects themselves.

    format_expr(parse("1 + (2 * x)").unwrap())
    # (+ 1 (group (* 2 x)))
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

from .tokens import Token


# ============================================================
# Expressions
# ============================================================

class Expr(ABC):
    """Base class of expression nodes."""

    @abstractmethod
    def accept(self, visitor: 'ExprVisitor') -> Any:
        ...


@dataclass(eq=False)
class Integer(Expr):
    value: int

    def accept(self, visitor):
        return visitor.visit_integer(self)


@dataclass(eq=False)
class Float(Expr):
    value: float

    def accept(self, visitor):
        return visitor.visit_float(self)


@dataclass(eq=False)
class Literal(Expr):
    """A string, boolean or null literal."""
    value: Union[str, bool, None]

    def accept(self, visitor):
        return visitor.visit_literal(self)


@dataclass(eq=False)
class Variable(Expr):
    name: Token

    def accept(self, visitor):
        return visitor.visit_variable(self)


@dataclass(eq=False)
class Group(Expr):
    """An explicitly parenthesized expression."""
    inner: Expr

    def accept(self, visitor):
        return visitor.visit_group(self)


@dataclass(eq=False)
class Binary(Expr):
    """An arithmetic operation: ``+ - * / ^ % rem mod``."""
    op: Token
    left: Expr
    right: Expr

    def accept(self, visitor):
        return visitor.visit_binary(self)


@dataclass(eq=False)
class AssignExpr(Expr):
    target: Variable
    value: Expr

    def accept(self, visitor):
        return visitor.visit_assign(self)


@dataclass(eq=False)
class RelationExpr(Expr):
    op: Token
    left: Expr
    right: Expr

    def accept(self, visitor):
        return visitor.visit_relation(self)


@dataclass(eq=False)
class LogicalExpr(Expr):
    op: Token
    left: Expr
    right: Expr

    def accept(self, visitor):
        return visitor.visit_logical(self)


@dataclass(eq=False)
class NotExpr(Expr):
    operand: Expr

    def accept(self, visitor):
        return visitor.visit_not(self)


@dataclass(eq=False)
class FnCall(Expr):
    """A call to a user-defined function."""
    callee: Expr
    args: List[Expr]
    line: int = -1

    def accept(self, visitor):
        return visitor.visit_fn_call(self)


@dataclass(eq=False)
class NativeCall(Expr):
    """
    A call to a built-in function.

    Prefix ``-``/``+`` and postfix ``!`` are native calls too, named by
    their operator.
    """
    name: str
    args: List[Expr]
    line: int = -1

    def accept(self, visitor):
        return visitor.visit_native_call(self)


@dataclass(eq=False)
class VectorExpr(Expr):
    elements: List[Expr]
    line: int = -1

    def accept(self, visitor):
        return visitor.visit_vector(self)


@dataclass(eq=False)
class MatrixExpr(Expr):
    rows: List[VectorExpr]
    row_count: int
    col_count: int

    def accept(self, visitor):
        return visitor.visit_matrix(self)


class ExprVisitor(ABC):
    """One handler per expression node kind."""

    @abstractmethod
    def visit_integer(self, node: Integer): ...

    @abstractmethod
    def visit_float(self, node: Float): ...

    @abstractmethod
    def visit_literal(self, node: Literal): ...

    @abstractmethod
    def visit_variable(self, node: Variable): ...

    @abstractmethod
    def visit_group(self, node: Group): ...

    @abstractmethod
    def visit_binary(self, node: Binary): ...

    @abstractmethod
    def visit_assign(self, node: AssignExpr): ...

    @abstractmethod
    def visit_relation(self, node: RelationExpr): ...

    @abstractmethod
    def visit_logical(self, node: LogicalExpr): ...

    @abstractmethod
    def visit_not(self, node: NotExpr): ...

    @abstractmethod
    def visit_fn_call(self, node: FnCall): ...

    @abstractmethod
    def visit_native_call(self, node: NativeCall): ...

    @abstractmethod
    def visit_vector(self, node: VectorExpr): ...

    @abstractmethod
    def visit_matrix(self, node: MatrixExpr): ...


# ============================================================
# Statements
# ============================================================

class Stmt(ABC):
    """Base class of statement nodes."""

    @abstractmethod
    def accept(self, visitor: 'StmtVisitor') -> Any:
        ...


@dataclass(eq=False)
class ExprStmt(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_expr_stmt(self)


@dataclass(eq=False)
class LetStmt(Stmt):
    name: Token
    initializer: Expr
    type_name: str = "_"

    def accept(self, visitor):
        return visitor.visit_let_stmt(self)


@dataclass(eq=False)
class FnStmt(Stmt):
    name: Token
    params: List[Token]
    body: Stmt
    param_types: str = ""
    return_type: str = ""

    def accept(self, visitor):
        return visitor.visit_fn_stmt(self)


@dataclass(eq=False)
class BlockStmt(Stmt):
    statements: List[Stmt] = field(default_factory=list)

    def accept(self, visitor):
        return visitor.visit_block_stmt(self)


@dataclass(eq=False)
class IfStmt(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt] = None

    def accept(self, visitor):
        return visitor.visit_if_stmt(self)


@dataclass(eq=False)
class WhileStmt(Stmt):
    condition: Expr
    body: Stmt

    def accept(self, visitor):
        return visitor.visit_while_stmt(self)


@dataclass(eq=False)
class ReturnStmt(Stmt):
    value: Expr

    def accept(self, visitor):
        return visitor.visit_return_stmt(self)


@dataclass(eq=False)
class PrintStmt(Stmt):
    value: Expr

    def accept(self, visitor):
        return visitor.visit_print_stmt(self)


class StmtVisitor(ABC):
    """One handler per statement node kind."""

    @abstractmethod
    def visit_expr_stmt(self, node: ExprStmt): ...

    @abstractmethod
    def visit_let_stmt(self, node: LetStmt): ...

    @abstractmethod
    def visit_fn_stmt(self, node: FnStmt): ...

    @abstractmethod
    def visit_block_stmt(self, node: BlockStmt): ...

    @abstractmethod
    def visit_if_stmt(self, node: IfStmt): ...

    @abstractmethod
    def visit_while_stmt(self, node: WhileStmt): ...

    @abstractmethod
    def visit_return_stmt(self, node: ReturnStmt): ...

    @abstractmethod
    def visit_print_stmt(self, node: PrintStmt): ...


@dataclass(eq=False)
class Program:
    """A parsed sequence of top-level statements."""
    statements: List[Stmt] = field(default_factory=list)

    def __iter__(self):
        return iter(self.statements)

    def __len__(self):
        return len(self.statements)


# ============================================================
# S-expression printer
# ============================================================

def _literal_text(value) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    return f'"{value}"'


class _SexprPrinter(ExprVisitor):

    def show(self, head: str, *parts: Expr) -> str:
        inner = " ".join([head] + [p.accept(self) for p in parts])
        return f"({inner})"

    def visit_integer(self, node):
        return str(node.value)

    def visit_float(self, node):
        return str(node.value)

    def visit_literal(self, node):
        return _literal_text(node.value)

    def visit_variable(self, node):
        return node.name.lexeme

    def visit_group(self, node):
        return self.show("group", node.inner)

    def visit_binary(self, node):
        return self.show(node.op.lexeme, node.left, node.right)

    def visit_assign(self, node):
        return self.show("=", node.target, node.value)

    def visit_relation(self, node):
        return self.show(node.op.lexeme, node.left, node.right)

    def visit_logical(self, node):
        return self.show(node.op.lexeme, node.left, node.right)

    def visit_not(self, node):
        return self.show("not", node.operand)

    def visit_fn_call(self, node):
        return self.show("call", node.callee, *node.args)

    def visit_native_call(self, node):
        return self.show(node.name, *node.args)

    def visit_vector(self, node):
        return self.show("vector", *node.elements)

    def visit_matrix(self, node):
        return self.show("matrix", *node.rows)


def format_expr(node: Expr) -> str:
    """
    Print a syntax tree as an s-expression.

    Examples:
        1 + 2 * x     -> (+ 1 (* 2 x))
        -(a)          -> (- (group a))
        sin(x)!       -> (! (sin x))
    """
    return node.accept(_SexprPrinter())


# ============================================================
# Free variables
# ============================================================

class _FreeVariables(ExprVisitor):
    """Collects variable names in order of first appearance."""

    def __init__(self):
        self.names: List[str] = []

    def add(self, name: str):
        if name not in self.names:
            self.names.append(name)

    def walk(self, *nodes: Expr):
        for n in nodes:
            n.accept(self)

    def visit_integer(self, node):
        pass

    def visit_float(self, node):
        pass

    def visit_literal(self, node):
        pass

    def visit_variable(self, node):
        self.add(node.name.lexeme)

    def visit_group(self, node):
        self.walk(node.inner)

    def visit_binary(self, node):
        self.walk(node.left, node.right)

    def visit_assign(self, node):
        self.walk(node.target, node.value)

    def visit_relation(self, node):
        self.walk(node.left, node.right)

    def visit_logical(self, node):
        self.walk(node.left, node.right)

    def visit_not(self, node):
        self.walk(node.operand)

    def visit_fn_call(self, node):
        # callee names a function, not a free variable
        if not isinstance(node.callee, Variable):
            self.walk(node.callee)
        self.walk(*node.args)

    def visit_native_call(self, node):
        self.walk(*node.args)

    def visit_vector(self, node):
        self.walk(*node.elements)

    def visit_matrix(self, node):
        self.walk(*node.rows)


def free_variables(node: Expr) -> List[str]:
    """Names of the variables referenced by an expression."""
    collector = _FreeVariables()
    node.accept(collector)
    return collector.names

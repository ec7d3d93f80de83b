"""
Static resolution of local variables.

Before a program runs, the Resolver walks it once with a stack of block
scopes. For every variable read or assignment that refers to a local, it
tells its handler how many scopes lie between the reference and the
scope that declares the name:

    resolver = Resolver(interpreter)
    resolver.resolve_all(program.statements)   # interpreter.resolve(node, depth)

Names not found on the stack are globals and are not reported; the
interpreter looks those up by name at run time.
"""

from typing import Dict, List, Protocol

from .errors import Err, resolver_error
from .result import Failure, Success
from .syntax import Expr, ExprVisitor, FnStmt, Stmt, StmtVisitor
from .tokens import Token


class ResolutionHandler(Protocol):
    def resolve(self, node: Expr, depth: int) -> None: ...


class _ResolveFailure(Exception):
    def __init__(self, error: Err):
        super().__init__(error.message)
        self.error = error


class Resolver(ExprVisitor, StmtVisitor):
    """Computes lexical distances for local variable references."""

    def __init__(self, handler: ResolutionHandler):
        self.handler = handler
        # name -> True once its initializer has been resolved
        self.scopes: List[Dict[str, bool]] = []

    def resolve_all(self, statements: List[Stmt]):
        """
        Resolve a list of statements.

        Returns:
            Success(None) or a resolver Failure
        """
        try:
            for stmt in statements:
                stmt.accept(self)
        except _ResolveFailure as e:
            return Failure(e.error)
        return Success(None)

    # ------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name: Token):
        if self.scopes:
            self.scopes[-1][name.lexeme] = False

    def define(self, name: Token):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True

    def resolve_local(self, node: Expr, name: Token):
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.handler.resolve(node, len(self.scopes) - 1 - i)
                return

    def walk(self, *nodes):
        for n in nodes:
            if n is not None:
                n.accept(self)

    # ------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------

    def visit_block_stmt(self, node):
        self.begin_scope()
        self.walk(*node.statements)
        self.end_scope()

    def visit_expr_stmt(self, node):
        self.walk(node.expression)

    def visit_let_stmt(self, node):
        self.declare(node.name)
        self.walk(node.initializer)
        self.define(node.name)

    def visit_fn_stmt(self, node: FnStmt):
        self.declare(node.name)
        self.define(node.name)
        self.begin_scope()
        for param in node.params:
            self.declare(param)
            self.define(param)
        self.walk(node.body)
        self.end_scope()

    def visit_if_stmt(self, node):
        self.walk(node.condition, node.then_branch, node.else_branch)

    def visit_while_stmt(self, node):
        self.walk(node.condition, node.body)

    def visit_return_stmt(self, node):
        self.walk(node.value)

    def visit_print_stmt(self, node):
        self.walk(node.value)

    # ------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------

    def visit_variable(self, node):
        name = node.name
        if self.scopes and self.scopes[-1].get(name.lexeme) is False:
            raise _ResolveFailure(resolver_error(
                f"On line {name.line}, from the resolver: The user sought to read "
                f"a local variable “{name.lexeme}” in its own initializer.", name.line))
        self.resolve_local(node, name)

    def visit_assign(self, node):
        self.walk(node.value)
        self.resolve_local(node, node.target.name)

    def visit_integer(self, node):
        pass

    def visit_float(self, node):
        pass

    def visit_literal(self, node):
        pass

    def visit_group(self, node):
        self.walk(node.inner)

    def visit_binary(self, node):
        self.walk(node.left, node.right)

    def visit_relation(self, node):
        self.walk(node.left, node.right)

    def visit_logical(self, node):
        self.walk(node.left, node.right)

    def visit_not(self, node):
        self.walk(node.operand)

    def visit_fn_call(self, node):
        self.walk(node.callee, *node.args)

    def visit_native_call(self, node):
        self.walk(*node.args)

    def visit_vector(self, node):
        self.walk(*node.elements)

    def visit_matrix(self, node):
        self.walk(*node.rows)

"""
Numeric tree-walking interpreter for WEFT.

The Interpreter runs programs (``let``, ``fn``, ``if``, ``while``,
``print``, ...) over an Environment chain. Local variable references are
resolved ahead of time by the Resolver; globals are looked up by name.

Runtime problems are raised internally as EvaluationError and turned
back into a Failure at the public boundary (``interpret``,
``evaluate``), so callers only ever see Results:

    interpreter = Interpreter()
    interpreter.interpret(parse_program("let x = 2; x ^ 10;").unwrap())
    # Success(1024)

``compile`` turns a function definition (or a bare expression in one
variable) into a NumericFunction, a plain ``float -> float`` callable
suitable for sampling a curve:

    f = compile(parse("fn f(x) = x^2 + 1;")).unwrap()
    f(3)                  # 10.0
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional

from .environment import Environment
from .errors import EvaluationError, runtime_error
from .numerics import (
    add, apply_native, as_float, divide, modulo, multiply, percent, power, remainder, subtract,
)
from .resolver import Resolver
from .result import Failure, Success
from .syntax import (
    Expr, ExprStmt, ExprVisitor, FnStmt, Program, Stmt, StmtVisitor,
    free_variables,
)
from .tokens import TokenKind

logger = logging.getLogger(__name__)


class _Return(Exception):
    def __init__(self, value: Any):
        super().__init__()
        self.value = value


def _too_deep():
    return Failure(runtime_error("Maximum recursion depth exceeded"))


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """
    Truthiness of a runtime value.

    Booleans are themselves; null, zero and nan are false; strings and
    lists are true when non-empty; everything else is true.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if is_number(value):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, (str, list)):
        return len(value) != 0
    return True


def format_value(value: Any) -> str:
    """Render a runtime value the way ``print`` shows it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, list):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)


class Function:
    """A user-defined function closed over its defining scope."""

    def __init__(self, declaration: FnStmt, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    @property
    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: 'Interpreter', args: List[Any]) -> Any:
        scope = Environment(self.closure)
        for param, arg in zip(self.declaration.params, args):
            scope.define(param.lexeme, arg)
        try:
            return interpreter.execute([self.declaration.body], scope)
        except _Return as r:
            return r.value

    def __repr__(self) -> str:
        return f"<fn {self.name}>"

    __str__ = __repr__


class Interpreter(ExprVisitor, StmtVisitor):
    """
    Evaluates syntax trees to Python values.

    Args:
        output: Called with the text of every ``print`` statement
    """

    def __init__(self, output: Optional[Callable[[str], Any]] = None):
        self.globals = Environment()
        self.environment = self.globals
        self.locals: Dict[Expr, int] = {}
        self.output = output or print

    # ------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------

    def resolve(self, node: Expr, depth: int):
        self.locals[node] = depth

    def interpret(self, statements: List[Stmt]):
        """
        Resolve and run statements.

        Returns:
            Success(value of the last statement) or Failure(Err)
        """
        resolved = Resolver(self).resolve_all(statements)
        if not resolved:
            return resolved
        result = None
        try:
            for stmt in statements:
                result = stmt.accept(self)
        except EvaluationError as e:
            return Failure(e.error)
        except RecursionError:
            return _too_deep()
        except _Return as r:
            result = r.value
        return Success(result)

    def evaluate(self, node: Expr):
        """Evaluate a single expression in the current scope."""
        try:
            return Success(node.accept(self))
        except EvaluationError as e:
            return Failure(e.error)
        except RecursionError:
            return _too_deep()

    def call(self, fn: Function, args: List[Any]):
        """Apply a function outside of any program."""
        try:
            return Success(fn.call(self, args))
        except EvaluationError as e:
            return Failure(e.error)
        except RecursionError:
            return _too_deep()

    def execute(self, statements: List[Stmt], environment: Environment) -> Any:
        previous = self.environment
        self.environment = environment
        result = None
        try:
            for stmt in statements:
                result = stmt.accept(self)
        finally:
            self.environment = previous
        return result

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def fail(self, message: str, line: int = -1):
        raise EvaluationError(runtime_error(
            f"On line {line}, from the interpreter: {message}", line))

    def unwrap(self, result) -> Any:
        if result:
            return result.value
        raise EvaluationError(result.error)

    def numbers(self, op, *values) -> List[Any]:
        for v in values:
            if not is_number(v):
                self.fail(f"The operator “{op.lexeme}” expects numbers, "
                          f"got {format_value(v)}", op.line)
        return list(values)

    def lookup(self, node: Expr, name) -> Any:
        distance = self.locals.get(node)
        if distance is not None:
            return self.unwrap(self.environment.get_at(distance, name.lexeme))
        return self.unwrap(self.globals.get(name))

    # ------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------

    def visit_integer(self, node):
        return node.value

    def visit_float(self, node):
        return node.value

    def visit_literal(self, node):
        return node.value

    def visit_variable(self, node):
        return self.lookup(node, node.name)

    def visit_group(self, node):
        return node.inner.accept(self)

    def visit_binary(self, node):
        op = node.op
        a, b = self.numbers(op, node.left.accept(self), node.right.accept(self))
        kind = op.kind
        if kind is TokenKind.PLUS:
            return add(a, b)
        if kind is TokenKind.MINUS:
            return subtract(a, b)
        if kind is TokenKind.STAR:
            return multiply(a, b)
        if kind is TokenKind.SLASH:
            return divide(a, b)
        if kind is TokenKind.CARET:
            return power(a, b)
        if kind is TokenKind.PERCENT:
            return percent(a, b)
        if kind is TokenKind.REM:
            return remainder(a, b)
        if kind is TokenKind.MOD:
            return modulo(a, b)
        self.fail(f"Unknown operator “{op.lexeme}”", op.line)

    def visit_relation(self, node):
        op = node.op
        a = node.left.accept(self)
        b = node.right.accept(self)
        if op.kind is TokenKind.DEQ:
            return a == b
        if op.kind is TokenKind.NEQ:
            return a != b
        a, b = self.numbers(op, a, b)
        if op.kind is TokenKind.LT:
            return a < b
        if op.kind is TokenKind.GT:
            return a > b
        if op.kind is TokenKind.LEQ:
            return a <= b
        return a >= b

    def visit_logical(self, node):
        a = is_truthy(node.left.accept(self))
        b = is_truthy(node.right.accept(self))
        kind = node.op.kind
        if kind is TokenKind.AND:
            return a and b
        if kind is TokenKind.OR:
            return a or b
        if kind is TokenKind.XOR:
            return a != b
        if kind is TokenKind.NOR:
            return not (a or b)
        if kind is TokenKind.NAND:
            return not (a and b)
        return a == b

    def visit_not(self, node):
        return not is_truthy(node.operand.accept(self))

    def visit_native_call(self, node):
        args = [a.accept(self) for a in node.args]
        for v in args:
            if not is_number(v):
                self.fail(f"The function “{node.name}” expects numbers, "
                          f"got {format_value(v)}", node.line)
        out = apply_native(node.name, args)
        if out is None:
            self.fail(f"The function “{node.name}” takes 1 argument, "
                      f"but {len(args)} were given", node.line)
        return out

    def visit_fn_call(self, node):
        callee = node.callee.accept(self)
        args = [a.accept(self) for a in node.args]
        if not isinstance(callee, Function):
            self.fail("The user attempted to apply a non-function.", node.line)
        if len(args) != callee.arity:
            self.fail(f"The function “{callee.name}” takes {callee.arity} "
                      f"argument(s), but {len(args)} were given", node.line)
        return callee.call(self, args)

    def visit_vector(self, node):
        return [e.accept(self) for e in node.elements]

    def visit_matrix(self, node):
        return [row.accept(self) for row in node.rows]

    def visit_assign(self, node):
        value = node.value.accept(self)
        name = node.target.name
        distance = self.locals.get(node)
        if distance is not None:
            return self.unwrap(self.environment.assign_at(distance, name, value))
        return self.unwrap(self.globals.assign(name, value))

    # ------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------

    def visit_expr_stmt(self, node):
        return node.expression.accept(self)

    def visit_let_stmt(self, node):
        value = node.initializer.accept(self)
        return self.environment.define(node.name.lexeme, value)

    def visit_fn_stmt(self, node):
        fn = Function(node, self.environment)
        return self.environment.define(node.name.lexeme, fn)

    def visit_block_stmt(self, node):
        return self.execute(node.statements, Environment(self.environment))

    def visit_if_stmt(self, node):
        if is_truthy(node.condition.accept(self)):
            return node.then_branch.accept(self)
        if node.else_branch is not None:
            return node.else_branch.accept(self)
        return None

    def visit_while_stmt(self, node):
        result = None
        while is_truthy(node.condition.accept(self)):
            result = node.body.accept(self)
        return result

    def visit_return_stmt(self, node):
        raise _Return(node.value.accept(self))

    def visit_print_stmt(self, node):
        self.output(format_value(node.value.accept(self)))
        return None


def interpret(statements, output: Optional[Callable[[str], Any]] = None):
    """Run statements (a list or a Program) in a fresh interpreter."""
    return Interpreter(output).interpret(list(statements))


# ============================================================
# Compilation to numeric callables
# ============================================================

def _as_float(value: Any):
    if not is_number(value):
        return Failure(runtime_error(
            f"Expected a numeric result, got {format_value(value)}"))
    return Success(as_float(value))


class NumericFunction:
    """
    A compiled function of one real variable.

    Calling it returns a float or raises EvaluationError; ``apply``
    returns the same outcome as a Result.
    """

    def __init__(self, body: Callable[[float], Any], name: str = "f", parameter: str = "x"):
        self.body = body
        self.name = name
        self.parameter = parameter

    def apply(self, x: float):
        return self.body(as_float(x)).chain(_as_float)

    def __call__(self, x: float) -> float:
        result = self.apply(x)
        if result:
            return result.value
        raise EvaluationError(result.error)

    def __repr__(self) -> str:
        return f"<compiled {self.name}({self.parameter})>"


def _compile_expression(node: Expr):
    names = free_variables(node)
    if len(names) > 1:
        return Failure(runtime_error(
            f"Cannot compile an expression in more than one variable: {', '.join(names)}"))
    interpreter = Interpreter()
    resolved = Resolver(interpreter).resolve_all([ExprStmt(node)])
    if not resolved:
        return resolved
    parameter = names[0] if names else None

    def body(x: float):
        if parameter is not None:
            interpreter.globals.define(parameter, x)
        return interpreter.evaluate(node)

    logger.debug("compiled expression in %s", parameter or "no variables")
    return Success(NumericFunction(body, "f", parameter or "x"))


def _compile_statements(statements: List[Stmt]):
    interpreter = Interpreter()
    ran = interpreter.interpret(statements)
    if not ran:
        return ran
    declarations = [s for s in statements if isinstance(s, FnStmt)]
    if not declarations:
        return Failure(runtime_error("Nothing to compile: no function was defined"))
    declaration = declarations[-1]
    fn = interpreter.globals.get(declaration.name)
    if not fn or not isinstance(fn.value, Function):
        return Failure(runtime_error(
            f"“{declaration.name.lexeme}” is no longer a function"))
    fn = fn.value
    if fn.arity != 1:
        return Failure(runtime_error(
            f"A compiled function must take exactly one parameter; "
            f"“{fn.name}” takes {fn.arity}"))
    logger.debug("compiled function %s(%s)", fn.name, declaration.params[0].lexeme)
    return Success(NumericFunction(
        lambda x: interpreter.call(fn, [x]), fn.name, declaration.params[0].lexeme))


def compile(parse_result):
    """
    Compile a parse result into a NumericFunction.

    A function definition (alone or in a program) compiles to the last
    top-level function defined, which must take one parameter. A bare
    expression compiles to a function of its single free variable.

    Returns:
        Success(NumericFunction) or Failure(Err); no callable is returned
        when anything fails
    """
    def build(node):
        if isinstance(node, FnStmt):
            return _compile_statements([node])
        if isinstance(node, Program):
            return _compile_statements(node.statements)
        if isinstance(node, Expr):
            return _compile_expression(node)
        return Failure(runtime_error(f"Cannot compile a {type(node).__name__}"))
    return parse_result.chain(build)

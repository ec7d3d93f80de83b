"""
WEFT - Weaving Expressions From Text

A small expression language: a lexer and parser, a lexically scoped
interpreter, and a reducer that folds syntax trees into a canonical
algebraic form.

Quick Start:
    from weft import parse, reduce, compile

    reduce(parse("a * (b + c)")).unwrap()      # a*b+a*c
    reduce(parse("1/2 + 1")).unwrap()          # 3/2

    f = compile(parse("fn f(x) = x^2 + 1;")).unwrap()
    f(3)                                       # 10.0

Every stage returns a Result (Success or Failure), so errors are values:

    result = parse("2 + ")
    if not result:
        print(result.error)   # On line 1, while parsing an expression: ...

Language:
    1, 2.5, 1.2E3, 1_000     numbers
    x, α, $y                 symbols
    + - * / ^ % rem mod      arithmetic
    < > <= >= == !=          relations
    and or not xor nand ...  logic
    sin(x) ln(x) n!          native functions
    [1, 2]  [[1, 2], [3, 4]] vectors and matrices
    let x = 1;               declarations
    fn f(x) = x + 1;         functions
    if c then s else s       conditionals
    while c begin ... end    loops
    for (let i = 0; i < 3; i = i + 1) begin ... end
    print x;  return x;
"""

__version__ = "0.1.0"

# Result and Option
from .result import (
    Some,
    Nothing,
    Success,
    Failure,
    UnwrapError,
    some,
    success,
    failure,
    sequence,
)

# Errors
from .errors import (
    Err,
    WeftError,
    EvaluationError,
    InvalidOperatorError,
)

# Front end
from .tokens import Token, TokenKind, token
from .lexer import scan, implicit_multiplication
from .parser import Parser, parse_tokens, parse_program_tokens
from .syntax import Program, format_expr, free_variables

# Environments and evaluation
from .environment import Environment
from .interpreter import Interpreter, Function, NumericFunction, interpret

# Algebra
from .algebra import (
    Expression,
    ExpressionVisitor,
    Int,
    Rational,
    Sym,
    Sum,
    Product,
    Difference,
    Quotient,
    Power,
    Factorial,
    FunCall,
    number,
    format_expression,
    evaluate,
)
from .reducer import Reducer

# Engine
from .engine import (
    Engine,
    EngineSettings,
    parse,
    parse_program,
    reduce,
    compile,
    execute,
)

# Public API
__all__ = [
    # Version
    "__version__",
    # Result and Option
    "Some",
    "Nothing",
    "Success",
    "Failure",
    "UnwrapError",
    "some",
    "success",
    "failure",
    "sequence",
    # Errors
    "Err",
    "WeftError",
    "EvaluationError",
    "InvalidOperatorError",
    # Front end
    "Token",
    "TokenKind",
    "token",
    "scan",
    "implicit_multiplication",
    "Parser",
    "parse_tokens",
    "parse_program_tokens",
    "Program",
    "format_expr",
    "free_variables",
    # Evaluation
    "Environment",
    "Interpreter",
    "Function",
    "NumericFunction",
    "interpret",
    # Algebra
    "Expression",
    "ExpressionVisitor",
    "Int",
    "Rational",
    "Sym",
    "Sum",
    "Product",
    "Difference",
    "Quotient",
    "Power",
    "Factorial",
    "FunCall",
    "number",
    "format_expression",
    "evaluate",
    "Reducer",
    # Engine
    "Engine",
    "EngineSettings",
    "parse",
    "parse_program",
    "reduce",
    "compile",
    "execute",
]

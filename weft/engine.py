"""
Engine facade for WEFT.

One object ties the pipeline together: source text is scanned, optionally
passed through implicit multiplication, parsed, and then either reduced to
canonical algebraic form, compiled to a numeric function, or executed.

    from weft import Engine, EngineSettings

    Engine("a * (b + c)").reduce()                    # Success(a*b+a*c)
    Engine("fn f(x) = x^2;").compile().unwrap()(3)    # 9.0
    Engine("2x", EngineSettings(implicit_multiplication=False)).parse()
    # Failure(...)

Each step returns a Result, so failures at any stage flow through to the
caller untouched. The module-level functions use default settings:

    parse("1 + 2")          # Success(Binary(...))
    reduce(parse("7 / 2"))  # Success(Rational(7/2))
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from . import interpreter as _interpreter
from . import reducer as _reducer
from .interpreter import Interpreter
from .lexer import implicit_multiplication, scan
from .parser import parse_program_tokens, parse_source_tokens

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineSettings:
    """
    Configuration of the front end.

    Attributes:
        implicit_multiplication: Read ``2x`` as ``2 * x``, ``(a)(b)`` as
            ``(a) * (b)`` and so on
    """
    implicit_multiplication: bool = True


class Engine:
    """
    Runs source text through the WEFT pipeline.

    Args:
        source: Program or expression text
        settings: Front-end configuration (defaults apply when None)
    """

    def __init__(self, source: str, settings: Optional[EngineSettings] = None):
        self.source = source
        self.settings = settings or EngineSettings()

    def with_settings(self, **changes) -> 'Engine':
        """
        Replace individual settings, returning self for chaining.

        Example:
            Engine("2x").with_settings(implicit_multiplication=False).parse()
        """
        self.settings = replace(self.settings, **changes)
        return self

    def scan(self):
        """Success(list of tokens) or a lexical Failure."""
        tokens = scan(self.source)
        if self.settings.implicit_multiplication:
            tokens = tokens.map(implicit_multiplication)
        return tokens

    def parse(self):
        """Success(Expr) for a lone expression, Success(Program) otherwise."""
        out = self.scan().chain(parse_source_tokens)
        self._log("parse", out)
        return out

    def parse_program(self):
        """Success(Program), even when the source is a single expression."""
        out = self.scan().chain(parse_program_tokens)
        self._log("parse_program", out)
        return out

    def reduce(self):
        return _reducer.reduce(self.parse())

    def compile(self):
        out = _interpreter.compile(self.parse())
        self._log("compile", out)
        return out

    def execute(self, output: Optional[Callable[[str], Any]] = None,
                interpreter: Optional[Interpreter] = None):
        """
        Run the source as a program.

        Args:
            output: Receives ``print`` output (defaults to printing)
            interpreter: Interpreter to run in, for state that persists
                between calls

        Returns:
            Success(value of the last statement) or Failure(Err)
        """
        if interpreter is None:
            interpreter = Interpreter(output)
        elif output is not None:
            interpreter.output = output
        out = self.parse_program().chain(
            lambda program: interpreter.interpret(program.statements))
        self._log("execute", out)
        return out

    def _log(self, step: str, result):
        if result:
            logger.debug("%s ok: %r", step, self.source)
        else:
            logger.debug("%s failed for %r: %s", step, self.source, result.error)

    def __repr__(self) -> str:
        return f"Engine({self.source!r}, {self.settings})"


def parse(source: str):
    """Parse source text with default settings."""
    return Engine(source).parse()


def parse_program(source: str):
    """Parse source text as a list of statements with default settings."""
    return Engine(source).parse_program()


def reduce(parse_result):
    """
    Reduce a parse result to canonical algebraic form.

    Example:
        reduce(parse("a * (b + c)"))
    """
    return _reducer.reduce(parse_result)


def compile(parse_result):
    """
    Compile a parse result to a numeric function of one variable.

    Example:
        f = compile(parse("fn f(x) = x^2;")).unwrap()
    """
    return _interpreter.compile(parse_result)


def execute(source: str, output: Optional[Callable[[str], Any]] = None):
    """Run source text as a program in a fresh interpreter."""
    return Engine(source).execute(output)

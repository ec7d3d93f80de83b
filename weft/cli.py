#!/usr/bin/env python3
"""
WEFT Command-Line Interface

Provides interactive REPL, script execution, and pipe/filter modes.

Usage:
    weft                            # Start REPL
    weft program.weft               # Run a program
    weft -e "a * (b + c)"           # Reduce an expression
    weft -m eval -e "2^10"          # Evaluate an expression
    echo "x + x" | weft             # Filter mode, one line at a time

Modes:
    reduce   Print the canonical algebraic form (default)
    eval     Run the input as a program and print the last value

REPL Commands:
    :help              Show help
    :mode reduce|eval  Switch between reduction and evaluation
    :tree on|off       Also print the syntax tree
    :imul on|off       Toggle implicit multiplication (2x = 2*x)
    :env               List global bindings
    :reset             Start over with a fresh interpreter
    :quit              Exit
"""

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .algebra import format_expression
from .engine import Engine, EngineSettings
from .interpreter import Interpreter, format_value
from .reducer import reduce
from .syntax import Expr, Program, format_expr
from .tokens import NATIVE_FUNCTIONS

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

logger = logging.getLogger(__name__)

MODES = ("reduce", "eval")


class WeftCompleter:
    """Tab completer for the WEFT REPL."""

    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":mode", ":tree", ":imul", ":env", ":reset",
    ]

    ON_OFF = ["on", "off"]

    def __init__(self, repl: 'WeftREPL'):
        self.repl = repl
        self.matches: List[str] = []

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> List[str]:
        line = line.lstrip()

        if line.startswith(":mode "):
            return [m for m in MODES if m.startswith(text)]

        if line.startswith(":tree ") or line.startswith(":imul "):
            return [t for t in self.ON_OFF if t.startswith(text)]

        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        # Global names and native functions
        names = self.repl.interpreter.globals.names() + sorted(NATIVE_FUNCTIONS)
        return [n for n in names if n.startswith(text)]


def count_open(text: str) -> int:
    """
    Count unclosed groupings: ``(``, ``[`` and ``begin``.

    Returns >0 if more open than close.
    """
    depth = 0
    in_string = False
    for c in text:
        if c == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if c in "([":
            depth += 1
        elif c in ")]":
            depth -= 1

    words = re.sub(r'"[^"]*"', "", text)
    depth += len(re.findall(r"\bbegin\b", words))
    depth -= len(re.findall(r"\bend\b", words))
    return depth


class WeftREPL:
    """Interactive REPL for WEFT."""

    def __init__(self):
        self.mode = "reduce"
        self.show_tree = False
        self.settings = EngineSettings()
        self.interpreter = Interpreter(self._emit)
        self.running = True
        self.failed = False
        self.multi_line_buffer = ""
        self._printed: List[str] = []

        # Set up readline history and completion
        if HAS_READLINE:
            self.history_file = Path.home() / ".weft_history"
            try:
                readline.read_history_file(self.history_file)
            except FileNotFoundError:
                pass
            readline.set_history_length(1000)

            self.completer = WeftCompleter(self)
            readline.set_completer(self.completer.complete)
            readline.parse_and_bind("tab: complete")
            readline.set_completer_delims(" \t\n()[],;")

    def save_history(self):
        """Save readline history."""
        if HAS_READLINE:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                logger.debug("could not save history: %s", e)

    def _emit(self, text: str):
        self._printed.append(text)

    def reset(self):
        self.interpreter = Interpreter(self._emit)

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split(None, 1)
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        arg = parts[1].strip().lower() if len(parts) > 1 else ""

        if cmd == "help":
            return self.help_text()

        elif cmd in ("quit", "exit", "q"):
            self.running = False
            return None

        elif cmd == "mode":
            if arg in MODES:
                self.mode = arg
                return f"Mode set to: {self.mode}"
            elif not arg:
                return f"Mode: {self.mode}"
            else:
                return "Unknown mode. Options: reduce, eval"

        elif cmd == "tree":
            self.show_tree = self._toggle(arg, self.show_tree)
            return f"Syntax tree {'shown' if self.show_tree else 'hidden'}"

        elif cmd == "imul":
            enabled = self._toggle(arg, self.settings.implicit_multiplication)
            self.settings = EngineSettings(implicit_multiplication=enabled)
            return f"Implicit multiplication {'enabled' if enabled else 'disabled'}"

        elif cmd == "env":
            names = self.interpreter.globals.names()
            if not names:
                return "No global bindings"
            values = self.interpreter.globals.values
            return "\n".join(f"{n} = {format_value(values[n])}" for n in names)

        elif cmd == "reset":
            self.reset()
            return "Interpreter reset"

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    @staticmethod
    def _toggle(arg: str, current: bool) -> bool:
        if arg in ("on", "true", "1"):
            return True
        if arg in ("off", "false", "0"):
            return False
        return not current

    def help_text(self) -> str:
        """Return help text."""
        return """WEFT REPL Commands:
  :help              Show this help
  :mode reduce|eval  Reduce to algebraic form, or evaluate numerically
  :tree on|off       Also print the syntax tree
  :imul on|off       Toggle implicit multiplication (2x = 2*x)
  :env               List global bindings (eval mode)
  :reset             Start over with a fresh interpreter
  :quit              Exit

Input:
  a * (b + c)              Reduce:   a*b+a*c
  let x = 2; x ^ 10        Evaluate: 1024
  fn f(x) = x^2 + 1;       Define a function (eval mode)
  while c begin ... end    Blocks may span several lines
"""

    def tree_text(self, node) -> str:
        if isinstance(node, Expr):
            return f"tree: {format_expr(node)}"
        if isinstance(node, Program):
            return f"tree: program of {len(node)} statement(s)"
        return f"tree: {node!r}"

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None. Sets ``failed`` when the
        input produced an error.
        """
        self.failed = False
        line = line.strip()

        # Empty line or comment
        if not line or line.startswith("#"):
            return None

        if line.startswith(":"):
            return self.handle_command(line)

        engine = Engine(line, self.settings)
        out: List[str] = []
        if self.show_tree:
            parsed = engine.parse()
            if parsed:
                out.append(self.tree_text(parsed.value))

        if self.mode == "reduce":
            result = reduce(engine.parse()).map(format_expression)
        else:
            self._printed = []
            result = engine.execute(interpreter=self.interpreter)
            out.extend(self._printed)
            result = result.map(lambda v: None if v is None else format_value(v))

        if not result:
            self.failed = True
            out.append(f"Error: {result.error}")
        elif result.value is not None:
            out.append(result.value)
        return "\n".join(out) if out else None

    def run(self):
        """Run the REPL loop."""
        print("WEFT - Weaving Expressions From Text")
        print("Type :help for help, :quit to exit")
        print(f"Mode: {self.mode}")
        print()

        while self.running:
            try:
                prompt = "...... " if self.multi_line_buffer else "weft> "
                line = input(prompt)

                if self.multi_line_buffer:
                    self.multi_line_buffer += "\n" + line
                else:
                    self.multi_line_buffer = line

                depth = count_open(self.multi_line_buffer)
                if depth > 0:
                    continue
                elif depth < 0:
                    print("Error: Unbalanced input (too many closing delimiters)")
                    self.multi_line_buffer = ""
                    continue

                complete_input = self.multi_line_buffer
                self.multi_line_buffer = ""

                result = self.process_line(complete_input)
                if result:
                    print(result)

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                if self.multi_line_buffer:
                    print("\nInput cancelled")
                    self.multi_line_buffer = ""
                else:
                    print()
                continue

        self.save_history()


class ScriptRunner:
    """Runs WEFT programs, one-shot expressions and filters."""

    def __init__(self):
        self.repl = WeftREPL()

    def run_script(self, path: Path) -> int:
        """
        Run a program file.

        Returns:
            Exit code (0 for success)
        """
        try:
            source = path.read_text()
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 1

        # Blank out a shebang line, keeping line numbers intact
        if source.startswith("#!"):
            newline = source.find("\n")
            source = "" if newline < 0 else source[newline:]

        result = Engine(source, self.repl.settings).execute(
            output=print, interpreter=self.repl.interpreter)
        if not result:
            print(f"{path}: Error: {result.error}", file=sys.stderr)
            return 1
        return 0

    def run_expression(self, source: str) -> int:
        """
        Process a single input in the current mode.

        Returns:
            Exit code (0 for success)
        """
        result = self.repl.process_line(source)
        if result:
            print(result)
        return 1 if self.repl.failed else 0

    def run_stdin(self) -> int:
        """
        Read inputs from stdin, one per line.

        Returns:
            Exit code (0 for success)
        """
        for line in sys.stdin:
            result = self.repl.process_line(line)
            if result:
                print(result)
            if self.repl.failed:
                return 1
        return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="weft",
        description="WEFT - Weaving Expressions From Text",
        epilog="Examples:\n"
               "  weft                        Start REPL\n"
               "  weft program.weft           Run a program\n"
               "  weft -e 'a * (b + c)'       Reduce an expression\n"
               "  weft -m eval -e '2^10'      Evaluate an expression\n"
               "  echo 'x + x' | weft         Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Program file to run"
    )

    parser.add_argument(
        "-e", "--expr",
        help="Process a single input"
    )

    parser.add_argument(
        "-m", "--mode",
        default="reduce",
        choices=MODES,
        help="Reduce to algebraic form or evaluate numerically"
    )

    parser.add_argument(
        "--no-imul",
        action="store_true",
        help="Disable implicit multiplication"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log pipeline steps to stderr"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    runner = ScriptRunner()
    runner.repl.mode = args.mode
    runner.repl.settings = EngineSettings(implicit_multiplication=not args.no_imul)

    if args.script:
        sys.exit(runner.run_script(Path(args.script)))

    elif args.expr is not None:
        sys.exit(runner.run_expression(args.expr))

    elif not sys.stdin.isatty():
        sys.exit(runner.run_stdin())

    else:
        runner.repl.run()


if __name__ == "__main__":
    main()

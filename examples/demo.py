#!/usr/bin/env python3
"""
WEFT Feature Demonstration

This script walks through the major features of the WEFT library.
"""

from weft import (
    Engine, EngineSettings, Interpreter,
    parse, reduce, compile, execute,
    format_expr, format_expression,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_parsing():
    """Demonstrate parsing to a syntax tree."""
    section("Parsing")

    examples = [
        "1 + 2 * x",
        "2 ^ 3 ^ 2",
        "-a * b",
        "sin(x)! + 1",
        "[[1, 2], [3, 4]]",
    ]

    for source in examples:
        print(f"  {source:20} => {format_expr(parse(source).unwrap())}")


def demo_reduction():
    """Demonstrate reduction to canonical algebraic form."""
    section("Reduction")

    examples = [
        "2 + 3",
        "7 / 2",
        "1/2 + 1",
        "x + 3 + x + 2",
        "a * (b + c)",
        "(a + b) * c",
        "((a + b))",
        "5 - 3",
    ]

    for source in examples:
        result = reduce(parse(source))
        print(f"  {source:20} => {format_expression(result.unwrap())}")


def demo_failures():
    """Demonstrate failures as values."""
    section("Failures")

    examples = [
        "2 + ",
        "1 @ 2",
        "[1, 2] + 1",
        "1 / 0",
        "[[1, 2], [3]]",
    ]

    for source in examples:
        result = reduce(parse(source))
        print(f"  {source:20} => {result.error}")


def demo_implicit_multiplication():
    """Demonstrate the implicit multiplication setting."""
    section("Implicit Multiplication")

    for enabled in (True, False):
        engine = Engine("2x(y + 1)", EngineSettings(implicit_multiplication=enabled))
        result = engine.reduce()
        shown = format_expression(result.value) if result else result.error
        print(f"  implicit multiplication {'on ' if enabled else 'off'} => {shown}")


def demo_programs():
    """Demonstrate running programs."""
    section("Programs")

    source = """
        fn fact(n) = if n <= 1 then 1 else n * fact(n - 1);

        for (let i = 1; i <= 5; i = i + 1) begin
            print fact(i);
        end
    """
    lines = []
    execute(source, lines.append)
    print(f"  factorials: {', '.join(lines)}")

    interpreter = Interpreter(lambda text: None)
    Engine("let rate = 0.05;").execute(interpreter=interpreter)
    result = Engine("1000 * (1 + rate) ^ 10").execute(interpreter=interpreter)
    print(f"  compound interest: {result.unwrap():.2f}")


def demo_compile():
    """Demonstrate compiling to a numeric function."""
    section("Compilation")

    f = compile(parse("fn f(x) = x^2 - 2x + 1;")).unwrap()
    samples = [f(x / 2) for x in range(5)]
    print(f"  {f!r} at 0, 0.5, ..., 2: {samples}")

    g = compile(parse("sqrt(t) + 1")).unwrap()
    print(f"  {g!r} at 9: {g(9)}")


def main():
    """Run all demonstrations."""
    print("WEFT - Weaving Expressions From Text")
    print("Feature Demonstration")

    demo_parsing()
    demo_reduction()
    demo_failures()
    demo_implicit_multiplication()
    demo_programs()
    demo_compile()

    print(f"\n{'='*60}")
    print(" Demo complete!")
    print('='*60)


if __name__ == "__main__":
    main()

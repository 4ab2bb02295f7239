#!/usr/bin/env python3
"""
CLI for the minilang interpreter.

Usage:
    python -m minilang run FILE [--max-steps N] [--recover] [--trace] [--json] [--config PATH]
    python -m minilang check FILE [--recover]
    python -m minilang tokens FILE
    python -m minilang ast FILE

FILE may be '-' to read the program from standard input.

Examples:
    # Run the FizzBuzz demo
    python -m minilang run examples/fizzbuzz.mini

    # Guard against runaway loops
    python -m minilang run examples/fizzbuzz.mini --max-steps 1000

    # Report every syntax error instead of stopping at the first
    python -m minilang check broken.mini --recover

    # Machine-readable result
    python -m minilang run examples/fizzbuzz.mini --json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .config import ConfigError, InterpreterConfig, load_config
from .errors import Diagnostic, DiagnosticCollector, ScriptError
from .tracing import setup_logging


def positive_int(text: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value


def read_source(file_arg: str) -> Optional[Tuple[str, str]]:
    """Read program text; returns (source, display name) or None if missing."""
    if file_arg == '-':
        return sys.stdin.read(), "<stdin>"

    source_path = Path(file_arg)
    if not source_path.is_file():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None
    return source_path.read_text(encoding='utf-8'), file_arg


def report(diagnostics: List[Diagnostic], show_source: bool = True) -> None:
    """Print diagnostics and a summary line to stderr."""
    collector = DiagnosticCollector()
    collector.extend(diagnostics)
    print(collector.format_all(show_source), file=sys.stderr)


def load_cli_config(args) -> Optional[InterpreterConfig]:
    """Load the config file and apply command-line overrides."""
    try:
        config = load_config(getattr(args, 'config', None))
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    if getattr(args, 'max_steps', None) is not None:
        config.max_steps = args.max_steps
    if getattr(args, 'recover', False):
        config.recover = True
    if getattr(args, 'trace', False):
        config.trace = True
    return config


def cmd_run(args):
    """Execute a program, streaming printed lines to stdout."""
    from . import run_source

    config = load_cli_config(args)
    if config is None:
        return 1
    setup_logging("DEBUG" if config.trace else config.log_level)

    loaded = read_source(args.file)
    if loaded is None:
        return 1
    source, filename = loaded

    if args.json:
        result = run_source(source, filename, config)
        collector = DiagnosticCollector()
        collector.extend(result.diagnostics)
        print(json.dumps({
            "success": result.success,
            "output": result.output,
            **collector.to_json(),
            "variables": result.variables,
            "steps": result.steps,
        }, indent=2))
        return result.exit_code

    result = run_source(source, filename, config, output=print)
    if not result.success:
        report(result.diagnostics, config.show_source)
    return result.exit_code


def cmd_check(args):
    """Lex and parse a program without running it."""
    from .parser import Parser

    config = load_cli_config(args)
    if config is None:
        return 1
    setup_logging(config.log_level)

    loaded = read_source(args.file)
    if loaded is None:
        return 1
    source, filename = loaded

    parser = Parser.from_source(
        source, filename, recover=config.recover, max_errors=config.max_errors
    )
    try:
        program = parser.parse_program()
    except ScriptError as e:
        report([e.diagnostic], config.show_source)
        return 1

    diagnostics = parser.all_diagnostics()
    if diagnostics:
        report(diagnostics, config.show_source)
        return 1

    print(f"OK: {filename} - {len(program.statements)} statement(s)")
    return 0


def cmd_tokens(args):
    """Print one token per line: position, kind and lexeme."""
    from .lexer import Lexer
    from .tokens import TokenType

    loaded = read_source(args.file)
    if loaded is None:
        return 1
    source, filename = loaded

    lexer = Lexer(source, filename)
    for token in lexer:
        start = token.span.start
        print(f"{start.line}:{start.column}\t{token.type.name}\t{token.lexeme!r}")

    if lexer.diagnostics.has_errors:
        report(list(lexer.diagnostics))
        return 1
    return 0


def cmd_ast(args):
    """Print the parsed program as an indented tree."""
    from .ast import print_ast
    from .parser import parse

    loaded = read_source(args.file)
    if loaded is None:
        return 1
    source, filename = loaded

    try:
        program = parse(source, filename)
    except ScriptError as e:
        report([e.diagnostic])
        return 1

    print_ast(program)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='python -m minilang',
        description='minilang interpreter',
    )

    subparsers = parser.add_subparsers(dest='action', required=True)

    # run command
    run_parser = subparsers.add_parser('run', help='Execute a program')
    run_parser.add_argument('file', help="Program source file, or '-' for stdin")
    run_parser.add_argument('--max-steps', type=positive_int, metavar='N',
                            help='Stop with an error after N steps')
    run_parser.add_argument('--recover', action='store_true',
                            help='Report all syntax errors, not just the first')
    run_parser.add_argument('--trace', action='store_true',
                            help='Log tokens, grammar rules and statements at DEBUG level')
    run_parser.add_argument('--json', action='store_true',
                            help='Print the result as JSON')
    run_parser.add_argument('--config', metavar='PATH',
                            help='YAML config file')

    # check command
    check_parser = subparsers.add_parser('check', help='Check a program for errors')
    check_parser.add_argument('file', help="Program source file, or '-' for stdin")
    check_parser.add_argument('--recover', action='store_true',
                              help='Report all syntax errors, not just the first')
    check_parser.add_argument('--config', metavar='PATH',
                              help='YAML config file')

    # tokens command
    tokens_parser = subparsers.add_parser('tokens', help='Show the token stream')
    tokens_parser.add_argument('file', help="Program source file, or '-' for stdin")

    # ast command
    ast_parser = subparsers.add_parser('ast', help='Show the syntax tree')
    ast_parser.add_argument('file', help="Program source file, or '-' for stdin")

    args = parser.parse_args(argv)

    if args.action == 'run':
        return cmd_run(args)
    elif args.action == 'check':
        return cmd_check(args)
    elif args.action == 'tokens':
        return cmd_tokens(args)
    elif args.action == 'ast':
        return cmd_ast(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())

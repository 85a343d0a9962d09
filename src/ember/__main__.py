#!/usr/bin/env python3
"""
CLI for the Ember interpreter.

Usage:
    python -m ember [FILE]
    python -m ember run FILE [--verbose] [--json]
    python -m ember check FILE
    python -m ember tokens FILE
    python -m ember ast FILE [--tree]
    python -m ember repl

Examples:
    # Run a script; print output goes to stdout, errors to stderr
    python -m ember run examples/scopes.em

    # Report every scan/parse error without running anything
    python -m ember check examples/scopes.em

    # Show how the parser grouped each expression
    python -m ember ast examples/scopes.em

    # Interactive mode (each line is its own program)
    python -m ember
"""

import argparse
import json
import sys
from pathlib import Path

ACTIONS = ('run', 'check', 'tokens', 'ast', 'repl')


def read_source(path_str: str):
    """Read a source file, or report it missing. Returns None when missing."""
    source_path = Path(path_str)
    if not source_path.is_file():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return None
    return source_path.read_text()


def report(diagnostics, args) -> None:
    """Print diagnostics to stderr in the format the flags ask for."""
    if args.json:
        print(json.dumps(diagnostics.to_json(), indent=2), file=sys.stderr)
    elif args.verbose:
        print(diagnostics.format_all(show_source=True), file=sys.stderr)
    else:
        for line in diagnostics.summaries():
            print(line, file=sys.stderr)


def scan(source: str, args):
    """Tokenize source, reporting a scan error. Returns None on error."""
    from . import tokenize, ScanError, DiagnosticCollector

    try:
        return tokenize(source, args.file)
    except ScanError as e:
        diagnostics = DiagnosticCollector()
        diagnostics.add_error(e)
        report(diagnostics, args)
        return None


def cmd_run(args):
    """Run a source file."""
    from .runtime import run_source

    source = read_source(args.file)
    if source is None:
        return 2

    result = run_source(source, filename=args.file, max_errors=args.max_errors)
    if not result.success:
        report(result.diagnostics, args)
        return 1
    return 0


def cmd_check(args):
    """Scan and parse a source file, reporting all errors."""
    from . import parse

    source = read_source(args.file)
    if source is None:
        return 2

    tokens = scan(source, args)
    if tokens is None:
        return 1

    result = parse(tokens, args.file, source, args.max_errors)
    if result.has_errors:
        report(result.diagnostics, args)
        return 1

    print(f"{args.file}: OK ({len(result.statements)} statement(s))")
    return 0


def cmd_tokens(args):
    """Print the token list, one token per line."""
    source = read_source(args.file)
    if source is None:
        return 2

    tokens = scan(source, args)
    if tokens is None:
        return 1

    for token in tokens:
        print(f"{token.line:>4}  {token.type.name:<14} {token.lexeme}")
    return 0


def cmd_ast(args):
    """Print the parsed program."""
    from . import parse, format_ast, dump_ast

    source = read_source(args.file)
    if source is None:
        return 2

    tokens = scan(source, args)
    if tokens is None:
        return 1

    result = parse(tokens, args.file, source, args.max_errors)
    if result.has_errors:
        report(result.diagnostics, args)
        return 1

    if args.tree:
        print(dump_ast(result.statements))
    else:
        print(format_ast(result.statements))
    return 0


def cmd_repl(args):
    """Start the interactive shell."""
    from .shell import Shell

    shell = Shell(max_errors=args.max_errors)
    try:
        shell.cmdloop()
    except KeyboardInterrupt:
        print()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m ember',
        description='Ember interpreter',
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--max-errors', type=int, default=20, metavar='N',
                        help='Stop collecting parse errors after N (default 20)')
    common.add_argument('-v', '--verbose', action='store_true',
                        help='Show source lines and hints with errors')
    common.add_argument('--json', action='store_true',
                        help='Report errors as JSON')

    subparsers = parser.add_subparsers(dest='action')

    run_parser = subparsers.add_parser('run', parents=[common], help='Run a source file')
    run_parser.add_argument('file', help='Ember source file')

    check_parser = subparsers.add_parser('check', parents=[common],
                                         help='Check a source file for scan and parse errors')
    check_parser.add_argument('file', help='Ember source file')

    tokens_parser = subparsers.add_parser('tokens', parents=[common], help='Print the token list')
    tokens_parser.add_argument('file', help='Ember source file')

    ast_parser = subparsers.add_parser('ast', parents=[common], help='Print the parsed program')
    ast_parser.add_argument('file', help='Ember source file')
    ast_parser.add_argument('--tree', action='store_true',
                            help='Print a node tree instead of source form')

    subparsers.add_parser('repl', parents=[common], help='Start the interactive shell')

    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    # `ember FILE` is shorthand for `ember run FILE`; no arguments starts the shell
    if not argv:
        argv = ['repl']
    elif argv[0] not in ACTIONS and not argv[0].startswith('-'):
        argv.insert(0, 'run')

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.action == 'run':
        return cmd_run(args)
    elif args.action == 'check':
        return cmd_check(args)
    elif args.action == 'tokens':
        return cmd_tokens(args)
    elif args.action == 'ast':
        return cmd_ast(args)
    elif args.action == 'repl':
        return cmd_repl(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())

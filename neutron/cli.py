"""
neutron-check - command line front-end for the Neutron checker

Runs the same validation an editor would and prints the diagnostics.

Examples:
    neutron-check main.nt                   # human readable output
    neutron-check --format json src/*.nt    # one JSON object per file
    neutron-check --dump-ast main.nt        # print the parsed AST

Exit status: 0 when no problems were found, 1 when any file has problems,
2 when a file could not be read.

Author: xwest
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .lexer.errors import LexerError
from .parser.parser import parse
from .diagnostics import Diagnostic, DiagnosticSeverity
from .validation import ValidationSettings, validate_text


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_UNREADABLE = 2

_SEVERITY_NAMES = {
    DiagnosticSeverity.ERROR: "error",
    DiagnosticSeverity.WARNING: "warning",
    DiagnosticSeverity.INFORMATION: "info",
    DiagnosticSeverity.HINT: "hint",
}


def format_diagnostic(path: str, diagnostic: Diagnostic) -> str:
    """``path:line:col: severity: message [source]`` with 1-based line/column."""
    start = diagnostic.range.start
    severity = _SEVERITY_NAMES[diagnostic.severity]
    return (f"{path}:{start.line + 1}:{start.character + 1}: "
            f"{severity}: {diagnostic.message} [{diagnostic.source}]")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neutron-check",
        description="Check Neutron source files for syntax and type errors",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    neutron-check main.nt
    neutron-check --format json src/*.nt
    neutron-check --dump-ast main.nt
        """
    )

    parser.add_argument('files', nargs='+', metavar='FILE',
                        help='Neutron source files to check')

    # Checking options
    parser.add_argument('--no-type-check', action='store_true',
                        help='Disable checking entirely (reports nothing, like the editor setting)')
    parser.add_argument('--scoped-symbols', action='store_true',
                        help='Track variables per lexical scope instead of per document')
    parser.add_argument('--max-problems', type=int, default=1000, metavar='N',
                        help='Report at most N problems per file (default: 1000)')

    # Output options
    parser.add_argument('--format', choices=['text', 'json'], default='text',
                        help='Output format (default: text)')
    parser.add_argument('--dump-ast', action='store_true',
                        help='Print the parsed AST as JSON instead of diagnostics')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--version', action='version',
                        version=f"%(prog)s {__version__}")

    return parser


def _read_source(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        print(f"{path}: cannot read file: {e}", file=sys.stderr)
        return None


def _dump_ast(path: str, text: str) -> bool:
    """Print the AST of one file. Returns False if it could not be parsed."""
    try:
        program = parse(text, path)
    except LexerError as e:
        print(f"{path}: cannot parse: {e.message}", file=sys.stderr)
        return False
    try:
        output = json.dumps({"file": path, "ast": program.to_dict()}, indent=2)
    except RecursionError:
        # The JSON encoder recurses once per nesting level
        print(f"{path}: AST is nested too deeply to print as JSON", file=sys.stderr)
        return False
    print(output)
    return True


def _report(path: str, diagnostics: List[Diagnostic], output_format: str):
    if output_format == 'json':
        print(json.dumps({
            "file": path,
            "diagnostics": [diagnostic.to_dict() for diagnostic in diagnostics],
        }))
    else:
        for diagnostic in diagnostics:
            print(format_diagnostic(path, diagnostic))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point; returns the process exit status."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    if args.max_problems < 0:
        parser.error("--max-problems must not be negative")

    settings = ValidationSettings(
        enable_type_checking=not args.no_type_check,
        max_number_of_problems=args.max_problems,
        scoped_symbols=args.scoped_symbols,
    )

    status = EXIT_OK
    for path in args.files:
        text = _read_source(path)
        if text is None:
            status = EXIT_UNREADABLE
            continue

        if args.dump_ast:
            if not _dump_ast(path, text) and status == EXIT_OK:
                status = EXIT_PROBLEMS
            continue

        diagnostics = validate_text(text, settings, filename=path)
        _report(path, diagnostics, args.format)
        if diagnostics and status == EXIT_OK:
            status = EXIT_PROBLEMS

    logger.debug("checked %d files, exit status %d", len(args.files), status)
    return status


if __name__ == "__main__":
    sys.exit(main())

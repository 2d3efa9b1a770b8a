"""pyunifdef - command-line front end

Usage examples:
  ./pyunifdef.py -DFOO -UBAR input.c -o output.c
  ./pyunifdef.py -s input.c
  ./pyunifdef.py --project mod/progs.src --keep FEATURE_A --discard FEATURE_B
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import sys
from typing import Dict, List, Optional

from pyunifdef.errors import ResolverError
from pyunifdef.options import Settings
from pyunifdef.project import ProjectResolver, discover_options, symbols_from_decisions
from pyunifdef.resolver import Resolver
from pyunifdef.symbols import Symbol, parse_symbol_argument


def _build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pyunifdef", description="Remove conditional-compilation blocks")
    ap.add_argument("source", nargs="?", default="-", help="Input file, or - for stdin")
    ap.add_argument("-o", dest="output", help="Output file (default: stdout)")
    ap.add_argument("-D", dest="defines", action="append", default=[], metavar="SYM[=VAL]",
                    help="Symbol is defined (to 1 when no value is given)")
    ap.add_argument("-U", dest="undefs", action="append", default=[], metavar="SYM",
                    help="Symbol is undefined")
    ap.add_argument("--ignore-define", dest="ignore_defines", action="append", default=[],
                    metavar="SYM[=VAL]", help="Like -D, but comments are not parsed inside #ifdef SYM groups")
    ap.add_argument("--ignore-undef", dest="ignore_undefs", action="append", default=[],
                    metavar="SYM", help="Like -U, but comments are not parsed inside #ifdef SYM groups")
    ap.add_argument("-f", dest="define_file", help="File of #define and #undef directives")
    ap.add_argument("-B", dest="compress_blanks", action="store_true",
                    help="Compress blank lines around deleted sections")
    ap.add_argument("-b", dest="blank_placeholders", action="store_true",
                    help="Replace deleted lines with blank lines")
    ap.add_argument("-c", dest="complement", action="store_true", help="Complement: keep what would be removed")
    ap.add_argument("-d", dest="debug", action="store_true", help="Annotate the output with debugging comments")
    ap.add_argument("-e", dest="permit_obfuscated", action="store_true",
                    help="Pass through directives that span several lines")
    ap.add_argument("-K", dest="strict_logic", action="store_true",
                    help="Strict logic: || and && with an unknown operand stay unknown")
    ap.add_argument("-k", dest="force_constant_unresolved", action="store_true",
                    help="Leave #if lines with constant expressions unresolved")
    ap.add_argument("-n", dest="line_markers", action="store_true", help="Add #line directives after deleted lines")
    ap.add_argument("--line-file", dest="line_file", help="File name to put in #line directives")
    ap.add_argument("-s", dest="symbol_list", action="store_true", help="List symbols used in directives")
    ap.add_argument("-S", dest="symbol_depth", action="store_true",
                    help="List symbols used in directives with their nesting depth")
    ap.add_argument("-t", dest="passthrough_text", action="store_true",
                    help="Treat the input as plain text, without comment or string parsing")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log resolver progress")
    ap.add_argument("--project", metavar="MANIFEST", help="Resolve every file reached from a manifest")
    ap.add_argument("--config", help="Project configuration listing optional components")
    ap.add_argument("--keep", action="append", default=[], metavar="SYM", help="Project option to keep")
    ap.add_argument("--discard", action="append", default=[], metavar="SYM", help="Project option to discard")
    ap.add_argument("--ask", action="store_true", help="Ask about every project option not decided on the command line")
    return ap


def _collect_symbols(args: argparse.Namespace) -> List[Symbol]:
    symbols: List[Symbol] = []
    for text in args.defines:
        symbols.append(parse_symbol_argument(text))
    for name in args.undefs:
        symbols.append(Symbol(parse_symbol_argument(name).name, None))
    for text in args.ignore_defines:
        sym = parse_symbol_argument(text)
        symbols.append(Symbol(sym.name, sym.value, ignored=True))
    for name in args.ignore_undefs:
        symbols.append(Symbol(parse_symbol_argument(name).name, None, ignored=True))
    return symbols


def _ask(prompt: str) -> Optional[bool]:
    answer = input(f"{prompt}\n> ").strip().lower()
    if answer.startswith("y"):
        return True
    if answer.startswith("n"):
        return False
    return None


def _run_project(args: argparse.Namespace, settings: Optional[Settings], symbols: List[Symbol]) -> int:
    manifest = args.project
    config = args.config or os.path.join(os.path.dirname(os.path.abspath(manifest)), "config.qc")
    decisions: Dict[str, Optional[bool]] = {}
    for name in args.keep:
        decisions[name] = True
    for name in args.discard:
        decisions[name] = False

    if args.ask:
        try:
            with open(config, "r", encoding="utf-8") as f:
                options = discover_options(f.read())
        except OSError as e:
            print(f"Error: cannot read {config}: {e}", file=sys.stderr)
            return 1
        print("Which optional components would you like to KEEP? Enter Y to keep, "
              "N to discard, or leave blank to keep the option.")
        for opt in options:
            if opt.name not in decisions:
                decisions[opt.name] = _ask(f"{opt.name}; {opt.description}")

    for name, keep in decisions.items():
        verdict = "resolve as true" if keep is True else "resolve as false" if keep is False else "leave alone"
        print(f" - {name}: {verdict}")

    try:
        project = ProjectResolver(symbols + symbols_from_decisions(decisions), settings)
        result = project.process_manifest(manifest)
    except (OSError, ResolverError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    for e in result.errors:
        print("Error:", e, file=sys.stderr)
    print(f"Done: {len(result.processed)} processed, {len(result.removed)} removed")
    return 0 if result.success else 1


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO if args.project else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )

    try:
        symbols = _collect_symbols(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    settings = Settings(
        compress_blanks=args.compress_blanks,
        blank_placeholders=args.blank_placeholders,
        complement=args.complement,
        debug=args.debug,
        permit_obfuscated=args.permit_obfuscated,
        strict_logic=args.strict_logic,
        force_constant_unresolved=args.force_constant_unresolved,
        line_markers=args.line_markers,
        symbol_list=args.symbol_list or args.symbol_depth,
        symbol_depth=args.symbol_depth,
        passthrough_text=args.passthrough_text,
        line_file=args.line_file,
    )

    if args.project:
        # project mode keeps its own defaults unless output shaping was asked for
        return _run_project(args, settings if settings != Settings() else None, symbols)

    define_script = None
    try:
        if args.define_file:
            with open(args.define_file, "r", encoding="utf-8", newline="") as f:
                define_script = f.read()
        if args.source == "-":
            source = sys.stdin.read()
            line_file = args.line_file or "[stdin]"
        else:
            with open(args.source, "r", encoding="utf-8", newline="") as f:
                source = f.read()
            line_file = args.line_file or args.source
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if settings.line_markers and not settings.line_file:
        settings = dataclasses.replace(settings, line_file=line_file)

    try:
        result = Resolver(settings, symbols).resolve(source, define_script)
    except ResolverError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8", newline="") as f:
                f.write(result.text)
        except OSError as e:
            print(f"Error: cannot write {args.output}: {e}", file=sys.stderr)
            return 1
    else:
        sys.stdout.write(result.text)
    return 0

#!/usr/bin/env python3
"""
source-normalizer - clean up C-family source files

Usage:
    source-normalizer [OPTIONS] [PATH...]

Every line is passed through a fixed table of regular-expression rewrites:
stray carriage returns and trailing whitespace are removed, control keywords
get a space before their parenthesis (``if(`` becomes ``if (``) and braces
are separated from ``)`` and ``else``. Each output line ends with a single
newline.

With no PATH the text is read from standard input and written to standard
output in the encoding it arrived in. Otherwise each PATH is a file or a directory searched recursively;
only files with one of the extensions h, cpp, c, m, mm are considered, and
binary files are never touched.

Options:
    -b, --backup          keep the original content in <file>.bak
    -d, --debug           verbose diagnostics on stderr
    -e, --expand          convert tabs to spaces
    -u, --unexpand        convert runs of blanks ending on a tab stop to tabs
                          (--expand wins when both are given)
    -p, --preview         print the transformed files to stdout between
                          begin/end markers instead of rewriting them
    -s, --skip-variants   skip variant files such as view.ios.m or foo.orig.c
    -t, --tab-width N     tab width for --expand/--unexpand (default: 4)
    -h, --help            short help
    -m, --man             this manual page

Exit status:
    0   success
    2   invalid options
    3   a source file could not be opened or read
    4   transformed output could not be written, backed up or moved in place

Examples:
    source-normalizer < old.c > new.c
    source-normalizer --preview --expand src/
    source-normalizer --backup --unexpand -t 8 lib/ include/foo.h
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from .errors import ConfigError, NormalizerError, OK
from .models import RunOptions
from .rules import DEFAULT_TAB_WIDTH
from .walker import InputSource, process_paths, process_stream, resolve_input_source


logger = logging.getLogger("srcnorm")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="source-normalizer",
        description="Apply fixed whitespace and brace-spacing rewrites to C-family sources.",
        add_help=False,
    )
    parser.add_argument(
        "paths", nargs="*", metavar="PATH",
        help="Files or directories to rewrite (default: stdin to stdout).",
    )
    parser.add_argument("-b", "--backup", action="store_true", help="Keep a .bak copy of each rewritten file.")
    parser.add_argument("-d", "--debug", action="store_true", dest="verbose", help="Verbose diagnostics.")
    parser.add_argument("-e", "--expand", action="store_true", help="Convert tabs to spaces.")
    parser.add_argument("-u", "--unexpand", action="store_true", help="Convert blank runs ending on a tab stop to tabs.")
    parser.add_argument("-p", "--preview", action="store_true", help="Print results instead of rewriting files.")
    parser.add_argument("-s", "--skip-variants", action="store_true", help="Skip variant files such as foo.ios.m.")
    parser.add_argument(
        "-t", "--tab-width", type=int, default=DEFAULT_TAB_WIDTH, metavar="N",
        help=f"Tab width (default: {DEFAULT_TAB_WIDTH}).",
    )
    parser.add_argument("-h", "--help", action="help", default=argparse.SUPPRESS, help="Show this help and exit.")
    parser.add_argument("-m", "--man", action="store_true", help="Show the full manual page and exit.")
    return parser


def configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


def build_options(args: argparse.Namespace) -> RunOptions:
    try:
        options = RunOptions(
            tab_width=args.tab_width,
            expand=args.expand,
            unexpand=args.unexpand,
            backup=args.backup,
            preview=args.preview,
            skip_variants=args.skip_variants,
            verbose=args.verbose,
        )
    except ValidationError as e:
        raise ConfigError(f"invalid tab width {args.tab_width!r}: must be a positive integer") from e

    if options.expand and options.unexpand:
        logger.warning("both --expand and --unexpand given, using --expand")
    if options.preview and options.backup:
        logger.warning("--backup has no effect with --preview")
    return options


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.man:
        sys.stdout.write(__doc__.lstrip())
        return OK

    configure_logging(args.verbose)

    try:
        options = build_options(args)
        source = resolve_input_source(args.paths)
        logger.debug("input=%s options=%s", source.value, options.model_dump())

        if source is InputSource.STDIN:
            process_stream(sys.stdin.buffer, sys.stdout.buffer, options)
            sys.stdout.buffer.flush()
            return OK

        summary = process_paths(args.paths, options, sys.stdout)
    except NormalizerError as e:
        print(f"error: {e}", file=sys.stderr)
        return e.code

    logger.info(
        "%d files seen, %d rewritten, %d skipped",
        summary.files_seen, summary.files_changed, summary.files_skipped,
    )
    return OK


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()

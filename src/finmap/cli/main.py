from __future__ import annotations

import argparse
import builtins
import dataclasses
import logging
import os
import shutil
import sys
import textwrap
from functools import partial
from pathlib import Path
from typing import Any, NoReturn

from termcolor import colored

from finmap.cli.loader import LoadError, dump_finmap, load_finmap, parse_key
from finmap.core import Finmap, FinmapError
from finmap.core.alist import DUPLICATE_POLICIES, DuplicatePolicy
from finmap.util.asciitable import AsciiTable
from finmap.util.text import pluralize

DUPLICATES_ENV = "FINMAP_DUPLICATES"

logger = logging.getLogger(__name__)
print = partial(builtins.print, flush=True)


@dataclasses.dataclass(frozen=True)
class _GlobalOptions:
    verbosity: int
    quietness: int
    duplicates: DuplicatePolicy

    @staticmethod
    def add_to_parser(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-v",
            dest="verbosity",
            action="count",
            default=0,
            help="increase the log level (can be specified multiple times)",
        )
        parser.add_argument(
            "-q",
            dest="quietness",
            action="count",
            default=0,
            help="decrease the log level (can be specified multiple times)",
        )
        parser.add_argument(
            "-d",
            "--duplicates",
            choices=DUPLICATE_POLICIES,
            default=os.getenv(DUPLICATES_ENV) or "error",
            help=f"how to treat a key that occurs more than once in a file [env: {DUPLICATES_ENV}] "
            "[default: %(default)s]",
        )

    @classmethod
    def collect(cls, args: argparse.Namespace) -> _GlobalOptions:
        if args.duplicates not in DUPLICATE_POLICIES:
            raise ValueError(f"invalid ${DUPLICATES_ENV}: {args.duplicates!r}")
        return cls(
            verbosity=args.verbosity,
            quietness=args.quietness,
            duplicates=args.duplicates,
        )


def _get_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finmap",
        formatter_class=lambda prog: argparse.RawDescriptionHelpFormatter(prog, width=120, max_help_position=60),
        description=textwrap.dedent(
            """
            Inspect and combine finite maps stored as JSON.

            A FILE holds either an object or an array of [key, value] pairs.
            """
        ),
    )
    _GlobalOptions.add_to_parser(parser)

    subparsers = parser.add_subparsers(dest="cmd")

    show = subparsers.add_parser("show", aliases=["s"], help="print the entries of a map")
    show.add_argument("file", type=Path)

    keys = subparsers.add_parser("keys", aliases=["k"], help="print the keys of a map")
    keys.add_argument("file", type=Path)

    lookup = subparsers.add_parser("lookup", aliases=["l"], help="print the value of a key")
    lookup.add_argument("file", type=Path)
    lookup.add_argument("key", help="the key, parsed as JSON if possible")

    union = subparsers.add_parser("union", aliases=["u"], help="left-biased union of two or more maps")
    union.add_argument("files", metavar="file", type=Path, nargs="+")
    union.add_argument("--json", action="store_true", help="write the result as JSON")

    equal = subparsers.add_parser("equal", aliases=["eq"], help="test if two maps have the same entries")
    equal.add_argument("files", metavar="file", type=Path, nargs=2)

    disjoint = subparsers.add_parser("disjoint", help="test if two maps have no key in common")
    disjoint.add_argument("files", metavar="file", type=Path, nargs=2)

    return parser


def _init_logging(verbosity: int) -> None:
    if verbosity > 1:
        level = logging.DEBUG
    elif verbosity > 0:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format=f"{colored('%(levelname)-7s', 'magenta')} | {colored('%(name)-24s', 'blue')} | "
        f"{colored('%(message)s', 'cyan')}",
    )


def show(fmap: Finmap[Any, Any]) -> None:
    # Cells may take up to half of the terminal, $COLUMNS overrides the detected width.
    columns = shutil.get_terminal_size((80, 24)).columns
    table = AsciiTable(["Key", "Type", "Value"], max_cell_width=max(columns // 2, 20))
    for entry in fmap.entries():
        table.add_row(repr(entry.key), type(entry.value).__name__, repr(entry.value))
    table.print()
    print(colored(f"{len(fmap)} {pluralize('entry', fmap)}", attrs=["bold"]))


def _print_bool(value: bool) -> int:
    print(colored("true", "green") if value else colored("false", "red"))
    return 0 if value else 1


def _dispatch(args: argparse.Namespace, options: _GlobalOptions) -> int:
    if args.cmd in ("show", "s"):
        show(load_finmap(args.file, options.duplicates))
        return 0

    if args.cmd in ("keys", "k"):
        fmap = load_finmap(args.file, options.duplicates)
        for entry in fmap.entries():
            print(repr(entry.key))
        return 0

    if args.cmd in ("lookup", "l"):
        fmap = load_finmap(args.file, options.duplicates)
        key = parse_key(args.key)
        if not fmap.member(key):
            logger.error("Key %r is not in %s", key, args.file)
            return 1
        print(repr(fmap[key]))
        return 0

    if args.cmd in ("union", "u"):
        result = Finmap.empty()
        for path in args.files:
            result = result | load_finmap(path, options.duplicates)
        if args.json:
            dump_finmap(result, sys.stdout)
        else:
            show(result)
        return 0

    if args.cmd in ("equal", "eq"):
        left, right = (load_finmap(path, options.duplicates) for path in args.files)
        return _print_bool(left == right)

    if args.cmd == "disjoint":
        left, right = (load_finmap(path, options.duplicates) for path in args.files)
        return _print_bool(left.disjoint_keys(right))

    raise AssertionError(args.cmd)


def main(argv: list[str] | None = None) -> NoReturn:
    parser = _get_argument_parser()
    args = parser.parse_args(argv)
    try:
        global_options = _GlobalOptions.collect(args)
    except ValueError as exc:
        parser.error(str(exc))
    _init_logging(global_options.verbosity - global_options.quietness)

    if not args.cmd:
        parser.print_usage()
        sys.exit(0)

    try:
        sys.exit(_dispatch(args, global_options))
    except (LoadError, FinmapError) as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()

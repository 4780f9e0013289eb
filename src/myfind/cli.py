from __future__ import annotations

import contextlib
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from .debug import Debug, debug_help, eprint, parse_debug
from .errors import FindError, UsageError
from .metadata import TYPE_CODES, resolve_group, resolve_user
from .pipeline import Pipeline
from .steps import (
    GroupMatch,
    NameMatch,
    NoGroup,
    NoOwner,
    OwnerMatch,
    PrintListing,
    PrintPath,
    Step,
    TypeMatch,
)
from .walk import MAX_PATH_LENGTH, walk

PROG = "myfind"
VERSION = f"{PROG} 0.1.0"

HELP_TEXT = f"""\
Usage: {PROG} [path] [expression]

Default path is the current directory; default expression is -print.
Steps are evaluated left to right. A failing test stops the actions that
follow it for the current entry; directories are always descended into.

Tests:
      -user NAME|UID   -group NAME|GID   -name PATTERN   -type [bcdpfls]
      -nouser          -nogroup

Actions:
      -print           -ls

Other options:
      -D CATS          debug output on stderr (-D help lists categories)
      --help           display this help and exit
      --version        output version information and exit
"""


@dataclass(frozen=True)
class Options:
    start: str = "."
    debug: frozenset[str] = field(default_factory=frozenset)
    debug_help: bool = False


class Tokens:
    def __init__(self, items: Sequence[str]):
        self.items = list(items)
        self.i = 0

    def peek(self) -> str | None:
        if self.i < len(self.items):
            return self.items[self.i]
        return None

    def next(self) -> str | None:
        if self.i < len(self.items):
            v = self.items[self.i]
            self.i += 1
            return v
        return None

    def argument(self, flag: str) -> str:
        v = self.next()
        if v is None:
            raise UsageError(f"no argument provided for {flag}")
        return v


def _type_step(code: str) -> TypeMatch:
    if len(code) != 1 or code not in TYPE_CODES:
        raise UsageError(f"unknown argument to -type: {code}")
    return TypeMatch(code)


def parse_args(argv: Sequence[str]) -> tuple[Options, Pipeline]:
    """Translate a command line into the start path and the step pipeline.

    Only the first argument may be a path. Every later word must be a flag
    or the argument of the flag right before it.
    """
    tokens = Tokens(argv)
    start = "."
    debug: set[str] = set()
    show_debug_help = False
    steps: list[Step] = []

    first = tokens.peek()
    if first is not None and not first.startswith("-"):
        start = first
        tokens.next()

    while (tok := tokens.next()) is not None:
        if tok == "-user":
            text = tokens.argument(tok)
            steps.append(OwnerMatch(text, resolve_user(text)))
        elif tok == "-group":
            text = tokens.argument(tok)
            steps.append(GroupMatch(text, resolve_group(text)))
        elif tok == "-name":
            steps.append(NameMatch(tokens.argument(tok)))
        elif tok == "-type":
            steps.append(_type_step(tokens.argument(tok)))
        elif tok == "-nouser":
            steps.append(NoOwner())
        elif tok == "-nogroup":
            steps.append(NoGroup())
        elif tok == "-print":
            steps.append(PrintPath())
        elif tok == "-ls":
            steps.append(PrintListing())
        elif tok == "-D":
            value = tokens.argument(tok)
            if value == "help":
                show_debug_help = True
            else:
                debug |= parse_debug(value)
        else:
            raise UsageError(f"{tok} is not a valid command")

    opts = Options(start=start, debug=frozenset(debug), debug_help=show_debug_help)
    return opts, Pipeline.build(steps)


def _raw_bytes_stdout() -> None:
    # names that are not valid in the locale come back from os.scandir as
    # surrogate escapes; write them out as the original bytes
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(errors="surrogateescape")


def main(argv: Sequence[str] | None = None) -> int:
    _raw_bytes_stdout()
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    if argv == ["--help"]:
        print(HELP_TEXT, end="")
        return 0
    if argv == ["--version"]:
        print(VERSION)
        return 0

    try:
        opts, pipeline = parse_args(argv)
    except FindError as e:
        eprint(f"{PROG}: {e}")
        return e.exit_code

    if opts.debug_help:
        print(debug_help())
        return 0

    debug = Debug(set(opts.debug))
    debug.log("tree", f"start={opts.start!r} pipeline: {pipeline.describe()}")

    # two frames per directory level, one level per two path bytes at most
    sys.setrecursionlimit(max(sys.getrecursionlimit(), MAX_PATH_LENGTH + 200))

    try:
        walk(opts.start, pipeline, out=sys.stdout, debug=debug)
        sys.stdout.flush()
    except FindError as e:
        with contextlib.suppress(Exception):
            sys.stdout.flush()
        eprint(f"{PROG}: {e}")
        return e.exit_code
    except BrokenPipeError:
        with contextlib.suppress(Exception):
            sys.stdout.close()
        return 0
    except KeyboardInterrupt:
        return 130

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

from __future__ import annotations

import os
import sys
from typing import TextIO

from .debug import Debug
from .errors import PathTooLongError, failure_message, os_failure
from .metadata import fetch
from .pipeline import Pipeline

MAX_PATH_LENGTH = 4096


def join_path(parent: str, name: str, limit: int = MAX_PATH_LENGTH) -> str:
    path = os.path.join(parent, name)
    if len(os.fsencode(path)) >= limit:
        raise PathTooLongError(path, limit)
    return path


class Walker:
    """Depth-first walk that feeds every entry through a pipeline.

    Filters decide what is acted upon, never what is descended into: every
    directory that can be opened is walked whatever the pipeline returned.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        out: TextIO | None = None,
        debug: Debug | None = None,
        max_path_length: int = MAX_PATH_LENGTH,
    ) -> None:
        self.pipeline = pipeline
        self.out = out if out is not None else sys.stdout
        self.debug = debug or Debug()
        self.max_path_length = max_path_length
        self.visited = 0

    def _report(self, operation: str, path: str, err: OSError) -> None:
        self.out.write(failure_message(operation, path, err) + "\n")

    def visit_entry(self, path: str) -> None:
        try:
            meta = fetch(path)
        except PermissionError as e:
            self._report("stat", path, e)
            return
        self.visited += 1
        self.debug.log("stat", f"{path} mode={meta.mode:o} uid={meta.uid}")

        self.pipeline.evaluate(meta, self.out)
        if meta.is_dir:
            self.visit_directory(path)

    def visit_directory(self, path: str) -> None:
        try:
            with os.scandir(path) as it:
                # read fully so the handle is closed before descending
                names = [entry.name for entry in it]
        except PermissionError as e:
            self._report("opendir", path, e)
            return
        except OSError as e:
            raise os_failure("opendir", path, e) from e
        self.debug.log("search", f"{path}: {len(names)} entries")

        for name in names:
            # scandir already omits them
            if name in (".", ".."):
                continue
            self.visit_entry(join_path(path, name, self.max_path_length))


def walk(
    start: str,
    pipeline: Pipeline,
    out: TextIO | None = None,
    debug: Debug | None = None,
) -> int:
    """Walk ``start`` and return the number of entries visited."""
    walker = Walker(pipeline, out=out, debug=debug)
    walker.visit_entry(start)
    return walker.visited

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

from .errors import UsageError

CATEGORIES = {
    "search": "directories opened and how many entries they held",
    "stat": "every metadata fetch",
    "tree": "the step pipeline built from the command line",
    "all": "everything above",
}


def eprint(*args: Any, **kwargs: Any) -> None:
    print(*args, file=sys.stderr, **kwargs)


@dataclass
class Debug:
    cats: set[str] = field(default_factory=set)

    def on(self, cat: str) -> bool:
        return "all" in self.cats or cat in self.cats

    def log(self, cat: str, msg: str) -> None:
        if self.on(cat):
            eprint(f"[DEBUG:{cat}] {msg}")


def parse_debug(spec: str) -> set[str]:
    cats = {c.strip() for c in spec.split(",") if c.strip()}
    unknown = sorted(cats - CATEGORIES.keys())
    if unknown:
        raise UsageError(f"unknown debug option: {', '.join(unknown)}")
    return cats


def debug_help() -> str:
    return "\n".join(f"{name:<8} {text}" for name, text in CATEGORIES.items())

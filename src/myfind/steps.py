from __future__ import annotations

import fnmatch
import os
import stat
import time
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, TextIO

from .metadata import EntryMetadata, group_name, user_name


class StepKind(Enum):
    PREDICATE = "predicate"
    ACTION = "action"


@dataclass(frozen=True)
class Step:
    kind: ClassVar[StepKind]
    flag: ClassVar[str]

    @property
    def argument(self) -> str | None:
        return None

    def describe(self) -> str:
        arg = self.argument
        return self.flag if arg is None else f"{self.flag} {arg}"


class Predicate(Step):
    kind = StepKind.PREDICATE

    def test(self, meta: EntryMetadata) -> bool:
        raise NotImplementedError


class Action(Step):
    kind = StepKind.ACTION

    def run(self, meta: EntryMetadata, out: TextIO) -> None:
        raise NotImplementedError


# ------------------------- Predicates -------------------------


@dataclass(frozen=True)
class OwnerMatch(Predicate):
    flag = "-user"
    text: str
    uid: int

    @property
    def argument(self) -> str:
        return self.text

    def test(self, meta: EntryMetadata) -> bool:
        return meta.uid == self.uid


@dataclass(frozen=True)
class GroupMatch(Predicate):
    flag = "-group"
    text: str
    gid: int

    @property
    def argument(self) -> str:
        return self.text

    def test(self, meta: EntryMetadata) -> bool:
        return meta.gid == self.gid


def base_name(path: str) -> str:
    return os.path.basename(path.rstrip("/")) or path


@dataclass(frozen=True)
class NameMatch(Predicate):
    """Glob against the last path component only.

    fnmatch has no escape character, so a backslash matches itself.
    """

    flag = "-name"
    pattern: str

    @property
    def argument(self) -> str:
        return self.pattern

    def test(self, meta: EntryMetadata) -> bool:
        return fnmatch.fnmatchcase(base_name(meta.path), self.pattern)


@dataclass(frozen=True)
class TypeMatch(Predicate):
    flag = "-type"
    code: str  # one of metadata.TYPE_CODES

    @property
    def argument(self) -> str:
        return self.code

    def test(self, meta: EntryMetadata) -> bool:
        return meta.type_code == self.code


@dataclass(frozen=True)
class NoOwner(Predicate):
    flag = "-nouser"

    def test(self, meta: EntryMetadata) -> bool:
        return user_name(meta.uid) is None


@dataclass(frozen=True)
class NoGroup(Predicate):
    flag = "-nogroup"

    def test(self, meta: EntryMetadata) -> bool:
        return group_name(meta.gid) is None


# ------------------------- Actions -------------------------


@dataclass(frozen=True)
class PrintPath(Action):
    flag = "-print"

    def run(self, meta: EntryMetadata, out: TextIO) -> None:
        out.write(meta.path + "\n")


_PERM_BITS = (
    (stat.S_IRUSR, "r"), (stat.S_IWUSR, "w"), (stat.S_IXUSR, "x"),
    (stat.S_IRGRP, "r"), (stat.S_IWGRP, "w"), (stat.S_IXGRP, "x"),
    (stat.S_IROTH, "r"), (stat.S_IWOTH, "w"), (stat.S_IXOTH, "x"),
)


def format_permissions(mode: int) -> str:
    # setuid/setgid/sticky are not shown
    head = "d" if stat.S_ISDIR(mode) else "-"
    return head + "".join(ch if mode & bit else "-" for bit, ch in _PERM_BITS)


def format_mtime(mtime: float) -> str:
    t = time.localtime(mtime)
    return f"{time.strftime('%b', t)} {t.tm_mday:2d} {time.strftime('%H:%M', t)}"


def format_ls_line(meta: EntryMetadata) -> str:
    user = user_name(meta.uid) or str(meta.uid)
    group = group_name(meta.gid) or str(meta.gid)
    return (
        f"{meta.ino:10d}"
        f"{meta.blocks // 2:7d}"
        f"{format_permissions(meta.mode):>11}"
        f"{meta.nlink:4d}"
        f"{user:>11}"
        f"{group:>11}"
        f"{meta.size:10d}"
        f"{format_mtime(meta.mtime):>13}"
        f" {meta.path}"
    )


@dataclass(frozen=True)
class PrintListing(Action):
    flag = "-ls"

    def run(self, meta: EntryMetadata, out: TextIO) -> None:
        out.write(format_ls_line(meta) + "\n")

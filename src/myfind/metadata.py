"""Per-entry filesystem metadata and user/group database lookups."""

from __future__ import annotations

import grp
import os
import pwd
import stat
from dataclasses import dataclass

from .errors import UsageError, os_failure

_TYPE_CODES = (
    (stat.S_ISBLK, "b"),
    (stat.S_ISCHR, "c"),
    (stat.S_ISDIR, "d"),
    (stat.S_ISFIFO, "p"),
    (stat.S_ISREG, "f"),
    (stat.S_ISLNK, "l"),
    (stat.S_ISSOCK, "s"),
)

TYPE_CODES = frozenset(code for _, code in _TYPE_CODES)


@dataclass(frozen=True)
class EntryMetadata:
    path: str
    mode: int
    ino: int = 0
    nlink: int = 1
    uid: int = 0
    gid: int = 0
    size: int = 0
    blocks: int = 0
    mtime: float = 0.0

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> EntryMetadata:
        return cls(
            path=path,
            mode=st.st_mode,
            ino=st.st_ino,
            nlink=st.st_nlink,
            uid=st.st_uid,
            gid=st.st_gid,
            size=st.st_size,
            blocks=getattr(st, "st_blocks", 0),
            mtime=st.st_mtime,
        )

    @property
    def type_code(self) -> str:
        for check, code in _TYPE_CODES:
            if check(self.mode):
                return code
        return "?"

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.mode)


def fetch(path: str) -> EntryMetadata:
    """Return a fresh lstat() snapshot of ``path``.

    Symlinks are reported as links, never as their target. PermissionError is
    left to the caller, which reports it and moves on; every other OSError is
    fatal.
    """
    try:
        st = os.lstat(path)
    except PermissionError:
        raise
    except OSError as e:
        raise os_failure("stat", path, e) from e
    return EntryMetadata.from_stat(path, st)


def user_name(uid: int) -> str | None:
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


def group_name(gid: int) -> str | None:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return None


def _is_numeric(text: str) -> bool:
    return bool(text) and all("0" <= ch <= "9" for ch in text)


def _parse_id(text: str, what: str) -> int:
    value = int(text)
    # zero is indistinguishable from a failed conversion
    if value == 0:
        raise UsageError(f"failed converting {what} ID '{text}'")
    return value


def resolve_user(text: str) -> int:
    """Map a ``-user`` argument to a uid. Unknown names are fatal."""
    if _is_numeric(text):
        return _parse_id(text, "user")
    try:
        return pwd.getpwnam(text).pw_uid
    except KeyError:
        raise UsageError(f"user '{text}' does not exist") from None


def resolve_group(text: str) -> int:
    if _is_numeric(text):
        return _parse_id(text, "group")
    try:
        return grp.getgrnam(text).gr_gid
    except KeyError:
        raise UsageError(f"group '{text}' does not exist") from None

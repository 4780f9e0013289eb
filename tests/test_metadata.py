from __future__ import annotations

import errno
import grp
import os
import pwd
from pathlib import Path

import pytest

from myfind.errors import FindError, UsageError
from myfind.metadata import (
    fetch,
    group_name,
    resolve_group,
    resolve_user,
    user_name,
)


def touch(p: Path, data: bytes = b"") -> None:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)


def test_fetch_regular_file(tmp_path: Path):
    f = tmp_path / "f"
    touch(f, b"hello")
    m = fetch(str(f))
    st = os.lstat(f)
    assert m.path == str(f)
    assert m.type_code == "f"
    assert not m.is_dir
    assert m.size == 5
    assert (m.ino, m.uid, m.gid, m.nlink) == (st.st_ino, st.st_uid, st.st_gid, 1)


def test_fetch_does_not_follow_symlinks(tmp_path: Path):
    (tmp_path / "d").mkdir()
    link = tmp_path / "link"
    try:
        link.symlink_to(tmp_path / "d")
    except OSError:
        pytest.skip("symlink not supported")
    assert fetch(str(tmp_path / "d")).type_code == "d"
    m = fetch(str(link))
    assert m.type_code == "l"
    assert not m.is_dir


def test_fetch_fifo(tmp_path: Path):
    fifo = tmp_path / "pipe"
    os.mkfifo(fifo)
    assert fetch(str(fifo)).type_code == "p"


def test_fetch_missing_is_fatal(tmp_path: Path):
    missing = str(tmp_path / "nope")
    with pytest.raises(FindError) as exc:
        fetch(missing)
    assert f'stat("{missing}") failed' in str(exc.value)
    assert os.strerror(errno.ENOENT) in str(exc.value)


def test_fetch_permission_denied_propagates(monkeypatch):
    def denied(path, *args, **kwargs):
        raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)

    monkeypatch.setattr(os, "lstat", denied)
    with pytest.raises(PermissionError):
        fetch("/anything")


def test_name_lookups(monkeypatch):
    me = os.getuid()
    assert user_name(me) == pwd.getpwuid(me).pw_name
    assert group_name(os.getgid()) == grp.getgrgid(os.getgid()).gr_name

    def missing(_id: int):
        raise KeyError(_id)

    monkeypatch.setattr(pwd, "getpwuid", missing)
    monkeypatch.setattr(grp, "getgrgid", missing)
    assert user_name(4242) is None
    assert group_name(4242) is None


def test_resolve_user():
    me = pwd.getpwuid(os.getuid())
    assert resolve_user(me.pw_name) == me.pw_uid
    assert resolve_user("4242") == 4242
    with pytest.raises(UsageError, match="does not exist"):
        resolve_user("nonexistentuser")
    with pytest.raises(UsageError, match="converting"):
        resolve_user("0")
    with pytest.raises(UsageError):
        resolve_user("")


def test_resolve_group():
    g = grp.getgrgid(os.getgid())
    assert resolve_group(g.gr_name) == g.gr_gid
    assert resolve_group("77") == 77
    with pytest.raises(UsageError, match="does not exist"):
        resolve_group("nonexistentgroup")
    with pytest.raises(UsageError):
        resolve_group("000")

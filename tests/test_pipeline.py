from __future__ import annotations

import io
import stat
from dataclasses import dataclass

from myfind.metadata import EntryMetadata
from myfind.pipeline import Pipeline
from myfind.steps import NameMatch, Predicate, PrintListing, PrintPath, TypeMatch

FILE = EntryMetadata(path="./a.txt", mode=stat.S_IFREG | 0o644)


@dataclass(frozen=True)
class Explodes(Predicate):
    flag = "-explode"

    def test(self, meta: EntryMetadata) -> bool:
        raise AssertionError("evaluated after the chain already failed")


def test_build_appends_default_print():
    assert Pipeline.build([]).steps == (PrintPath(),)
    assert Pipeline.build([TypeMatch("f")]).steps == (TypeMatch("f"), PrintPath())


def test_build_keeps_explicit_actions_and_order():
    given = [NameMatch("*.py"), PrintListing(), TypeMatch("f")]
    assert Pipeline.build(given).steps == tuple(given)


def test_failing_predicate_gates_later_actions():
    out = io.StringIO()
    pipe = Pipeline.build([PrintPath(), TypeMatch("d"), PrintPath()])
    assert pipe.evaluate(FILE, out) is False
    assert out.getvalue() == "./a.txt\n"


def test_all_predicates_pass():
    out = io.StringIO()
    pipe = Pipeline.build([TypeMatch("f"), NameMatch("*.txt"), PrintPath(), PrintPath()])
    assert pipe.evaluate(FILE, out) is True
    assert out.getvalue() == "./a.txt\n./a.txt\n"


def test_stops_after_first_failure():
    out = io.StringIO()
    pipe = Pipeline.build([TypeMatch("d"), Explodes(), PrintPath()])
    assert pipe.evaluate(FILE, out) is False
    assert out.getvalue() == ""


def test_describe():
    pipe = Pipeline.build([NameMatch("*.c")])
    assert pipe.describe() == "-name *.c -print"

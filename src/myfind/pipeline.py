from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TextIO

from .metadata import EntryMetadata
from .steps import Action, Predicate, PrintPath, Step, StepKind


@dataclass(frozen=True)
class Pipeline:
    """Ordered tests and actions, evaluated in command-line order."""

    steps: tuple[Step, ...] = ()

    @classmethod
    def build(cls, steps: Iterable[Step]) -> Pipeline:
        """Freeze ``steps``, appending ``-print`` when no action was given."""
        steps = tuple(steps)
        if not any(s.kind is StepKind.ACTION for s in steps):
            steps += (PrintPath(),)
        return cls(steps)

    def evaluate(self, meta: EntryMetadata, out: TextIO) -> bool:
        """Run every step against one entry and return the final verdict.

        A failing predicate turns the accumulator false; actions reached after
        that point do not fire. Predicates are pure, so once the accumulator
        is false the rest of the chain is skipped.
        """
        for step in self.steps:
            if isinstance(step, Predicate):
                if not step.test(meta):
                    return False
            elif isinstance(step, Action):
                step.run(meta, out)
        return True

    def describe(self) -> str:
        return " ".join(s.describe() for s in self.steps)

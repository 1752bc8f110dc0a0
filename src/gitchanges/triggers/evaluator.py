"""Trigger evaluation — each trigger is a saved ``Diff.filter`` query."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from gitchanges.config.schema import TriggerConfig
from gitchanges.git.models import Diff


@dataclass(frozen=True)
class TriggerResult:
    name: str
    description: str
    changes: Diff

    @property
    def fired(self) -> bool:
        return self.changes.size() > 0


def evaluate_one(diff: Diff, trigger: TriggerConfig) -> TriggerResult:
    return TriggerResult(
        name=trigger.name,
        description=trigger.description,
        changes=diff.filter(trigger.paths or None, trigger.statuses or None),
    )


def evaluate(diff: Diff, triggers: Iterable[TriggerConfig]) -> List[TriggerResult]:
    """Evaluate *triggers* in order against *diff*."""
    return [evaluate_one(diff, t) for t in triggers]

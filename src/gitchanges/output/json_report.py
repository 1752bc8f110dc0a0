"""JSON reporter for CI pipelines."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from gitchanges.git.models import Diff, Match, Status, status_label
from gitchanges.triggers import TriggerResult

REPORT_VERSION = "1.0"


def summary(diff: Diff) -> Dict[str, int]:
    """Count entries per status kind (raw codes are counted under ``other``)."""
    counts = {s.name.lower(): 0 for s in Status}
    counts["other"] = 0
    for status in diff.statuses():
        counts[status_label(status)] += 1
    return counts


def _changes(diff: Diff) -> List[Dict[str, str]]:
    return [
        {"path": path, "status": str(status), "kind": status_label(status)}
        for path, status in diff
    ]


def to_dict(
    diff: Diff,
    *,
    base: Optional[str] = None,
    head: Optional[str] = None,
) -> Dict[str, Any]:
    """Convert a Diff to a JSON-serialisable dict."""
    return {
        "version": REPORT_VERSION,
        "base": base,
        "head": head,
        "total": diff.size(),
        "summary": summary(diff),
        "changes": _changes(diff),
    }


def match_to_dict(patterns: List[str], match: Match) -> Dict[str, Any]:
    return {
        "version": REPORT_VERSION,
        "patterns": list(patterns),
        "match": {s.name.lower(): getattr(match, s.name.lower()) for s in Status},
        "any": match.any,
    }


def triggers_to_dict(results: List[TriggerResult]) -> Dict[str, Any]:
    return {
        "version": REPORT_VERSION,
        "triggers": [
            {
                "name": r.name,
                "description": r.description,
                "fired": r.fired,
                "changes": _changes(r.changes),
            }
            for r in results
        ],
    }


def render(data: Dict[str, Any]) -> str:
    """Return formatted JSON string."""
    return json.dumps(data, indent=2)

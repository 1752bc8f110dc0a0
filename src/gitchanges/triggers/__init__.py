"""Named change triggers evaluated against a Diff."""

from gitchanges.triggers.evaluator import TriggerResult, evaluate, evaluate_one

__all__ = ["TriggerResult", "evaluate", "evaluate_one"]

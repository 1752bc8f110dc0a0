"""Tests for trigger evaluation."""

from gitchanges.config.schema import TriggerConfig
from gitchanges.git.models import Diff
from gitchanges.triggers import evaluate, evaluate_one


def _diff() -> Diff:
    return Diff([
        ("schema/user.json", "A"),
        ("schema/order.json", "D"),
        ("src/app.py", "M"),
        ("README.md", "M"),
    ])


def test_fires_on_matching_status_and_path():
    result = evaluate_one(
        _diff(), TriggerConfig(name="codegen", paths=["schema/**"], statuses=["A", "M"])
    )
    assert result.fired
    assert list(result.changes.paths()) == ["schema/user.json"]


def test_does_not_fire():
    result = evaluate_one(
        _diff(), TriggerConfig(name="docs", paths=["docs/**"])
    )
    assert not result.fired
    assert result.changes.size() == 0


def test_empty_selectors_match_everything():
    result = evaluate_one(_diff(), TriggerConfig(name="any"))
    assert result.changes == _diff()


def test_status_names():
    result = evaluate_one(_diff(), TriggerConfig(name="gone", statuses=["deleted"]))
    assert list(result.changes.paths()) == ["schema/order.json"]


def test_order_preserved():
    triggers = [
        TriggerConfig(name="b", paths=["src/**"], description="source"),
        TriggerConfig(name="a", paths=["*.md"]),
    ]
    results = evaluate(_diff(), triggers)
    assert [r.name for r in results] == ["b", "a"]
    assert results[0].description == "source"
    assert all(r.fired for r in results)

"""YAML reporter — same document as the JSON reporter."""

from __future__ import annotations

from typing import Any, Dict

import yaml


def render(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)

"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

OutputFormat = Literal["terminal", "json", "yaml"]

OUTPUT_FORMATS = ("terminal", "json", "yaml")


@dataclass
class DiffConfig:
    base: Optional[str] = None
    head: Optional[str] = None
    paths: List[str] = field(default_factory=list)  # pathspec handed to git
    timeout: float = 0  # seconds; 0 = wait forever
    fallback_to_first_commit: bool = False

    @property
    def timeout_or_none(self) -> Optional[float]:
        return self.timeout if self.timeout and self.timeout > 0 else None


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_summary: bool = True


@dataclass
class TriggerConfig:
    """A named question: did any of *paths* change with one of *statuses*?"""

    name: str
    paths: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)  # empty = any status
    description: str = ""


@dataclass
class GitChangesConfig:
    version: str = "1.0"
    diff: DiffConfig = field(default_factory=DiffConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    triggers: Dict[str, TriggerConfig] = field(default_factory=dict)

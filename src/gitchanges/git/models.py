"""Data models for change-list results — status taxonomy, Diff, Match."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    Dict,
    Iterable,
    Iterator,
    Mapping,
    Optional,
    Tuple,
    Union,
)

from gitchanges.git.matcher import compile_matcher, to_list


class Status(str, Enum):
    """Named change kinds emitted by ``git diff --name-status``."""

    ADDED = "A"
    CHANGED = "C"
    DELETED = "D"
    MODIFIED = "M"
    RENAMED = "R"
    UNKNOWN = "X"

    def __str__(self) -> str:
        return self.value


# A status is either a named member or a raw one-letter code git emits
# without a named kind here (T type change, U unmerged, B broken pair).
StatusLike = Union[Status, str]
Path = str

_BY_NAME: Dict[str, Status] = {s.name.lower(): s for s in Status}


def coerce_status(value: StatusLike) -> StatusLike:
    """Normalise *value* to a ``Status`` member or a raw one-letter code.

    Accepts a member, a code (``"A"``) or a kind name (``"added"``).
    Raises ``ValueError`` for anything else.
    """
    if isinstance(value, Status):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Invalid status: {value!r}")
    try:
        return Status(value)
    except ValueError:
        pass
    named = _BY_NAME.get(value.strip().lower())
    if named is not None:
        return named
    if len(value) == 1 and "A" <= value <= "Z":
        return value
    raise ValueError(f"Invalid status: {value!r}")


def status_label(status: StatusLike) -> str:
    """Human name of a status: ``added``, ``modified``… or ``other``."""
    if isinstance(status, Status):
        return status.name.lower()
    try:
        return Status(status).name.lower()
    except ValueError:
        return "other"


@dataclass(frozen=True)
class Match:
    """Which status kinds occur among the paths selected by a glob."""

    added: bool = False
    changed: bool = False
    deleted: bool = False
    modified: bool = False
    renamed: bool = False
    unknown: bool = False

    @property
    def any(self) -> bool:
        return (
            self.added or self.changed or self.deleted
            or self.modified or self.renamed or self.unknown
        )

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[Tuple[Path, StatusLike]],
        path_or_paths: Union[str, Iterable[str]],
    ) -> "Match":
        matcher = compile_matcher(path_or_paths)
        seen = {status for path, status in entries if matcher(path)}
        return cls(**{
            status.name.lower(): status in seen for status in Status
        })


class Diff:
    """An immutable, ordered mapping of path → status.

    Iterating yields ``(path, status)`` pairs in the order git reported them::

        diff = Diff([("schema/user.json", "A"), ("README.md", "M")])
        if diff.contains("schema/**", [Status.ADDED, Status.MODIFIED]):
            regenerate()
    """

    __slots__ = ("_entries",)

    def __init__(
        self,
        entries: Union[Mapping[Path, StatusLike], Iterable[Tuple[Path, StatusLike]], None] = None,
    ) -> None:
        items = entries.items() if isinstance(entries, Mapping) else (entries or ())
        store: Dict[Path, StatusLike] = {}
        for path, status in items:
            store[path] = coerce_status(status)
        self._entries = store

    # ---- container protocol ----

    def __iter__(self) -> Iterator[Tuple[Path, StatusLike]]:
        return iter(self._entries.items())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Diff):
            return NotImplemented
        return list(self._entries.items()) == list(other._entries.items())

    def __hash__(self) -> int:
        return hash(tuple(self._entries.items()))

    def __repr__(self) -> str:
        body = ", ".join(f"{p!r}: {str(s)!r}" for p, s in self._entries.items())
        return f"Diff({{{body}}})"

    # ---- views ----

    def size(self) -> int:
        """Number of distinct paths in the diff."""
        return len(self._entries)

    def entries(self) -> Iterator[Tuple[Path, StatusLike]]:
        return iter(self._entries.items())

    def paths(self) -> Iterator[Path]:
        return iter(self._entries.keys())

    def statuses(self) -> Iterator[StatusLike]:
        return iter(self._entries.values())

    def get(self, path: Path, default: Optional[StatusLike] = None) -> Optional[StatusLike]:
        """Status of *path*, or *default* when the path did not change."""
        return self._entries.get(path, default)

    def to_dict(self) -> Dict[Path, str]:
        return {path: str(status) for path, status in self._entries.items()}

    # ---- queries ----

    def filter(
        self,
        paths: Union[str, Iterable[str], None] = None,
        statuses: Union[StatusLike, Iterable[StatusLike], None] = None,
    ) -> "Diff":
        """Return a new Diff with the entries matching *paths* and *statuses*.

        ``None`` or an empty selector leaves that axis unconstrained.
        """
        patterns = to_list(paths)
        wanted = {coerce_status(s) for s in to_list(statuses)}
        matcher = compile_matcher(patterns) if patterns else None
        return Diff(
            (path, status)
            for path, status in self._entries.items()
            if (matcher is None or matcher(path))
            and (not wanted or status in wanted)
        )

    def contains(
        self,
        paths: Union[str, Iterable[str], None] = None,
        statuses: Union[StatusLike, Iterable[StatusLike], None] = None,
    ) -> bool:
        """True if at least one entry satisfies :meth:`filter`."""
        return self.filter(paths, statuses).size() > 0

    def added(self, paths: Union[str, Iterable[str], None] = None) -> "Diff":
        return self.filter(paths, [Status.ADDED])

    def changed(self, paths: Union[str, Iterable[str], None] = None) -> "Diff":
        return self.filter(paths, [Status.CHANGED])

    def deleted(self, paths: Union[str, Iterable[str], None] = None) -> "Diff":
        return self.filter(paths, [Status.DELETED])

    def modified(self, paths: Union[str, Iterable[str], None] = None) -> "Diff":
        return self.filter(paths, [Status.MODIFIED])

    def renamed(self, paths: Union[str, Iterable[str], None] = None) -> "Diff":
        return self.filter(paths, [Status.RENAMED])

    def unknown(self, paths: Union[str, Iterable[str], None] = None) -> "Diff":
        return self.filter(paths, [Status.UNKNOWN])

    def match(self, path_or_paths: Union[str, Iterable[str]]) -> Match:
        """Report which status kinds occur among paths matching the selector."""
        return Match.from_entries(self._entries.items(), path_or_paths)

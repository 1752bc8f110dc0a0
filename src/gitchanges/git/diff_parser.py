"""Change-list parser for ``git diff --name-status`` output.

Each record is ``<STATUS>[score]<whitespace><PATH>``; rename and copy
records carry a second, tab-separated destination path::

    A       .editorconfig
    M       src/app.py
    R097    old/name.py     new/name.py

One malformed line invalidates the whole change-list: a partially parsed
diff would silently under-report changes.
"""

from __future__ import annotations

import re
from typing import Dict

from gitchanges.git.models import Diff, StatusLike, coerce_status

_LINE_RE = re.compile(r"^(?P<status>[A-Z])(?P<score>\d{0,3})\s+(?P<path>\S.*)$")
_QUOTED_ESCAPE_RE = re.compile(r'\\([0-3][0-7]{2}|.|$)', re.DOTALL)

# The escapes git's quote_c_style() emits, besides octal bytes.
_C_ESCAPES = {
    "a": 0x07, "b": 0x08, "t": 0x09, "n": 0x0A, "v": 0x0B,
    "f": 0x0C, "r": 0x0D, '"': 0x22, "\\": 0x5C,
}


class DiffParseError(ValueError):
    """Raised when a change-list line does not follow the record grammar."""

    def __init__(self, line: str, line_no: int = 0) -> None:
        self.line = line
        self.line_no = line_no
        super().__init__(f"Invalid line in diff output: {line}")


def _unquote(path: str) -> str:
    """Undo git's C-style quoting (``core.quotePath``) of unusual paths.

    Raises ValueError on an escape git never produces.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    # Octal escapes are raw UTF-8 bytes.
    out = bytearray()
    pos = 0
    for m in _QUOTED_ESCAPE_RE.finditer(body):
        out += body[pos:m.start()].encode("utf-8")
        esc = m.group(1)
        if len(esc) == 3:
            out.append(int(esc, 8))
        elif esc in _C_ESCAPES:
            out.append(_C_ESCAPES[esc])
        else:
            raise ValueError(f"invalid escape in quoted path: {m.group(0)!r}")
        pos = m.end()
    out += body[pos:].encode("utf-8")
    return out.decode("utf-8", errors="replace")


def _normalise_path(path: str) -> str:
    path = _unquote(path.strip())
    while path.startswith("./"):
        path = path[2:]
    return path


def parse_line(line: str, line_no: int = 0) -> tuple[str, StatusLike]:
    """Parse one non-blank record into ``(path, status)``."""
    m = _LINE_RE.match(line.strip())
    if m is None:
        raise DiffParseError(line, line_no)

    # Renames / copies: "R100\told\tnew" → the destination is the path.
    fields = [f for f in m.group("path").split("\t") if f.strip()]
    try:
        path = _normalise_path(fields[-1])
    except ValueError as exc:
        raise DiffParseError(line, line_no) from exc
    if not path:
        raise DiffParseError(line, line_no)
    return path, coerce_status(m.group("status"))


def parse(text: str) -> Diff:
    """Parse a whole change-list into a :class:`Diff` (first-seen order)."""
    entries: Dict[str, StatusLike] = {}
    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        if not raw_line.strip():
            continue
        path, status = parse_line(raw_line, line_no)
        entries[path] = status
    return Diff(entries)

"""Git subprocess wrapper — name-status diff, first commit, error classification.

Every command runs in two calling conventions: a blocking one built on
``subprocess.run`` and a non-blocking one built on
``asyncio.create_subprocess_exec``. Both feed the same parser and the same
error classifier.

Without a ``timeout`` a hanging git blocks (or suspends) indefinitely.
"""

from __future__ import annotations

import asyncio
import logging
import re
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from gitchanges.git.diff_parser import parse
from gitchanges.git.matcher import to_list
from gitchanges.git.models import Diff

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

BAD_REVISION = "BAD_REVISION"

_BAD_REVISION_RES = (
    re.compile(r"fatal: bad revision '(.*)'"),
    re.compile(r"fatal: ambiguous argument '(.*)': unknown revision"),
)


class GitError(Exception):
    """Raised when git is unavailable or exits with an error."""

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr


class GitDiffError(GitError):
    """Raised when a reference given to git does not exist in the repository."""

    kind = "unresolvable reference"
    code = BAD_REVISION

    def __init__(self, ref: str, **kwargs) -> None:
        super().__init__(f"The ref does not exist: {ref}", **kwargs)
        self.ref = ref


def raise_for_bad_revision(error: GitError) -> None:
    """Re-raise *error* as :class:`GitDiffError` if git rejected a reference.

    Returns normally when the diagnostic is not recognised; the caller then
    re-raises the original error.
    """
    if isinstance(error, GitDiffError) or not error.stderr:
        return
    for pattern in _BAD_REVISION_RES:
        m = pattern.search(error.stderr)
        if m:
            raise GitDiffError(
                m.group(1),
                command=error.command,
                returncode=error.returncode,
                stderr=error.stderr,
            ) from error


def _check(command: List[str], returncode: Optional[int], stdout: str, stderr: str) -> str:
    if returncode != 0:
        stderr = stderr.strip()
        logger.debug("exec error: %s -> %s: %s", " ".join(command), returncode, stderr)
        raise GitError(
            f"git error: {stderr or f'exit status {returncode}'}",
            command=command,
            returncode=returncode,
            stderr=stderr,
        )
    logger.debug("exec result: %d bytes", len(stdout))
    return stdout


def _launch_error(command: List[str], cwd: Optional[PathLike]) -> GitError:
    # Popen raises FileNotFoundError for a missing executable and for a
    # missing working directory alike.
    if cwd is not None and not Path(cwd).is_dir():
        return GitError(f"working directory not found: {cwd}", command=command)
    return GitError("git is not installed or not on PATH", command=command)


async def _reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


def run_git(
    args: Sequence[str],
    cwd: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> str:
    """Run a git command and return stdout. Raises GitError on failure."""
    command = ["git", *args]
    logger.debug("exec: %s (cwd=%s)", " ".join(command), cwd or ".")
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise _launch_error(command, cwd) from exc
    except subprocess.TimeoutExpired as exc:
        raise GitError(
            f"git command timed out after {timeout}s: {' '.join(command)}",
            command=command,
        ) from exc
    return _check(command, result.returncode, result.stdout, result.stderr)


async def run_git_async(
    args: Sequence[str],
    cwd: Optional[PathLike] = None,
    timeout: Optional[float] = None,
) -> str:
    """Async counterpart of :func:`run_git`; does not block the event loop."""
    command = ["git", *args]
    logger.debug("exec async: %s (cwd=%s)", " ".join(command), cwd or ".")
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise _launch_error(command, cwd) from exc

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError as exc:
        await _reap(proc)
        raise GitError(
            f"git command timed out after {timeout}s: {' '.join(command)}",
            command=command,
        ) from exc
    except BaseException:
        # Cancelled: don't leave the child running.
        await _reap(proc)
        raise
    return _check(
        command,
        proc.returncode,
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


# ---- name-status diff ----


def diff_args(
    base: Optional[str] = None,
    head: Optional[str] = None,
    paths: Union[str, Iterable[str], None] = None,
) -> List[str]:
    """Build the ``git diff`` argument list (without the leading ``git``)."""
    return [
        "diff",
        "--name-status",
        "--no-color",
        *([base] if base else []),
        *([head] if head else []),
        "--",  # keeps refs and paths from being mistaken for each other
        *to_list(paths),
    ]


def diff_sync(
    cwd: Optional[PathLike] = None,
    *,
    base: Optional[str] = None,
    head: Optional[str] = None,
    paths: Union[str, Iterable[str], None] = None,
    timeout: Optional[float] = None,
) -> Diff:
    """Run ``git diff --name-status`` and parse the result into a Diff."""
    try:
        stdout = run_git(diff_args(base, head, paths), cwd=cwd, timeout=timeout)
    except GitError as exc:
        raise_for_bad_revision(exc)
        raise
    return parse(stdout)


async def diff_async(
    cwd: Optional[PathLike] = None,
    *,
    base: Optional[str] = None,
    head: Optional[str] = None,
    paths: Union[str, Iterable[str], None] = None,
    timeout: Optional[float] = None,
) -> Diff:
    """Async counterpart of :func:`diff_sync`."""
    try:
        stdout = await run_git_async(diff_args(base, head, paths), cwd=cwd, timeout=timeout)
    except GitError as exc:
        raise_for_bad_revision(exc)
        raise
    return parse(stdout)


# ---- first commit ----


def first_commit_args(ref: Optional[str] = None) -> List[str]:
    return ["rev-list", "--max-parents=0", ref or "HEAD"]


def _oldest_root(stdout: str) -> str:
    # rev-list prints newest first; with several roots the last one is oldest.
    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    return lines[-1] if lines else ""


def first_commit_sync(
    cwd: Optional[PathLike] = None,
    *,
    ref: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """Return the SHA of the first commit reachable from *ref* (default HEAD)."""
    try:
        stdout = run_git(first_commit_args(ref), cwd=cwd, timeout=timeout)
    except GitError as exc:
        raise_for_bad_revision(exc)
        raise
    return _oldest_root(stdout)


async def first_commit_async(
    cwd: Optional[PathLike] = None,
    *,
    ref: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """Async counterpart of :func:`first_commit_sync`."""
    try:
        stdout = await run_git_async(first_commit_args(ref), cwd=cwd, timeout=timeout)
    except GitError as exc:
        raise_for_bad_revision(exc)
        raise
    return _oldest_root(stdout)


def get_repo_root(cwd: Optional[PathLike] = None) -> Path:
    """Return the root of the git repository containing *cwd*."""
    out = run_git(["rev-parse", "--show-toplevel"], cwd=cwd or Path.cwd())
    return Path(out.strip())

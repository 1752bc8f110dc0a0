"""Shared test fixtures — sample change-lists, temp git repos."""

from __future__ import annotations

import subprocess
import textwrap
from pathlib import Path

import pytest


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True,
    )
    return result.stdout


@pytest.fixture
def sample_change_list() -> str:
    """Name-status output with a leading and trailing blank line."""
    return textwrap.dedent("""
        A       .editorconfig
        M       .gitignore
        D       package-lock.json
        A       package.json
        M       src/Diff.ts
        A       tsconfig.json
    """)


@pytest.fixture
def sample_change_list_short() -> str:
    return (
        "A       .editorconfig\n"
        "M       .gitignore\n"
        "D       package-lock.json\n"
        "A       package.json\n"
    )


@pytest.fixture
def sample_change_list_renames() -> str:
    """Tab-separated records as git emits them, with rename/copy scores."""
    return (
        "M\tsrc/app.py\n"
        "R100\tsrc/old_name.py\tsrc/new_name.py\n"
        "C075\tschema/base.json\tschema/copy.json\n"
        "T\tbin/tool\n"
        "U\tconflicted.txt\n"
    )


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository for integration tests."""
    _git(tmp_path, "init")
    _git(tmp_path, "config", "user.email", "test@test.com")
    _git(tmp_path, "config", "user.name", "Test")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    # Initial commit
    (tmp_path / "README.md").write_text("# Test\n")
    (tmp_path / "old.txt").write_text("old\n")
    _git(tmp_path, "add", ".")
    _git(tmp_path, "commit", "-m", "init")
    return tmp_path


@pytest.fixture
def repo_with_changes(tmp_git_repo: Path) -> Path:
    """Second commit adding, modifying and deleting files."""
    repo = tmp_git_repo
    (repo / "schema").mkdir()
    (repo / "schema" / "user.json").write_text('{"type": "object"}\n')
    (repo / "README.md").write_text("# Test\n\nMore text.\n")
    (repo / "old.txt").unlink()
    _git(repo, "add", "-A")
    _git(repo, "commit", "-m", "second")
    return repo


@pytest.fixture
def first_sha(tmp_git_repo: Path) -> str:
    return _git(tmp_git_repo, "rev-list", "--max-parents=0", "HEAD").strip()

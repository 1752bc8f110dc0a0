"""Tests for the git adapter — command building, error classification, both calling conventions."""

import asyncio
import subprocess
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gitchanges.git.adapter import (
    BAD_REVISION,
    GitDiffError,
    GitError,
    diff_args,
    diff_async,
    diff_sync,
    first_commit_async,
    first_commit_sync,
    get_repo_root,
    raise_for_bad_revision,
    run_git,
    run_git_async,
)
from gitchanges.git.diff_parser import DiffParseError
from gitchanges.git.models import Status


class _Proc:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def _async_proc(returncode=0, stdout=b"", stderr=b""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


BAD_REV_STDERR = "fatal: bad revision 'nope'\n"


class TestDiffArgs:
    def test_defaults(self):
        assert diff_args() == ["diff", "--name-status", "--no-color", "--"]

    def test_refs_and_pathspec(self):
        assert diff_args("main", "HEAD", ["src", "schema"]) == [
            "diff", "--name-status", "--no-color", "main", "HEAD", "--", "src", "schema",
        ]

    def test_single_pathspec(self):
        assert diff_args(paths="src")[-2:] == ["--", "src"]


class TestClassifier:
    def test_bad_revision_reclassified(self):
        err = GitError("git error", command=["git"], returncode=128, stderr=BAD_REV_STDERR)
        with pytest.raises(GitDiffError) as info:
            raise_for_bad_revision(err)
        assert info.value.ref == "nope"
        assert info.value.code == BAD_REVISION
        assert info.value.kind == "unresolvable reference"
        assert str(info.value) == "The ref does not exist: nope"
        assert info.value.__cause__ is err

    def test_ambiguous_argument_reclassified(self):
        err = GitError(
            "git error",
            stderr="fatal: ambiguous argument 'missing': unknown revision or path not in the working tree.",
        )
        with pytest.raises(GitDiffError) as info:
            raise_for_bad_revision(err)
        assert info.value.ref == "missing"

    def test_unrecognised_is_left_alone(self):
        err = GitError("git error", stderr="fatal: not a git repository")
        assert raise_for_bad_revision(err) is None

    def test_is_git_error(self):
        assert issubclass(GitDiffError, GitError)


class TestRunGit:
    @patch("gitchanges.git.adapter.subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = _Proc(stdout="ok\n")
        assert run_git(["status"]) == "ok\n"
        assert mock_run.call_args.args[0] == ["git", "status"]

    @patch("gitchanges.git.adapter.subprocess.run")
    def test_failure_exposes_stderr(self, mock_run):
        mock_run.return_value = _Proc(returncode=128, stderr="fatal: boom\n")
        with pytest.raises(GitError) as info:
            run_git(["status"])
        assert info.value.stderr == "fatal: boom"
        assert info.value.returncode == 128

    def test_git_missing(self):
        with patch("gitchanges.git.adapter.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(GitError, match="not installed"):
                run_git(["status"])

    def test_missing_working_directory(self, tmp_path: Path):
        with pytest.raises(GitError, match="working directory not found") as info:
            run_git(["status"], cwd=tmp_path / "nope")
        assert "not installed" not in str(info.value)

    def test_working_directory_is_a_file(self, tmp_path: Path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        with pytest.raises(GitError, match="working directory not found"):
            diff_sync(target)

    def test_timeout(self):
        exc = subprocess.TimeoutExpired(cmd="git", timeout=1)
        with patch("gitchanges.git.adapter.subprocess.run", side_effect=exc):
            with pytest.raises(GitError, match="timed out"):
                run_git(["status"], timeout=1)


class TestDiffSyncMocked:
    @patch("gitchanges.git.adapter.subprocess.run")
    def test_parses_stdout(self, mock_run, sample_change_list):
        mock_run.return_value = _Proc(stdout=sample_change_list)
        diff = diff_sync(base="main", head="HEAD")
        assert diff.size() == 6
        assert diff.get("src/Diff.ts") == Status.MODIFIED

    @patch("gitchanges.git.adapter.subprocess.run")
    def test_bad_revision(self, mock_run):
        mock_run.return_value = _Proc(returncode=128, stderr=BAD_REV_STDERR)
        with pytest.raises(GitDiffError) as info:
            diff_sync(base="nope")
        assert info.value.ref == "nope"

    @patch("gitchanges.git.adapter.subprocess.run")
    def test_other_failure_propagates_unchanged(self, mock_run):
        mock_run.return_value = _Proc(returncode=129, stderr="usage: git diff")
        with pytest.raises(GitError) as info:
            diff_sync()
        assert not isinstance(info.value, GitDiffError)
        assert info.value.stderr == "usage: git diff"

    @patch("gitchanges.git.adapter.subprocess.run")
    def test_malformed_output(self, mock_run):
        mock_run.return_value = _Proc(stdout="garbage\n")
        with pytest.raises(DiffParseError):
            diff_sync()


class TestDiffAsyncMocked:
    @pytest.mark.asyncio
    async def test_same_result_as_sync(self, sample_change_list):
        with patch(
            "gitchanges.git.adapter.asyncio.create_subprocess_exec",
            AsyncMock(return_value=_async_proc(stdout=sample_change_list.encode())),
        ):
            async_diff = await diff_async(base="main", head="HEAD")
        with patch("gitchanges.git.adapter.subprocess.run", return_value=_Proc(stdout=sample_change_list)):
            sync_diff = diff_sync(base="main", head="HEAD")
        assert async_diff == sync_diff
        assert list(async_diff) == list(sync_diff)

    @pytest.mark.asyncio
    async def test_bad_revision(self):
        with patch(
            "gitchanges.git.adapter.asyncio.create_subprocess_exec",
            AsyncMock(return_value=_async_proc(returncode=128, stderr=BAD_REV_STDERR.encode())),
        ):
            with pytest.raises(GitDiffError) as info:
                await diff_async(base="nope")
        assert info.value.ref == "nope"

    @pytest.mark.asyncio
    async def test_git_missing(self):
        with patch(
            "gitchanges.git.adapter.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=FileNotFoundError()),
        ):
            with pytest.raises(GitError, match="not installed"):
                await diff_async()

    @pytest.mark.asyncio
    async def test_missing_working_directory(self, tmp_path: Path):
        with pytest.raises(GitError, match="working directory not found"):
            await diff_async(tmp_path / "nope")

    @pytest.mark.asyncio
    async def test_cancel_kills_child(self):
        proc = MagicMock()
        proc.returncode = None
        proc.communicate = AsyncMock(side_effect=asyncio.CancelledError())
        proc.wait = AsyncMock(return_value=-9)
        with patch(
            "gitchanges.git.adapter.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ):
            with pytest.raises(asyncio.CancelledError):
                await run_git_async(["diff"])
        proc.kill.assert_called_once()
        proc.wait.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_timeout_kills_child(self):
        async def hang():
            await asyncio.sleep(10)

        proc = MagicMock()
        proc.returncode = None
        proc.communicate = hang
        proc.wait = AsyncMock(return_value=-9)
        with patch(
            "gitchanges.git.adapter.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ):
            with pytest.raises(GitError, match="timed out"):
                await run_git_async(["diff"], timeout=0.01)
        proc.kill.assert_called_once()


class TestFirstCommitMocked:
    @patch("gitchanges.git.adapter.subprocess.run")
    def test_trims_output(self, mock_run):
        mock_run.return_value = _Proc(stdout="abc123\n")
        assert first_commit_sync() == "abc123"
        assert mock_run.call_args.args[0] == ["git", "rev-list", "--max-parents=0", "HEAD"]

    @patch("gitchanges.git.adapter.subprocess.run")
    def test_several_roots_returns_oldest(self, mock_run):
        mock_run.return_value = _Proc(stdout="newer\nolder\n")
        assert first_commit_sync(ref="main") == "older"
        assert mock_run.call_args.args[0][-1] == "main"


# ---- integration (real git) ----


class TestIntegration:
    def test_diff_between_commits(self, repo_with_changes: Path, first_sha: str):
        diff = diff_sync(repo_with_changes, base=first_sha, head="HEAD")
        assert diff.to_dict() == {
            "README.md": "M",
            "old.txt": "D",
            "schema/user.json": "A",
        }

    def test_pathspec_limits_comparison(self, repo_with_changes: Path, first_sha: str):
        diff = diff_sync(repo_with_changes, base=first_sha, head="HEAD", paths=["schema"])
        assert list(diff.paths()) == ["schema/user.json"]

    def test_work_tree(self, tmp_git_repo: Path):
        (tmp_git_repo / "README.md").write_text("changed\n")
        diff = diff_sync(tmp_git_repo)
        assert diff.to_dict() == {"README.md": "M"}

    def test_no_changes(self, tmp_git_repo: Path):
        assert diff_sync(tmp_git_repo).size() == 0

    def test_bad_revision(self, tmp_git_repo: Path):
        with pytest.raises(GitDiffError) as info:
            diff_sync(tmp_git_repo, base="non-existent-ref", head="HEAD")
        assert info.value.ref == "non-existent-ref"
        assert info.value.code == "BAD_REVISION"
        assert str(info.value) == "The ref does not exist: non-existent-ref"

    def test_first_commit(self, repo_with_changes: Path, first_sha: str):
        assert first_commit_sync(repo_with_changes) == first_sha

    def test_first_commit_bad_ref(self, tmp_git_repo: Path):
        with pytest.raises(GitError):
            first_commit_sync(tmp_git_repo, ref="non-existent-ref")

    def test_repo_root(self, tmp_git_repo: Path):
        sub = tmp_git_repo / "sub"
        sub.mkdir()
        assert get_repo_root(sub).resolve() == tmp_git_repo.resolve()

    def test_not_a_repo(self, tmp_path: Path):
        with pytest.raises(GitError):
            diff_sync(tmp_path, base="HEAD")

    @pytest.mark.asyncio
    async def test_async_matches_sync(self, repo_with_changes: Path, first_sha: str):
        sync_diff = diff_sync(repo_with_changes, base=first_sha, head="HEAD")
        async_diff = await diff_async(repo_with_changes, base=first_sha, head="HEAD")
        assert async_diff == sync_diff

    @pytest.mark.asyncio
    async def test_async_runs_concurrently(self, repo_with_changes: Path, first_sha: str):
        results = await asyncio.gather(
            diff_async(repo_with_changes, base=first_sha, head="HEAD"),
            first_commit_async(repo_with_changes),
        )
        assert results[0].size() == 3
        assert results[1] == first_sha

    @pytest.mark.asyncio
    async def test_async_bad_revision(self, tmp_git_repo: Path):
        with pytest.raises(GitDiffError):
            await diff_async(tmp_git_repo, base="non-existent-ref", head="HEAD")

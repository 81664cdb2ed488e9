"""Tests for bumpkin.git.repository module."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from bumpkin.core.result import Err, Ok
from bumpkin.git import Repository
from bumpkin.git.repository import _LOG_FORMAT, _parse_log
from bumpkin.version import Version

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def make_completed_process(
    stdout: str = "", stderr: str = "", returncode: int = 0
) -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(
        args=["git"], returncode=returncode, stdout=stdout, stderr=stderr
    )


def _log_record(sha: str, message: str, ts: str = "1700000000") -> str:
    return f"{sha}\x1fAda\x1fada@example.com\x1f{ts}\x1f{message}\x1e"


# =============================================================================
# Parsing
# =============================================================================


class TestParseLog:
    def test_multiple_records(self) -> None:
        output = _log_record("a" * 40, "feat: x\n\nbody\n") + "\n" + _log_record("b" * 40, "fix: y")

        commits = _parse_log(output)

        assert [c.hash for c in commits] == ["a" * 40, "b" * 40]
        assert commits[0].message == "feat: x\n\nbody"
        assert commits[0].subject == "feat: x"
        assert commits[0].short_hash == "aaaaaaa"
        assert commits[0].author == "Ada"
        assert commits[0].timestamp is not None

    def test_empty(self) -> None:
        assert _parse_log("") == []

    def test_bad_timestamp(self) -> None:
        commits = _parse_log(_log_record("c" * 40, "chore: z", ts="??"))
        assert commits[0].timestamp is None

    def test_format_uses_separators(self) -> None:
        assert "\x1f" in _LOG_FORMAT and "\x1e" in _LOG_FORMAT


# =============================================================================
# Mocked git
# =============================================================================


class TestRepositoryMocked:
    @patch("subprocess.run")
    def test_latest_tag_picks_highest_version(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stdout=(
                "v1.2.0\x00obj1\x00commit1\n"
                "v1.10.0\x00obj2\x00commit2\n"
                "v2.0.0-rc.1\x00obj3\x00commit3\n"
                "release-9.0.0\x00obj4\x00\n"
                "vnext\x00obj5\x00\n"
            )
        )

        result = Repository(tmp_path).latest_tag("v")

        assert isinstance(result, Ok)
        tag = result.value
        assert tag is not None
        assert tag.name == "v2.0.0-rc.1"
        assert tag.commit_hash == "commit3"
        assert tag.version == Version(2, 0, 0, "rc.1")

    @patch("subprocess.run")
    def test_latest_tag_ignores_doubled_prefix(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stdout="v1.2.0\x00obj1\x00commit1\nvv9.0.0\x00obj2\x00commit2\n"
        )

        result = Repository(tmp_path).latest_tag("v")

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.name == "v1.2.0"

    @patch("subprocess.run")
    def test_latest_tag_none(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="")

        assert Repository(tmp_path).latest_tag("v") == Ok(None)

    @patch("subprocess.run")
    def test_lightweight_tag_uses_object(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="1.0.0\x00abc\x00\n")

        result = Repository(tmp_path).latest_tag("")

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.commit_hash == "abc"

    @patch("subprocess.run")
    def test_list_tags_error(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(
            stderr="fatal: not a git repository", returncode=128
        )

        result = Repository(tmp_path).latest_tag("v")

        assert isinstance(result, Err)
        assert result.error.message == "fatal: not a git repository"
        assert result.error.returncode == 128

    @patch("subprocess.run")
    def test_has_remote(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="origin\nupstream\n")

        repo = Repository(tmp_path)

        assert repo.has_remote("upstream") == Ok(True)
        assert repo.has_remote("fork") == Ok(False)

    @patch("subprocess.run")
    def test_push_uses_full_refspec(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process()

        Repository(tmp_path).push_tag("v1.0.0", "origin")

        args = mock_run.call_args[0][0]
        assert args[-2:] == ["origin", "refs/tags/v1.0.0:refs/tags/v1.0.0"]

    @patch("subprocess.run")
    def test_head(self, mock_run: MagicMock, tmp_path: Path) -> None:
        mock_run.return_value = make_completed_process(stdout="deadbeef\n")

        assert Repository(tmp_path).head() == Ok("deadbeef")


# =============================================================================
# Real git
# =============================================================================


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


def _git(cwd: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    ).stdout


def _commit(cwd: Path, message: str) -> None:
    _git(cwd, "commit", "-q", "--allow-empty", "-m", message)


@pytest.fixture
def work_tree(tmp_path: Path, git_env: None) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    _git(path, "init", "-q")
    _commit(path, "chore: initial commit")
    return path


@requires_git
class TestRepositoryIntegration:
    def test_discover_from_subdirectory(self, work_tree: Path) -> None:
        sub = work_tree / "src" / "pkg"
        sub.mkdir(parents=True)

        result = Repository.discover(sub)

        assert isinstance(result, Ok)
        assert result.value.path.resolve() == work_tree.resolve()

    def test_discover_outside_repo(self, tmp_path: Path, git_env: None) -> None:
        outside = tmp_path / "plain"
        outside.mkdir()
        ceiling = str(tmp_path)

        with patch.dict("os.environ", {"GIT_CEILING_DIRECTORIES": ceiling}):
            result = Repository.discover(outside)

        assert isinstance(result, Err)
        assert result.error.kind == "not_a_repo"

    def test_tag_and_commits_since(self, work_tree: Path) -> None:
        repo = Repository(work_tree)
        assert repo.create_tag("v0.1.0", "Release v0.1.0") == Ok(None)
        _commit(work_tree, "feat: first feature")
        _commit(work_tree, "fix: a bug\n\nLonger explanation.")

        latest = repo.latest_tag("v")
        assert isinstance(latest, Ok) and latest.value is not None
        assert latest.value.name == "v0.1.0"

        commits = repo.commits_since("v0.1.0")
        assert isinstance(commits, Ok)
        assert [c.subject for c in commits.value] == ["fix: a bug", "feat: first feature"]
        assert commits.value[0].message == "fix: a bug\n\nLonger explanation."

    def test_all_commits(self, work_tree: Path) -> None:
        _commit(work_tree, "feat: more")

        result = Repository(work_tree).all_commits()

        assert isinstance(result, Ok)
        assert [c.subject for c in result.value] == ["feat: more", "chore: initial commit"]

    def test_annotated_tag_points_at_head(self, work_tree: Path) -> None:
        repo = Repository(work_tree)
        repo.create_tag("v1.0.0", "Release v1.0.0")

        head = repo.head()
        latest = repo.latest_tag("v")

        assert isinstance(head, Ok)
        assert isinstance(latest, Ok) and latest.value is not None
        assert latest.value.commit_hash == head.value
        assert _git(work_tree, "cat-file", "-t", "v1.0.0").strip() == "tag"

    def test_duplicate_tag(self, work_tree: Path) -> None:
        repo = Repository(work_tree)
        repo.create_tag("v1.0.0", "Release v1.0.0")

        result = repo.create_tag("v1.0.0", "again")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_exists"
        assert repo.tag_exists("v1.0.0")
        assert not repo.tag_exists("v9.9.9")

    def test_push_to_bare_remote(self, work_tree: Path, tmp_path: Path) -> None:
        remote = tmp_path / "remote.git"
        _git(tmp_path, "init", "-q", "--bare", str(remote))
        _git(work_tree, "remote", "add", "origin", str(remote))
        repo = Repository(work_tree)
        repo.create_tag("v1.0.0", "Release v1.0.0")

        assert repo.has_remote("origin") == Ok(True)
        assert repo.push_tag("v1.0.0", "origin") == Ok(None)
        assert "v1.0.0" in _git(remote, "tag")

    def test_push_to_missing_remote_fails(self, work_tree: Path) -> None:
        repo = Repository(work_tree)
        repo.create_tag("v1.0.0", "Release v1.0.0")

        result = repo.push_tag("v1.0.0", "nowhere")

        assert isinstance(result, Err)
        assert result.error.command == "push"

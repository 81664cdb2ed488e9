"""Tests for the bumpkin command line."""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

import bumpkin.cli.commands.analyze as analyze_cmd
import bumpkin.cli.commands.bump as bump_cmd
import bumpkin.cli.commands.current as current_cmd
import bumpkin.cli.commands.hooks_cmd as hooks_cmd
import bumpkin.cli.commands.init_cmd as init_cmd
from bumpkin import __version__
from bumpkin.cli.app import app
from bumpkin.cli.context import CLIContext, build_context
from bumpkin.core.config import CONFIG_FILE_NAME, Config, HooksConfig
from bumpkin.core.errors import ExitCode
from bumpkin.core.result import Err, Ok, Result
from bumpkin.git import GitError
from bumpkin.output.console import MockConsole, RichConsole, Style
from bumpkin.test.fakes import FakeRepository

runner = CliRunner()

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses POSIX shell syntax")


class Harness:
    def __init__(self, repo: FakeRepository, config: Config) -> None:
        self.repo = repo
        self.config = config
        self.console = MockConsole()

    def build_context(
        self, config_path: Path | None = None, *, stderr: bool = False
    ) -> CLIContext:
        return CLIContext(
            repo=self.repo,  # type: ignore[arg-type]
            config=self.config,
            console=self.console,
        )


@pytest.fixture
def harness(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Harness:
    h = Harness(FakeRepository(path=tmp_path), Config())
    for module in (bump_cmd, current_cmd, analyze_cmd, hooks_cmd):
        monkeypatch.setattr(module, "build_context", h.build_context)
    return h


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


# =============================================================================
# bump
# =============================================================================


class TestBump:
    def test_requires_exactly_one_kind(self, harness: Harness) -> None:
        result = runner.invoke(app, ["bump", "--patch", "--minor", "--yes"])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert harness.console.find("exactly one bump type")

    def test_no_kind(self, harness: Harness) -> None:
        result = runner.invoke(app, ["bump", "--yes"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_confirmation_required(self, harness: Harness) -> None:
        harness.repo.tags.append("v1.0.0")

        result = runner.invoke(app, ["bump", "--minor"])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert harness.console.find("Will bump version: 1.0.0 → 1.1.0")
        assert harness.repo.tags == ["v1.0.0"]

    def test_bump_with_yes(self, harness: Harness) -> None:
        harness.repo.tags.append("v1.0.0")

        result = runner.invoke(app, ["bump", "--minor", "--yes"])

        assert result.exit_code == 0
        assert harness.repo.tags == ["v1.0.0", "v1.1.0"]
        assert harness.repo.pushed == ["v1.1.0"]
        assert harness.console.find("Version: 1.0.0 → 1.1.0")
        assert harness.console.find("Pushed: yes")

    def test_dry_run_needs_no_confirmation(self, harness: Harness) -> None:
        result = runner.invoke(app, ["bump", "--alpha", "--dry-run"])

        assert result.exit_code == 0
        assert harness.repo.tags == []
        assert harness.console.find("[DRY RUN]")
        assert harness.console.find("Version: 0.0.0 → 0.0.1-alpha.0")

    def test_no_push(self, harness: Harness) -> None:
        result = runner.invoke(app, ["bump", "--patch", "--no-push", "-y"])

        assert result.exit_code == 0
        assert harness.repo.pushed == []
        assert harness.console.find("Pushed: no (--no-push)")

    def test_set_version_and_prefix(self, harness: Harness) -> None:
        result = runner.invoke(app, ["bump", "--set-version", "2.0.0", "-p", "rel-", "-y"])

        assert result.exit_code == 0
        assert harness.repo.tags == ["rel-2.0.0"]

    def test_config_prefix_and_remote(self, harness: Harness) -> None:
        harness.config = Config(prefix="app/v", remote="upstream")
        harness.repo.remotes = ("upstream",)

        result = runner.invoke(app, ["bump", "--major", "-y"])

        assert result.exit_code == 0
        assert "push_tag:app/v1.0.0:upstream" in harness.repo.calls

    def test_invalid_set_version(self, harness: Harness) -> None:
        result = runner.invoke(app, ["bump", "--set-version", "nope", "-y"])

        assert result.exit_code == ExitCode.INVALID_ARGS
        assert harness.console.has_error()

    def test_tag_exists_is_general_error(self, harness: Harness) -> None:
        harness.repo.tags.extend(["v1.0.0", "v1.0.1"])

        result = runner.invoke(app, ["bump", "--set-version", "1.0.1", "-y"])

        assert result.exit_code == ExitCode.GENERAL_ERROR

    def test_conventional(self, harness: Harness) -> None:
        harness.repo.tags.append("v0.3.0")
        harness.repo.add_commits("feat: something new")

        result = runner.invoke(app, ["bump", "-c", "-y", "--no-push"])

        assert result.exit_code == 0
        assert harness.repo.tags[-1] == "v0.4.0"

    def test_json_output(self, harness: Harness) -> None:
        harness.repo.tags.append("v1.2.3")

        result = runner.invoke(app, ["bump", "--patch", "--json", "-y"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["previous_version"] == "1.2.3"
        assert payload["new_version"] == "1.2.4"
        assert payload["tag_name"] == "v1.2.4"
        assert payload["tag_created"] is True
        assert payload["pushed"] is True
        assert payload["post_push_warnings"] == []

    def test_json_error(self, harness: Harness) -> None:
        harness.repo.fail_head = True

        result = runner.invoke(app, ["bump", "--patch", "--json", "-y"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "HEAD" in payload["error"]

    @posix_only
    def test_pre_tag_hook_failure(self, harness: Harness) -> None:
        harness.config = Config(hooks=HooksConfig(pre_tag=("exit 1",)))

        result = runner.invoke(app, ["bump", "--patch", "-y"])

        assert result.exit_code == ExitCode.HOOK_FAILED
        assert harness.repo.tags == []

    @posix_only
    def test_post_tag_hook_failure(self, harness: Harness) -> None:
        harness.config = Config(hooks=HooksConfig(post_tag=("exit 1",)))

        result = runner.invoke(app, ["bump", "--patch", "-y", "--json"])

        assert result.exit_code == ExitCode.HOOK_FAILED
        payload = json.loads(result.stdout)
        assert payload["tag_created"] is True
        assert payload["pushed"] is False
        assert harness.repo.tags == ["v0.0.1"]

    @posix_only
    def test_no_hooks(self, harness: Harness) -> None:
        harness.config = Config(hooks=HooksConfig(pre_tag=("exit 1",)))

        result = runner.invoke(app, ["bump", "--patch", "-y", "--no-hooks"])

        assert result.exit_code == 0
        assert harness.repo.tags == ["v0.0.1"]


# =============================================================================
# current / analyze
# =============================================================================


class TestCurrent:
    def test_no_tags(self, harness: Harness) -> None:
        result = runner.invoke(app, ["current"])

        assert result.exit_code == 0
        assert harness.console.messages == ["No version tags found"]

    def test_latest(self, harness: Harness) -> None:
        harness.repo.tags.extend(["v0.9.0", "v1.0.0-rc.1", "v1.0.0"])

        result = runner.invoke(app, ["current"])

        assert result.exit_code == 0
        assert harness.console.messages == ["v1.0.0"]

    def test_error(self, harness: Harness) -> None:
        harness.repo.fail_tags = True

        result = runner.invoke(app, ["current"])

        assert result.exit_code == ExitCode.GENERAL_ERROR


class TestAnalyze:
    def test_recommendation(self, harness: Harness) -> None:
        harness.repo.tags.append("v1.0.0")
        harness.repo.add_commits("fix: a", "feat: b")

        result = runner.invoke(app, ["analyze", "--verbose"])

        assert result.exit_code == 0
        assert harness.console.find("Commits since v1.0.0")
        assert harness.console.find("2 commits (feat: 1, fix: 1), 0 breaking")
        assert harness.console.find("recommended bump: minor")
        assert harness.console.find("feat: feat: b")

    def test_no_commits(self, harness: Harness) -> None:
        harness.repo.tags.append("v1.0.0")

        result = runner.invoke(app, ["analyze"])

        assert result.exit_code == ExitCode.NO_COMMITS


# =============================================================================
# hooks
# =============================================================================


@posix_only
class TestHooksCommand:
    def test_streams_output(self, harness: Harness) -> None:
        harness.repo.tags.append("v2.3.4")
        harness.config = Config(
            hooks=HooksConfig(pre_tag=('echo "tag=$BUMPKIN_TAG"', "echo warn >&2"))
        )

        result = runner.invoke(app, ["hooks", "pre-tag"])

        assert result.exit_code == 0
        assert harness.console.find("tag=v2.3.4")
        warn = [o for o in harness.console.outputs if o.message == "warn"]
        assert len(warn) == 1
        assert warn[0].style == Style.WARNING

    def test_unknown_phase(self, harness: Harness) -> None:
        result = runner.invoke(app, ["hooks", "pre-commit"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_nothing_configured(self, harness: Harness) -> None:
        result = runner.invoke(app, ["hooks", "post-tag"])

        assert result.exit_code == 0
        assert harness.console.find("no post-tag hooks configured")

    def test_fail_closed_phase_stops(self, harness: Harness, tmp_path: Path) -> None:
        harness.config = Config(hooks=HooksConfig(post_tag=("exit 3", "touch ran")))

        result = runner.invoke(app, ["hooks", "post-tag"])

        assert result.exit_code == ExitCode.HOOK_FAILED
        assert not (tmp_path / "ran").exists()

    def test_post_push_continues(self, harness: Harness, tmp_path: Path) -> None:
        harness.config = Config(hooks=HooksConfig(post_push=("exit 3", "touch ran")))

        result = runner.invoke(app, ["hooks", "post-push"])

        assert result.exit_code == 0
        assert (tmp_path / "ran").exists()
        assert harness.console.has_warning()

    def test_quiet_shows_buffer_on_failure(self, harness: Harness) -> None:
        harness.config = Config(hooks=HooksConfig(pre_tag=("echo detail; exit 1",)))

        result = runner.invoke(app, ["hooks", "pre-tag", "--quiet"])

        assert result.exit_code == ExitCode.HOOK_FAILED
        assert harness.console.find("[out] detail")

    def test_quiet_output_with_brackets_on_rich_console(self, harness: Harness) -> None:
        harness.console = RichConsole()  # type: ignore[assignment]
        harness.config = Config(
            hooks=HooksConfig(pre_tag=("echo 'copy to [/tmp]'; echo '[red]x' >&2; exit 1",))
        )

        result = runner.invoke(app, ["hooks", "pre-tag", "--quiet"])

        assert result.exit_code == ExitCode.HOOK_FAILED
        assert "[out] copy to [/tmp]" in result.output
        assert "[err] [red]x" in result.output

    def test_timeout(self, harness: Harness) -> None:
        harness.config = Config(hooks=HooksConfig(pre_tag=("sleep 30",)))

        result = runner.invoke(app, ["hooks", "pre-tag", "--timeout", "0.2"])

        assert result.exit_code == ExitCode.HOOK_FAILED
        assert harness.console.find("timed out")


# =============================================================================
# init
# =============================================================================


class _Discovered:
    def __init__(self, path: Path) -> None:
        self.path = path


class TestInit:
    @pytest.fixture
    def repo_root(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        class FakeDiscover:
            @staticmethod
            def discover(start: Path) -> Result[_Discovered, GitError]:
                return Ok(_Discovered(tmp_path))

        monkeypatch.setattr(init_cmd, "Repository", FakeDiscover)
        return tmp_path

    def test_writes_config(self, repo_root: Path) -> None:
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert 'prefix = "v"' in (repo_root / CONFIG_FILE_NAME).read_text(encoding="utf-8")

    def test_refuses_to_overwrite(self, repo_root: Path) -> None:
        (repo_root / CONFIG_FILE_NAME).write_text("# mine\n", encoding="utf-8")

        result = runner.invoke(app, ["init"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert (repo_root / CONFIG_FILE_NAME).read_text(encoding="utf-8") == "# mine\n"

    def test_force(self, repo_root: Path) -> None:
        (repo_root / CONFIG_FILE_NAME).write_text("# mine\n", encoding="utf-8")

        result = runner.invoke(app, ["init", "--force"])

        assert result.exit_code == 0
        assert "[hooks]" in (repo_root / CONFIG_FILE_NAME).read_text(encoding="utf-8")

    def test_outside_repo(self, monkeypatch: pytest.MonkeyPatch) -> None:
        class NoRepo:
            @staticmethod
            def discover(start: Path) -> Result[_Discovered, GitError]:
                return Err(GitError(command="rev-parse", message="not a git repository"))

        monkeypatch.setattr(init_cmd, "Repository", NoRepo)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == ExitCode.NOT_GIT_REPO


# =============================================================================
# build_context
# =============================================================================


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestBuildContext:
    def test_outside_repo(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
        plain = tmp_path / "plain"
        plain.mkdir()
        monkeypatch.chdir(plain)

        with pytest.raises(typer.Exit) as exc:
            build_context()

        assert exc.value.exit_code == ExitCode.NOT_GIT_REPO

    def test_loads_repo_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        subprocess.run(["git", "init", "-q"], cwd=tmp_path, check=True)
        (tmp_path / CONFIG_FILE_NAME).write_text('prefix = "rel-"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)

        ctx = build_context()

        assert ctx.config.prefix == "rel-"
        assert ctx.repo.path.resolve() == tmp_path.resolve()

    def test_bad_explicit_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        subprocess.run(["git", "init", "-q"], cwd=tmp_path, check=True)
        monkeypatch.chdir(tmp_path)

        with pytest.raises(typer.Exit) as exc:
            build_context(tmp_path / "missing.toml")

        assert exc.value.exit_code == ExitCode.INVALID_ARGS

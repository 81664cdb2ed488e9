"""Git repository access.

``GitRepository`` is the interface the release orchestrator depends on.
``Repository`` implements it on top of the ``git`` command line; tests
substitute in-memory fakes.

Usage:
    match Repository.discover(Path.cwd()):
        case Ok(repo):
            match repo.latest_tag("v"):
                case Ok(tag):
                    print(tag.name if tag else "no tags")
                case Err(e):
                    print(f"error: {e.message}")
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal, Protocol

from bumpkin.core.result import Err, Ok, Result
from bumpkin.platform.process import ProcessError
from bumpkin.platform.process import run as run_process
from bumpkin.version.semver import Version, parse_version

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# git log record/field separators (ASCII RS / US)
_RS = "\x1e"
_US = "\x1f"
_LOG_FORMAT = f"--format=%H{_US}%an{_US}%ae{_US}%at{_US}%B{_RS}"

__all__ = [
    "CommitRecord",
    "GitError",
    "GitRepository",
    "Repository",
    "Tag",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
        kind: ``tag_exists`` for duplicate tags, ``not_a_repo`` outside a work
            tree, ``failed`` otherwise
    """

    command: str
    message: str
    returncode: int = 1
    kind: Literal["failed", "tag_exists", "not_a_repo"] = "failed"


@dataclass(frozen=True, slots=True)
class Tag:
    name: str
    commit_hash: str
    version: Version | None = None


@dataclass(frozen=True, slots=True)
class CommitRecord:
    hash: str
    message: str
    author: str = ""
    author_email: str = ""
    timestamp: datetime | None = None

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0].strip()

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


class GitRepository(Protocol):
    """Operations the release orchestrator needs from git."""

    def latest_tag(self, prefix: str) -> Result[Tag | None, GitError]: ...

    def commits_since(self, tag_name: str) -> Result[list[CommitRecord], GitError]: ...

    def all_commits(self) -> Result[list[CommitRecord], GitError]: ...

    def create_tag(self, name: str, message: str) -> Result[None, GitError]: ...

    def has_remote(self, name: str) -> Result[bool, GitError]: ...

    def push_tag(self, name: str, remote: str) -> Result[None, GitError]: ...

    def head(self) -> Result[str, GitError]: ...


def _git_error(command: str, e: ProcessError, fallback: str) -> GitError:
    return GitError(
        command=command,
        message=e.stderr.strip() or e.stdout.strip() or fallback,
        returncode=e.returncode,
    )


def _parse_log(output: str) -> list[CommitRecord]:
    commits: list[CommitRecord] = []
    for record in output.split(_RS):
        record = record.strip("\n")
        if not record:
            continue
        parts = record.split(_US, 4)
        if len(parts) != 5:
            continue
        sha, author, email, ts, body = parts
        timestamp = (
            datetime.fromtimestamp(int(ts), tz=UTC) if ts.strip().isdigit() else None
        )
        commits.append(
            CommitRecord(
                hash=sha.strip(),
                message=body.strip(),
                author=author,
                author_email=email,
                timestamp=timestamp,
            )
        )
    return commits


class Repository:
    """Git repository driven through the ``git`` executable.

    Attributes:
        path: Path to the work tree root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def discover(cls, start: Path) -> Result[Repository, GitError]:
        """Find the work tree enclosing ``start``."""
        result = run_process(
            ["git", "-C", str(start), "rev-parse", "--show-toplevel"],
            cwd=start,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
        match result:
            case Err(_):
                return Err(
                    GitError(
                        command="rev-parse",
                        message="not a git repository (or any of the parent directories)",
                        kind="not_a_repo",
                    )
                )
            case Ok(stdout):
                return Ok(cls(Path(stdout.strip())))

    def list_tags(self) -> Result[list[Tag], GitError]:
        """All tags, with their target commit and parsed version (if any)."""
        result = self._run(
            [
                "for-each-ref",
                "--format=%(refname:short)%00%(objectname)%00%(*objectname)",
                "refs/tags",
            ]
        )
        if isinstance(result, Err):
            return Err(_git_error("for-each-ref", result.error, "failed to list tags"))

        tags: list[Tag] = []
        for line in result.value.splitlines():
            name, _, rest = line.partition("\x00")
            obj, _, peeled = rest.partition("\x00")
            if not name:
                continue
            tags.append(Tag(name=name, commit_hash=peeled or obj))
        return Ok(tags)

    def latest_tag(self, prefix: str) -> Result[Tag | None, GitError]:
        """Highest-version tag named ``prefix`` + semver; others are ignored."""
        listed = self.list_tags()
        if isinstance(listed, Err):
            return listed

        latest: Tag | None = None
        for tag in listed.value:
            if not tag.name.startswith(prefix):
                continue
            parsed = parse_version(tag.name[len(prefix) :], allow_v=False)
            if isinstance(parsed, Err):
                continue
            candidate = Tag(name=tag.name, commit_hash=tag.commit_hash, version=parsed.value)
            if latest is None or (latest.version is not None and latest.version < parsed.value):
                latest = candidate
        return Ok(latest)

    def commits_since(self, tag_name: str) -> Result[list[CommitRecord], GitError]:
        """Commits reachable from HEAD but not from ``tag_name``, newest first."""
        return self._log([f"refs/tags/{tag_name}..HEAD"])

    def all_commits(self) -> Result[list[CommitRecord], GitError]:
        return self._log(["HEAD"])

    def tag_exists(self, name: str) -> bool:
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{name}"])
        return isinstance(result, Ok)

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD."""
        if self.tag_exists(name):
            return Err(
                GitError(command="tag", message=f"tag {name!r} already exists", kind="tag_exists")
            )

        result = self._run(["tag", "-a", name, "-m", message])
        if isinstance(result, Err):
            return Err(_git_error("tag", result.error, "failed to create tag"))
        return Ok(None)

    def has_remote(self, name: str) -> Result[bool, GitError]:
        result = self._run(["remote"])
        if isinstance(result, Err):
            return Err(_git_error("remote", result.error, "failed to list remotes"))
        return Ok(name in {r.strip() for r in result.value.splitlines()})

    def push_tag(self, name: str, remote: str) -> Result[None, GitError]:
        ref = f"refs/tags/{name}"
        result = self._run(["push", remote, f"{ref}:{ref}"])
        if isinstance(result, Err):
            return Err(_git_error("push", result.error, "failed to push tag"))
        return Ok(None)

    def head(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        if isinstance(result, Err):
            return Err(_git_error("rev-parse", result.error, "failed to resolve HEAD"))
        return Ok(result.value.strip())

    def _log(self, revs: list[str]) -> Result[list[CommitRecord], GitError]:
        result = self._run(["log", _LOG_FORMAT, *revs])
        if isinstance(result, Err):
            return Err(_git_error("log", result.error, "failed to read commit log"))
        return Ok(_parse_log(result.value))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

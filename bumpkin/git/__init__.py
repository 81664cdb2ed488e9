"""Git operations used by the release flow."""

from bumpkin.git.repository import (
    CommitRecord,
    GitError,
    GitRepository,
    Repository,
    Tag,
)

__all__ = [
    "CommitRecord",
    "GitError",
    "GitRepository",
    "Repository",
    "Tag",
]

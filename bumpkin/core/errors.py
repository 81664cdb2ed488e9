"""Process exit codes for the bumpkin command line.

Scripts and CI pipelines branch on these values, so they must stay stable.
"""

from enum import IntEnum

__all__ = ["ExitCode"]


class ExitCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: General error (git operation failed, tag already exists, ...)
    - 2: Invalid arguments (conflicting flags, bad version, missing --yes)
    - 3: Not a git repository
    - 4: No commits since the last tag
    - 5: User cancelled the operation
    - 6: A hook failed
    """

    OK = 0
    GENERAL_ERROR = 1
    INVALID_ARGS = 2
    NOT_GIT_REPO = 3
    NO_COMMITS = 4
    USER_CANCELLED = 5
    HOOK_FAILED = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ExitCode.OK

    @property
    def is_error(self) -> bool:
        return self != ExitCode.OK

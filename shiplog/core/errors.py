"""Exit codes for the shiplog command.

Release errors carry a `kind`; the CLI maps each kind onto one of these
codes so CI jobs can tell a missing credential apart from a failed upload.
"""

from enum import IntEnum

__all__ = ["ErrorCode", "exit_code_for"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: User error (bad flags, invalid configuration, unknown provider)
    - 2: Environment error (missing token, tag not pushed, shallow clone)
    - 4: Network error (provider API rejected or unreachable)
    - 5: I/O error (cannot write output, git not runnable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK


_KIND_TO_CODE: dict[str, ErrorCode] = {
    "invalid_config": ErrorCode.USER_ERROR,
    "unsupported_provider": ErrorCode.USER_ERROR,
    "missing_token": ErrorCode.ENV_ERROR,
    "missing_tag": ErrorCode.ENV_ERROR,
    "shallow_repo": ErrorCode.ENV_ERROR,
    "release_failed": ErrorCode.NETWORK_ERROR,
    "git_failed": ErrorCode.IO_ERROR,
    "io_failed": ErrorCode.IO_ERROR,
}


def exit_code_for(kind: str) -> ErrorCode:
    """Map a release error kind to its exit code (unknown kinds are user errors)."""
    return _KIND_TO_CODE.get(kind, ErrorCode.USER_ERROR)

"""Error codes for CLI exit status.

These values are the process exit codes of `ghrelease publish`. CI systems
branch on them, so they must remain stable:
- 0: Success
- 1: User error (bad option, unknown file_exists policy, missing token)
- 2: Conflict (asset already exists and file_exists is "fail")
- 3: Internal error (unknown file_exists value reached the upload step)
- 4: Network error (GitHub API call failed)
- 5: I/O error (artifact missing or unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    CONFLICT_ERROR = 2
    INTERNAL_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

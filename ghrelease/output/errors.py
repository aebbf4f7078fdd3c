"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ghrelease.core.errors import ErrorCode
from ghrelease.output.console import Style
from ghrelease.services.errors import (
    ConfigurationError,
    ConflictError,
    LocalIOError,
    PublishError,
    RemoteServiceError,
)

if TYPE_CHECKING:
    from ghrelease.output.console import ConsoleProtocol

__all__ = ["print_publish_error", "publish_error_exit_code"]


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    """Print publish error to console with appropriate formatting."""
    match error:
        case RemoteServiceError(action=action, error=remote):
            console.error(f"{action}: {remote}")
            if remote.status in (401, 403):
                console.print("hint: check that the token can write releases", Style.DIM)
            elif remote.status == 0:
                console.print("hint: network failure or timeout; re-run to resume", Style.DIM)
        case ConfigurationError(message=message):
            console.error(message)
        case ConflictError(name=name):
            console.error(error.message)
            console.print(
                f"hint: delete {name} from the release or use --file-exists overwrite|skip",
                Style.DIM,
            )
        case LocalIOError():
            console.error(error.message)


def publish_error_exit_code(error: PublishError) -> int:
    """Get exit code for a publish error."""
    match error:
        case ConfigurationError():
            return int(ErrorCode.INTERNAL_ERROR)
        case ConflictError():
            return int(ErrorCode.CONFLICT_ERROR)
        case RemoteServiceError():
            return int(ErrorCode.NETWORK_ERROR)
        case LocalIOError():
            return int(ErrorCode.IO_ERROR)
    return int(ErrorCode.INTERNAL_ERROR)

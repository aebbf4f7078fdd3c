from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ghrelease.github.client import RemoteError


@dataclass(frozen=True, slots=True)
class RemoteServiceError:
    """A remote call failed; `action` says what was being attempted."""

    action: str
    error: RemoteError

    @property
    def message(self) -> str:
        return f"{self.action}: {self.error}"


@dataclass(frozen=True, slots=True)
class ConfigurationError:
    message: str


@dataclass(frozen=True, slots=True)
class ConflictError:
    name: str

    @property
    def message(self) -> str:
        return f"asset file {self.name} already exists"


@dataclass(frozen=True, slots=True)
class LocalIOError:
    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to read {self.path} artifact: {self.reason}"


ResolveError = RemoteServiceError

SyncError = RemoteServiceError | ConfigurationError | ConflictError | LocalIOError

PublishError = SyncError

"""GitHub release API boundary."""

from .client import GitHubClient, ReleaseClient, RemoteError
from .mock import MockReleaseClient
from .models import RemoteAsset, RemoteRelease, ReleaseEdit, ReleaseFields

__all__ = [
    "GitHubClient",
    "MockReleaseClient",
    "ReleaseClient",
    "RemoteAsset",
    "RemoteError",
    "RemoteRelease",
    "ReleaseEdit",
    "ReleaseFields",
]

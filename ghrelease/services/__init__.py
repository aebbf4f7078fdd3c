"""Release reconciliation services."""

from .assets import SyncReport, sync_assets
from .publish import PublishOutcome, publish
from .resolver import Resolution, resolve_release

__all__ = [
    "PublishOutcome",
    "Resolution",
    "SyncReport",
    "publish",
    "resolve_release",
    "sync_assets",
]

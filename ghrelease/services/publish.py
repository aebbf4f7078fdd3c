"""Publish flow: checksums, release resolution, asset synchronisation."""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ghrelease.core.result import Err, Ok, Result
from ghrelease.services.assets import SyncReport, sync_assets
from ghrelease.services.checksums import write_checksums
from ghrelease.services.errors import PublishError
from ghrelease.services.resolver import Resolution, resolve_release

if TYPE_CHECKING:
    from ghrelease.core.config import Settings
    from ghrelease.core.deadline import Deadline
    from ghrelease.github.client import ReleaseClient
    from ghrelease.output.console import ConsoleProtocol

__all__ = ["PublishOutcome", "publish"]


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    resolution: Resolution
    report: SyncReport
    checksum_files: tuple[str, ...] = ()


def _run(
    settings: Settings,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
    checksum_dir: Path,
) -> Result[PublishOutcome, PublishError]:
    spec = settings.spec
    files = list(spec.files)

    # Checksums are written before anything remote changes, so an unreadable
    # artifact fails the run with the release untouched.
    checksum_files: list[Path] = []
    if settings.checksums:
        written = write_checksums(spec.files, settings.checksums, checksum_dir)
        if isinstance(written, Err):
            return written
        checksum_files = written.value
        files.extend(checksum_files)

    resolved = resolve_release(spec, client, console, deadline)
    if isinstance(resolved, Err):
        return resolved
    resolution = resolved.value

    synced = sync_assets(spec, resolution.release.id, files, client, console, deadline)
    if isinstance(synced, Err):
        return synced

    return Ok(
        PublishOutcome(
            resolution=resolution,
            report=synced.value,
            checksum_files=tuple(p.name for p in checksum_files),
        )
    )


def publish(
    settings: Settings,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> Result[PublishOutcome, PublishError]:
    """Bring the remote release in line with `settings` and upload its files.

    Stops at the first fatal error; nothing is retried. Running it again with
    the same settings is safe and converges on the same remote state.
    """
    spec = settings.spec
    console.header(f"Publishing {spec.tag} to {spec.slug}")

    if settings.checksum_dir is not None:
        return _run(settings, client, console, deadline, settings.checksum_dir)

    with tempfile.TemporaryDirectory(prefix="ghrelease-") as tmp:
        return _run(settings, client, console, deadline, Path(tmp))

"""Asset synchronisation for a resolved release.

The remote asset list is fetched once. Conflicts are settled for every file
before the first upload, so a "fail" collision leaves the release untouched.
Uploads then run one file at a time, delete-then-upload, in input order: if
the run dies midway, a prefix of the files is fully synchronised and the rest
is untouched, and re-running picks up from the remote state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

from ghrelease.core.config import FileExistsPolicy
from ghrelease.core.result import Err, Ok, Result
from ghrelease.services.errors import (
    ConfigurationError,
    ConflictError,
    LocalIOError,
    RemoteServiceError,
    SyncError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ghrelease.core.config import ReleaseSpec
    from ghrelease.core.deadline import Deadline
    from ghrelease.github.client import ReleaseClient
    from ghrelease.github.models import RemoteAsset
    from ghrelease.output.console import ConsoleProtocol

__all__ = ["SyncReport", "select_uploads", "sync_assets"]


@dataclass(frozen=True, slots=True)
class SyncReport:
    uploaded: tuple[str, ...] = ()
    replaced: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


class _ArtifactReader:
    """Upload body that remembers its own read failure.

    The client reports any failure during the request as a remote error; a
    recorded OSError here means the local file was at fault instead.
    """

    def __init__(self, handle: BinaryIO) -> None:
        self._handle = handle
        self.error: OSError | None = None

    def read(self, size: int = -1, /) -> bytes:
        try:
            return self._handle.read(size)
        except OSError as e:
            self.error = e
            raise


def _policy(value: FileExistsPolicy | str) -> FileExistsPolicy | None:
    if isinstance(value, FileExistsPolicy):
        return value
    try:
        return FileExistsPolicy(value)
    except ValueError:
        return None


def select_uploads(
    files: Sequence[Path],
    assets: Sequence[RemoteAsset],
    policy: FileExistsPolicy | str,
    console: ConsoleProtocol,
) -> Result[tuple[list[Path], list[str]], SyncError]:
    """Apply the file_exists policy to every file.

    Returns:
        Ok((files to upload, skipped names)), or Err on the first "fail"
        collision or an unknown policy value.
    """
    existing = {asset.name for asset in assets}
    selected: list[Path] = []
    skipped: list[str] = []

    for path in files:
        name = path.name
        if name in existing:
            match _policy(policy):
                case FileExistsPolicy.OVERWRITE:
                    pass
                case FileExistsPolicy.FAIL:
                    return Err(ConflictError(name=name))
                case FileExistsPolicy.SKIP:
                    console.print(f"Skipping pre-existing {name} artifact")
                    skipped.append(name)
                    continue
                case _:
                    return Err(
                        ConfigurationError(f"internal error, unknown file_exists value {policy}")
                    )
        selected.append(path)

    return Ok((selected, skipped))


def sync_assets(
    spec: ReleaseSpec,
    release_id: int,
    files: Sequence[Path],
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> Result[SyncReport, SyncError]:
    """Make every file present on the release as a same-named asset.

    Args:
        spec: Release settings (owner, repo and file_exists policy are used)
        release_id: Release returned by the resolver
        files: Local files, in upload order
        client: Release API client
        console: Progress output
        deadline: Run deadline, passed to every call

    Returns:
        Ok(SyncReport) when all selected files were uploaded, else the first
        fatal error.
    """
    listed = client.list_release_assets(spec.owner, spec.repo, release_id, deadline=deadline)
    if isinstance(listed, Err):
        return Err(RemoteServiceError(action="failed to fetch existing assets", error=listed.error))
    assets = listed.value

    selection = select_uploads(files, assets, spec.file_exists, console)
    if isinstance(selection, Err):
        return selection
    selected, skipped = selection.value

    uploaded: list[str] = []
    replaced: list[str] = []

    for path in selected:
        name = path.name
        try:
            handle = path.open("rb")
        except OSError as e:
            return Err(LocalIOError(path=path, reason=e.strerror or str(e)))

        with handle:
            size = os.fstat(handle.fileno()).st_size

            for asset in assets:
                if asset.name != name:
                    continue
                deleted = client.delete_release_asset(
                    spec.owner, spec.repo, asset.id, deadline=deadline
                )
                if isinstance(deleted, Err):
                    return Err(
                        RemoteServiceError(action=f"failed to delete {path} artifact", error=deleted.error)
                    )
                console.print(f"Successfully deleted old {asset.name} artifact")
                if name not in replaced:
                    replaced.append(name)

            reader = _ArtifactReader(handle)
            result = client.upload_release_asset(
                spec.owner, spec.repo, release_id, name, reader, size, deadline=deadline
            )
            if isinstance(result, Err):
                if reader.error is not None:
                    return Err(LocalIOError(path=path, reason=reader.error.strerror or str(reader.error)))
                return Err(RemoteServiceError(action=f"failed to upload {path} artifact", error=result.error))

        console.success(f"Successfully uploaded {path} artifact")
        uploaded.append(name)

    return Ok(SyncReport(uploaded=tuple(uploaded), replaced=tuple(replaced), skipped=tuple(skipped)))

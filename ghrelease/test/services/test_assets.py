"""Tests for services/assets.py - file_exists policy and upload loop."""

from __future__ import annotations

import errno
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from ghrelease.core.config import FileExistsPolicy, ReleaseSpec
from ghrelease.core.deadline import Deadline
from ghrelease.core.errors import ErrorCode
from ghrelease.core.result import Err, Ok
from ghrelease.github.mock import MockReleaseClient
from ghrelease.github.models import RemoteAsset
from ghrelease.output.console import MockConsole
from ghrelease.output.errors import publish_error_exit_code
from ghrelease.services.assets import select_uploads, sync_assets
from ghrelease.services.errors import (
    ConfigurationError,
    ConflictError,
    LocalIOError,
    RemoteServiceError,
)

NEVER = Deadline.never()


def _spec(**overrides: Any) -> ReleaseSpec:
    values: dict[str, Any] = {"owner": "octo", "repo": "widgets", "tag": "v1.0.0"}
    values.update(overrides)
    return ReleaseSpec(**values)


def _write(directory: Path, name: str, content: bytes) -> Path:
    path = directory / name
    path.write_bytes(content)
    return path


class _FailingReads:
    """Open file whose reads fail like a disk error."""

    def __init__(self, real: BinaryIO) -> None:
        self._real = real

    def fileno(self) -> int:
        return self._real.fileno()

    def read(self, size: int = -1, /) -> bytes:
        raise OSError(errno.EIO, "Input/output error")

    def __enter__(self) -> _FailingReads:
        return self

    def __exit__(self, *exc: object) -> None:
        self._real.close()


class TestSelectUploads:
    def test_no_collisions_keeps_order(self, tmp_path: Path) -> None:
        files = [tmp_path / "b.bin", tmp_path / "a.bin"]

        result = select_uploads(files, [], FileExistsPolicy.FAIL, MockConsole())

        assert result == Ok((files, []))

    def test_skip_drops_only_collisions(self, tmp_path: Path) -> None:
        files = [tmp_path / "a.bin", tmp_path / "b.bin"]
        assets = [RemoteAsset(id=1, name="a.bin")]
        console = MockConsole()

        result = select_uploads(files, assets, FileExistsPolicy.SKIP, console)

        assert result == Ok(([tmp_path / "b.bin"], ["a.bin"]))
        assert console.messages == ["Skipping pre-existing a.bin artifact"]

    def test_fail_reports_first_collision(self, tmp_path: Path) -> None:
        files = [tmp_path / "a.bin", tmp_path / "b.bin", tmp_path / "c.bin"]
        assets = [RemoteAsset(id=1, name="c.bin"), RemoteAsset(id=2, name="b.bin")]

        result = select_uploads(files, assets, FileExistsPolicy.FAIL, MockConsole())

        assert result == Err(ConflictError(name="b.bin"))

    def test_string_policy_is_accepted(self, tmp_path: Path) -> None:
        files = [tmp_path / "a.bin"]
        assets = [RemoteAsset(id=1, name="a.bin")]

        result = select_uploads(files, assets, "overwrite", MockConsole())

        assert result == Ok((files, []))

    def test_unknown_policy_on_collision(self, tmp_path: Path) -> None:
        files = [tmp_path / "a.bin"]
        assets = [RemoteAsset(id=1, name="a.bin")]

        result = select_uploads(files, assets, "replace", MockConsole())

        assert result == Err(ConfigurationError("internal error, unknown file_exists value replace"))

    def test_unknown_policy_without_collision(self, tmp_path: Path) -> None:
        files = [tmp_path / "a.bin"]

        result = select_uploads(files, [], "replace", MockConsole())

        assert isinstance(result, Ok)


class TestSyncAssets:
    def test_uploads_new_files(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        files = [_write(tmp_path, "a.bin", b"aaa"), _write(tmp_path, "b.bin", b"bb")]
        console = MockConsole()

        result = sync_assets(_spec(), release.id, files, client, console, NEVER)

        assert isinstance(result, Ok)
        assert result.value.uploaded == ("a.bin", "b.bin")
        assert result.value.replaced == ()
        assert client.asset_names(release.id) == ["a.bin", "b.bin"]
        assert client.content(release.id, "b.bin") == b"bb"
        assert client.count("delete_release_asset") == 0
        assert f"OK Successfully uploaded {files[0]} artifact" in console.messages

    def test_overwrite_deletes_then_uploads(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.add_asset(release.id, "a.bin", b"old")
        client.add_asset(release.id, "keep.txt", b"other")
        files = [_write(tmp_path, "a.bin", b"new")]
        console = MockConsole()

        result = sync_assets(
            _spec(file_exists=FileExistsPolicy.OVERWRITE), release.id, files, client, console, NEVER
        )

        assert isinstance(result, Ok)
        assert result.value.replaced == ("a.bin",)
        assert client.content(release.id, "a.bin") == b"new"
        assert client.content(release.id, "keep.txt") == b"other"
        assert client.operations() == [
            "list_release_assets",
            "delete_release_asset",
            "upload_release_asset",
        ]
        assert "Successfully deleted old a.bin artifact" in console.messages

    def test_fail_policy_uploads_nothing(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.add_asset(release.id, "b.bin", b"old")
        files = [_write(tmp_path, "a.bin", b"a"), _write(tmp_path, "b.bin", b"b")]

        result = sync_assets(
            _spec(file_exists=FileExistsPolicy.FAIL), release.id, files, client, MockConsole(), NEVER
        )

        assert result == Err(ConflictError(name="b.bin"))
        assert client.count("upload_release_asset") == 0
        assert client.count("delete_release_asset") == 0
        assert client.content(release.id, "b.bin") == b"old"

    def test_skip_policy_leaves_existing(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.add_asset(release.id, "a.bin", b"old")
        files = [_write(tmp_path, "a.bin", b"new"), _write(tmp_path, "b.bin", b"b")]

        result = sync_assets(
            _spec(file_exists=FileExistsPolicy.SKIP), release.id, files, client, MockConsole(), NEVER
        )

        assert isinstance(result, Ok)
        assert result.value.skipped == ("a.bin",)
        assert result.value.uploaded == ("b.bin",)
        assert client.content(release.id, "a.bin") == b"old"

    def test_missing_file(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        missing = tmp_path / "missing.bin"

        result = sync_assets(_spec(), release.id, [missing], client, MockConsole(), NEVER)

        assert isinstance(result, Err)
        assert isinstance(result.error, LocalIOError)
        assert result.error.path == missing
        assert client.count("upload_release_asset") == 0

    def test_listing_failure(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.fail("list_release_assets", status=502)

        result = sync_assets(
            _spec(), release.id, [_write(tmp_path, "a.bin", b"a")], client, MockConsole(), NEVER
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, RemoteServiceError)
        assert result.error.action == "failed to fetch existing assets"

    def test_delete_failure_names_file(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.add_asset(release.id, "a.bin", b"old")
        client.fail("delete_release_asset", status=403)
        path = _write(tmp_path, "a.bin", b"new")

        result = sync_assets(_spec(), release.id, [path], client, MockConsole(), NEVER)

        assert isinstance(result, Err)
        assert isinstance(result.error, RemoteServiceError)
        assert result.error.action == f"failed to delete {path} artifact"
        assert client.count("upload_release_asset") == 0

    def test_upload_failure_stops_before_later_files(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.fail("upload_release_asset", status=502)
        files = [_write(tmp_path, "a.bin", b"a"), _write(tmp_path, "b.bin", b"b")]

        result = sync_assets(_spec(), release.id, files, client, MockConsole(), NEVER)

        assert isinstance(result, Err)
        assert isinstance(result.error, RemoteServiceError)
        assert result.error.action == f"failed to upload {files[0]} artifact"
        assert result.error.error.status == 502
        assert client.count("upload_release_asset") == 1
        assert client.asset_names(release.id) == []

    @pytest.mark.parametrize("policy", ["replace", "FAIL"])
    def test_unknown_policy_is_internal_error(self, tmp_path: Path, policy: str) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        client.add_asset(release.id, "a.bin")

        result = sync_assets(
            _spec(file_exists=policy),
            release.id,
            [_write(tmp_path, "a.bin", b"a")],
            client,
            MockConsole(),
            NEVER,
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, ConfigurationError)
        assert client.count("upload_release_asset") == 0

    def test_read_failure_during_upload_is_local(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        path = _write(tmp_path, "a.bin", b"data")
        real_open = Path.open

        def open_with_failing_reads(self: Path, *args: Any, **kwargs: Any) -> Any:
            handle = real_open(self, *args, **kwargs)
            return _FailingReads(handle) if self == path else handle

        monkeypatch.setattr(Path, "open", open_with_failing_reads)

        result = sync_assets(_spec(), release.id, [path], client, MockConsole(), NEVER)

        assert result == Err(LocalIOError(path=path, reason="Input/output error"))
        assert publish_error_exit_code(result.error) == int(ErrorCode.IO_ERROR)
        assert client.asset_names(release.id) == []

    def test_same_basename_twice_keeps_first(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        release = client.add_release("v1.0.0")
        (tmp_path / "dir1").mkdir()
        (tmp_path / "dir2").mkdir()
        first = _write(tmp_path / "dir1", "out.bin", b"first")
        second = _write(tmp_path / "dir2", "out.bin", b"second")

        result = sync_assets(
            _spec(file_exists=FileExistsPolicy.OVERWRITE),
            release.id,
            [first, second],
            client,
            MockConsole(),
            NEVER,
        )

        assert isinstance(result, Err)
        assert isinstance(result.error, RemoteServiceError)
        assert result.error.action == f"failed to upload {second} artifact"
        assert result.error.error.status == 422
        assert client.asset_names(release.id) == ["out.bin"]
        assert client.content(release.id, "out.bin") == b"first"

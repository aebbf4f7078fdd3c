"""In-memory ReleaseClient for tests.

Usage:
    client = MockReleaseClient()
    draft = client.add_release("v1.0.0", draft=True)
    client.add_asset(draft.id, "out.bin", b"old")
    client.fail("upload_release_asset", status=502)

    ... run the code under test ...

    assert client.count("delete_release_asset") == 1
    assert client.content(draft.id, "out.bin") == b"new"
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from ghrelease.core.result import Err, Ok, Result
from ghrelease.github.client import RemoteError, UploadContent
from ghrelease.github.models import RemoteAsset, RemoteRelease, ReleaseEdit, ReleaseFields

if TYPE_CHECKING:
    from ghrelease.core.deadline import Deadline

__all__ = ["MockReleaseClient"]


class MockReleaseClient:
    """Remote release state held in memory, with call recording.

    Releases are listed in insertion order. Failures registered with `fail()`
    are returned by every later call of that operation.
    """

    def __init__(self) -> None:
        self._releases: dict[int, RemoteRelease] = {}
        self._assets: dict[int, list[RemoteAsset]] = {}
        self._contents: dict[int, bytes] = {}
        self._failures: dict[str, RemoteError] = {}
        self._next_id = 1
        self.calls: list[tuple[str, object]] = []

    # -- test setup ---------------------------------------------------------

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def add_release(
        self,
        tag: str,
        *,
        draft: bool = False,
        prerelease: bool = False,
        name: str = "",
        body: str = "",
    ) -> RemoteRelease:
        release = RemoteRelease(
            id=self._new_id(),
            tag_name=tag,
            draft=draft,
            prerelease=prerelease,
            name=name,
            body=body,
        )
        self._releases[release.id] = release
        self._assets[release.id] = []
        return release

    def add_asset(self, release_id: int, name: str, content: bytes = b"") -> RemoteAsset:
        asset = RemoteAsset(id=self._new_id(), name=name, size=len(content))
        self._assets[release_id].append(asset)
        self._contents[asset.id] = content
        return asset

    def fail(self, operation: str, *, status: int = 500, message: str = "Server Error") -> None:
        self._failures[operation] = RemoteError(
            url=f"mock://{operation}", status=status, message=message
        )

    # -- inspection ---------------------------------------------------------

    @property
    def releases(self) -> list[RemoteRelease]:
        return [self._snapshot(r.id) for r in self._releases.values()]

    def asset_names(self, release_id: int) -> list[str]:
        return [a.name for a in self._assets.get(release_id, [])]

    def content(self, release_id: int, name: str) -> bytes | None:
        for asset in self._assets.get(release_id, []):
            if asset.name == name:
                return self._contents[asset.id]
        return None

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]

    # -- ReleaseClient ------------------------------------------------------

    def _enter(self, operation: str, args: object, deadline: Deadline) -> RemoteError | None:
        self.calls.append((operation, args))
        if deadline.expired:
            return RemoteError(url=f"mock://{operation}", status=0, message="deadline exceeded")
        return self._failures.get(operation)

    def _snapshot(self, release_id: int) -> RemoteRelease:
        return replace(self._releases[release_id], assets=tuple(self._assets[release_id]))

    def _missing(self, what: str) -> Err[RemoteError]:
        return Err(RemoteError(url=f"mock://{what}", status=404, message="Not Found"))

    def list_releases(
        self, owner: str, repo: str, *, deadline: Deadline
    ) -> Result[list[RemoteRelease], RemoteError]:
        error = self._enter("list_releases", (owner, repo), deadline)
        if error is not None:
            return Err(error)
        return Ok(self.releases)

    def get_release(
        self, owner: str, repo: str, release_id: int, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        error = self._enter("get_release", release_id, deadline)
        if error is not None:
            return Err(error)
        if release_id not in self._releases:
            return self._missing(f"releases/{release_id}")
        return Ok(self._snapshot(release_id))

    def get_release_by_tag(
        self, owner: str, repo: str, tag: str, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        error = self._enter("get_release_by_tag", tag, deadline)
        if error is not None:
            return Err(error)
        # Like GitHub, drafts are not addressable by tag.
        for release in self._releases.values():
            if release.tag_name == tag and not release.draft:
                return Ok(self._snapshot(release.id))
        return self._missing(f"releases/tags/{tag}")

    def create_release(
        self, owner: str, repo: str, fields: ReleaseFields, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        error = self._enter("create_release", fields, deadline)
        if error is not None:
            return Err(error)
        release = self.add_release(
            fields.tag_name,
            draft=fields.draft,
            prerelease=fields.prerelease,
            name=fields.name,
            body=fields.body,
        )
        return Ok(release)

    def edit_release(
        self, owner: str, repo: str, release_id: int, edit: ReleaseEdit, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        error = self._enter("edit_release", (release_id, edit), deadline)
        if error is not None:
            return Err(error)
        if release_id not in self._releases:
            return self._missing(f"releases/{release_id}")

        current = self._releases[release_id]
        draft = current.draft if edit.draft is None else edit.draft
        self._releases[release_id] = replace(current, name=edit.name, body=edit.body, draft=draft)
        return Ok(self._snapshot(release_id))

    def list_release_assets(
        self, owner: str, repo: str, release_id: int, *, deadline: Deadline
    ) -> Result[list[RemoteAsset], RemoteError]:
        error = self._enter("list_release_assets", release_id, deadline)
        if error is not None:
            return Err(error)
        if release_id not in self._assets:
            return self._missing(f"releases/{release_id}/assets")
        return Ok(list(self._assets[release_id]))

    def delete_release_asset(
        self, owner: str, repo: str, asset_id: int, *, deadline: Deadline
    ) -> Result[None, RemoteError]:
        error = self._enter("delete_release_asset", asset_id, deadline)
        if error is not None:
            return Err(error)
        for assets in self._assets.values():
            for asset in assets:
                if asset.id == asset_id:
                    assets.remove(asset)
                    del self._contents[asset_id]
                    return Ok(None)
        return self._missing(f"releases/assets/{asset_id}")

    def upload_release_asset(
        self,
        owner: str,
        repo: str,
        release_id: int,
        name: str,
        content: UploadContent,
        size: int,
        *,
        deadline: Deadline,
    ) -> Result[RemoteAsset, RemoteError]:
        error = self._enter("upload_release_asset", (release_id, name), deadline)
        if error is not None:
            return Err(error)
        if release_id not in self._assets:
            return self._missing(f"releases/{release_id}/assets")
        if name in self.asset_names(release_id):
            # GitHub rejects duplicate names instead of replacing.
            return Err(
                RemoteError(url="mock://upload_release_asset", status=422, message="already_exists")
            )
        try:
            data = content.read()
        except OSError as e:
            # Same as GitHubClient: the transport only sees a failed request.
            return Err(RemoteError(url="mock://upload_release_asset", status=0, message=str(e)))
        return Ok(self.add_asset(release_id, name, data))

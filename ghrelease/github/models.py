"""Snapshots of GitHub release state, and the payloads sent to change it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ghrelease.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_str

__all__ = [
    "RemoteAsset",
    "RemoteRelease",
    "ReleaseEdit",
    "ReleaseFields",
    "asset_from_json",
    "release_from_json",
]


@dataclass(frozen=True, slots=True)
class RemoteAsset:
    id: int
    name: str
    size: int = 0
    download_url: str | None = None


@dataclass(frozen=True, slots=True)
class RemoteRelease:
    """A release as last seen on the remote side."""

    id: int
    tag_name: str
    draft: bool
    prerelease: bool
    name: str = ""
    body: str = ""
    html_url: str | None = None
    assets: tuple[RemoteAsset, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseFields:
    """Payload for creating a release."""

    tag_name: str
    draft: bool
    prerelease: bool
    name: str
    body: str

    def to_json(self) -> dict[str, Any]:
        return {
            "tag_name": self.tag_name,
            "draft": self.draft,
            "prerelease": self.prerelease,
            "name": self.name,
            "body": self.body,
        }


@dataclass(frozen=True, slots=True)
class ReleaseEdit:
    """Payload for editing a release.

    `draft` is None when the draft flag must be left as it is on the remote.
    """

    name: str
    body: str
    draft: bool | None = None

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "body": self.body}
        if self.draft is not None:
            payload["draft"] = self.draft
        return payload


def asset_from_json(obj: object) -> RemoteAsset | None:
    data = as_str_dict(obj)
    if data is None:
        return None

    asset_id = get_int(data, "id")
    name = get_str(data, "name")
    if asset_id is None or name is None:
        return None

    return RemoteAsset(
        id=asset_id,
        name=name,
        size=get_int(data, "size") or 0,
        download_url=get_str(data, "browser_download_url"),
    )


def release_from_json(obj: object) -> RemoteRelease | None:
    """Parse a release payload; None if required fields are missing."""
    data = as_str_dict(obj)
    if data is None:
        return None

    release_id = get_int(data, "id")
    tag = get_str(data, "tag_name")
    if release_id is None or tag is None:
        return None

    assets: list[RemoteAsset] = []
    for item in as_obj_list(data.get("assets")) or []:
        asset = asset_from_json(item)
        if asset is not None:
            assets.append(asset)

    return RemoteRelease(
        id=release_id,
        tag_name=tag,
        draft=bool(get_bool(data, "draft")),
        prerelease=bool(get_bool(data, "prerelease")),
        name=get_str(data, "name") or "",
        body=get_str(data, "body") or "",
        html_url=get_str(data, "html_url"),
        assets=tuple(assets),
    )

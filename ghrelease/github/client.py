"""GitHub release API client.

This module provides:
- ReleaseClient: Protocol for the release operations the services need
- GitHubClient: Real implementation over the GitHub REST API using urllib
- RemoteError: Error details for a failed call

Every operation takes the run's Deadline explicitly and returns a Result;
nothing here raises on HTTP or network failures.
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ghrelease import __version__
from ghrelease.core.config import DEFAULT_BASE_URL, DEFAULT_UPLOAD_URL
from ghrelease.core.result import Err, Ok, Result
from ghrelease.core.structured import as_obj_list, as_str_dict, get_str
from ghrelease.github.models import (
    RemoteAsset,
    RemoteRelease,
    ReleaseEdit,
    ReleaseFields,
    asset_from_json,
    release_from_json,
)

if TYPE_CHECKING:
    from ghrelease.core.deadline import Deadline

__all__ = [
    "GitHubClient",
    "ReleaseClient",
    "RemoteError",
    "UploadContent",
]

PER_PAGE = 100
API_VERSION = "2022-11-28"


@dataclass(frozen=True, slots=True)
class RemoteError:
    """Details of a failed remote call.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors and timeouts)
        message: Human-readable error message
    """

    url: str
    status: int
    message: str

    @property
    def not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


class UploadContent(Protocol):
    """Readable upload body. Read errors propagate as OSError."""

    def read(self, size: int = -1, /) -> bytes: ...


@runtime_checkable
class ReleaseClient(Protocol):
    """Release operations consumed by the resolver and the asset synchronizer.

    Listing operations return every page; callers never see pagination.
    """

    def list_releases(
        self, owner: str, repo: str, *, deadline: Deadline
    ) -> Result[list[RemoteRelease], RemoteError]: ...

    def get_release(
        self, owner: str, repo: str, release_id: int, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]: ...

    def get_release_by_tag(
        self, owner: str, repo: str, tag: str, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        """Fetch the release for `tag`; a missing release is Err with status 404."""
        ...

    def create_release(
        self, owner: str, repo: str, fields: ReleaseFields, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]: ...

    def edit_release(
        self, owner: str, repo: str, release_id: int, edit: ReleaseEdit, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]: ...

    def list_release_assets(
        self, owner: str, repo: str, release_id: int, *, deadline: Deadline
    ) -> Result[list[RemoteAsset], RemoteError]: ...

    def delete_release_asset(
        self, owner: str, repo: str, asset_id: int, *, deadline: Deadline
    ) -> Result[None, RemoteError]: ...

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
    ) -> Result[RemoteAsset, RemoteError]: ...


def _quote(value: str) -> str:
    return urllib.parse.quote(value, safe="")


class GitHubClient:
    """GitHub REST client using urllib.

    Handles:
    - Bearer token authentication
    - GitHub Enterprise (custom API and upload base URLs)
    - Page-by-page listing
    - Per-call timeouts derived from the run deadline
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        upload_url: str = DEFAULT_UPLOAD_URL,
        user_agent: str = f"ghrelease/{__version__}",
    ) -> None:
        self._token = token
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.upload_url = upload_url if upload_url.endswith("/") else f"{upload_url}/"
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "User-Agent": self.user_agent,
            "X-GitHub-Api-Version": API_VERSION,
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        deadline: Deadline,
        data: bytes | UploadContent | None = None,
        headers: dict[str, str] | None = None,
    ) -> Result[bytes, RemoteError]:
        """Perform one HTTP request and return the raw response body."""
        if deadline.expired:
            return Err(RemoteError(url=url, status=0, message="deadline exceeded"))

        req = urllib.request.Request(
            url,
            data=data,
            method=method,
            headers=self._headers(headers),
        )
        try:
            with urllib.request.urlopen(
                req,
                timeout=deadline.call_timeout(),
                context=self._ssl_context,
            ) as response:
                return Ok(response.read())
        except urllib.error.HTTPError as e:
            return Err(RemoteError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(RemoteError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(RemoteError(url=url, status=0, message="request timed out"))
        except OSError as e:
            return Err(RemoteError(url=url, status=0, message=str(e)))

    def _json(
        self,
        method: str,
        path: str,
        *,
        deadline: Deadline,
        payload: dict[str, Any] | None = None,
    ) -> Result[object, RemoteError]:
        url = urllib.parse.urljoin(self.base_url, path)
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        headers = {"Content-Type": "application/json"} if data is not None else None

        result = self._request(method, url, deadline=deadline, data=data, headers=headers)
        if isinstance(result, Err):
            return result

        try:
            return Ok(json.loads(result.value.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(RemoteError(url=url, status=0, message=f"JSON parse error: {e}"))

    def _release(
        self, method: str, path: str, *, deadline: Deadline, payload: dict[str, Any] | None = None
    ) -> Result[RemoteRelease, RemoteError]:
        result = self._json(method, path, deadline=deadline, payload=payload)
        if isinstance(result, Err):
            return result

        release = release_from_json(result.value)
        if release is None:
            url = urllib.parse.urljoin(self.base_url, path)
            return Err(RemoteError(url=url, status=0, message="unexpected release payload"))
        return Ok(release)

    def _paginate(self, path: str, *, deadline: Deadline) -> Result[list[object], RemoteError]:
        items: list[object] = []
        page = 1
        while True:
            sep = "&" if "?" in path else "?"
            page_path = f"{path}{sep}per_page={PER_PAGE}&page={page}"
            result = self._json("GET", page_path, deadline=deadline)
            if isinstance(result, Err):
                return result

            batch = as_obj_list(result.value)
            if batch is None:
                url = urllib.parse.urljoin(self.base_url, page_path)
                return Err(RemoteError(url=url, status=0, message="expected a JSON list"))

            items.extend(batch)
            if len(batch) < PER_PAGE:
                return Ok(items)
            page += 1

    def list_releases(
        self, owner: str, repo: str, *, deadline: Deadline
    ) -> Result[list[RemoteRelease], RemoteError]:
        result = self._paginate(f"repos/{owner}/{repo}/releases", deadline=deadline)
        if isinstance(result, Err):
            return result

        # Order is whatever GitHub returns; draft pickup depends on it.
        releases = [r for r in (release_from_json(item) for item in result.value) if r is not None]
        return Ok(releases)

    def get_release(
        self, owner: str, repo: str, release_id: int, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        return self._release("GET", f"repos/{owner}/{repo}/releases/{release_id}", deadline=deadline)

    def get_release_by_tag(
        self, owner: str, repo: str, tag: str, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        return self._release(
            "GET", f"repos/{owner}/{repo}/releases/tags/{_quote(tag)}", deadline=deadline
        )

    def create_release(
        self, owner: str, repo: str, fields: ReleaseFields, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        return self._release(
            "POST", f"repos/{owner}/{repo}/releases", deadline=deadline, payload=fields.to_json()
        )

    def edit_release(
        self, owner: str, repo: str, release_id: int, edit: ReleaseEdit, *, deadline: Deadline
    ) -> Result[RemoteRelease, RemoteError]:
        return self._release(
            "PATCH",
            f"repos/{owner}/{repo}/releases/{release_id}",
            deadline=deadline,
            payload=edit.to_json(),
        )

    def list_release_assets(
        self, owner: str, repo: str, release_id: int, *, deadline: Deadline
    ) -> Result[list[RemoteAsset], RemoteError]:
        result = self._paginate(f"repos/{owner}/{repo}/releases/{release_id}/assets", deadline=deadline)
        if isinstance(result, Err):
            return result

        assets = [a for a in (asset_from_json(item) for item in result.value) if a is not None]
        return Ok(assets)

    def delete_release_asset(
        self, owner: str, repo: str, asset_id: int, *, deadline: Deadline
    ) -> Result[None, RemoteError]:
        url = urllib.parse.urljoin(self.base_url, f"repos/{owner}/{repo}/releases/assets/{asset_id}")
        result = self._request("DELETE", url, deadline=deadline)
        if isinstance(result, Err):
            return result
        return Ok(None)

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
        """Stream `content` to the uploads host under `name`."""
        url = urllib.parse.urljoin(
            self.upload_url,
            f"repos/{owner}/{repo}/releases/{release_id}/assets?name={_quote(name)}",
        )
        result = self._request(
            "POST",
            url,
            deadline=deadline,
            data=content,
            headers={
                "Content-Type": "application/octet-stream",
                "Content-Length": str(size),
            },
        )
        if isinstance(result, Err):
            return result

        try:
            obj: object = json.loads(result.value.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(RemoteError(url=url, status=0, message=f"JSON parse error: {e}"))

        asset = asset_from_json(obj)
        if asset is None:
            return Err(RemoteError(url=url, status=0, message="unexpected asset payload"))
        return Ok(asset)


def _error_message(error: urllib.error.HTTPError) -> str:
    """Prefer GitHub's JSON `message` over the bare HTTP reason."""
    try:
        body = error.read()
    except OSError:
        body = b""

    try:
        data = as_str_dict(json.loads(body.decode("utf-8"))) if body else None
    except (json.JSONDecodeError, UnicodeDecodeError):
        data = None

    if data is not None:
        message = get_str(data, "message")
        if message:
            return message
    return str(error.reason)

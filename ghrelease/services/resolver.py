"""Release resolution: pick the release to publish into, creating or editing it.

Order of precedence:

1. With pickup_draft, the first draft in the listing whose tag matches.
   Listing order is whatever GitHub returns; when several drafts share the
   tag, the first one wins and the rest are ignored.
2. Otherwise the release addressed by the tag.
3. Nothing found: create it. Found and overwrite: edit name/body, and only
   publish (never unpublish) a draft. Found without overwrite: reuse as is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from ghrelease.core.result import Err, Ok, Result
from ghrelease.github.client import RemoteError
from ghrelease.github.models import RemoteRelease, ReleaseEdit, ReleaseFields
from ghrelease.services.errors import RemoteServiceError, ResolveError

if TYPE_CHECKING:
    from ghrelease.core.config import ReleaseSpec
    from ghrelease.core.deadline import Deadline
    from ghrelease.github.client import ReleaseClient
    from ghrelease.output.console import ConsoleProtocol

__all__ = [
    "Found",
    "NotFound",
    "Resolution",
    "ServiceFailure",
    "TagLookup",
    "find_draft",
    "lookup_by_tag",
    "plan_edit",
    "resolve_release",
]

RESOLVE_CONTEXT = "failed to retrieve or create a release"


@dataclass(frozen=True, slots=True)
class Found:
    release: RemoteRelease


@dataclass(frozen=True, slots=True)
class NotFound:
    tag: str


@dataclass(frozen=True, slots=True)
class ServiceFailure:
    error: RemoteError


TagLookup = Found | NotFound | ServiceFailure


@dataclass(frozen=True, slots=True)
class Resolution:
    release: RemoteRelease
    action: Literal["created", "updated", "reused"]


def _fail(action: str, error: RemoteError) -> Err[RemoteServiceError]:
    return Err(RemoteServiceError(action=f"{RESOLVE_CONTEXT}: {action}", error=error))


def find_draft(
    spec: ReleaseSpec,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> Result[RemoteRelease | None, RemoteServiceError]:
    """Return the first draft for spec.tag, fetched by id, or None."""
    listed = client.list_releases(spec.owner, spec.repo, deadline=deadline)
    if isinstance(listed, Err):
        return _fail("failed to list releases", listed.error)

    draft_id: int | None = None
    for release in listed.value:
        if release.draft and release.tag_name == spec.tag:
            draft_id = release.id
            break

    if draft_id is None:
        console.print("No release draft found")
        return Ok(None)

    fetched = client.get_release(spec.owner, spec.repo, draft_id, deadline=deadline)
    if isinstance(fetched, Err):
        return _fail(f"failed to get release for ID {draft_id}", fetched.error)
    return Ok(fetched.value)


def lookup_by_tag(
    spec: ReleaseSpec,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> TagLookup:
    result = client.get_release_by_tag(spec.owner, spec.repo, spec.tag, deadline=deadline)
    if isinstance(result, Ok):
        console.print(f"Successfully retrieved {spec.tag} release")
        return Found(result.value)
    if result.error.not_found:
        console.print(f"Release {spec.tag} not found")
        return NotFound(spec.tag)
    return ServiceFailure(result.error)


def plan_edit(spec: ReleaseSpec, target: RemoteRelease) -> ReleaseEdit:
    """Edit payload for an existing release.

    Name and body always follow the spec. The draft flag is only sent when
    the target is a draft: a draft may be published, a published release is
    never turned back into a draft.
    """
    if target.draft:
        return ReleaseEdit(name=spec.title, body=spec.note, draft=spec.draft)
    return ReleaseEdit(name=spec.title, body=spec.note)


def _create(
    spec: ReleaseSpec,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> Result[RemoteRelease, RemoteServiceError]:
    fields = ReleaseFields(
        tag_name=spec.tag,
        draft=spec.draft,
        prerelease=spec.prerelease,
        name=spec.title,
        body=spec.note,
    )

    if fields.prerelease:
        console.print(f"Release {spec.tag} identified as a pre-release")
    else:
        console.print(f"Release {spec.tag} identified as a full release")

    if fields.draft:
        console.print(f"Release {spec.tag} will be created as draft (unpublished) release")
    else:
        console.print(f"Release {spec.tag} will be created and published")

    created = client.create_release(spec.owner, spec.repo, fields, deadline=deadline)
    if isinstance(created, Err):
        return _fail("failed to create release", created.error)

    console.success(f"Successfully created {spec.tag} release")
    return Ok(created.value)


def _edit(
    spec: ReleaseSpec,
    target: RemoteRelease,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> Result[RemoteRelease, RemoteServiceError]:
    edit = plan_edit(spec, target)
    if edit.draft is False:
        console.print("Publishing a release draft")

    edited = client.edit_release(spec.owner, spec.repo, target.id, edit, deadline=deadline)
    if isinstance(edited, Err):
        return _fail("failed to update release", edited.error)

    console.success(f"Successfully updated {spec.tag} release")
    return Ok(edited.value)


def resolve_release(
    spec: ReleaseSpec,
    client: ReleaseClient,
    console: ConsoleProtocol,
    deadline: Deadline,
) -> Result[Resolution, ResolveError]:
    """Find, create or update the release that assets will be attached to."""
    candidate: RemoteRelease | None = None

    if spec.pickup_draft:
        draft = find_draft(spec, client, console, deadline)
        if isinstance(draft, Err):
            return draft
        candidate = draft.value

    if candidate is None:
        match lookup_by_tag(spec, client, console, deadline):
            case Found(release=release):
                candidate = release
            case NotFound():
                pass
            case ServiceFailure(error=error):
                return _fail(f"failed to get release {spec.tag}", error)

    if candidate is None:
        created = _create(spec, client, console, deadline)
        if isinstance(created, Err):
            return created
        return Ok(Resolution(release=created.value, action="created"))

    if spec.overwrite:
        edited = _edit(spec, candidate, client, console, deadline)
        if isinstance(edited, Err):
            return edited
        return Ok(Resolution(release=edited.value, action="updated"))

    return Ok(Resolution(release=candidate, action="reused"))

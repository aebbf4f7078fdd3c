"""Typed run configuration.

Raw option values (CLI flags or their PLUGIN_* environment fallbacks) are
normalized and validated once, into immutable dataclasses the services read.
Nothing downstream re-validates: a ReleaseSpec that exists is a valid one.
"""

from __future__ import annotations

import glob
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "CHECKSUM_ALGORITHMS",
    "ConfigError",
    "FileExistsPolicy",
    "RawOptions",
    "ReleaseSpec",
    "Settings",
    "checksum_file_name",
    "expand_files",
    "load_settings",
    "parse_policy",
    "read_string_or_file",
]

DEFAULT_BASE_URL = "https://api.github.com/"
DEFAULT_UPLOAD_URL = "https://uploads.github.com/"
DEFAULT_TIMEOUT_SECONDS = 5 * 60.0

CHECKSUM_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256", "sha512", "adler32", "crc32")

# Values longer than this are never treated as a path for title/note.
_MAX_PATH_LIKE_LENGTH = 255


class FileExistsPolicy(Enum):
    """What to do when an artifact name is already taken on the release."""

    OVERWRITE = "overwrite"
    FAIL = "fail"
    SKIP = "skip"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when options cannot be turned into a valid configuration."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseSpec:
    """Desired release state for one run."""

    owner: str
    repo: str
    tag: str
    draft: bool = False
    prerelease: bool = False
    title: str = ""
    note: str = ""
    overwrite: bool = False
    pickup_draft: bool = False
    file_exists: FileExistsPolicy | str = FileExistsPolicy.OVERWRITE
    files: tuple[Path, ...] = ()

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True, slots=True)
class Settings:
    """Everything a publish run needs besides the client and the console."""

    spec: ReleaseSpec
    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    upload_url: str = DEFAULT_UPLOAD_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    checksums: tuple[str, ...] = ()
    checksum_dir: Path | None = None


@dataclass(frozen=True, slots=True)
class RawOptions:
    """Unvalidated option values as received from the command line."""

    api_key: str | None = None
    repo: str | None = None
    owner: str | None = None
    name: str | None = None
    tag: str | None = None
    files: tuple[str, ...] = ()
    file_exists: str = "overwrite"
    checksums: tuple[str, ...] = ()
    checksum_dir: str | None = None
    draft: bool = False
    prerelease: bool = False
    title: str | None = None
    note: str | None = None
    overwrite: bool = False
    pickup_draft: bool = False
    base_url: str = DEFAULT_BASE_URL
    upload_url: str = DEFAULT_UPLOAD_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def parse_policy(value: str) -> Result[FileExistsPolicy, ConfigError]:
    try:
        return Ok(FileExistsPolicy(value.strip().lower()))
    except ValueError:
        allowed = ", ".join(p.value for p in FileExistsPolicy)
        return Err(ConfigError(f"invalid value for file_exists: {value!r}", hint=f"use one of: {allowed}"))


def _split_repo(raw: RawOptions) -> Result[tuple[str, str], ConfigError]:
    if raw.repo:
        owner, sep, name = raw.repo.strip().partition("/")
        if not sep or not owner or not name or "/" in name:
            return Err(ConfigError(f"invalid repository: {raw.repo!r}", hint="expected owner/name"))
        return Ok((owner, name))

    if raw.owner and raw.name:
        return Ok((raw.owner.strip(), raw.name.strip()))

    return Err(
        ConfigError(
            "repository not set",
            hint="pass --repo owner/name or set DRONE_REPO_OWNER and DRONE_REPO_NAME",
        )
    )


def _normalize_tag(tag: str | None) -> str | None:
    if tag is None:
        return None
    tag = tag.strip().removeprefix("refs/tags/")
    return tag or None


def _with_trailing_slash(url: str) -> str:
    url = url.strip()
    return url if url.endswith("/") else f"{url}/"


def read_string_or_file(value: str | None) -> Result[str, ConfigError]:
    """Return `value`, or the contents of the file it names.

    Title and note may be given inline or as a path to a file written by an
    earlier CI step (e.g. a generated changelog).
    """
    if not value:
        return Ok("")
    if len(value) >= _MAX_PATH_LIKE_LENGTH or "\n" in value:
        return Ok(value)

    path = Path(value)
    try:
        if not path.is_file():
            return Ok(value)
        return Ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(ConfigError(f"failed to read {value}: {e}"))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"{value} is not valid UTF-8: {e}"))


def expand_files(patterns: tuple[str, ...]) -> Result[tuple[Path, ...], ConfigError]:
    """Expand glob patterns in order, keeping the first occurrence of each file.

    Matches of a single pattern are sorted so the upload order is stable.
    Directories are ignored. A pattern that matches no file is an error: a
    missing build artifact should fail the pipeline, not publish a partial
    release.
    """
    out: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue

        matches = [Path(m) for m in sorted(glob.glob(pattern, recursive=True))]
        matches = [m for m in matches if m.is_file()]
        if not matches:
            return Err(ConfigError(f"no files match {pattern!r}"))

        for match in matches:
            if match not in seen:
                seen.add(match)
                out.append(match)

    return Ok(tuple(out))


def checksum_file_name(algorithm: str) -> str:
    return f"{algorithm}sum.txt"


def _check_reserved_names(
    files: tuple[Path, ...], algorithms: tuple[str, ...]
) -> Result[None, ConfigError]:
    """Artifacts may not share a name with a generated checksum file."""
    reserved = {checksum_file_name(algo) for algo in algorithms}
    for path in files:
        if path.name in reserved:
            return Err(
                ConfigError(
                    f"artifact {path} has the same name as a generated checksum file",
                    hint="rename the artifact or drop the matching --checksum algorithm",
                )
            )
    return Ok(None)

def _check_algorithms(names: tuple[str, ...]) -> Result[tuple[str, ...], ConfigError]:
    out: list[str] = []
    for name in names:
        algo = name.strip().lower()
        if not algo:
            continue
        if algo not in CHECKSUM_ALGORITHMS:
            return Err(
                ConfigError(
                    f"unsupported checksum algorithm: {name!r}",
                    hint=f"use one of: {', '.join(CHECKSUM_ALGORITHMS)}",
                )
            )
        if algo not in out:
            out.append(algo)
    return Ok(tuple(out))


def load_settings(raw: RawOptions) -> Result[Settings, ConfigError]:
    """Validate raw options and build the run settings.

    Args:
        raw: Option values from the CLI

    Returns:
        Ok(Settings) on success, Err(ConfigError) on the first invalid value
    """
    if not raw.api_key:
        return Err(ConfigError("missing api key", hint="pass --api-key or set GITHUB_TOKEN"))

    tag = _normalize_tag(raw.tag)
    if tag is None:
        return Err(ConfigError("missing tag", hint="pass --tag or run on a tag event"))

    repo = _split_repo(raw)
    if isinstance(repo, Err):
        return repo
    owner, name = repo.value

    policy = parse_policy(raw.file_exists)
    if isinstance(policy, Err):
        return policy

    algorithms = _check_algorithms(raw.checksums)
    if isinstance(algorithms, Err):
        return algorithms

    title = read_string_or_file(raw.title)
    if isinstance(title, Err):
        return title

    note = read_string_or_file(raw.note)
    if isinstance(note, Err):
        return note

    files = expand_files(raw.files)
    if isinstance(files, Err):
        return files

    reserved = _check_reserved_names(files.value, algorithms.value)
    if isinstance(reserved, Err):
        return reserved

    if raw.timeout <= 0:
        return Err(ConfigError(f"timeout must be positive, got {raw.timeout}"))

    spec = ReleaseSpec(
        owner=owner,
        repo=name,
        tag=tag,
        draft=raw.draft,
        prerelease=raw.prerelease,
        title=title.value,
        note=note.value,
        overwrite=raw.overwrite,
        pickup_draft=raw.pickup_draft,
        file_exists=policy.value,
        files=files.value,
    )

    return Ok(
        Settings(
            spec=spec,
            api_key=raw.api_key,
            base_url=_with_trailing_slash(raw.base_url),
            upload_url=_with_trailing_slash(raw.upload_url),
            timeout=raw.timeout,
            checksums=algorithms.value,
            checksum_dir=Path(raw.checksum_dir) if raw.checksum_dir else None,
        )
    )

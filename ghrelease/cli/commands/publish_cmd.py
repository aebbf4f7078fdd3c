from __future__ import annotations

import typer

from ghrelease.cli.commands._helpers import exit_with_code, split_values
from ghrelease.cli.context import CLIContext, build_context
from ghrelease.core.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, DEFAULT_UPLOAD_URL, RawOptions
from ghrelease.core.result import Err
from ghrelease.output.console import Style
from ghrelease.output.errors import print_publish_error, publish_error_exit_code
from ghrelease.services.publish import PublishOutcome
from ghrelease.services.publish import publish as run_publish


def publish(
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        envvar=["PLUGIN_API_KEY", "GITHUB_TOKEN"],
        help="GitHub token with write access to releases.",
        show_default=False,
    ),
    repo: str | None = typer.Option(
        None, "--repo", envvar="PLUGIN_REPO", help="Repository as owner/name."
    ),
    owner: str | None = typer.Option(None, "--owner", envvar="DRONE_REPO_OWNER", hidden=True),
    name: str | None = typer.Option(None, "--name", envvar="DRONE_REPO_NAME", hidden=True),
    tag: str | None = typer.Option(
        None, "--tag", envvar=["PLUGIN_TAG", "DRONE_TAG"], help="Release tag (refs/tags/ is stripped)."
    ),
    files: list[str] | None = typer.Option(
        None,
        "--files",
        "-f",
        envvar="PLUGIN_FILES",
        help="Artifact glob; repeat or separate with commas.",
    ),
    file_exists: str = typer.Option(
        "overwrite",
        "--file-exists",
        envvar="PLUGIN_FILE_EXISTS",
        help="What to do when an asset name is taken: overwrite, fail or skip.",
    ),
    checksum: list[str] | None = typer.Option(
        None,
        "--checksum",
        envvar="PLUGIN_CHECKSUM",
        help="Also publish <algo>sum.txt (md5, sha1, sha256, sha512, adler32, crc32).",
    ),
    checksum_dir: str | None = typer.Option(
        None, "--checksum-dir", envvar="PLUGIN_CHECKSUM_DIR", help="Where to write checksum files."
    ),
    draft: bool = typer.Option(False, "--draft", envvar="PLUGIN_DRAFT", help="Create as draft."),
    prerelease: bool = typer.Option(
        False, "--prerelease", envvar="PLUGIN_PRERELEASE", help="Mark as pre-release."
    ),
    title: str | None = typer.Option(
        None, "--title", envvar="PLUGIN_TITLE", help="Release title, or a file containing it."
    ),
    note: str | None = typer.Option(
        None, "--note", envvar="PLUGIN_NOTE", help="Release notes, or a file containing them."
    ),
    overwrite: bool = typer.Option(
        False, "--overwrite", envvar="PLUGIN_OVERWRITE", help="Update title/notes of an existing release."
    ),
    pickup_draft: bool = typer.Option(
        False, "--pickup-draft", envvar="PLUGIN_PICKUP_DRAFT", help="Prefer an existing draft for the tag."
    ),
    base_url: str = typer.Option(DEFAULT_BASE_URL, "--base-url", envvar="PLUGIN_BASE_URL"),
    upload_url: str = typer.Option(DEFAULT_UPLOAD_URL, "--upload-url", envvar="PLUGIN_UPLOAD_URL"),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT_SECONDS, "--timeout", envvar="PLUGIN_TIMEOUT", help="Overall deadline in seconds."
    ),
) -> None:
    """Create or update a release and upload its artifacts."""
    raw = RawOptions(
        api_key=api_key,
        repo=repo,
        owner=owner,
        name=name,
        tag=tag,
        files=split_values(files),
        file_exists=file_exists,
        checksums=split_values(checksum),
        checksum_dir=checksum_dir,
        draft=draft,
        prerelease=prerelease,
        title=title,
        note=note,
        overwrite=overwrite,
        pickup_draft=pickup_draft,
        base_url=base_url,
        upload_url=upload_url,
        timeout=timeout,
    )
    ctx = build_context(raw)

    result = run_publish(ctx.settings, ctx.client, ctx.console, ctx.deadline)
    if isinstance(result, Err):
        print_publish_error(result.error, ctx.console)
        exit_with_code(publish_error_exit_code(result.error))

    _print_summary(ctx, result.value)


def _print_summary(ctx: CLIContext, outcome: PublishOutcome) -> None:
    console = ctx.console
    release = outcome.resolution.release
    report = outcome.report

    console.header("Summary")
    state = "draft" if release.draft else "published"
    console.print(f"release: {release.tag_name} (id {release.id}, {state}, {outcome.resolution.action})")
    if release.html_url:
        console.print(f"url: {release.html_url}", Style.DIM)
    console.print(
        f"assets: {len(report.uploaded)} uploaded, {len(report.replaced)} replaced, "
        f"{len(report.skipped)} skipped"
    )
    if outcome.checksum_files:
        console.print(f"checksums: {', '.join(outcome.checksum_files)}", Style.DIM)

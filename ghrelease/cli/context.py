from __future__ import annotations

from dataclasses import dataclass

from ghrelease.cli.commands._helpers import exit_on_error
from ghrelease.core.config import RawOptions, Settings, load_settings
from ghrelease.core.deadline import Deadline
from ghrelease.core.errors import ErrorCode
from ghrelease.github.client import GitHubClient, ReleaseClient
from ghrelease.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    settings: Settings
    client: ReleaseClient
    console: ConsoleProtocol
    deadline: Deadline


def build_context(raw: RawOptions) -> CLIContext:
    console = RichConsole()
    settings = exit_on_error(load_settings(raw), console, ErrorCode.USER_ERROR)

    client = GitHubClient(
        settings.api_key,
        base_url=settings.base_url,
        upload_url=settings.upload_url,
    )

    return CLIContext(
        settings=settings,
        client=client,
        console=console,
        deadline=Deadline.after(settings.timeout),
    )

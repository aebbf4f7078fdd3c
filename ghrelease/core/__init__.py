"""Core types shared by the services and the CLI."""

from .config import (
    ConfigError,
    FileExistsPolicy,
    RawOptions,
    ReleaseSpec,
    Settings,
    load_settings,
)
from .deadline import Deadline
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "FileExistsPolicy",
    "RawOptions",
    "ReleaseSpec",
    "Settings",
    "load_settings",
    # deadline
    "Deadline",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]

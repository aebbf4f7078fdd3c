"""Checksum files published next to the release artifacts.

One `<algo>sum.txt` per algorithm, in the `sha256sum` text format
(`<digest>  <basename>`), so users can verify downloads with the
coreutils tools.
"""

from __future__ import annotations

import hashlib
import zlib
from pathlib import Path
from typing import TYPE_CHECKING

from ghrelease.core.config import CHECKSUM_ALGORITHMS, checksum_file_name
from ghrelease.core.result import Err, Ok, Result
from ghrelease.services.errors import LocalIOError

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ["checksum_file_name", "file_digest", "write_checksums"]

_CHUNK = 1024 * 1024


def file_digest(path: Path, algorithm: str) -> str:
    """Hex digest of a file. Raises OSError if the file cannot be read."""
    if algorithm not in CHECKSUM_ALGORITHMS:
        raise ValueError(f"unsupported checksum algorithm: {algorithm}")

    if algorithm in ("adler32", "crc32"):
        update = zlib.adler32 if algorithm == "adler32" else zlib.crc32
        value = 1 if algorithm == "adler32" else 0
        with path.open("rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK), b""):
                value = update(chunk, value)
        return f"{value & 0xFFFFFFFF:08x}"

    h = hashlib.new(algorithm)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def write_checksums(
    files: Sequence[Path],
    algorithms: Sequence[str],
    dest_dir: Path,
) -> Result[list[Path], LocalIOError]:
    """Write one checksum file per algorithm and return their paths."""
    written: list[Path] = []
    for algorithm in algorithms:
        out = dest_dir / checksum_file_name(algorithm)
        lines: list[str] = []
        for path in files:
            try:
                lines.append(f"{file_digest(path, algorithm)}  {path.name}\n")
            except OSError as e:
                return Err(LocalIOError(path=path, reason=e.strerror or str(e)))

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            out.write_text("".join(lines), encoding="utf-8")
        except OSError as e:
            return Err(LocalIOError(path=out, reason=e.strerror or str(e)))
        written.append(out)

    return Ok(written)

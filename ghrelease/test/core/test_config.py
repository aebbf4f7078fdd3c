"""Tests for ghrelease.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from ghrelease.core.config import (
    DEFAULT_BASE_URL,
    FileExistsPolicy,
    RawOptions,
    ReleaseSpec,
    expand_files,
    load_settings,
    parse_policy,
    read_string_or_file,
)
from ghrelease.core.result import Err, Ok


def _raw(**overrides: object) -> RawOptions:
    values: dict[str, object] = {
        "api_key": "token",
        "repo": "octo/widgets",
        "tag": "v1.0.0",
    }
    values.update(overrides)
    return RawOptions(**values)  # type: ignore[arg-type]


class TestFileExistsPolicy:
    def test_values(self) -> None:
        assert {p.value for p in FileExistsPolicy} == {"overwrite", "fail", "skip"}

    def test_parse_is_case_insensitive(self) -> None:
        assert parse_policy(" Skip ") == Ok(FileExistsPolicy.SKIP)

    def test_parse_unknown(self) -> None:
        result = parse_policy("replace")
        assert isinstance(result, Err)
        assert "replace" in result.error.message
        assert result.error.hint is not None
        assert "overwrite" in result.error.hint


class TestReleaseSpec:
    def test_defaults(self) -> None:
        spec = ReleaseSpec(owner="octo", repo="widgets", tag="v1")
        assert spec.file_exists == FileExistsPolicy.OVERWRITE
        assert spec.files == ()
        assert not spec.draft
        assert not spec.overwrite
        assert spec.slug == "octo/widgets"

    def test_frozen(self) -> None:
        spec = ReleaseSpec(owner="octo", repo="widgets", tag="v1")
        with pytest.raises(AttributeError):
            spec.tag = "v2"  # type: ignore[misc]


class TestReadStringOrFile:
    def test_empty(self) -> None:
        assert read_string_or_file(None) == Ok("")
        assert read_string_or_file("") == Ok("")

    def test_inline_value(self) -> None:
        assert read_string_or_file("Release 1.0") == Ok("Release 1.0")

    def test_reads_file(self, tmp_path: Path) -> None:
        notes = tmp_path / "CHANGELOG.md"
        notes.write_text("## Fixes\n- one\n", encoding="utf-8")
        assert read_string_or_file(str(notes)) == Ok("## Fixes\n- one\n")

    def test_multiline_is_never_a_path(self) -> None:
        assert read_string_or_file("line one\nline two") == Ok("line one\nline two")


class TestExpandFiles:
    def test_expands_in_pattern_order(self, tmp_path: Path) -> None:
        (tmp_path / "b.zip").write_bytes(b"b")
        (tmp_path / "a.tar.gz").write_bytes(b"a")
        (tmp_path / "c.tar.gz").write_bytes(b"c")

        result = expand_files((f"{tmp_path}/*.zip", f"{tmp_path}/*.tar.gz"))

        assert isinstance(result, Ok)
        assert [p.name for p in result.value] == ["b.zip", "a.tar.gz", "c.tar.gz"]

    def test_deduplicates(self, tmp_path: Path) -> None:
        (tmp_path / "out.bin").write_bytes(b"x")

        result = expand_files((f"{tmp_path}/out.bin", f"{tmp_path}/*.bin"))

        assert isinstance(result, Ok)
        assert [p.name for p in result.value] == ["out.bin"]

    def test_ignores_directories(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        (tmp_path / "out.bin").write_bytes(b"x")

        result = expand_files((f"{tmp_path}/*",))

        assert isinstance(result, Ok)
        assert [p.name for p in result.value] == ["out.bin"]

    def test_unmatched_pattern_is_error(self, tmp_path: Path) -> None:
        result = expand_files((f"{tmp_path}/*.exe",))
        assert isinstance(result, Err)
        assert "no files match" in result.error.message

    def test_blank_patterns_skipped(self) -> None:
        assert expand_files(("", "  ")) == Ok(())


class TestLoadSettings:
    def test_minimal(self) -> None:
        result = load_settings(_raw())

        assert isinstance(result, Ok)
        settings = result.value
        assert settings.spec.owner == "octo"
        assert settings.spec.repo == "widgets"
        assert settings.spec.tag == "v1.0.0"
        assert settings.spec.file_exists == FileExistsPolicy.OVERWRITE
        assert settings.base_url == DEFAULT_BASE_URL
        assert settings.checksums == ()

    def test_token_not_in_repr(self) -> None:
        result = load_settings(_raw(api_key="ghp_secret"))
        assert isinstance(result, Ok)
        assert "ghp_secret" not in repr(result.value)

    def test_missing_token(self) -> None:
        result = load_settings(_raw(api_key=None))
        assert isinstance(result, Err)
        assert "api key" in result.error.message

    def test_missing_tag(self) -> None:
        result = load_settings(_raw(tag="  "))
        assert isinstance(result, Err)
        assert "tag" in result.error.message

    def test_strips_refs_tags_prefix(self) -> None:
        result = load_settings(_raw(tag="refs/tags/v2.1.0"))
        assert isinstance(result, Ok)
        assert result.value.spec.tag == "v2.1.0"

    def test_owner_and_name_fallback(self) -> None:
        result = load_settings(_raw(repo=None, owner="octo", name="gadgets"))
        assert isinstance(result, Ok)
        assert result.value.spec.slug == "octo/gadgets"

    @pytest.mark.parametrize("repo", ["widgets", "octo/", "/widgets", "a/b/c"])
    def test_invalid_repo(self, repo: str) -> None:
        result = load_settings(_raw(repo=repo))
        assert isinstance(result, Err)
        assert "invalid repository" in result.error.message

    def test_missing_repo(self) -> None:
        result = load_settings(_raw(repo=None))
        assert isinstance(result, Err)
        assert result.error.message == "repository not set"

    def test_invalid_policy(self) -> None:
        result = load_settings(_raw(file_exists="clobber"))
        assert isinstance(result, Err)
        assert "file_exists" in result.error.message

    def test_checksums_normalized(self) -> None:
        result = load_settings(_raw(checksums=("SHA256", "md5", "sha256")))
        assert isinstance(result, Ok)
        assert result.value.checksums == ("sha256", "md5")

    def test_unsupported_checksum(self) -> None:
        result = load_settings(_raw(checksums=("blake3",)))
        assert isinstance(result, Err)
        assert "blake3" in result.error.message

    def test_artifact_named_like_checksum_file(self, tmp_path: Path) -> None:
        sums = tmp_path / "sha256sum.txt"
        sums.write_text("abc  out.bin\n", encoding="utf-8")

        rejected = load_settings(_raw(files=(str(sums),), checksums=("sha256",)))
        accepted = load_settings(_raw(files=(str(sums),), checksums=("md5",)))

        assert isinstance(rejected, Err)
        assert "sha256sum.txt" in rejected.error.message
        assert rejected.error.hint is not None
        assert isinstance(accepted, Ok)

    def test_enterprise_urls_get_trailing_slash(self) -> None:
        result = load_settings(
            _raw(
                base_url="https://ghe.example.com/api/v3",
                upload_url="https://ghe.example.com/api/uploads",
            )
        )
        assert isinstance(result, Ok)
        assert result.value.base_url == "https://ghe.example.com/api/v3/"
        assert result.value.upload_url == "https://ghe.example.com/api/uploads/"

    def test_note_from_file_and_files(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes.md"
        notes.write_text("release notes", encoding="utf-8")
        artifact = tmp_path / "out.bin"
        artifact.write_bytes(b"bin")

        result = load_settings(_raw(note=str(notes), title="v1.0.0", files=(str(artifact),)))

        assert isinstance(result, Ok)
        assert result.value.spec.note == "release notes"
        assert result.value.spec.title == "v1.0.0"
        assert result.value.spec.files == (artifact,)

    def test_non_positive_timeout(self) -> None:
        result = load_settings(_raw(timeout=0))
        assert isinstance(result, Err)
        assert "timeout" in result.error.message

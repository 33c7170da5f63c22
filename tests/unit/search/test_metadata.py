"""Unit tests for reading entry metadata."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from tidyctl.search.metadata import (
    COMMENT_XATTR,
    TAGS_XATTR,
    NullMetadataProvider,
    XattrMetadataProvider,
    measure_size,
    read_entry_metadata,
    read_path_metadata,
)
from tidyctl.search.models import FileKind


class TestReadPathMetadata:
    """Tests for read_path_metadata function."""

    def test_regular_file(self, sample_tree: Path) -> None:
        metadata = read_path_metadata(sample_tree / "a.txt")

        assert metadata.path == str(sample_tree / "a.txt")
        assert metadata.name == "a.txt"
        assert metadata.extension == "txt"
        assert metadata.size == 10
        assert metadata.kind == FileKind.FILE
        assert metadata.modified is not None
        assert metadata.created is not None

    def test_directory_has_zero_size(self, sample_tree: Path) -> None:
        metadata = read_path_metadata(sample_tree / "sub")

        assert metadata.is_directory
        assert metadata.size == 0
        assert metadata.kind == FileKind.FOLDER

    def test_package_directory(self, tmp_path: Path) -> None:
        (tmp_path / "Tool.app").mkdir()

        metadata = read_path_metadata(tmp_path / "Tool.app")

        assert metadata.is_package
        assert metadata.kind == FileKind.PACKAGE

    def test_symlink_to_directory_is_alias(self, sample_tree: Path) -> None:
        link = sample_tree / "link"
        link.symlink_to(sample_tree / "sub")

        metadata = read_path_metadata(link)

        assert metadata.is_symlink
        assert not metadata.is_directory
        assert metadata.kind == FileKind.ALIAS

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_path_metadata(tmp_path / "missing")

    def test_provider_is_consulted(self, sample_tree: Path) -> None:
        class FixedProvider(NullMetadataProvider):
            def tags(self, path: str) -> tuple[str, ...]:
                return ("red",)

            def comment(self, path: str) -> str | None:
                return "keep"

        metadata = read_path_metadata(sample_tree / "a.txt", FixedProvider())

        assert metadata.tags == ("red",)
        assert metadata.comment == "keep"


class TestReadEntryMetadata:
    """Tests for read_entry_metadata function."""

    def test_matches_path_metadata(self, sample_tree: Path) -> None:
        with os.scandir(sample_tree) as it:
            entries = {entry.name: entry for entry in it}

        from_entry = read_entry_metadata(entries["a.txt"])
        from_path = read_path_metadata(sample_tree / "a.txt")

        assert from_entry == from_path

    def test_directory_entry(self, sample_tree: Path) -> None:
        with os.scandir(sample_tree) as it:
            sub = next(entry for entry in it if entry.name == "sub")

        assert read_entry_metadata(sub).is_directory


class TestXattrMetadataProvider:
    """Tests for XattrMetadataProvider."""

    def test_reads_comma_separated_tags(self) -> None:
        with patch("os.getxattr", return_value=b"red, work,,", create=True) as getxattr:
            tags = XattrMetadataProvider().tags("/data/a.txt")

        assert tags == ("red", "work")
        getxattr.assert_called_once_with("/data/a.txt", TAGS_XATTR, follow_symlinks=False)

    def test_reads_comment(self) -> None:
        with patch("os.getxattr", return_value=b"hello", create=True) as getxattr:
            comment = XattrMetadataProvider().comment("/data/a.txt")

        assert comment == "hello"
        getxattr.assert_called_once_with("/data/a.txt", COMMENT_XATTR, follow_symlinks=False)

    def test_missing_attribute_means_no_metadata(self) -> None:
        with patch("os.getxattr", side_effect=OSError(61, "No data"), create=True):
            provider = XattrMetadataProvider()

            assert provider.tags("/data/a.txt") == ()
            assert provider.comment("/data/a.txt") is None


class TestMeasureSize:
    """Tests for measure_size function."""

    def test_file(self, sample_tree: Path) -> None:
        assert measure_size(sample_tree / "sub" / "b.txt") == 20

    def test_directory_is_recursive(self, sample_tree: Path) -> None:
        assert measure_size(sample_tree) == 10 + 20 + 5 + 1

    def test_links_are_not_followed(self, sample_tree: Path) -> None:
        (sample_tree / "empty" / "link").symlink_to(sample_tree / "sub" / "b.txt")

        assert measure_size(sample_tree / "empty") == 0

    def test_missing_path(self, tmp_path: Path) -> None:
        assert measure_size(tmp_path / "missing") is None

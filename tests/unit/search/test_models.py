"""Unit tests for search domain models."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
from tidyctl.search.models import (
    FileKind,
    FileMetadata,
    SearchRequest,
    SearchResult,
    split_extension,
)


class TestSplitExtension:
    """Tests for split_extension function."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("report.txt", "txt"),
            ("archive.tar.gz", "gz"),
            ("Makefile", ""),
            (".bashrc", ""),
            ("Tool.app", "app"),
        ],
    )
    def test_extensions(self, name: str, expected: str) -> None:
        assert split_extension(name) == expected


class TestFileMetadata:
    """Tests for FileMetadata dataclass."""

    def test_rejects_empty_path(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            FileMetadata(path="", name="x")

    def test_rejects_negative_size(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            FileMetadata(path="/x", name="x", size=-1)

    def test_symlink_kind_wins(self) -> None:
        metadata = FileMetadata(path="/x", name="x", is_symlink=True, is_directory=False)
        assert metadata.kind == FileKind.ALIAS

    def test_type_labels(self) -> None:
        assert FileMetadata(path="/d", name="d", is_directory=True).type_label == "Folder"
        assert FileMetadata(path="/f", name="f").type_label == "File"
        assert FileMetadata(path="/f.pdf", name="f.pdf", extension="pdf").type_label == "PDF"


class TestSearchRequest:
    """Tests for SearchRequest dataclass."""

    def test_defaults(self) -> None:
        request = SearchRequest(roots=("/data",))

        assert request.include_subfolders
        assert not request.include_hidden
        assert request.exclude_system_folders
        assert request.collapse_nested

    def test_requires_a_root(self) -> None:
        with pytest.raises(ValueError, match="at least one root"):
            SearchRequest(roots=())

    def test_rejects_empty_root(self) -> None:
        with pytest.raises(ValueError, match="cannot be empty"):
            SearchRequest(roots=("/data", ""))


class TestSearchResult:
    """Tests for SearchResult dataclass."""

    def test_equality_is_by_path(self) -> None:
        first = SearchResult("/a", "a", "File", 1, None, False)
        second = SearchResult("/a", "a", "File", 999, datetime.now(UTC), False, icon="x")

        assert first == second
        assert len({first, second}) == 1

    def test_from_metadata_leaves_directory_size_unset(self) -> None:
        metadata = FileMetadata(path="/d", name="d", is_directory=True)

        assert SearchResult.from_metadata(metadata).size_bytes is None

    def test_with_size_measures_directory(self, sample_tree: Path) -> None:
        result = SearchResult(str(sample_tree / "sub"), "sub", "Folder", None, None, True)

        assert result.with_size().size_bytes == 25
        assert result.size_bytes is None

    def test_to_dict(self) -> None:
        modified = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
        result = SearchResult("/a.txt", "a.txt", "TXT", 10, modified, False, icon=object())

        assert result.to_dict() == {
            "path": "/a.txt",
            "name": "a.txt",
            "type": "TXT",
            "size_bytes": 10,
            "modified": "2025-03-01T12:00:00+00:00",
            "is_directory": False,
        }

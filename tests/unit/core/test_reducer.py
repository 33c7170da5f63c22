"""Unit tests for path-set reduction."""

import itertools

import pytest
from tidyctl.core.reducer import component_key, is_descendant, normalize_path, reduce_paths


class TestNormalizePath:
    """Tests for normalize_path function."""

    def test_strips_trailing_separator(self) -> None:
        assert normalize_path("/a/b/") == "/a/b"

    def test_collapses_dots_and_duplicates(self) -> None:
        assert normalize_path("/a//b/./c/../d") == "/a/b/d"

    def test_rejects_empty(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            normalize_path("")


class TestIsDescendant:
    """Tests for is_descendant function."""

    def test_child_is_descendant(self) -> None:
        assert is_descendant("/a/b/c", "/a/b")

    def test_path_is_not_its_own_descendant(self) -> None:
        assert not is_descendant("/a/b", "/a/b")
        assert not is_descendant("/a/b/", "/a/b")

    def test_sibling_prefix_is_not_descendant(self) -> None:
        """Comparison is by component, not by string prefix."""
        assert not is_descendant("/a/bc", "/a/b")
        assert not is_descendant("/a/b-c/d", "/a/b")

    def test_everything_descends_from_root(self) -> None:
        assert is_descendant("/etc", "/")


class TestComponentKey:
    """Tests for component_key."""

    def test_ancestor_sorts_directly_before_descendants(self) -> None:
        paths = ["/a/b-c", "/a/b/c", "/a/b", "/a"]

        assert sorted(paths, key=component_key) == ["/a", "/a/b", "/a/b/c", "/a/b-c"]


class TestReducePaths:
    """Tests for reduce_paths function."""

    def test_drops_nested_paths(self) -> None:
        result = reduce_paths(["/a", "/a/b", "/a/b/c", "/d"])
        assert result == frozenset({"/a", "/d"})

    def test_keeps_siblings_with_shared_prefix(self) -> None:
        result = reduce_paths(["/a/b", "/a/b-c", "/a/bc", "/a/b/x"])
        assert result == frozenset({"/a/b", "/a/b-c", "/a/bc"})

    def test_duplicates_and_trailing_slashes_merge(self) -> None:
        assert reduce_paths(["/a/b", "/a/b/", "/a//b"]) == frozenset({"/a/b"})

    def test_empty_input(self) -> None:
        assert reduce_paths([]) == frozenset()

    def test_root_swallows_everything(self) -> None:
        assert reduce_paths(["/usr", "/", "/home/me"]) == frozenset({"/"})

    def test_is_idempotent(self) -> None:
        paths = ["/x/a", "/x/a/b", "/y", "/y/z/w", "/x/ab"]
        once = reduce_paths(paths)
        assert reduce_paths(once) == once

    def test_independent_of_input_order(self) -> None:
        paths = ["/p/q", "/p", "/p/q/r", "/s", "/p-q"]
        expected = reduce_paths(paths)
        for permutation in itertools.permutations(paths):
            assert reduce_paths(permutation) == expected

    def test_no_result_is_inside_another(self) -> None:
        result = reduce_paths(["/m/n", "/m/n/o", "/m/no", "/m", "/q/r", "/q/r/s/t"])
        for a, b in itertools.permutations(result, 2):
            assert not is_descendant(a, b)

    def test_every_input_is_covered(self) -> None:
        paths = ["/m/n", "/m/n/o", "/m/no", "/q/r", "/q/r/s/t"]
        result = reduce_paths(paths)
        for path in paths:
            assert any(path == kept or is_descendant(path, kept) for kept in result)

"""Tests for top-K folder search."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from sizescope.cancel import CancelToken
from sizescope.topk import find_top_k, is_ancestor

from conftest import write_bytes


class TestIsAncestor:
    def test_parent_is_ancestor(self):
        assert is_ancestor(Path("/data/Users"), Path("/data/Users/me/AppData"))

    def test_descendant_is_not_ancestor(self):
        assert not is_ancestor(Path("/data/Users/me/AppData"), Path("/data/Users"))

    def test_self_is_not_ancestor(self):
        assert not is_ancestor(Path("/data/x"), Path("/data/x"))

    def test_self_after_normalization(self):
        assert not is_ancestor("/data/x/../x", "/data/x")

    def test_prefix_string_is_not_ancestor(self):
        assert not is_ancestor("/data/ab", "/data/abc")

    def test_siblings(self):
        assert not is_ancestor("/data/a", "/data/b")

    def test_root_of_filesystem(self):
        assert is_ancestor("/", "/anything")


class TestFindTopK:
    def test_excludes_nested_smaller_folder(self, sized_tree):
        items = find_top_k(sized_tree, 2, CancelToken())
        assert [(i.name, i.size_bytes) for i in items] == [("A", 200), ("C", 100)]

    def test_never_returns_root(self, sized_tree):
        items = find_top_k(sized_tree, 10)
        assert all(i.path != sized_tree for i in items)

    def test_k_one(self, sized_tree):
        items = find_top_k(sized_tree, 1)
        assert [i.name for i in items] == ["A"]

    def test_descendant_kept_when_ancestor_small(self, tmp_path):
        # big/ is mostly its child; small/ holds a tiny file
        root = tmp_path / "root"
        write_bytes(root / "big" / "inner" / "f.bin", 500)
        write_bytes(root / "small" / "f.bin", 10)

        items = find_top_k(root, 3)

        # big encloses inner, so inner is superseded
        names = [i.name for i in items]
        assert "big" in names
        assert "inner" not in names

    def test_result_properties(self, tmp_path):
        root = tmp_path / "root"
        sizes = {"a/x": 30, "a/y": 40, "b": 25, "c/d/e": 70, "c/f": 5, "g": 1}
        for rel, size in sizes.items():
            write_bytes(root / rel / "data.bin", size)

        for k in range(1, 6):
            items = find_top_k(root, k)
            assert len(items) <= k
            assert [i.size_bytes for i in items] == sorted((i.size_bytes for i in items), reverse=True)
            for a in items:
                assert a.path != root
                assert is_ancestor(root, a.path)
                for b in items:
                    assert not is_ancestor(a.path, b.path)

    def test_sizes_include_all_descendants(self, tmp_path):
        root = tmp_path / "root"
        write_bytes(root / "p" / "f.bin", 1)
        write_bytes(root / "p" / "q" / "f.bin", 2)
        write_bytes(root / "p" / "q" / "r" / "f.bin", 4)

        items = find_top_k(root, 1)

        assert items[0].name == "p"
        assert items[0].size_bytes == 7

    def test_empty_folders_are_candidates(self, tmp_path):
        root = tmp_path / "root"
        (root / "empty").mkdir(parents=True)
        items = find_top_k(root, 5)
        assert [(i.name, i.size_bytes) for i in items] == [("empty", 0)]

    def test_no_subfolders(self, tmp_path):
        write_bytes(tmp_path / "f.bin", 10)
        assert find_top_k(tmp_path, 3) == []

    def test_zero_k(self, sized_tree):
        assert find_top_k(sized_tree, 0) == []

    def test_skips_symlinked_folders(self, tmp_path):
        write_bytes(tmp_path / "outside" / "huge.bin", 10_000)
        root = tmp_path / "root"
        write_bytes(root / "real" / "f.bin", 10)
        os.symlink(tmp_path / "outside", root / "link", target_is_directory=True)

        items = find_top_k(root, 5)

        assert [(i.name, i.size_bytes) for i in items] == [("real", 10)]

    def test_items_are_directories_not_from_cache(self, sized_tree):
        for item in find_top_k(sized_tree, 5):
            assert item.is_directory
            assert item.from_cache is False

    def test_deep_tree(self, tmp_path):
        root = tmp_path / "root"
        deep = root
        for i in range(60):
            deep = deep / f"d{i}"
        write_bytes(deep / "f.bin", 3)

        items = find_top_k(root, 1)

        assert items[0].name == "d0"
        assert items[0].size_bytes == 3

    def test_missing_root_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_top_k(tmp_path / "missing", 3)

    def test_file_root_raises(self, tmp_path):
        f = write_bytes(tmp_path / "f.bin", 1)
        with pytest.raises(NotADirectoryError):
            find_top_k(f, 3)

    def test_cancelled_returns_partial(self, sized_tree):
        token = CancelToken()
        token.cancel()
        assert find_top_k(sized_tree, 3, token) == []

    def test_cancel_mid_walk_keeps_admitted_folders(self, tmp_path):
        root = tmp_path / "root"
        sizes = {"x": 10, "y": 20, "z": 30}
        for name, size in sizes.items():
            write_bytes(root / name / "f.bin", size)
            write_bytes(root / name / "inner" / "g.bin", 1)

        token = CancelToken()
        real_scandir = os.scandir
        listed = []

        def cancel_after_first_subtree(path):
            listed.append(os.fspath(path))
            # root, first folder, its inner folder, then the second folder
            if len(listed) == 4:
                token.cancel()
            return real_scandir(path)

        with patch("sizescope.topk.os.scandir", side_effect=cancel_after_first_subtree):
            items = find_top_k(root, 3, token)

        assert len(items) == 1
        first = items[0]
        assert first.name in sizes
        assert first.size_bytes == sizes[first.name] + 1
        sizes_out = [i.size_bytes for i in items]
        assert sizes_out == sorted(sizes_out, reverse=True)
        for a in items:
            for b in items:
                assert not is_ancestor(a.path, b.path)

    def test_unreadable_subfolder_is_skipped(self, sized_tree):
        real_scandir = os.scandir

        def flaky_scandir(path):
            if os.path.basename(os.fspath(path)) == "C":
                raise PermissionError("denied")
            return real_scandir(path)

        with patch("sizescope.topk.os.scandir", side_effect=flaky_scandir):
            items = find_top_k(sized_tree, 2)

        assert [(i.name, i.size_bytes) for i in items] == [("A", 200), ("C", 0)]

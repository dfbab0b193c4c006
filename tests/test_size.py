"""Tests for computing the on-disk size of packages."""
import os

import pytest

from lockview._src.exceptions import PackageSizeError
from lockview._src.utils import get_dir_size


def test_file_size(tmp_path):
    path = tmp_path / "pkg.whl"
    path.write_bytes(b"a" * 1234)

    assert get_dir_size(path) == 1234


def test_nested_directory_size(tmp_path):
    (tmp_path / "a" / "b" / "c").mkdir(parents=True)
    (tmp_path / "top.txt").write_bytes(b"1" * 10)
    (tmp_path / "a" / "mid.txt").write_bytes(b"2" * 200)
    (tmp_path / "a" / "b" / "c" / "deep.txt").write_bytes(b"3" * 3000)

    assert get_dir_size(tmp_path) == 3210
    assert get_dir_size(str(tmp_path / "a")) == 3200


def test_empty_directory(tmp_path):
    assert get_dir_size(tmp_path) == 0


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_symlinks_are_not_followed(tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "big.bin").write_bytes(b"x" * 5000)

    tree = tmp_path / "tree"
    tree.mkdir()
    (tree / "own.txt").write_bytes(b"y" * 100)
    (tree / "link-to-outside").symlink_to(outside, target_is_directory=True)
    (tree / "link-to-file").symlink_to(outside / "big.bin")
    # a cycle would walk forever if links were followed
    (tree / "loop").symlink_to(tree, target_is_directory=True)

    assert get_dir_size(tree) == 100


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="needs symlinks")
def test_symlinked_root_is_resolved(tmp_path):
    tree = tmp_path / "tree"
    tree.mkdir()
    (tree / "own.txt").write_bytes(b"y" * 100)
    link = tmp_path / "link"
    link.symlink_to(tree, target_is_directory=True)

    assert get_dir_size(link) == 100


def test_missing_path_raises(tmp_path):
    missing = tmp_path / "does-not-exist"

    with pytest.raises(PackageSizeError) as excinfo:
        get_dir_size(missing)

    assert excinfo.value.path == missing
    assert "does-not-exist" in excinfo.value.msg

import os

import pytest

from namemend import utils
from namemend.exceptions import MutationError


def test_remove_file_deletes_and_logs(tmp_path, isolated_artifacts):
    target = tmp_path / "gone.jpg"
    target.write_bytes(b"1")

    utils.remove_file(str(target))

    assert not target.exists()
    assert f"[INFO] Removed {target}" in (isolated_artifacts / "namemend.log").read_text(encoding="utf-8")


def test_remove_missing_file_raises_mutation_error(tmp_path, isolated_artifacts):
    with pytest.raises(MutationError):
        utils.remove_file(str(tmp_path / "missing.jpg"))
    assert "[ERROR] Failed to remove" in (isolated_artifacts / "namemend.log").read_text(encoding="utf-8")


def test_rename_file_moves_content(tmp_path):
    src = tmp_path / "a.jpg.xmp"
    src.write_text("meta", encoding="utf-8")
    dst = tmp_path / "a (1).jpg.xmp"

    utils.rename_file(str(src), str(dst))

    assert not src.exists()
    assert dst.read_text(encoding="utf-8") == "meta"


def test_rename_file_never_overwrites(tmp_path):
    src = tmp_path / "a.jpg.xmp"
    dst = tmp_path / "b.jpg.xmp"
    src.write_text("one", encoding="utf-8")
    dst.write_text("two", encoding="utf-8")

    with pytest.raises(MutationError):
        utils.rename_file(str(src), str(dst))

    assert src.read_text(encoding="utf-8") == "one"
    assert dst.read_text(encoding="utf-8") == "two"


def test_rename_missing_source_raises(tmp_path):
    with pytest.raises(MutationError):
        utils.rename_file(str(tmp_path / "nope.xmp"), str(tmp_path / "other.xmp"))


def test_exists_sees_dangling_symlinks(tmp_path):
    link = tmp_path / "dangling"
    os.symlink(tmp_path / "missing", link)

    assert utils.exists(str(link))
    assert not utils.exists(str(tmp_path / "missing"))


def test_relative_path():
    assert utils.relative_path("/data/lib/a/b.jpg", "/data/lib") == os.path.join("a", "b.jpg")

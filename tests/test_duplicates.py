import os

from namemend.duplicates import find_duplicate_pairs
from namemend.scanner import scan_tree

SUFFIXES = (".xmp",)


def _pairs(root):
    return find_duplicate_pairs(scan_tree(str(root)), SUFFIXES)


def test_equal_size_marked_copy_is_paired(make_tree):
    root = make_tree({"photo.jpg": 500, "photo (1).jpg": 500})

    pairs = _pairs(root)

    assert len(pairs) == 1
    assert pairs[0].original.name == "photo.jpg"
    assert pairs[0].duplicate.name == "photo (1).jpg"
    assert pairs[0].duplicate.size == 500
    assert pairs[0].type == "DUPLICATE_PAIR"


def test_size_mismatch_is_not_paired(make_tree):
    root = make_tree({"photo.jpg": 100, "photo (1).jpg": 101})

    assert _pairs(root) == []


def test_same_size_different_content_is_still_paired(make_tree):
    root = make_tree({"doc.txt": b"aaaa", "doc (1).txt": b"bbbb"})

    assert [pair.duplicate.name for pair in _pairs(root)] == ["doc (1).txt"]


def test_missing_or_directory_canonical_is_skipped(make_tree):
    root = make_tree({"lonely (1).jpg": 10, "folder": None, "folder (2)": 0})
    trace = []

    pairs = find_duplicate_pairs(scan_tree(str(root)), SUFFIXES, reporter=trace.append)

    assert pairs == []
    assert any("lonely (1).jpg" in line and "no canonical sibling" in line for line in trace)


def test_canonical_directory_is_not_an_original(make_tree):
    root = make_tree({"notes": None, "notes (1)": 0})

    assert _pairs(root) == []


def test_sidecars_are_left_to_the_binder(make_tree):
    root = make_tree({"a.jpg.xmp": 20, "a (1).jpg.xmp": 20})

    assert _pairs(root) == []


def test_several_markers_pair_with_the_same_original(make_tree):
    root = make_tree(
        {
            "img.jpg": 7,
            "img (1).jpg": 7,
            "img (2).jpg": 7,
            "img (1) (2).jpg": 7,
            "img (3).jpg": 8,
        }
    )

    pairs = _pairs(root)

    assert [pair.duplicate.name for pair in pairs] == ["img (1) (2).jpg", "img (1).jpg", "img (2).jpg"]
    assert {pair.original.name for pair in pairs} == {"img.jpg"}


def test_pairs_only_within_the_same_directory(make_tree):
    root = make_tree({"a/song.mp3": 9, "b/song (1).mp3": 9, "b/sub/song.mp3": 9})

    assert _pairs(root) == []


def test_relative_paths_in_subdirectories(make_tree):
    root = make_tree({"2023/trip/beach.png": 3, "2023/trip/beach (4).png": 3})

    pairs = _pairs(root)

    assert len(pairs) == 1
    assert pairs[0].original.relative_path == os.path.join("2023", "trip", "beach.png")
    assert pairs[0].duplicate.relative_path == os.path.join("2023", "trip", "beach (4).png")


def test_size_mismatch_is_traced(make_tree):
    root = make_tree({"photo.jpg": 100, "photo (1).jpg": 101})
    trace = []

    find_duplicate_pairs(scan_tree(str(root)), SUFFIXES, reporter=trace.append)

    assert trace == ["photo (1).jpg: size differs (101 vs 100 bytes)"]

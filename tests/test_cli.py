import json

import pytest

from namemend import cli, scanner


def test_preview_is_the_default(make_tree, capsys):
    root = make_tree({"photo.jpg": 500, "photo (1).jpg": 500})

    code = cli.main(["duplicates", str(root)])

    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines()[0] == "photo.jpg <-> photo (1).jpg (Size: 500 bytes)"
    assert "Summary (preview): 1 duplicate pair(s)" in out
    assert (root / "photo (1).jpg").exists()


def test_apply_reconcile_end_to_end(make_tree, capsys):
    root = make_tree({"img.jpg": 8, "img (1).jpg": 8, "img.jpg.xmp": 1, "orphan.xmp": 1})

    code = cli.main(["reconcile", str(root), "--apply"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert sorted(path.name for path in root.iterdir()) == ["img.jpg", "img.jpg.xmp"]
    assert "> Duplicate files" in out
    assert "img.jpg <-> img (1).jpg (Size: 8 bytes)" in out
    assert "  Removed: img (1).jpg" in out
    assert "[REMOVE] orphan.xmp (orphaned sidecar, no base file exists)" in out
    assert "  Removed: orphan.xmp" in out
    assert out[-1] == "Summary (apply): 1 duplicate pair(s), 0 renamed, 1 removed, 0 skipped, 0 ambiguous"


def test_sidecars_with_nothing_to_do(make_tree, capsys):
    root = make_tree({"b.jpg": 1, "b.jpg.xmp": 1})

    code = cli.main(["sidecars", str(root)])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert out[0] == "No sidecar files need renaming."


def test_missing_root_exits_non_zero(tmp_path, capsys):
    code = cli.main(["reconcile", str(tmp_path / "absent")])

    captured = capsys.readouterr()
    assert code == 1
    assert "[ERROR] Directory" in captured.err
    assert "Next step:" in captured.err
    assert captured.out == ""


def test_traversal_error_exits_non_zero(make_tree, monkeypatch, capsys):
    root = make_tree({"a.jpg": 1})

    def broken_walk(top, topdown=True, onerror=None, followlinks=False):
        onerror(PermissionError(13, "Permission denied", top))
        yield from ()

    monkeypatch.setattr(scanner.os, "walk", broken_walk)

    code = cli.main(["duplicates", str(root), "--apply"])

    assert code == 1
    assert "Traversal aborted" in capsys.readouterr().err
    assert (root / "a.jpg").exists()


def test_usage_errors_exit_with_two(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["reconcile"])
    assert excinfo.value.code == 2

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["reconcile", ".", "--dry-run", "--apply"])
    assert excinfo.value.code == 2


def test_rename_policy_flag_and_env(make_tree, monkeypatch, capsys):
    root = make_tree({"clip (1).mov": 2, "clip.mov.xmp": 1})

    cli.main(["sidecars", str(root)])
    assert "clip.mov.xmp -> clip (1).mov.xmp" in capsys.readouterr().out

    cli.main(["sidecars", str(root), "--rename-policy", "literal"])
    assert "[REMOVE] clip.mov.xmp (orphaned sidecar, no base file exists)" in capsys.readouterr().out

    monkeypatch.setenv("NAMEMEND_RENAME_POLICY", "literal")
    cli.main(["sidecars", str(root)])
    assert "[REMOVE] clip.mov.xmp" in capsys.readouterr().out


def test_sidecar_ext_flag(make_tree, capsys):
    root = make_tree({"song.flac": 3, "song (1).flac.cue": 1})

    cli.main(["sidecars", str(root), "--sidecar-ext", "cue"])

    assert "song (1).flac.cue -> song.flac.cue" in capsys.readouterr().out


def test_report_flag_writes_json(make_tree, tmp_path, capsys):
    root = make_tree({"photo.jpg": 5, "photo (1).jpg": 5})
    report_path = tmp_path / "report.json"

    code = cli.main(["duplicates", str(root), "--apply", "--report", str(report_path)])

    assert code == 0
    data = json.loads(report_path.read_text(encoding="utf-8"))
    assert data["mode"] == "apply"
    assert data["tallies"]["duplicates"] == 1
    assert data["decisions"][0]["outcome"]["status"] == "done"
    assert f"Report saved to {report_path}" in capsys.readouterr().out


def test_verbose_explains_skipped_entries(make_tree, capsys):
    root = make_tree({"a.mp4": 1, "a (1).mp4": 2, "a (3).mp4.xmp": 1})

    cli.main(["--verbose", "reconcile", str(root)])

    out = capsys.readouterr().out
    assert "[verbose] a (1).mp4: size differs (2 vs 1 bytes)" in out
    assert "[verbose] [AMBIGUOUS] a (3).mp4.xmp (candidates: a.mp4, a (1).mp4)" in out

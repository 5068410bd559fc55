import pytest


@pytest.fixture(autouse=True)
def isolated_artifacts(tmp_path, monkeypatch):
    """Keep namemend.log and reports out of the working directory."""
    artifacts = tmp_path / "artifacts"
    monkeypatch.setenv("NAMEMEND_ARTIFACTS_DIR", str(artifacts))
    monkeypatch.delenv("NAMEMEND_SIDECAR_EXTS", raising=False)
    monkeypatch.delenv("NAMEMEND_RENAME_POLICY", raising=False)
    return artifacts


@pytest.fixture
def make_tree(tmp_path):
    """Create files under a fresh root. Values are sizes (int) or raw bytes."""

    def _make(files: dict, root_name: str = "library"):
        root = tmp_path / root_name
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            if content is None:
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, int):
                content = b"x" * content
            path.write_bytes(content)
        return root

    return _make

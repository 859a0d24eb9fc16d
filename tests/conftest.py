"""Shared pytest fixtures for docpls tests."""

import json

import pytest

from docpls.store import SnapshotStore


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def docpls_home(tmp_path, monkeypatch):
    """Point the snapshot store at a throwaway directory."""
    home = tmp_path / "docpls-home"
    monkeypatch.setenv("DOCPLS_HOME", str(home))
    return home


@pytest.fixture
def store(docpls_home):
    return SnapshotStore()


@pytest.fixture
def write_json():
    def _write(path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture
def node_project(tmp_path, write_json):
    """A Node project declaring left-pad, with left-pad installed and typed."""
    root = tmp_path / "app"
    write_json(
        root / "package.json",
        {"name": "app", "dependencies": {"left-pad": "^1.3.0"}},
    )
    pkg = root / "node_modules" / "left-pad"
    write_json(pkg / "package.json", {"name": "left-pad", "version": "1.3.0"})
    (pkg / "index.d.ts").write_text("export default function leftPad(): string;\n")
    return root

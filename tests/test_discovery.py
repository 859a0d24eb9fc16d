"""Tests for file discovery and virtual-environment fingerprinting."""

from __future__ import annotations

from docpls.engines.resolver.discovery import (
    candidate_artifacts,
    find_virtualenvs,
    is_virtualenv,
    site_packages_dirs,
)
from docpls.models import Ecosystem


def _make_venv(path, marker="pyvenv.cfg", layout="lib/python3.12/site-packages"):
    site = path / layout
    site.mkdir(parents=True)
    marker_path = path / marker
    marker_path.parent.mkdir(parents=True, exist_ok=True)
    marker_path.write_text("")
    return site


class TestVirtualenvFingerprint:
    def test_pyvenv_cfg(self, tmp_path):
        _make_venv(tmp_path / ".venv")
        assert is_virtualenv(tmp_path / ".venv")

    def test_activation_script(self, tmp_path):
        _make_venv(tmp_path / "venv", marker="Scripts/activate", layout="Lib/site-packages")
        assert is_virtualenv(tmp_path / "venv")

    def test_bin_plus_lib_dirs(self, tmp_path):
        env = tmp_path / "env"
        (env / "bin").mkdir(parents=True)
        (env / "lib64").mkdir()
        assert is_virtualenv(env)

    def test_plain_directory(self, tmp_path):
        (tmp_path / "env" / "bin").mkdir(parents=True)
        assert not is_virtualenv(tmp_path / "env")

    def test_file_named_like_env(self, tmp_path):
        (tmp_path / ".env").write_text("SECRET=1\n")
        assert not is_virtualenv(tmp_path / ".env")

    def test_site_packages_layouts(self, tmp_path):
        posix = _make_venv(tmp_path / "a")
        windows = _make_venv(tmp_path / "b", layout="Lib/site-packages")
        assert site_packages_dirs(tmp_path / "a") == [posix]
        assert site_packages_dirs(tmp_path / "b") == [windows]

    def test_hidden_directories_are_scanned(self, tmp_path):
        _make_venv(tmp_path / ".custom-env", marker="bin/activate")
        (tmp_path / ".git" / "objects").mkdir(parents=True)
        envs = find_virtualenvs(tmp_path)
        assert envs == [tmp_path / ".custom-env"]


class TestCandidateArtifacts:
    def test_node(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        (tmp_path / "yarn.lock").write_text("")
        (tmp_path / "node_modules" / "left-pad").mkdir(parents=True)
        assert candidate_artifacts(tmp_path, Ecosystem.NODE) == [
            tmp_path / "package.json",
            tmp_path / "yarn.lock",
            tmp_path / "node_modules",
        ]

    def test_node_without_installed_tree(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        assert candidate_artifacts(tmp_path, Ecosystem.NODE) == [tmp_path / "package.json"]

    def test_python(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("flask\n")
        (tmp_path / "poetry.lock").write_text("")
        (tmp_path / "requirements").mkdir()
        (tmp_path / "requirements" / "dev.txt").write_text("pytest\n")
        site = _make_venv(tmp_path / ".venv")
        found = candidate_artifacts(tmp_path, Ecosystem.PYTHON)
        assert found == [
            tmp_path / "requirements.txt",
            tmp_path / "poetry.lock",
            tmp_path / "requirements" / "dev.txt",
            site,
        ]

    def test_unknown(self, tmp_path):
        (tmp_path / "package.json").write_text("{}")
        assert candidate_artifacts(tmp_path, Ecosystem.UNKNOWN) == []

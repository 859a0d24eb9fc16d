"""Tests for mono-repo manifest discovery and merging."""

from __future__ import annotations

import pytest

from docpls.engines.resolver.monorepo import (
    find_manifests,
    has_workspaces,
    is_multi_package,
    merge_workspace_records,
    resolve_monorepo,
    sub_packages,
)
from docpls.models import DependencyKind, DependencyRecord


@pytest.fixture
def workspace(tmp_path, write_json):
    write_json(tmp_path / "package.json", {"name": "root", "workspaces": ["packages/*"]})
    write_json(
        tmp_path / "packages" / "a" / "package.json",
        {"name": "a", "devDependencies": {"shared-lib": "^1.0.0"}},
    )
    write_json(
        tmp_path / "packages" / "b" / "package.json",
        {"name": "b", "dependencies": {"shared-lib": "^1.2.0", "express": "^4.18.0"}},
    )
    return tmp_path


class TestFindManifests:
    def test_walks_sub_packages(self, workspace):
        assert find_manifests(workspace) == [
            workspace / "package.json",
            workspace / "packages" / "a" / "package.json",
            workspace / "packages" / "b" / "package.json",
        ]

    def test_skips_installed_and_build_output(self, workspace, write_json):
        for skipped in ("node_modules/dep", "dist/x", "build", ".cache/y"):
            write_json(workspace / skipped / "package.json", {})
        assert len(find_manifests(workspace)) == 3

    def test_depth_limit(self, tmp_path, write_json):
        write_json(tmp_path / "package.json", {})
        write_json(tmp_path / "a" / "b" / "c" / "package.json", {})
        assert find_manifests(tmp_path, max_depth=2) == [tmp_path / "package.json"]
        assert len(find_manifests(tmp_path, max_depth=3)) == 2


class TestMultiPackage:
    def test_workspaces_field(self, tmp_path, write_json):
        write_json(tmp_path / "package.json", {"workspaces": ["packages/*"]})
        assert has_workspaces(tmp_path)
        assert is_multi_package(tmp_path)

    def test_several_manifests(self, tmp_path, write_json):
        write_json(tmp_path / "package.json", {})
        write_json(tmp_path / "web" / "package.json", {})
        assert not has_workspaces(tmp_path)
        assert is_multi_package(tmp_path)

    def test_single_manifest(self, tmp_path, write_json):
        write_json(tmp_path / "package.json", {"dependencies": {"x": "1"}})
        assert not is_multi_package(tmp_path)

    def test_sub_packages(self, workspace):
        assert sub_packages(workspace, find_manifests(workspace)) == ["packages/a", "packages/b"]


class TestMergeWorkspaceRecords:
    def test_runtime_displaces_development(self):
        dev = DependencyRecord(name="x", declared_version="1", kind=DependencyKind.DEVELOPMENT)
        run = DependencyRecord(name="x", declared_version="2", kind=DependencyKind.RUNTIME)
        assert merge_workspace_records({"x": dev}, [run])["x"] is run
        assert merge_workspace_records({"x": run}, [dev])["x"] is run

    def test_first_runtime_kept(self):
        first = DependencyRecord(name="x", declared_version="1")
        second = DependencyRecord(name="x", declared_version="2")
        assert merge_workspace_records({"x": first}, [second])["x"] is first


class TestResolveMonorepo:
    def test_shared_dependency_is_runtime(self, workspace):
        deps = {d.name: d for d in resolve_monorepo(workspace)}
        assert set(deps) == {"shared-lib", "express"}
        assert deps["shared-lib"].kind is DependencyKind.RUNTIME
        assert deps["shared-lib"].declared_version == "^1.2.0"
        assert deps["shared-lib"].installed is False

    def test_broken_manifest_is_skipped(self, workspace):
        (workspace / "packages" / "c").mkdir()
        (workspace / "packages" / "c" / "package.json").write_text("{broken")
        deps = {d.name for d in resolve_monorepo(workspace)}
        assert deps == {"shared-lib", "express"}

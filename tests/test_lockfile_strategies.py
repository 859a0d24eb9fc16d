"""Tests for the lock-file strategies (priority 2)."""

from __future__ import annotations

import pytest

from docpls.engines.resolver.strategies.conda_environment import CondaEnvironmentStrategy
from docpls.engines.resolver.strategies.package_lock import PackageLockStrategy
from docpls.engines.resolver.strategies.pipfile_lock import PipfileLockStrategy
from docpls.engines.resolver.strategies.pnpm_lock import (
    PnpmLockStrategy,
    clean_version,
    package_key,
)
from docpls.engines.resolver.strategies.poetry_lock import PoetryLockStrategy
from docpls.engines.resolver.strategies.uv_lock import UvLockStrategy
from docpls.engines.resolver.strategies.yarn_lock import YarnLockStrategy, package_name
from docpls.models import DependencyKind


def _by_name(records):
    return {r.name: r for r in records}


# ── package-lock.json ────────────────────────────────────────────────────


class TestPackageLockStrategy:
    @pytest.fixture
    def strategy(self):
        return PackageLockStrategy()

    def test_lockfile_v3_packages(self, strategy, tmp_path, write_json):
        f = write_json(
            tmp_path / "package-lock.json",
            {
                "lockfileVersion": 3,
                "packages": {
                    "": {"name": "app", "version": "1.0.0"},
                    "node_modules/left-pad": {"version": "1.3.0"},
                    "node_modules/@babel/core": {"version": "7.24.0", "dev": True},
                    "node_modules/react-dom": {"version": "18.2.0", "peer": True},
                    "node_modules/a/node_modules/left-pad": {"version": "1.0.0"},
                    "packages/local": {"version": "0.0.1"},
                },
            },
        )
        deps = _by_name(strategy.extract(f))
        assert set(deps) == {"left-pad", "@babel/core", "react-dom"}
        assert deps["left-pad"].resolved_version == "1.3.0"
        assert deps["@babel/core"].kind is DependencyKind.DEVELOPMENT
        assert deps["react-dom"].kind is DependencyKind.PEER

    def test_lock_never_sets_installed(self, strategy, tmp_path, write_json):
        f = write_json(
            tmp_path / "package-lock.json",
            {"packages": {"node_modules/x": {"version": "1.0.0"}}},
        )
        assert strategy.extract(f)[0].installed is None

    def test_lockfile_v1_nested(self, strategy, tmp_path, write_json):
        f = write_json(
            tmp_path / "package-lock.json",
            {
                "lockfileVersion": 1,
                "dependencies": {
                    "express": {
                        "version": "4.18.2",
                        "dependencies": {"debug": {"version": "2.6.9"}},
                    },
                    "jest": {"version": "29.7.0", "dev": True},
                },
            },
        )
        deps = _by_name(strategy.extract(f))
        assert deps["express"].resolved_version == "4.18.2"
        assert deps["debug"].resolved_version == "2.6.9"
        assert deps["jest"].kind is DependencyKind.DEVELOPMENT

    def test_malformed_returns_empty(self, strategy, tmp_path):
        f = tmp_path / "package-lock.json"
        f.write_text('{"packages": {')
        assert strategy.extract(f) == []


# ── yarn.lock ────────────────────────────────────────────────────────────


class TestYarnLockStrategy:
    @pytest.fixture
    def strategy(self):
        return YarnLockStrategy()

    def test_package_name(self):
        assert package_name('"@babel/core@^7.0.0"') == "@babel/core"
        assert package_name("left-pad@npm:^1.3.0") == "left-pad"
        assert package_name("nope") is None

    def test_classic_v1(self, strategy, tmp_path):
        f = tmp_path / "yarn.lock"
        f.write_text(
            "# THIS IS AN AUTOGENERATED FILE.\n"
            "# yarn lockfile v1\n"
            "\n"
            "\n"
            '"@babel/code-frame@^7.0.0", "@babel/code-frame@^7.10.4":\n'
            '  version "7.12.13"\n'
            '  resolved "https://registry.yarnpkg.com/@babel/code-frame/-/code-frame-7.12.13.tgz"\n'
            "  dependencies:\n"
            '    "@babel/highlight" "^7.10.4"\n'
            "\n"
            "left-pad@^1.3.0:\n"
            '  version "1.3.0"\n'
        )
        deps = _by_name(strategy.extract(f))
        assert deps["@babel/code-frame"].resolved_version == "7.12.13"
        assert deps["left-pad"].resolved_version == "1.3.0"
        assert "@babel/highlight" not in deps

    def test_berry(self, strategy, tmp_path):
        f = tmp_path / "yarn.lock"
        f.write_text(
            "__metadata:\n"
            "  version: 6\n"
            "\n"
            '"app@workspace:.":\n'
            "  version: 0.0.0-use.local\n"
            "\n"
            '"left-pad@npm:^1.3.0":\n'
            "  version: 1.3.0\n"
            '  resolution: "left-pad@npm:1.3.0"\n'
        )
        deps = _by_name(strategy.extract(f))
        assert set(deps) == {"left-pad"}
        assert deps["left-pad"].resolved_version == "1.3.0"

    def test_truncated_block_is_skipped(self, strategy, tmp_path):
        f = tmp_path / "yarn.lock"
        f.write_text('left-pad@^1.3.0:\n  version "1.3.0"\n\nlodash@^4:\n  resol')
        assert [r.name for r in strategy.extract(f)] == ["left-pad"]


# ── pnpm-lock.yaml ───────────────────────────────────────────────────────


class TestPnpmLockStrategy:
    @pytest.fixture
    def strategy(self):
        return PnpmLockStrategy()

    def test_helpers(self):
        assert clean_version("1.0.0(react@18.0.0)") == "1.0.0"
        assert clean_version("1.0.0_react@18.0.0") == "1.0.0"
        assert clean_version("link:../lib") is None
        assert package_key("/@babel/core@7.24.0") == ("@babel/core", "7.24.0")
        assert package_key("left-pad@1.3.0(react@18.0.0)") == ("left-pad", "1.3.0")
        assert package_key("/@scope/pkg/2.0.0_peer@1.0.0") == ("@scope/pkg", "2.0.0")

    def test_v9_importers_and_packages(self, strategy, tmp_path):
        f = tmp_path / "pnpm-lock.yaml"
        f.write_text(
            "lockfileVersion: '9.0'\n"
            "importers:\n"
            "  .:\n"
            "    dependencies:\n"
            "      react:\n"
            "        specifier: ^18.2.0\n"
            "        version: 18.2.0\n"
            "      react-dom:\n"
            "        specifier: ^18.2.0\n"
            "        version: 18.2.0(react@18.2.0)\n"
            "    devDependencies:\n"
            "      typescript:\n"
            "        specifier: ~5.4.0\n"
            "        version: 5.4.5\n"
            "packages:\n"
            "  react@18.2.0:\n"
            "    resolution: {integrity: sha512-abc}\n"
            "  loose-envify@1.4.0:\n"
            "    resolution: {integrity: sha512-def}\n"
        )
        deps = _by_name(strategy.extract(f))
        assert deps["react"].declared_version == "^18.2.0"
        assert deps["react"].resolved_version == "18.2.0"
        assert deps["react-dom"].resolved_version == "18.2.0"
        assert deps["typescript"].kind is DependencyKind.DEVELOPMENT
        assert deps["loose-envify"].resolved_version == "1.4.0"
        assert deps["loose-envify"].declared_version is None

    def test_v5_flat_layout(self, strategy, tmp_path):
        f = tmp_path / "pnpm-lock.yaml"
        f.write_text(
            "lockfileVersion: 5.4\n"
            "specifiers:\n"
            "  left-pad: ^1.3.0\n"
            "dependencies:\n"
            "  left-pad: 1.3.0\n"
            "packages:\n"
            "  /left-pad/1.3.0:\n"
            "    dev: false\n"
            "  /jest/29.7.0:\n"
            "    dev: true\n"
        )
        deps = _by_name(strategy.extract(f))
        assert deps["left-pad"].declared_version == "^1.3.0"
        assert deps["left-pad"].resolved_version == "1.3.0"
        assert deps["jest"].kind is DependencyKind.DEVELOPMENT

    def test_garbage_returns_empty(self, strategy, tmp_path):
        f = tmp_path / "pnpm-lock.yaml"
        f.write_text("key: [unclosed\n")
        assert strategy.extract(f) == []

    def test_truncated_keeps_complete_entries(self, strategy, tmp_path):
        f = tmp_path / "pnpm-lock.yaml"
        f.write_text(
            "lockfileVersion: '9.0'\n"
            "packages:\n"
            "  left-pad@1.3.0:\n"
            "    resolution: {integrity: sha512-abc}\n"
            "  lodash@4.17.21:\n"
            "    resolution: {integrity: sha512-de\n"
        )
        deps = _by_name(strategy.extract(f))
        assert deps["left-pad"].resolved_version == "1.3.0"
        assert deps["lodash"].resolved_version == "4.17.21"


# ── Python lock files ────────────────────────────────────────────────────


class TestPipfileLockStrategy:
    def test_default_and_develop(self, tmp_path, write_json):
        f = write_json(
            tmp_path / "Pipfile.lock",
            {
                "_meta": {"hash": {"sha256": "x"}},
                "default": {"requests": {"version": "==2.31.0"}},
                "develop": {"pytest": {"version": "==8.0.0"}},
            },
        )
        deps = _by_name(PipfileLockStrategy().extract(f))
        assert deps["requests"].resolved_version == "2.31.0"
        assert deps["requests"].kind is DependencyKind.RUNTIME
        assert deps["pytest"].kind is DependencyKind.DEVELOPMENT
        assert deps["pytest"].installed is None


class TestPoetryLockStrategy:
    def test_packages(self, tmp_path):
        f = tmp_path / "poetry.lock"
        f.write_text(
            "[[package]]\n"
            'name = "requests"\n'
            'version = "2.31.0"\n'
            'category = "main"\n'
            "\n"
            "[[package]]\n"
            'name = "pytest"\n'
            'version = "8.0.0"\n'
            'groups = ["dev"]\n'
            "\n"
            "[metadata]\n"
            'lock-version = "2.0"\n'
        )
        deps = _by_name(PoetryLockStrategy().extract(f))
        assert deps["requests"].resolved_version == "2.31.0"
        assert deps["requests"].kind is DependencyKind.RUNTIME
        assert deps["pytest"].kind is DependencyKind.DEVELOPMENT

    def test_truncated_keeps_complete_packages(self, tmp_path):
        f = tmp_path / "poetry.lock"
        f.write_text(
            "[[package]]\n"
            'name = "requests"\n'
            'version = "2.31.0"\n'
            "\n"
            "[[package]]\n"
            'name = "idna\n'
        )
        assert [r.name for r in PoetryLockStrategy().extract(f)] == ["requests"]


class TestUvLockStrategy:
    def test_skips_local_project(self, tmp_path):
        f = tmp_path / "uv.lock"
        f.write_text(
            "version = 1\n"
            'requires-python = ">=3.10"\n'
            "\n"
            "[[package]]\n"
            'name = "app"\n'
            'version = "0.1.0"\n'
            'source = { editable = "." }\n'
            "\n"
            "[[package]]\n"
            'name = "httpx"\n'
            'version = "0.27.0"\n'
            'source = { registry = "https://pypi.org/simple" }\n'
        )
        records = UvLockStrategy().extract(f)
        assert [(r.name, r.resolved_version) for r in records] == [("httpx", "0.27.0")]


class TestCondaEnvironmentStrategy:
    def test_conda_and_pip_entries(self, tmp_path):
        f = tmp_path / "environment.yml"
        f.write_text(
            "name: science\n"
            "channels:\n"
            "  - conda-forge\n"
            "dependencies:\n"
            "  - python=3.11\n"
            "  - numpy=1.26.4=py311h64a7726_0\n"
            "  - conda-forge::pandas>=2.0\n"
            "  - scipy\n"
            "  - pip\n"
            "  - pip:\n"
            "    - requests==2.31.0\n"
            "    - rich>=13\n"
        )
        deps = _by_name(CondaEnvironmentStrategy().extract(f))
        assert set(deps) == {"numpy", "pandas", "scipy", "requests", "rich"}
        assert deps["numpy"].resolved_version == "1.26.4"
        assert deps["pandas"].resolved_version is None
        assert deps["requests"].resolved_version == "2.31.0"
        assert deps["rich"].resolved_version is None

    def test_not_a_mapping(self, tmp_path):
        f = tmp_path / "environment.yml"
        f.write_text("- just\n- a list\n")
        assert CondaEnvironmentStrategy().extract(f) == []

    def test_truncated_keeps_complete_entries(self, tmp_path):
        f = tmp_path / "environment.yml"
        f.write_text(
            "name: science\n"
            "dependencies:\n"
            "  - numpy=1.24.0\n"
            "  - pandas=2.0.1\n"
            '  - "unterminated\n'
        )
        deps = _by_name(CondaEnvironmentStrategy().extract(f))
        assert set(deps) == {"numpy", "pandas"}
        assert deps["pandas"].resolved_version == "2.0.1"

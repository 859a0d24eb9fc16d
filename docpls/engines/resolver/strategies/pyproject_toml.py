"""Strategy for Python pyproject.toml manifests.

Covers PEP 621 ``[project]`` tables, PEP 735 ``[dependency-groups]`` and the
Poetry, Flit and Hatch tool tables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from docpls.engines.resolver.registry import MANIFEST, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import (
    add_declared,
    add_requirement,
    is_dev_group,
    load_toml,
    read_text,
)
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

RUNTIME = DependencyKind.RUNTIME
DEVELOPMENT = DependencyKind.DEVELOPMENT


def _group_kind(group: str) -> DependencyKind:
    return DEVELOPMENT if is_dev_group(group) else RUNTIME


def _table(data: Any, *keys: str) -> dict[str, Any]:
    for key in keys:
        if not isinstance(data, dict):
            return {}
        data = data.get(key)
    return data if isinstance(data, dict) else {}


def _poetry_spec(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("version"), str):
        return value["version"]
    return None


def _add_poetry(acc: dict[str, DependencyRecord], deps: dict[str, Any], kind: DependencyKind) -> None:
    for name, value in deps.items():
        if name.lower() == "python":
            continue
        if isinstance(value, list):
            # multiple-constraints form: [{version=..., python=...}, ...]
            value = value[0] if value else None
        add_declared(acc, name, _poetry_spec(value), kind)


class PyprojectTomlStrategy:
    format = StrategyFormat.PYPROJECT_TOML
    ecosystem = Ecosystem.PYTHON
    priority = MANIFEST

    def recognizes(self, path: Path) -> bool:
        return path.name == "pyproject.toml" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = load_toml(read_text(path))
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not data:
            return []

        acc: dict[str, DependencyRecord] = {}

        # ── PEP 621 ──────────────────────────────────────────────────────
        project = _table(data, "project")
        for raw in project.get("dependencies") or []:
            add_requirement(acc, raw, RUNTIME)
        for group, reqs in _table(project, "optional-dependencies").items():
            for raw in reqs or []:
                add_requirement(acc, raw, _group_kind(group))

        # ── PEP 735 ──────────────────────────────────────────────────────
        for reqs in _table(data, "dependency-groups").values():
            for raw in reqs or []:
                # {include-group = "..."} entries are references, not packages
                add_requirement(acc, raw, DEVELOPMENT)

        # ── Poetry ───────────────────────────────────────────────────────
        poetry = _table(data, "tool", "poetry")
        _add_poetry(acc, _table(poetry, "dependencies"), RUNTIME)
        _add_poetry(acc, _table(poetry, "dev-dependencies"), DEVELOPMENT)
        for group, body in _table(poetry, "group").items():
            _add_poetry(acc, _table(body, "dependencies"), _group_kind(group))

        # ── Flit (legacy metadata table) ─────────────────────────────────
        flit = _table(data, "tool", "flit", "metadata")
        for raw in flit.get("requires") or []:
            add_requirement(acc, raw, RUNTIME)
        for group, reqs in _table(flit, "requires-extra").items():
            for raw in reqs or []:
                add_requirement(acc, raw, _group_kind(group))

        # ── Hatch environments ───────────────────────────────────────────
        for env in _table(data, "tool", "hatch", "envs").values():
            if not isinstance(env, dict):
                continue
            for key in ("dependencies", "extra-dependencies"):
                for raw in env.get(key) or []:
                    add_requirement(acc, raw, DEVELOPMENT)

        return list(acc.values())


register_strategy(PyprojectTomlStrategy())

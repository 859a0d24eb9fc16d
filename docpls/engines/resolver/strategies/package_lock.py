"""Strategy for npm package-lock.json / npm-shrinkwrap.json."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import read_json
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

LOCK_NAMES = ("package-lock.json", "npm-shrinkwrap.json")
_NM = "node_modules/"


def _kind(entry: dict[str, Any]) -> DependencyKind:
    if entry.get("dev") or entry.get("devOptional"):
        return DependencyKind.DEVELOPMENT
    if entry.get("peer"):
        return DependencyKind.PEER
    return DependencyKind.RUNTIME


def _record(name: str, entry: dict[str, Any]) -> DependencyRecord:
    version = entry.get("version")
    return DependencyRecord(
        name=name,
        resolved_version=version if isinstance(version, str) else None,
        kind=_kind(entry),
    )


def _from_packages(packages: dict[str, Any]) -> dict[str, DependencyRecord]:
    """lockfileVersion 2/3: flat ``packages`` map keyed by install path."""
    out: dict[str, DependencyRecord] = {}
    for key, entry in packages.items():
        if _NM not in key or not isinstance(entry, dict):
            continue
        # "node_modules/a/node_modules/@s/b" -> "@s/b"
        name = key.rsplit(_NM, 1)[1]
        if name not in out:
            out[name] = _record(name, entry)
    return out


def _from_dependencies(deps: dict[str, Any], out: dict[str, DependencyRecord]) -> None:
    """lockfileVersion 1: nested ``dependencies`` tree."""
    for name, entry in deps.items():
        if not isinstance(entry, dict):
            continue
        if name not in out:
            out[name] = _record(name, entry)
        nested = entry.get("dependencies")
        if isinstance(nested, dict):
            _from_dependencies(nested, out)


class PackageLockStrategy:
    format = StrategyFormat.PACKAGE_LOCK
    ecosystem = Ecosystem.NODE
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name in LOCK_NAMES and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not isinstance(data, dict):
            return []

        packages = data.get("packages")
        if isinstance(packages, dict):
            return list(_from_packages(packages).values())

        out: dict[str, DependencyRecord] = {}
        deps = data.get("dependencies")
        if isinstance(deps, dict):
            _from_dependencies(deps, out)
        return list(out.values())


register_strategy(PackageLockStrategy())

"""Strategy for npm package.json manifests."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import MANIFEST, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import read_json
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

# Later sections win when a name is declared twice within one manifest.
_SECTIONS = [
    ("optionalDependencies", DependencyKind.RUNTIME),
    ("peerDependencies", DependencyKind.PEER),
    ("devDependencies", DependencyKind.DEVELOPMENT),
    ("dependencies", DependencyKind.RUNTIME),
]


def manifest_records(data: dict) -> list[DependencyRecord]:
    """Declared dependencies of an already parsed package.json object."""
    by_name: dict[str, DependencyRecord] = {}
    for section, kind in _SECTIONS:
        deps = data.get(section)
        if not isinstance(deps, dict):
            continue
        for name, version in deps.items():
            by_name[name] = DependencyRecord(
                name=name,
                declared_version=version if isinstance(version, str) else None,
                kind=kind,
                installed=False,
            )
    return list(by_name.values())


class PackageJsonStrategy:
    format = StrategyFormat.PACKAGE_JSON
    ecosystem = Ecosystem.NODE
    priority = MANIFEST

    def recognizes(self, path: Path) -> bool:
        return path.name == "package.json" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not isinstance(data, dict):
            return []
        return manifest_records(data)


register_strategy(PackageJsonStrategy())

"""Strategy for pnpm-lock.yaml (lockfile v5 through v9)."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import load_yaml, read_text
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

_IMPORTER_SECTIONS = [
    ("dependencies", DependencyKind.RUNTIME),
    ("optionalDependencies", DependencyKind.RUNTIME),
    ("devDependencies", DependencyKind.DEVELOPMENT),
    ("peerDependencies", DependencyKind.PEER),
]

# v6+: /@scope/name@1.0.0   v9: name@1.0.0
_AT_KEY_RE = re.compile(r"^/?((?:@[^/]+/)?[^/@]+)@(.+)$")
# v5: /@scope/name/1.0.0_peer@x
_SLASH_KEY_RE = re.compile(r"^/?((?:@[^/]+/)?[^/@]+)/([^/]+)$")


def clean_version(version: Any) -> str | None:
    """Strip pnpm peer suffixes: ``1.0.0(react@18.0.0)`` / ``1.0.0_react@18.0.0``."""
    if not isinstance(version, (str, int, float)):
        return None
    text = str(version).split("(", 1)[0]
    if text.startswith(("link:", "file:", "workspace:")):
        return None
    return text.split("_", 1)[0] or None


def package_key(key: str) -> tuple[str, str | None] | None:
    """Split a ``packages:`` key into ``(name, version)``."""
    key = key.split("(", 1)[0]
    m = _AT_KEY_RE.match(key) or _SLASH_KEY_RE.match(key)
    if not m:
        return None
    return m.group(1), clean_version(m.group(2))


def _root_importer(data: dict[str, Any]) -> dict[str, Any]:
    importers = data.get("importers")
    if isinstance(importers, dict):
        root = importers.get(".")
        return root if isinstance(root, dict) else {}
    return data


class PnpmLockStrategy:
    format = StrategyFormat.PNPM_LOCK
    ecosystem = Ecosystem.NODE
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name == "pnpm-lock.yaml" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = load_yaml(read_text(path))
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not isinstance(data, dict):
            return []

        out: dict[str, DependencyRecord] = {}

        importer = _root_importer(data)
        specifiers = importer.get("specifiers") or data.get("specifiers") or {}
        for section, kind in _IMPORTER_SECTIONS:
            deps = importer.get(section)
            if not isinstance(deps, dict):
                continue
            for name, value in deps.items():
                if name in out:
                    continue
                if isinstance(value, dict):
                    specifier, version = value.get("specifier"), value.get("version")
                else:
                    specifier, version = specifiers.get(name), value
                out[name] = DependencyRecord(
                    name=name,
                    declared_version=specifier if isinstance(specifier, str) else None,
                    resolved_version=clean_version(version),
                    kind=kind,
                )

        packages = data.get("packages")
        if isinstance(packages, dict):
            for key, entry in packages.items():
                parsed = package_key(str(key))
                if parsed is None or parsed[0] in out:
                    continue
                name, version = parsed
                dev = isinstance(entry, dict) and entry.get("dev") is True
                out[name] = DependencyRecord(
                    name=name,
                    resolved_version=version,
                    kind=DependencyKind.DEVELOPMENT if dev else DependencyKind.RUNTIME,
                )

        return list(out.values())


register_strategy(PnpmLockStrategy())

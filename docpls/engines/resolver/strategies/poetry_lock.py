"""Strategy for poetry.lock."""

from __future__ import annotations

from pathlib import Path

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import load_toml, read_text
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")


def _kind(entry: dict) -> DependencyKind:
    if entry.get("category") == "dev":
        return DependencyKind.DEVELOPMENT
    groups = entry.get("groups")
    if isinstance(groups, list) and groups and "main" not in groups:
        return DependencyKind.DEVELOPMENT
    return DependencyKind.RUNTIME


class PoetryLockStrategy:
    format = StrategyFormat.POETRY_LOCK
    ecosystem = Ecosystem.PYTHON
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name == "poetry.lock" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = load_toml(read_text(path))
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not data:
            return []

        out: dict[str, DependencyRecord] = {}
        for entry in data.get("package") or []:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                continue
            name = entry["name"]
            if name in out:
                continue
            version = entry.get("version")
            out[name] = DependencyRecord(
                name=name,
                resolved_version=version if isinstance(version, str) else None,
                kind=_kind(entry),
            )
        return list(out.values())


register_strategy(PoetryLockStrategy())

"""Strategy for uv.lock."""

from __future__ import annotations

from pathlib import Path

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import load_toml, read_text
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")


def _is_local_project(entry: dict) -> bool:
    source = entry.get("source")
    return isinstance(source, dict) and ("editable" in source or "virtual" in source)


class UvLockStrategy:
    format = StrategyFormat.UV_LOCK
    ecosystem = Ecosystem.PYTHON
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name == "uv.lock" and path.is_file()

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
            if _is_local_project(entry):
                continue
            name = entry["name"]
            version = entry.get("version")
            out.setdefault(
                name,
                DependencyRecord(
                    name=name,
                    resolved_version=version if isinstance(version, str) else None,
                ),
            )
        return list(out.values())


register_strategy(UvLockStrategy())

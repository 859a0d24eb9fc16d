"""Strategy for Pipenv Pipfile.lock."""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import read_json
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")


class PipfileLockStrategy:
    format = StrategyFormat.PIPFILE_LOCK
    ecosystem = Ecosystem.PYTHON
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name == "Pipfile.lock" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = read_json(path)
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not isinstance(data, dict):
            return []

        out: dict[str, DependencyRecord] = {}
        for section, kind in (
            ("default", DependencyKind.RUNTIME),
            ("develop", DependencyKind.DEVELOPMENT),
        ):
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            for name, entry in table.items():
                if name in out or not isinstance(entry, dict):
                    continue
                version = entry.get("version")
                out[name] = DependencyRecord(
                    name=name,
                    resolved_version=version.lstrip("=") if isinstance(version, str) else None,
                    kind=kind,
                )
        return list(out.values())


register_strategy(PipfileLockStrategy())

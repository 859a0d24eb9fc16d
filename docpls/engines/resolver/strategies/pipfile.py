"""Strategy for Pipenv Pipfile manifests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog

from docpls.engines.resolver.registry import MANIFEST, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import add_declared, load_toml, read_text
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")


def _spec(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("version"), str):
        return value["version"]
    return None


class PipfileStrategy:
    format = StrategyFormat.PIPFILE
    ecosystem = Ecosystem.PYTHON
    priority = MANIFEST

    def recognizes(self, path: Path) -> bool:
        return path.name == "Pipfile" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = load_toml(read_text(path))
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not data:
            return []

        acc: dict[str, DependencyRecord] = {}
        for section, kind in (
            ("packages", DependencyKind.RUNTIME),
            ("dev-packages", DependencyKind.DEVELOPMENT),
        ):
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            for name, value in table.items():
                add_declared(acc, name, _spec(value), kind)
        return list(acc.values())


register_strategy(PipfileStrategy())

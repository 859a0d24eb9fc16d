"""Strategy for conda environment files (environment.yml / conda.yml)."""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import load_yaml, parse_requirement, read_text
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

ENV_NAMES = ("environment.yml", "environment.yaml", "conda.yml", "conda.yaml")
_SKIP = {"python", "pip"}

# [channel::]name[ op version[=build]]
_CONDA_RE = re.compile(
    r"^(?:[^:\s]+::)?([A-Za-z0-9][A-Za-z0-9._-]*)\s*(==|=|>=|<=|>|<|!=|~=)?\s*([^=\s]*)"
)


def _pin(op: str | None, version: str) -> str | None:
    if op in ("=", "==") and version and "*" not in version:
        return version
    return None


class CondaEnvironmentStrategy:
    format = StrategyFormat.CONDA_ENVIRONMENT
    ecosystem = Ecosystem.PYTHON
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name in ENV_NAMES and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            data = load_yaml(read_text(path))
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []
        if not isinstance(data, dict):
            return []

        out: dict[str, DependencyRecord] = {}
        for item in data.get("dependencies") or []:
            if isinstance(item, dict):
                for raw in item.get("pip") or []:
                    self._add_pip(out, raw)
                continue
            m = _CONDA_RE.match(str(item).strip())
            if not m or m.group(1).lower() in _SKIP:
                continue
            name = m.group(1)
            out.setdefault(
                name,
                DependencyRecord(name=name, resolved_version=_pin(m.group(2), m.group(3))),
            )
        return list(out.values())

    @staticmethod
    def _add_pip(out: dict[str, DependencyRecord], raw: object) -> None:
        if not isinstance(raw, str) or raw.startswith("-"):
            return
        parsed = parse_requirement(raw)
        if parsed is None:
            return
        name, spec = parsed
        version = spec[2:] if spec and spec.startswith("==") and "," not in spec else None
        out.setdefault(name, DependencyRecord(name=name, resolved_version=version))


register_strategy(CondaEnvironmentStrategy())

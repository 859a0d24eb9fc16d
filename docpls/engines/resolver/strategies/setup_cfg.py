"""Strategy for setuptools setup.cfg declarative metadata."""

from __future__ import annotations

import configparser
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import MANIFEST, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import add_requirement, is_dev_group, read_text
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")


def _lines(value: str) -> list[str]:
    return [ln.strip() for ln in value.splitlines() if ln.strip() and not ln.strip().startswith("#")]


class SetupCfgStrategy:
    format = StrategyFormat.SETUP_CFG
    ecosystem = Ecosystem.PYTHON
    priority = MANIFEST

    def recognizes(self, path: Path) -> bool:
        return path.name == "setup.cfg" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(read_text(path), source=str(path))
        except (OSError, configparser.Error) as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []

        acc: dict[str, DependencyRecord] = {}
        if parser.has_section("options"):
            for raw in _lines(parser.get("options", "install_requires", fallback="")):
                add_requirement(acc, raw, DependencyKind.RUNTIME)
            for raw in _lines(parser.get("options", "tests_require", fallback="")):
                add_requirement(acc, raw, DependencyKind.DEVELOPMENT)
        if parser.has_section("options.extras_require"):
            for group, value in parser.items("options.extras_require"):
                kind = DependencyKind.DEVELOPMENT if is_dev_group(group) else DependencyKind.RUNTIME
                for raw in _lines(value):
                    add_requirement(acc, raw, kind)
        return list(acc.values())


register_strategy(SetupCfgStrategy())

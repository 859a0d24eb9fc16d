"""Strategy for pip requirement files."""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import MANIFEST, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import parse_requirement, read_text
from docpls.models import DependencyKind, DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

_DEV_NAME_RE = re.compile(r"(^|[-_.])(dev|develop|test|tests|testing|lint|docs)([-_.]|$)")
_URL_PREFIXES = ("http://", "https://", "git+", "hg+", "svn+", "bzr+", "file:")


def _is_requirements_file(path: Path) -> bool:
    name = path.name
    if name == "requirements.pip":
        return True
    if name.startswith("requirements") and name.endswith(".txt"):
        return True
    return path.suffix == ".txt" and path.parent.name == "requirements"


def _kind_for(path: Path) -> DependencyKind:
    stem = path.stem.lower().removeprefix("requirements")
    if _DEV_NAME_RE.search(stem):
        return DependencyKind.DEVELOPMENT
    return DependencyKind.RUNTIME


class RequirementsTxtStrategy:
    format = StrategyFormat.REQUIREMENTS_TXT
    ecosystem = Ecosystem.PYTHON
    priority = MANIFEST

    def recognizes(self, path: Path) -> bool:
        return _is_requirements_file(path) and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            content = read_text(path)
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []

        kind = _kind_for(path)
        deps: list[DependencyRecord] = []
        for raw_line in content.splitlines():
            line = raw_line.split(" #", 1)[0].split(" --", 1)[0].rstrip(" \\").strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith(("-", *_URL_PREFIXES)):
                continue

            parsed = parse_requirement(line)
            if parsed is None:
                log.debug("strategy.line_skipped", path=str(path), line=line)
                continue
            name, spec = parsed
            deps.append(
                DependencyRecord(
                    name=name,
                    declared_version=spec,
                    kind=kind,
                    installed=False,
                )
            )
        return deps


register_strategy(RequirementsTxtStrategy())

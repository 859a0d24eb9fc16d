"""Strategy for yarn.lock (classic v1 and berry).

Both formats are read with a line-based scanner: an unindented header line
names one or more ``name@range`` specs and the indented ``version`` line
below it pins the resolved version. Nested blocks are ignored.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import LOCKFILE, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import read_text
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

# classic: `  version "1.3.0"`   berry: `  version: 1.3.0`
_VERSION_RE = re.compile(r"""^ {2}version:?\s+"?([^"\s]+)"?\s*$""")


def package_name(spec: str) -> str | None:
    """``"@scope/pkg@npm:^1.0.0"`` -> ``"@scope/pkg"``."""
    spec = spec.strip().strip('"').strip("'")
    at = spec.find("@", 1)
    if at <= 0:
        return None
    return spec[:at]


class YarnLockStrategy:
    format = StrategyFormat.YARN_LOCK
    ecosystem = Ecosystem.NODE
    priority = LOCKFILE

    def recognizes(self, path: Path) -> bool:
        return path.name == "yarn.lock" and path.is_file()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            content = read_text(path)
        except OSError as exc:
            log.warning("strategy.parse_failed", format=self.format.value, path=str(path), error=str(exc))
            return []

        out: dict[str, DependencyRecord] = {}
        current: str | None = None

        for line in content.splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue

            if not line[0].isspace():
                current = None
                header = line.rstrip().rstrip(":")
                first = header.split(",")[0]
                if "__metadata" in first or "@workspace:" in first:
                    continue
                current = package_name(first)
                continue

            if current is None or current in out:
                continue
            m = _VERSION_RE.match(line)
            if m:
                out[current] = DependencyRecord(name=current, resolved_version=m.group(1))

        return list(out.values())


register_strategy(YarnLockStrategy())

"""Strategy registry — the closed set of artifact formats and their catalog."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable

from docpls.models import DependencyRecord, Ecosystem

# Authority tiers, lower number = higher authority.
MANIFEST = 1
LOCKFILE = 2
INSTALLED = 3


class StrategyFormat(Enum):
    """Every artifact shape the resolver understands.

    Declaration order is the stable tie-break inside one priority tier.
    """

    PACKAGE_JSON = "package-json"
    REQUIREMENTS_TXT = "requirements-txt"
    PYPROJECT_TOML = "pyproject-toml"
    PIPFILE = "pipfile"
    SETUP_CFG = "setup-cfg"
    PACKAGE_LOCK = "package-lock"
    YARN_LOCK = "yarn-lock"
    PNPM_LOCK = "pnpm-lock"
    PIPFILE_LOCK = "pipfile-lock"
    POETRY_LOCK = "poetry-lock"
    UV_LOCK = "uv-lock"
    CONDA_ENVIRONMENT = "conda-environment"
    NODE_MODULES = "node-modules"
    SITE_PACKAGES = "site-packages"


_FORMAT_ORDER = {fmt: i for i, fmt in enumerate(StrategyFormat)}


@runtime_checkable
class Strategy(Protocol):
    """Interface that every format strategy must satisfy."""

    format: StrategyFormat
    ecosystem: Ecosystem
    priority: int

    def recognizes(self, path: Path) -> bool: ...

    def extract(self, path: Path) -> list[DependencyRecord]: ...


STRATEGY_REGISTRY: dict[StrategyFormat, Strategy] = {}


def register_strategy(strategy: Strategy) -> None:
    """Register a strategy instance by its format tag."""
    STRATEGY_REGISTRY[strategy.format] = strategy


def _ordered(strategies: list[Strategy]) -> list[Strategy]:
    return sorted(strategies, key=lambda s: (s.priority, _FORMAT_ORDER[s.format]))


def all_strategies() -> list[Strategy]:
    """Return every registered strategy, manifests first.

    Raises ``RuntimeError`` if a declared format has no registered strategy.
    """
    missing = [fmt.value for fmt in StrategyFormat if fmt not in STRATEGY_REGISTRY]
    if missing:
        raise RuntimeError(f"no strategy registered for: {', '.join(missing)}")
    return _ordered(list(STRATEGY_REGISTRY.values()))


def strategies_for(ecosystem: Ecosystem) -> list[Strategy]:
    """Return the strategies relevant to *ecosystem*, manifests first."""
    return [s for s in all_strategies() if s.ecosystem is ecosystem]


def get_strategy(fmt: StrategyFormat) -> Strategy:
    return STRATEGY_REGISTRY[fmt]

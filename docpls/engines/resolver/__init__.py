"""Dependency resolver engine — multi-source resolution of a project's dependencies."""

from docpls.engines.resolver.chain import merge_records, resolve
from docpls.engines.resolver.discovery import candidate_artifacts
from docpls.engines.resolver.monorepo import find_manifests, is_multi_package, resolve_monorepo
from docpls.engines.resolver.registry import (
    StrategyFormat,
    all_strategies,
    get_strategy,
    strategies_for,
)

__all__ = [
    "StrategyFormat",
    "all_strategies",
    "candidate_artifacts",
    "find_manifests",
    "get_strategy",
    "is_multi_package",
    "merge_records",
    "resolve",
    "resolve_monorepo",
    "strategies_for",
]

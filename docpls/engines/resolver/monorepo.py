"""Mono-repo support. Merge the declared dependencies of every package.json under one root."""

from __future__ import annotations

import os
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import StrategyFormat, get_strategy
from docpls.engines.resolver.strategies._helpers import read_json
from docpls.models import DependencyKind, DependencyRecord

log = structlog.get_logger("docpls.resolver")

MAX_DEPTH = 6
_SKIP_DIRS = {"node_modules", "dist", "build", ".git"}


def find_manifests(root: Path, max_depth: int = MAX_DEPTH) -> list[Path]:
    """Find package.json files under *root*, skipping installed and build output."""
    root = Path(root)
    found: list[Path] = []
    base_depth = len(root.parts)
    for dirpath, dirnames, filenames in os.walk(root):
        depth = len(Path(dirpath).parts) - base_depth
        dirnames[:] = sorted(
            d for d in dirnames if d not in _SKIP_DIRS and not d.startswith(".")
        )
        if depth >= max_depth:
            dirnames[:] = []
        if "package.json" in filenames:
            found.append(Path(dirpath) / "package.json")
    return found


def has_workspaces(root: Path) -> bool:
    manifest = Path(root) / "package.json"
    if not manifest.is_file():
        return False
    try:
        data = read_json(manifest)
    except (OSError, ValueError) as exc:
        log.debug("monorepo.root_manifest_unreadable", path=str(manifest), error=str(exc))
        return False
    return isinstance(data, dict) and bool(data.get("workspaces"))


def is_multi_package(root: Path, manifests: list[Path] | None = None) -> bool:
    """A root is multi-package if it declares workspaces or holds several manifests."""
    if manifests is None:
        manifests = find_manifests(root)
    return has_workspaces(root) or len(manifests) > 1


def sub_packages(root: Path, manifests: list[Path]) -> list[str]:
    """Relative directories of every non-root manifest, sorted."""
    root = Path(root)
    rels = {
        m.parent.relative_to(root).as_posix()
        for m in manifests
        if m.parent != root
    }
    return sorted(rels)


def merge_workspace_records(
    table: dict[str, DependencyRecord], records: list[DependencyRecord]
) -> dict[str, DependencyRecord]:
    """Merge by name: a runtime record displaces a development one."""
    merged = dict(table)
    for record in records:
        existing = merged.get(record.name)
        if existing is None or (
            existing.kind is DependencyKind.DEVELOPMENT and record.kind is DependencyKind.RUNTIME
        ):
            merged[record.name] = record
    return merged


def resolve_monorepo(root: Path, manifests: list[Path] | None = None) -> list[DependencyRecord]:
    """Scan every manifest independently and merge the declared dependencies."""
    if manifests is None:
        manifests = find_manifests(root)
    strategy = get_strategy(StrategyFormat.PACKAGE_JSON)
    table: dict[str, DependencyRecord] = {}
    for manifest in manifests:
        try:
            records = strategy.extract(manifest)
        except Exception:
            log.exception("strategy.extract_failed", format=strategy.format.value, path=str(manifest))
            continue
        table = merge_workspace_records(table, records)
    log.info("resolver.monorepo_resolved", root=str(root), manifests=len(manifests), dependencies=len(table))
    return [record.finalized() for record in table.values()]

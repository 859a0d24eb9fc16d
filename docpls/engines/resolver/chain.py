"""Resolution chain: run every applicable strategy and fold the results into one table."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import structlog

# Ensure strategies are registered before any resolve runs.
import docpls.engines.resolver.strategies  # noqa: F401
from docpls.engines.resolver.discovery import candidate_artifacts
from docpls.engines.resolver.registry import MANIFEST, strategies_for
from docpls.engines.resolver.strategies._helpers import canonical_name
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

DependencyTable = dict[str, DependencyRecord]

# First non-empty value wins; later sources only fill gaps.
_GAP_FILLED = (
    "declared_version",
    "resolved_version",
    "install_path",
    "type_information_path",
    "documentation_url",
    "homepage_url",
    "repository_url",
    "source_path",
)
# Latest observation wins.
_LATEST_WINS = ("has_type_information", "is_private")


def merge_key(name: str, ecosystem: Ecosystem) -> str:
    """Table key for *name*: PEP 503 normalised for Python, verbatim otherwise."""
    if ecosystem is Ecosystem.PYTHON:
        return canonical_name(name)
    return name


def merge_record(existing: DependencyRecord, incoming: DependencyRecord, priority: int) -> DependencyRecord:
    """Merge one partial record into the record already held for its name."""
    changes: dict[str, object] = {}
    for field in _GAP_FILLED:
        if not getattr(existing, field) and getattr(incoming, field):
            changes[field] = getattr(incoming, field)
    for field in _LATEST_WINS:
        value = getattr(incoming, field)
        if value is not None:
            changes[field] = value
    # installed only ever moves towards True
    if incoming.installed and not existing.installed:
        changes["installed"] = True
    elif existing.installed is None and incoming.installed is not None:
        changes["installed"] = incoming.installed
    if priority == MANIFEST:
        changes["kind"] = incoming.kind
    return replace(existing, **changes) if changes else existing


def merge_records(
    table: DependencyTable,
    records: list[DependencyRecord],
    priority: int,
    ecosystem: Ecosystem = Ecosystem.UNKNOWN,
) -> DependencyTable:
    """Fold *records* from one source of *priority* into a new table.

    The input table is left untouched; insertion order is preserved.
    """
    merged = dict(table)
    for record in records:
        key = merge_key(record.name, ecosystem)
        existing = merged.get(key)
        if existing is None:
            merged[key] = record
        else:
            merged[key] = merge_record(existing, record, priority)
    return merged


def resolve(root: Path, ecosystem: Ecosystem) -> list[DependencyRecord]:
    """Resolve the consolidated dependency table of *root*.

    Extraction failures are logged and contribute no records.
    """
    root = Path(root)
    artifacts = candidate_artifacts(root, ecosystem)
    extracted: list[tuple[int, list[DependencyRecord]]] = []

    for strategy in strategies_for(ecosystem):
        for artifact in artifacts:
            if not strategy.recognizes(artifact):
                continue
            try:
                records = strategy.extract(artifact)
            except Exception:
                log.exception(
                    "strategy.extract_failed",
                    format=strategy.format.value,
                    path=str(artifact),
                )
                continue
            log.debug(
                "strategy.extracted",
                format=strategy.format.value,
                path=str(artifact),
                count=len(records),
            )
            extracted.append((strategy.priority, records))

    table: DependencyTable = {}
    for priority, records in extracted:
        table = merge_records(table, records, priority, ecosystem)

    log.info("resolver.resolved", root=str(root), ecosystem=ecosystem.value, dependencies=len(table))
    return [record.finalized() for record in table.values()]

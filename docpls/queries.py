"""Read-only accessors over a snapshot's dependency list."""

from __future__ import annotations

from collections.abc import Iterable

from docpls.models import DependencyKind, DependencyRecord, ProjectSnapshot

DEFAULT_MAX_RESULTS = 100

# Fields searched by search_keyword, in reporting order.
KEYWORD_FIELDS = (
    "name",
    "documentation_url",
    "homepage_url",
    "repository_url",
    "install_path",
    "source_path",
)


def find_dependency(
    snapshot: ProjectSnapshot, name: str, case_sensitive: bool = False
) -> DependencyRecord | None:
    """Exact-name lookup."""
    for dep in snapshot.dependencies:
        if dep.name == name or (not case_sensitive and dep.name.lower() == name.lower()):
            return dep
    return None


def filter_by_kind(
    deps: Iterable[DependencyRecord], kind: DependencyKind | str
) -> list[DependencyRecord]:
    kind = DependencyKind(kind)
    return [d for d in deps if d.kind is kind]


def search_by_name(
    deps: Iterable[DependencyRecord],
    term: str,
    case_sensitive: bool = False,
    exact: bool = False,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[DependencyRecord]:
    """Substring (or exact) name search, capped at *max_results*."""
    needle = term if case_sensitive else term.lower()
    out: list[DependencyRecord] = []
    for dep in deps:
        name = dep.name if case_sensitive else dep.name.lower()
        if (name == needle) if exact else (needle in name):
            out.append(dep)
            if len(out) >= max_results:
                break
    return out


def search_keyword(
    deps: Iterable[DependencyRecord],
    term: str,
    max_results: int = DEFAULT_MAX_RESULTS,
) -> list[tuple[DependencyRecord, str]]:
    """Case-insensitive search across names and discovered locations.

    Returns ``(record, matched_field)`` pairs; a record is reported once,
    under the first field that matched.
    """
    needle = term.lower()
    out: list[tuple[DependencyRecord, str]] = []
    for dep in deps:
        for field in KEYWORD_FIELDS:
            value = getattr(dep, field)
            if value and needle in value.lower():
                out.append((dep, field))
                break
        if len(out) >= max_results:
            break
    return out


def dependency_stats(snapshot: ProjectSnapshot) -> dict[str, int]:
    deps = snapshot.dependencies
    return {
        "total": len(deps),
        "installed": sum(1 for d in deps if d.installed),
        "with_types": sum(1 for d in deps if d.has_type_information),
        "runtime": sum(1 for d in deps if d.kind is DependencyKind.RUNTIME),
        "development": sum(1 for d in deps if d.kind is DependencyKind.DEVELOPMENT),
        "peer": sum(1 for d in deps if d.kind is DependencyKind.PEER),
    }

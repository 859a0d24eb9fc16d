"""MCP tools exposing stored dependency inventories to LLM agents."""

from __future__ import annotations

from pathlib import Path

import structlog
from mcp.server.fastmcp import FastMCP

from docpls import queries
from docpls.exceptions import ProjectNotAnalyzedError
from docpls.formatting import (
    dependency_detail_markdown,
    dependency_list_markdown,
    documentation_markdown,
    project_info_markdown,
    search_results_markdown,
)
from docpls.models import DependencyKind
from docpls.store import SnapshotStore

log = structlog.get_logger("docpls.mcp")

_KINDS = ", ".join(k.value for k in DependencyKind)


def _root(project_path: str) -> Path:
    return Path(project_path or ".").expanduser().resolve()


def _parse_kind(value: str) -> DependencyKind | None:
    try:
        return DependencyKind(value.strip().lower())
    except ValueError:
        return None


def create_docpls_mcp(store: SnapshotStore) -> FastMCP:
    """Create a FastMCP server exposing read-mostly snapshot tools.

    *store* is captured by closure; tools return Markdown, and a project
    that was never analyzed yields the not-found hint instead of an error.
    """
    mcp = FastMCP("docpls")

    @mcp.tool()
    async def list_dependencies(project_path: str = "", kind: str = "", name: str = "") -> str:
        """List a project's dependencies, optionally filtered by kind or name substring."""
        try:
            snapshot = store.require(_root(project_path))
        except ProjectNotAnalyzedError as exc:
            return str(exc)
        deps = snapshot.dependencies
        if kind:
            parsed = _parse_kind(kind)
            if parsed is None:
                return f"Unknown dependency kind '{kind}'. Expected one of: {_KINDS}."
            deps = queries.filter_by_kind(deps, parsed)
        if name:
            deps = queries.search_by_name(deps, name, max_results=len(deps))
        return dependency_list_markdown(snapshot, deps)

    @mcp.tool()
    async def get_dependency(dependency_name: str, project_path: str = "") -> str:
        """Show everything known about one dependency."""
        try:
            snapshot = store.require(_root(project_path))
        except ProjectNotAnalyzedError as exc:
            return str(exc)
        dep = queries.find_dependency(snapshot, dependency_name)
        if dep is None:
            return f"Dependency '{dependency_name}' not found in project {snapshot.root}."
        return dependency_detail_markdown(dep)

    @mcp.tool()
    async def get_documentation(dependency_name: str, project_path: str = "") -> str:
        """Return the documentation, homepage and repository links of a dependency."""
        try:
            snapshot = store.require(_root(project_path))
        except ProjectNotAnalyzedError as exc:
            return str(exc)
        dep = queries.find_dependency(snapshot, dependency_name)
        if dep is None:
            return f"Dependency '{dependency_name}' not found in project {snapshot.root}."
        return documentation_markdown(dep)

    @mcp.tool()
    async def update_documentation(dependency_name: str, docs_url: str) -> str:
        """Set the documentation URL of a dependency in every analyzed project."""
        patched = store.update_documentation_url(dependency_name, docs_url)
        if not patched:
            return f"Dependency '{dependency_name}' not found in any analyzed project."
        log.info("mcp.documentation_updated", name=dependency_name, patched=patched)
        return f"Updated documentation URL for '{dependency_name}' in {patched} record(s): {docs_url}"

    @mcp.tool()
    async def get_project_info(project_path: str = "") -> str:
        """Summarise an analyzed project: ecosystem, files and dependency counts."""
        try:
            snapshot = store.require(_root(project_path))
        except ProjectNotAnalyzedError as exc:
            return str(exc)
        return project_info_markdown(snapshot, queries.dependency_stats(snapshot))

    @mcp.tool()
    async def query(
        query: str,
        type: str = "dependency",
        project_path: str = "",
        dependency_type: str = "",
        case_sensitive: bool = False,
        exact_match: bool = False,
        max_results: int = queries.DEFAULT_MAX_RESULTS,
    ) -> str:
        """Search dependencies.

        type="dependency" matches names (substring or exact);
        type="keyword" also searches documentation, homepage, repository
        and on-disk locations.
        """
        try:
            snapshot = store.require(_root(project_path))
        except ProjectNotAnalyzedError as exc:
            return str(exc)

        deps = snapshot.dependencies
        if dependency_type:
            parsed = _parse_kind(dependency_type)
            if parsed is None:
                return f"Unknown dependency kind '{dependency_type}'. Expected one of: {_KINDS}."
            deps = queries.filter_by_kind(deps, parsed)

        if type == "keyword":
            hits = queries.search_keyword(deps, query, max_results=max_results)
            return search_results_markdown(query, list(hits))

        found = queries.search_by_name(
            deps,
            query,
            case_sensitive=case_sensitive,
            exact=exact_match,
            max_results=max_results,
        )
        return search_results_markdown(query, [(d, "name") for d in found])

    return mcp

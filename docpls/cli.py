"""CLI entry point: docpls.

Subcommands:
    docpls init [PATH]              # Analyze a project and store the snapshot
    docpls list -p PATH             # List stored dependencies
    docpls info [PATH]              # Project summary
    docpls projects                 # All analyzed projects
    docpls remove PATH              # Forget a project
    docpls add-docs NAME URL        # Set a documentation URL everywhere
    docpls watch [PATH]             # Re-analyze on manifest changes
    docpls mcp                      # Serve the MCP tools over stdio
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import NoReturn

import click

from docpls import queries
from docpls.analyzer import analyze
from docpls.config import load_config, write_default_config
from docpls.core.logging import setup_logging
from docpls.engines.docs import DocumentationFinder
from docpls.exceptions import DocPlsError, ProjectNotAnalyzedError
from docpls.formatting import dependency_list_markdown, project_info_markdown, snapshot_json
from docpls.models import DependencyKind, Ecosystem, ProjectSnapshot
from docpls.store import SnapshotStore

_KIND_CHOICES = [k.value for k in DependencyKind]


def _store() -> SnapshotStore:
    return SnapshotStore()


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(1)


async def _enrich(snapshot: ProjectSnapshot) -> ProjectSnapshot:
    config = load_config(snapshot.root)
    async with DocumentationFinder(
        timeout=config.documentation_timeout,
        verify=config.verify_documentation_urls,
    ) as finder:
        deps = await finder.enrich(snapshot.dependencies, snapshot.ecosystem)
    return replace(snapshot, dependencies=deps)


def _analyze_and_save(path: Path, docs: bool) -> ProjectSnapshot:
    snapshot = analyze(path)
    if snapshot.ecosystem is not Ecosystem.UNKNOWN:
        if docs:
            snapshot = asyncio.run(_enrich(snapshot))
        _store().save(snapshot)
    return snapshot


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """docpls: dependency inventory for Node.js and Python projects."""
    setup_logging("DEBUG" if verbose else None)


@main.command("init")
@click.argument("path", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--docs/--no-docs", default=False, help="Discover documentation URLs (network)")
@click.option("--write-config", is_flag=True, help="Create a default .docplsrc in the project")
def init(path: Path, docs: bool, write_config: bool) -> None:
    """Analyze a project and store its dependency snapshot."""
    try:
        snapshot = _analyze_and_save(path, docs)
    except DocPlsError as e:
        _fail(f"Error: {e}")

    if snapshot.ecosystem is Ecosystem.UNKNOWN:
        click.echo(f"No supported project found at {snapshot.root} (ecosystem: unknown).")
        return

    if write_config:
        click.echo(f"Config: {write_default_config(snapshot.root)}")

    stats = queries.dependency_stats(snapshot)
    click.echo(f"Project:      {snapshot.root}")
    click.echo(f"Ecosystem:    {snapshot.ecosystem.value}")
    click.echo(f"Dependencies: {stats['total']} ({stats['installed']} installed)")
    if snapshot.is_multi_package:
        click.echo(f"Sub-packages: {len(snapshot.sub_packages)}")


@main.command("list")
@click.option("-p", "--path", "path", default=".", type=click.Path(path_type=Path), help="Project path")
@click.option("--kind", type=click.Choice(_KIND_CHOICES), default=None, help="Only this kind")
@click.option("--format", "fmt", type=click.Choice(["markdown", "json"]), default=None,
              help="Output format (default from .docplsrc)")
def list_cmd(path: Path, kind: str | None, fmt: str | None) -> None:
    """List the dependencies of an analyzed project."""
    try:
        snapshot = _store().require(path)
    except ProjectNotAnalyzedError as e:
        _fail(str(e))

    deps = snapshot.dependencies
    if kind:
        deps = queries.filter_by_kind(deps, kind)
    fmt = fmt or load_config(snapshot.root).default_output_format
    if fmt == "json":
        click.echo(snapshot_json(snapshot, deps))
    else:
        click.echo(dependency_list_markdown(snapshot, deps))


@main.command("info")
@click.argument("path", default=".", type=click.Path(path_type=Path))
def info(path: Path) -> None:
    """Show a summary of an analyzed project."""
    try:
        snapshot = _store().require(path)
    except ProjectNotAnalyzedError as e:
        _fail(str(e))
    click.echo(project_info_markdown(snapshot, queries.dependency_stats(snapshot)))


@main.command("projects")
def projects() -> None:
    """List every analyzed project."""
    snapshots = _store().list_all()
    if not snapshots:
        click.echo("No projects analyzed yet. Run 'docpls init <path>' first.")
        return
    for snap in snapshots:
        click.echo(
            f"{snap.root}  [{snap.ecosystem.value}]  "
            f"{len(snap.dependencies)} deps  {snap.analyzed_at:%Y-%m-%d %H:%M}"
        )


@main.command("remove")
@click.argument("path", type=click.Path(path_type=Path))
def remove(path: Path) -> None:
    """Forget an analyzed project."""
    try:
        removed = _store().remove(path)
    except DocPlsError as e:
        _fail(f"Error: {e}")
    if not removed:
        _fail(str(ProjectNotAnalyzedError(str(path))))
    click.echo(f"Removed {path}")


@main.command("add-docs")
@click.argument("name")
@click.argument("url")
def add_docs(name: str, url: str) -> None:
    """Set the documentation URL of a dependency in every analyzed project."""
    try:
        patched = _store().update_documentation_url(name, url)
    except DocPlsError as e:
        _fail(f"Error: {e}")
    if not patched:
        _fail(f"Dependency '{name}' not found in any analyzed project.")
    click.echo(f"Updated {patched} record(s) for {name}: {url}")


@main.command("watch")
@click.argument("path", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--interval", default=2.0, show_default=True, help="Polling interval in seconds")
def watch(path: Path, interval: float) -> None:
    """Re-analyze a project whenever its manifests or lock files change."""
    from docpls.watcher import ProjectWatcher

    def _reanalyze(root: Path) -> None:
        snapshot = _analyze_and_save(root, docs=False)
        click.echo(f"Re-analyzed {snapshot.root}: {len(snapshot.dependencies)} dependencies")

    try:
        _reanalyze(path)
    except DocPlsError as e:
        _fail(f"Error: {e}")

    watcher = ProjectWatcher(path, _reanalyze, interval=interval)
    click.echo(f"Watching {path.resolve()} (Ctrl+C to stop)")
    try:
        watcher.run()
    except KeyboardInterrupt:
        watcher.stop()
        click.echo("Stopped.")


@main.command("mcp")
def mcp_cmd() -> None:
    """Serve the docpls MCP tools over stdio."""
    from docpls.mcp_server import create_docpls_mcp

    create_docpls_mcp(_store()).run()


if __name__ == "__main__":
    main()

"""Markdown / JSON rendering shared by the CLI and the MCP tools."""

from __future__ import annotations

import json
from typing import Any

from docpls.models import DependencyKind, DependencyRecord, ProjectSnapshot

_SECTION_TITLES = {
    DependencyKind.RUNTIME: "Runtime Dependencies",
    DependencyKind.DEVELOPMENT: "Development Dependencies",
    DependencyKind.PEER: "Peer Dependencies",
}


def _line(dep: DependencyRecord) -> str:
    flags = []
    if dep.has_type_information:
        flags.append("typed")
    if not dep.installed:
        flags.append("not installed")
    suffix = f" ({', '.join(flags)})" if flags else ""
    return f"- **{dep.name}** @ `{dep.display_version}`{suffix}"


def dependency_list_markdown(snapshot: ProjectSnapshot, deps: list[DependencyRecord]) -> str:
    lines = [
        f"# Project Dependencies: {snapshot.root}",
        "",
        f"Found {len(deps)} dependencies ({snapshot.ecosystem.value}).",
        "",
    ]
    for kind, title in _SECTION_TITLES.items():
        group = [d for d in deps if d.kind is kind]
        if not group:
            continue
        lines.append(f"## {title} ({len(group)})")
        lines.extend(_line(d) for d in group)
        lines.append("")
    lines.append("> Use `get_dependency` for details on a specific package.")
    return "\n".join(lines)


def dependency_detail_markdown(dep: DependencyRecord) -> str:
    rows = [
        ("Kind", dep.kind.value),
        ("Declared version", dep.declared_version),
        ("Resolved version", dep.resolved_version),
        ("Installed", "yes" if dep.installed else "no"),
        ("Install path", dep.install_path),
        ("Source path", dep.source_path),
        ("Type information", dep.type_information_path if dep.has_type_information else "none"),
        ("Documentation", dep.documentation_url),
        ("Homepage", dep.homepage_url),
        ("Repository", dep.repository_url),
        ("Private", "yes" if dep.is_private else None),
    ]
    lines = [f"# {dep.name}", ""]
    lines.extend(f"- **{label}**: {value}" for label, value in rows if value)
    return "\n".join(lines)


def documentation_markdown(dep: DependencyRecord) -> str:
    links = [
        ("Documentation", dep.documentation_url),
        ("Homepage", dep.homepage_url),
        ("Repository", dep.repository_url),
    ]
    present = [(label, url) for label, url in links if url]
    lines = [f"# Documentation: {dep.name}", ""]
    if not present:
        lines.append(
            f"No documentation URL is known for '{dep.name}'. "
            "Run `docpls init --docs` or use `update_documentation` to set one."
        )
    for label, url in present:
        lines.extend([f"## {label}", f"[{url}]({url})", ""])
    return "\n".join(lines).rstrip() + "\n"


def project_info_markdown(snapshot: ProjectSnapshot, stats: dict[str, int]) -> str:
    lines = [
        f"# Project: {snapshot.root}",
        "",
        f"- **Ecosystem**: {snapshot.ecosystem.value}",
        f"- **Analyzed at**: {snapshot.analyzed_at.isoformat()}",
        f"- **Manifest files**: {', '.join(snapshot.manifest_files) or 'none'}",
        f"- **Lock files**: {', '.join(snapshot.lock_files) or 'none'}",
        f"- **Multi-package**: {'yes' if snapshot.is_multi_package else 'no'}",
    ]
    if snapshot.sub_packages:
        lines.append(f"- **Sub-packages**: {', '.join(snapshot.sub_packages)}")
    lines.extend(
        [
            "",
            "## Dependencies",
            f"- Total: {stats['total']}",
            f"- Installed: {stats['installed']}",
            f"- With type information: {stats['with_types']}",
            f"- Runtime / development / peer: "
            f"{stats['runtime']} / {stats['development']} / {stats['peer']}",
        ]
    )
    return "\n".join(lines)


def search_results_markdown(
    query: str, matches: list[tuple[DependencyRecord, str | None]]
) -> str:
    if not matches:
        return (
            f'No dependencies found matching "{query}".\n\n'
            "Use `list_dependencies` to see what is available, or try a shorter keyword."
        )
    noun = "match" if len(matches) == 1 else "matches"
    lines = [f'# Search Results: "{query}"', "", f"Found {len(matches)} {noun}.", ""]
    for dep, field in matches:
        lines.append(f"## {dep.name} ({dep.display_version})")
        lines.append(f"- **Kind**: {dep.kind.value}")
        if field and field != "name":
            lines.append(f"- **Matched**: {field} = {getattr(dep, field)}")
        if dep.documentation_url:
            lines.append(f"- **Docs**: {dep.documentation_url}")
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def snapshot_json(snapshot: ProjectSnapshot, deps: list[DependencyRecord]) -> str:
    data: dict[str, Any] = snapshot.to_dict()
    data["dependencies"] = [d.to_dict() for d in deps]
    return json.dumps(data, indent=2, ensure_ascii=False)

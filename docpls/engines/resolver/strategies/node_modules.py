"""Strategy for an installed node_modules/ tree."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import structlog

from docpls.engines.docs.urls import normalize_url
from docpls.engines.resolver.registry import INSTALLED, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import read_json
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

_DTS_WALK_DEPTH = 3
_DTS_WALK_LIMIT = 500


def _package_dirs(root: Path) -> list[tuple[str, Path]]:
    """List ``(name, dir)`` for every package, descending one level into scopes."""
    out: list[tuple[str, Path]] = []
    try:
        entries = sorted(root.iterdir())
    except OSError as exc:
        log.warning("strategy.walk_failed", path=str(root), error=str(exc))
        return out
    for entry in entries:
        if entry.name.startswith(".") or not entry.is_dir():
            continue
        if entry.name.startswith("@"):
            try:
                scoped = sorted(entry.iterdir())
            except OSError as exc:
                log.warning("strategy.walk_failed", path=str(entry), error=str(exc))
                continue
            for sub in scoped:
                if not sub.name.startswith(".") and sub.is_dir():
                    out.append((f"{entry.name}/{sub.name}", sub))
        else:
            out.append((entry.name, entry))
    return out


def _find_dts(pkg_dir: Path) -> Path | None:
    seen = 0
    base_depth = len(pkg_dir.parts)
    for dirpath, dirnames, filenames in os.walk(pkg_dir):
        dirnames[:] = sorted(d for d in dirnames if d != "node_modules" and not d.startswith("."))
        if len(Path(dirpath).parts) - base_depth >= _DTS_WALK_DEPTH:
            dirnames[:] = []
        for fname in sorted(filenames):
            if fname.endswith(".d.ts"):
                return Path(dirpath) / fname
        seen += len(filenames)
        if seen > _DTS_WALK_LIMIT:
            break
    return None


def types_package_name(name: str) -> str:
    """``@scope/pkg`` -> ``scope__pkg`` (the DefinitelyTyped naming rule)."""
    if name.startswith("@") and "/" in name:
        scope, pkg = name[1:].split("/", 1)
        return f"{scope}__{pkg}"
    return name


def find_type_information(root: Path, name: str, pkg_dir: Path, manifest: dict[str, Any]) -> Path | None:
    """Locate type declarations for an installed package, or ``None``."""
    for field in ("types", "typings"):
        value = manifest.get(field)
        if isinstance(value, str) and value:
            return pkg_dir / value

    index = pkg_dir / "index.d.ts"
    if index.is_file():
        return index

    found = _find_dts(pkg_dir)
    if found is not None:
        return found

    types_dir = pkg_dir / "types"
    if types_dir.is_dir():
        return types_dir

    sibling = root / "@types" / types_package_name(name)
    if not name.startswith("@types/") and sibling.is_dir():
        return sibling
    return None


def _url_field(value: Any) -> str | None:
    if isinstance(value, dict):
        value = value.get("url")
    if isinstance(value, str) and value.strip():
        return normalize_url(value)
    return None


class NodeModulesStrategy:
    format = StrategyFormat.NODE_MODULES
    ecosystem = Ecosystem.NODE
    priority = INSTALLED

    def recognizes(self, path: Path) -> bool:
        return path.name == "node_modules" and path.is_dir()

    def extract(self, path: Path) -> list[DependencyRecord]:
        deps: list[DependencyRecord] = []
        for name, pkg_dir in _package_dirs(path):
            manifest: dict[str, Any] = {}
            manifest_path = pkg_dir / "package.json"
            if manifest_path.is_file():
                try:
                    data = read_json(manifest_path)
                except (OSError, json.JSONDecodeError) as exc:
                    log.debug("strategy.metadata_unreadable", path=str(pkg_dir), error=str(exc))
                    data = None
                if isinstance(data, dict):
                    manifest = data

            types_path = find_type_information(path, name, pkg_dir, manifest)
            version = manifest.get("version")
            docs = manifest.get("documentation") or manifest.get("docs")
            deps.append(
                DependencyRecord(
                    name=name,
                    resolved_version=version if isinstance(version, str) else None,
                    installed=True,
                    install_path=str(pkg_dir),
                    has_type_information=types_path is not None,
                    type_information_path=str(types_path) if types_path else None,
                    documentation_url=_url_field(docs),
                    homepage_url=_url_field(manifest.get("homepage")),
                    repository_url=_url_field(manifest.get("repository")),
                    is_private=manifest.get("private") is True,
                )
            )
        return deps


register_strategy(NodeModulesStrategy())

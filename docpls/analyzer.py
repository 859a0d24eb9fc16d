"""Single entry point that turns a project root into a snapshot."""

from __future__ import annotations

from pathlib import Path

import structlog

from docpls.detector import detect
from docpls.engines.resolver import find_manifests, is_multi_package, resolve, resolve_monorepo
from docpls.engines.resolver.discovery import (
    NODE_LOCK_FILES,
    NODE_MANIFESTS,
    PYTHON_LOCK_FILES,
    PYTHON_MANIFESTS,
)
from docpls.engines.resolver.monorepo import sub_packages
from docpls.exceptions import ProjectNotFoundError
from docpls.models import Ecosystem, ProjectSnapshot

log = structlog.get_logger("docpls.analyzer")

_ROOT_FILES = {
    Ecosystem.NODE: (NODE_MANIFESTS, NODE_LOCK_FILES),
    Ecosystem.PYTHON: (PYTHON_MANIFESTS, PYTHON_LOCK_FILES),
}


def _present(root: Path, names: list[str]) -> list[str]:
    return [name for name in names if (root / name).is_file()]


def analyze(project_root: Path | str) -> ProjectSnapshot:
    """Detect, resolve and package the dependency table of *project_root*.

    An unrecognised project yields an empty snapshot with
    ``ecosystem=unknown``; only an unusable root raises.
    """
    try:
        root = Path(project_root).expanduser().resolve()
    except OSError as exc:
        raise ProjectNotFoundError(f"cannot resolve project root {project_root}: {exc}") from exc
    if not root.is_dir():
        raise ProjectNotFoundError(f"project root is not a directory: {root}")

    ecosystem = detect(root)
    snapshot = ProjectSnapshot(root=str(root), ecosystem=ecosystem)
    if ecosystem is Ecosystem.UNKNOWN:
        log.info("analyzer.unknown_project", root=str(root))
        return snapshot

    manifest_names, lock_names = _ROOT_FILES[ecosystem]
    snapshot.manifest_files = _present(root, manifest_names)
    snapshot.lock_files = _present(root, lock_names)

    manifests = find_manifests(root) if ecosystem is Ecosystem.NODE else []
    if manifests and is_multi_package(root, manifests):
        snapshot.is_multi_package = True
        snapshot.sub_packages = sub_packages(root, manifests)
        snapshot.dependencies = resolve_monorepo(root, manifests)
    else:
        snapshot.dependencies = resolve(root, ecosystem)

    log.info(
        "analyzer.analyzed",
        root=str(root),
        ecosystem=ecosystem.value,
        multi_package=snapshot.is_multi_package,
        dependencies=len(snapshot.dependencies),
    )
    return snapshot

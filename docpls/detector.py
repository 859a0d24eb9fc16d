"""Ecosystem detection — fingerprint a directory as Node, Python or unknown."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import structlog

from docpls.exceptions import ProjectNotFoundError
from docpls.models import Ecosystem

log = structlog.get_logger("docpls.detector")

PYTHON_MARKERS = [
    "requirements.txt",
    "requirements-dev.txt",
    "requirements.pip",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "Pipfile",
    "Pipfile.lock",
    "poetry.lock",
    "uv.lock",
    "environment.yml",
    "environment.yaml",
    "conda.yml",
    "conda.yaml",
]


def is_node_project(root: Path) -> bool:
    """``package.json`` exists and parses as a JSON object."""
    manifest = root / "package.json"
    if not manifest.is_file():
        return False
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        log.debug("detector.invalid_manifest", path=str(manifest), error=str(exc))
        return False
    return isinstance(data, dict)


def is_python_project(root: Path) -> bool:
    return any((root / marker).is_file() for marker in PYTHON_MARKERS)


# Checked in order; the first match wins.
_DETECTORS: list[tuple[Ecosystem, Callable[[Path], bool]]] = [
    (Ecosystem.NODE, is_node_project),
    (Ecosystem.PYTHON, is_python_project),
]


def detect(root: Path) -> Ecosystem:
    """Return the ecosystem of *root*, or ``Ecosystem.UNKNOWN``.

    Raises :class:`ProjectNotFoundError` if *root* is not a readable directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise ProjectNotFoundError(f"project root is not a directory: {root}")
    for ecosystem, check in _DETECTORS:
        if check(root):
            log.debug("detector.detected", root=str(root), ecosystem=ecosystem.value)
            return ecosystem
    return Ecosystem.UNKNOWN

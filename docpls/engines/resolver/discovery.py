"""File discovery — enumerate on-disk artifacts a strategy might recognize."""

from __future__ import annotations

from pathlib import Path

import structlog

from docpls.models import Ecosystem

log = structlog.get_logger("docpls.resolver")

NODE_MANIFESTS = ["package.json"]
NODE_LOCK_FILES = ["package-lock.json", "npm-shrinkwrap.json", "yarn.lock", "pnpm-lock.yaml"]

PYTHON_MANIFESTS = [
    "requirements.txt",
    "requirements-dev.txt",
    "requirements.pip",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
    "Pipfile",
]
PYTHON_LOCK_FILES = [
    "Pipfile.lock",
    "poetry.lock",
    "uv.lock",
    "environment.yml",
    "environment.yaml",
    "conda.yml",
    "conda.yaml",
]
# Extra requirement files beyond the fixed names above.
_REQUIREMENT_GLOBS = ["requirements*.txt", "requirements/*.txt"]

VENV_NAMES = [
    ".venv",
    "venv",
    "env",
    ".env",
    "virtualenv",
    "conda-env",
    ".python-virtualenv",
    ".virtualenv",
]

# Any one of these marks a directory as a virtual environment.
_VENV_MARKERS = [
    "pyvenv.cfg",
    "conda-meta",
    "bin/activate",
    "Scripts/activate",
    "bin/python",
    "Scripts/python.exe",
]

_SITE_LAYOUTS = ["lib/python*/site-packages", "Lib/site-packages", "lib/site-packages", "site-packages"]


def is_virtualenv(path: Path) -> bool:
    """Fingerprint check: a marker file, or a binaries dir next to a library dir."""
    if not path.is_dir():
        return False
    if any((path / marker).exists() for marker in _VENV_MARKERS):
        return True
    has_bin = (path / "bin").is_dir() or (path / "Scripts").is_dir()
    has_lib = any(child.is_dir() and child.name.lower().startswith("lib") for child in _children(path))
    return has_bin and has_lib


def site_packages_dirs(venv: Path) -> list[Path]:
    """Resolve the site-packages directories of one environment."""
    found: list[Path] = []
    for pattern in _SITE_LAYOUTS:
        for hit in sorted(venv.glob(pattern)):
            if hit.is_dir() and hit not in found:
                found.append(hit)
    return found


def find_virtualenvs(root: Path) -> list[Path]:
    """Well-known environment names first, then any other hidden directory."""
    candidates = [root / name for name in VENV_NAMES]
    candidates += [
        child for child in _children(root) if child.name.startswith(".") and child not in candidates
    ]
    envs = [c for c in candidates if is_virtualenv(c)]
    log.debug("discovery.virtualenvs", root=str(root), found=[str(e) for e in envs])
    return envs


def _children(path: Path) -> list[Path]:
    try:
        return sorted(child for child in path.iterdir() if child.is_dir())
    except OSError as exc:
        log.debug("discovery.listdir_failed", path=str(path), error=str(exc))
        return []


def _existing(root: Path, names: list[str]) -> list[Path]:
    return [root / name for name in names if (root / name).is_file()]


def candidate_artifacts(root: Path, ecosystem: Ecosystem) -> list[Path]:
    """List candidate artifacts for *ecosystem* under *root*, in a stable order."""
    if ecosystem is Ecosystem.NODE:
        found = _existing(root, NODE_MANIFESTS + NODE_LOCK_FILES)
        node_modules = root / "node_modules"
        if node_modules.is_dir():
            found.append(node_modules)
        return found

    if ecosystem is Ecosystem.PYTHON:
        found = _existing(root, PYTHON_MANIFESTS + PYTHON_LOCK_FILES)
        for pattern in _REQUIREMENT_GLOBS:
            for hit in sorted(root.glob(pattern)):
                if hit.is_file() and hit not in found:
                    found.append(hit)
        for env in find_virtualenvs(root):
            for site in site_packages_dirs(env):
                if site not in found:
                    found.append(site)
        return found

    return []

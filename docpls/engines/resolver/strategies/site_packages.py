"""Strategy for a Python site-packages directory."""

from __future__ import annotations

import re
from importlib.metadata import PackageMetadata, PathDistribution
from pathlib import Path

import structlog

from docpls.engines.resolver.registry import INSTALLED, StrategyFormat, register_strategy
from docpls.engines.resolver.strategies._helpers import canonical_name, read_text
from docpls.models import DependencyRecord, Ecosystem

log = structlog.get_logger("docpls.resolver")

SITE_DIR_NAMES = ("site-packages", "dist-packages")
_META_SUFFIXES = (".dist-info", ".egg-info")
_PRIVATE_CLASSIFIER = "Private :: Do Not Upload"
_VERSION_RE = re.compile(r"""^__version__\s*(?::\s*str\s*)?=\s*['"]([^'"]+)['"]""", re.MULTILINE)

_REPO_LABELS = ("source", "source code", "repository", "code", "github")
_HOME_LABELS = ("homepage", "home", "home-page")
_DOCS_LABELS = ("documentation", "docs")


def _project_urls(meta: PackageMetadata) -> dict[str, str]:
    urls: dict[str, str] = {}
    for raw in meta.get_all("Project-URL") or []:
        label, _, url = raw.partition(",")
        if url.strip():
            urls.setdefault(label.strip().lower(), url.strip())
    return urls


def _pick(urls: dict[str, str], labels: tuple[str, ...]) -> str | None:
    for label in labels:
        if label in urls:
            return urls[label]
    return None


def _top_level_names(dist: PathDistribution) -> list[str]:
    top_level = dist.read_text("top_level.txt")
    if top_level:
        return [n.strip() for n in top_level.splitlines() if n.strip()]
    names: list[str] = []
    for file in dist.files or []:
        first = file.parts[0]
        if first == ".." or first.endswith(_META_SUFFIXES) or first == "__pycache__":
            continue
        name = first[:-3] if first.endswith(".py") else first
        if name not in names:
            names.append(name)
    return names


def _first_importable(names: list[str], site: Path) -> Path | None:
    for name in names:
        for candidate in (site / name, site / f"{name}.py"):
            if candidate.exists():
                return candidate
    return None


def _stub_location(name: str, source: Path | None, site: Path) -> Path | None:
    if source is not None and source.is_dir() and (source / "py.typed").is_file():
        return source / "py.typed"
    if source is not None:
        stubs = site / f"{source.stem}-stubs"
        if stubs.is_dir():
            return stubs
    if canonical_name(name).startswith("types-") and source is not None:
        return source
    return None


def _dist_record(entry: Path, site: Path) -> tuple[DependencyRecord | None, list[str]]:
    """Build the record for one metadata directory plus its top-level names."""
    dist = PathDistribution(entry)
    meta = dist.metadata
    name = meta.get("Name") if meta is not None else None
    if not name:
        return None, []
    urls = _project_urls(meta)
    top_level = _top_level_names(dist)
    source = _first_importable(top_level, site)
    home_page = meta.get("Home-page")
    if home_page == "UNKNOWN":
        home_page = None
    types_path = _stub_location(name, source, site)
    classifiers = meta.get_all("Classifier") or []
    record = DependencyRecord(
        name=name,
        resolved_version=meta.get("Version"),
        installed=True,
        install_path=str(entry),
        has_type_information=types_path is not None,
        type_information_path=str(types_path) if types_path else None,
        documentation_url=_pick(urls, _DOCS_LABELS),
        homepage_url=home_page or _pick(urls, _HOME_LABELS),
        repository_url=_pick(urls, _REPO_LABELS),
        is_private=_PRIVATE_CLASSIFIER in classifiers,
        source_path=str(source) if source else None,
    )
    return record, top_level


def _bare_record(pkg_dir: Path) -> DependencyRecord:
    version = None
    try:
        m = _VERSION_RE.search(read_text(pkg_dir / "__init__.py"))
        version = m.group(1) if m else None
    except OSError as exc:
        log.debug("strategy.metadata_unreadable", path=str(pkg_dir), error=str(exc))
    return DependencyRecord(
        name=pkg_dir.name,
        resolved_version=version,
        installed=True,
        install_path=str(pkg_dir),
        has_type_information=(pkg_dir / "py.typed").is_file(),
        source_path=str(pkg_dir),
    )


class SitePackagesStrategy:
    format = StrategyFormat.SITE_PACKAGES
    ecosystem = Ecosystem.PYTHON
    priority = INSTALLED

    def recognizes(self, path: Path) -> bool:
        return path.name in SITE_DIR_NAMES and path.is_dir()

    def extract(self, path: Path) -> list[DependencyRecord]:
        try:
            entries = sorted(path.iterdir())
        except OSError as exc:
            log.warning("strategy.walk_failed", path=str(path), error=str(exc))
            return []

        deps: list[DependencyRecord] = []
        claimed: set[str] = set()
        for entry in entries:
            if not entry.name.endswith(_META_SUFFIXES) or not entry.is_dir():
                continue
            try:
                record, top_level = _dist_record(entry, path)
            except Exception as exc:
                log.debug("strategy.metadata_unreadable", path=str(entry), error=str(exc))
                continue
            if record is None:
                continue
            deps.append(record)
            claimed.update(top_level)

        for entry in entries:
            if entry.name in claimed or entry.name.startswith(("_", ".")):
                continue
            if entry.is_dir() and (entry / "__init__.py").is_file():
                deps.append(_bare_record(entry))
        return deps


register_strategy(SitePackagesStrategy())

"""Parsing helpers shared by the format strategies."""

from __future__ import annotations

import json
import re
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import yaml

from docpls.models import DependencyKind, DependencyRecord

T = TypeVar("T")

# PEP 508 simplified: name followed by optional extras and version specifiers
_PEP508_RE = re.compile(
    r"^([A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?)"  # package name
    r"\s*(\[[^\]]*\])?"  # optional extras [extra1,extra2]
    r"\s*"
    r"(.*)?$",  # version specifiers
)

_SPEC_RE = re.compile(r"^\(?\s*(===|==|~=|!=|<=|>=|<|>|=)")
_TOML_LINE_RE = re.compile(r"line (\d+)")
# Bounds the re-parses of a huge, badly broken lock file.
_MAX_PREFIX_ATTEMPTS = 64

DEV_GROUPS = frozenset(
    {"dev", "develop", "development", "test", "tests", "testing", "lint", "docs", "doc", "typing"}
)


def is_dev_group(name: str) -> bool:
    return name.strip().lower() in DEV_GROUPS


def canonical_name(name: str) -> str:
    """PEP 503 normalised project name."""
    return re.sub(r"[-_.]+", "-", name).lower()


def add_declared(
    acc: dict[str, DependencyRecord],
    name: str,
    spec: str | None,
    kind: DependencyKind,
) -> None:
    """Add a declared dependency to a per-file table.

    A name declared twice in one file keeps its first entry, except that a
    runtime declaration replaces a development or peer one.
    """
    key = canonical_name(name)
    existing = acc.get(key)
    if existing is not None and (
        kind is not DependencyKind.RUNTIME or existing.kind is DependencyKind.RUNTIME
    ):
        return
    acc[key] = DependencyRecord(name=name, declared_version=spec, kind=kind, installed=False)


def add_requirement(acc: dict[str, DependencyRecord], raw: object, kind: DependencyKind) -> None:
    if not isinstance(raw, str):
        return
    parsed = parse_requirement(raw)
    if parsed is not None:
        add_declared(acc, parsed[0], parsed[1], kind)


def parse_requirement(raw: str) -> tuple[str, str | None] | None:
    """Split a PEP 508 requirement into ``(name, specifier)``.

    Environment markers, extras and direct references are dropped; the
    specifier is returned as written (``==2.28.1``, ``>=1,<2``) or ``None``.
    """
    line = raw.strip()
    if not line:
        return None

    marker_pos = line.find(";")
    if marker_pos != -1:
        line = line[:marker_pos].strip()

    m = _PEP508_RE.match(line)
    if not m:
        return None

    name = m.group(1)
    rest = (m.group(4) or "").strip()
    if not rest or rest.startswith("@"):
        return name, None
    if not _SPEC_RE.match(rest):
        return None
    spec = rest.strip("()").replace(" ", "")
    return name, spec or None


def read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def read_json(path: Path) -> Any:
    return json.loads(read_text(path))


def _load_longest_prefix(
    text: str,
    loader: Callable[[str], T],
    errors: tuple[type[Exception], ...],
    error_line: int | None,
    is_boundary: Callable[[str], bool],
) -> T | None:
    """Retry *loader* on successively shorter prefixes of *text*.

    Walking back from *error_line* (0-based), the text is cut before each
    record boundary in turn until a prefix loads, so the half-written
    trailing record is dropped and every complete one before it survives.
    """
    if error_line is None or error_line <= 0:
        return None
    lines = text.splitlines()
    attempts = 0
    for idx in range(min(error_line, len(lines) - 1), 0, -1):
        if not is_boundary(lines[idx]):
            continue
        try:
            return loader("\n".join(lines[:idx]) + "\n")
        except errors:
            attempts += 1
            if attempts >= _MAX_PREFIX_ATTEMPTS:
                break
    return None


def _is_toml_table(line: str) -> bool:
    return line.lstrip().startswith("[")


def _is_yaml_entry(line: str) -> bool:
    # list items and mapping keys at any depth
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def load_toml(text: str) -> dict[str, Any] | None:
    """Parse TOML, falling back to the longest valid prefix of tables.

    Returns ``None`` when no prefix parses.
    """
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        m = _TOML_LINE_RE.search(str(exc))
        error_line = int(m.group(1)) - 1 if m else None
        return _load_longest_prefix(
            text, tomllib.loads, (tomllib.TOMLDecodeError,), error_line, _is_toml_table
        )


def load_yaml(text: str) -> Any:
    """Parse YAML (safe loader), falling back to the longest valid prefix.

    Returns ``None`` when no prefix parses.
    """
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        error_line = mark.line if mark is not None else None
        return _load_longest_prefix(text, yaml.safe_load, (yaml.YAMLError,), error_line, _is_yaml_entry)

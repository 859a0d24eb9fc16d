"""SnapshotStore — one JSON document mapping project root to snapshot."""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Any

import structlog

from docpls.engines.resolver.chain import merge_key
from docpls.exceptions import ProjectNotAnalyzedError, StoreError
from docpls.models import ProjectSnapshot

log = structlog.get_logger("docpls.store")

STORE_FILENAME = "projects.json"


def default_home() -> Path:
    """``$DOCPLS_HOME`` or ``~/.docpls``."""
    env = os.environ.get("DOCPLS_HOME")
    return Path(env).expanduser() if env else Path.home() / ".docpls"


def root_key(root: Path | str) -> str:
    return str(Path(root).expanduser().resolve())


class SnapshotStore:
    """Keyed snapshot persistence.

    Every call reads the file afresh, so separate processes (CLI, watcher,
    MCP server) see each other's writes.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(path) if path is not None else default_home() / STORE_FILENAME

    # ── raw document ─────────────────────────────────────────────────────

    def _load(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("store.unreadable", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            log.warning("store.unexpected_shape", path=str(self.path))
            return {}
        return data

    def _dump(self, data: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".projects-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.write("\n")
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"cannot write snapshot store {self.path}: {exc}") from exc

    def _snapshots(self) -> dict[str, ProjectSnapshot]:
        out: dict[str, ProjectSnapshot] = {}
        for key, raw in self._load().items():
            try:
                out[key] = ProjectSnapshot.from_dict(raw)
            except (KeyError, TypeError, ValueError) as exc:
                log.warning("store.snapshot_skipped", root=key, error=str(exc))
        return out

    # ── public API ───────────────────────────────────────────────────────

    def save(self, snapshot: ProjectSnapshot) -> None:
        data = self._load()
        data[root_key(snapshot.root)] = snapshot.to_dict()
        self._dump(data)
        log.info("store.saved", root=snapshot.root, dependencies=len(snapshot.dependencies))

    def get(self, root: Path | str) -> ProjectSnapshot | None:
        return self._snapshots().get(root_key(root))

    def require(self, root: Path | str) -> ProjectSnapshot:
        """Like :meth:`get` but raises :class:`ProjectNotAnalyzedError`."""
        snapshot = self.get(root)
        if snapshot is None:
            raise ProjectNotAnalyzedError(str(root))
        return snapshot

    def list_all(self) -> list[ProjectSnapshot]:
        return list(self._snapshots().values())

    def remove(self, root: Path | str) -> bool:
        data = self._load()
        if data.pop(root_key(root), None) is None:
            return False
        self._dump(data)
        log.info("store.removed", root=root_key(root))
        return True

    def update_documentation_url(self, name: str, url: str) -> int:
        """Set the documentation URL of *name* in every stored snapshot.

        Names match the way the resolver merges them, so Python names are
        compared PEP 503 normalised.

        Returns the number of records patched.
        """
        snapshots = self._snapshots()
        patched = 0
        for snapshot in snapshots.values():
            wanted = merge_key(name, snapshot.ecosystem)
            deps = []
            for dep in snapshot.dependencies:
                if merge_key(dep.name, snapshot.ecosystem) == wanted:
                    dep = replace(dep, documentation_url=url)
                    patched += 1
                deps.append(dep)
            snapshot.dependencies = deps
        if patched:
            self._dump({key: snap.to_dict() for key, snap in snapshots.items()})
        log.info("store.documentation_updated", name=name, patched=patched)
        return patched

"""Polling watcher that re-analyzes a project when its manifests change."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import structlog

from docpls.engines.resolver.discovery import (
    NODE_LOCK_FILES,
    NODE_MANIFESTS,
    PYTHON_LOCK_FILES,
    PYTHON_MANIFESTS,
)

log = structlog.get_logger("docpls.watcher")

WATCHED_FILES = NODE_MANIFESTS + NODE_LOCK_FILES + PYTHON_MANIFESTS + PYTHON_LOCK_FILES

Fingerprint = dict[str, tuple[int, int]]


def fingerprint(root: Path) -> Fingerprint:
    """``{name: (mtime_ns, size)}`` for every watched file present under *root*."""
    out: Fingerprint = {}
    for name in WATCHED_FILES:
        try:
            st = (root / name).stat()
        except OSError:
            continue
        out[name] = (st.st_mtime_ns, st.st_size)
    return out


class ProjectWatcher:
    """Poll *root* and call *on_change* after each detected change.

    Callbacks never overlap: a change seen while one is running is picked
    up by the next poll.
    """

    def __init__(
        self,
        root: Path,
        on_change: Callable[[Path], None],
        interval: float = 2.0,
    ) -> None:
        self.root = Path(root)
        self.on_change = on_change
        self.interval = interval
        self._last = fingerprint(self.root)
        self._lock = threading.Lock()
        self._stop = threading.Event()

    def poll_once(self) -> bool:
        """Check once; returns True if *on_change* ran."""
        if not self._lock.acquire(blocking=False):
            return False
        try:
            current = fingerprint(self.root)
            if current == self._last:
                return False
            changed = sorted(
                name for name in current.keys() | self._last.keys()
                if current.get(name) != self._last.get(name)
            )
            log.info("watcher.change_detected", root=str(self.root), files=changed)
            self._last = current
            try:
                self.on_change(self.root)
            except Exception:
                log.exception("watcher.reanalysis_failed", root=str(self.root))
            return True
        finally:
            self._lock.release()

    def stop(self) -> None:
        self._stop.set()

    def run(self) -> None:
        """Poll until :meth:`stop` is called or the process is interrupted."""
        log.info("watcher.started", root=str(self.root), interval=self.interval)
        while not self._stop.is_set():
            self.poll_once()
            self._stop.wait(self.interval)
        log.info("watcher.stopped", root=str(self.root))

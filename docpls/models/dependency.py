"""Dependency record — one logical package as seen by the resolver."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any


class DependencyKind(Enum):
    """Declared role of a dependency."""

    RUNTIME = "runtime"
    DEVELOPMENT = "development"
    PEER = "peer"


class Ecosystem(Enum):
    """Package-management convention family."""

    NODE = "node"
    PYTHON = "python"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DependencyRecord:
    """A (possibly partial) dependency record.

    Strategies emit partial records where ``None`` means "not observed".
    The resolution chain merges them and :meth:`finalized` turns the
    unobserved booleans into ``False``.
    """

    name: str
    declared_version: str | None = None
    resolved_version: str | None = None
    kind: DependencyKind = DependencyKind.RUNTIME
    installed: bool | None = None
    install_path: str | None = None
    has_type_information: bool | None = None
    type_information_path: str | None = None
    documentation_url: str | None = None
    homepage_url: str | None = None
    repository_url: str | None = None
    is_private: bool | None = None
    source_path: str | None = None

    @property
    def display_version(self) -> str:
        return self.resolved_version or self.declared_version or "unknown"

    def finalized(self) -> DependencyRecord:
        return replace(
            self,
            installed=bool(self.installed),
            has_type_information=bool(self.has_type_information),
            is_private=bool(self.is_private),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DependencyRecord:
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        kwargs["kind"] = DependencyKind(kwargs.get("kind", DependencyKind.RUNTIME.value))
        return cls(**kwargs)

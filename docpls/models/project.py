"""Project snapshot — one analyzed project at one point in time."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from docpls.models.dependency import DependencyRecord, Ecosystem


@dataclass
class ProjectSnapshot:
    """Result of a full analysis, keyed by ``root`` in the snapshot store."""

    root: str
    ecosystem: Ecosystem
    dependencies: list[DependencyRecord] = field(default_factory=list)
    manifest_files: list[str] = field(default_factory=list)
    lock_files: list[str] = field(default_factory=list)
    analyzed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_multi_package: bool = False
    sub_packages: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root": self.root,
            "ecosystem": self.ecosystem.value,
            "manifest_files": list(self.manifest_files),
            "lock_files": list(self.lock_files),
            "dependencies": [d.to_dict() for d in self.dependencies],
            "analyzed_at": self.analyzed_at.isoformat(),
            "is_multi_package": self.is_multi_package,
            "sub_packages": list(self.sub_packages),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProjectSnapshot:
        analyzed_at = data.get("analyzed_at")
        return cls(
            root=data["root"],
            ecosystem=Ecosystem(data.get("ecosystem", Ecosystem.UNKNOWN.value)),
            dependencies=[DependencyRecord.from_dict(d) for d in data.get("dependencies", [])],
            manifest_files=list(data.get("manifest_files", [])),
            lock_files=list(data.get("lock_files", [])),
            analyzed_at=(
                datetime.fromisoformat(analyzed_at)
                if analyzed_at
                else datetime.now(timezone.utc)
            ),
            is_multi_package=bool(data.get("is_multi_package", False)),
            sub_packages=list(data.get("sub_packages", [])),
        )

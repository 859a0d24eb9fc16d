"""Data models — dependency records and project snapshots."""

from docpls.models.dependency import DependencyKind, DependencyRecord, Ecosystem
from docpls.models.project import ProjectSnapshot

__all__ = [
    "DependencyKind",
    "DependencyRecord",
    "Ecosystem",
    "ProjectSnapshot",
]

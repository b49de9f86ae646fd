"""Data models for the version management engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from pomhoist.models import DocumentId, GroupArtifactVersion


@runtime_checkable
class ModuleDocument(Protocol):
    """What the engine reads from a module descriptor."""

    id: DocumentId

    @property
    def is_root(self) -> bool: ...

    def dependencies(self) -> list[GroupArtifactVersion]: ...

    def effective_property(self, name: str) -> str | None: ...


@dataclass
class ProjectState:
    """Cross-module facts gathered by the scanner, read by the rewriter."""

    dependencies_by_document: dict[DocumentId, list[GroupArtifactVersion]] = field(
        default_factory=dict
    )
    version_properties: dict[str, str] = field(default_factory=dict)
    roots: set[DocumentId] = field(default_factory=set)

    def all_dependencies(self) -> list[GroupArtifactVersion]:
        """Every recorded coordinate, in scan order then declaration order."""
        return [gav for deps in self.dependencies_by_document.values() for gav in deps]


@dataclass
class RunResult:
    """Outcome of one scan + rewrite run over a project."""

    state: ProjectState
    documents: list[Path]
    applied: dict[Path, int] = field(default_factory=dict)
    diffs: dict[Path, str] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def changed(self) -> list[Path]:
        return [path for path, count in self.applied.items() if count]

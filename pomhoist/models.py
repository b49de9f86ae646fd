"""Value types shared by the pom document layer and the engines."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from typing import NewType, Union

DocumentId = NewType("DocumentId", uuid.UUID)


def new_document_id() -> DocumentId:
    """Mint a run-scoped document identity."""
    return DocumentId(uuid.uuid4())


@dataclass(frozen=True)
class GroupArtifactVersion:
    """A Maven coordinate. ``version`` is ``None`` when not declared."""

    group_id: str
    artifact_id: str
    version: str | None = None

    @property
    def ga(self) -> tuple[str, str]:
        return (self.group_id, self.artifact_id)

    def with_version(self, version: str | None) -> GroupArtifactVersion:
        return replace(self, version=version)

    def __str__(self) -> str:
        if self.version is None:
            return f"{self.group_id}:{self.artifact_id}"
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


# ── edits ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AddManagedDependency:
    """Ensure a ``<dependencyManagement>`` entry exists for group+artifact."""

    group_id: str
    artifact_id: str
    version: str | None
    scope: str | None = None
    classifier: str | None = None


@dataclass(frozen=True)
class AddProperty:
    """Ensure a ``<properties>`` entry exists; never overwrites."""

    name: str
    value: str


@dataclass(frozen=True)
class RemoveProperty:
    name: str


@dataclass(frozen=True)
class ManageDependency:
    """Strip the explicit version from a direct dependency declaration."""

    group_id: str
    artifact_id: str


Edit = Union[AddManagedDependency, AddProperty, RemoveProperty, ManageDependency]

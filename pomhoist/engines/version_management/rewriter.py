"""Second pass: turn a frozen :class:`ProjectState` into per-document edits."""

from __future__ import annotations

from collections.abc import Iterable

from pomhoist.engines.version_management.coordinates import (
    extract_property_names,
    has_property,
)
from pomhoist.engines.version_management.models import ModuleDocument, ProjectState
from pomhoist.models import (
    AddManagedDependency,
    AddProperty,
    DocumentId,
    Edit,
    ManageDependency,
    RemoveProperty,
)


def root_edits(state: ProjectState) -> list[Edit]:
    """Management entries and properties every project root receives."""
    dependencies = state.all_dependencies()
    if not dependencies:
        return []
    edits: list[Edit] = [
        AddManagedDependency(gav.group_id, gav.artifact_id, gav.version) for gav in dependencies
    ]
    edits.extend(AddProperty(name, value) for name, value in state.version_properties.items())
    return edits


def document_edits(doc_id: DocumentId, is_root: bool, state: ProjectState) -> list[Edit]:
    """Version stripping (and, below the root, property removal) for one document."""
    edits: list[Edit] = []
    for gav in state.dependencies_by_document.get(doc_id, []):
        if not is_root and has_property(gav.version):
            edits.extend(RemoveProperty(name) for name in extract_property_names(gav.version))
        edits.append(ManageDependency(gav.group_id, gav.artifact_id))
    return edits


def rewrite(documents: Iterable[ModuleDocument], state: ProjectState) -> dict[DocumentId, list[Edit]]:
    """Edits for every document, keyed by document identity, in application order."""
    result: dict[DocumentId, list[Edit]] = {}
    for doc in documents:
        is_root = doc.id in state.roots
        edits = root_edits(state) if is_root else []
        edits += document_edits(doc.id, is_root, state)
        result[doc.id] = edits
    return result

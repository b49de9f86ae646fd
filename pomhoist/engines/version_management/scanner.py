"""First pass: collect hoistable dependencies and their version properties."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from pomhoist.engines.version_management.coordinates import (
    extract_property_names,
    has_property,
    is_exempt,
)
from pomhoist.engines.version_management.models import ModuleDocument, ProjectState
from pomhoist.models import GroupArtifactVersion

log = structlog.get_logger("pomhoist.engine")


def scan(
    documents: Iterable[ModuleDocument],
    exemptions: frozenset[GroupArtifactVersion] = frozenset(),
) -> ProjectState:
    """Walk every document once and build the :class:`ProjectState`.

    Only directly declared dependencies with an explicit, non-exempt version
    are recorded. Property values are taken from each document's effective
    properties; the first document to resolve a name wins.
    """
    state = ProjectState()
    for doc in documents:
        recorded = state.dependencies_by_document.setdefault(doc.id, [])
        for gav in doc.dependencies():
            if gav.version is None:
                continue
            if is_exempt(gav, exemptions):
                log.debug("scanner.dependency_exempt", gav=str(gav))
                continue
            recorded.append(gav)
            log.debug("scanner.dependency_recorded", gav=str(gav))
            if not has_property(gav.version):
                continue
            for name in extract_property_names(gav.version):
                value = doc.effective_property(name)
                if value is None:
                    log.debug("scanner.property_unresolved", name=name, gav=str(gav))
                    continue
                state.version_properties.setdefault(name, value)
        if doc.is_root:
            state.roots.add(doc.id)
    return state

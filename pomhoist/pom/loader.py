"""Load a Maven multi-module project into linked :class:`PomDocument`s."""

from __future__ import annotations

from pathlib import Path

import structlog

from pomhoist.errors import ProjectNotFoundError
from pomhoist.pom.document import PomDocument

log = structlog.get_logger("pomhoist.pom")


def _module_pom(base_dir: Path, module: str) -> Path:
    candidate = base_dir / module
    if candidate.suffix == ".xml":
        return candidate
    return candidate / "pom.xml"


def load_project(path: Path) -> list[PomDocument]:
    """Read the project rooted at *path* (a directory or a pom file).

    Documents are returned in canonical order: the starting pom first, then
    its ``<modules>`` depth first in declaration order. Each pom is loaded
    once, so aggregator cycles are harmless.
    """
    start = path / "pom.xml" if path.is_dir() else path
    if not start.is_file():
        raise ProjectNotFoundError(f"no pom.xml found at {path}")

    documents: list[PomDocument] = []
    by_path: dict[Path, PomDocument] = {}

    def visit(pom_path: Path) -> None:
        resolved = pom_path.resolve()
        if resolved in by_path:
            return
        doc = PomDocument.from_file(resolved)
        by_path[resolved] = doc
        documents.append(doc)
        for module in doc.module_names():
            module_pom = _module_pom(resolved.parent, module)
            if not module_pom.is_file():
                log.warning("loader.module_missing", path=str(resolved), module=module)
                continue
            visit(module_pom)

    visit(start)
    link_parents(documents, by_path)
    log.debug("loader.loaded", count=len(documents), root=str(start))
    return documents


def link_parents(documents: list[PomDocument], by_path: dict[Path, PomDocument]) -> None:
    """Set ``parent`` on every document whose ``<parent>`` is part of the project."""
    for doc in documents:
        reference = doc.parent_reference()
        if reference is None:
            continue
        coordinates, relative_path = reference
        if relative_path is None:
            continue
        candidate = _module_pom(doc.path.parent, relative_path).resolve()
        parent = by_path.get(candidate)
        if parent is None or parent is doc:
            log.debug("loader.external_parent", path=str(doc.path), parent=str(coordinates))
            continue
        if (parent.group_id, parent.artifact_id) != coordinates.ga:
            log.debug(
                "loader.parent_mismatch",
                path=str(doc.path),
                declared=str(coordinates),
                found=f"{parent.group_id}:{parent.artifact_id}",
            )
            continue
        doc.parent = parent

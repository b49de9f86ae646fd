"""Run both passes over a project on disk and persist the result."""

from __future__ import annotations

import difflib
from pathlib import Path

import structlog

from pomhoist.engines.version_management.models import RunResult
from pomhoist.engines.version_management.rewriter import rewrite
from pomhoist.engines.version_management.scanner import scan
from pomhoist.models import GroupArtifactVersion
from pomhoist.pom.document import PomDocument
from pomhoist.pom.edits import apply_edits
from pomhoist.pom.loader import load_project

log = structlog.get_logger("pomhoist.engine")


def _diff(path: Path, before: str, after: str) -> str:
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )


def run_documents(
    documents: list[PomDocument],
    exemptions: frozenset[GroupArtifactVersion] = frozenset(),
) -> tuple[RunResult, dict[Path, str]]:
    """Scan, rewrite and apply edits in memory.

    Returns the result and the original text of every changed document.
    Nothing is written.
    """
    state = scan(documents, exemptions)
    log.info(
        "runner.scanned",
        documents=len(documents),
        dependencies=len(state.all_dependencies()),
        properties=len(state.version_properties),
        roots=len(state.roots),
    )

    edits_by_document = rewrite(documents, state)

    result = RunResult(state=state, documents=[doc.path for doc in documents])
    originals: dict[Path, str] = {}
    for doc in documents:
        edits = edits_by_document.get(doc.id, [])
        before = doc.to_string()
        applied = apply_edits(doc, edits)
        result.applied[doc.path] = applied
        if applied:
            originals[doc.path] = before
        log.debug("runner.document_rewritten", path=str(doc.path), edits=len(edits), applied=applied)
    return result, originals


def run_project(
    path: Path,
    exemptions: frozenset[GroupArtifactVersion] = frozenset(),
    dry_run: bool = False,
) -> RunResult:
    """Hoist dependency versions of the project at *path* into its root pom(s).

    With *dry_run* no file is touched; unified diffs are collected instead.
    """
    documents = load_project(path)
    result, originals = run_documents(documents, exemptions)
    result.dry_run = dry_run

    for doc in documents:
        if doc.path not in originals:
            continue
        if dry_run:
            on_disk = doc.path.read_bytes().decode(doc.encoding)
            result.diffs[doc.path] = _diff(doc.path, on_disk, doc.to_string())
        else:
            doc.write()

    log.info("runner.finished", changed=len(result.changed), dry_run=dry_run)
    return result

"""Version management engine: hoist module dependency versions to the root pom."""

from pomhoist.engines.version_management.coordinates import (
    extract_property_names,
    parse_exemptions,
)
from pomhoist.engines.version_management.models import ProjectState, RunResult
from pomhoist.engines.version_management.rewriter import rewrite
from pomhoist.engines.version_management.runner import run_documents, run_project
from pomhoist.engines.version_management.scanner import scan

__all__ = [
    "ProjectState",
    "RunResult",
    "extract_property_names",
    "parse_exemptions",
    "rewrite",
    "run_documents",
    "run_project",
    "scan",
]

"""Exemption parsing and ``${property}`` helpers."""

from __future__ import annotations

import re
from collections.abc import Iterable

from pomhoist.models import GroupArtifactVersion

_PROP_RE = re.compile(r"\$\{([^}]+)\}")


def parse_exemptions(coordinates: Iterable[str] | None) -> frozenset[GroupArtifactVersion]:
    """Turn ``group:artifact[:version]`` strings into exemption records.

    A two-part coordinate is a wildcard over every version. Entries with any
    other number of parts are dropped.
    """
    exemptions: set[GroupArtifactVersion] = set()
    for text in coordinates or ():
        parts = text.split(":")
        if len(parts) == 3:
            exemptions.add(GroupArtifactVersion(parts[0], parts[1], parts[2]))
        elif len(parts) == 2:
            exemptions.add(GroupArtifactVersion(parts[0], parts[1], None))
    return frozenset(exemptions)


def is_exempt(candidate: GroupArtifactVersion, exemptions: frozenset[GroupArtifactVersion]) -> bool:
    return candidate in exemptions or candidate.with_version(None) in exemptions


def has_property(version: str | None) -> bool:
    return version is not None and "${" in version


def extract_property_names(version: str) -> list[str]:
    """All ``${name}`` references in *version*, in order of appearance."""
    return _PROP_RE.findall(version)

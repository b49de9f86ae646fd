"""Run settings: which coordinates keep their versions."""

from __future__ import annotations

import os

from pydantic import BaseModel, field_validator

from pomhoist.engines.version_management.coordinates import parse_exemptions
from pomhoist.models import GroupArtifactVersion

RETAIN_VERSIONS_ENV = "POMHOIST_RETAIN_VERSIONS"


class HoistSettings(BaseModel):
    # group:artifact or group:artifact:version; other shapes are ignored
    retain_versions: list[str] | None = None

    @field_validator("retain_versions", mode="before")
    @classmethod
    def _strip_entries(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, (list, tuple)):
            return [s.strip() for s in v if isinstance(s, str) and s.strip()]
        return v

    @property
    def exemptions(self) -> frozenset[GroupArtifactVersion]:
        return parse_exemptions(self.retain_versions)

    @classmethod
    def from_env(cls, extra: list[str] | tuple[str, ...] = ()) -> HoistSettings:
        """Settings from ``POMHOIST_RETAIN_VERSIONS`` plus *extra* coordinates."""
        from_env = os.environ.get(RETAIN_VERSIONS_ENV, "")
        entries = [s for s in from_env.split(",") if s.strip()] + list(extra)
        return cls(retain_versions=entries or None)

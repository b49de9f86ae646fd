"""Exceptions raised by the pom loader and surfaced by the CLI."""

from __future__ import annotations

from pathlib import Path


class PomhoistError(Exception):
    """Base pomhoist exception."""


class ProjectNotFoundError(PomhoistError):
    """No root pom.xml at the requested location."""


class PomParseError(PomhoistError):
    """A pom.xml could not be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason

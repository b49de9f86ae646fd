"""Shared fixtures for pomhoist tests."""

import textwrap
from pathlib import Path

import pytest


def pom(text: str) -> str:
    """Dedent an inline pom and drop the leading newline."""
    return textwrap.dedent(text).lstrip("\n")


@pytest.fixture
def write_pom(tmp_path: Path):
    """Write a pom under tmp_path: ``write_pom(content, "child")`` -> path."""

    def _write(content: str, module: str = "") -> Path:
        directory = tmp_path / module if module else tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "pom.xml"
        path.write_text(pom(content), encoding="utf-8")
        return path

    return _write

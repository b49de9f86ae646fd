"""CLI entry point: pomhoist.

Subcommands:
    pomhoist run /path/to/project                  # hoist versions into the root pom
    pomhoist run . --dry-run                       # print diffs, write nothing
    pomhoist run . --retain com.jcraft:jsch        # keep a dependency's version in place
    pomhoist scan /path/to/project                 # show what would be hoisted
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from pomhoist.core.config import HoistSettings
from pomhoist.core.logging import setup_logging
from pomhoist.engines.version_management.models import RunResult
from pomhoist.engines.version_management.runner import run_project
from pomhoist.engines.version_management.scanner import scan
from pomhoist.errors import PomhoistError
from pomhoist.pom.loader import load_project

_RETAIN_HELP = "Coordinate (group:artifact[:version]) whose version stays in place. Repeatable."


def _result_json(result: RunResult) -> dict:
    return {
        "dry_run": result.dry_run,
        "documents": [str(p) for p in result.documents],
        "changed": [str(p) for p in result.changed],
        "managed": [str(gav) for gav in result.state.all_dependencies()],
        "properties": dict(result.state.version_properties),
        "diffs": {str(p): d for p, d in result.diffs.items()},
    }


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """pomhoist: move dependency versions into the root pom's dependencyManagement."""
    setup_logging("DEBUG" if verbose else None)


@main.command("run")
@click.argument("project_path", type=click.Path(exists=True, path_type=Path))
@click.option("--retain", "retain", multiple=True, help=_RETAIN_HELP)
@click.option("--dry-run", is_flag=True, help="Show diffs instead of writing files")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def run(project_path: Path, retain: tuple[str, ...], dry_run: bool, as_json: bool) -> None:
    """Rewrite every pom.xml of the project at PROJECT_PATH."""
    settings = HoistSettings.from_env(retain)
    try:
        result = run_project(project_path, settings.exemptions, dry_run=dry_run)
    except PomhoistError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(_result_json(result), indent=2))
        return

    if dry_run:
        for diff in result.diffs.values():
            click.echo(diff, nl=False)

    verb = "Would change" if dry_run else "Changed"
    click.echo(f"{verb} {len(result.changed)} of {len(result.documents)} pom(s)")
    for path in result.changed:
        click.echo(f"  {path}  ({result.applied[path]} edit(s))")


@main.command("scan")
@click.argument("project_path", type=click.Path(exists=True, path_type=Path))
@click.option("--retain", "retain", multiple=True, help=_RETAIN_HELP)
def scan_command(project_path: Path, retain: tuple[str, ...]) -> None:
    """Report which dependency versions would be hoisted; writes nothing."""
    settings = HoistSettings.from_env(retain)
    try:
        documents = load_project(project_path)
    except PomhoistError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    state = scan(documents, settings.exemptions)
    if not state.all_dependencies():
        click.echo("No versioned dependencies to hoist.")
        return

    for doc in documents:
        deps = state.dependencies_by_document.get(doc.id, [])
        marker = " (root)" if doc.id in state.roots else ""
        click.echo(f"  {doc.path}{marker}")
        for gav in deps:
            click.echo(f"    {gav}")
    if state.version_properties:
        click.echo("\nProperties:")
        for name, value in state.version_properties.items():
            click.echo(f"  {name} = {value}")


if __name__ == "__main__":
    main()

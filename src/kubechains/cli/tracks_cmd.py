"""``kubechains validate`` and ``kubechains tracks`` -- Inspect templates.

``validate`` parses every attack-track template at a path and checks its
structure the same way the detection engine does at construction.
``tracks`` prints the templates as step trees, marking the steps that are
satisfied by image vulnerabilities.

Exit Codes:
    0 -- All templates parsed (and, for ``validate``, are valid).
    2 -- A template could not be parsed or is invalid.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from kubechains.core.attacktrack import validate_attack_track
from kubechains.exceptions import KubeChainsError
from kubechains.parsers import load_attack_tracks


def _load_or_exit(path: Path, output_format: str) -> list:
    try:
        return load_attack_tracks(path)
    except KubeChainsError as exc:
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc)}))
        else:
            click.echo(f"Error: {exc}")
        sys.exit(2)


@click.command("validate")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def validate_command(path: Path, output_format: str) -> None:
    """Validate the attack-track templates at PATH.

    Exit code 0 if every template is valid, 2 otherwise.
    """
    tracks = _load_or_exit(path, output_format)
    # Keyed by load position; names may repeat or be empty.
    invalid: list[dict] = []
    for index, track in enumerate(tracks):
        problems = validate_attack_track(track)
        if problems:
            invalid.append({"index": index, "name": track.name, "problems": problems})
    names = [t.name for t in tracks]
    duplicates = [n for n in dict.fromkeys(names) if n and names.count(n) > 1]
    general = ["no attack tracks found"] if not tracks else []
    general += [f"duplicate attack track name '{n}'" for n in duplicates]
    valid = not invalid and not general

    if output_format == "json":
        click.echo(json.dumps({
            "valid": valid,
            "attackTracks": names,
            "problems": invalid,
            "errors": general,
        }, indent=2))
    else:
        for entry in invalid:
            label = entry["name"] or f"#{entry['index']}"
            for problem in entry["problems"]:
                click.echo(f"INVALID {label}: {problem}")
        for problem in general:
            click.echo(f"INVALID: {problem}")
        if valid:
            click.echo(f"{len(tracks)} attack track(s) valid.")

    sys.exit(0 if valid else 2)


@click.command("tracks")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def tracks_command(path: Path, output_format: str) -> None:
    """List the attack-track templates at PATH."""
    tracks = _load_or_exit(path, output_format)
    if output_format == "json":
        click.echo(json.dumps([
            {
                "name": t.name,
                "description": t.description,
                "vulnerabilitySteps": t.steps_checking_vulnerabilities(),
            }
            for t in tracks
        ], indent=2))
    else:
        from kubechains.cli.output import print_attack_tracks
        print_attack_tracks(tracks)
    sys.exit(0)

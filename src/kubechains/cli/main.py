"""kubechains CLI -- Attack-chain detection for Kubernetes workloads.

Entry point for the ``kubechains`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    detect    -- Detect attack chains from posture and vulnerability findings.
    validate  -- Validate attack-track templates.
    tracks    -- List attack-track templates as step trees.

Usage::

    kubechains detect --tracks ./tracks --controls controls.json \\
        --posture summaries.json --vulnerabilities vulns.json
    kubechains validate ./tracks
    kubechains tracks ./tracks
"""

from __future__ import annotations

import logging

import click

from kubechains import __version__
from kubechains.cli.detect import detect_command
from kubechains.cli.tracks_cmd import tracks_command, validate_command


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """kubechains: Attack-chain detection for Kubernetes workloads.

    Correlates failed posture controls and critical image vulnerabilities
    with attack-track templates, and reports every attack track a workload
    realizes.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register all subcommands
cli.add_command(detect_command)
cli.add_command(validate_command)
cli.add_command(tracks_command)

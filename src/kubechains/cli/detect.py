"""``kubechains detect`` -- Detect attack chains for a batch of workloads.

Loads attack-track templates, a control catalog, posture resource summaries
and (optionally) vulnerability findings, pairs each summary with the
findings of the same workload, and prints every realized attack chain.

Exit Codes:
    0 -- No attack chains detected.
    1 -- One or more attack chains detected.
    2 -- Inputs could not be loaded, or the engine rejected them.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from kubechains.core.chains import (
    AttackChain,
    AttackChainEngine,
    EngineConfig,
    UnresolvedControlPolicy,
)
from kubechains.exceptions import KubeChainsError
from kubechains.parsers import (
    load_attack_tracks,
    load_control_catalog,
    load_posture_summaries,
    load_vulnerability_findings,
)

logger = logging.getLogger(__name__)


def _chains_to_json(chains: list[AttackChain]) -> dict:
    """Convert detected chains to a JSON-serializable document."""
    return {
        "attackChains": [chain.to_dict() for chain in chains],
        "total": len(chains),
    }


def _fail(message: str, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps({"error": message}))
    else:
        click.echo(f"Error: {message}")
    sys.exit(2)


@click.command("detect")
@click.option(
    "--tracks", "tracks_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Attack-track template file or directory.",
)
@click.option(
    "--controls", "controls_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Control catalog file or directory.",
)
@click.option(
    "--posture", "posture_path",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Posture resource summaries file or directory.",
)
@click.option(
    "--vulnerabilities", "vulnerabilities_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Vulnerability findings file or directory.",
)
@click.option(
    "--strict/--lenient",
    default=False,
    help="Fail on control IDs missing from the catalog (default: lenient, drop them).",
)
@click.option(
    "--customer-guid",
    default="",
    help="Tenant identifier to stamp on every chain.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def detect_command(
    tracks_path: Path,
    controls_path: Path,
    posture_path: Path,
    vulnerabilities_path: Path | None,
    strict: bool,
    customer_guid: str,
    output_format: str,
) -> None:
    """Detect attack chains for the workloads in the posture summaries.

    Exit code 0 if no chain is realized, 1 if any chain is, 2 on input errors.
    """
    config = EngineConfig(
        unresolved_controls=(
            UnresolvedControlPolicy.FAIL if strict else UnresolvedControlPolicy.DROP
        ),
        customer_guid=customer_guid,
    )

    try:
        tracks = load_attack_tracks(tracks_path)
        catalog = load_control_catalog(controls_path)
        summaries = load_posture_summaries(posture_path)
        findings = (
            load_vulnerability_findings(vulnerabilities_path)
            if vulnerabilities_path is not None
            else []
        )
        engine = AttackChainEngine(tracks, catalog, config=config)
        chains = engine.detect_for_workloads(summaries, findings)
    except KubeChainsError as exc:
        logger.debug("Detection failed", exc_info=True)
        _fail(str(exc), output_format)
        return

    if output_format == "json":
        click.echo(json.dumps(_chains_to_json(chains), indent=2))
    else:
        from kubechains.cli.output import print_attack_chains
        print_attack_chains(chains)

    sys.exit(1 if chains else 0)

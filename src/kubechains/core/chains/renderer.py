"""Rendering of pruned attack tracks into attack-chain records.

``render_step`` walks a pruned tree and produces the ``AttackChainNode``
tree. Rules:

- A step with an empty name renders to nothing, and neither do its children.
- A vulnerability-checking step lists one ``VulnerabilityReference`` per
  vulnerability-derived backing control and no control IDs. Posture
  controls attached to such a step only prove it live; they are not
  reported.
- Any other step lists the IDs of its backing controls and no
  vulnerabilities.
- Children keep the pruned tree's order.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from kubechains.core.attacktrack.models import PrunedAttackTrack, PrunedStep
from kubechains.core.chains.identifiers import generate_attack_chain_id
from kubechains.core.chains.models import (
    AttackChain,
    AttackChainNode,
    VulnerabilityReference,
)
from kubechains.core.posture.models import (
    ControlKind,
    ControlRecord,
    PostureResourceSummary,
)


def _vulnerability_references(step: PrunedStep) -> list[VulnerabilityReference]:
    refs: list[VulnerabilityReference] = []
    for control in step.controls:
        if not isinstance(control, ControlRecord):
            continue
        if control.kind is not ControlKind.VULNERABILITY or control.payload is None:
            continue
        refs.append(VulnerabilityReference(
            container_name=control.payload.container_name,
            image_scan_id=control.payload.container_scan_id,
            names=tuple(control.payload.cve_names),
        ))
    return refs


def render_step(step: PrunedStep | None) -> AttackChainNode | None:
    """Render a pruned step and its subtree."""
    if step is None or not step.name:
        return None

    control_ids: list[str] = []
    vulnerabilities: list[VulnerabilityReference] = []
    if step.checks_vulnerabilities:
        vulnerabilities = _vulnerability_references(step)
    else:
        control_ids = [control.control_id for control in step.controls]

    next_nodes: list[AttackChainNode] = []
    for child in step.sub_steps:
        node = render_step(child)
        if node is not None:
            next_nodes.append(node)

    return AttackChainNode(
        name=step.name,
        description=step.description,
        control_ids=control_ids,
        vulnerabilities=vulnerabilities,
        next_nodes=next_nodes,
    )


def render_attack_chain(
    track: PrunedAttackTrack,
    summary: PostureResourceSummary,
    now: datetime | None = None,
    customer_guid: str = "",
) -> AttackChain | None:
    """Render one pruned attack track for the workload of ``summary``.

    Args:
        track: Pruned attack track from the path algorithm.
        summary: Posture summary of the workload.
        now: Timestamp recorded as first-seen. Defaults to the current UTC time.
        customer_guid: Tenant identifier copied onto the chain.

    Returns:
        The chain, or None if the pruned root renders to nothing.
    """
    root = render_step(track.root)
    if root is None:
        return None

    designator = summary.designator
    return AttackChain(
        attack_chain_id=generate_attack_chain_id(
            track.name,
            designator.cluster,
            designator.namespace,
            designator.kind,
            designator.name,
        ),
        name=track.name,
        description=track.description,
        cluster_name=designator.cluster,
        resource=designator,
        root=root,
        first_seen=now or datetime.now(timezone.utc),
        latest_report_id=summary.report_id,
        customer_guid=customer_guid,
    )


def render_attack_chains(
    tracks: Sequence[PrunedAttackTrack],
    summary: PostureResourceSummary,
    now: datetime | None = None,
    customer_guid: str = "",
) -> list[AttackChain]:
    """Render several pruned tracks, preserving order.

    All chains share one first-seen timestamp.
    """
    now = now or datetime.now(timezone.utc)
    chains: list[AttackChain] = []
    for track in tracks:
        chain = render_attack_chain(track, summary, now, customer_guid)
        if chain is not None:
            chains.append(chain)
    return chains

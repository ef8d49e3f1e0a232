"""Conversion of vulnerability findings into control records.

Vulnerability-checking steps are made live the same way ordinary steps are:
by a control associated with the step's category. A relevant finding is
therefore wrapped as a ``ControlRecord`` of kind ``VULNERABILITY``, associated
with every ``checks_vulnerabilities`` step across all templates, and carrying
the container and CVE details the renderer reports.
"""

from __future__ import annotations

from collections.abc import Sequence

from kubechains.core.attacktrack.models import AttackTrack
from kubechains.core.chains.config import DEFAULT_VULNERABILITY_TAGS
from kubechains.core.posture.models import (
    AttackTrackCategories,
    ControlKind,
    ControlRecord,
    VulnerabilityFinding,
    VulnerabilityPayload,
)


def vulnerability_control_id(finding: VulnerabilityFinding) -> str:
    """Return the synthetic control ID for ``finding``.

    Combines image ID and container name so two containers running the same
    image produce distinct controls.
    """
    if finding.container_name:
        return f"{finding.image_id}/{finding.container_name}"
    return finding.image_id


def vulnerability_to_control(
    finding: VulnerabilityFinding | None,
    attack_tracks: Sequence[AttackTrack],
    tags: Sequence[str] = DEFAULT_VULNERABILITY_TAGS,
) -> ControlRecord | None:
    """Wrap a vulnerability finding as a control record.

    Args:
        finding: A finding already classified as relevant.
        attack_tracks: All templates known to the engine.
        tags: Control type tags for the synthetic control.

    Returns:
        The synthetic control, or None if ``finding`` is None or no template
        has a step that checks vulnerabilities.
    """
    if finding is None:
        return None

    associations: list[AttackTrackCategories] = []
    for track in attack_tracks:
        step_names = track.steps_checking_vulnerabilities()
        if not step_names:
            continue
        associations.append(
            AttackTrackCategories(attack_track=track.name, categories=tuple(step_names))
        )
    if not associations:
        return None

    return ControlRecord(
        control_id=vulnerability_control_id(finding),
        kind=ControlKind.VULNERABILITY,
        attack_tracks=tuple(associations),
        tags=tuple(tags),
        payload=VulnerabilityPayload(
            container_name=finding.container_name,
            container_scan_id=finding.container_scan_id,
            image_id=finding.image_id,
            cve_names=tuple(finding.cve_names),
        ),
    )

"""Workload correlation and the supported-kind allow-list.

Posture summaries and vulnerability findings arrive as independent lists.
``workloads_match`` is the join predicate that pairs them: two records
describe the same workload when cluster, namespace, kind, and name agree,
ignoring case. A mismatch is not an error; the pair is simply not examined
together.
"""

from __future__ import annotations

from collections.abc import Iterable

from kubechains.core.posture.models import (
    Designator,
    PostureResourceSummary,
    VulnerabilityFinding,
)

SUPPORTED_KINDS: frozenset[str] = frozenset(
    kind.casefold()
    for kind in (
        "Deployment",
        "Pod",
        "ReplicaSet",
        "Node",
        "DaemonSet",
        "StatefulSet",
        "Job",
        "CronJob",
    )
)


def is_supported_kind(kind: str | None) -> bool:
    """Return True if attack chains are computed for workloads of ``kind``."""
    if not kind:
        return False
    return kind.casefold() in SUPPORTED_KINDS


def designators_match(left: Designator, right: Designator) -> bool:
    return left.workload_key() == right.workload_key()


def workloads_match(
    summary: PostureResourceSummary, finding: VulnerabilityFinding
) -> bool:
    """Return True if ``finding`` belongs to the workload of ``summary``."""
    return designators_match(summary.designator, finding.designator)


def findings_for(
    summary: PostureResourceSummary, findings: Iterable[VulnerabilityFinding]
) -> list[VulnerabilityFinding]:
    """Return the findings matching ``summary``, preserving input order."""
    return [f for f in findings if workloads_match(summary, f)]

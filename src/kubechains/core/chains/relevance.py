"""Relevance classification of vulnerability findings.

A vulnerability finding influences attack-chain detection only when it has
critical vulnerabilities that matter at runtime:

- Without relevancy data, any critical vulnerability counts.
- With relevancy data labelled "yes", only critical vulnerabilities the
  scanner marked relevant count.
- With relevancy data labelled "no" or unknown, nothing counts.

Each finding is classified on its own; a workload with several containers
may have some relevant and some irrelevant images.
"""

from __future__ import annotations

from kubechains.core.posture.models import (
    SEVERITY_CRITICAL,
    RelevantLabel,
    SeverityStats,
    VulnerabilityFinding,
)


def _is_critical(stats: SeverityStats) -> bool:
    return stats.severity.strip().casefold() == SEVERITY_CRITICAL.casefold()


def is_relevant_to_attack_chain(finding: VulnerabilityFinding | None) -> bool:
    """Return True if ``finding`` should make vulnerability steps live."""
    if finding is None:
        return False

    if not finding.has_relevancy_data:
        return any(
            _is_critical(s) and s.total_count > 0 for s in finding.severity_stats
        )

    if finding.relevant_label is RelevantLabel.YES:
        return any(
            _is_critical(s) and s.relevant_count > 0 for s in finding.severity_stats
        )

    return False

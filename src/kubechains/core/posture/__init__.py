"""Posture, vulnerability, and control-catalog data models.

All public names are re-exported here::

    from kubechains.core.posture import PostureResourceSummary, VulnerabilityFinding
"""

from kubechains.core.posture.models import (
    SEVERITY_CRITICAL,
    AttackTrackCategories,
    ControlCatalogEntry,
    ControlKind,
    ControlRecord,
    Designator,
    PostureResourceSummary,
    RelevantLabel,
    SeverityStats,
    VulnerabilityFinding,
    VulnerabilityPayload,
)

__all__ = [
    "SEVERITY_CRITICAL",
    "AttackTrackCategories",
    "ControlCatalogEntry",
    "ControlKind",
    "ControlRecord",
    "Designator",
    "PostureResourceSummary",
    "RelevantLabel",
    "SeverityStats",
    "VulnerabilityFinding",
    "VulnerabilityPayload",
]

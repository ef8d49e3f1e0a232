"""Controls lookup: which attack-track steps are live for one workload.

The lookup is rebuilt on every detection call from three sources:

1. The workload's failed and warning control IDs, resolved against the
   control catalog.
2. Synthetic controls derived from the workload's relevant vulnerability
   findings.
3. The attack-track categories each of those controls declares.

The result maps ``attack track -> category -> [backing controls]``. A
category present in the map is "live". All containers are insertion-ordered
dicts and lists, so the order controls appear in a rendered chain follows
the order of the input findings.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

from kubechains.core.attacktrack.models import AttackTrack
from kubechains.core.chains.adapter import vulnerability_to_control
from kubechains.core.chains.config import (
    DEFAULT_VULNERABILITY_TAGS,
    UnresolvedControlPolicy,
)
from kubechains.core.chains.relevance import is_relevant_to_attack_chain
from kubechains.core.posture.models import (
    ControlCatalogEntry,
    ControlRecord,
    PostureResourceSummary,
    VulnerabilityFinding,
)
from kubechains.exceptions import ControlResolutionError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Control catalog
# ---------------------------------------------------------------------------


class ControlCatalog(Protocol):
    """Source of control definitions, keyed by control ID."""

    def resolve(self, control_id: str) -> ControlCatalogEntry | None: ...


class MappingCatalog:
    """``ControlCatalog`` backed by a read-only mapping."""

    def __init__(self, entries: Mapping[str, ControlCatalogEntry]) -> None:
        self._entries = dict(entries)

    def resolve(self, control_id: str) -> ControlCatalogEntry | None:
        return self._entries.get(control_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, control_id: object) -> bool:
        return control_id in self._entries


def as_catalog(
    catalog: ControlCatalog | Mapping[str, ControlCatalogEntry],
) -> ControlCatalog:
    """Return ``catalog`` as a ``ControlCatalog``, wrapping plain mappings."""
    if isinstance(catalog, Mapping):
        return MappingCatalog(catalog)
    return catalog


# ---------------------------------------------------------------------------
# ControlsLookup
# ---------------------------------------------------------------------------


class ControlsLookup:
    """Per-call index of live attack-track categories and their controls."""

    def __init__(self) -> None:
        self._tracks: dict[str, dict[str, list[ControlRecord]]] = {}

    def add(self, attack_track: str, category: str, control: ControlRecord) -> None:
        """Mark ``category`` live for ``attack_track``, backed by ``control``.

        Adding the same control to the same category twice is a no-op.
        """
        backing = self._tracks.setdefault(attack_track, {}).setdefault(category, [])
        if all(c.control_id != control.control_id for c in backing):
            backing.append(control)

    def has_live_category(self, attack_track: str, category: str) -> bool:
        return bool(self._tracks.get(attack_track, {}).get(category))

    def has_associated_controls(self, attack_track: str) -> bool:
        """Return True if any category of ``attack_track`` is live."""
        return bool(self._tracks.get(attack_track))

    def live_categories(self, attack_track: str) -> list[str]:
        return list(self._tracks.get(attack_track, {}))

    def controls_for(self, attack_track: str, category: str) -> list[ControlRecord]:
        return list(self._tracks.get(attack_track, {}).get(category, []))

    @property
    def attack_tracks(self) -> list[str]:
        return list(self._tracks)

    @property
    def is_empty(self) -> bool:
        return not self._tracks

    def __repr__(self) -> str:
        summary = {track: list(cats) for track, cats in self._tracks.items()}
        return f"ControlsLookup({summary!r})"


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def _unique_in_order(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def resolve_posture_controls(
    summary: PostureResourceSummary,
    catalog: ControlCatalog,
    policy: UnresolvedControlPolicy = UnresolvedControlPolicy.DROP,
) -> dict[str, ControlRecord]:
    """Resolve the summary's failed and warning control IDs.

    Failed IDs come first, then warning IDs; duplicates are resolved once.

    Raises:
        ControlResolutionError: If ``policy`` is FAIL and any ID is missing
            from the catalog.
    """
    resolved: dict[str, ControlRecord] = {}
    unresolved: list[str] = []

    for control_id in _unique_in_order(
        list(summary.failed_controls) + list(summary.warning_controls)
    ):
        entry = catalog.resolve(control_id)
        if entry is None:
            unresolved.append(control_id)
            continue
        resolved[control_id] = ControlRecord.from_catalog_entry(entry)

    if unresolved:
        if policy is UnresolvedControlPolicy.FAIL:
            raise ControlResolutionError(unresolved)
        logger.debug(
            "Dropped %d control ID(s) not in catalog for %s: %s",
            len(unresolved), summary.designator.name, ", ".join(unresolved),
        )

    return resolved


def build_controls_lookup(
    summary: PostureResourceSummary,
    findings: Sequence[VulnerabilityFinding],
    attack_tracks: Sequence[AttackTrack],
    catalog: ControlCatalog,
    policy: UnresolvedControlPolicy = UnresolvedControlPolicy.DROP,
    vulnerability_tags: Sequence[str] = DEFAULT_VULNERABILITY_TAGS,
) -> ControlsLookup | None:
    """Build the controls lookup for one workload.

    Args:
        summary: Posture findings of the workload.
        findings: Vulnerability findings of the same workload.
        attack_tracks: Templates known to the engine. Associations naming
            any other track are ignored.
        catalog: Control catalog to resolve posture control IDs against.
        policy: Handling of control IDs missing from the catalog.
        vulnerability_tags: Tags for vulnerability-derived controls.

    Returns:
        The lookup, or None when the workload has no controls at all. None
        means no chain is possible for the workload.

    Raises:
        ControlResolutionError: Under the FAIL policy, for unknown IDs.
    """
    controls = resolve_posture_controls(summary, catalog, policy)

    for finding in findings:
        if not is_relevant_to_attack_chain(finding):
            continue
        control = vulnerability_to_control(finding, attack_tracks, vulnerability_tags)
        if control is not None:
            controls[control.control_id] = control

    if not controls:
        return None

    known_tracks = {track.name for track in attack_tracks}
    lookup = ControlsLookup()
    for control in controls.values():
        for association in control.attack_tracks:
            if association.attack_track not in known_tracks:
                continue
            for category in association.categories:
                lookup.add(association.attack_track, category, control)

    return lookup

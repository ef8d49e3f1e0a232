"""Attack-chain detection engine.

``AttackChainEngine`` ties the pipeline together for one workload at a time:

1. **Kind filter** -- workloads of unsupported kinds produce no chains.
2. **Controls lookup** -- failed/warning controls plus relevant
   vulnerability findings, indexed by attack-track category.
3. **Per-track detection** -- for every template with a live category, the
   path algorithm enumerates fully-live root-to-leaf paths and rebuilds the
   pruned tree.
4. **Rendering** -- each pruned tree becomes an ``AttackChain``.

The engine holds only immutable state after construction (templates,
catalog, configuration, path algorithm). Every detection call builds its own
lookup and outputs, so one engine can serve concurrent calls without
locking.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone

from kubechains.core.attacktrack.models import AttackTrack, PrunedAttackTrack
from kubechains.core.attacktrack.paths import AllPathsHandler, PathAlgorithm
from kubechains.core.attacktrack.validation import validate_attack_track
from kubechains.core.chains.config import EngineConfig
from kubechains.core.chains.correlation import findings_for, is_supported_kind
from kubechains.core.chains.lookup import (
    ControlCatalog,
    ControlsLookup,
    as_catalog,
    build_controls_lookup,
)
from kubechains.core.chains.models import AttackChain
from kubechains.core.chains.renderer import render_attack_chains
from kubechains.core.posture.models import (
    ControlCatalogEntry,
    PostureResourceSummary,
    VulnerabilityFinding,
)
from kubechains.exceptions import DetectionInputError, EngineConstructionError

logger = logging.getLogger(__name__)


class AttackChainEngine:
    """Detects attack chains for workloads against a fixed template set.

    Args:
        attack_tracks: Non-empty list of attack-track templates.
        catalog: Control catalog, as a mapping of control ID to entry or any
            object with a ``resolve(control_id)`` method.
        config: Engine settings. Defaults to ``EngineConfig()``.
        path_algorithm: Strategy for path enumeration and pruning. Defaults
            to ``AllPathsHandler``.

    Raises:
        EngineConstructionError: If ``attack_tracks`` is empty, a template
            is structurally invalid, or two templates share a name.
        ConfigurationError: If ``config`` fails validation.
    """

    def __init__(
        self,
        attack_tracks: Sequence[AttackTrack],
        catalog: ControlCatalog | Mapping[str, ControlCatalogEntry],
        config: EngineConfig | None = None,
        path_algorithm: PathAlgorithm | None = None,
    ) -> None:
        if not attack_tracks:
            raise EngineConstructionError(
                "Expected to find at least one attack track"
            )
        seen: set[str] = set()
        for track in attack_tracks:
            problems = validate_attack_track(track)
            if problems:
                raise EngineConstructionError(
                    f"Invalid attack track '{track.name}': " + "; ".join(problems)
                )
            # Lookups and chain IDs are keyed by template name.
            if track.name in seen:
                raise EngineConstructionError(
                    f"Duplicate attack track name '{track.name}'"
                )
            seen.add(track.name)

        self._config = config or EngineConfig()
        self._config.validate()
        self._attack_tracks: tuple[AttackTrack, ...] = tuple(attack_tracks)
        self._catalog = as_catalog(catalog)
        self._paths: PathAlgorithm = path_algorithm or AllPathsHandler()

    @property
    def attack_tracks(self) -> tuple[AttackTrack, ...]:
        return self._attack_tracks

    @property
    def config(self) -> EngineConfig:
        return self._config

    # -- Controls lookup --

    def build_controls_lookup(
        self,
        summary: PostureResourceSummary,
        findings: Sequence[VulnerabilityFinding] = (),
    ) -> ControlsLookup | None:
        """Build the controls lookup for one workload.

        Returns None when the workload has no controls at all.

        Raises:
            ControlResolutionError: Under the FAIL policy, for control IDs
                missing from the catalog.
        """
        return build_controls_lookup(
            summary,
            findings,
            self._attack_tracks,
            self._catalog,
            policy=self._config.unresolved_controls,
            vulnerability_tags=self._config.vulnerability_tags,
        )

    # -- Detection --

    def detect_single_attack_track(
        self,
        track: AttackTrack | None,
        lookup: ControlsLookup | None,
    ) -> PrunedAttackTrack | None:
        """Prune one template against a controls lookup.

        Returns:
            The pruned track, or None if no category of the track is live
            or no root-to-leaf path is fully live.

        Raises:
            DetectionInputError: If ``track`` or ``lookup`` is None.
        """
        if track is None:
            raise DetectionInputError("attack track is None")
        if lookup is None:
            raise DetectionInputError("controls lookup is None")

        if not lookup.has_associated_controls(track.name):
            return None

        paths = self._paths.enumerate_paths(track, lookup)
        if not paths:
            return None
        return self._paths.rebuild_pruned_tree(track, lookup, paths)

    def detect_all_attack_tracks(
        self,
        summary: PostureResourceSummary,
        findings: Sequence[VulnerabilityFinding] = (),
    ) -> list[PrunedAttackTrack]:
        """Prune every template for one workload.

        Results follow template order; templates without a live path are
        left out.
        """
        kind = summary.designator.kind
        if not is_supported_kind(kind):
            logger.debug(
                "Skipping %s/%s: unsupported kind %r",
                summary.designator.namespace, summary.designator.name, kind,
            )
            return []

        lookup = self.build_controls_lookup(summary, findings)
        if lookup is None:
            return []

        pruned: list[PrunedAttackTrack] = []
        for track in self._attack_tracks:
            result = self.detect_single_attack_track(track, lookup)
            if result is not None:
                pruned.append(result)
        return pruned

    def detect(
        self,
        summary: PostureResourceSummary,
        findings: Sequence[VulnerabilityFinding] = (),
        now: datetime | None = None,
    ) -> list[AttackChain]:
        """Detect and render all attack chains for one workload.

        Args:
            summary: Posture findings of the workload.
            findings: Vulnerability findings of the same workload.
            now: First-seen timestamp for the chains. Defaults to now (UTC).

        Returns:
            Attack chains in template order. Empty if none is realized.
        """
        pruned = self.detect_all_attack_tracks(summary, findings)
        chains = render_attack_chains(
            pruned, summary, now=now, customer_guid=self._config.customer_guid
        )
        if chains:
            logger.debug(
                "Detected %d attack chain(s) for %s/%s",
                len(chains), summary.designator.namespace, summary.designator.name,
            )
        return chains

    def detect_for_workloads(
        self,
        summaries: Sequence[PostureResourceSummary],
        findings: Sequence[VulnerabilityFinding] = (),
        now: datetime | None = None,
    ) -> list[AttackChain]:
        """Detect chains for a batch of workloads.

        Each summary is paired with the findings whose designator matches it
        (case-insensitive on cluster, namespace, kind, and name). Output is
        grouped by summary in input order.
        """
        now = now or datetime.now(timezone.utc)
        chains: list[AttackChain] = []
        for summary in summaries:
            chains.extend(self.detect(summary, findings_for(summary, findings), now=now))
        return chains

"""Posture and vulnerability data models consumed by attack-chain detection.

These are the per-call inputs of the detection pipeline, plus the control
catalog it resolves against:

- ``Designator`` -- the identifying attributes of one workload.
- ``PostureResourceSummary`` -- failed/warning controls for one workload.
- ``VulnerabilityFinding`` -- scan summary for one container image.
- ``ControlCatalogEntry`` -- a policy control and the attack-track
  categories it belongs to.
- ``ControlRecord`` -- the tagged control shape the lookup is built from;
  either a posture control or a vulnerability-derived one.

All models are frozen: detection never mutates its inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

# Designator attribute keys with dedicated accessors.
ATTRIBUTE_CLUSTER = "cluster"
ATTRIBUTE_NAMESPACE = "namespace"
ATTRIBUTE_KIND = "kind"
ATTRIBUTE_NAME = "name"
ATTRIBUTE_API_VERSION = "apiVersion"

_NAMED_ATTRIBUTES = (
    ATTRIBUTE_CLUSTER,
    ATTRIBUTE_NAMESPACE,
    ATTRIBUTE_KIND,
    ATTRIBUTE_NAME,
    ATTRIBUTE_API_VERSION,
)

SEVERITY_CRITICAL = "Critical"


# ---------------------------------------------------------------------------
# Designator: workload identity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Designator:
    """Identifying attributes of a workload.

    The four correlation keys (cluster, namespace, kind, name) and the API
    version have named fields. Any other attribute a producer attaches is
    kept in ``extra`` so it survives a round trip through
    ``from_attributes`` / ``as_attributes``.
    """

    cluster: str = ""
    namespace: str = ""
    kind: str = ""
    name: str = ""
    api_version: str = ""
    extra: Mapping[str, str] = field(default_factory=dict, hash=False)

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, str]) -> Designator:
        """Build a designator from a free-form attribute map."""
        return cls(
            cluster=attributes.get(ATTRIBUTE_CLUSTER, ""),
            namespace=attributes.get(ATTRIBUTE_NAMESPACE, ""),
            kind=attributes.get(ATTRIBUTE_KIND, ""),
            name=attributes.get(ATTRIBUTE_NAME, ""),
            api_version=attributes.get(ATTRIBUTE_API_VERSION, ""),
            extra={
                k: v for k, v in attributes.items() if k not in _NAMED_ATTRIBUTES
            },
        )

    def as_attributes(self) -> dict[str, str]:
        """Return the designator as a free-form attribute map.

        Empty named attributes are omitted.
        """
        attributes = {
            ATTRIBUTE_API_VERSION: self.api_version,
            ATTRIBUTE_CLUSTER: self.cluster,
            ATTRIBUTE_KIND: self.kind,
            ATTRIBUTE_NAME: self.name,
            ATTRIBUTE_NAMESPACE: self.namespace,
        }
        attributes = {k: v for k, v in attributes.items() if v}
        attributes.update(self.extra)
        return attributes

    def workload_key(self) -> tuple[str, str, str, str]:
        """Case-folded (cluster, namespace, kind, name) tuple."""
        return (
            self.cluster.casefold(),
            self.namespace.casefold(),
            self.kind.casefold(),
            self.name.casefold(),
        )


# ---------------------------------------------------------------------------
# Posture findings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PostureResourceSummary:
    """Failed and warning posture controls for one workload.

    Attributes:
        designator: Identity of the workload.
        failed_controls: IDs of controls the workload failed.
        warning_controls: IDs of controls that produced warnings.
        report_id: Identifier of the posture report the summary came from.
        resource_id: Optional producer-side resource identifier.
    """

    designator: Designator
    failed_controls: tuple[str, ...] = ()
    warning_controls: tuple[str, ...] = ()
    report_id: str = ""
    resource_id: str = ""


# ---------------------------------------------------------------------------
# Vulnerability findings
# ---------------------------------------------------------------------------


class RelevantLabel(str, Enum):
    """Scanner verdict on whether an image's vulnerabilities are reachable."""

    YES = "yes"
    NO = "no"
    UNKNOWN = ""

    @classmethod
    def parse(cls, value: str | None) -> RelevantLabel:
        """Map a raw label to a member; anything unrecognized is UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class SeverityStats:
    """Vulnerability counts for one severity level of one image."""

    severity: str
    total_count: int = 0
    relevant_count: int = 0


@dataclass(frozen=True)
class VulnerabilityFinding:
    """Vulnerability scan summary for one container of a workload.

    Attributes:
        image_id: Image identifier (digest or tag).
        container_name: Name of the container running the image.
        container_scan_id: Identifier of the scan that produced the finding.
        designator: Identity of the workload the container belongs to.
        has_relevancy_data: True if the scanner computed runtime relevancy.
        relevant_label: Relevancy verdict; only meaningful with relevancy data.
        severity_stats: Per-severity counts.
        cve_names: Names of the vulnerabilities found (e.g. "CVE-2024-1234").
    """

    image_id: str
    container_name: str = ""
    container_scan_id: str = ""
    designator: Designator = field(default_factory=Designator)
    has_relevancy_data: bool = False
    relevant_label: RelevantLabel = RelevantLabel.UNKNOWN
    severity_stats: tuple[SeverityStats, ...] = ()
    cve_names: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Controls
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AttackTrackCategories:
    """Association of a control with categories (step names) of one track."""

    attack_track: str
    categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class ControlCatalogEntry:
    """A policy control that may participate in one or more attack tracks."""

    control_id: str
    name: str = ""
    base_score: float = 0.0
    tags: tuple[str, ...] = ()
    attack_tracks: tuple[AttackTrackCategories, ...] = ()


class ControlKind(Enum):
    """Origin of a control record."""

    POSTURE = "posture"
    VULNERABILITY = "vulnerability"


@dataclass(frozen=True)
class VulnerabilityPayload:
    """Data a vulnerability-derived control carries through to the report."""

    container_name: str
    container_scan_id: str
    image_id: str
    cve_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class ControlRecord:
    """A control as seen by the controls lookup and the renderer.

    ``kind`` decides whether ``payload`` is present: vulnerability-derived
    records always carry a ``VulnerabilityPayload``, posture records never do.
    """

    control_id: str
    kind: ControlKind = ControlKind.POSTURE
    attack_tracks: tuple[AttackTrackCategories, ...] = ()
    base_score: float = 0.0
    tags: tuple[str, ...] = ()
    payload: VulnerabilityPayload | None = None

    def __post_init__(self) -> None:
        if self.kind is ControlKind.VULNERABILITY and self.payload is None:
            raise ValueError(
                f"Vulnerability control '{self.control_id}' requires a payload"
            )
        if self.kind is ControlKind.POSTURE and self.payload is not None:
            raise ValueError(
                f"Posture control '{self.control_id}' cannot carry a payload"
            )

    @classmethod
    def from_catalog_entry(cls, entry: ControlCatalogEntry) -> ControlRecord:
        return cls(
            control_id=entry.control_id,
            kind=ControlKind.POSTURE,
            attack_tracks=entry.attack_tracks,
            base_score=entry.base_score,
            tags=entry.tags,
        )

"""Shared builders for attack tracks, catalogs, and findings used across tests."""

from __future__ import annotations

from kubechains.core.attacktrack import AttackStep, AttackTrack
from kubechains.core.posture import (
    AttackTrackCategories,
    ControlCatalogEntry,
    Designator,
    PostureResourceSummary,
    RelevantLabel,
    SeverityStats,
    VulnerabilityFinding,
)

VULN_STEP = "vulnerableImageStepName"

WORKLOAD = {
    "cluster": "minikubesecurity1",
    "kind": "Pod",
    "name": "wowtest",
    "namespace": "default",
}


def step(name: str, *children: AttackStep, vuln: bool = False, description: str = "") -> AttackStep:
    """Build an AttackStep with positional children."""
    return AttackStep(
        name=name,
        description=description or f"step {name}",
        checks_vulnerabilities=vuln,
        sub_steps=tuple(children),
    )


def track(name: str, root: AttackStep | None, description: str = "") -> AttackTrack:
    return AttackTrack(name=name, description=description or f"track {name}", root=root)


def control(
    control_id: str,
    categories: list[str],
    tracks: tuple[str, ...] = ("attackchain1", "attackchain2"),
    base_score: float = 1.0,
) -> ControlCatalogEntry:
    """Catalog entry associated with ``categories`` in each of ``tracks``."""
    return ControlCatalogEntry(
        control_id=control_id,
        base_score=base_score,
        tags=("security",),
        attack_tracks=tuple(
            AttackTrackCategories(attack_track=t, categories=tuple(categories))
            for t in tracks
        ),
    )


def all_controls() -> dict[str, ControlCatalogEntry]:
    """control1..control6 mapped to categories A, B, C, C, D, E."""
    categories = {
        "control1": "A",
        "control2": "B",
        "control3": "C",
        "control4": "C",
        "control5": "D",
        "control6": "E",
    }
    return {cid: control(cid, [cat]) for cid, cat in categories.items()}


def summary(
    failed: list[str] | tuple[str, ...] = (),
    warning: list[str] | tuple[str, ...] = (),
    attributes: dict[str, str] | None = None,
    report_id: str = "report-1",
) -> PostureResourceSummary:
    return PostureResourceSummary(
        designator=Designator.from_attributes(attributes or WORKLOAD),
        failed_controls=tuple(failed),
        warning_controls=tuple(warning),
        report_id=report_id,
    )


def finding(
    has_relevancy_data: bool = True,
    label: RelevantLabel = RelevantLabel.YES,
    attributes: dict[str, str] | None = None,
    severity: str = "Critical",
    total_count: int = 1,
    relevant_count: int = 1,
    image_id: str = "image-1",
    container_name: str = "nginx",
    container_scan_id: str = "scan-1",
    cve_names: tuple[str, ...] = ("CVE-1", "CVE-2", "CVE-3"),
) -> VulnerabilityFinding:
    return VulnerabilityFinding(
        image_id=image_id,
        container_name=container_name,
        container_scan_id=container_scan_id,
        designator=Designator.from_attributes(attributes or WORKLOAD),
        has_relevancy_data=has_relevancy_data,
        relevant_label=label,
        severity_stats=(
            SeverityStats(
                severity=severity,
                total_count=total_count,
                relevant_count=relevant_count,
            ),
        ),
        cve_names=cve_names,
    )


def vulnerable_track(name: str = "attackchain1") -> AttackTrack:
    """A -> [vulnerableImageStepName(vuln) -> [C, D], E -> [B]]."""
    return track(
        name,
        step(
            "A",
            step(VULN_STEP, step("C"), step("D"), vuln=True),
            step("E", step("B")),
        ),
    )

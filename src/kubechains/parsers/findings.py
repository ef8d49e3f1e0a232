"""Parsers for posture summaries and vulnerability findings.

Both record types identify their workload with a designator attribute map:

.. code-block:: yaml

    designators:
      attributes:
        cluster: minikube
        namespace: default
        kind: Deployment
        name: nginx
        apiVersion: apps/v1

Posture summaries add ``failedControl``, ``warningControls`` and
``reportGUID``; vulnerability findings add image, container, relevancy, and
severity statistics.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from kubechains.core.posture.models import (
    Designator,
    PostureResourceSummary,
    RelevantLabel,
    SeverityStats,
    VulnerabilityFinding,
)
from kubechains.exceptions import DocumentParseError
from kubechains.parsers.documents import (
    boolean,
    load_items,
    require_mapping,
    string_list,
    string_map,
)


def _parse_designator(record: Any) -> Designator:
    designators = require_mapping(record.get("designators") or {}, "designators")
    return Designator.from_attributes(
        string_map(designators.get("attributes"), "designator attributes")
    )


def _count(value: Any, what: str) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError) as exc:
        raise DocumentParseError(f"{what} is not an integer: {value!r}") from exc


def parse_posture_summary(data: Any) -> PostureResourceSummary:
    """Parse one posture resource summary mapping."""
    record = require_mapping(data, "posture resource summary")
    return PostureResourceSummary(
        designator=_parse_designator(record),
        failed_controls=string_list(record.get("failedControl"), "failedControl"),
        warning_controls=string_list(record.get("warningControls"), "warningControls"),
        report_id=str(record.get("reportGUID") or record.get("reportID") or ""),
        resource_id=str(record.get("resourceID") or ""),
    )


def _parse_severity_stats(value: Any) -> tuple[SeverityStats, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise DocumentParseError("severitiesStats must be a list")
    stats: list[SeverityStats] = []
    for item in value:
        entry = require_mapping(item, "severity stats")
        stats.append(SeverityStats(
            severity=str(entry.get("severity") or ""),
            total_count=_count(entry.get("totalCount"), "totalCount"),
            relevant_count=_count(entry.get("relevantCount"), "relevantCount"),
        ))
    return tuple(stats)


def _parse_cve_names(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise DocumentParseError("vulnerabilities must be a list")
    names: list[str] = []
    for item in value:
        if isinstance(item, str):
            names.append(item)
        else:
            names.append(str(require_mapping(item, "vulnerability").get("name") or ""))
    return tuple(n for n in names if n)


def parse_vulnerability_finding(data: Any) -> VulnerabilityFinding:
    """Parse one container vulnerability summary mapping."""
    record = require_mapping(data, "vulnerability finding")
    image_id = record.get("imageID") or record.get("imageHash")
    if not image_id:
        raise DocumentParseError("vulnerability finding has no imageID")
    return VulnerabilityFinding(
        image_id=str(image_id),
        container_name=str(record.get("containerName") or ""),
        container_scan_id=str(record.get("containerScanID") or ""),
        designator=_parse_designator(record),
        has_relevancy_data=boolean(record.get("hasRelevancyData"), "hasRelevancyData"),
        relevant_label=RelevantLabel.parse(record.get("relevantLabel")),
        severity_stats=_parse_severity_stats(record.get("severitiesStats")),
        cve_names=_parse_cve_names(record.get("vulnerabilities")),
    )


def load_posture_summaries(path: Path) -> list[PostureResourceSummary]:
    return [parse_posture_summary(item) for item in load_items(path, "summaries")]


def load_vulnerability_findings(path: Path) -> list[VulnerabilityFinding]:
    return [
        parse_vulnerability_finding(item) for item in load_items(path, "findings")
    ]

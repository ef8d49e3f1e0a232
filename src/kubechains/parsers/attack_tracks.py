"""Parser for attack-track template documents.

Templates use the Kubernetes-style ``AttackTrack`` layout:

.. code-block:: yaml

    apiVersion: regolibrary.kubescape/v1alpha1
    kind: AttackTrack
    metadata:
      name: workload-external-track
    spec:
      version: "1.0"
      description: An attacker can access the workload from outside the cluster
      data:
        name: Workload Exposure
        subSteps:
          - name: Vulnerable Image
            checksVulnerabilities: true
            subSteps:
              - name: Data Access
              - name: Secret Access

Parsing is structural only. Semantic checks (names, cycles, repeated step
names) belong to ``kubechains.core.attacktrack.validation`` and run when the
engine is built.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from kubechains.core.attacktrack.models import AttackStep, AttackTrack
from kubechains.exceptions import DocumentParseError
from kubechains.parsers.documents import boolean, load_items, require_mapping


def parse_attack_step(data: Any) -> AttackStep:
    """Parse one step mapping and its sub-steps."""
    step = require_mapping(data, "attack step")
    sub_steps = step.get("subSteps") or []
    if not isinstance(sub_steps, list):
        raise DocumentParseError(
            f"subSteps of step '{step.get('name', '')}' must be a list"
        )
    return AttackStep(
        name=str(step.get("name") or ""),
        description=str(step.get("description") or ""),
        checks_vulnerabilities=boolean(
            step.get("checksVulnerabilities"), "checksVulnerabilities"
        ),
        sub_steps=tuple(parse_attack_step(sub) for sub in sub_steps),
    )


def parse_attack_track(data: Any) -> AttackTrack:
    """Parse one ``AttackTrack`` document."""
    doc = require_mapping(data, "attack track")
    metadata = require_mapping(doc.get("metadata") or {}, "attack track metadata")
    spec = require_mapping(doc.get("spec") or {}, "attack track spec")
    root_data = spec.get("data")
    return AttackTrack(
        name=str(metadata.get("name") or ""),
        description=str(spec.get("description") or ""),
        root=parse_attack_step(root_data) if root_data else None,
        version=str(spec.get("version") or "1.0"),
    )


def load_attack_tracks(path: Path) -> list[AttackTrack]:
    """Load every attack track from a file or directory."""
    return [parse_attack_track(item) for item in load_items(path, "attackTracks")]

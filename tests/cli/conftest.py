"""Shared fixtures for CLI tests.

Writes attack-track, control catalog, posture and vulnerability documents
into temporary directories in the formats the CLI loads.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

VULN_STEP = "vulnerableImageStepName"

TRACK_YAML = f"""\
apiVersion: regolibrary.kubescape/v1alpha1
kind: AttackTrack
metadata:
  name: attackchain1
spec:
  version: "1.0"
  description: workload exposure
  data:
    name: A
    subSteps:
      - name: {VULN_STEP}
        checksVulnerabilities: true
        subSteps:
          - name: C
          - name: D
      - name: E
        subSteps:
          - name: B
"""

WORKLOAD = {
    "cluster": "minikubesecurity1",
    "namespace": "default",
    "kind": "Pod",
    "name": "wowtest",
}


def _controls() -> dict:
    categories = {
        "control1": "A",
        "control2": "B",
        "control3": "C",
        "control4": "C",
        "control5": "D",
        "control6": "E",
    }
    return {
        "controls": [
            {
                "controlID": cid,
                "name": f"{cid} name",
                "baseScore": 5,
                "attributes": {
                    "controlTypeTags": ["security"],
                    "attackTracks": [{"attackTrack": "attackchain1", "categories": [cat]}],
                },
            }
            for cid, cat in categories.items()
        ]
    }


def _posture(failed: list[str], warning: list[str]) -> dict:
    return {
        "summaries": [
            {
                "designators": {"attributes": WORKLOAD},
                "failedControl": failed,
                "warningControls": warning,
                "reportGUID": "report-1",
            },
            {
                "designators": {"attributes": dict(WORKLOAD, kind="ConfigMap", name="settings")},
                "failedControl": failed,
                "warningControls": warning,
                "reportGUID": "report-1",
            },
        ]
    }


def _vulnerabilities() -> dict:
    return {
        "findings": [
            {
                "designators": {"attributes": dict(WORKLOAD, cluster="MinikubeSecurity1")},
                "imageID": "nginx@sha256:1234",
                "containerName": "nginx",
                "containerScanID": "scan-1",
                "hasRelevancyData": True,
                "relevantLabel": "yes",
                "severitiesStats": [{"severity": "Critical", "totalCount": 2, "relevantCount": 1}],
                "vulnerabilities": [{"name": "CVE-2024-0001"}, {"name": "CVE-2024-0002"}],
            }
        ]
    }


@pytest.fixture
def inputs(tmp_path: Path) -> dict[str, Path]:
    """Input files for one Pod that realizes attackchain1 on both branches.

    A ConfigMap with the same failed controls is included and must be
    skipped.
    """
    tracks = tmp_path / "tracks"
    tracks.mkdir()
    (tracks / "attackchain1.yaml").write_text(TRACK_YAML)

    paths = {
        "tracks": tracks,
        "controls": tmp_path / "controls.json",
        "posture": tmp_path / "posture.json",
        "vulnerabilities": tmp_path / "vulnerabilities.json",
    }
    paths["controls"].write_text(json.dumps(_controls()))
    paths["posture"].write_text(json.dumps(
        _posture(["control1", "control2", "control6"], ["control3", "control4"])
    ))
    paths["vulnerabilities"].write_text(json.dumps(_vulnerabilities()))
    return paths


@pytest.fixture
def clean_posture(tmp_path: Path) -> Path:
    """Posture summaries with no failed or warning controls."""
    path = tmp_path / "clean-posture.json"
    path.write_text(json.dumps(_posture([], [])))
    return path


@pytest.fixture
def unknown_control_posture(tmp_path: Path) -> Path:
    """Posture summaries naming a control missing from the catalog."""
    path = tmp_path / "unknown-posture.json"
    path.write_text(json.dumps(
        _posture(["control1", "control2", "control6", "C-9999"], [])
    ))
    return path


@pytest.fixture
def invalid_tracks_dir(tmp_path: Path) -> Path:
    """Directory with one template holding duplicate sibling steps."""
    directory = tmp_path / "invalid-tracks"
    directory.mkdir()
    (directory / "broken.yaml").write_text(
        "metadata:\n"
        "  name: broken\n"
        "spec:\n"
        "  data:\n"
        "    name: A\n"
        "    subSteps:\n"
        "      - name: B\n"
        "      - name: B\n"
    )
    return directory


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "empty"
    directory.mkdir()
    return directory

"""Parser for control catalog documents.

A catalog is a list of controls (or a mapping with a ``controls`` list).
Each control names the attack tracks and categories it participates in:

.. code-block:: json

    {
      "controlID": "C-0041",
      "name": "HostNetwork access",
      "baseScore": 7,
      "attributes": {
        "controlTypeTags": ["security"],
        "attackTracks": [
          {"attackTrack": "workload-external-track", "categories": ["Network"]}
        ]
      }
    }
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from kubechains.core.posture.models import AttackTrackCategories, ControlCatalogEntry
from kubechains.exceptions import DocumentParseError
from kubechains.parsers.documents import load_items, require_mapping, string_list


def _parse_associations(value: Any) -> tuple[AttackTrackCategories, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise DocumentParseError("attackTracks must be a list")
    associations: list[AttackTrackCategories] = []
    for item in value:
        entry = require_mapping(item, "attack track association")
        associations.append(AttackTrackCategories(
            attack_track=str(entry.get("attackTrack") or ""),
            categories=string_list(entry.get("categories"), "categories"),
        ))
    return tuple(associations)


def parse_control(data: Any) -> ControlCatalogEntry:
    """Parse one control mapping."""
    control = require_mapping(data, "control")
    control_id = control.get("controlID") or control.get("id")
    if not control_id:
        raise DocumentParseError("control has no controlID")
    attributes = require_mapping(control.get("attributes") or {}, "control attributes")
    try:
        base_score = float(control.get("baseScore") or 0.0)
    except (TypeError, ValueError) as exc:
        raise DocumentParseError(
            f"control {control_id}: baseScore is not a number"
        ) from exc
    return ControlCatalogEntry(
        control_id=str(control_id),
        name=str(control.get("name") or ""),
        base_score=base_score,
        tags=string_list(attributes.get("controlTypeTags"), "controlTypeTags"),
        attack_tracks=_parse_associations(attributes.get("attackTracks")),
    )


def load_control_catalog(path: Path) -> dict[str, ControlCatalogEntry]:
    """Load a control catalog keyed by control ID.

    Later definitions of the same ID replace earlier ones.
    """
    catalog: dict[str, ControlCatalogEntry] = {}
    for item in load_items(path, "controls"):
        entry = parse_control(item)
        catalog[entry.control_id] = entry
    return catalog

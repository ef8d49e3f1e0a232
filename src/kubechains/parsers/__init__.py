"""Document parsers for attack tracks, control catalogs, and findings.

All parsers read YAML or JSON (via PyYAML) and raise ``DocumentParseError``
on malformed input.
"""

from kubechains.parsers.attack_tracks import (
    load_attack_tracks,
    parse_attack_step,
    parse_attack_track,
)
from kubechains.parsers.controls import load_control_catalog, parse_control
from kubechains.parsers.findings import (
    load_posture_summaries,
    load_vulnerability_findings,
    parse_posture_summary,
    parse_vulnerability_finding,
)

__all__ = [
    "load_attack_tracks",
    "load_control_catalog",
    "load_posture_summaries",
    "load_vulnerability_findings",
    "parse_attack_step",
    "parse_attack_track",
    "parse_control",
    "parse_posture_summary",
    "parse_vulnerability_finding",
]

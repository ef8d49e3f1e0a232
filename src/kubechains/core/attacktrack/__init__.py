"""Attack-track templates and the path algorithm that prunes them.

Submodules:
    models      -- AttackStep, AttackTrack, PrunedStep, PrunedAttackTrack
    validation  -- Structural template validation
    paths       -- PathAlgorithm protocol and the default AllPathsHandler

All public names are re-exported here::

    from kubechains.core.attacktrack import AttackTrack, AllPathsHandler
"""

from kubechains.core.attacktrack.models import (
    AttackStep,
    AttackTrack,
    PrunedAttackTrack,
    PrunedStep,
    TrackControl,
)
from kubechains.core.attacktrack.paths import (
    AllPathsHandler,
    ControlsLookupView,
    PathAlgorithm,
)
from kubechains.core.attacktrack.validation import (
    is_valid_attack_track,
    validate_attack_track,
)

__all__ = [
    "AllPathsHandler",
    "AttackStep",
    "AttackTrack",
    "ControlsLookupView",
    "PathAlgorithm",
    "PrunedAttackTrack",
    "PrunedStep",
    "TrackControl",
    "is_valid_attack_track",
    "validate_attack_track",
]

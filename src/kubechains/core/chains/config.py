"""Engine configuration.

``EngineConfig`` holds the few deployment-level choices the detection
pipeline exposes. Like the other configuration objects in kubechains it is a
plain dataclass that validates itself; the engine calls ``validate()`` once
at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from kubechains.exceptions import ConfigurationError

DEFAULT_VULNERABILITY_TAGS: tuple[str, ...] = ("security",)


class UnresolvedControlPolicy(str, Enum):
    """What to do with a failed/warning control ID missing from the catalog.

    - ``DROP``: skip the ID and continue with the controls that resolved.
    - ``FAIL``: abort the lookup build with ``ControlResolutionError``.

    The two policies change detection results, so a deployment should pick
    one and keep it.
    """

    DROP = "drop"
    FAIL = "fail"


@dataclass(frozen=True)
class EngineConfig:
    """Deployment-level settings for ``AttackChainEngine``.

    Attributes:
        unresolved_controls: Policy for control IDs missing from the catalog.
        vulnerability_tags: Tags attached to vulnerability-derived controls.
        customer_guid: Tenant identifier copied onto every rendered chain.
    """

    unresolved_controls: UnresolvedControlPolicy = UnresolvedControlPolicy.DROP
    vulnerability_tags: tuple[str, ...] = DEFAULT_VULNERABILITY_TAGS
    customer_guid: str = ""

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is invalid."""
        if not isinstance(self.unresolved_controls, UnresolvedControlPolicy):
            raise ConfigurationError(
                "unresolved_controls must be an UnresolvedControlPolicy, "
                f"got {self.unresolved_controls!r}"
            )
        if isinstance(self.vulnerability_tags, str):
            raise ConfigurationError(
                "vulnerability_tags must be a sequence of strings, not a string"
            )
        for tag in self.vulnerability_tags:
            if not isinstance(tag, str) or not tag:
                raise ConfigurationError(
                    f"vulnerability_tags must be non-empty strings, got {tag!r}"
                )
        if not isinstance(self.customer_guid, str):
            raise ConfigurationError(
                f"customer_guid must be a string, got {type(self.customer_guid).__name__}"
            )

    @property
    def strict(self) -> bool:
        return self.unresolved_controls is UnresolvedControlPolicy.FAIL

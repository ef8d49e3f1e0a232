"""kubechains exception hierarchy.

All public exceptions inherit from KubeChainsError, giving callers a single
base class to catch when they want to handle any kubechains-specific failure
without swallowing unrelated errors.

Conditions that simply mean "no chain for this input" (unsupported workload
kind, empty controls lookup, no surviving path, designator mismatch) are not
errors and never raise.
"""


class KubeChainsError(Exception):
    """Base exception for all kubechains errors."""


class EngineConstructionError(KubeChainsError):
    """Raised when an attack-chain engine cannot be constructed.

    Covers an empty attack-track set and structurally invalid attack
    tracks (missing name, missing root, empty step names, cycles).
    """


class DetectionInputError(KubeChainsError):
    """Raised when per-track detection receives a missing track or lookup."""


class ControlResolutionError(KubeChainsError):
    """Raised when failed or warning control IDs are absent from the catalog.

    Only raised under the strict unresolved-control policy. The lenient
    policy drops unknown IDs instead.

    Attributes:
        control_ids: The control IDs that could not be resolved, in the
            order they were first seen.
    """

    def __init__(self, control_ids: list[str]) -> None:
        self.control_ids = list(control_ids)
        super().__init__(
            "Unresolved control IDs: " + ", ".join(self.control_ids)
        )


class DocumentParseError(KubeChainsError):
    """Raised when an attack-track, catalog, or findings document is malformed.

    Covers unreadable files, invalid YAML/JSON, and documents whose
    structure does not match the expected schema.
    """


class ConfigurationError(KubeChainsError):
    """Raised when an engine configuration fails validation."""

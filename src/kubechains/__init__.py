"""kubechains: Attack-chain detection for Kubernetes workload posture findings."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

"""Attack-chain report models.

An ``AttackChain`` is the final, self-contained record produced for one
(attack track, workload) pair. It is handed to the caller for storage or
display; kubechains does not persist it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from kubechains.core.posture.models import Designator


@dataclass(frozen=True)
class VulnerabilityReference:
    """Vulnerabilities of one container image that made a step live.

    Attributes:
        container_name: Container running the vulnerable image.
        image_scan_id: Identifier of the container scan.
        names: CVE names reported for the image.
    """

    container_name: str
    image_scan_id: str
    names: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "containerName": self.container_name,
            "imageScanID": self.image_scan_id,
            "names": list(self.names),
        }


@dataclass
class AttackChainNode:
    """One rendered step of an attack chain.

    Posture steps list the IDs of their failed controls; vulnerability steps
    list vulnerability references instead. Never both.
    """

    name: str
    description: str = ""
    control_ids: list[str] = field(default_factory=list)
    vulnerabilities: list[VulnerabilityReference] = field(default_factory=list)
    next_nodes: list[AttackChainNode] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.next_nodes

    def iter_nodes(self):
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.next_nodes:
            yield from child.iter_nodes()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "controlIDs": list(self.control_ids),
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "nextNodes": [n.to_dict() for n in self.next_nodes],
        }


@dataclass
class AttackChain:
    """Report record for one realized attack track on one workload.

    Attributes:
        attack_chain_id: Deterministic identifier, see
            ``kubechains.core.chains.identifiers``.
        name: Attack track name.
        description: Attack track description.
        cluster_name: Cluster of the workload.
        resource: Designator of the workload.
        root: Root node of the rendered tree.
        first_seen: Time the chain was rendered.
        latest_report_id: Posture report the chain was derived from.
        customer_guid: Tenant identifier from the engine configuration.
    """

    attack_chain_id: str
    name: str
    description: str
    cluster_name: str
    resource: Designator
    root: AttackChainNode
    first_seen: datetime
    latest_report_id: str = ""
    customer_guid: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "attackChainID": self.attack_chain_id,
            "type": {"name": self.name, "description": self.description},
            "clusterName": self.cluster_name,
            "resource": self.resource.as_attributes(),
            "attackChainNodes": self.root.to_dict(),
            "uiStatus": {"firstSeen": self.first_seen.isoformat()},
            "latestReportGUID": self.latest_report_id,
            "customerGUID": self.customer_guid,
        }

"""Attack-chain detection pipeline.

Given attack-track templates, a control catalog, and one workload's posture
and vulnerability findings, the pipeline determines which templates are
realized for the workload and renders each realized portion as an
``AttackChain``.

Pipeline
--------

**Relevance** (``relevance``):
    Keeps vulnerability findings with critical, runtime-relevant CVEs.

**Adapter** (``adapter``):
    Wraps each relevant finding as a control tagged with every
    vulnerability-checking step.

**Lookup** (``lookup``):
    Merges resolved posture controls and vulnerability controls into an
    index of live (track, category) pairs.

**Engine** (``engine``):
    Filters unsupported kinds, builds the lookup, and asks the path
    algorithm for each template's pruned tree.

**Renderer** (``renderer``, ``identifiers``, ``models``):
    Turns pruned trees into ``AttackChain`` records with deterministic IDs.

All public names are re-exported here::

    from kubechains.core.chains import AttackChainEngine, AttackChain
"""

from kubechains.core.chains.adapter import (
    vulnerability_control_id,
    vulnerability_to_control,
)
from kubechains.core.chains.config import EngineConfig, UnresolvedControlPolicy
from kubechains.core.chains.correlation import (
    SUPPORTED_KINDS,
    findings_for,
    is_supported_kind,
    workloads_match,
)
from kubechains.core.chains.engine import AttackChainEngine
from kubechains.core.chains.identifiers import fnv1a_32, generate_attack_chain_id
from kubechains.core.chains.lookup import (
    ControlCatalog,
    ControlsLookup,
    MappingCatalog,
    build_controls_lookup,
)
from kubechains.core.chains.models import (
    AttackChain,
    AttackChainNode,
    VulnerabilityReference,
)
from kubechains.core.chains.relevance import is_relevant_to_attack_chain
from kubechains.core.chains.renderer import (
    render_attack_chain,
    render_attack_chains,
    render_step,
)

__all__ = [
    "SUPPORTED_KINDS",
    "AttackChain",
    "AttackChainEngine",
    "AttackChainNode",
    "ControlCatalog",
    "ControlsLookup",
    "EngineConfig",
    "MappingCatalog",
    "UnresolvedControlPolicy",
    "VulnerabilityReference",
    "build_controls_lookup",
    "findings_for",
    "fnv1a_32",
    "generate_attack_chain_id",
    "is_relevant_to_attack_chain",
    "is_supported_kind",
    "render_attack_chain",
    "render_attack_chains",
    "render_step",
    "vulnerability_control_id",
    "vulnerability_to_control",
    "workloads_match",
]

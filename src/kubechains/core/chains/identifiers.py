"""Deterministic attack-chain identifiers.

An attack chain is identified by the tuple (attack track name, cluster,
namespace, kind, resource name). The identifier is the 32-bit FNV-1a hash of
the tuple's elements joined with ``/`` and encoded as UTF-8, rendered in
decimal. Re-running detection on unchanged inputs therefore yields the same
identifiers, so downstream stores can upsert instead of duplicating.

References:
    Fowler, Noll, Vo. "The FNV Non-Cryptographic Hash Algorithm."
    draft-eastlake-fnv (IETF).
"""

from __future__ import annotations

FNV32_OFFSET_BASIS = 0x811C9DC5
FNV32_PRIME = 0x01000193

ID_SEPARATOR = "/"


def fnv1a_32(data: bytes) -> int:
    """Return the 32-bit FNV-1a hash of ``data``."""
    h = FNV32_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV32_PRIME) & 0xFFFFFFFF
    return h


def generate_attack_chain_id(
    attack_track_name: str,
    cluster: str,
    namespace: str,
    kind: str,
    name: str,
) -> str:
    """Return the identifier of the chain for one (track, workload) pair.

    Element order matters: swapping two values changes the identifier.
    """
    elements = (attack_track_name, cluster, namespace, kind, name)
    return str(fnv1a_32(ID_SEPARATOR.join(elements).encode("utf-8")))

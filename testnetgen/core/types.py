"""testnetgen.core.types

Lightweight dataclasses for values that never leave the process.

Pydantic models own IO boundaries; dataclasses keep runtime lean.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from testnetgen import DEFAULT_P2P_PORT


@dataclass(frozen=True, slots=True)
class NodeIdentity:
    """Network identity of one generated node. Immutable once phase 1 produced it."""

    index: int
    directory: Path
    moniker: str
    node_id: str  # hex(sha256(node pubkey)[:20])
    validator_public_key: bytes  # raw Ed25519
    address: str  # IPv4

    @property
    def peer_address(self) -> str:
        return f"{self.node_id}@{self.address}:{DEFAULT_P2P_PORT}"


@dataclass(frozen=True, slots=True)
class NodeAccount:
    moniker: str
    address: str
    seed_path: Path

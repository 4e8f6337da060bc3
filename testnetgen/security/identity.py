"""testnetgen.security.identity

Validator network identity: two Ed25519 keys per node.

- node key (p2p): node_id = hex(sha256(pubkey)[:20])
- validator key (consensus): address = HEX(sha256(pubkey)[:20])

Both are written in the Tendermint JSON key format so the consensus engine
can load them unchanged.
"""

from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from testnetgen.core.exceptions import SerializationError
from testnetgen.core.fsutil import FILE_PERM, SECRET_PERM, write_atomic

_PRIV_TYPE = "tendermint/PrivKeyEd25519"
_PUB_TYPE = "tendermint/PubKeyEd25519"


@dataclass(frozen=True, slots=True)
class Ed25519Keypair:
    private_key: bytes  # 32-byte seed
    public_key: bytes  # 32 bytes

    @classmethod
    def generate(cls) -> Ed25519Keypair:
        priv = Ed25519PrivateKey.generate()
        priv_raw = priv.private_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PrivateFormat.Raw,
            encryption_algorithm=serialization.NoEncryption(),
        )
        pub_raw = priv.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return cls(private_key=priv_raw, public_key=pub_raw)

    @property
    def address(self) -> bytes:
        return hashlib.sha256(self.public_key).digest()[:20]

    def priv_key_json(self) -> dict[str, str]:
        # Tendermint stores the 64-byte expanded form: seed || pubkey.
        value = base64.b64encode(self.private_key + self.public_key).decode("ascii")
        return {"type": _PRIV_TYPE, "value": value}

    def pub_key_json(self) -> dict[str, str]:
        return {"type": _PUB_TYPE, "value": base64.b64encode(self.public_key).decode("ascii")}


def node_id_from_pubkey(public_key: bytes) -> str:
    return hashlib.sha256(public_key).digest()[:20].hex()


def _dump(obj: dict) -> bytes:
    return (json.dumps(obj, indent=2, sort_keys=True) + "\n").encode("utf-8")


def _write_key_file(path: Path, data: bytes, *, mode: int = FILE_PERM) -> None:
    try:
        write_atomic(path, data, mode=mode)
    except OSError as e:
        raise SerializationError(f"{path}: failed to write key file: {e}") from e


def init_validator_files(config_dir: Path, data_dir: Path) -> tuple[str, bytes]:
    """Generate node + validator keys for one node. Returns (node_id, validator pubkey)."""

    node_key = Ed25519Keypair.generate()
    val_key = Ed25519Keypair.generate()

    _write_key_file(config_dir / "node_key.json", _dump({"priv_key": node_key.priv_key_json()}), mode=SECRET_PERM)
    _write_key_file(
        config_dir / "priv_validator_key.json",
        _dump(
            {
                "address": val_key.address.hex().upper(),
                "pub_key": val_key.pub_key_json(),
                "priv_key": val_key.priv_key_json(),
            }
        ),
        mode=SECRET_PERM,
    )
    _write_key_file(
        data_dir / "priv_validator_state.json",
        _dump({"height": "0", "round": "0", "step": 0}),
    )

    return node_id_from_pubkey(node_key.public_key), val_key.public_key


def load_node_id(config_dir: Path) -> str:
    """Re-derive node_id from an on-disk node key."""

    blob = json.loads((config_dir / "node_key.json").read_text(encoding="utf-8"))
    raw = base64.b64decode(blob["priv_key"]["value"])
    return node_id_from_pubkey(raw[32:])

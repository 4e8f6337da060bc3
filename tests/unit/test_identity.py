from __future__ import annotations

import base64
import json
import stat
from pathlib import Path

import pytest

from testnetgen.core.exceptions import SerializationError
from testnetgen.security import identity
from testnetgen.security.identity import (
    Ed25519Keypair,
    init_validator_files,
    load_node_id,
    node_id_from_pubkey,
)


def test_keypair_sizes_and_address() -> None:
    kp = Ed25519Keypair.generate()
    assert len(kp.private_key) == 32
    assert len(kp.public_key) == 32
    assert len(kp.address) == 20


def test_node_id_is_40_hex() -> None:
    nid = node_id_from_pubkey(Ed25519Keypair.generate().public_key)
    assert len(nid) == 40
    int(nid, 16)


def test_init_validator_files_writes_tendermint_key_files(temp_dir: Path) -> None:
    config_dir = temp_dir / "config"
    data_dir = temp_dir / "data"

    node_id, val_pub = init_validator_files(config_dir, data_dir)

    assert load_node_id(config_dir) == node_id

    pv = json.loads((config_dir / "priv_validator_key.json").read_text(encoding="utf-8"))
    assert pv["pub_key"]["type"] == "tendermint/PubKeyEd25519"
    assert base64.b64decode(pv["pub_key"]["value"]) == val_pub
    assert len(base64.b64decode(pv["priv_key"]["value"])) == 64
    assert len(pv["address"]) == 40 and pv["address"] == pv["address"].upper()

    state = json.loads((data_dir / "priv_validator_state.json").read_text(encoding="utf-8"))
    assert state == {"height": "0", "round": "0", "step": 0}

    mode = stat.S_IMODE((config_dir / "node_key.json").stat().st_mode)
    assert mode == 0o600


def test_node_and_validator_keys_differ(temp_dir: Path) -> None:
    node_id, val_pub = init_validator_files(temp_dir / "config", temp_dir / "data")
    assert node_id != node_id_from_pubkey(val_pub)


def test_each_call_generates_fresh_identity(temp_dir: Path) -> None:
    a, _ = init_validator_files(temp_dir / "a" / "config", temp_dir / "a" / "data")
    b, _ = init_validator_files(temp_dir / "b" / "config", temp_dir / "b" / "data")
    assert a != b


def test_key_file_write_failure_is_serialization_error(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _read_only(path: Path, data: bytes, *, mode: int = 0o644) -> None:
        raise PermissionError("read-only fs")

    monkeypatch.setattr(identity, "write_atomic", _read_only)

    with pytest.raises(SerializationError, match="node_key.json: failed to write key file: read-only fs"):
        init_validator_files(temp_dir / "config", temp_dir / "data")

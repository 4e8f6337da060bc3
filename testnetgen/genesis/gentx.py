"""testnetgen.genesis.gentx

Join-transactions: a node's account creates its own validator and stakes on it.

Commission is pinned at 100% with a minimum self-delegation of 1. These are
testnet constants, not knobs.
"""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from pydantic import ValidationError

from testnetgen.core.exceptions import SerializationError, SigningError
from testnetgen.core.fsutil import write_atomic
from testnetgen.core.models import (
    Coin,
    CommissionRates,
    Description,
    JoinTransaction,
    MsgCreateValidator,
    MsgEnvelope,
    StdSignature,
    StdTx,
    dec_str,
)
from testnetgen.core.types import NodeIdentity
from testnetgen.security.keystore import Keyring, recover_signer

logger = logging.getLogger(__name__)

COMMISSION_RATE = dec_str(1)
MIN_SELF_DELEGATION = "1"


def build_create_validator(identity: NodeIdentity, account_address: str, self_stake: Coin) -> JoinTransaction:
    """Unsigned create-validator transaction for one node."""

    msg = MsgCreateValidator(
        description=Description(moniker=identity.moniker),
        commission=CommissionRates(
            rate=COMMISSION_RATE,
            max_rate=COMMISSION_RATE,
            max_change_rate=COMMISSION_RATE,
        ),
        min_self_delegation=MIN_SELF_DELEGATION,
        delegator_address=account_address,
        validator_address=account_address,
        pubkey=base64.b64encode(identity.validator_public_key).decode("ascii"),
        value=self_stake,
    )
    return JoinTransaction(value=StdTx(msg=[MsgEnvelope(value=msg)], memo=identity.peer_address))


def sign_gentx(tx: JoinTransaction, keyring: Keyring, key_name: str, chain_id: str) -> JoinTransaction:
    """Self-sign: the node's own account signs its validator creation."""

    sig = keyring.sign(key_name, tx.sign_bytes(chain_id))
    if not sig:
        raise SigningError(f"empty signature from {key_name!r}")

    signed = tx.model_copy(deep=True)
    signed.value.signatures = [StdSignature(signature=base64.b64encode(sig).decode("ascii"))]
    return signed


def verify_gentx(tx: JoinTransaction, chain_id: str) -> bool:
    """True when exactly one signature recovers to the delegator address."""

    if len(tx.value.signatures) != 1:
        return False
    try:
        sig = base64.b64decode(tx.value.signatures[0].signature, validate=True)
        signer = recover_signer(tx.sign_bytes(chain_id), sig)
    except Exception:  # noqa: BLE001 - any decode/recover failure is a bad signature
        return False
    return signer.lower() == tx.create_validator.delegator_address.lower()


def gentx_path(gentxs_dir: Path, moniker: str) -> Path:
    return gentxs_dir / f"{moniker}.json"


def write_gentx(tx: JoinTransaction, gentxs_dir: Path, moniker: str) -> Path:
    path = gentx_path(gentxs_dir, moniker)
    try:
        data = tx.model_dump_json(indent=2).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"{moniker}: gentx could not be encoded: {e}") from e

    try:
        write_atomic(path, data)
    except OSError as e:
        raise SerializationError(f"{path}: failed to write gentx: {e}") from e

    logger.info("gentx_written", extra={"moniker": moniker, "path": str(path)})
    return path


def read_gentxs(gentxs_dir: Path) -> list[JoinTransaction]:
    """All staged join-transactions, in file-name order."""

    if not gentxs_dir.exists():
        return []

    out: list[JoinTransaction] = []
    for path in sorted(gentxs_dir.glob("*.json")):
        try:
            out.append(JoinTransaction.model_validate_json(path.read_bytes()))
        except (OSError, ValidationError) as e:
            raise SerializationError(f"{path}: invalid gentx: {e}") from e
    return out

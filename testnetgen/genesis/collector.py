"""testnetgen.genesis.collector

Phase 2: fold every staged join-transaction into the draft state, once.

The canonical genesis is derived a single time from the drafts and then
copied byte-for-byte to each node. Nodes never re-derive it, so they cannot
disagree about it.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from testnetgen.core.exceptions import (
    GenesisReadError,
    GenesisValidationError,
    GenesisWriteError,
    GentxValidationError,
)
from testnetgen.core.fsutil import write_atomic
from testnetgen.core.models import Account, GenesisDocument, JoinTransaction, canonical_json
from testnetgen.genesis.gentx import verify_gentx
from testnetgen.genesis.modules import get_module, list_modules

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CanonicalGenesis:
    document: GenesisDocument
    data: bytes
    memos: tuple[str, ...]


def read_genesis(path: Path) -> GenesisDocument:
    try:
        return GenesisDocument.model_validate_json(path.read_bytes())
    except OSError as e:
        raise GenesisReadError(f"{path}: cannot read genesis: {e}") from e
    except ValidationError as e:
        raise GenesisReadError(f"{path}: invalid genesis document: {e}") from e


def apply_gentxs(app_state: dict[str, Any], gentxs: Sequence[JoinTransaction], chain_id: str) -> dict[str, Any]:
    """Validate each join-transaction against the draft state and stage it in genutil.

    Returns a new state; `app_state` is not modified. Zero gentxs is valid and
    yields a stake-less state.
    """

    out = copy.deepcopy(app_state)
    try:
        accounts = {
            acct.address.lower(): acct
            for acct in (Account.from_genesis(b) for b in out.get("auth", {}).get("accounts") or [])
        }
    except ValidationError as e:
        raise GenesisValidationError(f"auth: malformed genesis account: {e}") from e
    bond_denom = out.get("staking", {}).get("params", {}).get("bond_denom")

    seen_pubkeys: set[str] = set()
    seen_nodes: set[str] = set()
    for tx in gentxs:
        msg = tx.create_validator
        who = msg.description.moniker

        if not verify_gentx(tx, chain_id):
            raise GentxValidationError(f"{who}: signature does not match delegator {msg.delegator_address}")

        acct = accounts.get(msg.delegator_address.lower())
        if acct is None:
            raise GentxValidationError(f"{who}: delegator {msg.delegator_address} is not a genesis account")

        if bond_denom and msg.value.denom != bond_denom:
            raise GentxValidationError(f"{who}: self-stake denom {msg.value.denom} != bond denom {bond_denom}")

        if acct.balance(msg.value.denom) < msg.value.value:
            raise GentxValidationError(
                f"{who}: insufficient {msg.value.denom}: has {acct.balance(msg.value.denom)}, stakes {msg.value.amount}"
            )

        if msg.pubkey in seen_pubkeys:
            raise GentxValidationError(f"{who}: duplicate validator pubkey")
        if tx.node_id in seen_nodes:
            raise GentxValidationError(f"{who}: duplicate node id {tx.node_id}")
        seen_pubkeys.add(msg.pubkey)
        seen_nodes.add(tx.node_id)

    out.setdefault("genutil", {})["gentxs"] = [tx.model_dump(mode="json") for tx in gentxs]

    for name in list_modules():
        if name in out:
            get_module(name).validate_genesis(out[name])
    return out


def derive_canonical_genesis(
    chain_id: str,
    genesis_files: Sequence[Path],
    gentxs: Sequence[JoinTransaction],
    *,
    genesis_time: str,
) -> CanonicalGenesis:
    """Read every draft, require they agree, apply the gentxs once."""

    if not genesis_files:
        raise GenesisReadError("no genesis files to collect")

    drafts = [read_genesis(p) for p in genesis_files]
    base_path, base = genesis_files[0], drafts[0]
    base_state = canonical_json(base.app_state)

    for path, draft in zip(genesis_files, drafts, strict=True):
        if draft.chain_id != chain_id:
            raise GenesisReadError(f"{path}: chain_id {draft.chain_id!r} != {chain_id!r}")
        if canonical_json(draft.app_state) != base_state:
            raise GenesisReadError(f"{path}: draft app_state diverges from {base_path}")

    app_state = apply_gentxs(base.app_state, gentxs, chain_id)
    doc = GenesisDocument(genesis_time=genesis_time, chain_id=chain_id, app_state=app_state)

    logger.info(
        "canonical_genesis_derived",
        extra={"chain_id": chain_id, "gentxs": len(gentxs), "genesis_time": genesis_time},
    )
    return CanonicalGenesis(document=doc, data=doc.to_bytes(), memos=tuple(tx.memo for tx in gentxs))


def publish_genesis(canonical: CanonicalGenesis, path: Path) -> None:
    """Overwrite one node's genesis with the canonical bytes."""

    try:
        write_atomic(path, canonical.data)
    except OSError as e:
        raise GenesisWriteError(f"{path}: failed to write genesis: {e}") from e

"""testnetgen.genesis.assembler

Draft genesis: module defaults + every generated account + one native denom.

The draft is serialized once and the same bytes go to every node. Nothing is
written until every fragment has been encoded.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from eth_utils import keccak

from testnetgen.core.config import ChainParams
from testnetgen.core.exceptions import GenesisMarshalError, GenesisWriteError
from testnetgen.core.fsutil import write_atomic
from testnetgen.core.models import Account, Coin, GenesisDocument
from testnetgen.core.time import format_genesis_time, utc_now
from testnetgen.genesis.modules import GenesisModule, GenesisOverrides, default_modules

logger = logging.getLogger(__name__)

# keccak256 of empty code: every generated account is externally owned.
EMPTY_CODE_HASH = keccak(b"").hex()


def new_genesis_account(address: str, chain: ChainParams) -> Account:
    """Genesis account funded with bond tokens and native tokens."""

    balances: dict[str, int] = {}
    for denom, power in (
        (chain.bond_denom, chain.account_bond_power),
        (chain.native_denom, chain.account_native_power),
    ):
        balances[denom] = balances.get(denom, 0) + chain.tokens(power)

    return Account(
        address=address,
        coins=[Coin.of(d, amt) for d, amt in balances.items()],
        code_hash=EMPTY_CODE_HASH,
    )


def _round_trip(name: str, fragment: Any) -> dict[str, Any]:
    try:
        decoded = json.loads(json.dumps(fragment))
    except (TypeError, ValueError) as e:
        raise GenesisMarshalError(f"genesis module {name!r}: fragment is not JSON-serializable: {e}") from e
    if decoded != fragment or not isinstance(decoded, dict):
        raise GenesisMarshalError(f"genesis module {name!r}: fragment does not survive a JSON round-trip")
    return decoded


def assemble_app_state(
    accounts: Sequence[Account],
    denom: str,
    modules: Sequence[GenesisModule] | None = None,
) -> dict[str, Any]:
    """Build the draft application state.

    Accounts keep their given order (node index order). Duplicate addresses are
    rejected by the auth module, never dropped.
    """

    overrides = GenesisOverrides(denom=denom, accounts=list(accounts))
    app_state: dict[str, Any] = {}
    for module in modules if modules is not None else default_modules():
        fragment = module.apply_overrides(module.default_genesis(), overrides)
        fragment = _round_trip(module.name, fragment)
        module.validate_genesis(fragment)
        app_state[module.name] = fragment
    return app_state


def write_draft_genesis(
    chain_id: str,
    app_state: dict[str, Any],
    genesis_files: Sequence[Path],
    *,
    genesis_time: str | None = None,
) -> GenesisDocument:
    """Write one identical draft genesis document to every path."""

    try:
        doc = GenesisDocument(
            genesis_time=genesis_time or format_genesis_time(utc_now()),
            chain_id=chain_id,
            app_state=app_state,
        )
        data = doc.to_bytes()
    except (TypeError, ValueError) as e:
        raise GenesisMarshalError(f"draft genesis could not be encoded: {e}") from e

    for path in genesis_files:
        try:
            write_atomic(path, data)
        except OSError as e:
            raise GenesisWriteError(f"{path}: failed to write draft genesis: {e}") from e

    logger.info("draft_genesis_written", extra={"chain_id": chain_id, "nodes": len(genesis_files)})
    return doc

"""testnetgen.genesis.modules

Genesis modules report for duty.

Each module owns one key of `app_state` and exposes three capabilities:
- default_genesis(): the fragment a fresh chain starts from
- apply_overrides(state, overrides): stamp run-specific values, return a new fragment
- validate_genesis(state): raise if the fragment breaks the module's invariants

The assembler walks the registry in name order. No module is special-cased.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from testnetgen.core.exceptions import DuplicateAccountError, GenesisValidationError
from testnetgen.core.models import Account, dec_str

Blob = dict[str, Any]


@dataclass(frozen=True, slots=True)
class GenesisOverrides:
    """Run-specific values. One native denom for bonding, deposits, minting, and fees."""

    denom: str
    accounts: list[Account] = field(default_factory=list)


class GenesisModule(ABC):
    name: str

    @abstractmethod
    def default_genesis(self) -> Blob:
        raise NotImplementedError

    def apply_overrides(self, state: Blob, overrides: GenesisOverrides) -> Blob:
        return copy.deepcopy(state)

    def validate_genesis(self, state: Blob) -> None:
        return None


_REGISTRY: dict[str, type[GenesisModule]] = {}


def register(name: str) -> Callable[[type[Any]], type[Any]]:
    def _decorator(cls: type[Any]) -> type[Any]:
        if name in _REGISTRY and _REGISTRY[name] is not cls:
            raise ValueError(f"genesis module already registered: {name}")

        setattr(cls, "name", name)
        _REGISTRY[name] = cls
        return cls

    return _decorator


def get_module(name: str) -> GenesisModule:
    if name not in _REGISTRY:
        raise KeyError(f"unknown genesis module: {name}")
    return _REGISTRY[name]()


def list_modules() -> list[str]:
    return sorted(_REGISTRY.keys())


def default_modules() -> list[GenesisModule]:
    return [get_module(n) for n in list_modules()]


def _unregister_for_tests(name: str) -> None:
    _REGISTRY.pop(name, None)


# ---------------------------------------------------------------------------
# Built-in modules
# ---------------------------------------------------------------------------

@register("auth")
class AuthModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {
            "params": {
                "max_memo_characters": "256",
                "tx_sig_limit": "7",
                "tx_size_cost_per_byte": "10",
                "sig_verify_cost_ed25519": "590",
                "sig_verify_cost_secp256k1": "1000",
            },
            "accounts": [],
        }

    def apply_overrides(self, state: Blob, overrides: GenesisOverrides) -> Blob:
        out = copy.deepcopy(state)
        out["accounts"] = [a.to_genesis() for a in overrides.accounts]
        return out

    def validate_genesis(self, state: Blob) -> None:
        seen: dict[str, int] = {}
        for i, blob in enumerate(state.get("accounts") or []):
            try:
                addr = Account.from_genesis(blob).address.lower()
            except ValidationError as e:
                raise GenesisValidationError(f"auth: malformed account at position {i}: {e}") from e
            if addr in seen:
                raise DuplicateAccountError(f"duplicate genesis account {addr} at positions {seen[addr]} and {i}")
            seen[addr] = i


@register("staking")
class StakingModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {
            "params": {
                "unbonding_time": "1814400000000000",
                "max_validators": 100,
                "max_entries": 7,
                "historical_entries": 0,
                "bond_denom": "stake",
            },
            "last_total_power": "0",
            "last_validator_powers": None,
            "validators": None,
            "delegations": None,
            "unbonding_delegations": None,
            "redelegations": None,
            "exported": False,
        }

    def apply_overrides(self, state: Blob, overrides: GenesisOverrides) -> Blob:
        out = copy.deepcopy(state)
        out["params"]["bond_denom"] = overrides.denom
        return out

    def validate_genesis(self, state: Blob) -> None:
        if not state.get("params", {}).get("bond_denom"):
            raise GenesisValidationError("staking: bond_denom must not be empty")


@register("gov")
class GovModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {
            "starting_proposal_id": "1",
            "deposits": None,
            "votes": None,
            "proposals": None,
            "deposit_params": {
                "min_deposit": [{"denom": "stake", "amount": "10000000"}],
                "max_deposit_period": "172800000000000",
            },
            "voting_params": {"voting_period": "172800000000000"},
            "tally_params": {
                "quorum": dec_str("0.334"),
                "threshold": dec_str("0.5"),
                "veto": dec_str("0.334"),
            },
        }

    def apply_overrides(self, state: Blob, overrides: GenesisOverrides) -> Blob:
        out = copy.deepcopy(state)
        min_deposit = out["deposit_params"]["min_deposit"]
        if not min_deposit:
            raise GenesisValidationError("gov: min_deposit is empty, nothing to re-denominate")
        min_deposit[0]["denom"] = overrides.denom
        return out


@register("mint")
class MintModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {
            "minter": {"inflation": dec_str("0.13"), "annual_provisions": dec_str(0)},
            "params": {
                "mint_denom": "stake",
                "inflation_rate_change": dec_str("0.13"),
                "inflation_max": dec_str("0.2"),
                "inflation_min": dec_str("0.07"),
                "goal_bonded": dec_str("0.67"),
                "blocks_per_year": "6311520",
            },
        }

    def apply_overrides(self, state: Blob, overrides: GenesisOverrides) -> Blob:
        out = copy.deepcopy(state)
        out["params"]["mint_denom"] = overrides.denom
        return out


@register("crisis")
class CrisisModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {"constant_fee": {"denom": "stake", "amount": "1000"}}

    def apply_overrides(self, state: Blob, overrides: GenesisOverrides) -> Blob:
        out = copy.deepcopy(state)
        out["constant_fee"]["denom"] = overrides.denom
        return out


@register("genutil")
class GenutilModule(GenesisModule):
    """Holds the staged join-transactions. Filled by the collector, not the assembler."""

    def default_genesis(self) -> Blob:
        return {"gentxs": []}

    def validate_genesis(self, state: Blob) -> None:
        if not isinstance(state.get("gentxs"), list):
            raise GenesisValidationError("genutil: gentxs must be a list")


@register("faucet")
class FaucetModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {"enable_faucet": False}

    def validate_genesis(self, state: Blob) -> None:
        if not isinstance(state.get("enable_faucet"), bool):
            raise GenesisValidationError("faucet: enable_faucet must be a boolean")


@register("distribution")
class DistributionModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {
            "params": {
                "community_tax": dec_str("0.02"),
                "base_proposer_reward": dec_str("0.01"),
                "bonus_proposer_reward": dec_str("0.04"),
                "withdraw_addr_enabled": True,
            },
            "fee_pool": {"community_pool": []},
            "delegator_withdraw_infos": [],
            "previous_proposer": "",
            "outstanding_rewards": [],
            "validator_accumulated_commissions": [],
            "validator_historical_rewards": [],
            "validator_current_rewards": [],
            "delegator_starting_infos": [],
            "validator_slash_events": [],
        }


@register("slashing")
class SlashingModule(GenesisModule):
    def default_genesis(self) -> Blob:
        return {
            "params": {
                "signed_blocks_window": "100",
                "min_signed_per_window": dec_str("0.5"),
                "downtime_jail_duration": "600000000000",
                "slash_fraction_double_sign": dec_str("0.05"),
                "slash_fraction_downtime": dec_str("0.01"),
            },
            "signing_infos": {},
            "missed_blocks": {},
        }

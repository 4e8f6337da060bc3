"""testnetgen.core.models

Wire shapes for everything written to disk: accounts, join-transactions,
genesis documents.

Amounts and decimals are strings on the wire, as the chain expects them.
"""

from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

_MEMO_RE = re.compile(r"^[0-9a-f]{40}@\d{1,3}(\.\d{1,3}){3}:\d{1,5}$")


def canonical_json(data: Any) -> str:
    """Canonical JSON serialization used for signing and byte comparison."""

    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def dec_str(value: Decimal | int | str) -> str:
    """Render a fixed-point decimal with 18 fractional digits."""

    return f"{Decimal(value):.18f}"


class Coin(BaseModel):
    denom: str
    amount: str

    @field_validator("amount")
    @classmethod
    def amount_is_non_negative_integer(cls, v: str) -> str:
        if not v.isdigit():
            raise ValueError(f"coin amount must be a non-negative integer string, got {v!r}")
        return v

    @classmethod
    def of(cls, denom: str, amount: int) -> Coin:
        return cls(denom=denom, amount=str(amount))

    @property
    def value(self) -> int:
        return int(self.amount)


def sorted_coins(coins: list[Coin]) -> list[Coin]:
    """Coins sorted by denom. Duplicate denoms are a programming error."""

    denoms = [c.denom for c in coins]
    if len(set(denoms)) != len(denoms):
        raise ValueError(f"duplicate denominations: {denoms}")
    return sorted(coins, key=lambda c: c.denom)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class Account(BaseModel):
    """Genesis account with an EVM code hash."""

    address: str
    coins: list[Coin] = Field(default_factory=list)
    public_key: str = ""
    account_number: str = "0"
    sequence: str = "0"
    code_hash: str

    @field_validator("coins")
    @classmethod
    def coins_are_sorted_set(cls, v: list[Coin]) -> list[Coin]:
        return sorted_coins(v)

    def balance(self, denom: str) -> int:
        for c in self.coins:
            if c.denom == denom:
                return c.value
        return 0

    def to_genesis(self) -> dict[str, Any]:
        return {"type": "ethermint/EthAccount", "value": self.model_dump(mode="json")}

    @classmethod
    def from_genesis(cls, blob: dict[str, Any]) -> Account:
        return cls.model_validate(blob.get("value", blob))


# ---------------------------------------------------------------------------
# Join-transactions
# ---------------------------------------------------------------------------

class Description(BaseModel):
    moniker: str
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""


class CommissionRates(BaseModel):
    rate: str
    max_rate: str
    max_change_rate: str


class MsgCreateValidator(BaseModel):
    description: Description
    commission: CommissionRates
    min_self_delegation: str
    delegator_address: str
    validator_address: str
    pubkey: str  # base64 Ed25519 consensus key
    value: Coin


class MsgEnvelope(BaseModel):
    type: Literal["cosmos-sdk/MsgCreateValidator"] = "cosmos-sdk/MsgCreateValidator"
    value: MsgCreateValidator


class StdFee(BaseModel):
    amount: list[Coin] = Field(default_factory=list)
    gas: str = "0"


class StdSignature(BaseModel):
    signature: str  # base64 recoverable secp256k1


class StdTx(BaseModel):
    msg: list[MsgEnvelope]
    fee: StdFee = Field(default_factory=StdFee)
    signatures: list[StdSignature] = Field(default_factory=list)
    memo: str

    @field_validator("memo")
    @classmethod
    def memo_is_peer_address(cls, v: str) -> str:
        if not _MEMO_RE.match(v):
            raise ValueError(f"memo must be '<node_id>@<ip>:<port>', got {v!r}")
        return v


class JoinTransaction(BaseModel):
    """Self-signed create-validator transaction staged under `gentxs/`."""

    type: Literal["cosmos-sdk/StdTx"] = "cosmos-sdk/StdTx"
    value: StdTx

    @property
    def create_validator(self) -> MsgCreateValidator:
        return self.value.msg[0].value

    @property
    def memo(self) -> str:
        return self.value.memo

    @property
    def node_id(self) -> str:
        return self.value.memo.split("@", 1)[0]

    def sign_bytes(self, chain_id: str) -> bytes:
        """Bytes covered by the signature. Signatures themselves are excluded."""

        doc = {
            "account_number": "0",
            "chain_id": chain_id,
            "fee": self.value.fee.model_dump(mode="json"),
            "memo": self.value.memo,
            "msgs": [m.model_dump(mode="json") for m in self.value.msg],
            "sequence": "0",
        }
        return canonical_json(doc).encode("utf-8")


# ---------------------------------------------------------------------------
# Genesis
# ---------------------------------------------------------------------------

def default_consensus_params() -> dict[str, Any]:
    return {
        "block": {"max_bytes": "22020096", "max_gas": "-1", "time_iota_ms": "1000"},
        "evidence": {"max_age_num_blocks": "100000", "max_age_duration": "172800000000000"},
        "validator": {"pub_key_types": ["ed25519"]},
    }


class GenesisDocument(BaseModel):
    genesis_time: str
    chain_id: str
    consensus_params: dict[str, Any] = Field(default_factory=default_consensus_params)
    app_hash: str = ""
    app_state: dict[str, Any] = Field(default_factory=dict)
    validators: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("chain_id")
    @classmethod
    def chain_id_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("chain_id must not be empty")
        return v

    def to_bytes(self) -> bytes:
        """Deterministic on-disk encoding. Equal documents produce equal bytes."""

        text = json.dumps(self.model_dump(mode="json"), indent=2, sort_keys=True, ensure_ascii=False)
        return (text + "\n").encode("utf-8")

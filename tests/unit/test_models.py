from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from testnetgen.core.models import Account, Coin, GenesisDocument, canonical_json, dec_str, sorted_coins


def test_canonical_json_is_key_order_independent() -> None:
    assert canonical_json({"b": 1, "a": [2, {"d": 3, "c": 4}]}) == canonical_json({"a": [2, {"c": 4, "d": 3}], "b": 1})
    assert canonical_json({"a": 1}) == '{"a":1}'


def test_dec_str() -> None:
    assert dec_str(1) == "1.000000000000000000"
    assert dec_str("0.05") == "0.050000000000000000"


def test_coin_amount_must_be_integer_string() -> None:
    assert Coin.of("aphoton", 10).value == 10
    with pytest.raises(ValidationError):
        Coin(denom="aphoton", amount="-1")
    with pytest.raises(ValidationError):
        Coin(denom="aphoton", amount="1.5")


def test_sorted_coins_rejects_duplicate_denoms() -> None:
    with pytest.raises(ValueError):
        sorted_coins([Coin.of("a", 1), Coin.of("a", 2)])


def test_account_genesis_shape() -> None:
    acct = Account(address="0x" + "ab" * 20, coins=[Coin.of("stake", 1), Coin.of("aphoton", 2)], code_hash="00")
    blob = acct.to_genesis()
    assert blob["type"] == "ethermint/EthAccount"
    assert [c["denom"] for c in blob["value"]["coins"]] == ["aphoton", "stake"]
    assert Account.from_genesis(blob).balance("stake") == 1
    assert acct.balance("missing") == 0


def test_genesis_document_requires_chain_id() -> None:
    with pytest.raises(ValidationError):
        GenesisDocument(genesis_time="2024-01-01T00:00:00Z", chain_id=" ")


def test_genesis_document_bytes_are_deterministic() -> None:
    a = GenesisDocument(genesis_time="t", chain_id="1", app_state={"b": {}, "a": {"y": 1, "x": 2}})
    b = GenesisDocument(genesis_time="t", chain_id="1", app_state={"a": {"x": 2, "y": 1}, "b": {}})
    assert a.to_bytes() == b.to_bytes()
    assert a.to_bytes().endswith(b"\n")
    assert json.loads(a.to_bytes())["app_hash"] == ""

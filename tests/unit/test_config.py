from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from testnetgen import DEFAULT_KEY_PASS
from testnetgen.core.config import ChainParams, Config, LoggingConfig
from testnetgen.core.exceptions import ConfigError


def test_config_defaults_match_reference_values() -> None:
    c = Config()
    assert c.num_validators == 4
    assert c.output_dir == Path("./build")
    assert c.node_dir_prefix == "node"
    assert c.node_daemon_home == "ethermintd"
    assert c.node_cli_home == "ethermintcli"
    assert c.starting_ip_address == "192.168.0.1"
    assert c.chain_id == ""
    assert c.minimum_gas_prices == "0.000006aphoton"
    assert c.gentxs_dir == Path("./build") / "gentxs"
    assert c.keyring_password == DEFAULT_KEY_PASS


def test_config_loads_default_yaml(test_config: Config) -> None:
    assert test_config.chain.native_denom == "aphoton"
    assert test_config.chain.tokens(100) == 100 * 10**6
    assert test_config.logging.level == "INFO"


def test_config_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TESTNETGEN_NUM_VALIDATORS", "7")
    monkeypatch.setenv("TESTNETGEN_CHAIN__NATIVE_DENOM", "aevmos")
    c = Config()
    assert c.num_validators == 7
    assert c.chain.native_denom == "aevmos"


def test_config_yaml_overrides_win(temp_dir: Path) -> None:
    p = temp_dir / "c.yaml"
    p.write_text("num_validators: 3\nchain:\n  self_stake_power: 10\n", encoding="utf-8")
    c = Config.from_yaml(p, num_validators=5)
    assert c.num_validators == 5
    assert c.chain.self_stake_power == 10
    assert c.chain.native_denom == "aphoton"


def test_config_from_yaml_missing_file(temp_dir: Path) -> None:
    with pytest.raises(ConfigError):
        Config.from_yaml(temp_dir / "nope.yaml")


def test_config_from_yaml_rejects_non_mapping(temp_dir: Path) -> None:
    p = temp_dir / "c.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        Config.from_yaml(p)


def test_config_from_yaml_rejects_bad_yaml(temp_dir: Path) -> None:
    p = temp_dir / "c.yaml"
    p.write_text("a: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        Config.from_yaml(p)


@pytest.mark.parametrize(
    "field,value",
    [
        ("num_validators", 0),
        ("node_dir_prefix", "a/b"),
        ("node_cli_home", ".."),
        ("minimum_gas_prices", "cheap"),
        ("keyring_backend", "memory"),
    ],
)
def test_config_rejects_invalid_values(field: str, value: object) -> None:
    with pytest.raises(ValidationError):
        Config(**{field: value})


def test_chain_params_self_stake_must_fit_balance() -> None:
    with pytest.raises(ValidationError):
        ChainParams(account_native_power=10, self_stake_power=11)


def test_chain_params_rejects_bad_denom() -> None:
    with pytest.raises(ValidationError):
        ChainParams(native_denom="1x")


def test_logging_level_is_normalised() -> None:
    assert LoggingConfig(level="debug").level == "DEBUG"
    assert Config(logging={"level": "warning"}).logging.level == "WARNING"


def test_logging_level_rejects_unknown_name() -> None:
    with pytest.raises(ValidationError, match="unknown log level"):
        LoggingConfig(level="LOUD")

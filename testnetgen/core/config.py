"""testnetgen.core.config

Three config surfaces only, highest precedence first:
1) Command line flags
2) A YAML file (`--config`, see `config/default.yaml`)
3) Environment variables (`TESTNETGEN_*`, nested with `__`)

Everything else is derived.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from testnetgen import DEFAULT_KEY_PASS
from testnetgen.core.exceptions import ConfigError

_GAS_PRICE_RE = re.compile(r"^\d+(\.\d+)?[a-zA-Z][a-zA-Z0-9/]{2,127}$")


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class ChainParams(BaseModel):
    """Token economics stamped into genesis. One native denom for everything that matters."""

    native_denom: str = "aphoton"
    bond_denom: str = "stake"
    power_reduction: int = 10**6
    account_bond_power: int = 1000
    account_native_power: int = 5000
    self_stake_power: int = 100

    @field_validator("native_denom", "bond_denom")
    @classmethod
    def denom_must_be_valid(cls, v: str) -> str:
        if not re.fullmatch(r"[a-zA-Z][a-zA-Z0-9/]{2,127}", v):
            raise ValueError(f"invalid denom: {v!r}")
        return v

    @field_validator("self_stake_power")
    @classmethod
    def self_stake_fits_balance(cls, v: int, info) -> int:
        if v <= 0:
            raise ValueError("self_stake_power must be >= 1")
        native = int(info.data.get("account_native_power", 0))
        if v > native:
            raise ValueError(f"self_stake_power {v} exceeds account_native_power {native}")
        return v

    def tokens(self, power: int) -> int:
        return power * self.power_reduction


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level: {v!r}")
        return level


class Config(BaseSettings):
    """Root configuration for one bootstrap run."""

    num_validators: int = 4
    output_dir: Path = Path("./build")
    node_dir_prefix: str = "node"
    node_daemon_home: str = "ethermintd"
    node_cli_home: str = "ethermintcli"
    starting_ip_address: str = "192.168.0.1"  # empty: auto-detect
    chain_id: str = ""  # empty: random
    minimum_gas_prices: str = "0.000006aphoton"
    keyring_backend: Literal["os", "file", "test"] = "file"
    keyring_password: str = DEFAULT_KEY_PASS

    chain: ChainParams = Field(default_factory=ChainParams)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "TESTNETGEN_", "env_nested_delimiter": "__"}

    @field_validator("num_validators")
    @classmethod
    def at_least_one_validator(cls, v: int) -> int:
        if v < 1:
            raise ValueError("num_validators must be >= 1")
        return v

    @field_validator("node_dir_prefix", "node_daemon_home", "node_cli_home")
    @classmethod
    def plain_directory_name(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError(f"must be a plain directory name, got {v!r}")
        return v

    @field_validator("minimum_gas_prices")
    @classmethod
    def gas_prices_format(cls, v: str) -> str:
        v = v.strip()
        if not v:
            return v
        for part in v.split(","):
            if not _GAS_PRICE_RE.match(part.strip()):
                raise ValueError(f"invalid minimum gas price: {part!r}")
        return v

    @property
    def gentxs_dir(self) -> Path:
        return self.output_dir / "gentxs"

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        return cls(**_deep_merge(raw, overrides))

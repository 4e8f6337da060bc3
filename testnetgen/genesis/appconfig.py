"""testnetgen.genesis.appconfig

Per-node `app.toml` and `config.toml`.

Rendered from templates, like the daemon does itself. Only the handful of
values a testnet needs are set; the daemon fills in the rest on first start.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

from testnetgen import DEFAULT_P2P_PORT, DEFAULT_RPC_LADDR
from testnetgen.core.exceptions import SerializationError
from testnetgen.core.fsutil import write_atomic

_APP_TOML = """\
# This is a TOML config file.
# For more information, see https://github.com/toml-lang/toml

##### main base config options #####

# The minimum gas prices a validator is willing to accept for processing a
# transaction. A transaction's fees must meet the minimum of any denomination
# specified in this config (e.g. 0.25token1;0.0001token2).
minimum-gas-prices = {minimum_gas_prices}

# HaltHeight contains a non-zero block height at which a node will gracefully
# halt and shutdown that can be used to assist upgrades and testing.
halt-height = 0

# HaltTime contains a non-zero minimum block time (in Unix seconds) at which
# a node will gracefully halt and shutdown that can be used to assist upgrades
# and testing.
halt-time = 0

# InterBlockCache enables inter-block caching.
inter-block-cache = true
"""

_CONFIG_TOML = """\
# This is a TOML config file.
# For more information, see https://github.com/toml-lang/toml

# A custom human readable name for this node
moniker = {moniker}

##### rpc server configuration options #####
[rpc]

# TCP or UNIX socket address for the RPC server to listen on
laddr = {rpc_laddr}

##### peer to peer configuration options #####
[p2p]

# Address to listen for incoming connections
laddr = {p2p_laddr}

# Comma separated list of nodes to keep persistent connections to
persistent_peers = {persistent_peers}

# Set true for strict address routability rules
# Set false for private or local networks
addr_book_strict = false

# Toggle to disable guard against peers connecting from the same ip.
allow_duplicate_ip = true
"""


def _toml_str(v: str) -> str:
    # A JSON string literal is a valid TOML basic string.
    return json.dumps(v)


def _write(path: Path, text: str) -> None:
    try:
        write_atomic(path, text.encode("utf-8"))
    except OSError as e:
        raise SerializationError(f"{path}: failed to write config: {e}") from e


def write_app_toml(path: Path, *, minimum_gas_prices: str) -> None:
    _write(path, _APP_TOML.format(minimum_gas_prices=_toml_str(minimum_gas_prices)))


def persistent_peers(memos: Sequence[str], own_node_id: str) -> str:
    """Every other node's `id@ip:port`, sorted, comma-joined."""

    return ",".join(sorted(m for m in memos if not m.startswith(f"{own_node_id}@")))


def write_config_toml(path: Path, *, moniker: str, peers: str) -> None:
    text = _CONFIG_TOML.format(
        moniker=_toml_str(moniker),
        rpc_laddr=_toml_str(DEFAULT_RPC_LADDR),
        p2p_laddr=_toml_str(f"tcp://0.0.0.0:{DEFAULT_P2P_PORT}"),
        persistent_peers=_toml_str(peers),
    )
    _write(path, text)

"""testnetgen: multi-node testnet bootstrap.

One chain id, N nodes, one genesis. Every node must agree on the first block
or none of them will ever see a second one.
"""

from __future__ import annotations

__all__ = [
    "__version__",
    "DEFAULT_P2P_PORT",
    "DEFAULT_RPC_LADDR",
    "DEFAULT_KEY_PASS",
]

__version__ = "0.1.0"

# Tendermint defaults. Peer memos embed the p2p port; nodes never negotiate it.
DEFAULT_P2P_PORT = 26656
DEFAULT_RPC_LADDR = "tcp://0.0.0.0:26657"

# Shared keyring passphrase for generated testnet accounts.
DEFAULT_KEY_PASS = "12345678"

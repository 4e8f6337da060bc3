"""testnetgen.core

Core primitives.

If a module needs to exist, it should probably depend only on this package.
"""

from .config import ChainParams, Config, LoggingConfig
from .exceptions import TestnetgenError
from .models import Account, Coin, GenesisDocument, JoinTransaction, canonical_json
from .time import format_genesis_time, utc_now
from .types import NodeAccount, NodeIdentity

__all__ = [
    "Account",
    "ChainParams",
    "Coin",
    "Config",
    "GenesisDocument",
    "JoinTransaction",
    "LoggingConfig",
    "NodeAccount",
    "NodeIdentity",
    "TestnetgenError",
    "canonical_json",
    "format_genesis_time",
    "utc_now",
]

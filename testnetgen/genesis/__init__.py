"""testnetgen.genesis

Draft -> stage -> collect.

- modules: registry of genesis modules and their defaults
- assembler: draft app state written identically to every node
- gentx: self-signed create-validator transactions
- collector: one canonical genesis, copied to every node
"""

from testnetgen.genesis.assembler import assemble_app_state, write_draft_genesis
from testnetgen.genesis.collector import apply_gentxs, derive_canonical_genesis, publish_genesis, read_genesis
from testnetgen.genesis.gentx import build_create_validator, read_gentxs, sign_gentx, verify_gentx, write_gentx
from testnetgen.genesis.modules import GenesisModule, GenesisOverrides, get_module, list_modules, register

__all__ = [
    "GenesisModule",
    "GenesisOverrides",
    "apply_gentxs",
    "assemble_app_state",
    "build_create_validator",
    "derive_canonical_genesis",
    "get_module",
    "list_modules",
    "publish_genesis",
    "read_genesis",
    "read_gentxs",
    "register",
    "sign_gentx",
    "verify_gentx",
    "write_draft_genesis",
    "write_gentx",
]

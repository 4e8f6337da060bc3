"""testnetgen.security

Key material for generated nodes.

- identity: Ed25519 node + validator keys (Tendermint format)
- keystore: per-node account keyring (test / file / os)
- redaction: keep secrets out of logs
"""

from testnetgen.security.identity import Ed25519Keypair, init_validator_files, node_id_from_pubkey
from testnetgen.security.keystore import Keyring, KeyringBackend, recover_signer
from testnetgen.security.redaction import redact_secrets, sanitize_for_log

__all__ = [
    "Ed25519Keypair",
    "init_validator_files",
    "node_id_from_pubkey",
    "Keyring",
    "KeyringBackend",
    "recover_signer",
    "redact_secrets",
    "sanitize_for_log",
]

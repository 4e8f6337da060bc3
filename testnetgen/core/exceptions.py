"""testnetgen.core.exceptions

Errors are part of the interface.

Every error raised during bootstrap is fatal to the run. The only local
recovery is removing the output directory.
"""

from __future__ import annotations


class TestnetgenError(Exception):
    """Base exception for testnetgen."""

    __test__ = False  # not a pytest test class


class ConfigError(TestnetgenError):
    """Configuration is missing, invalid, or inconsistent."""


class DirectoryCreationError(TestnetgenError):
    """A node, client, or staging directory could not be created."""


class InvalidAddressError(TestnetgenError):
    """An IP address could not be parsed or resolved."""


class KeystoreError(TestnetgenError):
    """Key generation, lookup, or export failed."""


class SigningError(KeystoreError):
    """A join-transaction could not be signed."""


class SerializationError(TestnetgenError):
    """Genesis or transaction payloads could not be encoded or decoded."""


class GenesisMarshalError(SerializationError):
    """A module genesis fragment does not survive a JSON round-trip."""


class GenesisError(TestnetgenError):
    """Genesis document failures."""


class GenesisReadError(GenesisError):
    """A node's genesis file is missing, unreadable, or inconsistent."""


class GenesisWriteError(GenesisError):
    """A node's genesis file could not be written."""


class GenesisValidationError(GenesisError):
    """Genesis state violates a module invariant."""


class DuplicateAccountError(GenesisValidationError):
    """Two genesis accounts share an address."""


class GentxValidationError(GenesisValidationError):
    """A staged join-transaction cannot be applied to the draft state."""


class RollbackError(TestnetgenError):
    """Output directory removal failed. Logged, never raised to callers."""


class BootstrapCancelled(TestnetgenError):
    """The run was cancelled between node iterations."""

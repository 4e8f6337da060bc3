"""testnetgen.security.keystore

Per-node account keyring with three backends:
- test: plaintext JSON records (throwaway testnets only)
- file: Fernet-encrypted records, key derived from a passphrase (PBKDF2)
- os: system keyring via `keyring` (optional)

Every node owns one keyring under its client home. Accounts are secp256k1
keys with a BIP-39 recovery phrase; signatures are recoverable, so the signer
address is all a verifier needs.
"""

from __future__ import annotations

import base64
import contextlib
import json
import os
from enum import StrEnum
from pathlib import Path
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from eth_account import Account as EthAccount
from eth_account.messages import encode_defunct

from testnetgen import DEFAULT_KEY_PASS
from testnetgen.core.exceptions import KeystoreError, SigningError
from testnetgen.core.time import utc_now


class KeyringBackend(StrEnum):
    OS = "os"
    FILE = "file"
    TEST = "test"


_ITERATIONS = 480_000
_SALT_SIZE = 32
_SERVICE_NAME = "testnetgen"


def _derive_fernet_key(password: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))


class _TestBackend:
    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.info"

    def get(self, name: str) -> str:
        p = self._path(name)
        if not p.exists():
            raise KeyError(name)
        return p.read_text(encoding="utf-8")

    def set(self, name: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(name).write_text(value, encoding="utf-8")
        with contextlib.suppress(OSError):
            os.chmod(self._path(name), 0o600)

    def list_keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.info"))

    def has(self, name: str) -> bool:
        return self._path(name).exists()


class _EncryptedFileBackend(_TestBackend):
    def __init__(self, directory: Path, *, password: str):
        super().__init__(directory)
        self.salt_path = self.directory / "keyring.salt"
        self._password = password
        self._f: Fernet | None = None

    def _get_or_create_salt(self) -> bytes:
        if self.salt_path.exists():
            return self.salt_path.read_bytes()
        self.directory.mkdir(parents=True, exist_ok=True)
        with contextlib.suppress(OSError):
            os.chmod(self.directory, 0o700)
        salt = os.urandom(_SALT_SIZE)
        self.salt_path.write_bytes(salt)
        with contextlib.suppress(OSError):
            os.chmod(self.salt_path, 0o600)
        return salt

    def _fernet(self) -> Fernet:
        if self._f is None:
            self._f = Fernet(_derive_fernet_key(self._password, self._get_or_create_salt()))
        return self._f

    def get(self, name: str) -> str:
        encrypted = super().get(name)
        try:
            return self._fernet().decrypt(encrypted.encode("ascii")).decode("utf-8")
        except InvalidToken as e:
            raise ValueError("Invalid password or corrupted keyring entry") from e

    def set(self, name: str, value: str) -> None:
        token = self._fernet().encrypt(value.encode("utf-8"))
        super().set(name, token.decode("ascii"))


class _OsKeyringBackend:
    def __init__(self, *, service_name: str):
        try:
            import keyring
        except Exception as e:  # pragma: no cover
            raise RuntimeError("keyring library not installed (pip install testnetgen[os-keyring])") from e

        self.keyring = keyring
        self.service_name = service_name
        self.registry_key = "__keyring_registry__"

        backend = keyring.get_keyring()
        name = type(backend).__name__.lower()
        if "fail" in name or "null" in name:
            raise RuntimeError("No usable keyring backend available")

    def _load_registry(self) -> list[str]:
        data = self.keyring.get_password(self.service_name, self.registry_key)
        return json.loads(data) if data else []

    def get(self, name: str) -> str:
        v = self.keyring.get_password(self.service_name, name)
        if v is None:
            raise KeyError(name)
        return v

    def set(self, name: str, value: str) -> None:
        self.keyring.set_password(self.service_name, name, value)
        keys = self._load_registry()
        if name not in keys:
            keys.append(name)
            self.keyring.set_password(self.service_name, self.registry_key, json.dumps(sorted(keys)))

    def list_keys(self) -> list[str]:
        return self._load_registry()

    def has(self, name: str) -> bool:
        return self.keyring.get_password(self.service_name, name) is not None


class Keyring:
    """Account keystore for one node.

    Create, sign, export. Nothing else leaves this class with a private key in it.
    """

    def __init__(
        self,
        backend: KeyringBackend | str,
        directory: Path,
        *,
        password: str = DEFAULT_KEY_PASS,
    ):
        self.backend = KeyringBackend(backend)
        self.directory = Path(directory)

        try:
            if self.backend == KeyringBackend.TEST:
                self._store: Any = _TestBackend(self.directory / "keyring-test")
            elif self.backend == KeyringBackend.FILE:
                self._store = _EncryptedFileBackend(self.directory / "keyring-file", password=password)
            else:
                service = f"{_SERVICE_NAME}:{self.directory.resolve()}"
                self._store = _OsKeyringBackend(service_name=service)
        except RuntimeError as e:
            raise KeystoreError(f"keyring backend {self.backend.value!r} unavailable: {e}") from e

    def describe(self) -> str:
        return f"Keyring(backend={self.backend.value}, dir={self.directory})"

    def create_account(self, name: str) -> tuple[str, str]:
        """Create and persist a new account. Returns (address, recovery phrase)."""

        try:
            if self._store.has(name):
                raise KeystoreError(f"key already exists: {name}")
            EthAccount.enable_unaudited_hdwallet_features()
            acct, mnemonic = EthAccount.create_with_mnemonic()
            record = {
                "name": name,
                "address": acct.address,
                "private_key": bytes(acct.key).hex(),
                "created_at": utc_now().isoformat(),
            }
            self._store.set(name, json.dumps(record, sort_keys=True))
        except KeystoreError:
            raise
        except Exception as e:
            raise KeystoreError(f"failed to create account {name!r} in {self.directory}: {e}") from e
        return acct.address, mnemonic

    def address(self, name: str) -> str:
        return str(self._record(name)["address"])

    def sign(self, name: str, payload: bytes) -> bytes:
        """Sign `payload` with the named account. Returns a 65-byte recoverable signature."""

        try:
            record = self._record(name)
            signed = EthAccount.sign_message(
                encode_defunct(primitive=payload),
                private_key=bytes.fromhex(record["private_key"]),
            )
        except Exception as e:
            raise SigningError(f"failed to sign with {name!r}: {e}") from e
        return bytes(signed.signature)

    def export(self, name: str, passphrase: str) -> dict[str, Any]:
        """Export the account as a Web3 v3 keystore JSON document."""

        record = self._record(name)
        try:
            return dict(EthAccount.encrypt(bytes.fromhex(record["private_key"]), passphrase))
        except Exception as e:
            raise KeystoreError(f"failed to export {name!r}: {e}") from e

    def list_keys(self) -> list[str]:
        return self._store.list_keys()

    def _record(self, name: str) -> dict[str, Any]:
        try:
            return json.loads(self._store.get(name))
        except KeyError as e:
            raise KeystoreError(f"key not found: {name}") from e
        except ValueError as e:
            raise KeystoreError(f"unreadable key {name!r}: {e}") from e


def recover_signer(payload: bytes, signature: bytes) -> str:
    """Address that produced `signature` over `payload`."""

    return EthAccount.recover_message(encode_defunct(primitive=payload), signature=signature)

"""testnetgen.security.redaction

Secret redaction helpers.

Recovery phrases and private keys are written to disk on purpose. They must
never reach a log line.
"""

from __future__ import annotations

import copy
import re
from typing import Any

_REDACTION_PATTERNS: list[tuple[str, str]] = [
    # Generic key/value
    (r"(?i)(secret|password|passphrase|mnemonic)\s*[:=]\s*[^\s\"']+", "[REDACTED]"),
    # Private key hex, with or without 0x
    (r"\b(0x)?[a-fA-F0-9]{64}\b", "[REDACTED]"),
    # BIP-39 style phrases: 12 to 24 lowercase words
    (r"\b(?:[a-z]{3,8} ){11,23}[a-z]{3,8}\b", "[REDACTED]"),
]

_SENSITIVE_FIELD_NAMES = {
    "secret",
    "password",
    "passphrase",
    "private_key",
    "priv_key",
    "seed",
    "mnemonic",
    "keyring_password",
}


def redact_secrets(text: str) -> str:
    out = text
    for pattern, repl in _REDACTION_PATTERNS:
        out = re.sub(pattern, repl, out)
    return out


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """Deep-copy and redact sensitive fields + embedded secrets."""

    def _walk(obj: Any) -> Any:
        if isinstance(obj, dict):
            new: dict[str, Any] = {}
            for k, v in obj.items():
                if str(k).lower() in _SENSITIVE_FIELD_NAMES:
                    new[k] = "[REDACTED]"
                else:
                    new[k] = _walk(v)
            return new
        if isinstance(obj, (list, tuple)):
            return [_walk(v) for v in obj]
        if isinstance(obj, str):
            return redact_secrets(obj)
        return obj

    return _walk(copy.deepcopy(data))

from __future__ import annotations

from testnetgen.security.redaction import redact_secrets, sanitize_for_log

PHRASE = "abandon ability able about above absent absorb abstract absurd abuse access accident"


def test_redact_secrets_patterns() -> None:
    s = "password=hunter2 key=0x" + "ab" * 32
    out = redact_secrets(s)
    assert "hunter2" not in out
    assert "ab" * 32 not in out


def test_redact_recovery_phrase() -> None:
    out = redact_secrets(f"phrase: {PHRASE}")
    assert "abandon ability" not in out


def test_node_ids_are_not_redacted() -> None:
    node_id = "a" * 40
    assert redact_secrets(f"{node_id}@10.0.0.1:26656") == f"{node_id}@10.0.0.1:26656"


def test_sanitize_for_log_nested() -> None:
    data = {"secret": PHRASE, "moniker": "node0", "nested": {"private_key": "x", "note": f"seed {PHRASE}"}}
    out = sanitize_for_log(data)
    assert out["secret"] == "[REDACTED]"
    assert out["moniker"] == "node0"
    assert out["nested"]["private_key"] == "[REDACTED]"
    assert "abandon" not in out["nested"]["note"]
    assert data["secret"] == PHRASE

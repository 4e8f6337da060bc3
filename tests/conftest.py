from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# uv/pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from testnetgen.core.config import Config  # noqa: E402


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config fixture writing into a temp directory with the plaintext keyring."""

    c = Config.from_yaml(REPO_ROOT / "config" / "default.yaml")
    return c.model_copy(
        update={
            "output_dir": temp_dir / "build",
            "keyring_backend": "test",
            "num_validators": 2,
            "starting_ip_address": "10.0.0.1",
        }
    )


@pytest.fixture()
def restore_logger() -> Iterator[logging.Logger]:
    """Undo handler changes made by `configure_logging`."""

    lg = logging.getLogger("testnetgen")
    handlers, level, propagate = lg.handlers[:], lg.level, lg.propagate
    yield lg
    lg.handlers[:] = handlers
    lg.setLevel(level)
    lg.propagate = propagate

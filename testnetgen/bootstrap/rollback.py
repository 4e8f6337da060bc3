"""testnetgen.bootstrap.rollback

All-or-nothing: a failed run leaves no output behind.

Rollback itself never fails loudly. A directory that could not be removed is
logged and the original error is what the caller sees.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from testnetgen.core.exceptions import RollbackError

logger = logging.getLogger(__name__)


def _remove_tree(path: Path) -> None:
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
        else:
            shutil.rmtree(path)
    except FileNotFoundError:
        return
    except OSError as e:
        raise RollbackError(f"{path}: {e}") from e


def rollback(output_dir: Path) -> bool:
    """Remove `output_dir`. Idempotent. Returns False if anything was left behind."""

    if not output_dir.exists() and not output_dir.is_symlink():
        return True

    try:
        _remove_tree(output_dir)
    except RollbackError as e:
        logger.error("rollback_failed", extra={"path": str(output_dir), "error": str(e)})
        return False

    logger.warning("rollback_complete", extra={"path": str(output_dir)})
    return True

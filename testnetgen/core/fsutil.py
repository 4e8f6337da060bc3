"""testnetgen.core.fsutil

File writes used for every artifact. A reader either sees the old file or
the new one, never half of either.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

DIR_PERM = 0o755
FILE_PERM = 0o644
SECRET_PERM = 0o600


def ensure_dir(path: Path, mode: int = DIR_PERM) -> Path:
    path.mkdir(parents=True, exist_ok=True, mode=mode)
    return path


def write_atomic(path: Path, data: bytes, *, mode: int = FILE_PERM) -> None:
    """Write `data` to a sibling temp file, then rename over `path`."""

    ensure_dir(path.parent)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise

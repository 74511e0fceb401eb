"""File I/O helpers for atomic document and record writes."""

import os
import tempfile
from contextlib import suppress
from pathlib import Path

from sidecards.utils.logging import get_logger

logger = get_logger(__name__)


def atomic_write_text(path: str | Path, text: str, encoding: str = "utf-8") -> None:
    """Write text so the target is never observed half-written.

    The content goes to a temporary file in the target's directory, is
    fsynced, then renamed over the target (rename is atomic on one
    filesystem). The parent directory is created when missing.

    Raises:
        OSError: If any step fails; the temporary file is removed.
    """
    path = Path(path)
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_name = tempfile.mkstemp(
        dir=parent, prefix=f".tmp_{path.name}_", text=True
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(temp_fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        temp_path.replace(path)
    except OSError as e:
        with suppress(OSError):
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise


def create_exclusive_text(path: str | Path, text: str, encoding: str = "utf-8") -> None:
    """Create a new file with the given text, failing if it already exists.

    Raises:
        FileExistsError: If the file exists.
        OSError: For any other failure.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "x", encoding=encoding, newline="") as f:
        try:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        except OSError:
            with suppress(OSError):
                path.unlink()
            raise

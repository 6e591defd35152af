"""Lock manager for machine index concurrency control.

Provides OS advisory file locks (``fcntl.flock``) in two flavours:

- the index lock: blocking, held around every reload or reload+persist
  of the index file so that reads and writes of different processes
  never interleave
- record locks: non-blocking, held for as long as a machine is checked
  out; a second holder is refused immediately instead of waiting

flock locks belong to an open file description, so two handles on the
same lock file conflict even inside one process.
"""

import contextlib
import fcntl
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from ..constants import LOCK_SUFFIX

logger = logging.getLogger(__name__)


class LockHandle:
    """Exclusive advisory lock on a single lock file.

    The lock file is created on first use and left in place after
    release. Only its lock state matters, never its content.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._fd: int | None = None

    def __repr__(self) -> str:
        return f"LockHandle({str(self.path)!r}, locked={self.locked})"

    @property
    def locked(self) -> bool:
        """True while this handle holds the lock."""
        return self._fd is not None

    def _open(self) -> int:
        return os.open(str(self.path), os.O_RDWR | os.O_CREAT, 0o644)

    def try_acquire(self) -> bool:
        """Try to take the lock without waiting.

        Returns:
            True if the lock is now held, False if someone else holds it

        Raises:
            OSError: If the lock file cannot be opened or locked
        """
        if self._fd is not None:
            return True

        fd = self._open()
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            logger.debug(f"Lock busy: {self.path}")
            return False
        except OSError:
            os.close(fd)
            raise

        self._fd = fd
        logger.debug(f"Lock acquired: {self.path}")
        return True

    def acquire(self) -> None:
        """Take the lock, waiting as long as another holder keeps it."""
        if self._fd is not None:
            return

        fd = self._open()
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError:
            os.close(fd)
            raise

        self._fd = fd

    def release(self) -> None:
        """Drop the lock. Safe to call when not held."""
        fd, self._fd = self._fd, None
        if fd is None:
            return
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)
        logger.debug(f"Lock released: {self.path}")

    def __enter__(self) -> "LockHandle":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


def record_lock_path(data_dir: Path, record_id: str) -> Path:
    """Get path to the lock file of a record."""
    return data_dir / f"{record_id}{LOCK_SUFFIX}"


def index_lock_path(index_file: Path) -> Path:
    """Get path to the lock file guarding the index file."""
    return index_file.with_name(index_file.name + LOCK_SUFFIX)


def try_lock(path: Path) -> LockHandle | None:
    """Try to lock a file without blocking.

    Args:
        path: Lock file path

    Returns:
        Held LockHandle, or None if the lock is taken
    """
    handle = LockHandle(path)
    if handle.try_acquire():
        return handle
    return None


@contextlib.contextmanager
def index_lock(index_file: Path) -> Iterator[LockHandle]:
    """Hold the blocking lock on the index file for the body of the block.

    Args:
        index_file: Path to the index file (not its lock file)
    """
    with LockHandle(index_lock_path(index_file)) as handle:
        yield handle

"""Advisory file locks shared between processes writing the same identity."""

import fcntl
import os
from pathlib import Path


class FileLock:
    """
    Exclusive ``flock(2)`` lock on a lockfile, held for the ``with`` block.

    Acquisition blocks without a timeout. The lock is released and the
    descriptor closed on every exit path, including exceptions.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._fd: int | None = None

    def __enter__(self) -> "FileLock":
        self.lock()
        return self

    def __exit__(self, exc_type, value, traceback):
        self.unlock()

    @property
    def locked(self) -> bool:
        return self._fd is not None

    def lock(self) -> None:
        """Open (creating if needed) the lockfile and lock it exclusively."""
        fd = os.open(self.path, os.O_RDWR | os.O_CREAT | os.O_CLOEXEC, 0o644)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except BaseException:
            os.close(fd)
            raise
        self._fd = fd

    def unlock(self) -> None:
        """Release the lock. Safe to call when not locked."""
        if self._fd is None:
            return

        fd, self._fd = self._fd, None
        try:
            fcntl.flock(fd, fcntl.LOCK_UN)
        finally:
            os.close(fd)

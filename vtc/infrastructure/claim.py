import os
import threading
from pathlib import Path
from typing import Set
from vtc.domain.interfaces import ExclusiveClaim


class FileClaim(ExclusiveClaim):
    """Lock files created with O_CREAT | O_EXCL.

    Existence of the (empty) file is the claim; its content is never read.
    """

    def acquire(self, key: Path) -> bool:
        try:
            fd = os.open(str(key), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return False
        os.close(fd)
        return True

    def release(self, key: Path) -> None:
        Path(key).unlink(missing_ok=True)

    def is_held(self, key: Path) -> bool:
        return Path(key).exists()


class InMemoryClaim(ExclusiveClaim):
    """Process-local claim registry; lets the lock protocol run without a filesystem."""

    def __init__(self):
        self._held: Set[Path] = set()
        self._lock = threading.Lock()

    def acquire(self, key: Path) -> bool:
        with self._lock:
            if key in self._held:
                return False
            self._held.add(key)
            return True

    def release(self, key: Path) -> None:
        with self._lock:
            self._held.discard(key)

    def is_held(self, key: Path) -> bool:
        with self._lock:
            return key in self._held

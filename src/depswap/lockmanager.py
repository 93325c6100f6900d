import hashlib
import logging
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from depswap.common_utils import safe_print
from depswap.i18n import _

logger = logging.getLogger(__name__)


class ManifestLockManager:
    """Process-safe locking so only one install touches a manifest at a time."""

    def __init__(self, lock_dir):
        self.lock_dir = Path(lock_dir)
        self.lock_dir.mkdir(parents=True, exist_ok=True)

    def lock_path_for(self, manifest_location) -> Path:
        digest = hashlib.sha256(str(Path(manifest_location).resolve()).encode()).hexdigest()[:16]
        return self.lock_dir / f"manifest-{digest}.lock"

    @contextmanager
    def acquire_lock(self, manifest_location, timeout: float = 300.0):
        """
        Hold an exclusive lock for ``manifest_location``.

        Args:
            manifest_location: Manifest file the critical section will swap
            timeout: Max seconds to wait for lock
        """
        lock = FileLock(str(self.lock_path_for(manifest_location)))
        try:
            lock.acquire(timeout=0)
        except Timeout:
            safe_print(_("⏳ Waiting for another install of {}...").format(manifest_location))
            try:
                lock.acquire(timeout=timeout)
            except Timeout:
                raise TimeoutError(
                    f"Failed to acquire install lock for {manifest_location} after {timeout}s"
                )
        logger.debug("locked %s", manifest_location)
        try:
            yield  # Critical section runs here
        finally:
            lock.release()

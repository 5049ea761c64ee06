# warehouse_manager/core/locking.py
from contextlib import contextmanager
from typing import Iterator, List, Optional
import threading
import time
import weakref
import logging

from warehouse_manager.config.settings import settings
from warehouse_manager.core.exceptions import ContentionError

logger = logging.getLogger(__name__)


class WarehouseLocks:
    """Process-wide registry of per-warehouse exclusive sections.

    Sections are always acquired in ascending warehouse id, whatever role
    the warehouse plays in the operation, so two operations touching the
    same pair of warehouses can never wait on each other in a cycle.
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        # An entry lives only while some thread holds or waits on its lock
        self._locks: "weakref.WeakValueDictionary[int, threading.Lock]" = weakref.WeakValueDictionary()

    def in_use(self) -> int:
        """Number of warehouses whose section is held or awaited"""
        with self._registry_lock:
            return len(self._locks)

    def _lock_for(self, warehouse_id: int) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(warehouse_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[warehouse_id] = lock
            return lock

    @staticmethod
    def ordered(*warehouse_ids: int) -> List[int]:
        return sorted(set(warehouse_ids))

    @contextmanager
    def hold(self, *warehouse_ids: int, timeout: Optional[float] = None) -> Iterator[List[int]]:
        """Hold the sections of every given warehouse for the ``with`` body.

        The whole acquisition shares one deadline; if it passes, the sections
        already taken are released and ``ContentionError`` is raised.
        """
        if timeout is None:
            timeout = settings.lock_timeout_seconds

        order = self.ordered(*warehouse_ids)
        deadline = time.monotonic() + timeout
        acquired: List[threading.Lock] = []

        try:
            for warehouse_id in order:
                lock = self._lock_for(warehouse_id)
                remaining = max(0.0, deadline - time.monotonic())
                if not lock.acquire(timeout=remaining):
                    logger.warning(
                        f"Timed out after {timeout:.2f}s waiting for warehouse {warehouse_id} "
                        f"(sections requested: {order})"
                    )
                    raise ContentionError(
                        "Warehouse is busy with another operation, please retry",
                        details={"warehouse_id": warehouse_id, "timeout_seconds": timeout}
                    )
                acquired.append(lock)

            yield order
        finally:
            for lock in reversed(acquired):
                lock.release()


warehouse_locks = WarehouseLocks()

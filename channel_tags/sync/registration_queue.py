"""
Thread-safe single-slot queue for pending registration snapshots.
"""

import threading
from typing import List, Optional


class RegistrationQueue:
    """
    A thread-safe queue that keeps only the latest pending tag snapshot.

    A registration update always carries the full tag set, so a newer
    snapshot supersedes any older one that has not been sent yet. Producers
    never block; the sync thread atomically takes whatever is pending.

    Usage:
        queue = RegistrationQueue()

        # Registry side (fire-and-forget)
        queue.put(["a", "b"])

        # Sync thread
        if queue.wait_for_pending(timeout=1.0):
            tags = queue.take()  # Slot is now empty
    """

    def __init__(self):
        self._pending: Optional[List[str]] = None
        self._lock = threading.Lock()

        # Set while a snapshot is waiting
        self._pending_event = threading.Event()

        self._shutdown = False
        self._puts = 0
        self._coalesced = 0

    def put(self, tags: List[str]) -> None:
        """
        Offer a snapshot, replacing any snapshot still pending. Thread-safe.

        Args:
            tags: Full ordered tag set to register
        """
        with self._lock:
            if self._pending is not None:
                self._coalesced += 1
            self._pending = list(tags)
            self._puts += 1
            self._pending_event.set()

    def offer_retry(self, tags: List[str]) -> bool:
        """
        Re-queue a snapshot that failed to sync, unless a newer one arrived.

        Returns:
            True if the snapshot was re-queued
        """
        with self._lock:
            if self._pending is not None:
                return False
            self._pending = list(tags)
            self._pending_event.set()
            return True

    def take(self) -> Optional[List[str]]:
        """
        Atomically remove and return the pending snapshot.

        Returns:
            The pending snapshot, or None if nothing is waiting
        """
        with self._lock:
            tags = self._pending
            self._pending = None
            self._pending_event.clear()
            return tags

    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until a snapshot is pending or shutdown is signaled.

        Args:
            timeout: Maximum time to wait in seconds

        Returns:
            True if a snapshot is pending, False if timeout or shutdown
        """
        result = self._pending_event.wait(timeout)
        return result and not self._shutdown

    def shutdown(self) -> None:
        """Signal shutdown to any waiting threads."""
        self._shutdown = True
        self._pending_event.set()

    def reset(self) -> None:
        """Reopen the queue after shutdown. A pending snapshot is kept."""
        with self._lock:
            self._shutdown = False
            if self._pending is None:
                self._pending_event.clear()

    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def puts(self) -> int:
        """Total snapshots offered."""
        with self._lock:
            return self._puts

    @property
    def coalesced(self) -> int:
        """Snapshots superseded before they were sent."""
        with self._lock:
            return self._coalesced

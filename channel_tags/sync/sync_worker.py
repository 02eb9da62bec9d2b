"""
RegistrationSyncWorker - background thread that pushes tag snapshots to the
remote registration channel.

The registry talks to the worker as if it were the registration service:
update_registration() only enqueues, so UI-side mutations never wait on the
network. The worker thread sends the latest snapshot and reports the outcome
through callbacks (normally TagRegistry.mark_synced / registration_failed).
"""

import threading
from typing import Callable, List, Optional, Sequence, Tuple

from channel_tags.registry.tag_registry import RegistrationService
from channel_tags.sync.registration_queue import RegistrationQueue
from channel_tags.utils.logging_config import get_logger

logger = get_logger("sync_worker")


SuccessCallback = Callable[[List[str]], None]
FailureCallback = Callable[[List[str], Exception], None]


class RegistrationSyncWorker:
    """
    Daemon thread that monitors a RegistrationQueue and syncs snapshots.
    """

    def __init__(
        self,
        remote: RegistrationService,
        queue: Optional[RegistrationQueue] = None,
        check_interval: float = 1.0,
        max_sync_attempts: int = 3,
    ):
        """
        Initialize the sync worker.

        Args:
            remote: Service that performs the actual (blocking) registration
            queue: Queue of pending snapshots. A new one is created if None.
            check_interval: How often to check the queue, also the pause
                before re-sending a failed snapshot (seconds)
            max_sync_attempts: Sends of one snapshot before giving up on it
        """
        self._remote = remote
        self._queue = queue or RegistrationQueue()
        self._check_interval = check_interval
        self._max_sync_attempts = max(1, max_sync_attempts)

        self._on_success: Optional[SuccessCallback] = None
        self._on_failure: Optional[FailureCallback] = None

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._sync_lock = threading.Lock()

        self._failed_snapshot: Optional[Tuple[str, ...]] = None
        self._failed_attempts = 0
        self._syncs_completed = 0
        self._syncs_failed = 0

    def set_callbacks(
        self,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        """Set the callbacks invoked after each sync attempt."""
        self._on_success = on_success
        self._on_failure = on_failure

    # =========================================================================
    # RegistrationService interface
    # =========================================================================

    def current_tags(self) -> Sequence[str]:
        """Read the remote tag set (blocking)."""
        return self._remote.current_tags()

    def update_registration(self, tags: Sequence[str]) -> None:
        """Enqueue a snapshot for the sync thread and return immediately."""
        self._queue.put(list(tags))

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start the sync daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._queue.reset()
        self._thread = threading.Thread(
            target=self._run,
            daemon=True,
            name="RegistrationSyncWorker"
        )
        self._thread.start()
        logger.info("Started registration sync worker")

    def stop(self, flush: bool = True, timeout: float = 5.0) -> None:
        """
        Stop the sync thread.

        Args:
            flush: If True, send any pending snapshot before returning
            timeout: How long to wait for the thread to finish
        """
        self._stop_event.set()
        self._queue.shutdown()

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

        if flush:
            pending = self._queue.take()
            if pending is not None:
                self.sync_once(pending)

        logger.info(
            f"Stopped registration sync worker. "
            f"Completed: {self._syncs_completed}, failed: {self._syncs_failed}"
        )

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        """Main loop for the sync thread."""
        while not self._stop_event.is_set():
            if not self._queue.wait_for_pending(timeout=self._check_interval):
                continue

            tags = self._queue.take()
            if tags is None:
                continue

            if not self.sync_once(tags):
                self._schedule_retry(tags)

    # =========================================================================
    # Sync
    # =========================================================================

    def sync_once(self, tags: List[str]) -> bool:
        """
        Send one snapshot to the remote service and report the outcome.

        Returns:
            True if the remote service accepted the snapshot
        """
        with self._sync_lock:
            try:
                self._remote.update_registration(tags)
            except Exception as e:
                self._syncs_failed += 1
                logger.error(f"Failed to sync {len(tags)} tags: {e}")
                self._invoke(self._on_failure, tags, e)
                return False

            self._syncs_completed += 1
            self._failed_snapshot = None
            self._failed_attempts = 0
            logger.info(f"Synced {len(tags)} tags")

            self._invoke(self._on_success, tags)
            return True

    @staticmethod
    def _invoke(callback: Optional[Callable], *args) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception as e:
            logger.error(f"Sync callback {callback!r} failed: {e}")

    def _schedule_retry(self, tags: List[str]) -> None:
        snapshot = tuple(tags)
        if snapshot != self._failed_snapshot:
            self._failed_snapshot = snapshot
            self._failed_attempts = 0
        self._failed_attempts += 1

        if self._failed_attempts >= self._max_sync_attempts:
            logger.error(
                f"Giving up on snapshot of {len(tags)} tags after "
                f"{self._failed_attempts} attempts"
            )
            self._failed_snapshot = None
            self._failed_attempts = 0
            return

        # Back off before the snapshot becomes visible again
        if self._stop_event.wait(self._check_interval):
            self._queue.offer_retry(tags)
            return

        if not self._queue.offer_retry(tags):
            logger.debug("Newer snapshot pending; dropping failed one")

    # =========================================================================
    # Stats
    # =========================================================================

    @property
    def queue(self) -> RegistrationQueue:
        return self._queue

    @property
    def syncs_completed(self) -> int:
        return self._syncs_completed

    @property
    def syncs_failed(self) -> int:
        return self._syncs_failed

"""
Unit tests for RegistrationQueue.

Tests coalescing, atomic take, retry offers and shutdown signaling.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor


class TestRegistrationQueueBasic:
    """Test basic queue operations."""

    def test_empty_queue(self, registration_queue):
        assert not registration_queue.has_pending()
        assert registration_queue.take() is None

    def test_put_then_take(self, registration_queue):
        registration_queue.put(["a", "b"])

        assert registration_queue.has_pending()
        assert registration_queue.take() == ["a", "b"]
        assert not registration_queue.has_pending()
        assert registration_queue.take() is None

    def test_put_copies_snapshot(self, registration_queue):
        tags = ["a"]
        registration_queue.put(tags)
        tags.append("b")

        assert registration_queue.take() == ["a"]

    def test_newer_snapshot_supersedes_older(self, registration_queue):
        registration_queue.put(["a"])
        registration_queue.put(["a", "b"])
        registration_queue.put(["a", "b", "c"])

        assert registration_queue.take() == ["a", "b", "c"]
        assert registration_queue.puts == 3
        assert registration_queue.coalesced == 2


class TestRegistrationQueueRetry:
    """Test re-queuing of failed snapshots."""

    def test_offer_retry_when_empty(self, registration_queue):
        assert registration_queue.offer_retry(["a"]) is True
        assert registration_queue.take() == ["a"]

    def test_offer_retry_loses_to_newer_snapshot(self, registration_queue):
        registration_queue.put(["a", "b"])

        assert registration_queue.offer_retry(["a"]) is False
        assert registration_queue.take() == ["a", "b"]


class TestRegistrationQueueWaiting:
    """Test wait and shutdown signaling."""

    def test_wait_times_out_when_empty(self, registration_queue):
        assert registration_queue.wait_for_pending(timeout=0.01) is False

    def test_wait_returns_when_pending(self, registration_queue):
        registration_queue.put(["a"])
        assert registration_queue.wait_for_pending(timeout=0.01) is True

    def test_take_clears_pending_signal(self, registration_queue):
        registration_queue.put(["a"])
        registration_queue.take()
        assert registration_queue.wait_for_pending(timeout=0.01) is False

    def test_wait_wakes_on_put_from_other_thread(self, registration_queue):
        def producer():
            time.sleep(0.02)
            registration_queue.put(["a"])

        thread = threading.Thread(target=producer)
        thread.start()

        assert registration_queue.wait_for_pending(timeout=2.0) is True
        thread.join()

    def test_shutdown_wakes_waiters(self, registration_queue):
        results = []

        def waiter():
            results.append(registration_queue.wait_for_pending(timeout=2.0))

        thread = threading.Thread(target=waiter)
        thread.start()
        registration_queue.shutdown()
        thread.join()

        assert results == [False]
        assert registration_queue.is_shutdown()

    def test_reset_reopens_after_shutdown(self, registration_queue):
        registration_queue.shutdown()
        registration_queue.reset()

        assert not registration_queue.is_shutdown()
        assert registration_queue.wait_for_pending(timeout=0.01) is False

        registration_queue.put(["a"])
        assert registration_queue.wait_for_pending(timeout=0.01) is True

    def test_reset_keeps_pending_snapshot(self, registration_queue):
        registration_queue.put(["a"])
        registration_queue.shutdown()
        registration_queue.reset()

        assert registration_queue.wait_for_pending(timeout=0.01) is True
        assert registration_queue.take() == ["a"]


class TestRegistrationQueueThreadSafety:
    """Test concurrent producers."""

    def test_concurrent_puts_keep_one_snapshot(self, registration_queue):
        num_threads = 10
        puts_per_thread = 100

        def put_snapshots(thread_id):
            for i in range(puts_per_thread):
                registration_queue.put([f"t{thread_id}", str(i)])

        with ThreadPoolExecutor(max_workers=num_threads) as executor:
            futures = [executor.submit(put_snapshots, i) for i in range(num_threads)]
            for f in futures:
                f.result()

        total = num_threads * puts_per_thread
        assert registration_queue.puts == total
        assert registration_queue.coalesced == total - 1
        assert len(registration_queue.take()) == 2
        assert registration_queue.take() is None

"""Tests for the reader/writer lock."""

import threading
import time

from fleetpulse.services.rwlock import RWLock


def _wait_until(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return False


class TestRWLock:
    """Shared readers, exclusive writers, writers preferred."""

    def test_readers_share(self):
        """Two readers can hold the lock at the same time."""
        lock = RWLock()
        barrier = threading.Barrier(2, timeout=2)
        errors = []

        def reader():
            try:
                with lock.read():
                    barrier.wait()
            except threading.BrokenBarrierError as e:
                errors.append(e)

        threads = [threading.Thread(target=reader) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(5)

        assert errors == []

    def test_writer_waits_for_reader(self):
        """A writer cannot enter while a reader holds the lock."""
        lock = RWLock()
        entered = threading.Event()

        def writer():
            with lock.write():
                entered.set()

        lock.acquire_read()
        t = threading.Thread(target=writer)
        t.start()
        assert not entered.wait(0.1)

        lock.release_read()
        assert entered.wait(2)
        t.join(2)

    def test_reader_waits_for_writer(self):
        lock = RWLock()
        entered = threading.Event()

        def reader():
            with lock.read():
                entered.set()

        lock.acquire_write()
        t = threading.Thread(target=reader)
        t.start()
        assert not entered.wait(0.1)

        lock.release_write()
        assert entered.wait(2)
        t.join(2)

    def test_waiting_writer_blocks_new_readers(self):
        """Once a writer is queued, later readers wait behind it."""
        lock = RWLock()
        order = []

        def writer():
            with lock.write():
                order.append("writer")

        def late_reader():
            with lock.read():
                order.append("reader")

        lock.acquire_read()
        w = threading.Thread(target=writer)
        w.start()
        assert _wait_until(lambda: lock._writers_waiting == 1)

        r = threading.Thread(target=late_reader)
        r.start()
        time.sleep(0.1)
        assert order == []

        lock.release_read()
        w.join(2)
        r.join(2)
        assert order == ["writer", "reader"]

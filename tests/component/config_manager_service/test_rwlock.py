import threading
import time

from shared.common_utils import ReadWriteLock


def test_concurrent_readers():
    """Test that several readers can hold the lock at once."""
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=5)
    errors = []

    def reader():
        with lock.read_locked():
            try:
                inside.wait()
            except threading.BrokenBarrierError as e:
                errors.append(e)

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert errors == []


def test_writer_excludes_readers():
    """Test that a reader waits while a writer holds the lock."""
    lock = ReadWriteLock()
    acquired = threading.Event()

    def reader():
        with lock.read_locked():
            acquired.set()

    lock.acquire_write()
    thread = threading.Thread(target=reader)
    thread.start()
    assert not acquired.wait(0.2)

    lock.release_write()
    assert acquired.wait(5)
    thread.join(timeout=5)


def test_waiting_writer_blocks_new_readers():
    """Test writer preference: a queued writer goes before later readers."""
    lock = ReadWriteLock()
    order = []
    writer_waiting = threading.Event()

    lock.acquire_read()

    def writer():
        writer_waiting.set()
        with lock.write_locked():
            order.append("writer")

    def late_reader():
        with lock.read_locked():
            order.append("reader")

    writer_thread = threading.Thread(target=writer)
    writer_thread.start()
    writer_waiting.wait(5)
    # Let the writer register as waiting before the late reader arrives.
    while not lock._waiting_writers:
        time.sleep(0.01)

    reader_thread = threading.Thread(target=late_reader)
    reader_thread.start()
    time.sleep(0.1)
    assert order == []

    lock.release_read()
    writer_thread.join(timeout=5)
    reader_thread.join(timeout=5)
    assert order == ["writer", "reader"]

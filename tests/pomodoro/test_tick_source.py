import threading
import time
import unittest

from pomodoro import TickSource


class _Counter:
    def __init__(self):
        self.count = 0
        self._lock = threading.Lock()
        self.first_tick = threading.Event()

    def __call__(self) -> None:
        with self._lock:
            self.count += 1
        self.first_tick.set()

    def value(self) -> int:
        with self._lock:
            return self.count


class TickSourceTests(unittest.TestCase):
    def test_rejects_non_positive_interval(self) -> None:
        with self.assertRaises(ValueError):
            TickSource(interval_seconds=0)

    def test_ticks_until_stopped(self) -> None:
        source = TickSource(interval_seconds=0.01)
        counter = _Counter()

        source.start(counter)
        self.assertTrue(counter.first_tick.wait(2.0))
        source.stop()
        time.sleep(0.05)
        stopped_at = counter.value()
        time.sleep(0.1)

        self.assertGreaterEqual(stopped_at, 1)
        self.assertEqual(stopped_at, counter.value())
        self.assertFalse(source.is_running)

    def test_restart_replaces_previous_stream(self) -> None:
        source = TickSource(interval_seconds=0.01)
        first = _Counter()
        second = _Counter()

        source.start(first)
        self.assertTrue(first.first_tick.wait(2.0))
        source.start(second)
        self.assertTrue(second.first_tick.wait(2.0))
        time.sleep(0.05)
        first_after_restart = first.value()
        time.sleep(0.1)
        source.stop()

        self.assertEqual(first_after_restart, first.value())
        self.assertGreater(second.value(), 0)

    def test_callback_errors_do_not_end_stream(self) -> None:
        source = TickSource(interval_seconds=0.01)
        calls = _Counter()

        def flaky() -> None:
            calls()
            raise RuntimeError("tick handler bug")

        source.start(flaky)
        deadline = time.monotonic() + 2.0
        while calls.value() < 3 and time.monotonic() < deadline:
            time.sleep(0.01)
        source.stop()

        self.assertGreaterEqual(calls.value(), 3)

    def test_stop_from_inside_callback(self) -> None:
        source = TickSource(interval_seconds=0.01)
        counter = _Counter()

        def stop_once() -> None:
            counter()
            source.stop()

        source.start(stop_once)
        self.assertTrue(counter.first_tick.wait(2.0))
        time.sleep(0.1)

        self.assertEqual(1, counter.value())


if __name__ == "__main__":
    unittest.main()

import threading

import pytest

from ILP_Topology.engine.runner import LoopRunner


def test_start_and_stop_are_idempotent():
    calls = threading.Semaphore(0)
    runner = LoopRunner(calls.release, interval_ms=5)
    assert runner.start()
    assert not runner.start()
    assert calls.acquire(timeout=2.0)
    assert runner.stop()
    assert not runner.stop()
    assert not runner.running
    assert runner.ticks_run >= 1


def test_failing_tick_keeps_timer_alive(caplog):
    count = {"n": 0}
    done = threading.Event()

    def tick():
        count["n"] += 1
        if count["n"] >= 3:
            done.set()
        raise RuntimeError("tick failed")

    runner = LoopRunner(tick, interval_ms=5)
    runner.start()
    try:
        assert done.wait(2.0)
    finally:
        runner.stop()
    assert "OODA tick failed" in caplog.text


def test_restart_after_stop_uses_new_interval():
    calls = threading.Semaphore(0)
    runner = LoopRunner(calls.release, interval_ms=10_000)
    runner.start()
    runner.stop()
    assert runner.start(interval_ms=5)
    try:
        assert runner.interval_ms == 5
        assert calls.acquire(timeout=2.0)
    finally:
        runner.stop()


def test_interval_must_be_positive():
    runner = LoopRunner(lambda: None)
    with pytest.raises(ValueError):
        runner.start(interval_ms=0)
    assert not runner.running

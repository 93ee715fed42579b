"""Background interval timer driving the control loop."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class LoopRunner:
    """Call ``tick`` every ``interval_ms`` on one daemon thread.

    At most one thread is ever live: :meth:`start` while running and
    :meth:`stop` while stopped are no-ops. A tick that raises is logged and
    the timer keeps going.
    """

    def __init__(self, tick: Callable[[], object], interval_ms: float = 10000) -> None:
        self._tick = tick
        self.interval_ms = interval_ms
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()
        self._guard = threading.Lock()
        self.ticks_run = 0

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self, interval_ms: float | None = None) -> bool:
        """Arm the timer. Returns ``False`` if it was already running."""

        with self._guard:
            if self.running:
                return False
            if interval_ms is not None:
                if interval_ms <= 0:
                    raise ValueError("interval_ms must be positive")
                self.interval_ms = interval_ms
            stop = threading.Event()
            self._stop = stop
            self._thread = threading.Thread(
                target=self._run, args=(stop,), name="ooda-loop", daemon=True
            )
            self._thread.start()
        logger.info("OODA loop started (interval %.0f ms)", self.interval_ms)
        return True

    def stop(self, timeout: float | None = 5.0) -> bool:
        """Disarm the timer. Returns ``False`` if it was not running.

        The tick in progress, if any, completes before the thread exits.
        """

        with self._guard:
            thread = self._thread
            if thread is None:
                return False
            self._stop.set()
            self._thread = None
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("OODA loop stopped after %d ticks", self.ticks_run)
        return True

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_ms / 1000.0):
            try:
                self._tick()
            except Exception:
                logger.exception("OODA tick failed")
            self.ticks_run += 1

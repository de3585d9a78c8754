"""RunEventStream — serialises samples, timer ticks, resumes and stops into one inbox."""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from pacemaker.tracking.models import PositionSample


class EventKind(str, Enum):
    SAMPLE = "sample"
    TICK = "tick"
    RESUME = "resume"
    STOP = "stop"


@dataclass(frozen=True)
class RunEvent:
    """One inbound message for the session actor."""

    kind: EventKind
    timestamp_ms: int
    """Wall-clock milliseconds at which the event was posted."""

    sample: PositionSample | None = None


def _now_ms() -> int:
    return int(time.time() * 1000)


class RunEventStream:
    """Thread-safe inbox consumed by a single :class:`~pacemaker.pacing.engine.PacingEngine`.

    A daemon ticker thread posts one ``tick`` per *tick_interval_s* while the
    stream is open.  Producers on other threads (position callbacks, the
    host's resume hook) post through the ``post_*`` methods.

    After :meth:`close` every post is a no-op and queued events are
    discarded, so nothing can reach the session once it has finished.

    Parameters
    ----------
    tick_interval_s:
        Seconds between timer ticks.  None disables the ticker; the host
        then posts ticks itself with :meth:`post_tick`.
    _time_fn:
        Callable returning wall-clock milliseconds — injectable for testing.
    """

    def __init__(
        self,
        tick_interval_s: float | None = 1.0,
        _time_fn: Callable[[], int] = _now_ms,
    ) -> None:
        self._interval = tick_interval_s
        self._time_fn = _time_fn
        self._queue: queue.Queue[RunEvent] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the ticker thread.  No-op if running or closed."""
        with self._lock:
            if self._closed or self._thread is not None or self._interval is None:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, daemon=True, name="RunTicker")
            self._thread.start()

    def close(self) -> None:
        """Stop the ticker, drop queued events and refuse further posts.  Idempotent."""
        with self._lock:
            self._closed = True
            self._stop_event.set()
            thread, self._thread = self._thread, None
            while True:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=2.0)

    def post_sample(self, sample: PositionSample) -> None:
        self._post(EventKind.SAMPLE, sample)

    def post_tick(self) -> None:
        self._post(EventKind.TICK)

    def post_resume(self) -> None:
        self._post(EventKind.RESUME)

    def post_stop(self) -> None:
        self._post(EventKind.STOP)

    def get_event(self, timeout: float = 0.1) -> RunEvent | None:
        """Return the next queued event, or None if none arrives within *timeout* s."""
        try:
            if timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def queue_size(self) -> int:
        """Return the current number of buffered events."""
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _post(self, kind: EventKind, sample: PositionSample | None = None) -> None:
        with self._lock:
            if self._closed:
                return
            self._queue.put(RunEvent(kind=kind, timestamp_ms=self._time_fn(), sample=sample))

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self.post_tick()

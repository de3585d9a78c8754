"""Positioning service — permissions, single fixes, a sample stream and a background buffer.

:class:`ReplayPositionService` replays a recorded track and is what the
scripts and tests drive the engine with.  A platform-backed service only
needs to provide the same methods.
"""

from __future__ import annotations

import csv
import logging
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from pacemaker.tracking.models import PositionSample

_logger = logging.getLogger(__name__)

BUFFER_LIMIT = 1000


class TrackFileError(Exception):
    """Raised when a recorded track file cannot be opened or parsed."""


@dataclass(frozen=True)
class Permissions:
    """Outcome of a permission request."""

    foreground: bool
    background: bool


def load_track_csv(path: str | Path) -> list[PositionSample]:
    """Read a recorded track from a CSV file.

    Expected header: ``latitude,longitude,timestamp`` plus an optional
    ``accuracy`` column (blank = unknown).  Timestamps are epoch milliseconds.

    Raises
    ------
    TrackFileError
        If the file is missing, lacks a required column, or has a malformed row.
    """
    p = Path(path)
    if not p.is_file():
        raise TrackFileError(f"Track file not found: {p}")

    samples: list[PositionSample] = []
    with p.open(newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        missing = {"latitude", "longitude", "timestamp"} - set(reader.fieldnames or [])
        if missing:
            raise TrackFileError(f"{p}: missing column(s) {', '.join(sorted(missing))}")
        for lineno, row in enumerate(reader, start=2):
            try:
                acc = (row.get("accuracy") or "").strip()
                samples.append(
                    PositionSample(
                        latitude=float(row["latitude"]),
                        longitude=float(row["longitude"]),
                        timestamp=int(float(row["timestamp"])),
                        accuracy=float(acc) if acc else None,
                    )
                )
            except (TypeError, ValueError) as exc:
                raise TrackFileError(f"{p}:{lineno}: {exc}") from exc
    return samples


class ReplayPositionService:
    """Replays a pre-recorded sequence of samples as if it were a live GPS.

    While streaming, :meth:`emit_next` delivers the next sample to every
    registered callback.  While suspended, samples go to a bounded buffer
    (newest *buffer_limit* kept) that :meth:`drain_buffered_samples` empties.

    Parameters
    ----------
    samples:
        Samples to replay, in capture order.
    permissions:
        Result returned by :meth:`request_permissions`.
    initial_fix:
        Result of :meth:`get_current_fix`; defaults to the first sample.
    """

    def __init__(
        self,
        samples: Iterable[PositionSample] = (),
        permissions: Permissions | None = None,
        initial_fix: PositionSample | None = None,
        buffer_limit: int = BUFFER_LIMIT,
    ) -> None:
        self._pending: deque[PositionSample] = deque(samples)
        self._permissions = permissions or Permissions(foreground=True, background=True)
        self._initial_fix = initial_fix
        self._buffer: deque[PositionSample] = deque(maxlen=buffer_limit)
        self._callbacks: list[Callable[[PositionSample], None]] = []
        self._streaming = False
        self._suspended = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_streaming(self) -> bool:
        return self._streaming

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def request_permissions(self) -> Permissions:
        return self._permissions

    def get_current_fix(self) -> PositionSample | None:
        """Return a single position fix, or None.  Never raises."""
        if self._initial_fix is not None:
            return self._initial_fix
        return self._pending[0] if self._pending else None

    def start_stream(self) -> None:
        """Begin delivering samples.  No-op if already streaming."""
        if self._streaming:
            return
        self._streaming = True
        _logger.debug("Position stream started")

    def stop_stream(self) -> None:
        """Stop delivering samples.  No-op if already stopped."""
        if not self._streaming:
            return
        self._streaming = False
        _logger.debug("Position stream stopped")

    def register_callback(self, callback: Callable[[PositionSample], None]) -> None:
        """Register *callback* to receive each live sample."""
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[PositionSample], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def suspend(self) -> None:
        """Simulate the consumer going to the background."""
        self._suspended = True

    def resume(self) -> None:
        """Simulate the consumer coming back to the foreground."""
        self._suspended = False

    def emit_next(self) -> PositionSample | None:
        """Deliver the next recorded sample; return it, or None when exhausted or stopped."""
        if not self._streaming or not self._pending:
            return None
        sample = self._pending.popleft()
        if self._suspended:
            self._buffer.append(sample)
        else:
            self._fire_callbacks(sample)
        return sample

    def has_buffered_samples(self) -> bool:
        return bool(self._buffer)

    def drain_buffered_samples(self) -> list[PositionSample]:
        """Return samples captured while suspended, in capture order, and clear the buffer."""
        drained = list(self._buffer)
        self._buffer.clear()
        return drained

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _fire_callbacks(self, sample: PositionSample) -> None:
        for cb in self._callbacks:
            cb(sample)

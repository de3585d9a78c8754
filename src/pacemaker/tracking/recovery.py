"""Background-gap recovery — replays samples captured while the process was suspended."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pacemaker.tracking.session import RunSession

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecoveryResult:
    """Outcome of one resume."""

    replayed: int = 0
    """Buffered samples fed to the session."""

    accepted: int = 0
    distance_added_km: float = 0.0
    finished: bool = False
    """True if the replay completed the run; no feedback should follow."""


class BackgroundGapRecovery:
    """Reconciles a running session with what happened during a suspension.

    Parameters
    ----------
    position_service:
        Object with ``drain_buffered_samples() -> list[PositionSample]``.
    """

    def __init__(self, position_service) -> None:
        self._positions = position_service

    def resume(self, session: RunSession, now_ms: int) -> RecoveryResult:
        """Replay buffered samples into *session*, then resync elapsed time to *now_ms*.

        Samples are replayed in capture order through the session's own
        validator.  Replay stops as soon as the session finishes.
        """
        if not session.is_running:
            return RecoveryResult(finished=session.is_finished)

        batch = self._positions.drain_buffered_samples()
        before = session.metrics.distance_km
        replayed = accepted = 0
        for sample in batch:
            replayed += 1
            if session.add_sample(sample, now_ms):
                accepted += 1
            if session.is_finished:
                break

        session.tick(now_ms)
        result = RecoveryResult(
            replayed=replayed,
            accepted=accepted,
            distance_added_km=session.metrics.distance_km - before,
            finished=session.is_finished,
        )
        _logger.info(
            "Resumed: %d/%d buffered samples accepted, +%.3f km, elapsed %d s",
            accepted,
            len(batch),
            result.distance_added_km,
            session.metrics.elapsed_s,
        )
        return result

"""Sample validator — rejects noisy, jittery and impossible position fixes."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pacemaker.geo.distance import distance
from pacemaker.tracking.models import PositionSample

_logger = logging.getLogger(__name__)

MAX_ACCURACY_M = 20.0
MIN_DISPLACEMENT_M = 2.0
MAX_SPEED_KMH = 50.0


class SampleValidator:
    """Acceptance predicate for position samples.

    Rules, first match wins:

    1. accuracy reported and worse than *max_accuracy_m* → reject
    2. no previous accepted sample → accept
    3. displacement under *min_displacement_m* → reject (stationary jitter)
    4. implied speed over *max_speed_kmh* → reject (skipped when the time
       delta is zero or negative)
    5. accept

    The validator holds no track state; callers thread the last accepted
    sample through :meth:`accept`, or use :meth:`filter` for a whole batch.
    """

    def __init__(
        self,
        max_accuracy_m: float = MAX_ACCURACY_M,
        min_displacement_m: float = MIN_DISPLACEMENT_M,
        max_speed_kmh: float = MAX_SPEED_KMH,
    ) -> None:
        self._max_accuracy_m = max_accuracy_m
        self._min_displacement_m = min_displacement_m
        self._max_speed_kmh = max_speed_kmh

    def accept(self, sample: PositionSample, previous: PositionSample | None) -> bool:
        """Return True if *sample* may follow *previous* in the track."""
        return self.reject_reason(sample, previous) is None

    def reject_reason(
        self, sample: PositionSample, previous: PositionSample | None
    ) -> str | None:
        """Return a short reason string if *sample* is rejected, else None."""
        if sample.accuracy is not None and sample.accuracy > self._max_accuracy_m:
            return f"accuracy {sample.accuracy:.1f} m"

        if previous is None:
            return None

        dist_km = distance(previous, sample)
        if dist_km * 1000 < self._min_displacement_m:
            return f"jitter {dist_km * 1000:.2f} m"

        dt_s = (sample.timestamp - previous.timestamp) / 1000
        if dt_s > 0:
            speed_kmh = dist_km / dt_s * 3600
            if speed_kmh > self._max_speed_kmh:
                return f"speed {speed_kmh:.1f} km/h"

        return None

    def filter(
        self,
        samples: Iterable[PositionSample],
        previous: PositionSample | None = None,
    ) -> list[PositionSample]:
        """Return the accepted subsequence of *samples*, in order.

        *previous* seeds the fold with an already-accepted sample.
        """
        accepted: list[PositionSample] = []
        for sample in samples:
            reason = self.reject_reason(sample, previous)
            if reason is not None:
                _logger.debug("Rejected sample at %d: %s", sample.timestamp, reason)
                continue
            accepted.append(sample)
            previous = sample
        return accepted


_DEFAULT = SampleValidator()


def accept(sample: PositionSample, previous: PositionSample | None) -> bool:
    """Module-level shortcut using the default thresholds."""
    return _DEFAULT.accept(sample, previous)

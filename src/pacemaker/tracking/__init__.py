"""Run tracking: position samples, validation, the session state machine and gap recovery.

Public API
----------
PositionSample          - one raw position fix
RunGoal                 - target distance/time
RunMetrics              - live distance/elapsed/pace
RunSession              - waiting → running → finished state machine
SampleValidator         - accuracy/jitter/speed filter
BackgroundGapRecovery   - replays samples buffered while suspended
ReplayPositionService   - positioning service backed by a recorded track
"""

from pacemaker.tracking.models import (
    CompletedRun,
    FeedbackCursor,
    GoalError,
    PositionSample,
    RunGoal,
    RunMetrics,
    RunSnapshot,
    RunStatus,
)
from pacemaker.tracking.positioning import (
    Permissions,
    ReplayPositionService,
    TrackFileError,
    load_track_csv,
)
from pacemaker.tracking.recovery import BackgroundGapRecovery, RecoveryResult
from pacemaker.tracking.session import RunSession, SessionStateError
from pacemaker.tracking.validator import SampleValidator, accept

__all__ = [
    "BackgroundGapRecovery",
    "CompletedRun",
    "FeedbackCursor",
    "GoalError",
    "Permissions",
    "PositionSample",
    "RecoveryResult",
    "ReplayPositionService",
    "RunGoal",
    "RunMetrics",
    "RunSession",
    "RunSnapshot",
    "RunStatus",
    "SampleValidator",
    "SessionStateError",
    "TrackFileError",
    "accept",
    "load_track_csv",
]

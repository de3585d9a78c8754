"""Real-time pacing: feedback policy, phrase sets, event inbox and the session engine.

Public API
----------
PaceFeedbackPolicy  - decides pace and checkpoint announcements
FeedbackEvent       - one announcement
PaceStatus          - on_pace / behind / ahead
RunEventStream      - thread-safe inbox with a 1 Hz ticker
PacingEngine        - single-threaded session actor
"""

from pacemaker.pacing.engine import PacingEngine, PermissionDeniedError
from pacemaker.pacing.event_stream import EventKind, RunEvent, RunEventStream
from pacemaker.pacing.phrases import PHRASES, PaceStatus, pick_phrase
from pacemaker.pacing.policy import (
    FeedbackEvent,
    FeedbackKind,
    PaceFeedbackPolicy,
    classify_pace,
    reached_checkpoint,
)

__all__ = [
    "PHRASES",
    "EventKind",
    "FeedbackEvent",
    "FeedbackKind",
    "PaceFeedbackPolicy",
    "PaceStatus",
    "PacingEngine",
    "PermissionDeniedError",
    "RunEvent",
    "RunEventStream",
    "classify_pace",
    "pick_phrase",
    "reached_checkpoint",
]

"""BackgroundGapRecovery replay and elapsed resync."""

from __future__ import annotations

import pytest

from pacemaker.geo.distance import path_length
from pacemaker.settings import RunSettings
from pacemaker.tracking.models import RunGoal
from pacemaker.tracking.positioning import ReplayPositionService
from pacemaker.tracking.recovery import BackgroundGapRecovery
from pacemaker.tracking.session import RunSession
from tests.conftest import T0, FakeClock, make_sample, walk


def _running(goal_km: float = 5.0, **settings) -> tuple[RunSession, FakeClock]:
    clock = FakeClock()
    session = RunSession(RunGoal(goal_km, 25.0), RunSettings(**settings), _time_fn=clock)
    session.start()
    return session, clock


def _suspended_service(samples) -> ReplayPositionService:
    svc = ReplayPositionService(samples)
    svc.start_stream()
    svc.suspend()
    while svc.emit_next() is not None:
        pass
    return svc


def test_buffered_samples_are_replayed_in_order():
    session, _ = _running()
    session.add_sample(make_sample(0, 0), T0)
    svc = _suspended_service(walk(5, 100.0, 30.0, start_m=100.0, start_s=30.0))

    result = BackgroundGapRecovery(svc).resume(session, T0 + 600_000)

    assert result.replayed == 5
    assert result.accepted == 5
    assert result.finished is False
    assert result.distance_added_km == pytest.approx(0.5, rel=1e-9)
    assert session.metrics.distance_km == pytest.approx(0.5, rel=1e-9)
    assert [s.timestamp for s in session.track[1:]] == [
        T0 + 30_000 * (i + 1) for i in range(5)
    ]


def test_elapsed_resyncs_to_resume_time():
    session, _ = _running()
    svc = _suspended_service([])
    BackgroundGapRecovery(svc).resume(session, T0 + 900_000)
    assert session.metrics.elapsed_s == 900


def test_buffer_is_emptied_after_resume():
    session, _ = _running()
    svc = _suspended_service(walk(3, 100.0, 30.0))
    recovery = BackgroundGapRecovery(svc)
    recovery.resume(session, T0 + 100_000)
    again = recovery.resume(session, T0 + 200_000)
    assert again.replayed == 0


def test_invalid_buffered_samples_are_filtered():
    session, _ = _running()
    session.add_sample(make_sample(0, 0), T0)
    buffered = [
        make_sample(100, 30),
        make_sample(150, 40, accuracy=60.0),  # inaccurate
        make_sample(101, 50),  # jitter
        make_sample(200, 60),
    ]
    result = BackgroundGapRecovery(_suspended_service(buffered)).resume(session, T0 + 60_000)
    assert result.replayed == 4
    assert result.accepted == 2
    assert session.metrics.distance_km == pytest.approx(0.2, rel=1e-9)


def test_replay_stops_once_goal_is_reached():
    samples = walk(6, 100.0, 30.0)
    session, _ = _running(goal_km=path_length(samples[:4]), auto_stop_on_goal=True)
    finished = []
    session.register_callback(finished.append)

    result = BackgroundGapRecovery(_suspended_service(samples)).resume(session, T0 + 300_000)

    assert result.finished is True
    assert result.replayed == 4
    assert session.is_finished
    assert len(finished) == 1
    assert session.completed_run.actual_time_s == 300


def test_resume_on_finished_session_is_noop():
    session, _ = _running()
    session.stop(T0 + 10_000)
    svc = _suspended_service(walk(3, 100.0, 30.0))
    result = BackgroundGapRecovery(svc).resume(session, T0 + 100_000)
    assert result.finished is True
    assert result.replayed == 0
    assert len(svc.drain_buffered_samples()) == 3

"""Replay a recorded track through the pacing engine.

The engine runs against a simulated clock that follows the recorded
timestamps, so a 30-minute run replays in well under a second.  Samples
between --suspend and --resume are buffered as if the app were in the
background, then recovered on resume.

Usage:
    uv run python scripts/simulate_run.py track.csv --distance 5 --time 25
    uv run python scripts/simulate_run.py track.csv --distance 5 --time 25 --suspend 120 --resume 300
    uv run python scripts/simulate_run.py track.csv --distance 3 --time 30 --unit miles --speak
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

load_dotenv()

from pacemaker.geo.distance import format_duration, format_pace  # noqa: E402
from pacemaker.pacing.engine import PacingEngine, PermissionDeniedError  # noqa: E402
from pacemaker.pacing.event_stream import RunEventStream  # noqa: E402
from pacemaker.storage.store import RunHistoryStorage, SettingsStore  # noqa: E402
from pacemaker.tracking.models import GoalError, RunGoal  # noqa: E402
from pacemaker.tracking.positioning import (  # noqa: E402
    ReplayPositionService,
    TrackFileError,
    load_track_csv,
)
from pacemaker.tts.engine import NullTTSEngine, Win32TTSEngine  # noqa: E402


class _SimClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start_ms: int) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms


def _report(events) -> None:
    for ev in events:
        print(f"  [{ev.kind.value}] {ev.text}", flush=True)


def main() -> None:
    ap = argparse.ArgumentParser(description="Pacemaker — replay a recorded run")
    ap.add_argument("track", help="CSV with latitude,longitude,timestamp[,accuracy]")
    ap.add_argument("--distance", required=True, help="Target distance")
    ap.add_argument("--time", required=True, help="Target time in minutes")
    ap.add_argument("--unit", choices=["km", "miles"], default=None, help="Goal distance unit")
    ap.add_argument("--db", default=os.environ.get("PACEMAKER_DB", "pacemaker.db"))
    ap.add_argument("--suspend", type=int, default=None, help="Sample index at which to background")
    ap.add_argument("--resume", type=int, default=None, help="Sample index at which to foreground")
    ap.add_argument("--speak", action="store_true", help="Speak feedback (Windows only)")
    ap.add_argument("--no-save", action="store_true", help="Do not write the run to history")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    store = SettingsStore(args.db)
    try:
        settings = store.get()
    finally:
        store.close()
    unit = args.unit or settings.distance_unit

    try:
        goal = RunGoal.parse(args.distance, args.time, unit=unit)
        samples = load_track_csv(args.track)
    except (GoalError, TrackFileError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(2)
    if not samples:
        print("ERROR: track file has no samples", file=sys.stderr)
        sys.exit(2)

    clock = _SimClock(samples[0].timestamp)
    positions = ReplayPositionService(samples)
    stream = RunEventStream(tick_interval_s=None, _time_fn=clock)
    tts = Win32TTSEngine() if args.speak and sys.platform == "win32" else NullTTSEngine()
    history = None if args.no_save else RunHistoryStorage(args.db)

    engine = PacingEngine(
        goal, positions, tts, settings=settings, history=history, stream=stream, _time_fn=clock
    )
    try:
        engine.start()
    except PermissionDeniedError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        sys.exit(1)

    print(
        f"Goal: {goal.distance_km:.2f} km in {goal.time_min:g} min "
        f"(target pace {format_pace(goal.target_pace)}/km)",
        flush=True,
    )
    for warning in engine.snapshot().warnings:
        print(f"WARNING: {warning}", file=sys.stderr)

    index = 0
    suspended = False
    try:
        while engine.session.is_running and positions.remaining:
            sample = positions.get_current_fix()
            # A suspended process receives no timer ticks
            while not suspended and clock.now_ms + 1000 <= sample.timestamp:
                clock.now_ms += 1000
                stream.post_tick()
                _report(engine.drain())
            clock.now_ms = max(clock.now_ms, sample.timestamp)

            if index == args.suspend:
                positions.suspend()
                suspended = True
                print(f"  [background] at {format_duration(engine.session.metrics.elapsed_s)}")
            if index == args.resume and suspended:
                positions.resume()
                suspended = False
                engine.resume()
                _report(engine.drain())
                print(f"  [foreground] at {format_duration(engine.session.metrics.elapsed_s)}")

            positions.emit_next()
            _report(engine.drain())
            index += 1

        if suspended and engine.session.is_running:
            # Track ended in the background; recover the buffer before stopping
            positions.resume()
            suspended = False
            engine.resume()
            _report(engine.drain())
        if engine.session.is_running:
            engine.stop()
            _report(engine.drain())
    finally:
        tts.shutdown()
        if history is not None:
            history.close()

    run = engine.session.completed_run
    if run is None:
        return
    print()
    print(f"Distance: {run.actual_distance_km:.2f} km")
    print(f"Time:     {format_duration(run.actual_time_s)}")
    print(f"Pace:     {format_pace(run.average_pace)}/km")
    print(f"Goal:     {'reached' if run.completed_goal else 'not reached'}")


if __name__ == "__main__":
    main()

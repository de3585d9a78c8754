"""Tests for TTS engine abstractions."""

from __future__ import annotations

from pacemaker.tts.engine import NullTTSEngine, SpeechOptions, Win32TTSEngine, to_ssml

# ---------------------------------------------------------------------------
# NullTTSEngine
# ---------------------------------------------------------------------------


def test_null_engine_records_speak_with_default_options():
    engine = NullTTSEngine()
    engine.speak("Good pace.")
    assert engine.speaks == [("Good pace.", SpeechOptions())]


def test_null_engine_records_options():
    engine = NullTTSEngine()
    opts = SpeechOptions(rate=0.9, pitch=1.2)
    engine.speak("Dig deep!", opts)
    assert engine.speaks[0][1] is opts


def test_null_engine_counts_stops():
    engine = NullTTSEngine()
    engine.stop()
    engine.stop()
    assert engine.stops == 2


def test_null_engine_not_speaking():
    engine = NullTTSEngine()
    assert engine.is_speaking() is False
    engine.shutdown()  # must not raise


# ---------------------------------------------------------------------------
# SAPI markup
# ---------------------------------------------------------------------------


def test_ssml_neutral_levels():
    assert to_ssml("Hi", SpeechOptions()) == (
        '<pitch absmiddle="0"><rate absspeed="0">Hi</rate></pitch>'
    )


def test_ssml_maps_relative_factors():
    xml = to_ssml("Go", SpeechOptions(rate=0.9, pitch=1.2))
    assert 'absmiddle="2"' in xml
    assert 'absspeed="-1"' in xml


def test_ssml_clamps_levels():
    xml = to_ssml("Go", SpeechOptions(rate=2.5, pitch=0.0))
    assert 'absmiddle="-10"' in xml
    assert 'absspeed="10"' in xml


def test_ssml_escapes_text():
    assert "Fast &amp; steady &lt;3" in to_ssml("Fast & steady <3", SpeechOptions())


# ---------------------------------------------------------------------------
# Win32TTSEngine: structural tests (no actual audio playback)
# ---------------------------------------------------------------------------


def test_win32_engine_instantiates():
    engine = Win32TTSEngine()
    engine.shutdown()


def test_win32_engine_speaks_without_exception():
    engine = Win32TTSEngine()
    engine.speak("Test")
    engine.shutdown()


def test_win32_engine_stop_drains_queue():
    engine = Win32TTSEngine()
    for _ in range(5):
        engine.speak("queued")
    engine.stop()
    assert engine._queue.qsize() == 0
    engine.shutdown()


def test_win32_engine_not_speaking_by_default():
    engine = Win32TTSEngine()
    assert engine.is_speaking() is False
    engine.shutdown()

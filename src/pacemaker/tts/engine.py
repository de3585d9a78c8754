"""TTS engine abstractions — NullTTSEngine for tests, Win32TTSEngine for Windows runtime."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from xml.sax.saxutils import escape

_logger = logging.getLogger(__name__)

# SpeechVoiceSpeakFlags
_SVSF_ASYNC = 1
_SVSF_PURGE_BEFORE_SPEAK = 2
_SVSF_IS_XML = 8


@dataclass(frozen=True)
class SpeechOptions:
    """Voice parameters for one utterance.

    ``rate`` and ``pitch`` are relative to the voice default (1.0 = normal).
    """

    rate: float = 1.0
    pitch: float = 1.0
    volume: float = 1.0
    """0.0 – 1.0."""

    language: str = "en-US"


class NullTTSEngine:
    """No-op TTS engine; records calls for test assertions."""

    def __init__(self) -> None:
        self.speaks: list[tuple[str, SpeechOptions]] = []
        self.stops: int = 0

    def speak(self, text: str, options: SpeechOptions | None = None) -> None:
        """Record a speak call."""
        self.speaks.append((text, options or SpeechOptions()))

    def stop(self) -> None:
        """Record a stop call."""
        self.stops += 1

    def is_speaking(self) -> bool:
        """Return False — null engine never actually speaks."""
        return False

    def shutdown(self) -> None:
        """No-op shutdown."""


def _sapi_level(value: float) -> int:
    """Map a relative 1.0-centred factor to SAPI's -10..10 scale."""
    return max(-10, min(10, round((value - 1.0) * 10)))


def to_ssml(text: str, options: SpeechOptions) -> str:
    """Wrap *text* in the SAPI XML markup for pitch and rate."""
    return (
        f'<pitch absmiddle="{_sapi_level(options.pitch)}">'
        f'<rate absspeed="{_sapi_level(options.rate)}">'
        f"{escape(text)}"
        "</rate></pitch>"
    )


class Win32TTSEngine:
    """Windows SAPI5 TTS engine via win32com, reused for the whole session.

    A single ``SAPI.SpVoice`` COM object lives in a dedicated STA thread.
    Utterances are spoken asynchronously and polled, so :meth:`stop` can
    purge the utterance in flight instead of waiting for it to finish.

    Gracefully degrades to silence if ``win32com`` / ``pythoncom`` are not
    available (any non-Windows host).
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[str, SpeechOptions] | None] = queue.Queue()
        self._stop_flag = threading.Event()
        self._purge = threading.Event()
        self._speaking = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True, name="Win32TTSThread")
        self._thread.start()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def speak(self, text: str, options: SpeechOptions | None = None) -> None:
        """Queue *text* for speech.  Never blocks."""
        self._queue.put((text, options or SpeechOptions()))

    def stop(self) -> None:
        """Drain the speech queue and cut off the current utterance."""
        while not self._queue.empty():
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        if self._speaking.is_set():
            self._purge.set()

    def is_speaking(self) -> bool:
        """Return True if the TTS thread is currently producing speech."""
        return self._speaking.is_set()

    def shutdown(self) -> None:
        """Stop the background thread cleanly."""
        self._stop_flag.set()
        self._queue.put(None)  # Unblock any pending queue.get()
        self._thread.join(timeout=2.0)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run(self) -> None:
        try:
            import pythoncom
            import win32com.client
        except ImportError:
            return

        try:
            pythoncom.CoInitialize()  # STA apartment for SAPI COM object
            speaker = win32com.client.Dispatch("SAPI.SpVoice")
        except Exception as exc:
            _logger.warning("SAPI voice unavailable: %s", exc)
            return

        while not self._stop_flag.is_set():
            try:
                item = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue
            if item is None:
                break
            text, options = item
            self._purge.clear()
            try:
                self._speaking.set()
                speaker.Volume = round(max(0.0, min(1.0, options.volume)) * 100)
                speaker.Speak(to_ssml(text, options), _SVSF_ASYNC | _SVSF_IS_XML)
                while not speaker.WaitUntilDone(100):
                    if self._purge.is_set() or self._stop_flag.is_set():
                        speaker.Speak("", _SVSF_ASYNC | _SVSF_PURGE_BEFORE_SPEAK)
                        break
            except Exception as exc:
                _logger.warning("Speech playback failed: %s", exc)
            finally:
                self._speaking.clear()

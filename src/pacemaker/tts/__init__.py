"""Speech output for spoken pace feedback."""

from pacemaker.tts.engine import NullTTSEngine, SpeechOptions, Win32TTSEngine

__all__ = ["NullTTSEngine", "SpeechOptions", "Win32TTSEngine"]

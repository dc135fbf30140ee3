"""Audio metadata helpers."""

from ayahrender.audio.durations import AudioDurationResolver
from ayahrender.audio.probe import FFprobeDurationParser, parse_probe_duration

__all__ = ["AudioDurationResolver", "FFprobeDurationParser", "parse_probe_duration"]

"""Wavcheck package: sinewave WAV generation and frequency analysis."""

from .compare import ChannelComparison, ToneVerdict, compare_channel
from .errors import (
    CorruptedHeader,
    FFTError,
    MalformedInput,
    NotEnoughRange,
    TooShort,
    UnsupportedFormat,
    WavCheckError,
)
from .layout import expected_frequencies
from .spectrum import ChannelAnalysis, FrequencySet, analyze, analyze_channel
from .synth import generate_wav
from .wav import AudioParams, build_header, parse_header, read_wav

__all__ = [
    "AudioParams",
    "ChannelAnalysis",
    "ChannelComparison",
    "CorruptedHeader",
    "FFTError",
    "FrequencySet",
    "MalformedInput",
    "NotEnoughRange",
    "ToneVerdict",
    "TooShort",
    "UnsupportedFormat",
    "WavCheckError",
    "analyze",
    "analyze_channel",
    "build_header",
    "compare_channel",
    "expected_frequencies",
    "generate_wav",
    "parse_header",
    "read_wav",
]

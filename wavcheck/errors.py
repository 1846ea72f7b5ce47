"""Exceptions raised while reading, generating or analysing WAV audio."""

from __future__ import annotations


class WavCheckError(ValueError):
    """Base class for every error reported by :mod:`wavcheck`."""


class MalformedInput(WavCheckError):
    """The input is not a complete PCM WAV stream."""


class UnsupportedFormat(MalformedInput):
    """The WAV header describes a format other than 16/24/32-bit PCM."""


class CorruptedHeader(MalformedInput):
    """The WAV header carries inconsistent channel, rate or size fields."""


class TooShort(MalformedInput):
    """The audio is shorter than ``MIN_DURATION`` seconds."""


class NotEnoughRange(WavCheckError):
    """The band cannot hold the requested tones without overlap."""


class FFTError(WavCheckError):
    """A block could not be transformed."""


__all__ = [
    "WavCheckError",
    "MalformedInput",
    "UnsupportedFormat",
    "CorruptedHeader",
    "TooShort",
    "NotEnoughRange",
    "FFTError",
]

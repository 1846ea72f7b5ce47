"""Sliding-window spectral analysis of PCM audio.

This module turns an interleaved PCM buffer into the list of dominant
frequencies found on each channel.  Every channel is converted to real
samples in ``[-1, 1]`` and walked with half-overlapping windows of at
least one second.  Each window is Hann-tapered and transformed, and the
bins rising above half of the block's maximum power are reduced to one
frequency per peak.  Frequencies are merged into a per-channel
:class:`FrequencySet` where tones closer than ``FREQ_ACCURACY`` collapse
into their first occurrence.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np
from scipy.signal import get_window

from .constants import (
    FREQ_ACCURACY,
    FULL_SCALE,
    MAX_FREQS_PER_CHAN,
    MIN_FREQ,
    POWER_NOISE_LEVEL,
)
from .errors import FFTError
from .wav import AudioParams

logger = logging.getLogger(__name__)


def next_pow_2(value: int) -> int:
    """Return the smallest power of two strictly greater than ``value``.

    Values of ``0`` and ``1`` map to ``1`` and anything with bit 31 set
    saturates at ``2**31``.
    """
    if value & (1 << 31):
        return 1 << 31
    if value <= 1:
        return 1
    return 1 << value.bit_length()


class FrequencySet:
    """Insertion-ordered set of frequencies compared with a tolerance.

    A frequency is only added when no member lies within ``accuracy`` hertz
    of it.  Nearness is not transitive: ``100`` and ``102`` may both be
    members even though ``101`` is near each of them.

    Parameters
    ----------
    accuracy:
        Largest difference, in hertz, between two equal frequencies.
    capacity:
        Maximum number of members.  Further insertions are refused.
    """

    def __init__(
        self,
        accuracy: int = FREQ_ACCURACY,
        capacity: int = MAX_FREQS_PER_CHAN,
    ) -> None:
        self.accuracy = accuracy
        self.capacity = capacity
        self._freqs: list[int] = []

    def __contains__(self, frequency: object) -> bool:
        if not isinstance(frequency, (int, np.integer)):
            return False
        return any(abs(f - int(frequency)) <= self.accuracy for f in self._freqs)

    def __iter__(self) -> Iterator[int]:
        return iter(self._freqs)

    def __len__(self) -> int:
        return len(self._freqs)

    def __repr__(self) -> str:
        return f"FrequencySet({self._freqs!r})"

    def add(self, frequency: int) -> bool:
        """Insert ``frequency`` and return ``True`` if it was new."""
        if frequency in self:
            return False
        if len(self._freqs) >= self.capacity:
            logger.warning("Maximum number of detected frequencies reached")
            return False
        self._freqs.append(int(frequency))
        return True

    def tolist(self) -> list[int]:
        return list(self._freqs)


@dataclass
class ChannelAnalysis:
    """Outcome of the sliding analysis of one channel.

    ``threshold`` is the highest peak threshold of any accepted block and
    gives an idea of the signal level; it stays ``0.0`` when every block
    was rejected as noise.
    """

    frequencies: list[int] = field(default_factory=list)
    threshold: float = 0.0


# ─── Channel extraction ───────────────────────────────────────────────────


def extract_channel(data: bytes, channel: int, params: AudioParams) -> np.ndarray:
    """Return ``channel`` of the interleaved PCM ``data`` as floats.

    Samples are little-endian signed integers of ``params.bits_per_sample``
    bits, divided by the full-scale value of that width.  No clipping or
    DC removal is applied.

    Parameters
    ----------
    data:
        Interleaved sample bytes, at least ``params.data_size`` long.
    channel:
        Zero-based channel index.
    params:
        Audio parameters describing ``data``.

    Returns
    -------
    np.ndarray
        ``params.samples_per_chan`` samples as ``float64``.
    """

    if not 0 <= channel < params.channels:
        raise IndexError(f"channel {channel} out of range (0-{params.channels - 1})")

    raw = np.frombuffer(data, dtype=np.uint8, count=params.data_size)
    if params.bits_per_sample == 24:
        frames = raw.reshape(params.samples_per_chan, params.channels, 3)
        triplets = frames[:, channel, :].astype(np.int32)
        samples = triplets[:, 0] | (triplets[:, 1] << 8) | (triplets[:, 2] << 16)
        # Sign-extend from bit 23.
        samples = (samples ^ 0x800000) - 0x800000
    else:
        dtype = np.dtype(f"<i{params.bytes_per_sample}")
        samples = raw.view(dtype).reshape(params.samples_per_chan, params.channels)[:, channel]

    return samples.astype(np.float64) / FULL_SCALE[params.bits_per_sample]


# ─── Spectrum ─────────────────────────────────────────────────────────────


@functools.lru_cache(maxsize=8)
def _hann(size: int) -> np.ndarray:
    # Periodic window: 0.5 * (1 - cos(2 * pi * i / size)).
    window = get_window("hann", size, fftbins=True)
    window.setflags(write=False)
    return window


def power_spectrum(block: np.ndarray) -> np.ndarray:
    """Hann-window ``block`` and return its power spectrum.

    Parameters
    ----------
    block:
        Real samples; the length must be a power of two.  The array is not
        modified.

    Returns
    -------
    np.ndarray
        ``len(block) // 2 + 1`` magnitudes, bin ``k`` standing for
        ``k * sample_rate / len(block)`` hertz.

    Raises
    ------
    FFTError
        If the block length is not a power of two.
    """

    size = len(block)
    if size < 2 or size & (size - 1):
        raise FFTError(f"block length {size} is not a power of two")

    coeffs = np.fft.rfft(np.asarray(block, dtype=np.float64) * _hann(size))
    power = np.abs(coeffs)
    # DC and Nyquist bins are purely real.
    power[0] = abs(coeffs[0].real)
    power[-1] = abs(coeffs[-1].real)
    return power


def extract_peaks(
    spectrum: np.ndarray, sample_rate: int
) -> tuple[list[int], Optional[float]]:
    """Find the dominant frequencies of one power spectrum.

    Only bins from ``MIN_FREQ`` up to, but excluding, the Nyquist bin are
    considered.  The threshold is half of the largest power in that range;
    blocks whose threshold is under ``POWER_NOISE_LEVEL`` are rejected.
    Every run of bins above the threshold that falls back below it yields
    the frequency of its strongest bin (the lowest one on ties).  A run
    still above the threshold at the end of the range is dropped.

    Args:
        spectrum: Power spectrum as returned by :func:`power_spectrum`.
        sample_rate: Sampling frequency of the analysed block.

    Returns:
        ``(frequencies, threshold)`` where ``frequencies`` are whole hertz
        in ascending order and ``threshold`` is ``None`` for a rejected
        block.
    """

    size = 2 * (len(spectrum) - 1)
    first = MIN_FREQ * size // sample_rate
    band = np.asarray(spectrum[first : size // 2])
    if band.size == 0:
        return [], None

    threshold = max(float(band.max()), 0.0) / 2
    if threshold < POWER_NOISE_LEVEL:
        return [], None

    above = band > threshold
    edges = np.diff(above.astype(np.int8))
    starts = np.flatnonzero(edges == 1) + 1
    ends = np.flatnonzero(edges == -1) + 1
    if above[0]:
        starts = np.concatenate(([0], starts))

    freqs: list[int] = []
    # zip() leaves out a final run that never drops below the threshold.
    for start, end in zip(starts, ends):
        peak = first + int(start) + int(np.argmax(band[start:end]))
        freqs.append(sample_rate * peak // size)
    return freqs, threshold


# ─── Sliding analysis ─────────────────────────────────────────────────────


def analyze_channel(wave: np.ndarray, sample_rate: int) -> ChannelAnalysis:
    """Run the sliding-window analysis over one channel.

    The first and last half second are skipped.  Windows are twice the
    next power of two above half a second and slide by half their length,
    so any tone is wholly contained in at least one window.

    Parameters
    ----------
    wave:
        Channel samples as returned by :func:`extract_channel`.
    sample_rate:
        Sampling frequency in hertz.

    Returns
    -------
    ChannelAnalysis
        Deduplicated frequencies in detection order and the maximum
        threshold of the accepted blocks.
    """

    offset = sample_rate // 2
    slide = next_pow_2(sample_rate // 2)
    window_size = 2 * slide

    found = FrequencySet()
    max_threshold = 0.0
    for start in range(offset, len(wave) - offset - window_size, slide):
        block = wave[start : start + window_size]
        try:
            spectrum = power_spectrum(block)
        except FFTError as exc:
            logger.debug("Skipping block at sample %d: %s", start, exc)
            continue

        freqs, threshold = extract_peaks(spectrum, sample_rate)
        if threshold is None:
            continue
        max_threshold = max(max_threshold, threshold)
        for freq in freqs:
            found.add(freq)

    return ChannelAnalysis(frequencies=found.tolist(), threshold=max_threshold)


def analyze(data: bytes, params: AudioParams) -> list[ChannelAnalysis]:
    """Analyse every channel of ``data`` in order."""
    return [
        analyze_channel(extract_channel(data, channel, params), params.sample_rate)
        for channel in range(params.channels)
    ]


__all__ = [
    "next_pow_2",
    "FrequencySet",
    "ChannelAnalysis",
    "extract_channel",
    "power_spectrum",
    "extract_peaks",
    "analyze_channel",
    "analyze",
]

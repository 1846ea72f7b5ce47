"""Synthesis of the deterministic sinewave test signal."""

from __future__ import annotations

import numpy as np

from .constants import FULL_SCALE
from .layout import expected_frequencies
from .wav import AudioParams, build_header


def render_waves(freqs: np.ndarray, params: AudioParams) -> np.ndarray:
    """Sum the tones of each channel into a ``(channels, samples)`` array.

    Every channel holds ``sin(2 * pi * f * s / sample_rate)`` for each of
    its tones, divided by the number of tones so the sum stays within
    ``[-1, 1]``.
    """

    freqs = np.atleast_2d(freqs)
    positions = np.arange(params.samples_per_chan, dtype=np.float64)
    waves = np.zeros((freqs.shape[0], params.samples_per_chan), dtype=np.float64)
    for channel, row in enumerate(freqs):
        for freq in row:
            waves[channel] += np.sin(2.0 * np.pi * float(freq) * positions / params.sample_rate)
        waves[channel] /= len(row)
    return waves


def to_pcm(waves: np.ndarray, bits_per_sample: int) -> bytes:
    """Quantise ``(channels, samples)`` floats to interleaved PCM bytes.

    Values are scaled by the full-scale value of the sample width and
    truncated toward zero.
    """

    if bits_per_sample not in FULL_SCALE:
        raise ValueError(f"Unsupported number of bits per sample: {bits_per_sample}")

    scaled = np.trunc(np.asarray(waves, dtype=np.float64) * FULL_SCALE[bits_per_sample])
    frames = np.ascontiguousarray(scaled.T)
    if bits_per_sample == 16:
        return frames.astype("<i2").tobytes()
    wide = np.ascontiguousarray(frames.astype("<i4"))
    if bits_per_sample == 32:
        return wide.tobytes()
    # Keep the three low-order bytes of each little-endian sample.
    return wide.view(np.uint8).reshape(*wide.shape, 4)[..., :3].tobytes()


def generate_wav(params: AudioParams, freqs: np.ndarray | None = None) -> bytes:
    """Return a complete WAV file carrying the tone layout of ``params``.

    Args:
        params: Generator parameters, ``freqs_per_chan`` included.
        freqs: Tones per channel; computed from ``params`` when omitted.

    Raises:
        NotEnoughRange: If the layout cannot be computed.
    """

    if freqs is None:
        freqs = expected_frequencies(
            params.channels, params.sample_rate, params.freqs_per_chan
        )
    waves = render_waves(freqs, params)
    return build_header(params) + to_pcm(waves, params.bits_per_sample)


__all__ = ["render_waves", "to_pcm", "generate_wav"]

"""Deterministic layout of the tones written by the generator.

Tones start at ``MIN_FREQ`` and are spread evenly up to the Nyquist
frequency.  Each channel is shifted by a fraction of the tone spacing so
that no two channels share a tone, which lets the analyzer detect
swapped or mixed channels.
"""

from __future__ import annotations

import logging

import numpy as np

from .constants import MIN_FREQ
from .errors import NotEnoughRange

logger = logging.getLogger(__name__)


def layout_deltas(channels: int, sample_rate: int, freqs_per_chan: int) -> tuple[int, int]:
    """Return ``(delta_f, delta_c)`` for the given layout.

    ``delta_f`` separates consecutive tones of a channel and ``delta_c``
    separates the same tone on consecutive channels.

    Raises:
        NotEnoughRange: If either spacing rounds down to zero.
    """

    # Stay under the Nyquist frequency.
    delta_f = (sample_rate // 2 - MIN_FREQ) // freqs_per_chan
    delta_c = delta_f // (channels + 1)
    if delta_f <= 0 or delta_c <= 0:
        raise NotEnoughRange("Cannot generate sine waves: not enough range")
    return delta_f, delta_c


def expected_frequencies(channels: int, sample_rate: int, freqs_per_chan: int) -> np.ndarray:
    """Return the tones of every channel as a ``(channels, freqs_per_chan)`` array.

    Tone ``i`` of channel ``c`` is ``MIN_FREQ + i * delta_f + c * delta_c``.

    Parameters
    ----------
    channels:
        Number of channels.
    sample_rate:
        Sampling frequency in hertz.
    freqs_per_chan:
        Number of tones on each channel.

    Returns
    -------
    np.ndarray
        Integer frequencies in hertz, one row per channel.

    Raises
    ------
    NotEnoughRange
        If the band is too narrow for the requested tones.
    """

    delta_f, delta_c = layout_deltas(channels, sample_rate, freqs_per_chan)
    tones = np.arange(freqs_per_chan, dtype=np.int64) * delta_f
    shifts = np.arange(channels, dtype=np.int64)[:, np.newaxis] * delta_c
    return MIN_FREQ + tones[np.newaxis, :] + shifts


def log_frequencies(freqs: np.ndarray) -> None:
    """List the tones of every channel on the diagnostic log."""
    for channel, row in enumerate(freqs):
        logger.info("Frequencies on channel %d:", channel)
        for index, freq in enumerate(row):
            logger.info("* %d/ %d Hz", index, freq)
    logger.info("")


__all__ = ["layout_deltas", "expected_frequencies", "log_frequencies"]

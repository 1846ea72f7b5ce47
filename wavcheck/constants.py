"""Constants shared by the generator and the analyzer.

The values in this module define the frequency band considered during
analysis, the tolerances used when comparing tones and the defaults of
the generator.  Centralising them keeps both tools in agreement about
the deterministic tone layout they exchange.
"""

from __future__ import annotations

# ─── Analysis band ─────────────────────────────────────────────────────────

# Lowest frequency considered during analysis, and the base of the
# deterministic tone layout.  Sample rates must be at least twice this
# value for a tone to fit under the Nyquist frequency.
MIN_FREQ: int = 200  # Hz

# Shortest audio accepted by either tool.  The sliding analysis skips half
# a second at each end and needs at least one window of one second or more.
MIN_DURATION: int = 3  # seconds

# ─── Peak detection ──────────────────────────────────────────────────────

# Upper bound on the number of distinct frequencies recorded per channel.
MAX_FREQS_PER_CHAN: int = 64

# Blocks whose peak threshold (half the maximum power) falls under this
# level are considered noise and discarded.  Arbitrary unit, relative to
# an unnormalised FFT of samples in [-1, 1].
POWER_NOISE_LEVEL: float = 5.0

# Two frequencies closer than this are the same tone.
FREQ_ACCURACY: int = 1  # Hz

# ─── PCM format ──────────────────────────────────────────────────────────

WAVE_FORMAT_PCM: int = 0x0001

SUPPORTED_BITS_PER_SAMPLE: tuple[int, ...] = (16, 24, 32)

# Denominator used to bring integer samples into [-1, 1].
FULL_SCALE: dict[int, int] = {
    16: 0x7FFF,
    24: 0x7FFFFF,
    32: 0x7FFFFFFF,
}

# Size of the fixed RIFF/fmt/data prefix preceding the samples.
WAV_HEADER_SIZE: int = 44

UINT32_MAX: int = 0xFFFFFFFF

# ─── Generator defaults ──────────────────────────────────────────────────

DEFAULT_CHANNELS: int = 2
DEFAULT_SAMPLE_RATE: int = 48_000
DEFAULT_BITS_PER_SAMPLE: int = 32
DEFAULT_DURATION: int = 10  # seconds
DEFAULT_FREQS_PER_CHAN: int = 4

__all__ = [
    "MIN_FREQ",
    "MIN_DURATION",
    "MAX_FREQS_PER_CHAN",
    "POWER_NOISE_LEVEL",
    "FREQ_ACCURACY",
    "WAVE_FORMAT_PCM",
    "SUPPORTED_BITS_PER_SAMPLE",
    "FULL_SCALE",
    "WAV_HEADER_SIZE",
    "UINT32_MAX",
    "DEFAULT_CHANNELS",
    "DEFAULT_SAMPLE_RATE",
    "DEFAULT_BITS_PER_SAMPLE",
    "DEFAULT_DURATION",
    "DEFAULT_FREQS_PER_CHAN",
]

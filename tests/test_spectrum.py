import logging
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from wavcheck.constants import MAX_FREQS_PER_CHAN, MIN_FREQ, POWER_NOISE_LEVEL
from wavcheck.errors import FFTError
from wavcheck.spectrum import (
    FrequencySet,
    analyze,
    analyze_channel,
    extract_channel,
    extract_peaks,
    next_pow_2,
    power_spectrum,
)
from wavcheck.wav import AudioParams


def _params(channels: int, bits: int, samples: int, rate: int = 8000) -> AudioParams:
    return AudioParams(
        channels=channels,
        sample_rate=rate,
        bits_per_sample=bits,
        samples_per_chan=samples,
        duration_s=samples // rate,
    )


def _sine(freq: float, sr: int, dur: float, amp: float = 1.0) -> np.ndarray:
    positions = np.arange(int(sr * dur))
    return amp * np.sin(2 * np.pi * freq * positions / sr)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 1),
        (1, 1),
        (2, 4),
        (3, 4),
        (4000, 4096),
        (24_000, 32_768),
        (32_768, 65_536),
        ((1 << 31) + 5, 1 << 31),
    ],
)
def test_next_pow_2(value: int, expected: int) -> None:
    assert next_pow_2(value) == expected


# ─── FrequencySet ────────────────────────────────────────────────────────


def test_frequency_set_suppresses_near_duplicates() -> None:
    found = FrequencySet()
    assert found.add(1000)
    assert not found.add(999)
    assert not found.add(1001)
    assert found.add(1002)
    assert found.tolist() == [1000, 1002]


def test_frequency_set_nearness_is_not_transitive() -> None:
    found = FrequencySet()
    found.add(100)
    found.add(102)
    assert not found.add(101)
    assert list(found) == [100, 102]


def test_frequency_set_refuses_beyond_capacity(caplog: pytest.LogCaptureFixture) -> None:
    found = FrequencySet()
    for i in range(MAX_FREQS_PER_CHAN):
        assert found.add(MIN_FREQ + 10 * i)
    with caplog.at_level(logging.WARNING):
        assert not found.add(50_000)
    assert len(found) == MAX_FREQS_PER_CHAN
    assert "Maximum number of detected frequencies reached" in caplog.text


# ─── Channel extraction ──────────────────────────────────────────────────


def test_extract_channel_16_bit_stereo() -> None:
    frames = np.array([[32767, -32767], [0, 16384], [-16384, 1]], dtype="<i2")
    params = _params(2, 16, 3)
    left = extract_channel(frames.tobytes(), 0, params)
    right = extract_channel(frames.tobytes(), 1, params)
    np.testing.assert_allclose(left, [1.0, 0.0, -16384 / 32767])
    np.testing.assert_allclose(right, [-1.0, 16384 / 32767, 1 / 32767])


def test_extract_channel_24_bit_sign_extends() -> None:
    # 0x7FFFFF, -1 (0xFFFFFF) and -0x800000 on a single channel.
    data = bytes([0xFF, 0xFF, 0x7F, 0xFF, 0xFF, 0xFF, 0x00, 0x00, 0x80])
    wave = extract_channel(data, 0, _params(1, 24, 3))
    np.testing.assert_allclose(wave, [1.0, -1 / 0x7FFFFF, -0x800000 / 0x7FFFFF])


def test_extract_channel_32_bit() -> None:
    frames = np.array([[2147483647, 0, -1073741824]], dtype="<i4").T
    wave = extract_channel(frames.tobytes(), 0, _params(1, 32, 3))
    np.testing.assert_allclose(wave, [1.0, 0.0, -1073741824 / 2147483647])


def test_extract_channel_rejects_bad_index() -> None:
    with pytest.raises(IndexError):
        extract_channel(bytes(12), 2, _params(2, 16, 3))


# ─── Spectrum ────────────────────────────────────────────────────────────


def test_power_spectrum_peaks_at_tone_bin() -> None:
    size = 1024
    block = np.sin(2 * np.pi * 64 * np.arange(size) / size)
    original = block.copy()
    power = power_spectrum(block)
    assert power.shape == (size // 2 + 1,)
    assert int(np.argmax(power)) == 64
    # Hann-windowed unit sine on an exact bin.
    assert power[64] == pytest.approx(size / 4)
    np.testing.assert_array_equal(block, original)


def test_power_spectrum_requires_power_of_two() -> None:
    with pytest.raises(FFTError):
        power_spectrum(np.zeros(1000))


def test_power_spectrum_dc_is_real_magnitude() -> None:
    power = power_spectrum(-np.ones(64))
    assert power[0] == pytest.approx(32.0)
    assert np.all(power >= 0.0)


# ─── Peak extraction ─────────────────────────────────────────────────────
# With 8192 Hz and 1024-point blocks each bin spans 8 Hz and MIN_FREQ
# falls on bin 25.


def test_extract_peaks_one_frequency_per_run() -> None:
    spectrum = np.zeros(513)
    spectrum[50:53] = [20.0, 40.0, 30.0]
    spectrum[100] = 40.0
    freqs, threshold = extract_peaks(spectrum, 8192)
    assert threshold == pytest.approx(20.0)
    assert freqs == [8192 * 51 // 1024, 800]


def test_extract_peaks_keeps_lowest_bin_on_ties() -> None:
    spectrum = np.zeros(513)
    spectrum[60:62] = 40.0
    freqs, _ = extract_peaks(spectrum, 8192)
    assert freqs == [480]


def test_extract_peaks_rejects_noise() -> None:
    spectrum = np.full(513, 1.0)
    spectrum[200] = 2 * POWER_NOISE_LEVEL - 0.5
    assert extract_peaks(spectrum, 8192) == ([], None)


def test_extract_peaks_ignores_bins_below_min_freq_and_nyquist() -> None:
    spectrum = np.zeros(513)
    spectrum[10] = 1000.0
    spectrum[512] = 1000.0
    spectrum[100] = 40.0
    freqs, threshold = extract_peaks(spectrum, 8192)
    assert freqs == [800]
    assert threshold == pytest.approx(20.0)


def test_extract_peaks_drops_run_reaching_end_of_band() -> None:
    spectrum = np.zeros(513)
    spectrum[100] = 40.0
    spectrum[510:512] = 40.0
    freqs, _ = extract_peaks(spectrum, 8192)
    assert freqs == [800]


def test_extract_peaks_empty_band_when_rate_too_low() -> None:
    # MIN_FREQ above the Nyquist frequency leaves no bins to scan.
    spectrum = np.full(513, 1000.0)
    assert extract_peaks(spectrum, 300) == ([], None)


# ─── Sliding analysis ────────────────────────────────────────────────────


def test_analyze_channel_single_exact_tone() -> None:
    sr = 8000
    result = analyze_channel(_sine(1000, sr, 4.0), sr)
    assert result.frequencies == [1000]
    # Window of 8192 samples: 1000 Hz lands on bin 1024.
    assert result.threshold == pytest.approx(8192 / 8, rel=1e-3)


def test_analyze_channel_silence() -> None:
    result = analyze_channel(np.zeros(5 * 8000), 8000)
    assert result.frequencies == []
    assert result.threshold == 0.0


def test_analyze_channel_too_short_for_a_window() -> None:
    sr = 8000
    result = analyze_channel(_sine(1000, sr, 2.0), sr)
    assert result.frequencies == []
    assert result.threshold == 0.0


def test_analyze_channel_no_block_fits_at_65536_hz() -> None:
    # The slide doubles to 65536, so a window spans 131072 samples.
    sr = 65_536
    result = analyze_channel(_sine(1000, sr, 3.0), sr)
    assert result.frequencies == []
    assert result.threshold == 0.0


def test_analyze_channel_invariants_with_noise() -> None:
    sr = 8000
    rng = np.random.default_rng(7)
    wave = (
        _sine(440, sr, 5.0, 0.3)
        + _sine(1250, sr, 5.0, 0.3)
        + _sine(3100, sr, 5.0, 0.3)
        + rng.normal(scale=0.01, size=5 * sr)
    )
    result = analyze_channel(wave, sr)
    freqs = result.frequencies
    assert 0 < len(freqs) <= MAX_FREQS_PER_CHAN
    assert all(MIN_FREQ <= f < sr / 2 for f in freqs)
    for i, a in enumerate(freqs):
        for b in freqs[i + 1 :]:
            assert abs(a - b) > 1
    assert result.threshold >= POWER_NOISE_LEVEL
    for tone in (440, 1250, 3100):
        assert any(abs(f - tone) <= 1 for f in freqs)


def test_analyze_walks_every_channel() -> None:
    sr = 8000
    left = _sine(1000, sr, 4.0, 0.5)
    right = np.zeros_like(left)
    frames = np.trunc(np.stack([left, right], axis=1) * 32767).astype("<i2")
    params = _params(2, 16, len(left), rate=sr)
    results = analyze(frames.tobytes(), params)
    assert [r.frequencies for r in results] == [[1000], []]
    assert results[1].threshold == 0.0

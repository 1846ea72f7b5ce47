"""Comparison of detected frequencies against the expected tone layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from .constants import FREQ_ACCURACY


@dataclass(frozen=True)
class ToneVerdict:
    """Whether one expected tone was detected.

    ``detected`` is the first detected frequency within tolerance of
    ``expected``, or ``None`` when the tone is missing.
    """

    index: int
    expected: int
    detected: Optional[int] = None

    @property
    def matched(self) -> bool:
        return self.detected is not None

    @property
    def diff(self) -> int:
        """Signed error ``detected - expected`` in hertz (``0`` if missing)."""
        if self.detected is None:
            return 0
        return self.detected - self.expected


@dataclass
class ChannelComparison:
    """Verdicts for every expected tone of a channel plus unexpected ones."""

    verdicts: list[ToneVerdict] = field(default_factory=list)
    spurious: list[int] = field(default_factory=list)


def _nearest(frequency: int, candidates: Sequence[int], accuracy: int) -> Optional[int]:
    for candidate in candidates:
        if abs(int(candidate) - int(frequency)) <= accuracy:
            return int(candidate)
    return None


def compare_channel(
    detected: Sequence[int],
    expected: Sequence[int],
    *,
    accuracy: int = FREQ_ACCURACY,
) -> ChannelComparison:
    """Cross-check detected frequencies of one channel against ``expected``.

    Args:
        detected: Frequencies reported by the analyzer, in detection order.
        expected: Tones of the channel, in layout order.
        accuracy: Tolerance in hertz for a match.

    Returns:
        A :class:`ChannelComparison` holding one verdict per expected tone
        and the detected frequencies that match no expected tone.
    """

    verdicts = [
        ToneVerdict(index, int(tone), _nearest(tone, detected, accuracy))
        for index, tone in enumerate(expected)
    ]
    spurious = [
        int(freq) for freq in detected if _nearest(freq, expected, accuracy) is None
    ]
    return ChannelComparison(verdicts=verdicts, spurious=spurious)


__all__ = ["ToneVerdict", "ChannelComparison", "compare_channel"]

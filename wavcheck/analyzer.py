"""``wav-analyzer``: report the major frequencies of a WAV file.

The file is read from standard input.  Without options every channel's
detected frequencies are listed.  With ``-f <n>`` they are checked against
the ``n`` tones per channel that ``wav-generator -f <n>`` would have
written for the same channel count and sample rate.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .cli import configure_logging, positive_int
from .compare import ChannelComparison, compare_channel
from .constants import MAX_FREQS_PER_CHAN
from .errors import MalformedInput, WavCheckError
from .layout import expected_frequencies
from .spectrum import ChannelAnalysis, analyze
from .wav import log_parameters, read_wav

logger = logging.getLogger(__name__)


def format_found(results: Sequence[ChannelAnalysis]) -> list[str]:
    """Render the plain analysis report, one list entry per line."""
    lines: list[str] = []
    for channel, result in enumerate(results):
        lines.append(
            f"Frequencies found on channel {channel} "
            f"(max threshold: {result.threshold:.1f}):"
        )
        if not result.frequencies:
            lines.append("None.")
        lines.extend(f"* {freq} Hz" for freq in result.frequencies)
    return lines


def format_comparison(
    results: Sequence[ChannelAnalysis],
    comparisons: Sequence[ChannelComparison],
) -> list[str]:
    """Render the expected/detected comparison report."""
    lines: list[str] = []
    for channel, (result, comparison) in enumerate(zip(results, comparisons)):
        empty = "" if result.frequencies else "empty, "
        lines.append(
            f"Frequencies expected on channel {channel} "
            f"({empty}max threshold: {result.threshold:.1f}):"
        )
        for verdict in comparison.verdicts:
            line = f"* {verdict.index}/ {verdict.expected} Hz: "
            if not verdict.matched:
                line += "KO"
            else:
                line += "ok"
                if verdict.diff:
                    line += f" ({verdict.diff} Hz)"
            lines.append(line)

        if comparison.spurious:
            lines.append(f"Frequencies *not* expected on channel {channel}:")
            lines.extend(f"*    {freq} Hz: spurious" for freq in comparison.spurious)
    lines.append("")
    return lines


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wav-analyzer",
        description=(
            "Analyzes a WAV audio file on the standard input and exposes its "
            "major frequencies. The audio parameters are extracted from the "
            f"WAV header. Up to {MAX_FREQS_PER_CHAN} frequencies can be "
            "discovered per channel. It is possible to check for frequencies "
            "generated with the same heuristics."
        ),
        usage="%(prog)s [-f <nfreqs>] < record.wav",
    )
    parser.add_argument(
        "-f",
        dest="freqs_per_chan",
        type=positive_int,
        default=0,
        help="Number of expected frequencies per channel",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    try:
        params, data = read_wav(sys.stdin.buffer)
    except MalformedInput as exc:
        logger.error("%s", exc)
        return 1
    except MemoryError:
        logger.error("Not enough memory to read the audio content")
        return -1

    params = params.with_freqs_per_chan(args.freqs_per_chan)
    logger.info("Analyzing audio file with following parameters:")
    log_parameters(params)
    logger.info("")

    try:
        results = analyze(data, params)
        if not params.freqs_per_chan:
            lines = format_found(results)
        else:
            expected = expected_frequencies(
                params.channels, params.sample_rate, params.freqs_per_chan
            )
            comparisons = [
                compare_channel(result.frequencies, tones)
                for result, tones in zip(results, expected)
            ]
            lines = format_comparison(results, comparisons)
    except WavCheckError as exc:
        logger.error("%s", exc)
        return -1
    except MemoryError:
        logger.error("Not enough memory to analyze %d channels", params.channels)
        return -1

    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    sys.exit(main())

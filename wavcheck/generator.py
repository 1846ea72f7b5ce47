"""``wav-generator``: write a WAV file of known sinewaves to standard output.

Listening to the result is discouraged: pure sinewaves are as
mathematically beautiful as they are unpleasant to the human ear.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .cli import configure_logging, positive_int
from .constants import (
    DEFAULT_BITS_PER_SAMPLE,
    DEFAULT_CHANNELS,
    DEFAULT_DURATION,
    DEFAULT_FREQS_PER_CHAN,
    DEFAULT_SAMPLE_RATE,
    MIN_DURATION,
    MIN_FREQ,
)
from .errors import WavCheckError
from .layout import expected_frequencies, log_frequencies
from .synth import generate_wav
from .wav import AudioParams, log_parameters

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wav-generator",
        description=(
            "Generates a WAV audio file on the standard output, with a number "
            "of known frequencies added on each channel."
        ),
        usage="%(prog)s [-c <nchans>] [-r <rate>] [-b <bps>] [-d <duration>] "
        "[-f <nfreqs>] > play.wav",
    )
    parser.add_argument(
        "-c",
        dest="channels",
        type=positive_int,
        default=DEFAULT_CHANNELS,
        help=f"Number of channels (default: {DEFAULT_CHANNELS})",
    )
    parser.add_argument(
        "-r",
        dest="sample_rate",
        type=positive_int,
        default=DEFAULT_SAMPLE_RATE,
        help=f"Sampling rate in Hz (default: {DEFAULT_SAMPLE_RATE}, min: {2 * MIN_FREQ})",
    )
    parser.add_argument(
        "-b",
        dest="bits_per_sample",
        type=positive_int,
        default=DEFAULT_BITS_PER_SAMPLE,
        help=f"Bits per sample (default: {DEFAULT_BITS_PER_SAMPLE}, supp: 16, 24, 32)",
    )
    parser.add_argument(
        "-d",
        dest="duration",
        type=positive_int,
        default=DEFAULT_DURATION,
        help=f"Duration in seconds (default: {DEFAULT_DURATION}, min: {MIN_DURATION})",
    )
    parser.add_argument(
        "-f",
        dest="freqs_per_chan",
        type=positive_int,
        default=DEFAULT_FREQS_PER_CHAN,
        help=f"Number of frequencies per channel (default: {DEFAULT_FREQS_PER_CHAN})",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        params = AudioParams.for_generation(
            channels=args.channels,
            sample_rate=args.sample_rate,
            bits_per_sample=args.bits_per_sample,
            duration_s=args.duration,
            freqs_per_chan=args.freqs_per_chan,
        )
    except WavCheckError as exc:
        logger.error("%s", exc)
        parser.print_usage(sys.stderr)
        return -1

    logger.info("Generating audio file with following parameters:")
    log_parameters(params)
    logger.info("")

    try:
        freqs = expected_frequencies(
            params.channels, params.sample_rate, params.freqs_per_chan
        )
        log_frequencies(freqs)
        payload = generate_wav(params, freqs)
    except WavCheckError as exc:
        logger.error("%s", exc)
        return -1
    except MemoryError:
        logger.error("Not enough memory to generate %d bytes of audio", params.data_size)
        return -1

    sys.stdout.buffer.write(payload)
    sys.stdout.buffer.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Helpers shared by the command-line entry points."""

from __future__ import annotations

import argparse
import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Send diagnostics to standard error as bare messages.

    Standard output is reserved for results (the WAV stream or the
    analysis report).
    """
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)


def positive_int(text: str) -> int:
    """``argparse`` type accepting decimal, hex or octal positive integers."""
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError("Wrong user input: negative or null value")
    return value


__all__ = ["configure_logging", "positive_int"]

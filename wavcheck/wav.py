"""Reading and writing the fixed-layout PCM WAV header.

Both tools exchange a minimal RIFF container: a 44 byte prefix made of the
``RIFF``/``WAVE`` tags, a PCM ``fmt `` chunk and a ``data`` chunk header,
followed by interleaved little-endian signed samples.  Only the fields
needed for analysis are trusted when reading (channels, sample rate, bits
per sample and data size); the others are informational.
"""

from __future__ import annotations

import dataclasses
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO

from .constants import (
    MIN_DURATION,
    MIN_FREQ,
    SUPPORTED_BITS_PER_SAMPLE,
    UINT32_MAX,
    WAV_HEADER_SIZE,
    WAVE_FORMAT_PCM,
)
from .errors import CorruptedHeader, MalformedInput, TooShort, UnsupportedFormat, WavCheckError

logger = logging.getLogger(__name__)

# RIFF tag, file length, WAVE tag, fmt tag, fmt size, format tag, channels,
# sample rate, byte rate, block align, bits per sample, data tag, data size.
_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")

# Size of the PCM ``fmt `` chunk payload (format tag up to bits per sample).
_FMT_CHUNK_SIZE = 16


@dataclass(frozen=True)
class AudioParams:
    """Audio parameters shared by every stage of one run.

    Attributes:
        channels: Number of interleaved channels.
        sample_rate: Sampling frequency in hertz.
        bits_per_sample: Width of one PCM sample (16, 24 or 32).
        samples_per_chan: Number of frames in the data chunk.
        duration_s: Whole seconds of audio (``samples_per_chan // sample_rate``).
        freqs_per_chan: Number of deterministic tones per channel, or ``0``
            when no tone layout is involved.
    """

    channels: int
    sample_rate: int
    bits_per_sample: int
    samples_per_chan: int
    duration_s: int
    freqs_per_chan: int = 0

    @property
    def bytes_per_sample(self) -> int:
        return self.bits_per_sample // 8

    @property
    def frame_size(self) -> int:
        """Bytes holding one sample of every channel."""
        return self.channels * self.bytes_per_sample

    @property
    def data_size(self) -> int:
        return self.samples_per_chan * self.frame_size

    def with_freqs_per_chan(self, freqs_per_chan: int) -> "AudioParams":
        """Return a copy of these parameters with another tone count."""
        return dataclasses.replace(self, freqs_per_chan=freqs_per_chan)

    @classmethod
    def for_generation(
        cls,
        channels: int,
        sample_rate: int,
        bits_per_sample: int,
        duration_s: int,
        freqs_per_chan: int,
    ) -> "AudioParams":
        """Validate generator settings and derive the sample count.

        Raises:
            WavCheckError: If a value is not positive or the sample rate
                cannot hold ``MIN_FREQ``.
            UnsupportedFormat: If ``bits_per_sample`` is not 16, 24 or 32.
            TooShort: If ``duration_s`` is under ``MIN_DURATION``.
        """
        for name, value in (
            ("channels", channels),
            ("sample_rate", sample_rate),
            ("bits_per_sample", bits_per_sample),
            ("duration_s", duration_s),
            ("freqs_per_chan", freqs_per_chan),
        ):
            if value <= 0:
                raise WavCheckError(f"{name} must be positive, got {value}")
        if channels >= 1 << 16:
            raise WavCheckError(f"Too many channels: {channels}")
        if sample_rate < 2 * MIN_FREQ:
            raise WavCheckError(
                f"Invalid frequency: {sample_rate} Hz (min: {2 * MIN_FREQ} Hz)"
            )
        if bits_per_sample not in SUPPORTED_BITS_PER_SAMPLE:
            raise UnsupportedFormat("Unsupported number of bits per sample")
        if duration_s < MIN_DURATION:
            raise TooShort("Audio file would be too short")
        data_size = channels * sample_rate * duration_s * (bits_per_sample // 8)
        # file_len and data_chunk_size are 32-bit header fields.
        if WAV_HEADER_SIZE + data_size > UINT32_MAX:
            raise WavCheckError(f"Audio file would be too large ({data_size} B)")
        return cls(
            channels=channels,
            sample_rate=sample_rate,
            bits_per_sample=bits_per_sample,
            samples_per_chan=sample_rate * duration_s,
            duration_s=duration_s,
            freqs_per_chan=freqs_per_chan,
        )


def parse_header(header: bytes) -> AudioParams:
    """Decode the 44 byte WAV prefix into :class:`AudioParams`.

    Parameters
    ----------
    header:
        At least the first ``WAV_HEADER_SIZE`` bytes of the file.

    Returns
    -------
    AudioParams
        Validated parameters with ``freqs_per_chan`` left at ``0``.

    Raises
    ------
    MalformedInput
        If the prefix is short or its chunk tags are wrong.
    UnsupportedFormat
        If the data is not 16, 24 or 32-bit PCM.
    CorruptedHeader
        If channels, rate or data size are zero, or the data size is not a
        whole number of frames.
    TooShort
        If the audio lasts less than ``MIN_DURATION`` seconds.
    """

    if len(header) < WAV_HEADER_SIZE:
        raise MalformedInput("Malformed WAV file")

    (
        riff_tag,
        _file_len,
        wave_tag,
        fmt_tag,
        _fmt_size,
        format_tag,
        channels,
        sample_rate,
        _byte_rate,
        _block_align,
        bits_per_sample,
        data_tag,
        data_size,
    ) = _HEADER.unpack_from(header)

    if (riff_tag, wave_tag, fmt_tag, data_tag) != (b"RIFF", b"WAVE", b"fmt ", b"data"):
        raise MalformedInput("Malformed WAV file")
    if format_tag != WAVE_FORMAT_PCM:
        raise UnsupportedFormat(f"Unsupported: format tag 0x{format_tag:04x}")
    if not channels or not sample_rate or not data_size:
        raise CorruptedHeader(
            f"Corrupted header ({channels} channels, {sample_rate} Hz, {data_size} B)"
        )
    if bits_per_sample not in SUPPORTED_BITS_PER_SAMPLE:
        raise UnsupportedFormat(f"Unsupported: {bits_per_sample} bits per sample")

    frame_size = channels * (bits_per_sample // 8)
    if data_size % frame_size:
        raise CorruptedHeader(
            f"Corrupted header ({data_size} B is not a multiple of {frame_size} B frames)"
        )

    samples_per_chan = data_size // channels // (bits_per_sample // 8)
    duration_s = samples_per_chan // sample_rate
    if duration_s < MIN_DURATION:
        raise TooShort(f"Audio file too short ({duration_s} seconds)")

    return AudioParams(
        channels=channels,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        samples_per_chan=samples_per_chan,
        duration_s=duration_s,
    )


def read_wav(stream: BinaryIO) -> tuple[AudioParams, bytes]:
    """Read a whole WAV file from ``stream``.

    Returns the parsed parameters and the raw interleaved sample bytes.

    Raises:
        MalformedInput: If the header is invalid or the data chunk is
            shorter than announced.
    """

    params = parse_header(stream.read(WAV_HEADER_SIZE))
    data = stream.read(params.data_size)
    if len(data) != params.data_size:
        raise MalformedInput("Partial audio content, aborting")
    return params, data


def build_header(params: AudioParams) -> bytes:
    """Return the 44 byte WAV prefix describing ``params``."""

    data_size = params.data_size
    return _HEADER.pack(
        b"RIFF",
        WAV_HEADER_SIZE + data_size,
        b"WAVE",
        b"fmt ",
        _FMT_CHUNK_SIZE,
        WAVE_FORMAT_PCM,
        params.channels,
        params.sample_rate,
        params.sample_rate * params.frame_size,
        params.frame_size,
        params.bits_per_sample,
        b"data",
        data_size,
    )


def log_parameters(params: AudioParams) -> None:
    """Describe ``params`` on the diagnostic log."""
    logger.info("* Channels: %d", params.channels)
    logger.info("* Sample rate: %d Hz", params.sample_rate)
    logger.info("* Bits per sample: S%d_LE", params.bits_per_sample)
    logger.info("* Duration: %d seconds", params.duration_s)
    if params.freqs_per_chan:
        logger.info("* Frequencies per channel: %d", params.freqs_per_chan)


__all__ = ["AudioParams", "parse_header", "read_wav", "build_header", "log_parameters"]

"""
Fixed-rate packaging of a volume:
- configure the codec for 3D float32 fixed-rate output and validate the rate
- size the output buffer from the codec's worst case and compress into it
- truncate to the bytes written and save under a name that encodes the rate
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

from ..errors import CodecError
from ..fields import generate_volume
from ..io import load_raw_volume, write_artifact
from ..models import CompressionReport, GridShape, OutputArtifact, Volume
from .codec import Codec, ZfpField, open_codec
from .rate import validate_achieved_rate, validate_requested_rate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompressedStream:
    payload: bytes
    achieved_rate: int
    max_bytes: int


def _default_codec() -> Codec:
    from .zfp import ZfpCodec

    return ZfpCodec()


def raw_source_name(path: str | os.PathLike[str]) -> str:
    return os.path.basename(os.fspath(path))


def generated_source_name(generator: str, shape: GridShape) -> str:
    return f"{generator}_{shape}_float32.gen"


def output_file_name(source_name: str, achieved_rate: int) -> str:
    return f"{source_name}.crate{int(achieved_rate)}.zfp"


def compress_volume(volume: Volume, rate: float, codec: Optional[Codec] = None) -> CompressedStream:
    """
    Compress ``volume`` as a single 3D float32 field at a fixed rate.

    Raises:
        UsageError if ``rate`` is outside [1, 32].
        NonIntegerRateError if the codec rounds the rate to a fractional
        number of bits per value; nothing is compressed in that case.
        CodecError if the codec reports more bytes than its own maximum.
    """
    requested = validate_requested_rate(rate)
    codec = codec if codec is not None else _default_codec()
    field = ZfpField.from_volume(volume)

    with open_codec(codec):
        achieved = codec.configure_fixed_rate(requested, element_type="float32", dimensionality=3)
        logger.info(f"Used compression rate: {achieved}")
        achieved_rate = validate_achieved_rate(requested, achieved)

        max_bytes = int(codec.max_output_size(field))
        buffer = np.zeros(max_bytes, dtype=np.uint8)
        logger.debug(f"Output buffer: {max_bytes} bytes for {volume.shape} at rate {achieved_rate}")
        codec.bind_output_buffer(buffer)
        written = int(codec.compress(field))

    if not 0 <= written <= max_bytes:
        raise CodecError(f"Codec reported {written} bytes written, maximum is {max_bytes}.")
    payload = buffer[:written].tobytes()
    logger.info(f"Total compressed size: {written}B")
    return CompressedStream(payload=payload, achieved_rate=achieved_rate, max_bytes=max_bytes)


def compress_to_file(
    volume: Volume,
    source_name: str,
    rate: float,
    out_dir: str | os.PathLike[str] = ".",
    codec: Optional[Codec] = None,
) -> CompressionReport:
    """Compress ``volume`` and write ``<source_name>.crate<rate>.zfp`` into ``out_dir``."""
    logger.info(f"Uncompressed size: {volume.nbytes}b")
    stream = compress_volume(volume, rate, codec=codec)

    artifact = OutputArtifact(
        file_name=output_file_name(source_name, stream.achieved_rate),
        payload=stream.payload,
    )
    path = write_artifact(artifact, out_dir)
    return CompressionReport(
        shape=volume.shape,
        uncompressed_bytes=volume.nbytes,
        requested_rate=float(rate),
        achieved_rate=stream.achieved_rate,
        max_bytes=stream.max_bytes,
        compressed_bytes=len(stream.payload),
        path=Path(path),
    )


def compress_raw_volume(
    path: str | os.PathLike[str],
    rate: float,
    out_dir: str | os.PathLike[str] = ".",
    codec: Optional[Codec] = None,
) -> CompressionReport:
    validate_requested_rate(rate)
    volume = load_raw_volume(path)
    return compress_to_file(volume, raw_source_name(path), rate, out_dir=out_dir, codec=codec)


def compress_generated_volume(
    generator: str,
    shape: GridShape,
    rate: float,
    out_dir: str | os.PathLike[str] = ".",
    codec: Optional[Codec] = None,
) -> CompressionReport:
    validate_requested_rate(rate)
    volume = generate_volume(generator, shape)
    return compress_to_file(volume, generated_source_name(generator, volume.shape), rate, out_dir=out_dir, codec=codec)


__all__ = [
    "CompressedStream",
    "compress_volume",
    "compress_to_file",
    "compress_raw_volume",
    "compress_generated_volume",
    "raw_source_name",
    "generated_source_name",
    "output_file_name",
]

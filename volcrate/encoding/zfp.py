"""
zfp fixed-rate codec backed by the ``zfpy`` bindings.

zfpy only exposes whole-array compression, so the stream bookkeeping that the
C API returns (configured rate, worst-case stream size) is reproduced here from
zfp's fixed-rate rules:
- a block holds 4^d values and gets floor(4^d * rate + 0.5) bits, at least
  1 + exponent bits for the element type;
- the achieved rate is block bits / 4^d;
- the maximum size covers the header and every block at full bit budget,
  rounded up to whole 64-bit stream words.
"""
from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np
import zfpy

from ..errors import CodecError
from .codec import ZfpField

logger = logging.getLogger(__name__)

STREAM_WORD_BITS = 64
HEADER_MAX_BITS = 148
BLOCK_EDGE = 4

_EXPONENT_BITS = {"float32": 8, "float64": 11}
_TYPE_PRECISION = {"float32": 32, "float64": 64}
_NUMPY_TYPES = {"float32": np.float32, "float64": np.float64}


def _check_type(element_type: str) -> None:
    if element_type not in _EXPONENT_BITS:
        raise CodecError(f"zfp element type '{element_type}' is not supported here.")


class ZfpCodec:
    """Single-use fixed-rate zfp stream. Use through ``open_codec``."""

    def __init__(self) -> None:
        self._is_open = False
        self._block_bits: Optional[int] = None
        self._rate: Optional[float] = None
        self._element_type: Optional[str] = None
        self._dimensionality: Optional[int] = None
        self._buffer: Optional[memoryview] = None

    def _require_open(self) -> None:
        if not self._is_open:
            raise CodecError("zfp stream is not open.")

    def _require_rate(self) -> None:
        self._require_open()
        if self._block_bits is None:
            raise CodecError("zfp stream has no fixed rate configured.")

    def open_stream(self) -> None:
        if self._is_open:
            raise CodecError("zfp stream is already open.")
        self._is_open = True

    def configure_fixed_rate(self, rate: float, element_type: str = "float32", dimensionality: int = 3) -> float:
        self._require_open()
        _check_type(element_type)
        values = 1 << (2 * int(dimensionality))
        bits = int(math.floor(values * float(rate) + 0.5))
        bits = max(bits, 1 + _EXPONENT_BITS[element_type])

        self._block_bits = bits
        self._rate = bits / float(values)
        self._element_type = element_type
        self._dimensionality = int(dimensionality)
        logger.debug(f"zfp fixed rate: requested {rate}, {bits} bits per {values}-value block")
        return self._rate

    def max_output_size(self, field: ZfpField) -> int:
        self._require_rate()
        _check_type(field.element_type)
        blocks = 1
        for n in field.shape:
            blocks *= (max(int(n), 1) + BLOCK_EDGE - 1) // BLOCK_EDGE
        values = 1 << (2 * field.dimensionality)

        block_bits = _EXPONENT_BITS[field.element_type] + values - 1 + values * _TYPE_PRECISION[field.element_type]
        block_bits = min(block_bits, self._block_bits)
        block_bits = max(block_bits, self._block_bits)

        total_bits = HEADER_MAX_BITS + blocks * block_bits
        words = (total_bits + STREAM_WORD_BITS - 1) // STREAM_WORD_BITS
        return words * STREAM_WORD_BITS // 8

    def bind_output_buffer(self, buffer) -> None:
        self._require_open()
        view = memoryview(buffer)
        if view.readonly:
            raise CodecError("zfp output buffer must be writable.")
        self._buffer = view.cast("B")

    def compress(self, field: ZfpField) -> int:
        self._require_rate()
        if self._buffer is None:
            raise CodecError("zfp stream has no output buffer bound.")
        if field.element_type != self._element_type or field.dimensionality != self._dimensionality:
            raise CodecError(
                f"Field is {field.dimensionality}D {field.element_type}, stream was configured for "
                f"{self._dimensionality}D {self._element_type}."
            )

        data = np.asarray(field.data, dtype=_NUMPY_TYPES[field.element_type])
        payload = zfpy.compress_numpy(data, rate=self._rate, write_header=False)
        n = len(payload)
        if n > len(self._buffer):
            raise CodecError(f"zfp wrote {n} bytes into a {len(self._buffer)} byte buffer.")
        self._buffer[:n] = payload
        return n

    def close_stream(self) -> None:
        if self._buffer is not None:
            self._buffer.release()
        self._buffer = None
        self._block_bits = None
        self._rate = None
        self._is_open = False


__all__ = ["ZfpCodec", "STREAM_WORD_BITS", "HEADER_MAX_BITS"]

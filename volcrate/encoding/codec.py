"""
Codec capability used by the compression pipeline.

A codec is any object exposing the six stream operations in :class:`Codec`.
The pipeline only ever talks to it through :func:`open_codec`, which pairs
``open_stream``/``close_stream`` on every exit path.
"""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Protocol

import numpy as np

from ..models import GridShape, Volume


@dataclass(frozen=True)
class ZfpField:
    """
    Field descriptor handed to the codec.
    References the volume's array; the codec reads it but never owns it.
    """
    data: np.ndarray
    shape: GridShape
    element_type: str = "float32"
    dimensionality: int = 3

    @classmethod
    def from_volume(cls, volume: Volume) -> "ZfpField":
        return cls(data=volume.data, shape=volume.shape)

    @property
    def nbytes(self) -> int:
        return int(self.data.nbytes)


class Codec(Protocol):
    def open_stream(self) -> None: ...

    def configure_fixed_rate(self, rate: float, element_type: str = "float32", dimensionality: int = 3) -> float: ...

    def max_output_size(self, field: ZfpField) -> int: ...

    def bind_output_buffer(self, buffer: bytearray | np.ndarray) -> None: ...

    def compress(self, field: ZfpField) -> int: ...

    def close_stream(self) -> None: ...


@contextmanager
def open_codec(codec: Codec) -> Iterator[Codec]:
    codec.open_stream()
    try:
        yield codec
    finally:
        codec.close_stream()


__all__ = ["ZfpField", "Codec", "open_codec"]

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import NamedTuple

import numpy as np


class GridShape(NamedTuple):
    """
    Voxel counts along each axis of a regular 3D grid.
    Memory order is x fastest, then y, then z.
    """
    x: int
    y: int
    z: int

    @property
    def voxel_count(self) -> int:
        return int(self.x) * int(self.y) * int(self.z)

    @property
    def array_shape(self) -> tuple[int, int, int]:
        """numpy (z, y, x) shape whose C order matches the voxel order."""
        return (int(self.z), int(self.y), int(self.x))

    def __str__(self) -> str:
        return f"{self.x}x{self.y}x{self.z}"


class VoxelEncoding(Enum):
    """Source representation of raw voxels; value is the dtype token in file names."""
    UINT8 = "uint8"
    UINT16 = "uint16"
    FLOAT32 = "float32"

    @property
    def dtype(self) -> np.dtype:
        # native byte order, as written by the tools producing these volumes
        return {
            VoxelEncoding.UINT8: np.dtype("=u1"),
            VoxelEncoding.UINT16: np.dtype("=u2"),
            VoxelEncoding.FLOAT32: np.dtype("=f4"),
        }[self]

    @property
    def byte_width(self) -> int:
        return int(self.dtype.itemsize)

    def promote(self, raw: bytes | bytearray | memoryview) -> np.ndarray:
        """
        Widen packed raw bytes to float32.

        uint8/uint16 are converted by value (no scaling), float32 bytes are
        reinterpreted as-is. ``len(raw)`` must be a multiple of ``byte_width``.
        """
        buf = np.frombuffer(raw, dtype=np.uint8)
        if buf.size % self.byte_width != 0:
            raise ValueError(f"{buf.size} bytes is not a whole number of {self.value} voxels.")
        values = buf.view(self.dtype)
        if self is VoxelEncoding.FLOAT32:
            return values.copy()
        return values.astype(np.float32)


@dataclass(frozen=True)
class Volume:
    """
    Dense float32 scalar field.
    - data:  (z, y, x) read-only float32 array in C order
    - shape: GridShape of the field
    """
    data: np.ndarray
    shape: GridShape

    def __post_init__(self) -> None:
        if self.data.dtype != np.float32 or self.data.shape != self.shape.array_shape:
            raise ValueError(
                f"Volume data must be float32 with shape {self.shape.array_shape}, "
                f"got {self.data.dtype} {self.data.shape}."
            )
        if not self.data.flags.c_contiguous:
            raise ValueError("Volume data must be C-contiguous.")
        self.data.flags.writeable = False

    @classmethod
    def from_flat(cls, values: np.ndarray, shape: GridShape) -> "Volume":
        data = np.ascontiguousarray(values, dtype=np.float32).reshape(shape.array_shape)
        return cls(data=data, shape=shape)

    @property
    def nbytes(self) -> int:
        return int(self.data.nbytes)

    def voxel(self, vx: int, vy: int, vz: int) -> float:
        return float(self.data[vz, vy, vx])


@dataclass(frozen=True)
class OutputArtifact:
    """Compressed payload together with the file name it is saved under."""
    file_name: str
    payload: bytes


@dataclass(frozen=True)
class CompressionReport:
    """Sizes and rates of one compression run."""
    shape: GridShape
    uncompressed_bytes: int
    requested_rate: float
    achieved_rate: int
    max_bytes: int
    compressed_bytes: int
    path: Path

    @property
    def ratio(self) -> float:
        if self.compressed_bytes == 0:
            return float("inf")
        return self.uncompressed_bytes / float(self.compressed_bytes)

"""
Procedural test fields on a regular grid.

Every generator is a pure function of voxel coordinates, evaluated in float32,
and returns the (z, y, x) array of a Volume (voxel (vx, vy, vz) at linear
index vx + X*(vy + Y*vz)).
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple

import numpy as np

from ..errors import UnknownGeneratorError
from ..models import GridShape, Volume

logger = logging.getLogger(__name__)

FieldFn = Callable[[GridShape], np.ndarray]


def _voxel_coords(shape: GridShape) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return float32 (vx, vy, vz) coordinate arrays, each of shape (z, y, x)."""
    vz, vy, vx = np.indices(shape.array_shape, dtype=np.float32)
    return vx, vy, vz


def _dims(shape: GridShape) -> np.ndarray:
    return np.asarray(tuple(shape), dtype=np.float32)


def plane_x(shape: GridShape) -> np.ndarray:
    """Linear ramp along x: vx / X."""
    vx, _, _ = _voxel_coords(shape)
    return vx / np.float32(shape.x)


def quarter_sphere(shape: GridShape) -> np.ndarray:
    """Distance from the grid origin corner, normalized by the grid diagonal."""
    vx, vy, vz = _voxel_coords(shape)
    max_dist = np.float32(np.linalg.norm(_dims(shape)))
    dist = np.sqrt(vx * vx + vy * vy + vz * vz)
    return dist / max_dist


def sphere(shape: GridShape) -> np.ndarray:
    """
    Distance from the grid center, normalized by half the x extent.
    Only X enters the normalization, also for non-cubic grids.
    """
    vx, vy, vz = _voxel_coords(shape)
    cx, cy, cz = _dims(shape) / np.float32(2.0)
    max_dist = np.float32(shape.x) / np.float32(2.0)
    dx = vx - cx
    dy = vy - cy
    dz = vz - cz
    dist = np.sqrt(dx * dx + dy * dy + dz * dz)
    return dist / max_dist


def wavelet(shape: GridShape) -> np.ndarray:
    """
    OpenVKL's wavelet test volume with unit amplitudes and frequency 3:
    sin(3 cx) + sin(3 cy) + cos(3 cz) over coordinates mapped to [-1, 1).
    """
    vx, vy, vz = _voxel_coords(shape)
    dims = _dims(shape)
    one = np.float32(1.0)
    two = np.float32(2.0)
    freq = np.float32(3.0)
    cx = two * (vx / dims[0]) - one
    cy = two * (vy / dims[1]) - one
    cz = two * (vz / dims[2]) - one
    return np.sin(freq * cx) + np.sin(freq * cy) + np.cos(freq * cz)


GENERATORS: Dict[str, FieldFn] = {
    "plane_x": plane_x,
    "quarter_sphere": quarter_sphere,
    "sphere": sphere,
    "wavelet": wavelet,
}


def generate_volume(name: str, shape: GridShape) -> Volume:
    """
    Build the named procedural field on a grid of the given shape.

    Raises:
        UnknownGeneratorError for names not in GENERATORS.
        ValueError if any grid dimension is not positive.
    """
    fn = GENERATORS.get(name)
    if fn is None:
        raise UnknownGeneratorError(name)
    shape = GridShape(*(int(v) for v in shape))
    if min(shape) <= 0:
        raise ValueError(f"Grid dimensions must be positive, got {shape}.")

    logger.info(f"Generating {name} volume, size: {shape}")
    data = np.ascontiguousarray(fn(shape), dtype=np.float32)
    return Volume(data=data, shape=shape)


__all__ = ["GENERATORS", "generate_volume", "plane_x", "quarter_sphere", "sphere", "wavelet"]

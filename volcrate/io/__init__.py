from __future__ import annotations

import logging
import os
import string
import tempfile
from pathlib import Path
from typing import NamedTuple, Optional

from ..errors import FormatError, UnsupportedEncodingError
from ..models import GridShape, OutputArtifact, Volume, VoxelEncoding

logger = logging.getLogger(__name__)

RAW_SUFFIX = ".raw"


class VolumeName(NamedTuple):
    """Fields recovered from ``<name>_<X>x<Y>x<Z>_<dtype>.raw``."""
    name: str
    shape: GridShape
    dtype: str


# ---------- Internal utilities ----------

_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "_")


def _trailing_word_run(text: str) -> int:
    """Length of the run of ASCII word characters at the end of ``text``."""
    n = 0
    for ch in reversed(text):
        if ch not in _WORD_CHARS:
            break
        n += 1
    return n


def _scan_dims(token: str) -> Optional[GridShape]:
    """Scan ``<X>x<Y>x<Z>``; None unless all three are positive decimal integers."""
    fields = token.split("x")
    if len(fields) != 3:
        return None
    if not all(f and all(ch in string.digits for ch in f) for f in fields):
        return None
    x, y, z = (int(f) for f in fields)
    if min(x, y, z) <= 0:
        return None
    return GridShape(x, y, z)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _read_up_to(handle, buffer: bytearray) -> int:
    view = memoryview(buffer)
    filled = 0
    while filled < len(buffer):
        n = handle.readinto(view[filled:])
        if not n:
            break
        filled += n
    return filled


# ---------- Public API ----------

def parse_volume_name(file_name: str | os.PathLike[str]) -> VolumeName:
    """
    Parse the base name of a raw volume file.

    The stem is split on '_'. Every ``<X>x<Y>x<Z>`` token followed by a
    non-empty dtype is a candidate; its name is the run of ASCII word
    characters directly in front of it, so ``my-vol_4x4x4_uint8.raw`` has the
    name ``vol``. The pattern is searched, not anchored: the candidate whose
    name starts earliest wins, and among those the longest name, so both the
    name and the dtype may contain underscores.

    Raises:
        FormatError if no candidate has a non-empty name.
    """
    raw_name = os.fspath(file_name)
    base = os.path.basename(raw_name)
    if not base.endswith(RAW_SUFFIX):
        raise FormatError(raw_name)

    parts = base[: -len(RAW_SUFFIX)].split("_")
    best = None
    for i in range(1, len(parts) - 1):
        shape = _scan_dims(parts[i])
        if shape is None:
            continue
        prefix = "_".join(parts[:i])
        dtype = "_".join(parts[i + 1:])
        run = _trailing_word_run(prefix)
        if not run or not dtype:
            continue
        start = len(prefix) - run
        if best is None or start <= best[0]:
            best = (start, VolumeName(name=prefix[start:], shape=shape, dtype=dtype))
    if best is None:
        raise FormatError(raw_name)
    return best[1]


def resolve_encoding(dtype: str) -> VoxelEncoding:
    """Map a dtype token to a VoxelEncoding, or raise UnsupportedEncodingError."""
    try:
        return VoxelEncoding(dtype)
    except ValueError:
        raise UnsupportedEncodingError(dtype) from None


def load_raw_volume(path: str | os.PathLike[str]) -> Volume:
    """
    Load a headerless raw volume and widen it to float32.

    Layout comes from the file name (see :func:`parse_volume_name`).
    Exactly ``voxel_count * byte_width`` bytes are requested. A shorter file
    is not an error: voxels past the end of the data stay 0.0.
    """
    parsed = parse_volume_name(path)
    encoding = resolve_encoding(parsed.dtype)
    shape = parsed.shape

    expected = shape.voxel_count * encoding.byte_width
    raw = bytearray(expected)
    with open(path, "rb") as handle:
        nread = _read_up_to(handle, raw)

    if nread < expected:
        logger.warning(f"Short read on {path}: got {nread} of {expected} bytes, remaining voxels are 0.")
    logger.info(f"Loaded {parsed.name} volume, size: {shape}, type: {encoding.value}")

    return Volume.from_flat(encoding.promote(raw), shape)


def write_artifact(artifact: OutputArtifact, out_dir: str | os.PathLike[str] = ".") -> Path:
    """
    Write the payload verbatim to ``out_dir/artifact.file_name``.
    Data goes to a temporary file in the same directory first and is renamed
    into place, so a failed write never leaves a partial output file.
    """
    directory = Path(out_dir)
    if directory != Path("."):
        directory.mkdir(parents=True, exist_ok=True)
    target = directory / artifact.file_name

    fd, tmp_name = tempfile.mkstemp(prefix=f".{artifact.file_name}.", suffix=".part", dir=directory)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(artifact.payload)
        # mkstemp creates 0600; give the output the mode a plain open() would
        os.chmod(tmp_name, 0o666 & ~_current_umask())
        os.replace(tmp_name, target)
    except BaseException:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise

    logger.info(f"Wrote {len(artifact.payload)} bytes to {target}")
    return target


__all__ = [
    "VolumeName",
    "parse_volume_name",
    "resolve_encoding",
    "load_raw_volume",
    "write_artifact",
]

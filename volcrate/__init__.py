"""
volcrate: test volumes for fixed-rate zfp compression benchmarks.

This package exposes:
- Core types (GridShape, VoxelEncoding, Volume, OutputArtifact, CompressionReport)
- Raw volume loading by file-name convention and procedural field generation
- The fixed-rate compression pipeline writing <source>.crate<rate>.zfp files
"""

from .models import (
    GridShape,
    VoxelEncoding,
    Volume,
    OutputArtifact,
    CompressionReport,
)
from .errors import (
    VolcrateError,
    UsageError,
    FormatError,
    UnsupportedEncodingError,
    UnknownGeneratorError,
    NonIntegerRateError,
    CodecError,
)

__all__ = [
    "GridShape",
    "VoxelEncoding",
    "Volume",
    "OutputArtifact",
    "CompressionReport",
    "VolcrateError",
    "UsageError",
    "FormatError",
    "UnsupportedEncodingError",
    "UnknownGeneratorError",
    "NonIntegerRateError",
    "CodecError",
]

__version__ = "0.1.0"

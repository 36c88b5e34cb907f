from .codec import Codec, ZfpField, open_codec
from .pipeline import (
    CompressedStream,
    compress_volume,
    compress_to_file,
    compress_raw_volume,
    compress_generated_volume,
)
from .rate import MIN_RATE, MAX_RATE, validate_requested_rate, validate_achieved_rate

__all__ = [
    "Codec",
    "ZfpField",
    "open_codec",
    "CompressedStream",
    "compress_volume",
    "compress_to_file",
    "compress_raw_volume",
    "compress_generated_volume",
    "MIN_RATE",
    "MAX_RATE",
    "validate_requested_rate",
    "validate_achieved_rate",
]

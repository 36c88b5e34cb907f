"""Exceptions raised by volcrate. Every one of them ends the current run."""


class VolcrateError(ValueError):
    pass


class UsageError(VolcrateError):
    """Missing, conflicting or malformed command-line arguments."""


class FormatError(VolcrateError):
    """A raw volume file name does not follow <name>_<X>x<Y>x<Z>_<dtype>.raw."""

    def __init__(self, file_name: str) -> None:
        super().__init__(
            "Unrecognized raw volume naming scheme, expected a format like "
            f"'<name>_<X>x<Y>x<Z>_<data type>.raw' but '{file_name}' did not match"
        )
        self.file_name = file_name


class UnsupportedEncodingError(VolcrateError):
    def __init__(self, dtype: str) -> None:
        super().__init__(f"Unsupported voxel data type '{dtype}' (expected uint8, uint16 or float32)")
        self.dtype = dtype


class UnknownGeneratorError(VolcrateError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unrecognized/unimplemented generation mode '{name}'")
        self.name = name


class NonIntegerRateError(VolcrateError):
    def __init__(self, requested: float, achieved: float) -> None:
        super().__init__(f"Non-integer compression rate {achieved!r} (requested {requested!r})")
        self.requested = requested
        self.achieved = achieved


class CodecError(VolcrateError):
    """The codec broke its own contract (e.g. wrote past the maximum size)."""


__all__ = [
    "VolcrateError",
    "UsageError",
    "FormatError",
    "UnsupportedEncodingError",
    "UnknownGeneratorError",
    "NonIntegerRateError",
    "CodecError",
]

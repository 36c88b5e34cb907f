#!/usr/bin/env python
from __future__ import annotations

import argparse
import logging
import sys
from typing import NoReturn

from volcrate.encoding.pipeline import compress_generated_volume, compress_raw_volume
from volcrate.encoding.rate import MAX_RATE, MIN_RATE, validate_requested_rate
from volcrate.errors import UsageError, VolcrateError
from volcrate.fields import GENERATORS
from volcrate.logging_config import setup_logging
from volcrate.models import CompressionReport, GridShape

logger = logging.getLogger("volcrate.cli")

EPILOG = f"""\
To compress a raw volume:
  volcrate -raw volume_XxYxZ_dtype.raw -crate RATE

To generate a data set and compress it:
  volcrate -gen ({"|".join(GENERATORS)}) -dims X Y Z -crate RATE

Raw volumes must follow the OpenSciVisData naming convention
<volume_name>_<X>x<Y>x<Z>_<data type>.raw with data type uint8, uint16 or
float32. All data is expanded to float32, so -crate 32 means no compression.
The output is written as <source>.crate<RATE>.zfp.
"""


HELP_FLAGS = ("-h", "--help")


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


class _CliParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UsageError(message)

    def parse_args(self, args=None, namespace=None):
        tokens = sys.argv[1:] if args is None else list(args)
        # Single-dash options are prefix-matched by some argparse releases
        # even with allow_abbrev=False, so only exact option strings pass.
        known = {flag for action in self._actions for flag in action.option_strings}
        for token in tokens:
            if token.startswith("-") and token not in known and not _is_number(token):
                self.error(f"unrecognized arguments: {token}")
        return super().parse_args(tokens, namespace)


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid grid dimension '{value}'") from None
    if n <= 0:
        raise argparse.ArgumentTypeError(f"grid dimensions must be positive, got {n}")
    return n


def _compression_rate(value: str) -> int:
    try:
        rate = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"compression rate must be an integer, got '{value}'") from None
    try:
        validate_requested_rate(rate)
    except UsageError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None
    return rate


def build_parser() -> argparse.ArgumentParser:
    parser = _CliParser(
        prog="volcrate",
        description="Load or generate a float32 volume and compress it with zfp at a fixed rate.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("-raw", metavar="VOLUME", help="Raw volume to load and compress (<name>_<X>x<Y>x<Z>_<dtype>.raw).")
    mode.add_argument("-gen", metavar="FIELD", help=f"Volume field to generate: {', '.join(GENERATORS)}.")
    parser.add_argument("-dims", nargs=3, type=_positive_int, metavar=("X", "Y", "Z"), help="Grid dimensions of the generated volume.")
    parser.add_argument("-crate", type=_compression_rate, required=True, metavar="RATE", help=f"Target bits per value, an integer in [{MIN_RATE}-{MAX_RATE}].")
    parser.add_argument("-outdir", default=".", help="Directory for the compressed file (default: current directory).")
    parser.add_argument("-v", dest="verbose", action="count", default=0, help="Log progress (-v) or debug details (-v -v).")
    parser.add_argument("-log", dest="log_file", default=None, help="Also write the log to this file.")
    return parser


def _log_level(verbose: int) -> int:
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return logging.WARNING


def _print_report(report: CompressionReport) -> None:
    print(f"[compress] uncompressed size: {report.uncompressed_bytes}b")
    print(f"[compress] used compression rate: {report.achieved_rate}")
    print(
        f"[compress] total compressed size: {report.compressed_bytes}B "
        f"(max {report.max_bytes}B, ratio {report.ratio:.2f}x)"
    )
    print(f"[compress] wrote {report.path}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    tokens = sys.argv[1:] if argv is None else list(argv)
    if any(token in HELP_FLAGS for token in tokens):
        parser.print_help()
        return 0

    try:
        args = parser.parse_args(tokens)
        if args.gen is not None and args.dims is None:
            raise UsageError("Generated mode requires volume dims to generate (-dims X Y Z)")
    except UsageError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    setup_logging(level=_log_level(args.verbose), log_file=args.log_file)

    try:
        if args.raw is not None:
            if args.dims is not None:
                logger.warning("-dims is ignored when compressing a raw volume")
            report = compress_raw_volume(args.raw, args.crate, out_dir=args.outdir)
        else:
            report = compress_generated_volume(args.gen, GridShape(*args.dims), args.crate, out_dir=args.outdir)
    except (VolcrateError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    _print_report(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Render orthogonal mid-slices of a raw or generated test volume."""

from __future__ import annotations

import argparse
from pathlib import Path

from volcrate.fields import GENERATORS, generate_volume
from volcrate.figures import make_slice_overview
from volcrate.io import load_raw_volume
from volcrate.models import GridShape


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--raw", help="Raw volume named <name>_<X>x<Y>x<Z>_<dtype>.raw.")
    source.add_argument("--gen", choices=list(GENERATORS), help="Procedural field to generate.")
    parser.add_argument("--dims", nargs=3, type=int, default=(64, 64, 64), metavar=("X", "Y", "Z"))
    parser.add_argument("--out", required=True, help="Output figure path (.png, .pdf or .svg).")
    parser.add_argument("--cmap", default="viridis")
    parser.add_argument("--dpi", type=int, default=150)
    args = parser.parse_args()

    if args.raw is not None:
        volume = load_raw_volume(args.raw)
        title = Path(args.raw).name
    else:
        volume = generate_volume(args.gen, GridShape(*args.dims))
        title = f"{args.gen} {volume.shape}"

    out_path = make_slice_overview(volume, args.out, title=title, cmap=args.cmap, dpi=args.dpi)
    print(f"Wrote {Path(out_path).resolve()}")


if __name__ == "__main__":
    main()

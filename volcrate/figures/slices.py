from __future__ import annotations

import os
from typing import Tuple

import matplotlib

matplotlib.use("Agg", force=True)
matplotlib.rcParams["figure.facecolor"] = "white"
matplotlib.rcParams["savefig.facecolor"] = "white"

import matplotlib.pyplot as plt
import numpy as np

from ..models import Volume


def mid_slices(volume: Volume) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Return the three axis-aligned slices through the grid center as 2D arrays:
    (xy at z = Z//2, xz at y = Y//2, yz at x = X//2), rows along the second axis named.
    """
    data = volume.data
    sx, sy, sz = (n // 2 for n in volume.shape)
    xy = data[sz, :, :]
    xz = data[:, sy, :]
    yz = data[:, :, sx]
    return xy, xz, yz


def make_slice_overview(
    volume: Volume,
    out_path: str,
    *,
    title: str | None = None,
    cmap: str = "viridis",
    dpi: int = 150,
) -> str:
    """
    Render the three orthogonal mid-slices of ``volume`` side by side with a
    shared color scale. Returns the path written (``.png`` is appended when the
    extension is not png/pdf/svg).
    """
    xy, xz, yz = mid_slices(volume)
    vmin = float(np.min(volume.data))
    vmax = float(np.max(volume.data))
    if vmax <= vmin:
        vmax = vmin + 1.0

    fig, axes = plt.subplots(1, 3, figsize=(12.0, 4.2))
    panels = (
        (xy, "x", "y", f"z = {volume.shape.z // 2}"),
        (xz, "x", "z", f"y = {volume.shape.y // 2}"),
        (yz, "y", "z", f"x = {volume.shape.x // 2}"),
    )
    image = None
    for ax, (plane, xlabel, ylabel, label) in zip(axes, panels):
        image = ax.imshow(plane, origin="lower", cmap=cmap, vmin=vmin, vmax=vmax, interpolation="nearest")
        ax.set_xlabel(xlabel)
        ax.set_ylabel(ylabel)
        ax.set_title(label, fontsize=10)
        ax.tick_params(axis="both", labelsize=8)

    colorbar = fig.colorbar(image, ax=list(axes), shrink=0.8, pad=0.02)
    colorbar.ax.tick_params(labelsize=8)
    colorbar.outline.set_visible(False)
    fig.suptitle(title or f"{volume.shape} float32", fontsize=11)

    extension = os.path.splitext(out_path)[1].lower()
    if extension not in {".png", ".pdf", ".svg"}:
        out_path = f"{out_path}.png"

    fig.savefig(out_path, dpi=dpi, facecolor="white", bbox_inches="tight")
    plt.close(fig)
    return out_path

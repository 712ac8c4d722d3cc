"""Tile several equally sized images into one grid image."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from dsolib.minimal_image import MinimalImage

__all__ = ["best_grid", "stitch_images"]


def best_grid(num_images: int, width: int, height: int, max_frames: int = 0) -> tuple[int, int]:
    """Columns and rows for a grid of ``max(max_frames, num_images)`` tiles.

    The column count (1 to 9) is chosen so the grid comes closest to a
    16:10 aspect ratio.
    """
    num = max(max_frames, num_images)
    best_cc = 0
    best_loss = 1e10
    for cc in range(1, 10):
        ww = width * cc
        hh = height * ((num + cc - 1) // cc)
        loss = max(ww / 16.0, hh / 10.0)
        if loss < best_loss:
            best_loss = loss
            best_cc = cc
    return best_cc, (num + best_cc - 1) // best_cc


def stitch_images(
    images: Sequence[MinimalImage | np.ndarray],
    cc: int = 0,
    rc: int = 0,
    max_frames: int = 0,
) -> np.ndarray:
    """Place the images row by row in a grid; empty cells are black.

    A non-zero ``cc`` fixes the grid to ``cc`` columns and ``rc`` rows.
    Images that do not fit into the grid are left out.
    """
    arrays = [np.asarray(img.data if isinstance(img, MinimalImage) else img) for img in images]
    if not arrays:
        raise ValueError("no images to stitch")
    first = arrays[0]
    if first.ndim < 2:
        raise ValueError("images need at least two dimensions")
    if any(a.shape != first.shape for a in arrays):
        raise ValueError("all images must have the same shape")

    h, w = first.shape[:2]
    cols, rows = best_grid(len(arrays), w, h, max_frames)
    if cc != 0:
        cols, rows = cc, rc

    stitch = np.zeros((rows * h, cols * w) + first.shape[2:], dtype=first.dtype)
    for i, img in enumerate(arrays[: cols * rows]):
        r, c = divmod(i, cols)
        stitch[r * h : (r + 1) * h, c * w : (c + 1) * w] = img
    return stitch
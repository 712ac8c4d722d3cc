"""Bilinear and bicubic sampling of images stored as numpy arrays.

Images are ``(h, w)`` arrays for scalar pixels and ``(h, w, c)`` arrays for
vector pixels.  Pixels are addressed through the row-major layout, so a
neighbour to the right of the last column is the first pixel of the next
row.  Any access outside the image raises ``IndexError``.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

__all__ = [
    "interpolated_element",
    "interpolated_element_43",
    "interpolated_element_33",
    "interpolated_element_33_over_and",
    "interpolated_element_33_over_or",
    "interpolated_element_31",
    "interpolated_element_13_bilin",
    "interpolated_element_33_bilin",
    "cubic_11",
    "cubic_12",
    "cubic_32",
    "interpolated_element_11_bicub",
    "interpolated_element_13_bicub",
    "interpolated_element_33_bicub",
    "interpolated_element_44",
    "interpolated_element_42",
]


def _layout(mat: np.ndarray) -> tuple[np.ndarray, int]:
    arr = np.asarray(mat)
    if arr.ndim < 2:
        raise ValueError("an image needs at least two dimensions")
    width = arr.shape[1]
    flat = arr.reshape((arr.shape[0] * width,) + arr.shape[2:])
    return flat, width


def _take(flat: np.ndarray, start: int, count: int) -> np.ndarray:
    if start < 0 or start + count > len(flat):
        raise IndexError(
            f"pixels {start}..{start + count - 1} outside image of {len(flat)} pixels"
        )
    return flat[start : start + count].astype(np.float64)


def _split(x: float, y: float, width: int) -> tuple[float, float, int]:
    ix, iy = int(x), int(y)
    return x - ix, y - iy, ix + iy * width


def _bilinear(mat: np.ndarray, x: float, y: float) -> tuple[np.ndarray, int, int]:
    flat, width = _layout(mat)
    dx, dy, base = _split(x, y, width)
    tl, tr = _take(flat, base, 2)
    bl, br = _take(flat, base + width, 2)
    dxdy = dx * dy
    value = dxdy * br + (dy - dxdy) * bl + (dx - dxdy) * tr + (1 - dx - dy + dxdy) * tl
    return value, base, width


def _corner_flags(over: np.ndarray, base: int, width: int) -> list[bool]:
    flat, _ = _layout(over)
    top = flat[base : base + 2] if 0 <= base and base + 2 <= len(flat) else None
    bottom = (
        flat[base + width : base + width + 2]
        if base + width + 2 <= len(flat)
        else None
    )
    if top is None or bottom is None:
        raise IndexError("over-exposure mask does not cover the sampled pixels")
    return [bool(v) for v in (*bottom[::-1], top[1], top[0])]


def interpolated_element(mat: np.ndarray, x: float, y: float) -> float:
    """Bilinear sample of a scalar image."""
    value, _, _ = _bilinear(mat, x, y)
    return float(value)


def interpolated_element_43(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Bilinear sample of the first three channels of a 4-channel image."""
    return _bilinear(mat, x, y)[0][:3]


def interpolated_element_33(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Bilinear sample of a 3-channel image: [intensity, gx, gy]."""
    return _bilinear(mat, x, y)[0][:3]


def interpolated_element_33_over_and(
    mat: np.ndarray, over: np.ndarray, x: float, y: float
) -> tuple[np.ndarray, bool]:
    """Sample like ``interpolated_element_33``; flag set if all four corners are."""
    value, base, width = _bilinear(mat, x, y)
    return value[:3], all(_corner_flags(over, base, width))


def interpolated_element_33_over_or(
    mat: np.ndarray, over: np.ndarray, x: float, y: float
) -> tuple[np.ndarray, bool]:
    """Sample like ``interpolated_element_33``; flag set if any corner is."""
    value, base, width = _bilinear(mat, x, y)
    return value[:3], any(_corner_flags(over, base, width))


def interpolated_element_31(mat: np.ndarray, x: float, y: float) -> float:
    """Bilinear sample of the intensity channel of a 3-channel image."""
    return float(_bilinear(mat, x, y)[0][0])


def _bilin_with_gradient(
    tl: float, tr: float, bl: float, br: float, dx: float, dy: float
) -> np.ndarray:
    top = dx * tr + (1 - dx) * tl
    bottom = dx * br + (1 - dx) * bl
    left = dy * bl + (1 - dy) * tl
    right = dy * br + (1 - dy) * tr
    return np.array([dx * right + (1 - dx) * left, right - left, bottom - top])


def interpolated_element_13_bilin(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Bilinear intensity of a scalar image with its horizontal and vertical slopes."""
    flat, width = _layout(mat)
    dx, dy, base = _split(x, y, width)
    tl, tr = _take(flat, base, 2)
    bl, br = _take(flat, base + width, 2)
    return _bilin_with_gradient(tl, tr, bl, br, dx, dy)


def interpolated_element_33_bilin(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Like ``interpolated_element_13_bilin`` on the intensity channel."""
    flat, width = _layout(mat)
    dx, dy, base = _split(x, y, width)
    tl, tr = _take(flat, base, 2)[:, 0]
    bl, br = _take(flat, base + width, 2)[:, 0]
    return _bilin_with_gradient(tl, tr, bl, br, dx, dy)


def cubic_11(p: Sequence[float], x: float) -> float:
    """Cubic interpolation between p[1] (x=0) and p[2] (x=1)."""
    p0, p1, p2, p3 = (float(v) for v in p[:4])
    return p1 + 0.5 * x * (
        p2 - p0 + x * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3 + x * (3.0 * (p1 - p2) + p3 - p0))
    )


def cubic_12(p: Sequence[float], x: float) -> np.ndarray:
    """Cubic interpolation of value and derivative between p[1] and p[2]."""
    p0, p1, p2, p3 = (float(v) for v in p[:4])
    c1 = 0.5 * (p2 - p0)
    c2 = p0 - 2.5 * p1 + 2 * p2 - 0.5 * p3
    c3 = 0.5 * (3.0 * (p1 - p2) + p3 - p0)
    xx = x * x
    return np.array([p1 + x * c1 + xx * c2 + xx * x * c3, c1 + x * 2.0 * c2 + xx * 3.0 * c3])


def cubic_32(p: Sequence[Sequence[float]], x: float) -> np.ndarray:
    """``cubic_12`` applied to the first channel of four vector pixels."""
    return cubic_12([v[0] for v in p[:4]], x)


def _row_offsets(width: int) -> tuple[int, int, int, int]:
    return (-width - 1, -1, width - 1, 2 * width - 1)


def interpolated_element_11_bicub(mat: np.ndarray, x: float, y: float) -> float:
    """Bicubic sample of a scalar image."""
    flat, width = _layout(mat)
    dx, dy, base = _split(x, y, width)
    rows = [cubic_11(_take(flat, base + off, 4), dx) for off in _row_offsets(width)]
    return cubic_11(rows, dy)


def _bicub_with_gradient(rows: list[np.ndarray], dy: float) -> np.ndarray:
    values = [float(r[0]) for r in rows]
    grads = [float(r[1]) for r in rows]
    v = cubic_12(values, dy)
    return np.array([v[0], cubic_11(grads, dy), v[1]])


def interpolated_element_13_bicub(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Bicubic intensity of a scalar image with its x and y derivatives."""
    flat, width = _layout(mat)
    dx, dy, base = _split(x, y, width)
    rows = [cubic_12(_take(flat, base + off, 4), dx) for off in _row_offsets(width)]
    return _bicub_with_gradient(rows, dy)


def interpolated_element_33_bicub(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Like ``interpolated_element_13_bicub`` on the intensity channel."""
    flat, width = _layout(mat)
    dx, dy, base = _split(x, y, width)
    rows = [cubic_32(_take(flat, base + off, 4), dx) for off in _row_offsets(width)]
    return _bicub_with_gradient(rows, dy)


def interpolated_element_44(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Bilinear sample of all four channels."""
    return _bilinear(mat, x, y)[0][:4]


def interpolated_element_42(mat: np.ndarray, x: float, y: float) -> np.ndarray:
    """Bilinear sample of the first two channels of a 4-channel image."""
    return _bilinear(mat, x, y)[0][:2]
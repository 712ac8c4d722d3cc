"""Small image containers backed by numpy arrays."""

from __future__ import annotations

from typing import Any

import numpy as np


class MinimalImage:
    """A w x h image of scalar or vector pixels stored row by row.

    ``data`` has shape ``(h, w)`` for scalar pixels and ``(h, w, channels)``
    otherwise.  When ``data`` is passed in, the image wraps it without copying
    where the layout allows.
    """

    def __init__(
        self,
        w: int,
        h: int,
        dtype: Any = np.float32,
        channels: int = 1,
        data: np.ndarray | None = None,
    ) -> None:
        if w < 0 or h < 0:
            raise ValueError("image size must not be negative")
        if channels < 1:
            raise ValueError("an image needs at least one channel")
        self.w = w
        self.h = h
        shape = (h, w) if channels == 1 else (h, w, channels)
        if data is None:
            self.data = np.zeros(shape, dtype=dtype)
            self.owns_data = True
        else:
            array = np.asarray(data)
            if array.size != w * h * channels:
                raise ValueError(
                    f"buffer of {array.size} elements does not fit a "
                    f"{w}x{h}x{channels} image"
                )
            self.data = array.reshape(shape)
            self.owns_data = False

    @property
    def channels(self) -> int:
        return 1 if self.data.ndim == 2 else self.data.shape[2]

    def _index(self, x: float, y: float) -> tuple[int, int]:
        ix, iy = int(x), int(y)
        if not (0 <= ix < self.w and 0 <= iy < self.h):
            raise IndexError(f"pixel ({ix}, {iy}) outside {self.w}x{self.h} image")
        return iy, ix

    def at(self, x: float, y: float) -> Any:
        """The pixel at column x, row y."""
        return self.data[self._index(x, y)]

    def _set(self, x: float, y: float, val: Any) -> None:
        self.data[self._index(x, y)] = val

    def set_black(self) -> None:
        self.data[...] = 0

    def set_const(self, val: Any) -> None:
        self.data[...] = val

    def set_pixel1(self, u: float, v: float, val: Any) -> None:
        """Set the pixel nearest to (u, v)."""
        self._set(u + 0.5, v + 0.5, val)

    def set_pixel4(self, u: float, v: float, val: Any) -> None:
        """Set the 2x2 block whose top-left corner holds (u, v)."""
        for x, y in ((u + 1.0, v + 1.0), (u + 1.0, v), (u, v + 1.0), (u, v)):
            self._set(x, y, val)

    def set_pixel9(self, u: int, v: int, val: Any) -> None:
        """Set the 3x3 block centred on (u, v)."""
        for dx in (1, 0, -1):
            for dy in (-1, 0, 1):
                self._set(u + dx, v + dy, val)

    def set_pixel_circ(self, u: int, v: int, val: Any) -> None:
        """Draw a two-pixel-thick square ring of radius 3 around (u, v)."""
        for i in range(-3, 4):
            for d in (3, -3, 2, -2):
                self._set(u + d, v + i, val)
                self._set(u + i, v + d, val)

    def clone(self) -> MinimalImage:
        """An independent copy owning its own data."""
        return MinimalImage(
            self.w, self.h, self.data.dtype, self.channels, self.data.copy()
        )


class ImageAndExposure:
    """An irradiance image (values in [0, 256)) with exposure time in ms."""

    def __init__(self, w: int, h: int, timestamp: float = 0.0) -> None:
        if w < 0 or h < 0:
            raise ValueError("image size must not be negative")
        self.w = w
        self.h = h
        self.timestamp = timestamp
        self.init_scale = 0.0
        self.exposure_time = 1.0
        self.image = np.zeros((h, w), dtype=np.float32)

    def copy_meta_to(self, other: ImageAndExposure) -> None:
        """Copy the exposure time onto another image."""
        other.exposure_time = self.exposure_time

    def deep_copy(self) -> ImageAndExposure:
        """A copy with its own pixel buffer, timestamp and exposure time."""
        img = ImageAndExposure(self.w, self.h, self.timestamp)
        img.exposure_time = self.exposure_time
        img.image[...] = self.image
        return img
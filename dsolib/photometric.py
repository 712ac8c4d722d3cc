"""Photometric correction: inverse response lookup and vignette removal."""

from __future__ import annotations

import enum
from collections.abc import Sequence

import numpy as np

from dsolib.minimal_image import ImageAndExposure, MinimalImage

__all__ = ["PhotometricMode", "PhotometricUndistorter"]

_MAX_RESPONSE = 256 * 256


class PhotometricMode(enum.IntEnum):
    """How much photometric calibration to apply."""

    NONE = 0
    RESPONSE = 1
    FULL = 2


class PhotometricUndistorter:
    """Turns raw pixel values into irradiance.

    ``response`` is the inverse response table G indexed by raw pixel value;
    ``vignette`` is an ``(h, w)`` map of positive attenuation factors.
    Without a response table the calibration counts as invalid and frames
    are only scaled.
    """

    def __init__(
        self,
        w: int,
        h: int,
        response: Sequence[float] | np.ndarray | None = None,
        vignette: np.ndarray | None = None,
    ) -> None:
        if w <= 0 or h <= 0:
            raise ValueError("image size must be positive")
        self.w = w
        self.h = h
        self.output = ImageAndExposure(w, h)

        self._g: np.ndarray | None = None
        if response is not None:
            g = np.asarray(response, dtype=np.float32).ravel()
            if not 0 < g.size <= _MAX_RESPONSE:
                raise ValueError(f"response table must have 1 to {_MAX_RESPONSE} entries")
            self._g = g

        self.vignette: np.ndarray | None = None
        self.vignette_inv: np.ndarray | None = None
        if vignette is not None:
            v = np.asarray(vignette, dtype=np.float32)
            if v.shape != (h, w):
                raise ValueError(f"vignette must have shape ({h}, {w}), got {v.shape}")
            if not np.all(v > 0):
                raise ValueError("vignette values must be positive")
            self.vignette = v
            self.vignette_inv = (1.0 / v).astype(np.float32)

    @property
    def valid(self) -> bool:
        return self._g is not None

    @property
    def g(self) -> np.ndarray | None:
        """The inverse response table, or None without a valid calibration."""
        return self._g if self.valid else None

    @property
    def g_depth(self) -> int:
        return 0 if self._g is None else len(self._g)

    def process_frame(
        self,
        image: MinimalImage | np.ndarray,
        exposure_time: float,
        factor: float = 1.0,
        mode: PhotometricMode | int = PhotometricMode.FULL,
        use_exposure: bool = True,
    ) -> ImageAndExposure:
        """Correct one raw frame into ``output`` and return it.

        Without calibration, with a non-positive exposure time or with mode
        NONE the frame is only multiplied by ``factor``.
        """
        mode = PhotometricMode(mode)
        data = np.asarray(image.data if isinstance(image, MinimalImage) else image)
        if data.shape != (self.h, self.w):
            raise ValueError(f"frame must have shape ({self.h}, {self.w}), got {data.shape}")

        out = self.output
        if self._g is None or exposure_time <= 0 or mode is PhotometricMode.NONE:
            out.image[...] = factor * data
        else:
            if not np.issubdtype(data.dtype, np.integer):
                raise TypeError("response lookup needs integer pixel values")
            idx = data.astype(np.int64)
            if idx.size and (idx.min() < 0 or idx.max() >= len(self._g)):
                raise IndexError("pixel value outside the response table")
            out.image[...] = self._g[idx]
            if mode is PhotometricMode.FULL and self.vignette_inv is not None:
                out.image *= self.vignette_inv

        out.exposure_time = exposure_time
        out.timestamp = 0.0
        if not use_exposure:
            out.exposure_time = 1.0
        return out
"""Reading and writing images as ``MinimalImage`` objects.

Three-channel images are kept in blue-green-red channel order.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from dsolib.minimal_image import MinimalImage

__all__ = [
    "ImageReadError",
    "read_image_bw_8u",
    "read_image_rgb_8u",
    "read_image_bw_16u",
    "read_stream_bw_8u",
    "write_image",
]

PathLike = Union[str, Path]


class ImageReadError(Exception):
    """An image could not be read or has an unexpected format."""


def _open(source: PathLike | io.BytesIO, what: str) -> Image.Image:
    try:
        img = Image.open(source)
        img.load()
    except OSError as exc:
        raise ImageReadError(f"could not read {what}") from exc
    if img.width * img.height == 0:
        raise ImageReadError(f"{what} holds an empty image")
    return img


def _convert(img: Image.Image, mode: str, what: str) -> Image.Image:
    try:
        return img.convert(mode)
    except (OSError, ValueError) as exc:
        raise ImageReadError(f"could not convert {what} to mode {mode}") from exc


def _gray8(img: Image.Image, what: str) -> MinimalImage:
    gray = np.array(_convert(img, "L", what), dtype=np.uint8)
    return MinimalImage(img.width, img.height, np.uint8, 1, gray)


def read_image_bw_8u(filename: PathLike) -> MinimalImage:
    """Read an image file as 8-bit grayscale."""
    return _gray8(_open(filename, f"image {filename}"), f"image {filename}")


def read_image_rgb_8u(filename: PathLike) -> MinimalImage:
    """Read an image file as 8-bit colour in BGR order."""
    what = f"image {filename}"
    img = _open(filename, what)
    rgb = np.array(_convert(img, "RGB", what), dtype=np.uint8)
    bgr = np.ascontiguousarray(rgb[:, :, ::-1])
    return MinimalImage(img.width, img.height, np.uint8, 3, bgr)


def read_image_bw_16u(filename: PathLike) -> MinimalImage:
    """Read a 16-bit grayscale image file without conversion."""
    img = _open(filename, f"image {filename}")
    if img.mode.startswith("I;16"):
        arr = np.array(img).astype(np.uint16)
    elif img.mode == "I":
        wide = np.array(img)
        if wide.min() < 0 or wide.max() > 0xFFFF:
            raise ImageReadError(f"{filename} is not a 16-bit grayscale image")
        arr = wide.astype(np.uint16)
    else:
        raise ImageReadError(f"{filename} is not a 16-bit grayscale image")
    return MinimalImage(img.width, img.height, np.uint16, 1, arr)


def read_stream_bw_8u(data: bytes) -> MinimalImage:
    """Decode an encoded image held in memory as 8-bit grayscale."""
    what = f"stream ({len(data)} bytes)"
    return _gray8(_open(io.BytesIO(data), what), what)


def _saturate_u8(data: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(data), 0, 255).astype(np.uint8)


def write_image(filename: PathLike, img: MinimalImage | np.ndarray) -> None:
    """Write an image; the format follows the file extension.

    Three-channel data is taken as BGR.  Float data is rounded and saturated
    to 8 bits, except scalar float images written to TIFF.
    """
    data = np.asarray(img.data if isinstance(img, MinimalImage) else img)
    if data.ndim == 3 and data.shape[2] == 3:
        data = data[:, :, ::-1]
    elif data.ndim != 2:
        raise ValueError(f"cannot write image data of shape {data.shape}")

    is_tiff = Path(filename).suffix.lower() in (".tif", ".tiff")
    if np.issubdtype(data.dtype, np.floating):
        if data.ndim == 2 and is_tiff:
            data = data.astype(np.float32)
        else:
            data = _saturate_u8(data)
    elif data.dtype == np.uint16 and data.ndim == 2:
        pass
    elif data.dtype != np.uint8:
        data = _saturate_u8(data)

    Image.fromarray(np.ascontiguousarray(data)).save(filename)
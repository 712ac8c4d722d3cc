import io

import numpy as np
import pytest
from PIL import Image

from dsolib.image_io import (
    ImageReadError,
    read_image_bw_8u,
    read_image_bw_16u,
    read_image_rgb_8u,
    read_stream_bw_8u,
    write_image,
)
from dsolib.minimal_image import MinimalImage


def _gray(w=5, h=4):
    return (np.arange(w * h, dtype=np.uint8) * 7).reshape(h, w)


def test_gray_round_trip(tmp_path):
    path = tmp_path / "g.png"
    write_image(path, MinimalImage(5, 4, np.uint8, 1, _gray()))
    img = read_image_bw_8u(path)
    assert (img.w, img.h) == (5, 4)
    assert np.array_equal(img.data, _gray())


def test_colour_round_trip_keeps_bgr(tmp_path):
    data = np.zeros((3, 2, 3), dtype=np.uint8)
    data[..., 0] = 200
    data[..., 2] = 10
    path = tmp_path / "c.png"
    write_image(path, data)
    img = read_image_rgb_8u(path)
    assert img.channels == 3
    assert np.array_equal(img.data, data)
    raw = np.array(Image.open(path))
    assert np.array_equal(raw[..., 0], data[..., 2])


def test_16bit_round_trip(tmp_path):
    data = np.array([[0, 1000], [40000, 65535]], dtype=np.uint16)
    path = tmp_path / "d.png"
    write_image(path, data)
    img = read_image_bw_16u(path)
    assert img.data.dtype == np.uint16
    assert np.array_equal(img.data, data)


def test_16bit_reader_rejects_8bit(tmp_path):
    path = tmp_path / "g.png"
    write_image(path, _gray())
    with pytest.raises(ImageReadError):
        read_image_bw_16u(path)


def test_float_saturated_to_bytes(tmp_path):
    path = tmp_path / "f.png"
    write_image(path, np.array([[-5.0, 100.4, 300.0]], dtype=np.float32))
    img = read_image_bw_8u(path)
    assert img.data.tolist() == [[0, 100, 255]]


def test_float_tiff_keeps_values(tmp_path):
    data = np.array([[0.25, 1.5], [300.0, -2.0]], dtype=np.float32)
    path = tmp_path / "f.tiff"
    write_image(path, data)
    assert np.array_equal(np.array(Image.open(path)), data)


def test_stream_read():
    buf = io.BytesIO()
    Image.fromarray(_gray()).save(buf, format="PNG")
    img = read_stream_bw_8u(buf.getvalue())
    assert np.array_equal(img.data, _gray())


def test_stream_garbage_raises():
    with pytest.raises(ImageReadError):
        read_stream_bw_8u(b"not an image at all")


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImageReadError):
        read_image_bw_8u(tmp_path / "missing.png")


def test_write_rejects_bad_shape(tmp_path):
    with pytest.raises(ValueError):
        write_image(tmp_path / "x.png", np.zeros((2, 2, 2), dtype=np.uint8))
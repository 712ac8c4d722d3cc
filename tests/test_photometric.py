import numpy as np
import pytest

from dsolib.minimal_image import MinimalImage
from dsolib.photometric import PhotometricMode, PhotometricUndistorter

W, H = 4, 3


def _frame():
    return (np.arange(W * H, dtype=np.uint8) * 10).reshape(H, W)


def _response():
    return np.arange(256, dtype=np.float32) * 2


def test_without_calibration_scales_only():
    und = PhotometricUndistorter(W, H)
    out = und.process_frame(_frame(), 12.5, factor=0.5)
    assert np.allclose(out.image, _frame() * 0.5)
    assert out.exposure_time == 12.5
    assert und.g is None
    assert not und.valid


def test_response_lookup():
    und = PhotometricUndistorter(W, H, response=_response())
    out = und.process_frame(_frame(), 3.0, mode=PhotometricMode.RESPONSE)
    assert np.allclose(out.image, _frame().astype(np.float32) * 2)
    assert und.g_depth == 256


def test_vignette_divides_out():
    vig = np.full((H, W), 0.5, dtype=np.float32)
    und = PhotometricUndistorter(W, H, response=_response(), vignette=vig)
    plain = und.process_frame(_frame(), 3.0, mode=PhotometricMode.RESPONSE).image.copy()
    full = und.process_frame(_frame(), 3.0, mode=PhotometricMode.FULL).image
    assert np.allclose(full, plain / vig)


def test_non_positive_exposure_skips_calibration():
    und = PhotometricUndistorter(W, H, response=_response())
    out = und.process_frame(_frame(), 0.0, factor=2.0)
    assert np.allclose(out.image, _frame() * 2.0)
    assert out.exposure_time == 0.0


def test_mode_none_skips_calibration():
    und = PhotometricUndistorter(W, H, response=_response())
    out = und.process_frame(MinimalImage(W, H, np.uint8, 1, _frame()), 5.0, mode=0)
    assert np.allclose(out.image, _frame())


def test_exposure_ignored_when_disabled():
    und = PhotometricUndistorter(W, H, response=_response())
    out = und.process_frame(_frame(), 7.0, use_exposure=False)
    assert out.exposure_time == 1.0
    assert out.timestamp == 0.0


def test_wrong_shape_raises():
    und = PhotometricUndistorter(W, H)
    with pytest.raises(ValueError):
        und.process_frame(np.zeros((W, H), dtype=np.uint8), 1.0)


def test_float_frame_with_response_raises():
    und = PhotometricUndistorter(W, H, response=_response())
    with pytest.raises(TypeError):
        und.process_frame(_frame().astype(np.float32), 1.0)


def test_value_outside_table_raises():
    und = PhotometricUndistorter(W, H, response=np.ones(16))
    with pytest.raises(IndexError):
        und.process_frame(_frame(), 1.0)


def test_bad_vignette_raises():
    with pytest.raises(ValueError):
        PhotometricUndistorter(W, H, response=_response(), vignette=np.zeros((H, W)))
import numpy as np
import pytest

from dsolib.interpolation import (
    cubic_11,
    cubic_12,
    cubic_32,
    interpolated_element,
    interpolated_element_11_bicub,
    interpolated_element_13_bicub,
    interpolated_element_13_bilin,
    interpolated_element_31,
    interpolated_element_33,
    interpolated_element_33_bicub,
    interpolated_element_33_bilin,
    interpolated_element_33_over_and,
    interpolated_element_33_over_or,
    interpolated_element_42,
    interpolated_element_43,
    interpolated_element_44,
)

W, H = 8, 6


def f(x, y):
    return 2.0 * x + 10.0 * y + 1.0


@pytest.fixture
def scalar():
    ys, xs = np.mgrid[0:H, 0:W]
    return f(xs, ys).astype(np.float32)


def channels(scalar, n):
    return np.stack([scalar + k for k in range(n)], axis=-1)


@pytest.mark.parametrize("x,y", [(1.5, 2.25), (3.0, 1.0), (0.1, 0.9), (6.75, 4.5)])
def test_bilinear_reproduces_linear(scalar, x, y):
    assert interpolated_element(scalar, x, y) == pytest.approx(f(x, y))


def test_bilinear_at_grid_point_returns_pixel(scalar):
    assert interpolated_element(scalar, 4, 3) == pytest.approx(float(scalar[3, 4]))


def test_bilinear_outside_raises(scalar):
    with pytest.raises(IndexError):
        interpolated_element(scalar, W - 1, H - 1)


def test_bilinear_needs_2d():
    with pytest.raises(ValueError):
        interpolated_element(np.zeros(5), 0.5, 0.5)


def test_vector_channel_counts(scalar):
    x, y = 2.5, 1.25
    m4 = channels(scalar, 4)
    m3 = channels(scalar, 3)
    expected = f(x, y) + np.arange(4)
    assert np.allclose(interpolated_element_44(m4, x, y), expected)
    assert np.allclose(interpolated_element_43(m4, x, y), expected[:3])
    assert np.allclose(interpolated_element_42(m4, x, y), expected[:2])
    assert np.allclose(interpolated_element_33(m3, x, y), expected[:3])
    assert interpolated_element_31(m3, x, y) == pytest.approx(expected[0])


def test_over_and_or(scalar):
    m3 = channels(scalar, 3)
    over = np.zeros((H, W), dtype=bool)
    over[2, 3] = True
    value, flag_and = interpolated_element_33_over_and(m3, over, 2.5, 1.5)
    _, flag_or = interpolated_element_33_over_or(m3, over, 2.5, 1.5)
    assert flag_or is True
    assert flag_and is False
    assert np.allclose(value, f(2.5, 1.5) + np.arange(3))
    over[1:3, 2:4] = True
    _, flag_and = interpolated_element_33_over_and(m3, over, 2.5, 1.5)
    assert flag_and is True
    _, flag_or = interpolated_element_33_over_or(m3, np.zeros((H, W), bool), 2.5, 1.5)
    assert flag_or is False


def test_bilin_gradients(scalar):
    res = interpolated_element_13_bilin(scalar, 3.25, 2.5)
    assert res[0] == pytest.approx(f(3.25, 2.5))
    assert res[1] == pytest.approx(f(1, 0) - f(0, 0))
    assert res[2] == pytest.approx(f(0, 1) - f(0, 0))
    res3 = interpolated_element_33_bilin(channels(scalar, 3), 3.25, 2.5)
    assert np.allclose(res3, res)


def test_cubic_at_zero_returns_p1():
    p = [3.0, -1.5, 7.0, 2.0]
    assert cubic_11(p, 0.0) == pytest.approx(p[1])
    assert cubic_12(p, 0.0)[0] == pytest.approx(p[1])
    assert cubic_11(p, 1.0) == pytest.approx(p[2])


def test_cubic_linear_derivative():
    p = [1.0, 4.0, 7.0, 10.0]
    v = cubic_12(p, 0.4)
    assert v[0] == pytest.approx(cubic_11(p, 0.4))
    assert v[1] == pytest.approx(p[2] - p[1])
    vec = [[a, 0.0, 0.0] for a in p]
    assert np.allclose(cubic_32(vec, 0.4), v)


def test_bicubic_reproduces_linear(scalar):
    x, y = 3.3, 2.6
    assert interpolated_element_11_bicub(scalar, x, y) == pytest.approx(f(x, y))
    res = interpolated_element_13_bicub(scalar, x, y)
    assert res[0] == pytest.approx(f(x, y))
    assert res[1] == pytest.approx(f(1, 0) - f(0, 0))
    assert res[2] == pytest.approx(f(0, 1) - f(0, 0))
    res3 = interpolated_element_33_bicub(channels(scalar, 3), x, y)
    assert np.allclose(res3, res)


def test_bicubic_needs_border(scalar):
    with pytest.raises(IndexError):
        interpolated_element_11_bicub(scalar, 0.5, 0.5)
import pytest

from dsolib.colormap import (
    make_jet_3b,
    make_rainbow_3b,
    make_rainbow_f3,
    make_red_green_3b,
)

SAMPLES = [i / 37 for i in range(1, 37)]


def test_rainbow_f3_negative_is_white():
    assert make_rainbow_f3(-0.5) == (1, 1, 1)


@pytest.mark.parametrize("v", SAMPLES + [1.0, 2.3, 5.9])
def test_rainbow_f3_sums_to_one(v):
    colour = make_rainbow_f3(v)
    assert sum(colour) == pytest.approx(1.0)
    assert all(0.0 <= c <= 1.0 for c in colour)


def test_rainbow_scale():
    assert make_rainbow_f3(0.4, 2.0) == pytest.approx(make_rainbow_f3(0.8))
    assert make_rainbow_3b(0.4, 2.0) == make_rainbow_3b(0.8)


def test_rainbow_period_three():
    assert make_rainbow_f3(0.3) == pytest.approx(make_rainbow_f3(3.3))


def test_rainbow_3b_non_positive_is_white():
    assert make_rainbow_3b(0.0) == (255, 255, 255)
    assert make_rainbow_3b(float("nan")) == (255, 255, 255)


@pytest.mark.parametrize("v", SAMPLES)
def test_rainbow_3b_in_range(v):
    colour = make_rainbow_3b(v)
    assert all(0 <= c <= 255 for c in colour)
    assert 254 <= sum(colour) <= 255


def test_jet_clamps():
    assert make_jet_3b(0.0) == (128, 0, 0)
    assert make_jet_3b(-1.0) == make_jet_3b(0.0)
    assert make_jet_3b(1.0) == (0, 0, 128)
    assert make_jet_3b(3.0) == make_jet_3b(1.0)


@pytest.mark.parametrize("v", SAMPLES)
def test_jet_in_range(v):
    assert all(0 <= c <= 255 for c in make_jet_3b(v))


def test_jet_nan_raises():
    with pytest.raises(ValueError):
        make_jet_3b(float("nan"))


def test_red_green_ends():
    assert make_red_green_3b(-1.0) == (0, 0, 255)
    assert make_red_green_3b(2.0) == (0, 255, 0)


def test_red_green_monotone():
    colours = [make_red_green_3b(v) for v in [i / 20 for i in range(21)]]
    greens = [c[1] for c in colours]
    reds = [c[2] for c in colours]
    assert greens == sorted(greens)
    assert reds == sorted(reds, reverse=True)
    assert all(c[0] == 0 for c in colours)
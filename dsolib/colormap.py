"""Colour maps for visualising scalar values."""

from __future__ import annotations

import math

__all__ = ["make_rainbow_f3", "make_rainbow_3b", "make_jet_3b", "make_red_green_3b"]

WHITE_F = (1.0, 1.0, 1.0)
WHITE_B = (255, 255, 255)


def _split(value: float) -> tuple[int, float]:
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"cannot map {value} to a colour")
    whole = int(value)
    return whole, value - whole


def make_rainbow_f3(value: float, scale: float = 1.0) -> tuple[float, float, float]:
    """Cyclic rainbow colour in [0, 1]^3; negative values map to white."""
    value *= scale
    if value < 0:
        return WHITE_F
    whole, frac = _split(value)
    phase = whole % 3
    if phase == 0:
        return (1 - frac, frac, 0.0)
    if phase == 1:
        return (0.0, 1 - frac, frac)
    return (frac, 0.0, 1 - frac)


def make_rainbow_3b(value: float, scale: float = 1.0) -> tuple[int, int, int]:
    """Cyclic rainbow colour as bytes; values not above zero map to white."""
    value *= scale
    if not value > 0:
        return WHITE_B
    whole, frac = _split(value)
    phase = whole % 3
    if phase == 0:
        return (int(255 * (1 - frac)), int(255 * frac), 0)
    if phase == 1:
        return (0, int(255 * (1 - frac)), int(255 * frac))
    return (int(255 * frac), 0, int(255 * (1 - frac)))


def make_jet_3b(value: float) -> tuple[int, int, int]:
    """Jet colour map over [0, 1] as bytes, clamped at both ends."""
    if value <= 0:
        return (128, 0, 0)
    if value >= 1:
        return (0, 0, 128)
    segment, frac = _split(value * 8)
    table = {
        0: (255 * (0.5 + 0.5 * frac), 0, 0),
        1: (255, 255 * (0.5 * frac), 0),
        2: (255, 255 * (0.5 + 0.5 * frac), 0),
        3: (255 * (1 - 0.5 * frac), 255, 255 * (0.5 * frac)),
        4: (255 * (0.5 - 0.5 * frac), 255, 255 * (0.5 + 0.5 * frac)),
        5: (0, 255 * (1 - 0.5 * frac), 255),
        6: (0, 255 * (0.5 - 0.5 * frac), 255),
        7: (0, 0, 255 * (1 - 0.5 * frac)),
    }
    colour = table.get(segment)
    if colour is None:
        return WHITE_B
    return tuple(int(c) for c in colour)  # type: ignore[return-value]


def make_red_green_3b(value: float) -> tuple[int, int, int]:
    """0 maps to red, 0.5 to yellow and 1 to green (BGR byte order)."""
    if value < 0:
        return (0, 0, 255)
    if value < 0.5:
        return (0, int(255 * 2 * value), 255)
    if value < 1:
        return (0, 255, int(255 - 255 * 2 * (value - 0.5)))
    return (0, 255, 0)
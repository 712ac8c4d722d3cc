"""Distance functors used by the k-d tree.

Each functor is bound to a data set, an ``(n, dim)`` array of points, and
measures the distance from a query vector to one of those points by index.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence

import numpy as np

__all__ = ["Metric", "L1Distance", "L2Distance", "L2SimpleDistance", "distance_for"]


class Metric(enum.Enum):
    """The distance metrics a k-d tree can use."""

    L1 = "l1"
    L2 = "l2"
    L2_SIMPLE = "l2_simple"


class _Distance:
    """Common storage and argument checks for the distance functors."""

    def __init__(self, data: np.ndarray | Sequence[Sequence[float]]) -> None:
        arr = np.asarray(data)
        if arr.ndim != 2:
            raise ValueError(f"data must be an (n, dim) array, got shape {arr.shape}")
        self.data = arr

    @property
    def dim(self) -> int:
        return self.data.shape[1]

    def _point(self, a: Sequence[float] | np.ndarray, b: int) -> tuple[list[float], list[float]]:
        query = [float(v) for v in np.asarray(a).ravel()]
        if len(query) != self.dim:
            raise ValueError(f"query has {len(query)} components, points have {self.dim}")
        if not 0 <= b < self.data.shape[0]:
            raise IndexError(f"point index {b} outside data set of {self.data.shape[0]} points")
        return query, [float(v) for v in self.data[b]]


class L1Distance(_Distance):
    """Manhattan distance."""

    def __call__(self, a: Sequence[float] | np.ndarray, b: int, worst_dist: float = -1) -> float:
        """Distance from ``a`` to point ``b``.

        Components are summed four at a time; once a positive ``worst_dist``
        is exceeded after such a group, the partial sum is returned.
        """
        query, point = self._point(a, b)
        size = len(query)
        result = 0.0
        d = 0
        while d + 4 <= size:
            result += sum(abs(query[k] - point[k]) for k in range(d, d + 4))
            d += 4
            if worst_dist > 0 and result > worst_dist:
                return result
        result += sum(abs(q - p) for q, p in zip(query[d:], point[d:]))
        return result

    def accum_dist(self, a: float, b: float) -> float:
        """Contribution of one component."""
        return abs(a - b)


class L2Distance(_Distance):
    """Squared Euclidean distance with early termination."""

    def __call__(self, a: Sequence[float] | np.ndarray, b: int, worst_dist: float = -1) -> float:
        """Squared distance from ``a`` to point ``b``.

        Components are summed four at a time; once a positive ``worst_dist``
        is exceeded after such a group, the partial sum is returned.
        """
        query, point = self._point(a, b)
        size = len(query)
        result = 0.0
        d = 0
        while d + 4 <= size:
            result += sum((query[k] - point[k]) ** 2 for k in range(d, d + 4))
            d += 4
            if worst_dist > 0 and result > worst_dist:
                return result
        result += sum((q - p) ** 2 for q, p in zip(query[d:], point[d:]))
        return result

    def accum_dist(self, a: float, b: float) -> float:
        """Contribution of one component."""
        return (a - b) * (a - b)


class L2SimpleDistance(_Distance):
    """Squared Euclidean distance for low-dimensional points, always complete."""

    def __call__(self, a: Sequence[float] | np.ndarray, b: int, worst_dist: float = -1) -> float:
        """Squared distance from ``a`` to point ``b``; ``worst_dist`` is ignored."""
        query, point = self._point(a, b)
        return sum((q - p) ** 2 for q, p in zip(query, point))

    def accum_dist(self, a: float, b: float) -> float:
        """Contribution of one component."""
        return (a - b) * (a - b)


_BY_METRIC: dict[Metric, type[_Distance]] = {
    Metric.L1: L1Distance,
    Metric.L2: L2Distance,
    Metric.L2_SIMPLE: L2SimpleDistance,
}


def distance_for(metric: Metric | str) -> type[_Distance]:
    """The distance class implementing ``metric``."""
    try:
        return _BY_METRIC[Metric(metric)]
    except ValueError:
        raise ValueError(f"unknown metric {metric!r}") from None
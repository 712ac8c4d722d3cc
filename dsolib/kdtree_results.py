"""Result collectors for nearest-neighbour searches."""

from __future__ import annotations

import bisect
import math

__all__ = ["KNNResultSet", "RadiusResultSet"]


class KNNResultSet:
    """Keeps the ``capacity`` closest points seen, sorted by distance.

    Points at equal distance keep their insertion order, unless
    ``first_match`` is set, in which case the lower index comes first.
    """

    def __init__(self, capacity: int, first_match: bool = False) -> None:
        if capacity < 0:
            raise ValueError("capacity must not be negative")
        self.capacity = capacity
        self.first_match = first_match
        self._entries: list[tuple[float, int]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def full(self) -> bool:
        return len(self._entries) == self.capacity

    def add_point(self, dist: float, index: int) -> None:
        if self.first_match:
            pos = bisect.bisect_left(self._entries, (dist, index))
        else:
            pos = bisect.bisect_right([d for d, _ in self._entries], dist)
        if pos < self.capacity:
            self._entries.insert(pos, (dist, index))
            del self._entries[self.capacity :]

    def worst_dist(self) -> float:
        """Distance of the last kept point once full, infinity before that."""
        if self.capacity and self.full():
            return self._entries[-1][0]
        return math.inf

    def results(self) -> list[tuple[int, float]]:
        """The kept points as (index, distance) pairs, closest first."""
        return [(index, dist) for dist, index in self._entries]

    @property
    def indices(self) -> list[int]:
        return [index for _, index in self._entries]

    @property
    def dists(self) -> list[float]:
        return [dist for dist, _ in self._entries]


class RadiusResultSet:
    """Collects every point closer than ``radius`` as (index, distance) pairs."""

    def __init__(self, radius: float, indices_dists: list[tuple[int, float]] | None = None) -> None:
        self.radius = radius
        self.indices_dists: list[tuple[int, float]] = (
            indices_dists if indices_dists is not None else []
        )
        self.clear()

    def __len__(self) -> int:
        return len(self.indices_dists)

    def full(self) -> bool:
        return True

    def add_point(self, dist: float, index: int) -> None:
        if dist < self.radius:
            self.indices_dists.append((index, dist))

    def worst_dist(self) -> float:
        return self.radius

    def clear(self) -> None:
        self.indices_dists.clear()

    def set_radius_and_clear(self, radius: float) -> None:
        self.radius = radius
        self.clear()

    def worst_item(self) -> tuple[int, float]:
        """The largest entry in (index, distance) order."""
        if not self.indices_dists:
            raise ValueError("cannot take the worst item of an empty result set")
        return max(self.indices_dists)
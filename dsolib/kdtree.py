"""A k-d tree over a fixed set of points for nearest-neighbour queries."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from typing import BinaryIO, Protocol

import numpy as np

from dsolib.kdtree_metrics import Metric, distance_for
from dsolib.kdtree_results import KNNResultSet, RadiusResultSet

__all__ = ["KDTree"]

_SPLIT_EPS = 0.00001
_LEAF = 0
_INNER = 3


class _ResultSet(Protocol):
    def add_point(self, dist: float, index: int) -> None: ...

    def worst_dist(self) -> float: ...

    def full(self) -> bool: ...


class _Node:
    """A leaf holds the index range [left, right); an inner node a split."""

    __slots__ = ("left", "right", "divfeat", "divlow", "divhigh", "child1", "child2")

    def __init__(self) -> None:
        self.left = 0
        self.right = 0
        self.divfeat = 0
        self.divlow = 0.0
        self.divhigh = 0.0
        self.child1: _Node | None = None
        self.child2: _Node | None = None

    @property
    def is_leaf(self) -> bool:
        return self.child1 is None and self.child2 is None


class KDTree:
    """k-d tree index over the rows of an ``(n, dim)`` point array.

    The tree is not built on construction; call ``build_index`` first.  Saved
    indices hold the tree only, so they must be loaded into a tree made over
    the same points.
    """

    def __init__(
        self,
        data: np.ndarray | Sequence[Sequence[float]],
        metric: Metric | str = Metric.L2,
        leaf_max_size: int = 10,
        dim: int | None = None,
    ) -> None:
        if leaf_max_size < 1:
            raise ValueError("leaf_max_size must be at least 1")
        self.distance = distance_for(metric)(data)
        cols = self.distance.dim
        if dim is not None and dim != cols:
            raise ValueError("dimensionality must match the column count of the data")
        self._points: list[list[float]] = np.asarray(self.distance.data, dtype=np.float64).tolist()
        self._dim = cols
        self.leaf_max_size = leaf_max_size
        self._root: _Node | None = None
        self._root_bbox: list[list[float]] = []
        self._size = 0
        self._size_at_build = 0
        self._init_vind()

    def __len__(self) -> int:
        return self._size

    @property
    def veclen(self) -> int:
        """Number of components of each point."""
        return self._dim

    def _init_vind(self) -> None:
        self._size = len(self._points)
        self._vind = list(range(self._size))

    def _get(self, idx: int, component: int) -> float:
        return self._points[idx][component]

    def free_index(self) -> None:
        self._root = None
        self._size_at_build = 0

    def build_index(self) -> None:
        """(Re)build the tree over all points."""
        self._init_vind()
        self.free_index()
        self._size_at_build = self._size
        if self._size == 0:
            return
        self._root_bbox = self._compute_bounding_box()
        self._root = self._divide_tree(0, self._size, self._root_bbox)

    def _compute_bounding_box(self) -> list[list[float]]:
        if not self._points:
            raise RuntimeError("cannot compute a bounding box without data points")
        bbox = [[self._points[0][i], self._points[0][i]] for i in range(self._dim)]
        for point in self._points[1:]:
            for interval, value in zip(bbox, point):
                if value < interval[0]:
                    interval[0] = value
                if value > interval[1]:
                    interval[1] = value
        return bbox

    def _divide_tree(self, left: int, right: int, bbox: list[list[float]]) -> _Node:
        node = _Node()
        if right - left <= self.leaf_max_size:
            node.left = left
            node.right = right
            first = self._points[self._vind[left]]
            for i in range(self._dim):
                bbox[i][0] = bbox[i][1] = first[i]
            for k in self._vind[left + 1 : right]:
                for interval, value in zip(bbox, self._points[k]):
                    if interval[0] > value:
                        interval[0] = value
                    if interval[1] < value:
                        interval[1] = value
            return node

        idx, cutfeat, cutval = self._middle_split(left, right - left, bbox)
        node.divfeat = cutfeat

        left_bbox = [list(iv) for iv in bbox]
        left_bbox[cutfeat][1] = cutval
        node.child1 = self._divide_tree(left, left + idx, left_bbox)

        right_bbox = [list(iv) for iv in bbox]
        right_bbox[cutfeat][0] = cutval
        node.child2 = self._divide_tree(left + idx, right, right_bbox)

        node.divlow = left_bbox[cutfeat][1]
        node.divhigh = right_bbox[cutfeat][0]
        for i in range(self._dim):
            bbox[i][0] = min(left_bbox[i][0], right_bbox[i][0])
            bbox[i][1] = max(left_bbox[i][1], right_bbox[i][1])
        return node

    def _min_max(self, start: int, count: int, element: int) -> tuple[float, float]:
        values = [self._points[k][element] for k in self._vind[start : start + count]]
        return min(values), max(values)

    def _middle_split(
        self, start: int, count: int, bbox: list[list[float]]
    ) -> tuple[int, int, float]:
        max_span = max(high - low for low, high in bbox)
        max_spread = -1.0
        cutfeat = 0
        for i, (low, high) in enumerate(bbox):
            if high - low > (1 - _SPLIT_EPS) * max_span:
                # The spread is measured along the current best feature.
                min_elem, max_elem = self._min_max(start, count, cutfeat)
                spread = max_elem - min_elem
                if spread > max_spread:
                    cutfeat = i
                    max_spread = spread

        split_val = (bbox[cutfeat][0] + bbox[cutfeat][1]) / 2
        min_elem, max_elem = self._min_max(start, count, cutfeat)
        cutval = min(max(split_val, min_elem), max_elem)

        lim1, lim2 = self._plane_split(start, count, cutfeat, cutval)
        half = count // 2
        if lim1 > half:
            index = lim1
        elif lim2 < half:
            index = lim2
        else:
            index = half
        return index, cutfeat, cutval

    def _plane_split(self, start: int, count: int, cutfeat: int, cutval: float) -> tuple[int, int]:
        ind = self._vind

        def value(k: int) -> float:
            return self._points[ind[start + k]][cutfeat]

        def swap(a: int, b: int) -> None:
            ind[start + a], ind[start + b] = ind[start + b], ind[start + a]

        left, right = 0, count - 1
        while True:
            while left <= right and value(left) < cutval:
                left += 1
            while right and left <= right and value(right) >= cutval:
                right -= 1
            if left > right or not right:
                break
            swap(left, right)
            left += 1
            right -= 1
        lim1 = left

        right = count - 1
        while True:
            while left <= right and value(left) <= cutval:
                left += 1
            while right and left <= right and value(right) > cutval:
                right -= 1
            if left > right or not right:
                break
            swap(left, right)
            left += 1
            right -= 1
        return lim1, left

    def _query(self, vec: Sequence[float] | np.ndarray) -> list[float]:
        query = [float(v) for v in np.asarray(vec).ravel()]
        if len(query) != self._dim:
            raise ValueError(f"query has {len(query)} components, points have {self._dim}")
        return query

    def find_neighbors(
        self, result: _ResultSet, vec: Sequence[float] | np.ndarray, eps: float = 0.0
    ) -> bool:
        """Feed the neighbours of ``vec`` into ``result``; True if it is full.

        A positive ``eps`` allows (1 + eps)-approximate answers.
        """
        query = self._query(vec)
        if self._size == 0:
            return False
        if self._root is None:
            raise RuntimeError("find_neighbors called before building the index")
        dists = [0.0] * self._dim
        distsq = self._initial_distances(query, dists)
        self._search_level(result, query, self._root, distsq, dists, 1 + eps)
        return result.full()

    def _initial_distances(self, query: list[float], dists: list[float]) -> float:
        accum = self.distance.accum_dist
        distsq = 0.0
        for i, (value, (low, high)) in enumerate(zip(query, self._root_bbox)):
            if value < low:
                dists[i] = accum(value, low)
                distsq += dists[i]
            if value > high:
                dists[i] = accum(value, high)
                distsq += dists[i]
        return distsq

    def _search_level(
        self,
        result: _ResultSet,
        query: list[float],
        node: _Node,
        mindistsq: float,
        dists: list[float],
        eps_error: float,
    ) -> None:
        if node.is_leaf:
            worst = result.worst_dist()
            for index in self._vind[node.left : node.right]:
                dist = self.distance(query, index)
                if dist < worst:
                    result.add_point(dist, index)
            return

        idx = node.divfeat
        val = query[idx]
        diff1 = val - node.divlow
        diff2 = val - node.divhigh
        if diff1 + diff2 < 0:
            best, other = node.child1, node.child2
            cut_dist = self.distance.accum_dist(val, node.divhigh)
        else:
            best, other = node.child2, node.child1
            cut_dist = self.distance.accum_dist(val, node.divlow)
        assert best is not None and other is not None

        self._search_level(result, query, best, mindistsq, dists, eps_error)

        dst = dists[idx]
        mindistsq = mindistsq + cut_dist - dst
        dists[idx] = cut_dist
        if mindistsq * eps_error <= result.worst_dist():
            self._search_level(result, query, other, mindistsq, dists, eps_error)
        dists[idx] = dst

    def knn_search(
        self, query: Sequence[float] | np.ndarray, num_closest: int
    ) -> list[tuple[int, float]]:
        """Up to ``num_closest`` nearest points as (index, distance), closest first."""
        result = KNNResultSet(num_closest)
        self.find_neighbors(result, query)
        return result.results()

    def radius_search(
        self, query: Sequence[float] | np.ndarray, radius: float, sort: bool = True
    ) -> list[tuple[int, float]]:
        """All points with distance below ``radius`` as (index, distance) pairs."""
        result = RadiusResultSet(radius)
        self.find_neighbors(result, query)
        found = list(result.indices_dists)
        if sort:
            found.sort(key=lambda item: item[1])
        return found

    def save_index(self, stream: BinaryIO) -> None:
        """Write the built tree (not the points) to a binary stream."""
        if self._root is None:
            raise RuntimeError("cannot save an index that has not been built")
        stream.write(struct.pack("<Q", self._size))
        stream.write(struct.pack("<i", self._dim))
        stream.write(struct.pack("<Q", len(self._root_bbox)))
        for low, high in self._root_bbox:
            stream.write(struct.pack("<dd", low, high))
        stream.write(struct.pack("<Q", self.leaf_max_size))
        stream.write(struct.pack("<Q", len(self._vind)))
        stream.write(struct.pack(f"<{len(self._vind)}Q", *self._vind))
        self._save_tree(stream, self._root)

    def _save_tree(self, stream: BinaryIO, node: _Node) -> None:
        if node.is_leaf:
            stream.write(struct.pack("<BQQ", _LEAF, node.left, node.right))
            return
        stream.write(struct.pack("<Bidd", _INNER, node.divfeat, node.divlow, node.divhigh))
        assert node.child1 is not None and node.child2 is not None
        self._save_tree(stream, node.child1)
        self._save_tree(stream, node.child2)

    @staticmethod
    def _read(stream: BinaryIO, fmt: str) -> tuple:
        size = struct.calcsize(fmt)
        raw = stream.read(size)
        if len(raw) != size:
            raise ValueError("cannot read from stream")
        return struct.unpack(fmt, raw)

    def load_index(self, stream: BinaryIO) -> None:
        """Read a tree written by ``save_index`` for the same points."""
        (size,) = self._read(stream, "<Q")
        (dim,) = self._read(stream, "<i")
        (nbox,) = self._read(stream, "<Q")
        bbox = [list(self._read(stream, "<dd")) for _ in range(nbox)]
        (leaf_max,) = self._read(stream, "<Q")
        (nvind,) = self._read(stream, "<Q")
        vind = list(self._read(stream, f"<{nvind}Q")) if nvind else []
        root = self._load_tree(stream)

        self._size = size
        self._dim = dim
        self._root_bbox = bbox
        self.leaf_max_size = leaf_max
        self._vind = vind
        self._root = root
        self._size_at_build = size

    def _load_tree(self, stream: BinaryIO) -> _Node:
        (kind,) = self._read(stream, "<B")
        node = _Node()
        if kind == _LEAF:
            node.left, node.right = self._read(stream, "<QQ")
        elif kind == _INNER:
            node.divfeat, node.divlow, node.divhigh = self._read(stream, "<idd")
            node.child1 = self._load_tree(stream)
            node.child2 = self._load_tree(stream)
        else:
            raise ValueError(f"corrupt index stream: unknown node kind {kind}")
        return node
"""In-process world model backed by a uniform spatial hash.

Used by the CLI scenario runner and tests. It implements both ``SpatialQuery``
and ``LineOfSight`` so the placement gate can run without a host engine.
"""

from __future__ import annotations

import logging
import math
import threading
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from siege_limit.geometry import Bounds, Vector3
from siege_limit.models import WorldObject
from siege_limit.world.spatial import QueryUnavailable

_Cell = tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class Obstruction:
    """Opaque box that blocks line of sight unless its owner is ignored."""

    bounds: Bounds
    owner_id: str | None = None


class InMemoryWorld:
    """Thread-safe object store with grid-bucketed radius queries."""

    def __init__(
        self,
        *,
        cell_size: float = 8.0,
        query_timeout_seconds: float = 0.5,
        logger: logging.Logger | None = None,
    ) -> None:
        if cell_size <= 0:
            raise ValueError("cell_size must be positive")
        self._cell_size = cell_size
        self._query_timeout_seconds = query_timeout_seconds
        self._logger = logger or logging.getLogger("siege_limit.world")

        self._lock = threading.RLock()
        self._objects: dict[str, WorldObject] = {}
        self._cells: defaultdict[_Cell, set[str]] = defaultdict(set)
        self._obstructions: list[Obstruction] = []
        self._transitioning = False

    def __len__(self) -> int:
        return len(self._objects)

    def add(self, obj: WorldObject) -> None:
        with self._lock:
            if obj.object_id in self._objects:
                raise ValueError(f"Duplicate world object id: {obj.object_id}")
            self._objects[obj.object_id] = obj
            self._cells[self._cell_of(obj.position)].add(obj.object_id)
            if obj.bounds is not None:
                self._obstructions.append(Obstruction(bounds=obj.bounds, owner_id=obj.object_id))

    def remove(self, object_id: str) -> WorldObject | None:
        with self._lock:
            obj = self._objects.pop(object_id, None)
            if obj is None:
                return None
            cell = self._cell_of(obj.position)
            self._cells[cell].discard(object_id)
            if not self._cells[cell]:
                del self._cells[cell]
            self._obstructions = [item for item in self._obstructions if item.owner_id != object_id]
            return obj

    def add_obstruction(self, obstruction: Obstruction) -> None:
        with self._lock:
            self._obstructions.append(obstruction)

    @contextmanager
    def transition(self) -> Iterator[InMemoryWorld]:
        """Mark the world inconsistent (e.g. during a bulk reload); queries fail meanwhile."""
        with self._lock:
            self._transitioning = True
        try:
            yield self
        finally:
            with self._lock:
                self._transitioning = False

    def find_nearby(self, point: Vector3, radius: float, kind: str) -> list[WorldObject]:
        if not math.isfinite(radius) or radius < 0:
            raise ValueError(f"radius must be finite and non-negative, got {radius}")
        with self._bounded_lock():
            if self._transitioning:
                raise QueryUnavailable("World is in a transitional state")

            matches: list[WorldObject] = []
            for cell in self._cells_in_range(point, radius):
                for object_id in self._cells.get(cell, ()):
                    obj = self._objects[object_id]
                    if obj.kind == kind and point.distance_to(obj.position) <= radius:
                        matches.append(obj)

        self._logger.debug(
            "world_find_nearby",
            extra={"kind": kind, "radius": radius, "match_count": len(matches)},
        )
        return matches

    def exists(self, obj: WorldObject) -> bool:
        with self._bounded_lock():
            return self._objects.get(obj.object_id) == obj

    def line_of_sight(self, start: Vector3, end: Vector3, *, ignore_ids: frozenset[str]) -> bool:
        with self._bounded_lock():
            obstructions = list(self._obstructions)
        for obstruction in obstructions:
            if obstruction.owner_id is not None and obstruction.owner_id in ignore_ids:
                continue
            if obstruction.bounds.intersects_segment(start, end):
                return False
        return True

    @contextmanager
    def _bounded_lock(self) -> Iterator[None]:
        """Hold the world lock, or raise ``QueryUnavailable`` after the query timeout."""
        if not self._lock.acquire(timeout=self._query_timeout_seconds):
            raise QueryUnavailable(f"World lock not acquired within {self._query_timeout_seconds}s")
        try:
            yield
        finally:
            self._lock.release()

    def _cell_of(self, point: Vector3) -> _Cell:
        size = self._cell_size
        return (math.floor(point.x / size), math.floor(point.y / size), math.floor(point.z / size))

    def _cells_in_range(self, point: Vector3, radius: float) -> Iterator[_Cell]:
        low = self._cell_of(Vector3(point.x - radius, point.y - radius, point.z - radius))
        high = self._cell_of(Vector3(point.x + radius, point.y + radius, point.z + radius))
        span = (high[0] - low[0] + 1) * (high[1] - low[1] + 1) * (high[2] - low[2] + 1)
        if span > len(self._cells):
            # Fewer occupied cells than cells in the query cube.
            for cell in list(self._cells):
                if all(low[axis] <= cell[axis] <= high[axis] for axis in range(3)):
                    yield cell
            return
        for cx in range(low[0], high[0] + 1):
            for cy in range(low[1], high[1] + 1):
                for cz in range(low[2], high[2] + 1):
                    yield (cx, cy, cz)

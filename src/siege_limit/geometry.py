"""Small 3D geometry primitives used by spatial queries and line-of-sight casts."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector3:
    x: float
    y: float
    z: float

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def distance_to(self, other: Vector3) -> float:
        return math.dist(self.as_tuple(), other.as_tuple())

    @classmethod
    def parse(cls, value: list[float] | tuple[float, ...] | dict) -> Vector3:
        """Build a vector from ``[x, y, z]`` or ``{"x": .., "y": .., "z": ..}``."""
        if isinstance(value, dict):
            return cls(float(value["x"]), float(value["y"]), float(value["z"]))
        if len(value) != 3:
            raise ValueError(f"Expected 3 coordinates, got {len(value)}")
        x, y, z = value
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned box given by its min and max corners."""

    minimum: Vector3
    maximum: Vector3

    def __post_init__(self) -> None:
        for low, high in zip(self.minimum.as_tuple(), self.maximum.as_tuple()):
            if low > high:
                raise ValueError(f"Bounds minimum {self.minimum} exceeds maximum {self.maximum}")

    @classmethod
    def around(cls, center: Vector3, half_extent: float) -> Bounds:
        return cls(
            Vector3(center.x - half_extent, center.y - half_extent, center.z - half_extent),
            Vector3(center.x + half_extent, center.y + half_extent, center.z + half_extent),
        )

    def intersects_segment(self, start: Vector3, end: Vector3) -> bool:
        """Slab test for the segment ``start -> end``.

        Only a crossing with positive length counts as a hit, so a segment that
        touches a face or an edge without entering the box is not blocked.
        """
        t_enter = 0.0
        t_exit = 1.0
        direction = (end - start).as_tuple()
        origin = start.as_tuple()

        for axis in range(3):
            low = self.minimum.as_tuple()[axis]
            high = self.maximum.as_tuple()[axis]
            delta = direction[axis]
            if delta == 0.0:
                if origin[axis] <= low or origin[axis] >= high:
                    return False
                continue

            t_near = (low - origin[axis]) / delta
            t_far = (high - origin[axis]) / delta
            if t_near > t_far:
                t_near, t_far = t_far, t_near
            t_enter = max(t_enter, t_near)
            t_exit = min(t_exit, t_far)
            if t_enter >= t_exit:
                return False

        return t_enter < t_exit

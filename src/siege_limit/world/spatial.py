"""Boundary for host-provided spatial lookups."""

from typing import Protocol

from siege_limit.geometry import Vector3
from siege_limit.models import WorldObject


class QueryUnavailable(RuntimeError):
    """Raised when the world cannot answer a spatial query consistently."""


class SpatialQuery(Protocol):
    """Finds world objects of one kind around a point."""

    def find_nearby(self, point: Vector3, radius: float, kind: str) -> list[WorldObject]:
        """Return every object of ``kind`` within ``radius`` of ``point`` (inclusive)."""

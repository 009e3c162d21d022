"""Line-of-sight filtering for spatially-near objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from siege_limit.geometry import Vector3
from siege_limit.models import WorldObject


class StaleObjectError(LookupError):
    """Raised when an object was removed from the world while being inspected."""


class LineOfSight(Protocol):
    """Host capability for ray casts against opaque world geometry."""

    def exists(self, obj: WorldObject) -> bool:
        """Return whether the object is still present in the world."""

    def line_of_sight(self, start: Vector3, end: Vector3, *, ignore_ids: frozenset[str]) -> bool:
        """Return True when nothing opaque, except owners in ``ignore_ids``, blocks the segment."""


class VisibilityFilter:
    """Keeps objects whose reference point can see a target point."""

    def __init__(self, line_of_sight: LineOfSight, *, logger: logging.Logger | None = None) -> None:
        self._line_of_sight = line_of_sight
        self._logger = logger or logging.getLogger("siege_limit.visibility")

    def filter_visible(
        self,
        point: Vector3,
        objects: Iterable[WorldObject | None],
        *,
        ignore_ids: Iterable[str] = (),
    ) -> list[WorldObject]:
        ignored = frozenset(ignore_ids)
        visible: list[WorldObject] = []
        for obj in objects:
            if obj is None:
                continue
            if self._can_see(obj, point, ignored):
                visible.append(obj)
        return visible

    def _can_see(self, obj: WorldObject, point: Vector3, ignored: frozenset[str]) -> bool:
        if obj.reference_point is None:
            return False
        try:
            if not self._line_of_sight.exists(obj):
                self._logger.debug("visibility_object_gone", extra={"object_id": obj.object_id})
                return False
            return self._line_of_sight.line_of_sight(
                obj.reference_point,
                point,
                ignore_ids=ignored | {obj.object_id},
            )
        except (StaleObjectError, ReferenceError):
            # Removed between the spatial query and the cast, or a dead host proxy.
            self._logger.debug("visibility_object_stale", extra={"object_id": obj.object_id})
            return False

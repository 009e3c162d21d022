"""World-facing capabilities: spatial lookup and line-of-sight filtering."""

from .memory import InMemoryWorld, Obstruction
from .spatial import QueryUnavailable, SpatialQuery
from .visibility import LineOfSight, StaleObjectError, VisibilityFilter

__all__ = [
    "InMemoryWorld",
    "LineOfSight",
    "Obstruction",
    "QueryUnavailable",
    "SpatialQuery",
    "StaleObjectError",
    "VisibilityFilter",
]

"""Limit how many siege bombs can be placed close together."""

from .gate import PlacementGate
from .geometry import Bounds, Vector3
from .hook import PlacementHook
from .models import Actor, Decision, PlacementCandidate, PlacementVerdict, ReasonCode, WorldObject
from .plugin import SiegeLimitPlugin

__all__ = [
    "Actor",
    "Bounds",
    "Decision",
    "PlacementCandidate",
    "PlacementGate",
    "PlacementHook",
    "PlacementVerdict",
    "ReasonCode",
    "SiegeLimitPlugin",
    "Vector3",
    "WorldObject",
]

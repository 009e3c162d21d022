from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from siege_limit.geometry import Bounds, Vector3


class ReasonCode(str, Enum):
    NOT_RESTRICTED_KIND = "not_restricted_kind"
    UNDER_LIMIT = "under_limit"
    AT_OR_OVER_LIMIT = "at_or_over_limit"


class PlacementVerdict(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True, slots=True)
class WorldObject:
    object_id: str
    kind: str
    position: Vector3
    reference_point: Vector3
    bounds: Bounds | None = None


@dataclass(frozen=True, slots=True)
class PlacementCandidate:
    position: Vector3
    object_kind: str
    placed_by: str | None = None


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason_code: ReasonCode
    nearby_count: int | None = None


@dataclass(frozen=True, slots=True)
class Actor:
    user_id: str
    display_name: str = ""
    language: str | None = None


@dataclass(frozen=True, slots=True)
class PlacementOutcome:
    """Hook result with the gate decision when one was made."""

    verdict: PlacementVerdict
    decision: Decision | None = None
    reason: str = ""

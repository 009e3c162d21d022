"""Density gate deciding whether a restricted object may be placed."""

from __future__ import annotations

import logging

from siege_limit.config import PlacementConfig
from siege_limit.models import Decision, PlacementCandidate, ReasonCode
from siege_limit.world.spatial import SpatialQuery
from siege_limit.world.visibility import VisibilityFilter


class PlacementGate:
    """Counts visible same-kind objects around a candidate and compares with the cap.

    The gate is stateless: every call is fully determined by the candidate, the
    config snapshot passed in and the world behind the collaborators.
    ``QueryUnavailable`` from the spatial query is not handled here.
    """

    def __init__(
        self,
        spatial_query: SpatialQuery,
        visibility_filter: VisibilityFilter,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._spatial_query = spatial_query
        self._visibility_filter = visibility_filter
        self._logger = logger or logging.getLogger("siege_limit.gate")

    def evaluate(self, candidate: PlacementCandidate, config: PlacementConfig) -> Decision:
        if not config.restriction_active or candidate.object_kind not in config.restricted_kinds:
            return Decision(allowed=True, reason_code=ReasonCode.NOT_RESTRICTED_KIND)

        nearby = self._spatial_query.find_nearby(candidate.position, config.check_radius, candidate.object_kind)
        ignore_ids = (candidate.placed_by,) if candidate.placed_by else ()
        visible = self._visibility_filter.filter_visible(candidate.position, nearby, ignore_ids=ignore_ids)
        count = len(visible)

        if count >= config.max_nearby:
            decision = Decision(allowed=False, reason_code=ReasonCode.AT_OR_OVER_LIMIT, nearby_count=count)
        else:
            decision = Decision(allowed=True, reason_code=ReasonCode.UNDER_LIMIT, nearby_count=count)

        self._logger.debug(
            "placement_evaluated",
            extra={
                "kind": candidate.object_kind,
                "nearby_in_radius": len(nearby),
                "nearby_visible": count,
                "max_nearby": config.max_nearby,
                "allowed": decision.allowed,
            },
        )
        return decision

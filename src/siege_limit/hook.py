"""Placement hook invoked by the host before a new object is materialized."""

from __future__ import annotations

import logging

from siege_limit.config import ConfigStore
from siege_limit.gate import PlacementGate
from siege_limit.geometry import Vector3
from siege_limit.localization import Lang, Messenger
from siege_limit.models import Actor, PlacementCandidate, PlacementOutcome, PlacementVerdict
from siege_limit.permissions import IGNORE, PermissionRegistry
from siege_limit.telemetry import Telemetry
from siege_limit.world.spatial import QueryUnavailable


class PlacementHook:
    """Wraps the gate with permission bypass, failure policy and player feedback."""

    def __init__(
        self,
        gate: PlacementGate,
        config_store: ConfigStore,
        permissions: PermissionRegistry,
        messenger: Messenger,
        *,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._gate = gate
        self._config_store = config_store
        self._permissions = permissions
        self._messenger = messenger
        self._telemetry = telemetry
        self._logger = logger or logging.getLogger("siege_limit.hook")

    def on_placement_attempt(self, actor: Actor | None, position: Vector3, kind: str) -> PlacementVerdict:
        return self.assess(actor, position, kind).verdict

    def assess(self, actor: Actor | None, position: Vector3, kind: str) -> PlacementOutcome:
        """Run the full placement check, notifying ``actor`` when it is denied."""
        if actor is None:
            return PlacementOutcome(PlacementVerdict.ALLOW, reason="no_actor")
        if not kind:
            return PlacementOutcome(PlacementVerdict.ALLOW, reason="no_kind")

        if self._permissions.user_has_permission(actor.user_id, IGNORE):
            return PlacementOutcome(PlacementVerdict.ALLOW, reason="ignore_permission")

        # Read the snapshot once per attempt.
        config = self._config_store.current
        candidate = PlacementCandidate(position=position, object_kind=kind, placed_by=actor.user_id)
        try:
            decision = self._gate.evaluate(candidate, config)
        except QueryUnavailable as exc:
            self._logger.warning(
                "placement_query_unavailable",
                extra={"user_id": actor.user_id, "kind": kind, "fail_open": config.fail_open, "error": str(exc)},
            )
            if config.fail_open:
                return PlacementOutcome(PlacementVerdict.ALLOW, reason="query_unavailable")
            self._messenger.message_player(actor, Lang.BOMB_DEPLOY_CHECK_UNAVAILABLE)
            self._emit_denied(actor, kind, reason="query_unavailable", nearby_count=None)
            return PlacementOutcome(PlacementVerdict.DENY, reason="query_unavailable")

        if decision.allowed:
            return PlacementOutcome(PlacementVerdict.ALLOW, decision, reason=decision.reason_code.value)

        self._messenger.message_player(actor, Lang.BOMB_DEPLOY_RESTRICTED)
        self._emit_denied(actor, kind, reason=decision.reason_code.value, nearby_count=decision.nearby_count)
        return PlacementOutcome(PlacementVerdict.DENY, decision, reason=decision.reason_code.value)

    def _emit_denied(self, actor: Actor, kind: str, *, reason: str, nearby_count: int | None) -> None:
        payload = {"user_id": actor.user_id, "kind": kind, "reason": reason, "nearby_count": nearby_count}
        self._logger.info("placement_denied", extra=payload)
        if self._telemetry is not None:
            self._telemetry.emit("placement_denied", payload)

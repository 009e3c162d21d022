from __future__ import annotations

import logging
from pathlib import Path

from .config import ConfigStore, PlacementConfig
from .gate import PlacementGate
from .geometry import Vector3
from .hook import PlacementHook
from .localization import DEFAULT_MESSAGES, MessageCatalog, Messenger, Notifier
from .models import Actor, PlacementOutcome, PlacementVerdict
from .permissions import PermissionRegistry
from .telemetry import Telemetry
from .world.spatial import SpatialQuery
from .world.visibility import LineOfSight, VisibilityFilter


class PluginNotLoadedError(RuntimeError):
    """Raised when a placement is checked before ``init`` or after ``unload``."""


class SiegeLimitPlugin:
    """Owns the lifecycle of the placement limit: init, reload and unload."""

    def __init__(
        self,
        *,
        spatial_query: SpatialQuery,
        line_of_sight: LineOfSight,
        notifier: Notifier,
        config_path: str | Path,
        default_language: str = "en",
        permissions: PermissionRegistry | None = None,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._logger = logger or logging.getLogger("siege_limit.plugin")
        self.permissions = permissions or PermissionRegistry()
        self.catalog = MessageCatalog(default_language=default_language)
        self.config_store = ConfigStore(config_path)
        self._gate = PlacementGate(spatial_query, VisibilityFilter(line_of_sight))
        self._hook = PlacementHook(
            self._gate,
            self.config_store,
            self.permissions,
            Messenger(self.catalog, notifier),
            telemetry=telemetry,
        )
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def config(self) -> PlacementConfig:
        return self.config_store.current

    def init(self) -> PlacementConfig:
        self.permissions.register_all()
        self.catalog.register_messages(DEFAULT_MESSAGES, "en")
        config = self.config_store.load()
        self._loaded = True
        self._logger.info("plugin_loaded", extra={"config_path": str(self.config_store.path)})
        return config

    def reload_config(self) -> PlacementConfig:
        return self.config_store.reload()

    def unload(self) -> None:
        self._loaded = False
        self._logger.info("plugin_unloaded")

    def on_placement_attempt(self, actor: Actor | None, position: Vector3, kind: str) -> PlacementVerdict:
        self._require_loaded()
        return self._hook.on_placement_attempt(actor, position, kind)

    def assess_placement(self, actor: Actor | None, position: Vector3, kind: str) -> PlacementOutcome:
        self._require_loaded()
        return self._hook.assess(actor, position, kind)

    def _require_loaded(self) -> None:
        if not self._loaded:
            raise PluginNotLoadedError("SiegeLimitPlugin.init() must run before placement checks")

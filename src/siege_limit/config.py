"""Runtime settings and the persisted placement-limit configuration."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_VERSION = "1.1.0"

DEFAULT_SIEGE_BOMB_PREFABS = (
    "assets/prefabs/weapons/deployablesiegeexplosives/flammablesiegedeployable.prefab",
    "assets/prefabs/weapons/deployablesiegeexplosives/explosivesiegedeployable.prefab",
)


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="SIEGE_LIMIT_", env_file=".env", extra="ignore")

    app_name: str = "siege-limit"
    log_level: str = "INFO"
    config_path: str = Field(
        default="config/siege_limit.json",
        description="JSON file holding the placement limit configuration.",
    )
    default_language: str = "en"
    grid_cell_size: float = Field(default=8.0, gt=0, allow_inf_nan=False)
    query_timeout_seconds: float = Field(default=0.5, gt=0)


settings = Settings()


class PlacementConfig(BaseModel):
    """Immutable snapshot of the placement limit rules."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    version: str = Field(default=CONFIG_VERSION, alias="Version")
    max_nearby: int | None = Field(default=None, ge=0, alias="Maximum Nearby Siege Bombs")
    check_radius: float = Field(default=5.0, gt=0, allow_inf_nan=False, alias="Siege Bomb Check Radius")
    restricted_kinds: frozenset[str] = Field(
        default_factory=frozenset,
        alias="Siege Bomb Prefab Names",
    )
    fail_open: bool = Field(default=True, alias="Allow Placement When World Unavailable")

    @field_validator("restricted_kinds", mode="before")
    @classmethod
    def normalize_kinds(cls, value):
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(item).strip() for item in value if str(item).strip())

    @classmethod
    def defaults(cls) -> PlacementConfig:
        """Values written to a fresh config file."""
        return cls(
            max_nearby=5,
            check_radius=5.0,
            restricted_kinds=frozenset(DEFAULT_SIEGE_BOMB_PREFABS),
        )

    @property
    def restriction_active(self) -> bool:
        return bool(self.restricted_kinds) and self.max_nearby is not None

    def to_json(self) -> str:
        payload = self.model_dump(by_alias=True, mode="json")
        payload["Siege Bomb Prefab Names"] = sorted(self.restricted_kinds)
        return json.dumps(payload, indent=2)


def _version_key(version: str | None) -> tuple[int, ...]:
    if not version:
        return (0,)
    parts: list[int] = []
    for piece in version.split("."):
        digits = "".join(ch for ch in piece if ch.isdigit())
        parts.append(int(digits) if digits else 0)
    return tuple(parts)


def migrate_config(raw: dict, *, logger: logging.Logger | None = None) -> tuple[PlacementConfig, bool]:
    """Bring a raw config mapping up to ``CONFIG_VERSION``.

    Returns the resolved config and whether anything changed on the way.
    """
    log = logger or logging.getLogger("siege_limit.config")
    stored_version = raw.get("Version") or raw.get("version")
    if _version_key(stored_version) >= _version_key(CONFIG_VERSION):
        return PlacementConfig.model_validate(raw), False

    log.warning("config_update_started", extra={"from_version": stored_version, "to_version": CONFIG_VERSION})
    if _version_key(stored_version) < _version_key("1.0.0"):
        config = PlacementConfig.defaults()
    else:
        # 1.0.x files predate the fail-open flag; the field default fills it in.
        config = PlacementConfig.model_validate(raw).model_copy(update={"version": CONFIG_VERSION})
    log.warning("config_update_completed", extra={"from_version": stored_version, "to_version": CONFIG_VERSION})
    return config, True


class ConfigStore:
    """Loads, persists and atomically swaps ``PlacementConfig`` snapshots."""

    def __init__(self, file_path: str | Path, *, logger: logging.Logger | None = None) -> None:
        self._path = Path(file_path)
        self._logger = logger or logging.getLogger("siege_limit.config")
        self._lock = threading.Lock()
        self._current = PlacementConfig()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def current(self) -> PlacementConfig:
        return self._current

    def load(self) -> PlacementConfig:
        """Read the file (writing defaults when absent), migrate, save and install."""
        if not self._path.exists():
            self._logger.info("config_defaults_created", extra={"path": str(self._path)})
            config, changed = PlacementConfig.defaults(), True
        else:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(raw, dict):
                raise ValueError(f"Config root must be an object: {self._path}")
            config, changed = migrate_config(raw, logger=self._logger)

        if changed:
            self.save(config)
        self.install(config)
        return config

    def reload(self) -> PlacementConfig:
        """Re-read the file; the previous snapshot stays active if it is invalid."""
        try:
            return self.load()
        except (ValueError, OSError):
            self._logger.exception("config_reload_failed", extra={"path": str(self._path)})
            raise

    def install(self, config: PlacementConfig) -> None:
        with self._lock:
            self._current = config
        self._logger.info(
            "config_installed",
            extra={
                "max_nearby": config.max_nearby,
                "check_radius": config.check_radius,
                "restricted_kind_count": len(config.restricted_kinds),
            },
        )

    def save(self, config: PlacementConfig | None = None) -> None:
        target = config or self._current
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(target.to_json() + "\n", encoding="utf-8")

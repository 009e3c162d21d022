from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest
from pydantic import ValidationError

from siege_limit.config import (
    CONFIG_VERSION,
    DEFAULT_SIEGE_BOMB_PREFABS,
    ConfigStore,
    PlacementConfig,
    Settings,
    migrate_config,
)


def _write(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_missing_file_writes_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config" / "siege_limit.json"
    store = ConfigStore(path)

    config = store.load()

    assert config.max_nearby == 5
    assert config.check_radius == 5.0
    assert config.restricted_kinds == frozenset(DEFAULT_SIEGE_BOMB_PREFABS)
    assert config.fail_open is True
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["Version"] == CONFIG_VERSION
    assert saved["Maximum Nearby Siege Bombs"] == 5
    assert saved["Siege Bomb Prefab Names"] == sorted(DEFAULT_SIEGE_BOMB_PREFABS)


def test_current_file_is_read_with_display_keys(tmp_path: Path) -> None:
    path = tmp_path / "siege_limit.json"
    _write(
        path,
        {
            "Version": CONFIG_VERSION,
            "Maximum Nearby Siege Bombs": 2,
            "Siege Bomb Check Radius": 7.5,
            "Siege Bomb Prefab Names": ["bombA", "  ", "bombB"],
            "Allow Placement When World Unavailable": False,
        },
    )

    config = ConfigStore(path).load()

    assert config.max_nearby == 2
    assert config.check_radius == 7.5
    assert config.restricted_kinds == frozenset({"bombA", "bombB"})
    assert config.fail_open is False


def test_v1_0_config_is_upgraded_and_keeps_values(tmp_path: Path) -> None:
    path = tmp_path / "siege_limit.json"
    _write(
        path,
        {
            "Version": "1.0.0",
            "Maximum Nearby Siege Bombs": 3,
            "Siege Bomb Check Radius": 4.0,
            "Siege Bomb Prefab Names": ["bombA"],
        },
    )

    config = ConfigStore(path).load()

    assert config.version == CONFIG_VERSION
    assert config.max_nearby == 3
    assert config.fail_open is True
    assert json.loads(path.read_text(encoding="utf-8"))["Version"] == CONFIG_VERSION


def test_pre_release_config_is_replaced_by_defaults(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="siege_limit.config"):
        config, changed = migrate_config({"Version": "0.9.2", "Maximum Nearby Siege Bombs": 1})

    assert changed is True
    assert config == PlacementConfig.defaults()
    assert [record.getMessage() for record in caplog.records] == ["config_update_started", "config_update_completed"]


def test_up_to_date_config_is_not_rewritten() -> None:
    config, changed = migrate_config({"Version": CONFIG_VERSION, "Maximum Nearby Siege Bombs": 1})

    assert changed is False
    assert config.max_nearby == 1


def test_explicit_null_max_disables_restriction() -> None:
    config = PlacementConfig.model_validate(
        {"Version": CONFIG_VERSION, "Maximum Nearby Siege Bombs": None, "Siege Bomb Prefab Names": ["bombA"]}
    )

    assert config.restriction_active is False


@pytest.mark.parametrize(
    "payload",
    [
        {"Maximum Nearby Siege Bombs": -1},
        {"Siege Bomb Check Radius": 0},
        {"Siege Bomb Check Radius": -2.5},
        {"Siege Bomb Check Radius": float("inf")},
        {"Siege Bomb Check Radius": float("nan")},
    ],
)
def test_invalid_values_rejected(payload: dict) -> None:
    with pytest.raises(ValidationError):
        PlacementConfig.model_validate({"Version": CONFIG_VERSION, **payload})


def test_config_snapshot_is_immutable() -> None:
    config = PlacementConfig.defaults()

    with pytest.raises(ValidationError):
        config.max_nearby = 9  # type: ignore[misc]


def test_reload_swaps_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "siege_limit.json"
    store = ConfigStore(path)
    first = store.load()
    _write(path, {"Version": CONFIG_VERSION, "Maximum Nearby Siege Bombs": 1, "Siege Bomb Check Radius": 2.0})

    second = store.reload()

    assert first.max_nearby == 5
    assert store.current is second
    assert (second.max_nearby, second.check_radius) == (1, 2.0)


def test_invalid_reload_keeps_previous_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "siege_limit.json"
    store = ConfigStore(path)
    first = store.load()
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        store.reload()

    assert store.current is first


def test_concurrent_readers_never_see_mixed_values(tmp_path: Path) -> None:
    store = ConfigStore(tmp_path / "siege_limit.json")
    pairs = [PlacementConfig(max_nearby=n, check_radius=float(n + 1)) for n in range(50)]
    mixed: list[PlacementConfig] = []
    stop = threading.Event()

    def _reader() -> None:
        while not stop.is_set():
            snapshot = store.current
            if snapshot.max_nearby is not None and snapshot.check_radius != snapshot.max_nearby + 1:
                mixed.append(snapshot)

    reader = threading.Thread(target=_reader)
    reader.start()
    for config in pairs:
        store.install(config)
    stop.set()
    reader.join(timeout=2)

    assert mixed == []


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SIEGE_LIMIT_CONFIG_PATH", "/tmp/custom.json")
    monkeypatch.setenv("SIEGE_LIMIT_GRID_CELL_SIZE", "16")

    current = Settings()

    assert current.config_path == "/tmp/custom.json"
    assert current.grid_cell_size == 16.0


def test_infinite_radius_in_file_fails_at_load(tmp_path: Path) -> None:
    path = tmp_path / "siege_limit.json"
    path.write_text(
        '{"Version": "%s", "Maximum Nearby Siege Bombs": 5, "Siege Bomb Check Radius": Infinity}' % CONFIG_VERSION,
        encoding="utf-8",
    )
    store = ConfigStore(path)

    with pytest.raises(ValidationError):
        store.load()

    assert store.current.check_radius == 5.0

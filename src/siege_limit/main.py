"""CLI entrypoint for siege-limit."""

from __future__ import annotations

from pathlib import Path

import typer
from rich import print

from siege_limit.config import ConfigStore, PlacementConfig, settings
from siege_limit.geometry import Vector3
from siege_limit.localization import ConsoleNotifier
from siege_limit.models import Actor, PlacementVerdict
from siege_limit.plugin import SiegeLimitPlugin
from siege_limit.telemetry import LoggingTelemetry, configure_logging
from siege_limit.world.snapshot import load_scenario

app = typer.Typer(help="Siege bomb placement limit tools")


@app.callback()
def _main(log_level: str = typer.Option(None, help="Override SIEGE_LIMIT_LOG_LEVEL")) -> None:
    configure_logging(log_level or settings.log_level)


def _describe(config: PlacementConfig) -> dict:
    return {
        "version": config.version,
        "max_nearby": config.max_nearby,
        "check_radius": config.check_radius,
        "restricted_kinds": sorted(config.restricted_kinds),
        "fail_open": config.fail_open,
        "restriction_active": config.restriction_active,
    }


@app.command()
def start(config_path: str = typer.Option(None, help="Path to the JSON config file")) -> None:
    """Show runtime settings and the resolved placement config."""
    store = ConfigStore(config_path or settings.config_path)
    config = store.load()
    print(
        {
            "app_name": settings.app_name,
            "config_path": str(store.path),
            "default_language": settings.default_language,
            "config": _describe(config),
        }
    )


@app.command("init-config")
def init_config(
    config_path: str = typer.Option(None, help="Path to the JSON config file"),
    overwrite: bool = typer.Option(False, help="Replace an existing file with defaults"),
) -> None:
    """Write the default config file."""
    store = ConfigStore(config_path or settings.config_path)
    if store.path.exists() and not overwrite:
        print({"error": f"Config already exists: {store.path}", "hint": "Pass --overwrite to replace it."})
        raise typer.Exit(code=1)

    store.save(PlacementConfig.defaults())
    print({"written": str(store.path)})


@app.command()
def check(
    scenario: Path = typer.Option(..., exists=True, dir_okay=False, help="World scenario JSON file"),
    kind: str = typer.Option(..., help="Prefab/kind of the object being placed"),
    x: float = typer.Option(..., help="Placement X"),
    y: float = typer.Option(..., help="Placement Y"),
    z: float = typer.Option(..., help="Placement Z"),
    user_id: str = typer.Option("cli", help="Id of the placing player"),
    config_path: str = typer.Option(None, help="Path to the JSON config file"),
) -> None:
    """Evaluate one placement attempt against a world scenario. Exits 1 on deny."""
    world_scenario = load_scenario(scenario)
    world = world_scenario.build_world(
        cell_size=settings.grid_cell_size,
        query_timeout_seconds=settings.query_timeout_seconds,
    )
    notifier = ConsoleNotifier(echo=print)
    plugin = SiegeLimitPlugin(
        spatial_query=world,
        line_of_sight=world,
        notifier=notifier,
        config_path=config_path or settings.config_path,
        default_language=settings.default_language,
        telemetry=LoggingTelemetry(),
    )
    plugin.init()
    for granted_user, permissions in world_scenario.permissions.items():
        for permission in permissions:
            try:
                plugin.permissions.grant(granted_user, permission)
            except KeyError:
                print({"error": f"Unknown permission in scenario: {permission}", "user_id": granted_user})
                raise typer.Exit(code=1)

    outcome = plugin.assess_placement(Actor(user_id=user_id), Vector3(x, y, z), kind)
    plugin.unload()

    print(
        {
            "verdict": outcome.verdict.value,
            "reason": outcome.reason,
            "nearby_count": outcome.decision.nearby_count if outcome.decision else None,
            "objects_in_world": len(world),
        }
    )
    if outcome.verdict is PlacementVerdict.DENY:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()

"""JSON world scenarios for offline placement checks.

A scenario file looks like::

    {
      "objects": [
        {"id": "bomb-1", "kind": "assets/.../explosivesiegedeployable.prefab",
         "position": [0, 0, 0], "reference_point": [0, 0.5, 0], "half_extent": 0.4}
      ],
      "obstructions": [{"min": [1, -1, -1], "max": [2, 3, 1]}],
      "permissions": {"76561198000000000": ["siegelimit.ignore"]}
    }
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from siege_limit.geometry import Bounds, Vector3
from siege_limit.models import WorldObject
from siege_limit.world.memory import InMemoryWorld, Obstruction

Coordinates = tuple[float, float, float]


class ScenarioObject(BaseModel):
    id: str
    kind: str
    position: Coordinates
    reference_point: Coordinates | None = None
    half_extent: float | None = Field(default=None, gt=0)

    def to_world_object(self) -> WorldObject:
        position = Vector3.parse(self.position)
        reference = Vector3.parse(self.reference_point) if self.reference_point else position
        bounds = Bounds.around(position, self.half_extent) if self.half_extent else None
        return WorldObject(
            object_id=self.id,
            kind=self.kind,
            position=position,
            reference_point=reference,
            bounds=bounds,
        )


class ScenarioObstruction(BaseModel):
    min: Coordinates
    max: Coordinates
    owner: str | None = None

    def to_obstruction(self) -> Obstruction:
        return Obstruction(
            bounds=Bounds(Vector3.parse(self.min), Vector3.parse(self.max)),
            owner_id=self.owner,
        )


class WorldScenario(BaseModel):
    objects: list[ScenarioObject] = Field(default_factory=list)
    obstructions: list[ScenarioObstruction] = Field(default_factory=list)
    permissions: dict[str, list[str]] = Field(default_factory=dict)

    def build_world(self, *, cell_size: float = 8.0, query_timeout_seconds: float = 0.5) -> InMemoryWorld:
        world = InMemoryWorld(cell_size=cell_size, query_timeout_seconds=query_timeout_seconds)
        with world.transition():
            for item in self.objects:
                world.add(item.to_world_object())
            for item in self.obstructions:
                world.add_obstruction(item.to_obstruction())
        return world


def load_scenario(path: str | Path) -> WorldScenario:
    target = Path(path).expanduser()
    if not target.exists():
        raise FileNotFoundError(f"World scenario not found: {target}")
    return WorldScenario.model_validate_json(target.read_text(encoding="utf-8"))

"""
Entity Snapshot Data Model
==========================
Defines the per-tick, read-only view of the movable entities that perforate
(doors, windows) or pin (heaters, air-conditioners) the house's thermal field.

The hosting application owns the live entities; it hands the core one
EntitySnapshot per tick. Every field is validated once, when the snapshot is
built, so the boundary mapping never has to probe for missing attributes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple, Union
import logging
import math

from thermalhouse.config import (
    AC_CONFIG,
    DOOR_CONFIG,
    HEATER_CONFIG,
    WINDOW_CONFIG,
    EntityDimensions,
)

logger = logging.getLogger(__name__)


class Direction(StrEnum):
    NORTH = "north"   # low-Z wall
    SOUTH = "south"   # high-Z wall
    EAST = "east"     # high-X wall
    WEST = "west"     # low-X wall

    @property
    def runs_along_x(self) -> bool:
        """North/south walls vary along X, east/west walls along Z."""
        return self in (Direction.NORTH, Direction.SOUTH)


class EntityKind(StrEnum):
    DOOR = "door"
    WINDOW = "window"
    HEATER = "heater"
    AIR_CONDITIONER = "air_conditioner"


@dataclass(frozen=True)
class Position:
    x: float
    z: float

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Position:
        return Position(x=float(data.get("x", 0.0)), z=float(data.get("z", 0.0)))


def _parse_direction(value: Union[Direction, str, None]) -> Optional[Direction]:
    if value is None or isinstance(value, Direction):
        return value
    try:
        return Direction(str(value).lower())
    except ValueError:
        raise ValueError(f"Unknown wall direction: {value!r}") from None


@dataclass(frozen=True)
class Entity:
    """
    Common fields of every entity variant.

    Width and depth default to the configured footprint of the kind; hosts
    with custom models may pass their own.
    """
    KIND: ClassVar[EntityKind]
    DIMENSIONS: ClassVar[EntityDimensions]
    REQUIRES_DIRECTION: ClassVar[bool] = True

    position: Position
    direction: Optional[Direction] = None
    is_active: bool = False
    id: str = ""
    width: Optional[float] = None
    depth: Optional[float] = None

    def __post_init__(self) -> None:
        # frozen dataclass: fill defaults through object.__setattr__
        object.__setattr__(self, "direction", _parse_direction(self.direction))
        if self.width is None:
            object.__setattr__(self, "width", self.DIMENSIONS.width)
        if self.depth is None:
            object.__setattr__(self, "depth", self.DIMENSIONS.depth)

        if self.REQUIRES_DIRECTION and self.direction is None:
            raise ValueError(f"{self.KIND.value} '{self.id}' requires a wall direction.")
        if not (self.width > 0 and self.depth > 0):
            raise ValueError(f"{self.KIND.value} '{self.id}' must have positive width and depth.")
        if not (math.isfinite(self.position.x) and math.isfinite(self.position.z)):
            raise ValueError(f"{self.KIND.value} '{self.id}' has a non-finite position.")

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    def footprint(self) -> Tuple[float, float]:
        """
        Axis-aligned footprint (extent along X, extent along Z).

        Units mounted on a north/south wall run their width along X; on an
        east/west wall the width runs along Z and the depth along X.
        Direction-less (floor-mounted) units keep width along X.
        """
        if self.direction is None or self.direction.runs_along_x:
            return self.width, self.depth
        return self.depth, self.width

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.KIND.value,
            "position": {"x": self.position.x, "z": self.position.z},
            "direction": self.direction.value if self.direction else None,
            "isActive": self.is_active,
            "width": self.width,
            "depth": self.depth,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Entity:
        # Hosts send camelCase; accept snake_case as well
        is_active = data.get("isActive", data.get("is_active", False))
        return cls(
            position=Position.from_dict(data.get("position", {})),
            direction=data.get("direction"),
            is_active=bool(is_active),
            id=str(data.get("id", "")),
            width=data.get("width"),
            depth=data.get("depth"),
        )


@dataclass(frozen=True)
class Door(Entity):
    KIND: ClassVar[EntityKind] = EntityKind.DOOR
    DIMENSIONS: ClassVar[EntityDimensions] = DOOR_CONFIG


@dataclass(frozen=True)
class Window(Entity):
    KIND: ClassVar[EntityKind] = EntityKind.WINDOW
    DIMENSIONS: ClassVar[EntityDimensions] = WINDOW_CONFIG


@dataclass(frozen=True)
class Heater(Entity):
    KIND: ClassVar[EntityKind] = EntityKind.HEATER
    DIMENSIONS: ClassVar[EntityDimensions] = HEATER_CONFIG
    REQUIRES_DIRECTION: ClassVar[bool] = False

    def footprint(self) -> Tuple[float, float]:
        # Floor-mounted: orientation does not matter
        return self.width, self.depth


@dataclass(frozen=True)
class AirConditioner(Entity):
    KIND: ClassVar[EntityKind] = EntityKind.AIR_CONDITIONER
    DIMENSIONS: ClassVar[EntityDimensions] = AC_CONFIG


@dataclass(frozen=True)
class EntitySnapshot:
    """Entities active in the scene for one tick, grouped by kind."""
    doors: Tuple[Door, ...] = field(default_factory=tuple)
    windows: Tuple[Window, ...] = field(default_factory=tuple)
    heaters: Tuple[Heater, ...] = field(default_factory=tuple)
    air_conditioners: Tuple[AirConditioner, ...] = field(default_factory=tuple)

    @staticmethod
    def of(
        doors: Iterable[Door] = (),
        windows: Iterable[Window] = (),
        heaters: Iterable[Heater] = (),
        air_conditioners: Iterable[AirConditioner] = ()
    ) -> EntitySnapshot:
        snapshot = EntitySnapshot(
            doors=tuple(doors),
            windows=tuple(windows),
            heaters=tuple(heaters),
            air_conditioners=tuple(air_conditioners),
        )
        snapshot._check_kinds()
        return snapshot

    def _check_kinds(self) -> None:
        groups = (
            (self.doors, Door),
            (self.windows, Window),
            (self.heaters, Heater),
            (self.air_conditioners, AirConditioner),
        )
        for entities, expected in groups:
            for entity in entities:
                if not isinstance(entity, expected):
                    raise ValueError(f"Expected {expected.__name__}, got {type(entity).__name__}.")

    @property
    def openings(self) -> Tuple[Entity, ...]:
        return self.doors + self.windows

    @property
    def climate_units(self) -> Tuple[Entity, ...]:
        return self.heaters + self.air_conditioners

    def __len__(self) -> int:
        return len(self.openings) + len(self.climate_units)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "doors": [d.to_dict() for d in self.doors],
            "windows": [w.to_dict() for w in self.windows],
            "heaters": [h.to_dict() for h in self.heaters],
            "acs": [ac.to_dict() for ac in self.air_conditioners],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> EntitySnapshot:
        """
        Build a snapshot from the host's JSON-like payload.

        Keys: "doors", "windows", "heaters" and "acs" (or "air_conditioners").
        """
        snapshot = EntitySnapshot(
            doors=tuple(Door.from_dict(d) for d in data.get("doors", [])),
            windows=tuple(Window.from_dict(w) for w in data.get("windows", [])),
            heaters=tuple(Heater.from_dict(h) for h in data.get("heaters", [])),
            air_conditioners=tuple(
                AirConditioner.from_dict(ac)
                for ac in data.get("acs", data.get("air_conditioners", []))
            ),
        )
        logger.debug(f"Snapshot ingested with {len(snapshot)} entities.")
        return snapshot

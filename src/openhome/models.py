# src/openhome/models.py
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class WallSide(str, Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def is_horizontal(self) -> bool:
        return self in (WallSide.NORTH, WallSide.SOUTH)

    @property
    def opposite(self) -> "WallSide":
        return _OPPOSITE[self]


_OPPOSITE = {
    WallSide.NORTH: WallSide.SOUTH,
    WallSide.SOUTH: WallSide.NORTH,
    WallSide.EAST: WallSide.WEST,
    WallSide.WEST: WallSide.EAST,
}


class OpeningType(str, Enum):
    DOOR = "door"
    WINDOW = "window"


class _Model(BaseModel):
    """Immutable model serialised with the camelCase keys of saved documents."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class WallThickness(_Model):
    """Per-side wall thickness override; ``None`` falls back to the global default."""

    north: Optional[float] = Field(default=None, ge=0)
    south: Optional[float] = Field(default=None, ge=0)
    east: Optional[float] = Field(default=None, ge=0)
    west: Optional[float] = Field(default=None, ge=0)

    def get(self, side: WallSide) -> Optional[float]:
        return getattr(self, side.value)


class Room(_Model):
    id: str = Field(min_length=1)
    name: str = ""
    x_cm: float = Field(description="Left edge of the floor rectangle in cm")
    y_cm: float = Field(description="Top edge of the floor rectangle in cm")
    width_cm: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    wall_thickness: Optional[WallThickness] = None


class WallOpening(_Model):
    id: str = Field(min_length=1)
    room_id: str
    wall: WallSide
    type: OpeningType = OpeningType.DOOR
    position_cm: float = Field(ge=0, description="Offset from the wall start corner")
    width_cm: float = Field(gt=0)


class ObjectDef(_Model):
    id: str = Field(min_length=1)
    name: str = ""
    width_cm: float = Field(gt=0)
    height_cm: float = Field(gt=0)


class PlacedObject(_Model):
    id: str = Field(min_length=1)
    def_id: str
    room_id: str
    x_cm: float
    y_cm: float
    rotation_deg: float = 0

    @field_validator("rotation_deg", mode="before")
    @classmethod
    def default_missing_rotation(cls, v):
        if v is None:
            return 0
        return v


class AppState(_Model):
    rooms: tuple[Room, ...] = ()
    wall_openings: tuple[WallOpening, ...] = ()
    object_defs: tuple[ObjectDef, ...] = ()
    placed_objects: tuple[PlacedObject, ...] = ()
    selected_room_ids: tuple[str, ...] = ()
    selected_object_id: Optional[str] = None
    global_wall_thickness_cm: float = Field(default=10, ge=0)
    pan_x: float = 0
    pan_y: float = 0
    zoom: float = Field(default=1.0, gt=0)

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_selection(cls, data):
        if not isinstance(data, dict):
            return data
        if data.get("selectedRoomIds") is not None or data.get("selected_room_ids") is not None:
            return data
        data = {k: v for k, v in data.items() if k not in ("selectedRoomIds", "selected_room_ids")}
        legacy = data.pop("selectedRoomId", None)
        data["selectedRoomIds"] = [legacy] if legacy else []
        return data

    @field_validator("rooms", "wall_openings", "object_defs", "placed_objects", mode="before")
    @classmethod
    def default_missing_collection(cls, v):
        if v is None:
            return ()
        return v

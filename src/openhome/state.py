# src/openhome/state.py
"""Pure mutators over :class:`AppState`.

Every function takes a state and returns a new one; inputs are never
modified. Unknown ids are not errors: the state comes back unchanged.
"""
from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from typing import Iterable, NamedTuple, Optional, Sequence, Union

from openhome.config import DUPLICATE_OFFSET_CM, MAX_ZOOM, MIN_ROOM_SIZE_CM, MIN_ZOOM
from openhome.geometry import outer_bounds, wall_length_cm
from openhome.models import (
    AppState,
    ObjectDef,
    OpeningType,
    PlacedObject,
    Room,
    WallOpening,
    WallSide,
    WallThickness,
)

logger = logging.getLogger(__name__)

NEW_ROOM_GAP_CM = 50.0
MIN_OPENING_WIDTH_CM = 10.0


def new_id(prefix: str) -> str:
    """Globally unique, never reused entity id."""
    return f"{prefix}_{uuid.uuid4().hex}"


def create_initial_state(global_wall_thickness_cm: float = 10) -> AppState:
    return AppState(global_wall_thickness_cm=global_wall_thickness_cm)


# ------------------------------------------------------------------ #
# Lookups
# ------------------------------------------------------------------ #

def get_room_by_id(state: AppState, room_id: str) -> Optional[Room]:
    return next((r for r in state.rooms if r.id == room_id), None)


def get_placed_object_by_id(state: AppState, placed_id: str) -> Optional[PlacedObject]:
    return next((p for p in state.placed_objects if p.id == placed_id), None)


def get_object_def_by_id(state: AppState, def_id: str) -> Optional[ObjectDef]:
    return next((d for d in state.object_defs if d.id == def_id), None)


def get_opening_by_id(state: AppState, opening_id: str) -> Optional[WallOpening]:
    return next((o for o in state.wall_openings if o.id == opening_id), None)


@dataclass(frozen=True)
class EntityIndex:
    """Id-keyed view of a state, with openings and objects grouped by room."""

    rooms: dict[str, Room] = field(default_factory=dict)
    openings: dict[str, WallOpening] = field(default_factory=dict)
    object_defs: dict[str, ObjectDef] = field(default_factory=dict)
    placed_objects: dict[str, PlacedObject] = field(default_factory=dict)
    openings_by_room: dict[str, list[WallOpening]] = field(default_factory=dict)
    objects_by_room: dict[str, list[PlacedObject]] = field(default_factory=dict)

    @classmethod
    def from_state(cls, state: AppState) -> "EntityIndex":
        openings_by_room: dict[str, list[WallOpening]] = {}
        for opening in state.wall_openings:
            openings_by_room.setdefault(opening.room_id, []).append(opening)
        objects_by_room: dict[str, list[PlacedObject]] = {}
        for placed in state.placed_objects:
            objects_by_room.setdefault(placed.room_id, []).append(placed)
        return cls(
            rooms={r.id: r for r in state.rooms},
            openings={o.id: o for o in state.wall_openings},
            object_defs={d.id: d for d in state.object_defs},
            placed_objects={p.id: p for p in state.placed_objects},
            openings_by_room=openings_by_room,
            objects_by_room=objects_by_room,
        )

    def room_of(self, placed: PlacedObject) -> Optional[Room]:
        return self.rooms.get(placed.room_id)

    def def_of(self, placed: PlacedObject) -> Optional[ObjectDef]:
        return self.object_defs.get(placed.def_id)

    def dangling_references(self) -> list[str]:
        """Describe every reference that points at a missing entity."""
        problems = []
        for opening in self.openings.values():
            if opening.room_id not in self.rooms:
                problems.append(f"opening {opening.id} references missing room {opening.room_id}")
        for placed in self.placed_objects.values():
            if placed.room_id not in self.rooms:
                problems.append(f"object {placed.id} references missing room {placed.room_id}")
            if placed.def_id not in self.object_defs:
                problems.append(f"object {placed.id} references missing definition {placed.def_id}")
        return problems


def _replace_room(state: AppState, room_id: str, **changes) -> AppState:
    if get_room_by_id(state, room_id) is None:
        logger.debug("room %s not found", room_id)
        return state
    rooms = tuple(
        r.model_copy(update=changes) if r.id == room_id else r for r in state.rooms
    )
    return state.model_copy(update={"rooms": rooms})


def _replace_placed(state: AppState, placed_id: str, **changes) -> AppState:
    if get_placed_object_by_id(state, placed_id) is None:
        logger.debug("placed object %s not found", placed_id)
        return state
    placed = tuple(
        p.model_copy(update=changes) if p.id == placed_id else p
        for p in state.placed_objects
    )
    return state.model_copy(update={"placed_objects": placed})


# ------------------------------------------------------------------ #
# Rooms
# ------------------------------------------------------------------ #

def add_room(
    state: AppState,
    name: str,
    width_cm: float,
    height_cm: float,
    x_cm: Optional[float] = None,
    y_cm: Optional[float] = None,
) -> AppState:
    """Append a room. Without a position it goes to the right of the layout."""
    gwt = state.global_wall_thickness_cm
    if x_cm is None or y_cm is None:
        if state.rooms:
            rightmost = max(outer_bounds(r, gwt).right for r in state.rooms)
            default_x = rightmost + NEW_ROOM_GAP_CM + gwt
            default_y = state.rooms[0].y_cm
        else:
            default_x = default_y = gwt
        x_cm = default_x if x_cm is None else x_cm
        y_cm = default_y if y_cm is None else y_cm

    room = Room(
        id=new_id("room"),
        name=name,
        x_cm=max(0.0, x_cm),
        y_cm=max(0.0, y_cm),
        width_cm=max(MIN_ROOM_SIZE_CM, width_cm),
        height_cm=max(MIN_ROOM_SIZE_CM, height_cm),
    )
    return state.model_copy(update={"rooms": state.rooms + (room,)})


def delete_rooms(state: AppState, room_ids: Iterable[str]) -> AppState:
    """Remove rooms together with every opening and object that references them."""
    doomed = set(room_ids) & {r.id for r in state.rooms}
    if not doomed:
        return state
    placed = tuple(p for p in state.placed_objects if p.room_id not in doomed)
    surviving_placed = {p.id for p in placed}
    selected_object = state.selected_object_id
    if selected_object is not None and selected_object not in surviving_placed:
        selected_object = None
    return state.model_copy(
        update={
            "rooms": tuple(r for r in state.rooms if r.id not in doomed),
            "wall_openings": tuple(
                o for o in state.wall_openings if o.room_id not in doomed
            ),
            "placed_objects": placed,
            "selected_room_ids": tuple(
                rid for rid in state.selected_room_ids if rid not in doomed
            ),
            "selected_object_id": selected_object,
        }
    )


def delete_room(state: AppState, room_id: str) -> AppState:
    return delete_rooms(state, [room_id])


def update_room_name(state: AppState, room_id: str, name: str) -> AppState:
    return _replace_room(state, room_id, name=name)


def update_room_dimensions(
    state: AppState, room_id: str, width_cm: float, height_cm: float
) -> AppState:
    return _replace_room(
        state,
        room_id,
        width_cm=max(MIN_ROOM_SIZE_CM, width_cm),
        height_cm=max(MIN_ROOM_SIZE_CM, height_cm),
    )


def update_room_wall_thickness(
    state: AppState,
    room_id: str,
    wall_thickness: Union[WallThickness, dict, None],
) -> AppState:
    """Set or clear a room's per-side thickness override."""
    if isinstance(wall_thickness, dict):
        wall_thickness = WallThickness.model_validate(wall_thickness)
    return _replace_room(state, room_id, wall_thickness=wall_thickness)


def update_global_wall_thickness(state: AppState, thickness_cm: float) -> AppState:
    return state.model_copy(update={"global_wall_thickness_cm": max(0.0, thickness_cm)})


class RoomMove(NamedTuple):
    id: str
    x_cm: float
    y_cm: float


def move_rooms(state: AppState, moves: Iterable[RoomMove]) -> AppState:
    """Move several rooms at once; positions are clamped to the canvas."""
    targets = {m[0]: (max(0.0, m[1]), max(0.0, m[2])) for m in moves}
    if not targets:
        return state
    rooms = tuple(
        r.model_copy(update={"x_cm": targets[r.id][0], "y_cm": targets[r.id][1]})
        if r.id in targets
        else r
        for r in state.rooms
    )
    return state.model_copy(update={"rooms": rooms})


def resize_room(
    state: AppState,
    room_id: str,
    x_cm: float,
    y_cm: float,
    width_cm: float,
    height_cm: float,
) -> AppState:
    return _replace_room(
        state,
        room_id,
        x_cm=max(0.0, x_cm),
        y_cm=max(0.0, y_cm),
        width_cm=max(MIN_ROOM_SIZE_CM, width_cm),
        height_cm=max(MIN_ROOM_SIZE_CM, height_cm),
    )


def nudge_selected_rooms(state: AppState, dx_cm: float, dy_cm: float) -> AppState:
    selected = set(state.selected_room_ids)
    if not selected:
        return state
    return move_rooms(
        state,
        [RoomMove(r.id, r.x_cm + dx_cm, r.y_cm + dy_cm) for r in state.rooms if r.id in selected],
    )


# ------------------------------------------------------------------ #
# Selection
# ------------------------------------------------------------------ #

def select_room(state: AppState, room_id: str) -> AppState:
    if get_room_by_id(state, room_id) is None:
        return state
    return state.model_copy(
        update={"selected_room_ids": (room_id,), "selected_object_id": None}
    )


def toggle_room_selection(state: AppState, room_id: str) -> AppState:
    if get_room_by_id(state, room_id) is None:
        return state
    if room_id in state.selected_room_ids:
        ids = tuple(rid for rid in state.selected_room_ids if rid != room_id)
    else:
        ids = state.selected_room_ids + (room_id,)
    return state.model_copy(update={"selected_room_ids": ids, "selected_object_id": None})


def select_all_rooms(state: AppState) -> AppState:
    return state.model_copy(
        update={
            "selected_room_ids": tuple(r.id for r in state.rooms),
            "selected_object_id": None,
        }
    )


def clear_selection(state: AppState) -> AppState:
    return state.model_copy(update={"selected_room_ids": (), "selected_object_id": None})


def select_object(state: AppState, placed_id: Optional[str]) -> AppState:
    if placed_id is not None and get_placed_object_by_id(state, placed_id) is None:
        return state
    return state.model_copy(
        update={"selected_object_id": placed_id, "selected_room_ids": ()}
    )


# ------------------------------------------------------------------ #
# Wall openings
# ------------------------------------------------------------------ #

def validate_wall_opening(
    room: Room,
    wall: WallSide,
    position_cm: float,
    width_cm: float,
    existing: Sequence[WallOpening] = (),
    ignore_id: Optional[str] = None,
) -> list[str]:
    """Check an opening before it is added or edited.

    The mutators accept whatever they are given; callers run this first and
    show the returned messages. An empty list means the opening is valid.
    """
    errors: list[str] = []
    if math.isnan(position_cm) or math.isnan(width_cm):
        return ["position and width must be numbers"]
    if position_cm < 0:
        errors.append("position must not be negative")
    if width_cm < MIN_OPENING_WIDTH_CM:
        errors.append(f"width must be at least {MIN_OPENING_WIDTH_CM:g}cm")
    length = wall_length_cm(room, wall)
    if position_cm + width_cm > length:
        errors.append(f"opening extends beyond wall. Wall length is {length:g}cm")
    for other in existing:
        if other.id == ignore_id or other.room_id != room.id or other.wall != wall:
            continue
        if position_cm < other.position_cm + other.width_cm and other.position_cm < position_cm + width_cm:
            errors.append(f"opening overlaps {other.type.value} {other.id}")
    return errors


def add_wall_opening(
    state: AppState,
    room_id: str,
    wall: WallSide,
    opening_type: OpeningType,
    position_cm: float,
    width_cm: float,
) -> AppState:
    if get_room_by_id(state, room_id) is None:
        logger.debug("cannot add opening: room %s not found", room_id)
        return state
    opening = WallOpening(
        id=new_id("opening"),
        room_id=room_id,
        wall=wall,
        type=opening_type,
        position_cm=max(0.0, position_cm),
        width_cm=width_cm,
    )
    return state.model_copy(update={"wall_openings": state.wall_openings + (opening,)})


def update_wall_opening(
    state: AppState,
    opening_id: str,
    position_cm: Optional[float] = None,
    width_cm: Optional[float] = None,
    opening_type: Optional[OpeningType] = None,
) -> AppState:
    if get_opening_by_id(state, opening_id) is None:
        logger.debug("opening %s not found", opening_id)
        return state
    changes: dict = {}
    if position_cm is not None:
        changes["position_cm"] = max(0.0, position_cm)
    if width_cm is not None:
        changes["width_cm"] = width_cm
    if opening_type is not None:
        changes["type"] = opening_type
    openings = tuple(
        o.model_copy(update=changes) if o.id == opening_id else o
        for o in state.wall_openings
    )
    return state.model_copy(update={"wall_openings": openings})


def delete_wall_opening(state: AppState, opening_id: str) -> AppState:
    if get_opening_by_id(state, opening_id) is None:
        return state
    return state.model_copy(
        update={"wall_openings": tuple(o for o in state.wall_openings if o.id != opening_id)}
    )


# ------------------------------------------------------------------ #
# Objects
# ------------------------------------------------------------------ #

def add_object_def(state: AppState, name: str, width_cm: float, height_cm: float) -> AppState:
    obj_def = ObjectDef(id=new_id("def"), name=name, width_cm=width_cm, height_cm=height_cm)
    return state.model_copy(update={"object_defs": state.object_defs + (obj_def,)})


def delete_object_def(state: AppState, def_id: str) -> AppState:
    """Remove a definition and every placed instance of it."""
    if get_object_def_by_id(state, def_id) is None:
        return state
    placed = tuple(p for p in state.placed_objects if p.def_id != def_id)
    selected = state.selected_object_id
    if selected is not None and all(p.id != selected for p in placed):
        selected = None
    return state.model_copy(
        update={
            "object_defs": tuple(d for d in state.object_defs if d.id != def_id),
            "placed_objects": placed,
            "selected_object_id": selected,
        }
    )


def place_object(
    state: AppState,
    def_id: str,
    room_id: str,
    x_cm: float,
    y_cm: float,
    rotation_deg: float = 0,
) -> AppState:
    if get_object_def_by_id(state, def_id) is None or get_room_by_id(state, room_id) is None:
        logger.debug("cannot place %s in %s: missing definition or room", def_id, room_id)
        return state
    placed = PlacedObject(
        id=new_id("placed"),
        def_id=def_id,
        room_id=room_id,
        x_cm=max(0.0, x_cm),
        y_cm=max(0.0, y_cm),
        rotation_deg=rotation_deg,
    )
    return state.model_copy(update={"placed_objects": state.placed_objects + (placed,)})


def place_object_in_room_center(
    state: AppState, def_id: str, room_id: Optional[str] = None
) -> AppState:
    """Place a definition centred in a room (the first selected room by default)."""
    if room_id is None:
        if not state.selected_room_ids:
            return state
        room_id = state.selected_room_ids[0]
    room = get_room_by_id(state, room_id)
    obj_def = get_object_def_by_id(state, def_id)
    if room is None or obj_def is None:
        return state
    x_cm = room.x_cm + (room.width_cm - obj_def.width_cm) / 2
    y_cm = room.y_cm + (room.height_cm - obj_def.height_cm) / 2
    return place_object(state, def_id, room.id, x_cm, y_cm)


def update_placed_object_position(
    state: AppState, placed_id: str, x_cm: float, y_cm: float
) -> AppState:
    return _replace_placed(state, placed_id, x_cm=max(0.0, x_cm), y_cm=max(0.0, y_cm))


def update_placed_object_rotation(state: AppState, placed_id: str, rotation_deg: float) -> AppState:
    return _replace_placed(state, placed_id, rotation_deg=rotation_deg % 360)


def rotate_placed_object(state: AppState, placed_id: str, step_deg: float = 90) -> AppState:
    placed = get_placed_object_by_id(state, placed_id)
    if placed is None:
        return state
    return update_placed_object_rotation(state, placed_id, placed.rotation_deg + step_deg)


def duplicate_placed_object(
    state: AppState, placed_id: str, offset_cm: float = DUPLICATE_OFFSET_CM
) -> AppState:
    original = get_placed_object_by_id(state, placed_id)
    if original is None:
        logger.debug("placed object %s not found", placed_id)
        return state
    copy = original.model_copy(
        update={
            "id": new_id("placed"),
            "x_cm": original.x_cm + offset_cm,
            "y_cm": original.y_cm + offset_cm,
        }
    )
    return state.model_copy(update={"placed_objects": state.placed_objects + (copy,)})


def delete_placed_object(state: AppState, placed_id: str) -> AppState:
    if get_placed_object_by_id(state, placed_id) is None:
        return state
    selected = None if state.selected_object_id == placed_id else state.selected_object_id
    return state.model_copy(
        update={
            "placed_objects": tuple(p for p in state.placed_objects if p.id != placed_id),
            "selected_object_id": selected,
        }
    )


def delete_selected_object(state: AppState) -> AppState:
    if state.selected_object_id is None:
        return state
    return delete_placed_object(state, state.selected_object_id)


# ------------------------------------------------------------------ #
# Viewport
# ------------------------------------------------------------------ #

def update_viewport(
    state: AppState,
    pan_x: float,
    pan_y: float,
    zoom: float,
    min_zoom: float = MIN_ZOOM,
    max_zoom: float = MAX_ZOOM,
) -> AppState:
    return state.model_copy(
        update={"pan_x": pan_x, "pan_y": pan_y, "zoom": max(min_zoom, min(max_zoom, zoom))}
    )

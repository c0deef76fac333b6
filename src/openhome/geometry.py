# src/openhome/geometry.py
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional

from shapely.geometry import Point, Polygon, box as shapely_box

from openhome.config import SCALE_PX_PER_CM
from openhome.models import AppState, Room, WallSide


class Bounds(NamedTuple):
    left: float
    right: float
    top: float
    bottom: float

    def to_polygon(self) -> Polygon:
        return shapely_box(self.left, self.top, self.right, self.bottom)


class WallSides(NamedTuple):
    north: float
    south: float
    east: float
    west: float

    def get(self, side: WallSide) -> float:
        return getattr(self, side.value)


class OuterBounds(NamedTuple):
    left: float
    right: float
    top: float
    bottom: float
    walls: WallSides


class Rect(NamedTuple):
    x: float
    y: float
    w: float
    h: float

    def to_polygon(self) -> Polygon:
        return shapely_box(self.x, self.y, self.x + self.w, self.y + self.h)


# ------------------------------------------------------------------ #
# Room bounds
# ------------------------------------------------------------------ #

def resolve_wall_thickness(room: Room, global_thickness_cm: float) -> WallSides:
    """Resolve each side's thickness, falling back to the global default."""
    override = room.wall_thickness

    def _side(side: WallSide) -> float:
        value = override.get(side) if override is not None else None
        return global_thickness_cm if value is None else value

    return WallSides(
        north=_side(WallSide.NORTH),
        south=_side(WallSide.SOUTH),
        east=_side(WallSide.EAST),
        west=_side(WallSide.WEST),
    )


def inner_bounds(
    room: Room, x_cm: Optional[float] = None, y_cm: Optional[float] = None
) -> Bounds:
    """Floor rectangle of a room, optionally at a hypothetical position."""
    x = room.x_cm if x_cm is None else x_cm
    y = room.y_cm if y_cm is None else y_cm
    return Bounds(left=x, right=x + room.width_cm, top=y, bottom=y + room.height_cm)


def outer_bounds(
    room: Room,
    global_thickness_cm: float,
    x_cm: Optional[float] = None,
    y_cm: Optional[float] = None,
) -> OuterBounds:
    """Inner bounds expanded outward by each side's resolved wall thickness."""
    inner = inner_bounds(room, x_cm, y_cm)
    w = resolve_wall_thickness(room, global_thickness_cm)
    return OuterBounds(
        left=inner.left - w.west,
        right=inner.right + w.east,
        top=inner.top - w.north,
        bottom=inner.bottom + w.south,
        walls=w,
    )


def wall_length_cm(room: Room, side: WallSide) -> float:
    """Usable length of a wall, as used to validate opening placement."""
    return room.width_cm if side.is_horizontal else room.height_cm


# ------------------------------------------------------------------ #
# Rotation-aware object bounds
# ------------------------------------------------------------------ #

def is_quarter_turned(rotation_deg: float) -> bool:
    return rotation_deg % 180 != 0


def visual_bounds(
    x_cm: float, y_cm: float, width_cm: float, height_cm: float, rotation_deg: float
) -> Rect:
    """Bounding box of an object rotated about its centre.

    For odd multiples of 90 degrees the width and height swap while the
    centre stays put.
    """
    if not is_quarter_turned(rotation_deg):
        return Rect(x_cm, y_cm, width_cm, height_cm)
    cx = x_cm + width_cm / 2
    cy = y_cm + height_cm / 2
    return Rect(cx - height_cm / 2, cy - width_cm / 2, height_cm, width_cm)


def storage_from_visual(
    visual_x_cm: float,
    visual_y_cm: float,
    width_cm: float,
    height_cm: float,
    rotation_deg: float,
) -> tuple[float, float]:
    """Inverse of :func:`visual_bounds`: recover the stored top-left corner."""
    if not is_quarter_turned(rotation_deg):
        return visual_x_cm, visual_y_cm
    cx = visual_x_cm + height_cm / 2
    cy = visual_y_cm + width_cm / 2
    return cx - width_cm / 2, cy - height_cm / 2


# ------------------------------------------------------------------ #
# Coordinate conversion
# ------------------------------------------------------------------ #

def svg_pixels_to_cm(
    x_px: float, y_px: float, scale: float = SCALE_PX_PER_CM
) -> tuple[float, float]:
    return x_px / scale, y_px / scale


def cm_to_svg_pixels(
    x_cm: float, y_cm: float, scale: float = SCALE_PX_PER_CM
) -> tuple[float, float]:
    return x_cm * scale, y_cm * scale


def screen_to_content(
    x: float, y: float, pan_x: float, pan_y: float, zoom: float
) -> tuple[float, float]:
    """Undo the view transform ``translate(pan) scale(zoom)``."""
    return (x - pan_x) / zoom, (y - pan_y) / zoom


def content_to_screen(
    x: float, y: float, pan_x: float, pan_y: float, zoom: float
) -> tuple[float, float]:
    return pan_x + x * zoom, pan_y + y * zoom


def distance_cm(x1: float, y1: float, x2: float, y2: float) -> float:
    return math.hypot(x2 - x1, y2 - y1)


# ------------------------------------------------------------------ #
# Hit testing
# ------------------------------------------------------------------ #

class HitKind(str, Enum):
    RESIZE_HANDLE = "resize_handle"
    PLACED_OBJECT = "placed_object"
    ROOM = "room"
    CANVAS = "canvas"


@dataclass(frozen=True)
class HitTarget:
    kind: HitKind
    room_id: Optional[str] = None
    object_id: Optional[str] = None
    handle: Optional[str] = None


def handle_centers(room: Room) -> dict[str, tuple[float, float]]:
    """Centre point of each resize handle, keyed by handle name."""
    b = inner_bounds(room)
    mid_x = b.left + room.width_cm / 2
    mid_y = b.top + room.height_cm / 2
    return {
        "nw": (b.left, b.top),
        "ne": (b.right, b.top),
        "sw": (b.left, b.bottom),
        "se": (b.right, b.bottom),
        "n": (mid_x, b.top),
        "s": (mid_x, b.bottom),
        "w": (b.left, mid_y),
        "e": (b.right, mid_y),
    }


def placed_object_polygon(state: AppState, object_id: str) -> Optional[Polygon]:
    placed = next((p for p in state.placed_objects if p.id == object_id), None)
    if placed is None:
        return None
    obj_def = next((d for d in state.object_defs if d.id == placed.def_id), None)
    if obj_def is None:
        return None
    return visual_bounds(
        placed.x_cm, placed.y_cm, obj_def.width_cm, obj_def.height_cm, placed.rotation_deg
    ).to_polygon()


def hit_test(state: AppState, x_cm: float, y_cm: float, handle_size_cm: float) -> HitTarget:
    """Classify what lies under a point.

    Priority: resize handle of a selected room, placed object, room body,
    empty canvas. Within a class, entities drawn later (higher in the list)
    are tested first.
    """
    point = Point(x_cm, y_cm)
    half = handle_size_cm / 2

    selected = set(state.selected_room_ids)
    for room in reversed(state.rooms):
        if room.id not in selected:
            continue
        for handle, (cx, cy) in handle_centers(room).items():
            if shapely_box(cx - half, cy - half, cx + half, cy + half).covers(point):
                return HitTarget(HitKind.RESIZE_HANDLE, room_id=room.id, handle=handle)

    room_order = {room.id: i for i, room in enumerate(state.rooms)}
    # Objects are drawn with their room, so a later room's objects sit on top.
    ordered = sorted(
        enumerate(state.placed_objects),
        key=lambda item: (room_order.get(item[1].room_id, -1), item[0]),
    )
    for _, placed in reversed(ordered):
        poly = placed_object_polygon(state, placed.id)
        if poly is not None and poly.covers(point):
            return HitTarget(HitKind.PLACED_OBJECT, room_id=placed.room_id, object_id=placed.id)

    for room in reversed(state.rooms):
        if inner_bounds(room).to_polygon().covers(point):
            return HitTarget(HitKind.ROOM, room_id=room.id)

    return HitTarget(HitKind.CANVAS)

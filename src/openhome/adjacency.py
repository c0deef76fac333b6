# src/openhome/adjacency.py
"""Shared walls between touching rooms.

Two rooms that sit against each other would both draw a wall on their common
boundary. The helpers here pick a single owner for that wall and merge the
doors and windows attached from either side so they are drawn exactly once.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

from openhome.config import ADJACENCY_EPSILON_CM
from openhome.geometry import inner_bounds, outer_bounds
from openhome.models import AppState, Room, WallOpening, WallSide


@dataclass(frozen=True)
class Adjacency:
    other_room: Room
    other_wall: WallSide


def _facing_edges(room: Room, side: WallSide, gwt: float) -> tuple[float, float]:
    """(outer, inner) coordinate of a room's wall on ``side``."""
    inner = inner_bounds(room)
    outer = outer_bounds(room, gwt)
    if side == WallSide.EAST:
        return outer.right, inner.right
    if side == WallSide.WEST:
        return outer.left, inner.left
    if side == WallSide.NORTH:
        return outer.top, inner.top
    return outer.bottom, inner.bottom


def _span(room: Room, side: WallSide) -> tuple[float, float]:
    """Floor extent of a room along a wall running on ``side``."""
    inner = inner_bounds(room)
    if side.is_horizontal:
        return inner.left, inner.right
    return inner.top, inner.bottom


def find_adjacent_room(
    state: AppState,
    room: Room,
    side: WallSide,
    epsilon_cm: float = ADJACENCY_EPSILON_CM,
) -> Optional[Adjacency]:
    """Find the room whose wall abuts ``room`` on ``side``.

    The walls count as shared when they touch (outer edge on outer edge) or
    overlap the way wall-overlap snapping leaves them (an outer edge on the
    other room's inner edge). The floor spans along the wall must overlap
    too, so rooms meeting only at a corner are not adjacent.
    """
    gwt = state.global_wall_thickness_cm
    facing = side.opposite
    my_outer, my_inner = _facing_edges(room, side, gwt)
    my_start, my_end = _span(room, side)

    for other in state.rooms:
        if other.id == room.id:
            continue
        their_outer, their_inner = _facing_edges(other, facing, gwt)
        touching = (
            abs(my_outer - their_outer) <= epsilon_cm
            or abs(my_outer - their_inner) <= epsilon_cm
            or abs(my_inner - their_outer) <= epsilon_cm
        )
        if not touching:
            continue
        their_start, their_end = _span(other, facing)
        if min(my_end, their_end) - max(my_start, their_start) > epsilon_cm:
            return Adjacency(other_room=other, other_wall=facing)
    return None


def should_render_shared_wall(room_a: Room, room_b: Room) -> bool:
    """Deterministic tie-break: the room with the smaller id draws the wall."""
    return room_a.id < room_b.id


def get_openings_for_room(state: AppState, room_id: str) -> list[WallOpening]:
    return [o for o in state.wall_openings if o.room_id == room_id]


def get_openings_for_wall(state: AppState, room_id: str, wall: WallSide) -> list[WallOpening]:
    return [o for o in state.wall_openings if o.room_id == room_id and o.wall == wall]


def owns_shared_wall(
    state: AppState, room: Room, side: WallSide, adjacency: Adjacency
) -> bool:
    """Whether ``room`` draws the wall it shares with ``adjacency.other_room``.

    A room that carries openings on the shared wall takes it over; if both or
    neither do, the id tie-break decides.
    """
    mine = bool(get_openings_for_wall(state, room.id, side))
    theirs = bool(get_openings_for_wall(state, adjacency.other_room.id, adjacency.other_wall))
    if mine != theirs:
        return mine
    return should_render_shared_wall(room, adjacency.other_room)


def get_combined_wall_openings(
    state: AppState, room: Room, side: WallSide, adjacency: Adjacency
) -> list[WallOpening]:
    """Openings from both sides of a shared wall, ordered along ``room``'s wall.

    The neighbour's openings are re-expressed relative to ``room``'s wall
    start so that both sets share one coordinate.
    """
    other = adjacency.other_room
    if side.is_horizontal:
        shift = other.x_cm - room.x_cm
    else:
        shift = other.y_cm - room.y_cm
    combined = get_openings_for_wall(state, room.id, side)
    combined += [
        o.model_copy(update={"position_cm": o.position_cm + shift})
        for o in get_openings_for_wall(state, other.id, adjacency.other_wall)
    ]
    return sorted(combined, key=lambda o: o.position_cm)


# ------------------------------------------------------------------ #
# Wall render plan
# ------------------------------------------------------------------ #

@dataclass(frozen=True)
class WallRenderSpec:
    """Rectangle of one wall in cm, with the openings to cut into it."""

    room_id: str
    side: WallSide
    base_x_cm: float
    base_y_cm: float
    width_cm: float
    height_cm: float
    is_horizontal: bool
    opening_offset_cm: float
    openings: tuple[WallOpening, ...]
    should_render: bool
    adjacency: Optional[Adjacency] = None

    @property
    def length_cm(self) -> float:
        return self.width_cm if self.is_horizontal else self.height_cm


class WallSegment(NamedTuple):
    start_cm: float
    end_cm: float
    opening: Optional[WallOpening]


def _wall_spec(
    state: AppState, room: Room, side: WallSide, epsilon_cm: float
) -> WallRenderSpec:
    outer = outer_bounds(room, state.global_wall_thickness_cm)
    t = outer.walls
    outer_w = outer.right - outer.left
    outer_h = outer.bottom - outer.top
    if side == WallSide.NORTH:
        rect = (outer.left, outer.top, outer_w, t.north, t.west)
    elif side == WallSide.SOUTH:
        rect = (outer.left, room.y_cm + room.height_cm, outer_w, t.south, t.west)
    elif side == WallSide.WEST:
        rect = (outer.left, outer.top, t.west, outer_h, t.north)
    else:
        rect = (room.x_cm + room.width_cm, outer.top, t.east, outer_h, t.north)
    base_x, base_y, width, height, offset = rect

    adjacency = find_adjacent_room(state, room, side, epsilon_cm)
    if adjacency is None:
        openings = get_openings_for_wall(state, room.id, side)
        should_render = True
    else:
        openings = get_combined_wall_openings(state, room, side, adjacency)
        should_render = owns_shared_wall(state, room, side, adjacency)

    return WallRenderSpec(
        room_id=room.id,
        side=side,
        base_x_cm=base_x,
        base_y_cm=base_y,
        width_cm=width,
        height_cm=height,
        is_horizontal=side.is_horizontal,
        opening_offset_cm=offset,
        openings=tuple(sorted(openings, key=lambda o: o.position_cm)),
        should_render=should_render,
        adjacency=adjacency,
    )


def build_wall_plan(
    state: AppState, epsilon_cm: float = ADJACENCY_EPSILON_CM
) -> list[WallRenderSpec]:
    """Walls to draw, plain walls first so walls with openings end up on top."""
    plain: list[WallRenderSpec] = []
    with_openings: list[WallRenderSpec] = []
    for room in state.rooms:
        for side in (WallSide.NORTH, WallSide.SOUTH, WallSide.WEST, WallSide.EAST):
            spec = _wall_spec(state, room, side, epsilon_cm)
            if not spec.should_render:
                continue
            (with_openings if spec.openings else plain).append(spec)
    return plain + with_openings


def wall_segments(spec: WallRenderSpec) -> list[WallSegment]:
    """Split a wall into solid stretches and opening gaps along its length."""
    segments: list[WallSegment] = []
    current = 0.0
    for opening in spec.openings:
        start = opening.position_cm + spec.opening_offset_cm
        if start > current:
            segments.append(WallSegment(current, start, None))
        segments.append(WallSegment(start, start + opening.width_cm, opening))
        current = start + opening.width_cm
    if current < spec.length_cm:
        segments.append(WallSegment(current, spec.length_cm, None))
    return segments

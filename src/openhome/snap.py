# src/openhome/snap.py
"""Snapping for dragged rooms and placed objects.

Room snapping uses a wall-overlap convention: when two rooms are pushed
together their walls occupy the same strip rather than standing side by
side. The moving room's *outer* edge lands on the neighbour's *inner* edge.

Room snapping takes the first matching candidate per axis. Object snapping
keeps the closest candidate per axis. The two rules are intentionally kept
separate since they produce different drag behaviour.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Sequence

from openhome.config import (
    OBJECT_SNAP_TOLERANCE_CM,
    OBJECT_TO_OBJECT_SNAP_TOLERANCE_CM,
    SNAP_TOLERANCE_CM,
    WALL_SNAP_TOLERANCE_CM,
)
from openhome.geometry import inner_bounds, outer_bounds
from openhome.models import Room


@dataclass(frozen=True)
class SnapResult:
    x_cm: float
    y_cm: float
    snapped_x: bool
    snapped_y: bool
    x_guide_cm: Optional[float] = None
    y_guide_cm: Optional[float] = None


class ObjectBox(NamedTuple):
    """Visual (rotation-adjusted) box of an object used as a snap target."""

    id: str
    x_cm: float
    y_cm: float
    width_cm: float
    height_cm: float


def calculate_snap(
    moving_room: Room,
    all_rooms: Iterable[Room],
    target_x_cm: float,
    target_y_cm: float,
    global_wall_thickness_cm: float,
    snap_tolerance_cm: float = SNAP_TOLERANCE_CM,
    wall_snap_tolerance_cm: float = WALL_SNAP_TOLERANCE_CM,
) -> SnapResult:
    """Snap a room being dragged to ``(target_x_cm, target_y_cm)``.

    Candidates per axis, in priority order:

    1. wall overlap (outer edge onto the neighbour's facing inner edge),
       within ``wall_snap_tolerance_cm``;
    2. outer edge aligned with the neighbour's same outer edge, within
       ``snap_tolerance_cm``.

    Neighbours are visited in list order and the first hit on an axis wins.
    """
    moving_outer = outer_bounds(
        moving_room, global_wall_thickness_cm, target_x_cm, target_y_cm
    )
    walls = moving_outer.walls
    width = moving_room.width_cm
    height = moving_room.height_cm

    x_cm, y_cm = target_x_cm, target_y_cm
    snapped_x = snapped_y = False
    x_guide: Optional[float] = None
    y_guide: Optional[float] = None

    for other in all_rooms:
        if other.id == moving_room.id:
            continue
        other_inner = inner_bounds(other)
        other_outer = outer_bounds(other, global_wall_thickness_cm)

        if not snapped_x:
            # (distance, snapped x, guide) in priority order
            x_candidates = (
                (abs(moving_outer.right - other_inner.left), wall_snap_tolerance_cm,
                 other_inner.left - width - walls.east, other_inner.left),
                (abs(moving_outer.left - other_inner.right), wall_snap_tolerance_cm,
                 other_inner.right + walls.west, other_inner.right),
                (abs(moving_outer.left - other_outer.left), snap_tolerance_cm,
                 other_outer.left + walls.west, other_outer.left),
                (abs(moving_outer.right - other_outer.right), snap_tolerance_cm,
                 other_outer.right - width - walls.east, other_outer.right),
            )
            for dist, tolerance, snapped, guide in x_candidates:
                if dist <= tolerance:
                    x_cm, x_guide, snapped_x = snapped, guide, True
                    break

        if not snapped_y:
            y_candidates = (
                (abs(moving_outer.bottom - other_inner.top), wall_snap_tolerance_cm,
                 other_inner.top - height - walls.south, other_inner.top),
                (abs(moving_outer.top - other_inner.bottom), wall_snap_tolerance_cm,
                 other_inner.bottom + walls.north, other_inner.bottom),
                (abs(moving_outer.top - other_outer.top), snap_tolerance_cm,
                 other_outer.top + walls.north, other_outer.top),
                (abs(moving_outer.bottom - other_outer.bottom), snap_tolerance_cm,
                 other_outer.bottom - height - walls.south, other_outer.bottom),
            )
            for dist, tolerance, snapped, guide in y_candidates:
                if dist <= tolerance:
                    y_cm, y_guide, snapped_y = snapped, guide, True
                    break

        if snapped_x and snapped_y:
            break

    return SnapResult(
        x_cm=x_cm,
        y_cm=y_cm,
        snapped_x=snapped_x,
        snapped_y=snapped_y,
        x_guide_cm=x_guide,
        y_guide_cm=y_guide,
    )


class _AxisBest:
    """Tracks the closest snap candidate seen so far on one axis."""

    def __init__(self, start: float, tolerance: float) -> None:
        self.value = start
        self.guide: Optional[float] = None
        self.snapped = False
        self.distance = tolerance + 1

    def offer(self, distance: float, tolerance: float, value: float, guide: float) -> None:
        if distance <= tolerance and distance < self.distance:
            self.value = value
            self.guide = guide
            self.snapped = True
            self.distance = distance


def calculate_placed_object_snap(
    obj_width_cm: float,
    obj_height_cm: float,
    room: Room,
    target_x_cm: float,
    target_y_cm: float,
    tolerance_cm: float = OBJECT_SNAP_TOLERANCE_CM,
    other_objects: Sequence[ObjectBox] = (),
    current_object_id: Optional[str] = None,
    object_tolerance_cm: float = OBJECT_TO_OBJECT_SNAP_TOLERANCE_CM,
) -> SnapResult:
    """Snap an object's visual box against its room's walls and sibling objects.

    All arguments describe visual (rotation-adjusted) boxes; converting the
    result back to stored coordinates is up to the caller.
    """
    room_box = inner_bounds(room)
    left = target_x_cm
    right = target_x_cm + obj_width_cm
    top = target_y_cm
    bottom = target_y_cm + obj_height_cm

    best_x = _AxisBest(target_x_cm, tolerance_cm)
    best_y = _AxisBest(target_y_cm, tolerance_cm)

    best_x.offer(abs(left - room_box.left), tolerance_cm, room_box.left, room_box.left)
    best_x.offer(abs(right - room_box.right), tolerance_cm,
                 room_box.right - obj_width_cm, room_box.right)
    best_y.offer(abs(top - room_box.top), tolerance_cm, room_box.top, room_box.top)
    best_y.offer(abs(bottom - room_box.bottom), tolerance_cm,
                 room_box.bottom - obj_height_cm, room_box.bottom)

    tol = object_tolerance_cm
    for other in other_objects:
        if current_object_id is not None and other.id == current_object_id:
            continue
        o_left = other.x_cm
        o_right = other.x_cm + other.width_cm
        o_top = other.y_cm
        o_bottom = other.y_cm + other.height_cm

        # flush against the other object
        best_x.offer(abs(left - o_right), tol, o_right, o_right)
        best_x.offer(abs(right - o_left), tol, o_left - obj_width_cm, o_left)
        # aligned with the other object
        best_x.offer(abs(left - o_left), tol, o_left, o_left)
        best_x.offer(abs(right - o_right), tol, o_right - obj_width_cm, o_right)

        best_y.offer(abs(top - o_bottom), tol, o_bottom, o_bottom)
        best_y.offer(abs(bottom - o_top), tol, o_top - obj_height_cm, o_top)
        best_y.offer(abs(top - o_top), tol, o_top, o_top)
        best_y.offer(abs(bottom - o_bottom), tol, o_bottom - obj_height_cm, o_bottom)

    return SnapResult(
        x_cm=best_x.value,
        y_cm=best_y.value,
        snapped_x=best_x.snapped,
        snapped_y=best_y.snapped,
        x_guide_cm=best_x.guide,
        y_guide_cm=best_y.guide,
    )

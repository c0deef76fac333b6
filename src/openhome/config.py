# src/openhome/config.py
"""Tunable constants for the editing core (all lengths in cm)."""
from __future__ import annotations

from dataclasses import dataclass

SCALE_PX_PER_CM = 5.0
MIN_ROOM_SIZE_CM = 10.0
DEFAULT_WALL_THICKNESS_CM = 10.0
MIN_ZOOM = 0.1
MAX_ZOOM = 3.0

SNAP_TOLERANCE_CM = 2.0
WALL_SNAP_TOLERANCE_CM = 15.0
OBJECT_SNAP_TOLERANCE_CM = 25.0
OBJECT_TO_OBJECT_SNAP_TOLERANCE_CM = 15.0
ADJACENCY_EPSILON_CM = 0.5
DUPLICATE_OFFSET_CM = 20.0


@dataclass(frozen=True)
class EditorConfig:
    """Configuration for the interaction layer."""

    scale_px_per_cm: float = SCALE_PX_PER_CM
    snap_tolerance_cm: float = SNAP_TOLERANCE_CM
    wall_snap_tolerance_cm: float = WALL_SNAP_TOLERANCE_CM
    object_snap_tolerance_cm: float = OBJECT_SNAP_TOLERANCE_CM
    object_to_object_snap_tolerance_cm: float = OBJECT_TO_OBJECT_SNAP_TOLERANCE_CM
    adjacency_epsilon_cm: float = ADJACENCY_EPSILON_CM
    min_room_size_cm: float = MIN_ROOM_SIZE_CM
    nudge_cm: float = 5.0
    nudge_shift_cm: float = 20.0
    default_wall_thickness_cm: float = DEFAULT_WALL_THICKNESS_CM
    default_door_width_cm: float = 90.0
    default_window_width_cm: float = 100.0
    min_zoom: float = MIN_ZOOM
    max_zoom: float = MAX_ZOOM
    wheel_zoom_in: float = 1.1
    wheel_zoom_out: float = 0.9
    resize_handle_px: float = 40.0
    duplicate_offset_cm: float = DUPLICATE_OFFSET_CM

    def handle_size_cm(self, zoom: float) -> float:
        """Resize handles keep a constant on-screen size regardless of zoom."""
        return self.resize_handle_px / zoom / self.scale_px_per_cm

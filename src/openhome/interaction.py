# src/openhome/interaction.py
"""Pointer and keyboard handling for the editor canvas.

The controller turns raw events into state changes. While a drag is in
progress every sample replaces the present state without touching the undo
stack; releasing the pointer records a single checkpoint for the whole drag.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from openhome import state as mutators
from openhome.adjacency import WallRenderSpec, build_wall_plan
from openhome.config import EditorConfig
from openhome.geometry import (
    HitKind,
    distance_cm,
    hit_test,
    screen_to_content,
    storage_from_visual,
    svg_pixels_to_cm,
    visual_bounds,
)
from openhome.history import (
    HistoryState,
    create_initial_history,
    record_history,
    redo,
    replace_present,
    reset_history,
    undo,
)
from openhome.models import AppState, OpeningType, Room, WallSide
from openhome.snap import ObjectBox, SnapResult, calculate_placed_object_snap, calculate_snap

logger = logging.getLogger(__name__)


class Mode(str, Enum):
    IDLE = "idle"
    PANNING = "panning"
    DRAGGING_ROOMS = "dragging_rooms"
    RESIZING_ROOM = "resizing_room"
    DRAGGING_OBJECT = "dragging_object"
    MEASURING = "measuring"


class ToolMode(str, Enum):
    SELECT = "select"
    MEASURE = "measure"


@dataclass(frozen=True)
class PointerEvent:
    """A pointer sample in view pixels (before pan and zoom are undone)."""

    x: float
    y: float
    shift: bool = False
    pointer_id: int = 1


@dataclass(frozen=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    in_text_input: bool = False


@dataclass(frozen=True)
class DragSession:
    mode: Mode
    pointer_id: int
    start_x: float
    start_y: float
    origin_x: float
    origin_y: float
    baseline: AppState
    target_id: Optional[str] = None
    handle: Optional[str] = None
    initial_room: Optional[Room] = None
    room_starts: tuple[mutators.RoomMove, ...] = ()


@dataclass(frozen=True)
class MeasurePoint:
    x_cm: float
    y_cm: float


_ARROWS = {
    "ArrowUp": (0, -1),
    "ArrowDown": (0, 1),
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
}


class InteractionController:
    """Owns the history and the transient drag/tool state of one editor."""

    def __init__(
        self,
        history: Optional[HistoryState] = None,
        config: Optional[EditorConfig] = None,
        capture_pointer: Optional[Callable[[int], None]] = None,
        release_pointer: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.config = config or EditorConfig()
        self.history = history or create_initial_history(
            AppState(global_wall_thickness_cm=self.config.default_wall_thickness_cm)
        )
        self.session: Optional[DragSession] = None
        self.tool = ToolMode.SELECT
        self.measure_points: tuple[MeasurePoint, ...] = ()
        self.snap_result: Optional[SnapResult] = None
        self._capture_pointer = capture_pointer
        self._release_pointer = release_pointer

    # ------------------------------------------------------------------ #
    # State access
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> AppState:
        return self.history.present

    @property
    def mode(self) -> Mode:
        if self.session is not None:
            return self.session.mode
        if self.tool == ToolMode.MEASURE:
            return Mode.MEASURING
        return Mode.IDLE

    def apply(self, new_state: AppState, record: bool = True) -> None:
        """Make ``new_state`` current, checkpointing it unless ``record`` is False."""
        if new_state == self.history.present:
            return
        if record:
            self.history = record_history(self.history, new_state)
        else:
            self.history = replace_present(self.history, new_state)

    def load(self, new_state: AppState) -> None:
        """Replace the document, dropping undo history and any drag."""
        self.session = None
        self.snap_result = None
        self.history = reset_history(new_state)

    def undo(self) -> None:
        if self.session is not None:
            logger.debug("undo ignored during %s", self.session.mode.value)
            return
        self.history = undo(self.history)

    def redo(self) -> None:
        if self.session is not None:
            logger.debug("redo ignored during %s", self.session.mode.value)
            return
        self.history = redo(self.history)

    def wall_plan(self) -> list[WallRenderSpec]:
        return build_wall_plan(self.state, self.config.adjacency_epsilon_cm)

    def add_opening(
        self,
        room_id: str,
        wall: WallSide,
        opening_type: OpeningType = OpeningType.DOOR,
        position_cm: float = 0,
        width_cm: Optional[float] = None,
    ) -> list[str]:
        """Validate and add a door or window. Returns the problems, if any.

        Without a width the configured default for the opening type is used.
        Nothing is applied when the opening is invalid.
        """
        room = mutators.get_room_by_id(self.state, room_id)
        if room is None:
            return [f"room {room_id} not found"]
        if width_cm is None:
            width_cm = (
                self.config.default_door_width_cm
                if opening_type == OpeningType.DOOR
                else self.config.default_window_width_cm
            )
        errors = mutators.validate_wall_opening(
            room, wall, position_cm, width_cm, self.state.wall_openings
        )
        if not errors:
            self.apply(mutators.add_wall_opening(
                self.state, room_id, wall, opening_type, position_cm, width_cm
            ))
        return errors

    def duplicate_selected_object(self) -> None:
        selected = self.state.selected_object_id
        if selected is None:
            return
        self.apply(mutators.duplicate_placed_object(
            self.state, selected, self.config.duplicate_offset_cm
        ))

    def _to_cm(self, event: PointerEvent) -> tuple[float, float]:
        s = self.state
        x, y = screen_to_content(event.x, event.y, s.pan_x, s.pan_y, s.zoom)
        return svg_pixels_to_cm(x, y, self.config.scale_px_per_cm)

    # ------------------------------------------------------------------ #
    # Pointer down
    # ------------------------------------------------------------------ #

    def pointer_down(self, event: PointerEvent) -> None:
        x_cm, y_cm = self._to_cm(event)

        if self.tool == ToolMode.MEASURE:
            point = MeasurePoint(x_cm, y_cm)
            if len(self.measure_points) == 1:
                self.measure_points = (self.measure_points[0], point)
            else:
                self.measure_points = (point,)
            return

        if self._capture_pointer is not None:
            self._capture_pointer(event.pointer_id)

        state = self.state
        target = hit_test(state, x_cm, y_cm, self.config.handle_size_cm(state.zoom))

        if target.kind == HitKind.RESIZE_HANDLE:
            room = mutators.get_room_by_id(state, target.room_id)
            if room is not None:
                self.session = DragSession(
                    mode=Mode.RESIZING_ROOM,
                    pointer_id=event.pointer_id,
                    start_x=x_cm,
                    start_y=y_cm,
                    origin_x=room.x_cm,
                    origin_y=room.y_cm,
                    baseline=state,
                    target_id=room.id,
                    handle=target.handle,
                    initial_room=room,
                )
                return

        if target.kind == HitKind.PLACED_OBJECT:
            placed = mutators.get_placed_object_by_id(state, target.object_id)
            if placed is not None:
                self.apply(mutators.select_object(state, placed.id), record=False)
                self.session = DragSession(
                    mode=Mode.DRAGGING_OBJECT,
                    pointer_id=event.pointer_id,
                    start_x=x_cm,
                    start_y=y_cm,
                    origin_x=placed.x_cm,
                    origin_y=placed.y_cm,
                    baseline=self.state,
                    target_id=placed.id,
                )
                return

        if target.kind == HitKind.ROOM:
            self._press_room(target.room_id, event, x_cm, y_cm)
            return

        self.session = DragSession(
            mode=Mode.PANNING,
            pointer_id=event.pointer_id,
            start_x=event.x,
            start_y=event.y,
            origin_x=state.pan_x,
            origin_y=state.pan_y,
            baseline=state,
        )
        self.apply(mutators.clear_selection(state), record=False)

    def _press_room(self, room_id: str, event: PointerEvent, x_cm: float, y_cm: float) -> None:
        state = self.state
        room = mutators.get_room_by_id(state, room_id)
        if room is None:
            return

        if event.shift:
            # shift-click only edits the selection
            self.apply(mutators.toggle_room_selection(state, room.id), record=False)
            return

        already_selected = room.id in state.selected_room_ids
        if not already_selected:
            self.apply(mutators.select_room(state, room.id), record=False)
        selected_ids = state.selected_room_ids if already_selected else (room.id,)

        state = self.state
        starts = []
        for rid in selected_ids:
            r = mutators.get_room_by_id(state, rid)
            if r is not None:
                starts.append(mutators.RoomMove(r.id, r.x_cm, r.y_cm))

        self.session = DragSession(
            mode=Mode.DRAGGING_ROOMS,
            pointer_id=event.pointer_id,
            start_x=x_cm,
            start_y=y_cm,
            origin_x=room.x_cm,
            origin_y=room.y_cm,
            baseline=state,
            target_id=room.id,
            room_starts=tuple(starts),
        )

    # ------------------------------------------------------------------ #
    # Pointer move
    # ------------------------------------------------------------------ #

    def pointer_move(self, event: PointerEvent) -> None:
        session = self.session
        if session is None:
            return

        if session.mode == Mode.PANNING:
            s = self.state
            new_state = mutators.update_viewport(
                s,
                session.origin_x + (event.x - session.start_x),
                session.origin_y + (event.y - session.start_y),
                s.zoom,
                self.config.min_zoom,
                self.config.max_zoom,
            )
            self.apply(new_state, record=False)
            return

        x_cm, y_cm = self._to_cm(event)
        dx = x_cm - session.start_x
        dy = y_cm - session.start_y

        if session.mode == Mode.RESIZING_ROOM:
            self._resize(session, dx, dy)
        elif session.mode == Mode.DRAGGING_OBJECT:
            self._drag_object(session, session.origin_x + dx, session.origin_y + dy)
        elif session.mode == Mode.DRAGGING_ROOMS:
            self._drag_rooms(session, session.origin_x + dx, session.origin_y + dy)

    def _resize(self, session: DragSession, dx: float, dy: float) -> None:
        initial = session.initial_room
        handle = session.handle or ""
        min_size = self.config.min_room_size_cm

        x, y = initial.x_cm, initial.y_cm
        w, h = initial.width_cm, initial.height_cm
        if "e" in handle:
            w = max(min_size, initial.width_cm + dx)
        if "w" in handle:
            delta = max(-initial.x_cm, min(dx, initial.width_cm - min_size))
            x = initial.x_cm + delta
            w = initial.width_cm - delta
        if "s" in handle:
            h = max(min_size, initial.height_cm + dy)
        if "n" in handle:
            delta = max(-initial.y_cm, min(dy, initial.height_cm - min_size))
            y = initial.y_cm + delta
            h = initial.height_cm - delta

        self.apply(mutators.resize_room(self.state, initial.id, x, y, w, h), record=False)

    def _drag_object(self, session: DragSession, x_cm: float, y_cm: float) -> None:
        state = self.state
        placed = mutators.get_placed_object_by_id(state, session.target_id)
        if placed is None:
            return
        obj_def = mutators.get_object_def_by_id(state, placed.def_id)
        room = mutators.get_room_by_id(state, placed.room_id)
        if obj_def is None or room is None:
            return

        others = []
        for other in state.placed_objects:
            if other.room_id != room.id or other.id == placed.id:
                continue
            other_def = mutators.get_object_def_by_id(state, other.def_id)
            if other_def is None:
                continue
            box = visual_bounds(
                other.x_cm, other.y_cm, other_def.width_cm, other_def.height_cm, other.rotation_deg
            )
            others.append(ObjectBox(other.id, box.x, box.y, box.w, box.h))

        visual = visual_bounds(x_cm, y_cm, obj_def.width_cm, obj_def.height_cm, placed.rotation_deg)
        snap = calculate_placed_object_snap(
            visual.w,
            visual.h,
            room,
            visual.x,
            visual.y,
            tolerance_cm=self.config.object_snap_tolerance_cm,
            other_objects=others,
            current_object_id=placed.id,
            object_tolerance_cm=self.config.object_to_object_snap_tolerance_cm,
        )
        self.snap_result = snap
        stored_x, stored_y = storage_from_visual(
            snap.x_cm, snap.y_cm, obj_def.width_cm, obj_def.height_cm, placed.rotation_deg
        )
        self.apply(
            mutators.update_placed_object_position(state, placed.id, stored_x, stored_y),
            record=False,
        )

    def _drag_rooms(self, session: DragSession, x_cm: float, y_cm: float) -> None:
        state = self.state
        room = mutators.get_room_by_id(state, session.target_id)
        if room is None or not session.room_starts:
            return

        # rooms moving together are not snap targets for each other
        moving = {m.id for m in session.room_starts}
        peers = [r for r in state.rooms if r.id == room.id or r.id not in moving]
        snap = calculate_snap(
            room,
            peers,
            x_cm,
            y_cm,
            state.global_wall_thickness_cm,
            snap_tolerance_cm=self.config.snap_tolerance_cm,
            wall_snap_tolerance_cm=self.config.wall_snap_tolerance_cm,
        )
        self.snap_result = snap

        delta_x = max(0.0, snap.x_cm) - session.origin_x
        delta_y = max(0.0, snap.y_cm) - session.origin_y
        moves = [
            mutators.RoomMove(start.id, start.x_cm + delta_x, start.y_cm + delta_y)
            for start in session.room_starts
        ]
        self.apply(mutators.move_rooms(state, moves), record=False)

    # ------------------------------------------------------------------ #
    # Pointer up / cancel
    # ------------------------------------------------------------------ #

    def pointer_up(self, event: Optional[PointerEvent] = None) -> None:
        session = self.session
        if session is not None and session.mode != Mode.PANNING:
            final = self.state
            if final != session.baseline:
                self.history = record_history(
                    replace_present(self.history, session.baseline), final
                )
                logger.debug("committed %s of %s", session.mode.value, session.target_id)

        pointer_id = event.pointer_id if event is not None else (
            session.pointer_id if session is not None else None
        )
        if self._release_pointer is not None and pointer_id is not None:
            try:
                self._release_pointer(pointer_id)
            except Exception:
                logger.debug("releasing pointer %s failed", pointer_id, exc_info=True)

        self.session = None
        self.snap_result = None

    def pointer_cancel(self, event: Optional[PointerEvent] = None) -> None:
        self.pointer_up(event)

    # ------------------------------------------------------------------ #
    # Wheel, tools, keyboard
    # ------------------------------------------------------------------ #

    def wheel(self, delta_y: float) -> None:
        cfg = self.config
        factor = cfg.wheel_zoom_out if delta_y > 0 else cfg.wheel_zoom_in
        s = self.state
        self.apply(
            mutators.update_viewport(s, s.pan_x, s.pan_y, s.zoom * factor, cfg.min_zoom, cfg.max_zoom),
            record=False,
        )

    def set_tool(self, tool: ToolMode) -> None:
        self.tool = tool
        self.measure_points = ()

    def measure_distance(self) -> Optional[float]:
        if len(self.measure_points) != 2:
            return None
        a, b = self.measure_points
        return distance_cm(a.x_cm, a.y_cm, b.x_cm, b.y_cm)

    def key_down(self, event: KeyEvent) -> bool:
        """Handle a shortcut. Returns True when the key was consumed."""
        if event.in_text_input:
            return False
        # a drag owns the history until the pointer is released
        if self.session is not None:
            return False

        key = event.key
        modifier = event.ctrl or event.meta
        state = self.state

        if modifier and key.lower() == "z" and not event.shift:
            self.undo()
            return True
        if modifier and (key.lower() == "y" or (key.lower() == "z" and event.shift)):
            self.redo()
            return True
        if modifier and key.lower() == "a":
            self.apply(mutators.select_all_rooms(state), record=False)
            return True

        if key in ("Delete", "Backspace"):
            if state.selected_object_id is not None:
                self.apply(mutators.delete_selected_object(state))
                return True
            if state.selected_room_ids:
                self.apply(mutators.delete_rooms(state, state.selected_room_ids))
                return True
            return False

        if key in _ARROWS and state.selected_room_ids:
            amount = self.config.nudge_shift_cm if event.shift else self.config.nudge_cm
            ux, uy = _ARROWS[key]
            self.apply(mutators.nudge_selected_rooms(state, ux * amount, uy * amount))
            return True

        if key in ("m", "M"):
            self.set_tool(ToolMode.SELECT if self.tool == ToolMode.MEASURE else ToolMode.MEASURE)
            return True

        if key == "Escape":
            if self.tool != ToolMode.SELECT:
                self.set_tool(ToolMode.SELECT)
            else:
                self.apply(mutators.clear_selection(state), record=False)
            return True

        return False

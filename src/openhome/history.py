# src/openhome/history.py
"""Undo/redo over immutable :class:`AppState` snapshots."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from openhome.models import AppState


@dataclass(frozen=True)
class HistoryState:
    past: tuple[AppState, ...]
    present: AppState
    future: tuple[AppState, ...]


def create_initial_history(state: Optional[AppState] = None) -> HistoryState:
    return HistoryState(past=(), present=state if state is not None else AppState(), future=())


def reset_history(state: AppState) -> HistoryState:
    """Start over from ``state`` with empty undo and redo stacks (e.g. after an import)."""
    return HistoryState(past=(), present=state, future=())


def record_history(history: HistoryState, new_state: AppState) -> HistoryState:
    """Checkpoint: the current present moves to the past and redo is cleared."""
    return HistoryState(
        past=history.past + (history.present,),
        present=new_state,
        future=(),
    )


def replace_present(history: HistoryState, new_state: AppState) -> HistoryState:
    """Swap the present without a checkpoint (drags in progress, viewport, selection)."""
    return replace(history, present=new_state)


def can_undo(history: HistoryState) -> bool:
    return bool(history.past)


def can_redo(history: HistoryState) -> bool:
    return bool(history.future)


def undo(history: HistoryState) -> HistoryState:
    if not history.past:
        return history
    return HistoryState(
        past=history.past[:-1],
        present=history.past[-1],
        future=(history.present,) + history.future,
    )


def redo(history: HistoryState) -> HistoryState:
    if not history.future:
        return history
    return HistoryState(
        past=history.past + (history.present,),
        present=history.future[0],
        future=history.future[1:],
    )

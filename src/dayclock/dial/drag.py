"""Drag-to-reschedule state machine for task arcs on the dial."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from dayclock import log
from dayclock.dial.segments import DragPreview, Ring
from dayclock.dial.timemath import MINUTES_PER_DAY, NOON, minutes_to_time
from dayclock.errors import DragError
from dayclock.tasks.model import Task

# Each ring spans 720 minutes over 360 degrees.
MINUTES_PER_DEGREE = 2.0
DEFAULT_SNAP_MINUTES = 5


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragState:
    task_id: str
    original_start: int
    duration: int
    start_angle: float
    ring: Ring


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def normalize_delta(degrees: float) -> float:
    """Fold an angular difference into ``(-180, 180]``."""
    delta = (degrees + 180.0) % 360.0 - 180.0
    if delta == -180.0:
        return 180.0
    return delta


def snap(minutes: float, step: int = DEFAULT_SNAP_MINUTES) -> int:
    return round_half_up(minutes / step) * step


def clamp_start(candidate: int, duration: int, ring: Ring) -> int:
    """Keep a dragged task whole on the ring it started on."""
    if ring is Ring.PM:
        low, high = NOON, MINUTES_PER_DAY - 1 - duration
    else:
        low, high = 0, NOON - 1 - duration
    return max(low, min(high, candidate))


class DragController:
    """Tracks at most one in-progress drag and computes its live preview.

    Usage::

        drag = DragController()
        drag.begin(task, Ring.AM, angle)   # idle -> dragging
        preview = drag.move(new_angle)     # recompute the preview
        committed = drag.release()         # dragging -> idle, last preview
    """

    def __init__(
        self,
        snap_minutes: int = DEFAULT_SNAP_MINUTES,
        minutes_per_degree: float = MINUTES_PER_DEGREE,
    ) -> None:
        if snap_minutes < 1:
            raise ValueError(f"Snap step must be at least 1 minute, got {snap_minutes}")
        self.snap_minutes = snap_minutes
        self.minutes_per_degree = minutes_per_degree
        self._state: DragState | None = None
        self._preview: DragPreview | None = None

    # ── state queries ────────────────────────────────────────────

    @property
    def phase(self) -> DragPhase:
        return DragPhase.DRAGGING if self._state is not None else DragPhase.IDLE

    @property
    def dragging(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> DragState | None:
        return self._state

    @property
    def preview(self) -> DragPreview | None:
        return self._preview

    # ── transitions ──────────────────────────────────────────────

    def begin(self, task: Task, ring: Ring, angle: float) -> DragState:
        if self._state is not None:
            raise DragError(
                f"Cannot drag {task.id}: {self._state.task_id} is already being dragged"
            )
        self._state = DragState(
            task_id=task.id,
            original_start=task.start_minute,
            duration=task.duration,
            start_angle=angle,
            ring=ring,
        )
        self._preview = None
        log.debug(f"Drag {task.id}: idle -> dragging ({ring.value} ring, {angle:.1f} deg)")
        return self._state

    def candidate_start(self, angle: float) -> int:
        """Snapped, ring-clamped start minute for the pointer at *angle*."""
        st = self._require_state()
        delta = normalize_delta(angle - st.start_angle)
        delta_minutes = round_half_up(delta * self.minutes_per_degree)
        start = st.original_start + snap(delta_minutes, self.snap_minutes)
        return clamp_start(start, st.duration, st.ring)

    def move(self, angle: float) -> DragPreview:
        st = self._require_state()
        start = self.candidate_start(angle)
        self._preview = DragPreview(
            task_id=st.task_id,
            start_time=minutes_to_time(start),
            end_time=minutes_to_time(start + st.duration),
        )
        return self._preview

    def release(self) -> DragPreview | None:
        """End the drag and hand back the preview to commit, if any."""
        preview = self._preview
        task_id = self._state.task_id if self._state else None
        self._state = None
        self._preview = None
        if task_id is not None:
            log.debug(f"Drag {task_id}: dragging -> idle (preview={'yes' if preview else 'no'})")
        return preview

    def cancel(self) -> None:
        if self._state is not None:
            log.debug(f"Drag {self._state.task_id}: cancelled")
        self._state = None
        self._preview = None

    def _require_state(self) -> DragState:
        if self._state is None:
            raise DragError("No drag in progress")
        return self._state

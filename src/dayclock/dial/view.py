"""The day dial: tasks of one date on a 24-hour dual-ring clock.

``DayDial`` owns the selection controller, the drag state machine and the
minute ticker for one viewed date. Pointer move/up handlers are subscribed on
the :class:`PointerBus` only while a drag is in progress.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from threading import RLock

from dayclock import log
from dayclock.config import Config
from dayclock.dial.drag import DragController
from dayclock.dial.events import PointerBus, PointerEvent, PointerKind, Unsubscribe
from dayclock.dial.segments import ArcSegment, DragPreview, Ring, build_segments
from dayclock.dial.selection import SelectionCallback, SelectionController
from dayclock.dial.ticker import Clock, MinuteTicker
from dayclock.dial.timemath import (
    NOON,
    angle_from_point,
    minutes_to_dial_degrees,
    polar_to_cartesian,
    time_to_minutes,
)
from dayclock.errors import DragError, StoreError
from dayclock.render import render_dial_svg
from dayclock.store import TaskStore
from dayclock.tasks.model import Project, Task

# A single gesture can shift a task by less than half a ring.
MAX_GESTURE_MINUTES = 350


class DayDial:
    def __init__(
        self,
        store: TaskStore,
        view_date: date,
        *,
        config: Config | None = None,
        projects: list[Project] | None = None,
        clock: Clock = datetime.now,
        bus: PointerBus | None = None,
        on_task_selected: SelectionCallback | None = None,
        on_tick: Callable[[datetime], None] | None = None,
    ) -> None:
        cfg = config or Config()
        self.store = store
        self.view_date = view_date
        self.geometry = cfg.geometry()
        self.projects: list[Project] | None = projects
        self.bus = bus or PointerBus()
        self.drag = DragController(snap_minutes=cfg.snap_minutes)
        self.selection = SelectionController(view_date, clock(), on_task_selected)
        self.ticker = MinuteTicker(self._on_tick, interval=cfg.tick_seconds, clock=clock)
        self.last_error: StoreError | None = None
        self._clock = clock
        self._on_tick_cb = on_tick
        self._listeners: list[Unsubscribe] = []
        self._mounted = False
        self._lock = RLock()

    # ── lifecycle ────────────────────────────────────────────────

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        with self._lock:
            if self._mounted:
                return
            self.reload()
            self._mounted = True
        self.ticker.start()
        log.debug(f"Dial mounted for {self.view_date.isoformat()}")

    def unmount(self) -> None:
        self.ticker.stop()
        with self._lock:
            try:
                self.drag.cancel()
            finally:
                self._release_listeners()
                self._mounted = False
        log.debug(f"Dial unmounted for {self.view_date.isoformat()}")

    def __enter__(self) -> DayDial:
        self.mount()
        return self

    def __exit__(self, *exc: object) -> None:
        self.unmount()

    # ── data ─────────────────────────────────────────────────────

    def reload(self) -> list[Task]:
        """Fetch the day's tasks (and projects, unless given) from the store."""
        with self._lock:
            if self.projects is None:
                self.projects = self.store.list_projects()
            tasks = self.store.list_tasks_for_date(self.view_date.isoformat())
            self.set_tasks(tasks)
            return self.tasks

    def set_tasks(self, tasks: list[Task]) -> None:
        with self._lock:
            self.selection.refresh(tasks, dragging=self.drag.dragging)

    @property
    def tasks(self) -> list[Task]:
        return self.selection.tasks

    @property
    def now(self) -> datetime:
        return self.selection.now

    @property
    def is_today(self) -> bool:
        return self.view_date == self.now.date()

    @property
    def selected_id(self) -> str | None:
        return self.selection.selected_id

    @property
    def preview(self) -> DragPreview | None:
        return self.drag.preview

    def get_task(self, task_id: str) -> Task | None:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def segments(self) -> list[ArcSegment]:
        with self._lock:
            return build_segments(
                self.tasks,
                self.projects or [],
                self.now,
                preview=self.drag.preview,
                geometry=self.geometry,
            )

    def active_task(self) -> Task | None:
        """Selected task as the detail panel shows it, preview applied."""
        with self._lock:
            return self.selection.active(self.drag.preview)

    def render_svg(self) -> str:
        with self._lock:
            return render_dial_svg(
                self.segments(),
                self.geometry,
                now=self.now,
                selected_id=self.selected_id,
                show_hand=self.is_today,
            )

    # ── selection ────────────────────────────────────────────────

    def select(self, task_id: str | None) -> str | None:
        with self._lock:
            return self.selection.select(task_id)

    def next_task(self) -> str | None:
        with self._lock:
            return self.selection.next()

    def previous_task(self) -> str | None:
        with self._lock:
            return self.selection.previous()

    def _on_tick(self, now: datetime) -> None:
        with self._lock:
            if not self._mounted:
                return
            self.selection.tick(now)
        if self._on_tick_cb is not None:
            self._on_tick_cb(now)

    def tick(self) -> datetime:
        """Advance the clock to the current time without waiting for the timer."""
        now = self._clock()
        with self._lock:
            self.selection.tick(now)
        return now

    # ── drag ─────────────────────────────────────────────────────

    def pointer_down(self, task_id: str, ring: Ring, x: float, y: float) -> None:
        """Start dragging *task_id* from the arc on *ring* under ``(x, y)``."""
        with self._lock:
            task = self.get_task(task_id)
            if task is None:
                raise DragError(f"Task {task_id} is not on this dial")
            angle = angle_from_point(x, y, self.geometry.center_x, self.geometry.center_y)
            self.drag.begin(task, ring, angle)
            self.selection.select(task_id)
            self._listeners = [
                self.bus.subscribe(PointerKind.MOVE, self._on_pointer_move),
                self.bus.subscribe(PointerKind.UP, self._on_pointer_up),
            ]

    def _on_pointer_move(self, event: PointerEvent) -> None:
        with self._lock:
            if not self.drag.dragging:
                return
            angle = angle_from_point(
                event.x, event.y, self.geometry.center_x, self.geometry.center_y
            )
            self.drag.move(angle)

    def _on_pointer_up(self, event: PointerEvent) -> None:
        with self._lock:
            try:
                preview = self.drag.release()
            finally:
                self._release_listeners()
            if preview is not None:
                self.commit(preview)

    def _release_listeners(self) -> None:
        listeners, self._listeners = self._listeners, []
        for unsubscribe in listeners:
            unsubscribe()

    def commit(self, preview: DragPreview) -> Task | None:
        """Apply *preview* locally, then write it to the store.

        A failed write is logged and kept in :attr:`last_error`; the local
        change stays until the next :meth:`reload`.
        """
        with self._lock:
            task = self.get_task(preview.task_id)
            if task is None:
                log.warn(f"Task {preview.task_id} disappeared before the drag was committed")
                return None
            updated = task.with_times(preview.start_time, preview.end_time)
            return self._apply(
                updated,
                f"Moved {task.title or task.id} to {updated.start_time}-{updated.end_time}",
            )

    def point_for_minute(self, minutes: int) -> tuple[float, float]:
        """Dial coordinates of *minutes* on its ring, where a pointer would grab it."""
        geo = self.geometry
        radius = geo.radius_for(minutes >= NOON)
        return polar_to_cartesian(
            geo.center_x, geo.center_y, radius, minutes_to_dial_degrees(minutes)
        )

    def reschedule(self, task_id: str, start_time: str) -> Task | None:
        """Move a task by replaying pointer gestures from its start to *start_time*.

        Each gesture is snapped and clamped to the task's ring exactly as an
        interactive drag would be, so the result may differ from the request.
        """
        target = time_to_minutes(start_time)
        result: Task | None = None
        while True:
            task = self.get_task(task_id)
            if task is None:
                raise DragError(f"Task {task_id} is not on this dial")
            current = task.start_minute
            remaining = target - current
            if remaining == 0:
                return result or task
            step = max(-MAX_GESTURE_MINUTES, min(MAX_GESTURE_MINUTES, remaining))
            ring = Ring.for_minute(current)
            self.pointer_down(task_id, ring, *self.point_for_minute(current))
            self.bus.move(*self.point_for_minute(current + step))
            self.bus.up()
            moved = self.get_task(task_id)
            if moved is None or moved.start_minute == current or self.last_error is not None:
                return moved if result is None else result
            result = moved

    # ── checklist ────────────────────────────────────────────────

    def toggle_checklist(self, item_id: str, task_id: str | None = None) -> Task | None:
        """Toggle a checklist item of *task_id* (default: the selected task)."""
        with self._lock:
            task = self.get_task(task_id or self.selected_id or "")
            if task is None:
                log.warn("No task selected")
                return None
            updated = task.toggle_item(item_id)
            done, total = updated.checklist_progress()
            return self._apply(updated, f"{updated.title or updated.id}: {done}/{total} done")

    def _apply(self, updated: Task, message: str) -> Task | None:
        self.last_error = None
        tasks = [updated if t.id == updated.id else t for t in self.tasks]
        self.set_tasks(tasks)
        try:
            saved = self.store.update_task(updated)
        except StoreError as exc:
            self.last_error = exc
            log.error(f"Could not save {updated.id}: {exc}")
            return None
        log.debug(message)
        return saved

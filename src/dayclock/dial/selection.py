"""Default selection, next/previous navigation and the active-task view."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime

from dayclock import log
from dayclock.dial.segments import DragPreview
from dayclock.dial.timemath import time_to_minutes
from dayclock.tasks.model import Task, sort_by_start

SelectionCallback = Callable[[Task], None]


def _index_of(tasks: list[Task], task_id: str | None) -> int:
    for i, t in enumerate(tasks):
        if t.id == task_id:
            return i
    return -1


def task_at(tasks: list[Task], now: datetime) -> Task | None:
    """Return the first task whose ``[start, end)`` contains *now*."""
    day = now.date().isoformat()
    minute = now.hour * 60 + now.minute
    for task in tasks:
        if task.date != day:
            continue
        if time_to_minutes(task.start_time) <= minute < time_to_minutes(task.end_time):
            return task
    return None


def default_selection(
    tasks: list[Task],
    selected_id: str | None,
    view_date: date,
    now: datetime,
) -> str | None:
    """Pick the task to select when the day's task list changes.

    Keeps a still-present selection, then prefers the task running now (only
    when viewing today), then the earliest task of the day.
    """
    if selected_id and _index_of(tasks, selected_id) >= 0:
        return selected_id
    if view_date == now.date():
        current = task_at(tasks, now)
        if current is not None:
            return current.id
    if tasks:
        return sort_by_start(tasks)[0].id
    return None


def step_selection(tasks: list[Task], selected_id: str | None, step: int) -> str | None:
    """Move *step* places through the day in start-time order, wrapping around."""
    if not tasks:
        return None
    ordered = sort_by_start(tasks)
    idx = _index_of(ordered, selected_id)
    if idx < 0:
        return ordered[0].id if step >= 0 else ordered[-1].id
    return ordered[(idx + step) % len(ordered)].id


def active_task(
    tasks: list[Task],
    selected_id: str | None,
    preview: DragPreview | None = None,
) -> Task | None:
    """The selected task, with times overridden by a live preview of it."""
    idx = _index_of(tasks, selected_id)
    if idx < 0:
        return None
    task = tasks[idx]
    if preview is not None and preview.task_id == task.id:
        return replace(task, start_time=preview.start_time, end_time=preview.end_time)
    return task


class SelectionController:
    """Holds the selected task id and the dial's current time."""

    def __init__(
        self,
        view_date: date,
        now: datetime,
        on_task_selected: SelectionCallback | None = None,
    ) -> None:
        self.view_date = view_date
        self.now = now
        self.on_task_selected = on_task_selected
        self.selected_id: str | None = None
        self._tasks: list[Task] = []

    @property
    def tasks(self) -> list[Task]:
        return self._tasks

    def refresh(self, tasks: list[Task], *, dragging: bool = False) -> str | None:
        """Adopt a new task list and re-apply the default-selection rule.

        While a drag is in progress the selection is left untouched.
        """
        self._tasks = sort_by_start(tasks)
        if dragging:
            return self.selected_id
        self._set(default_selection(self._tasks, self.selected_id, self.view_date, self.now))
        return self.selected_id

    def tick(self, now: datetime) -> None:
        self.now = now

    def select(self, task_id: str | None) -> str | None:
        if task_id is not None and _index_of(self._tasks, task_id) < 0:
            log.warn(f"Task {task_id} is not on {self.view_date.isoformat()}")
            return self.selected_id
        self._set(task_id)
        return self.selected_id

    def next(self) -> str | None:
        self._set(step_selection(self._tasks, self.selected_id, 1))
        return self.selected_id

    def previous(self) -> str | None:
        self._set(step_selection(self._tasks, self.selected_id, -1))
        return self.selected_id

    def active(self, preview: DragPreview | None = None) -> Task | None:
        return active_task(self._tasks, self.selected_id, preview)

    def _set(self, task_id: str | None) -> None:
        if task_id == self.selected_id:
            return
        self.selected_id = task_id
        log.debug(f"Selected task: {task_id}")
        if task_id is None or self.on_task_selected is None:
            return
        idx = _index_of(self._tasks, task_id)
        if idx >= 0:
            self.on_task_selected(self._tasks[idx])

"""Turn a day's tasks into arc segments on the AM and PM rings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from dayclock.dial.timemath import (
    NOON,
    DialGeometry,
    describe_arc,
    minutes_to_dial_degrees,
    time_to_minutes,
)
from dayclock.errors import InvalidTask
from dayclock.tasks.model import DEFAULT_TASK_COLOR, Project, Task

BASELINE_OPACITY = 0.2
PROGRESS_OPACITY_SPAN = 0.8


class Ring(str, Enum):
    AM = "am"
    PM = "pm"

    @property
    def is_pm(self) -> bool:
        return self is Ring.PM

    @classmethod
    def for_minute(cls, minutes: int) -> Ring:
        return cls.PM if minutes >= NOON else cls.AM


@dataclass(frozen=True)
class DragPreview:
    """Uncommitted time range shown for one task while it is dragged."""

    task_id: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class ArcSegment:
    task: Task
    ring: Ring
    start_minute: int
    end_minute: int
    path: str
    color: str
    opacity: float
    is_dragging: bool = False
    is_active: bool = False

    @property
    def task_id(self) -> str:
        return self.task.id


def completion_opacity(task: Task) -> float:
    """Stroke opacity for *task*: 1.0 when done, else rising with its checklist."""
    if task.completed:
        return 1.0
    done, total = task.checklist_progress()
    if total:
        return BASELINE_OPACITY + PROGRESS_OPACITY_SPAN * (done / total)
    return BASELINE_OPACITY


def effective_times(task: Task, preview: DragPreview | None) -> tuple[str, str]:
    if preview is not None and preview.task_id == task.id:
        return preview.start_time, preview.end_time
    return task.start_time, task.end_time


def split_interval(start: int, end: int) -> list[tuple[Ring, int, int]]:
    """Split ``[start, end)`` at noon into per-ring minute ranges."""
    if end <= start:
        raise InvalidTask(f"Interval {start}-{end} has no positive duration")
    if end <= NOON:
        return [(Ring.AM, start, end)]
    if start >= NOON:
        return [(Ring.PM, start, end)]
    return [(Ring.AM, start, NOON), (Ring.PM, NOON, end)]


def segment_degrees(start: int, end: int) -> tuple[float, float]:
    start_deg = minutes_to_dial_degrees(start)
    end_deg = minutes_to_dial_degrees(end)
    # A range ending on noon or midnight lands on 0 degrees.
    if end_deg <= start_deg:
        end_deg += 360.0
    return start_deg, end_deg


def is_task_active(task: Task, start: int, end: int, now: datetime | None) -> bool:
    if now is None or task.date != now.date().isoformat():
        return False
    minute = now.hour * 60 + now.minute
    return start <= minute < end


def build_segments(
    tasks: list[Task],
    projects: list[Project],
    now: datetime | None = None,
    *,
    preview: DragPreview | None = None,
    geometry: DialGeometry | None = None,
) -> list[ArcSegment]:
    """Build the renderable segments for one day.

    Segments of the task under *preview* come last so they draw on top.
    Tasks without a positive duration raise :class:`InvalidTask`; the
    editing surface is expected to have rejected them already.
    """
    geometry = geometry or DialGeometry()
    colors = {p.id: p.color for p in projects}
    segments: list[ArcSegment] = []

    for task in tasks:
        start_time, end_time = effective_times(task, preview)
        start = time_to_minutes(start_time)
        end = time_to_minutes(end_time)
        if end <= start:
            raise InvalidTask(
                f"Task {task.id} has no positive duration ({start_time}-{end_time})"
            )

        dragging = preview is not None and preview.task_id == task.id
        active = is_task_active(task, start, end, now)
        color = colors.get(task.project_id) or DEFAULT_TASK_COLOR
        opacity = completion_opacity(task)

        for ring, seg_start, seg_end in split_interval(start, end):
            start_deg, end_deg = segment_degrees(seg_start, seg_end)
            path = describe_arc(
                geometry.center_x,
                geometry.center_y,
                geometry.radius_for(ring.is_pm),
                start_deg,
                end_deg,
            )
            segments.append(
                ArcSegment(
                    task=task,
                    ring=ring,
                    start_minute=seg_start,
                    end_minute=seg_end,
                    path=path,
                    color=color,
                    opacity=opacity,
                    is_dragging=dragging,
                    is_active=active,
                )
            )

    # sorted() is stable, so non-dragged segments keep task order
    return sorted(segments, key=lambda seg: seg.is_dragging)

"""Shared fixtures for dayclock tests.

File handling in tests:
- Use tmp_path for any planner file so tests are isolated and cleaned up.
- Times are fixed datetimes on DAY; never depend on the wall clock.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from dayclock.store import MemoryTaskStore
from dayclock.tasks.model import ChecklistItem, Planner, Project, Task

DAY = date(2026, 10, 19)
DAY_ISO = DAY.isoformat()


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


def _make_task(
    id: str,
    start: str = "09:00",
    end: str = "10:00",
    *,
    title: str = "",
    project_id: str = "p1",
    day: str = DAY_ISO,
    items: list[bool] | None = None,
    completed: bool = False,
) -> Task:
    checklist = [
        ChecklistItem(id=f"{id}-i{n}", text=f"Item {n}", completed=done)
        for n, done in enumerate(items or [], 1)
    ]
    return Task(
        id=id,
        project_id=project_id,
        title=title or f"Task {id}",
        date=day,
        start_time=start,
        end_time=end,
        checklist=checklist,
        completed=completed,
    )


def _make_project(id: str = "p1", name: str = "", color: str = "#34d399") -> Project:
    return Project(id=id, name=name or f"Project {id}", color=color)


@pytest.fixture
def make_task():
    """Factory fixture that creates Task instances on DAY."""
    return _make_task


@pytest.fixture
def make_project():
    """Factory fixture that creates Project instances."""
    return _make_project


@pytest.fixture
def planner() -> Planner:
    """One project and three tasks: morning, straddling noon, afternoon."""
    return Planner(
        projects=[_make_project("p1", "Family", "#34d399")],
        tasks=[
            _make_task("t2", "13:00", "14:00", title="Swim"),
            _make_task("t1", "09:00", "10:00", title="School run", items=[True, True, False]),
            _make_task("t3", "11:30", "12:30", title="Lunch"),
            _make_task("other", "09:00", "10:00", day="2026-10-20"),
        ],
    )


@pytest.fixture
def store(planner: Planner) -> MemoryTaskStore:
    return MemoryTaskStore(planner)

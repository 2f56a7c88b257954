"""Task validation applied by the editing surface before tasks reach the dial."""

from __future__ import annotations

from datetime import date as _date

from dayclock import log
from dayclock.dial.timemath import time_to_minutes
from dayclock.errors import InvalidTimeFormat
from dayclock.tasks.model import Planner, Task

VALID_VERSIONS = (1,)


def validate_task(task: Task, planner: Planner | None = None) -> list[str]:
    """Return human-readable problems with *task*; empty when it is valid.

    Tasks never cross midnight, so ``start_time`` must be strictly before
    ``end_time`` on the same calendar day.
    """
    errors: list[str] = []
    label = task.id or "<new task>"

    if not task.id:
        errors.append("Task missing id")
    if not task.title.strip():
        errors.append(f"Task {label}: missing title")

    try:
        _date.fromisoformat(task.date)
    except ValueError:
        errors.append(f"Task {label}: invalid date {task.date!r} (expected YYYY-MM-DD)")

    start = end = None
    for attr in ("start_time", "end_time"):
        try:
            value = time_to_minutes(getattr(task, attr))
        except InvalidTimeFormat as exc:
            errors.append(f"Task {label}: {exc}")
            continue
        if attr == "start_time":
            start = value
        else:
            end = value
    if start is not None and end is not None and start >= end:
        errors.append(
            f"Task {label}: start {task.start_time} must be before end {task.end_time} "
            "(tasks cannot span midnight)"
        )

    seen: set[str] = set()
    for item in task.checklist:
        if item.id in seen:
            errors.append(f"Task {label}: duplicate checklist item id {item.id!r}")
        seen.add(item.id)

    if planner is not None and task.project_id and planner.get_project(task.project_id) is None:
        errors.append(f"Task {label}: project {task.project_id!r} not found")

    return errors


def validate(planner: Planner) -> list[str]:
    """Validate a whole planner document."""
    errors: list[str] = []

    if planner.version not in VALID_VERSIONS:
        errors.append(f"Unsupported planner version {planner.version}")

    project_ids: set[str] = set()
    for project in planner.projects:
        if project.id in project_ids:
            errors.append(f"Duplicate project id: {project.id}")
        project_ids.add(project.id)

    task_ids: set[str] = set()
    for task in planner.tasks:
        if task.id and task.id in task_ids:
            errors.append(f"Duplicate task id: {task.id}")
        task_ids.add(task.id)
        errors.extend(validate_task(task, planner))

    return errors


def validate_and_report(task: Task, planner: Planner | None = None) -> bool:
    """Log every validation problem for *task* and return whether it is valid."""
    errors = validate_task(task, planner)
    for err in errors:
        log.error(err)
    return not errors

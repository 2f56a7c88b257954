"""Task, Project and Planner data models shared by the stores and the dial."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from dayclock.dial.timemath import time_to_minutes
from dayclock.errors import InvalidTask

DEFAULT_TASK_COLOR = "#cbd5e1"

PRESET_COLORS: tuple[tuple[str, str], ...] = (
    ("Emerald", "#34d399"),
    ("Purple", "#a855f7"),
    ("Rose", "#f43f5e"),
    ("Indigo", "#6366f1"),
    ("Blue", "#3b82f6"),
    ("Amber", "#f59e0b"),
    ("Violet", "#8b5cf6"),
    ("Pink", "#ec4899"),
    ("Sky", "#0ea5e9"),
    ("Teal", "#14b8a6"),
    ("Lime", "#84cc16"),
    ("Orange", "#f97316"),
    ("Slate", "#64748b"),
)


def new_id() -> str:
    return uuid.uuid4().hex[:12]


def _records(value: Any, what: str) -> list[dict[str, Any]]:
    """Return *value* as a list of JSON objects, or raise :class:`InvalidTask`."""
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise InvalidTask(f"{what} must be a list of objects")
    return value


class ContentType(str, Enum):
    VIDEO = "video"
    STORY = "story"
    IMAGE = "image"


@dataclass
class ChecklistItem:
    id: str
    text: str = ""
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChecklistItem:
        return cls(
            id=str(data.get("id", "")),
            text=str(data.get("text", "")),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class ContentIdea:
    id: str
    type: ContentType = ContentType.VIDEO
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type.value, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentIdea:
        return cls(
            id=str(data.get("id", "")),
            type=ContentType(data.get("type", ContentType.VIDEO.value)),
            text=str(data.get("text", "")),
        )


@dataclass
class Project:
    id: str
    name: str = ""
    color: str = DEFAULT_TASK_COLOR
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "color": self.color}
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            color=str(data.get("color") or DEFAULT_TASK_COLOR),
            description=str(data.get("description") or ""),
        )


@dataclass
class Task:
    id: str
    project_id: str = ""
    title: str = ""
    date: str = ""
    start_time: str = "09:00"
    end_time: str = "10:00"
    description: str = ""
    checklist: list[ChecklistItem] = field(default_factory=list)
    content_ideas: list[ContentIdea] = field(default_factory=list)
    completed: bool = False

    # ── derived values ───────────────────────────────────────────

    @property
    def start_minute(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minute(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def duration(self) -> int:
        return self.end_minute - self.start_minute

    def checklist_progress(self) -> tuple[int, int]:
        """Return ``(completed_items, total_items)``."""
        done = sum(1 for item in self.checklist if item.completed)
        return done, len(self.checklist)

    def get_item(self, item_id: str) -> ChecklistItem | None:
        for item in self.checklist:
            if item.id == item_id:
                return item
        return None

    # ── mutations (return new tasks) ─────────────────────────────

    def with_times(self, start_time: str, end_time: str) -> Task:
        return replace(self, start_time=start_time, end_time=end_time)

    def with_checklist(self, checklist: list[ChecklistItem]) -> Task:
        """Replace the checklist and re-derive ``completed`` from it.

        An emptied checklist keeps whatever completion was set manually.
        """
        if not checklist:
            return replace(self, checklist=[])
        completed = all(item.completed for item in checklist)
        return replace(self, checklist=checklist, completed=completed)

    def toggle_item(self, item_id: str) -> Task:
        if self.get_item(item_id) is None:
            raise InvalidTask(f"Task {self.id} has no checklist item {item_id!r}")
        checklist = [
            replace(item, completed=not item.completed) if item.id == item_id else replace(item)
            for item in self.checklist
        ]
        return self.with_checklist(checklist)

    def add_item(self, text: str, item_id: str = "") -> Task:
        item = ChecklistItem(id=item_id or new_id(), text=text)
        return self.with_checklist([replace(i) for i in self.checklist] + [item])

    def remove_item(self, item_id: str) -> Task:
        checklist = [replace(i) for i in self.checklist if i.id != item_id]
        if len(checklist) == len(self.checklist):
            raise InvalidTask(f"Task {self.id} has no checklist item {item_id!r}")
        return self.with_checklist(checklist)

    def mark_completed(self, completed: bool = True) -> Task:
        """Set completion by hand; only allowed while the checklist is empty."""
        if self.checklist:
            raise InvalidTask(
                f"Task {self.id} completion follows its checklist and cannot be set directly"
            )
        return replace(self, completed=completed)

    def add_idea(
        self, text: str, kind: ContentType = ContentType.VIDEO, idea_id: str = ""
    ) -> Task:
        idea = ContentIdea(id=idea_id or new_id(), type=kind, text=text)
        return replace(self, content_ideas=[replace(i) for i in self.content_ideas] + [idea])

    def remove_idea(self, idea_id: str) -> Task:
        ideas = [replace(i) for i in self.content_ideas if i.id != idea_id]
        if len(ideas) == len(self.content_ideas):
            raise InvalidTask(f"Task {self.id} has no content idea {idea_id!r}")
        return replace(self, content_ideas=ideas)

    # ── wire format ──────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "checklist": [item.to_dict() for item in self.checklist],
            "contentIdeas": [idea.to_dict() for idea in self.content_ideas],
            "completed": self.completed,
        }
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        return cls(
            id=str(data.get("id", "")),
            project_id=str(data.get("projectId", "")),
            title=str(data.get("title", "")),
            date=str(data.get("date", "")),
            start_time=str(data.get("startTime", "")),
            end_time=str(data.get("endTime", "")),
            description=str(data.get("description") or ""),
            checklist=[
                ChecklistItem.from_dict(i) for i in _records(data.get("checklist"), "checklist")
            ],
            content_ideas=[
                ContentIdea.from_dict(i)
                for i in _records(data.get("contentIdeas"), "contentIdeas")
            ],
            completed=bool(data.get("completed", False)),
        )


def sort_by_start(tasks: list[Task]) -> list[Task]:
    """Order tasks by start time; ``HH:mm`` strings sort chronologically."""
    return sorted(tasks, key=lambda t: t.start_time)


@dataclass
class Planner:
    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    version: int = 1

    def get_task(self, task_id: str) -> Task | None:
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None

    def get_project(self, project_id: str) -> Project | None:
        for p in self.projects:
            if p.id == project_id:
                return p
        return None

    def tasks_for_date(self, day: str) -> list[Task]:
        return sort_by_start([t for t in self.tasks if t.date == day])

    def replace_task(self, task: Task) -> bool:
        for i, t in enumerate(self.tasks):
            if t.id == task.id:
                self.tasks[i] = task
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "projects": [p.to_dict() for p in self.projects],
            "tasks": [t.to_dict() for t in self.tasks],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Planner:
        return cls(
            projects=[Project.from_dict(p) for p in _records(data.get("projects"), "projects")],
            tasks=[Task.from_dict(t) for t in _records(data.get("tasks"), "tasks")],
            version=int(data.get("version", 1)),
        )

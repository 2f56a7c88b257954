"""Task store backends: in-memory, local JSON file, and REST API.

The dial only needs ``list_tasks_for_date`` and ``update_task``; the rest of
the protocol serves the CLI's editing commands.
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from dayclock import log
from dayclock.config import Config
from dayclock.errors import NotFound, StoreError, error_for_status
from dayclock.tasks.io import load_planner, save_planner
from dayclock.tasks.model import Planner, Project, Task, sort_by_start


class TaskStore(Protocol):
    def list_tasks_for_date(self, day: str) -> list[Task]: ...

    def get_task(self, task_id: str) -> Task | None: ...

    def update_task(self, task: Task) -> Task: ...

    def list_projects(self) -> list[Project]: ...

    def create_task(self, task: Task) -> Task: ...

    def delete_task(self, task_id: str) -> None: ...

    def create_project(self, project: Project) -> Project: ...

    def delete_project(self, project_id: str) -> None: ...


class MemoryTaskStore:
    """Store backed by an in-process :class:`Planner`."""

    def __init__(self, planner: Planner | None = None) -> None:
        self.planner = planner or Planner()

    def list_tasks_for_date(self, day: str) -> list[Task]:
        return [replace(t) for t in self.planner.tasks_for_date(day)]

    def get_task(self, task_id: str) -> Task | None:
        task = self.planner.get_task(task_id)
        return replace(task) if task is not None else None

    def update_task(self, task: Task) -> Task:
        if not self.planner.replace_task(task):
            raise NotFound(f"Task {task.id} not found")
        self._persist()
        return task

    def list_projects(self) -> list[Project]:
        return list(self.planner.projects)

    def create_task(self, task: Task) -> Task:
        if self.planner.get_task(task.id) is not None:
            raise StoreError(f"Task {task.id} already exists")
        self.planner.tasks.append(task)
        self._persist()
        return task

    def delete_task(self, task_id: str) -> None:
        before = len(self.planner.tasks)
        self.planner.tasks = [t for t in self.planner.tasks if t.id != task_id]
        if len(self.planner.tasks) == before:
            raise NotFound(f"Task {task_id} not found")
        self._persist()

    def create_project(self, project: Project) -> Project:
        if self.planner.get_project(project.id) is not None:
            raise StoreError(f"Project {project.id} already exists")
        self.planner.projects.append(project)
        self._persist()
        return project

    def delete_project(self, project_id: str) -> None:
        before = len(self.planner.projects)
        self.planner.projects = [p for p in self.planner.projects if p.id != project_id]
        if len(self.planner.projects) == before:
            raise NotFound(f"Project {project_id} not found")
        self._persist()

    def _persist(self) -> None:
        pass


class JsonFileTaskStore(MemoryTaskStore):
    """Planner kept in a JSON file and rewritten after every mutation."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(load_planner(path))

    def _persist(self) -> None:
        try:
            save_planner(self.path, self.planner)
        except OSError as exc:
            raise StoreError(f"Could not write {self.path}: {exc}") from exc


class HttpTaskStore:
    """Client for the planner REST API (``/tasks`` and ``/projects``)."""

    def __init__(self, base_url: str, token: str = "", *, timeout: float = 15.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def list_tasks_for_date(self, day: str) -> list[Task]:
        return sort_by_start([t for t in self._fetch_tasks() if t.date == day])

    def get_task(self, task_id: str) -> Task | None:
        for task in self._fetch_tasks():
            if task.id == task_id:
                return task
        return None

    def _fetch_tasks(self) -> list[Task]:
        data = self._request("GET", "/tasks") or []
        if not isinstance(data, list) or not all(isinstance(i, dict) for i in data):
            raise StoreError("GET /tasks returned an unexpected payload")
        try:
            return [Task.from_dict(item) for item in data]
        except ValueError as exc:
            raise StoreError(f"GET /tasks returned a malformed task: {exc}") from exc

    def update_task(self, task: Task) -> Task:
        data = self._request("PUT", f"/tasks/{quote(task.id, safe='')}", task.to_dict())
        return Task.from_dict(data) if isinstance(data, dict) else task

    def list_projects(self) -> list[Project]:
        data = self._request("GET", "/projects")
        return [Project.from_dict(item) for item in data or []]

    def create_task(self, task: Task) -> Task:
        data = self._request("POST", "/tasks", task.to_dict())
        return Task.from_dict(data) if isinstance(data, dict) else task

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/tasks/{quote(task_id, safe='')}")

    def create_project(self, project: Project) -> Project:
        data = self._request("POST", "/projects", project.to_dict())
        return Project.from_dict(data) if isinstance(data, dict) else project

    def delete_project(self, project_id: str) -> None:
        self._request("DELETE", f"/projects/{quote(project_id, safe='')}")

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        payload = json.dumps(body).encode("utf-8") if body is not None else None
        req = Request(url, data=payload, headers=self._headers(), method=method)
        log.debug(f"{method} {url}")
        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except HTTPError as exc:
            raise error_for_status(exc.code, f"{method} {path} failed: HTTP {exc.code}") from exc
        except (URLError, OSError) as exc:
            raise StoreError(f"{method} {path} failed: {exc}") from exc
        if not raw:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise StoreError(f"{method} {path} returned invalid JSON") from exc


def open_store(cfg: Config) -> TaskStore:
    """Use the REST API when one is configured, otherwise the local JSON file."""
    if cfg.use_local_store:
        log.debug(f"Using local store {cfg.store_file}")
        return JsonFileTaskStore(Path(cfg.store_file))
    log.debug(f"Using API store {cfg.api_url}")
    return HttpTaskStore(cfg.api_url, cfg.api_token)

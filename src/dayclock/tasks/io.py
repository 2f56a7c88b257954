"""Load and save the planner JSON document."""

from __future__ import annotations

from pathlib import Path

from dayclock import log
from dayclock.errors import StoreError
from dayclock.io_utils import read_json, write_json
from dayclock.tasks.model import Planner


def load_planner(path: Path) -> Planner:
    """Read *path*; a missing file is an empty planner."""
    if not path.is_file():
        log.debug(f"No planner file at {path}; starting empty")
        return Planner()
    try:
        data = read_json(path)
    except ValueError as exc:
        raise StoreError(f"Planner file {path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise StoreError(f"Planner file {path} must contain a JSON object")
    try:
        return Planner.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise StoreError(f"Planner file {path} is malformed: {exc}") from exc


def save_planner(path: Path, planner: Planner) -> None:
    write_json(path, planner.to_dict())
    log.debug(f"Saved {len(planner.tasks)} task(s) to {path}")

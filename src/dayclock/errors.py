"""Error types shared by the time math, dial engine and task stores."""

from __future__ import annotations

UNAUTHORIZED_STATUSES: tuple[int, ...] = (401, 403)
NOT_FOUND_STATUSES: tuple[int, ...] = (404,)


class DayclockError(Exception):
    """Base class for every error raised by dayclock."""


class InvalidTimeFormat(DayclockError, ValueError):
    """A clock time did not match 24-hour ``HH:mm``."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid time {value!r}: expected 24-hour HH:mm")
        self.value = value


class InvalidTask(DayclockError, ValueError):
    """A task violates a data-model contract (e.g. non-positive duration)."""


class DragError(DayclockError):
    """An operation was not valid in the drag state machine's current phase."""


class StoreError(DayclockError):
    """The task store failed to read or write."""


class NotFound(StoreError):
    """The referenced task or project no longer exists in the store."""


class Unauthorized(StoreError):
    """The caller lacks rights for the store operation."""


def error_for_status(status: int, message: str) -> StoreError:
    """Map an HTTP status code onto the matching :class:`StoreError` subtype."""
    if status in UNAUTHORIZED_STATUSES:
        return Unauthorized(message)
    if status in NOT_FOUND_STATUSES:
        return NotFound(message)
    return StoreError(message)

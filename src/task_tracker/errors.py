# src/task_tracker/errors.py

"""
Error kinds raised by the task core.

Callers branch on the class, never on the message:
- ValidationError: bad or missing input (empty id, oversized title, missing patch)
- NotFoundError: no task with the given id
- PersistenceError: the backing file could not be written
"""

from __future__ import annotations


class TaskTrackerError(Exception):
    """Base class for every error the task core raises on purpose."""


class ValidationError(TaskTrackerError, ValueError):
    pass


class NotFoundError(TaskTrackerError, LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with ID '{task_id}' not found")
        self.task_id = task_id


class PersistenceError(TaskTrackerError, RuntimeError):
    pass

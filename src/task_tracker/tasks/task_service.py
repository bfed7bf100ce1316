# src/task_tracker/tasks/task_service.py

from __future__ import annotations

import logging
from typing import Any

from ..core.ports import TaskRepo
from ..errors import ValidationError
from .task_models import UNSET, Category, Priority, Status, Task, TaskPatch

logger = logging.getLogger(__name__)

# Status goes last so an explicit status wins over progress-driven transitions.
_APPLY_ORDER = (
    "title",
    "description",
    "priority",
    "category",
    "due_date",
    "tags",
    "notes",
    "estimated_hours",
    "progress_percentage",
    "status",
)


def _require_id(task_id: Any) -> str:
    if not isinstance(task_id, str) or not task_id.strip():
        raise ValidationError("Task ID cannot be null or empty")
    return task_id


def _apply(task: Task, values: dict[str, Any]) -> None:
    for name in _APPLY_ORDER:
        if name not in values:
            continue
        value = values[name]
        if name == "status" and value is Status.COMPLETED:
            task.mark_as_completed()
        elif name == "status" and value is Status.IN_PROGRESS:
            task.mark_as_in_progress()
        else:
            setattr(task, name, value)


class TaskService:
    """
    Entry points used by the command layer.

    Turns partial TaskPatch data into Task mutations and asks the repo to
    persist. Never touches the backing file itself.
    """

    def __init__(self, store: TaskRepo) -> None:
        self._store = store

    def create_task(self, patch: TaskPatch | None) -> Task:
        if patch is None:
            raise ValidationError("Task data cannot be null")
        if patch.title is UNSET or patch.title is None:
            raise ValidationError("Title is required")
        values = patch.normalized()

        task = Task(values.pop("title"))
        _apply(task, values)
        self._store.save(task)
        logger.info("Task created id=%s title=%r", task.id, task.title)
        return task

    def update_task(self, task_id: str, patch: TaskPatch | None) -> Task:
        """
        Apply `patch` to an existing task.

        The whole patch is validated before any field changes, so a bad field
        leaves the task exactly as it was.
        """
        _require_id(task_id)
        if patch is None:
            raise ValidationError("Task data cannot be null")

        task = self._store.find_by_id(task_id)
        values = patch.normalized()
        _apply(task, values)
        self._store.save(task)
        logger.info("Task updated id=%s fields=%s", task.id, ",".join(values) or "-")
        return task

    def delete_task(self, task_id: str) -> None:
        _require_id(task_id)
        self._store.delete_by_id(task_id)
        logger.info("Task deleted id=%s", task_id)

    def read_available_tasks(
        self,
        *,
        status: Status | None = None,
        priority: Priority | None = None,
        category: Category | None = None,
    ) -> list[Task]:
        tasks = self._store.fetch_all()
        if status is not None:
            tasks = [t for t in tasks if t.status is status]
        if priority is not None:
            tasks = [t for t in tasks if t.priority is priority]
        if category is not None:
            tasks = [t for t in tasks if t.category is category]
        return tasks

    def find_task_by_id(self, task_id: str) -> Task:
        _require_id(task_id)
        return self._store.find_by_id(task_id)

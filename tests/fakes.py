# tests/fakes.py

from __future__ import annotations

from task_tracker.errors import NotFoundError
from task_tracker.tasks.task_models import Task


class FakeTaskRepo:
    """
    In-memory TaskRepo used for service unit tests.

    Records every call so tests can assert the store was (or was not) touched.
    """

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self.tasks = {t.id: t for t in tasks or []}
        self.calls: list[tuple[str, str | None]] = []

    def save(self, task: Task) -> None:
        self.calls.append(("save", task.id))
        self.tasks[task.id] = task

    def find_by_id(self, task_id: str) -> Task:
        self.calls.append(("find_by_id", task_id))
        try:
            return self.tasks[task_id]
        except KeyError:
            raise NotFoundError(task_id) from None

    def delete_by_id(self, task_id: str) -> None:
        self.calls.append(("delete_by_id", task_id))
        if self.tasks.pop(task_id, None) is None:
            raise NotFoundError(task_id)

    def fetch_all(self) -> list[Task]:
        self.calls.append(("fetch_all", None))
        return list(self.tasks.values())

# src/task_tracker/core/ports.py

"""
Ports (interfaces) used by the core.

TaskService depends on this Protocol instead of the concrete JSON store,
so tests can hand it an in-memory fake.
"""

from __future__ import annotations

from typing import Protocol

from ..tasks.task_models import Task


class TaskRepo(Protocol):
    def save(self, task: Task) -> None: ...
    def find_by_id(self, task_id: str) -> Task: ...
    def delete_by_id(self, task_id: str) -> None: ...
    def fetch_all(self) -> list[Task]: ...

# src/task_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..errors import NotFoundError, PersistenceError, ValidationError
from .task_models import Category, Priority, Status, Task

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

# fromisoformat() takes at most six fractional digits on every supported Python.
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


# ---- record codec ----


def _format_ts(value: datetime | None) -> str | None:
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else None


def _parse_ts(raw: Any) -> datetime | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValueError(f"timestamp must be a string, got {raw!r}")
    try:
        return datetime.strptime(raw, TIMESTAMP_FORMAT)
    except ValueError:
        # Older files carry other ISO-8601 precisions (e.g. nanoseconds).
        dt = datetime.fromisoformat(_EXTRA_FRACTION.sub(r"\1", raw, count=1))
    # Tasks hold naive local time; an explicit offset is converted to it.
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def _parse_date(raw: Any) -> date | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValueError(f"date must be a string, got {raw!r}")
    # A legacy date-time deadline keeps only its date part.
    return date.fromisoformat(raw[:10])


def _enum_field(rec: dict[str, Any], key: str, enum_cls: Any, default: Any) -> Any:
    raw = rec.get(key)
    value = enum_cls.from_record(raw, None)
    if value is None:
        if raw is not None:
            logger.warning("Unknown %s %r in task %s; using %s", key, raw, rec.get("id"), default)
        return default
    return value


def task_to_record(task: Task) -> dict[str, Any]:
    """Serialize a task; optional fields that are unset are left out entirely."""
    rec: dict[str, Any] = {"id": task.id, "title": task.title}
    if task.description is not None:
        rec["description"] = task.description
    rec["priority"] = task.priority.value
    rec["status"] = task.status.value
    if task.category is not None:
        rec["category"] = task.category.value
    rec["createdAt"] = _format_ts(task.created_at)
    rec["updatedAt"] = _format_ts(task.updated_at)
    if task.due_date is not None:
        rec["dueDate"] = task.due_date.isoformat()
    if task.completed_at is not None:
        rec["completedAt"] = _format_ts(task.completed_at)
    if task.tags:
        rec["tags"] = task.tags
    if task.notes is not None:
        rec["notes"] = task.notes
    if task.estimated_hours is not None:
        rec["estimatedHours"] = task.estimated_hours
    rec["progressPercentage"] = task.progress_percentage
    return rec


def task_from_record(rec: Any) -> Task:
    """
    Rebuild a task from a stored record.

    Unknown keys are ignored. Raises ValueError (ValidationError included) when
    the record cannot represent a valid task.
    """
    if not isinstance(rec, dict):
        raise ValueError(f"task record must be an object, got {type(rec).__name__}")

    task_id = rec.get("id")
    if not isinstance(task_id, str) or not task_id.strip():
        raise ValueError("task record has no id")

    return Task(
        rec.get("title"),
        description=rec.get("description"),
        priority=_enum_field(rec, "priority", Priority, Priority.MEDIUM),
        category=_enum_field(rec, "category", Category, None),
        task_id=task_id,
        status=_enum_field(rec, "status", Status, Status.PENDING),
        created_at=_parse_ts(rec.get("createdAt")),
        updated_at=_parse_ts(rec.get("updatedAt")),
        due_date=_parse_date(rec.get("dueDate")),
        completed_at=_parse_ts(rec.get("completedAt")),
        tags=rec.get("tags"),
        notes=rec.get("notes"),
        estimated_hours=rec.get("estimatedHours"),
        progress_percentage=rec.get("progressPercentage") or 0,
    )


class TaskStore:
    """
    JSON-file task store.

    The in-memory map (keyed by id) is authoritative during a run; the file is
    its durable mirror:
    - load() reads the whole file once and never raises
    - every save()/delete_by_id() rewrites the whole file via tmp + os.replace

    Single process only: two instances on one file means last writer wins.
    """

    def __init__(self, path: str | Path = "tasks.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._tasks: dict[str, Task] = {}
        self.load()
        logger.info("TaskStore ready path=%s total=%s", self._path, self.count_tasks())

    @property
    def path(self) -> Path:
        return self._path

    # ---- low-level helpers ----

    @staticmethod
    def _require_id(task_id: Any) -> str:
        if not isinstance(task_id, str) or not task_id.strip():
            raise ValidationError("Task ID cannot be null or empty")
        return task_id

    def _persist(self) -> None:
        records = [task_to_record(t) for t in self._tasks.values()]
        tmp = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(records, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to save tasks to {self._path}: {e}") from e
        logger.debug("Saved %d tasks to %s", len(records), self._path)

    # ---- public API ----

    def load(self) -> None:
        """
        Replace the in-memory map with the file contents.

        Missing/empty file -> empty store. Unreadable or malformed file -> logged,
        empty store. A single bad record is skipped, the rest still load.
        """
        self._tasks = {}
        try:
            if not self._path.exists() or self._path.stat().st_size == 0:
                logger.debug("No tasks file at %s; starting empty.", self._path)
                return
            data = json.loads(self._path.read_text("utf-8"))
        except Exception:
            logger.exception("Failed to load tasks from %s; starting empty.", self._path)
            return

        if not isinstance(data, list):
            logger.error(
                "Tasks file %s holds %s instead of a list; starting empty.",
                self._path,
                type(data).__name__,
            )
            return

        for i, rec in enumerate(data):
            try:
                task = task_from_record(rec)
            except (ValueError, TypeError):
                logger.warning("Skipping malformed task record #%d in %s", i, self._path, exc_info=True)
                continue
            if task.id in self._tasks:
                logger.warning("Duplicate task id %s in %s; keeping the later one", task.id, self._path)
            self._tasks[task.id] = task

        logger.info("Loaded %d tasks from %s", len(self._tasks), self._path)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def save(self, task: Task | None) -> None:
        if task is None:
            raise ValidationError("Task cannot be null")
        self._require_id(task.id)

        self._tasks[task.id] = task
        self._persist()
        logger.debug("Task saved id=%s status=%s", task.id, task.status.value)

    def find_by_id(self, task_id: str) -> Task:
        self._require_id(task_id)
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    def delete_by_id(self, task_id: str) -> None:
        self._require_id(task_id)
        if self._tasks.pop(task_id, None) is None:
            raise NotFoundError(task_id)
        self._persist()
        logger.debug("Task deleted id=%s", task_id)

    def fetch_all(self) -> list[Task]:
        return list(self._tasks.values())

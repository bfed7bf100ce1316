# src/task_tracker/tasks/task_models.py

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, fields
from datetime import date, datetime, time, timedelta
from enum import StrEnum
from typing import Any, Self

from ..errors import ValidationError

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 200

# "Leave this field alone" marker for TaskPatch (None means "clear").
UNSET: Any = object()


class _TaskEnum(StrEnum):
    """
    Base for the task enums.

    Member values are the upper-case names; they are also what gets persisted.
    """

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def parse(cls, raw: Any) -> Self:
        """Accept a member or user text like "in-progress" / "In Progress"."""
        if isinstance(raw, cls):
            return raw
        key = str(raw or "").strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(m.value.lower() for m in cls)
            raise ValidationError(
                f"Unknown {cls.__name__.lower()}: {raw!r} (expected one of: {choices})"
            ) from None

    @classmethod
    def from_record(cls, raw: Any, default: Any) -> Any:
        """Lenient variant for stored data: unknown values map to `default`."""
        if raw is None:
            return default
        try:
            return cls(str(raw).strip().upper())
        except ValueError:
            return default


class Priority(_TaskEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def level(self) -> int:
        return list(type(self)).index(self) + 1


class Status(_TaskEnum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Category(_TaskEnum):
    WORK = "WORK"
    PERSONAL = "PERSONAL"
    STUDY = "STUDY"
    HEALTH = "HEALTH"
    FITNESS = "FITNESS"
    SHOPPING = "SHOPPING"
    TRAVEL = "TRAVEL"
    HOME = "HOME"
    FINANCE = "FINANCE"
    SOCIAL = "SOCIAL"
    HOBBY = "HOBBY"
    OTHER = "OTHER"


# ---- field validators (shared by Task setters and TaskPatch) ----


def _as_int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{what} must be a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{what} must be a whole number, got {value!r}")


def validate_title(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError("Title must be a string")
    if not value.strip():
        raise ValidationError("Title cannot be empty")
    if len(value) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title cannot exceed {MAX_TITLE_LENGTH} characters")
    return value


def validate_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("Description must be a string")
    if len(value) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters")
    return value


def validate_notes(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise ValidationError("Notes must be a string")


def validate_due_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Due date must be a YYYY-MM-DD date, got {value!r}")


def validate_estimated_hours(value: Any) -> int | None:
    if value is None:
        return None
    hours = _as_int(value, "Estimated hours")
    if hours < 0:
        raise ValidationError("Estimated hours cannot be negative")
    return hours


def validate_progress(value: Any) -> int:
    progress = _as_int(value, "Progress percentage")
    if not 0 <= progress <= 100:
        raise ValidationError("Progress percentage must be between 0 and 100")
    return progress


def normalize_tags(value: Any) -> list[str]:
    """Strip, drop blanks and de-duplicate (first occurrence wins)."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, Iterable):
        raise ValidationError("Tags must be a list of strings")
    out: list[str] = []
    for tag in value:
        if not isinstance(tag, str):
            raise ValidationError(f"Tag must be a string, got {tag!r}")
        tag = tag.strip()
        if tag and tag not in out:
            out.append(tag)
    return out


class Task:
    """
    One tracked unit of work.

    Field setters validate before assigning, so a rejected write leaves the
    task unchanged. Status changes carry side effects:
    - COMPLETED stamps completed_at and sets progress to 100
    - CANCELLED clears completed_at
    - anything else leaves completed_at as it is

    Equality and hashing use the id only.
    """

    __slots__ = (
        "_id",
        "_title",
        "_description",
        "_priority",
        "_status",
        "_category",
        "_created_at",
        "_updated_at",
        "_due_date",
        "_completed_at",
        "_tags",
        "_notes",
        "_estimated_hours",
        "_progress_percentage",
    )

    def __init__(
        self,
        title: str,
        description: str | None = None,
        priority: Priority = Priority.MEDIUM,
        category: Category | None = None,
        *,
        task_id: str | None = None,
        status: Status = Status.PENDING,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        due_date: date | None = None,
        completed_at: datetime | None = None,
        tags: Iterable[str] | None = None,
        notes: str | None = None,
        estimated_hours: int | None = None,
        progress_percentage: int = 0,
    ) -> None:
        # Keyword-only arguments restore stored state as-is (no side effects).
        self._id = str(uuid.uuid4()) if task_id is None else task_id
        self._title = validate_title(title)
        self._description = validate_description(description)
        self._priority = Priority.parse(priority)
        self._status = Status.parse(status)
        self._category = None if category is None else Category.parse(category)
        self._created_at = created_at or datetime.now()
        self._updated_at = updated_at or self._created_at
        self._due_date = validate_due_date(due_date)
        self._completed_at = completed_at
        self._tags = normalize_tags(tags)
        self._notes = validate_notes(notes)
        self._estimated_hours = validate_estimated_hours(estimated_hours)
        self._progress_percentage = validate_progress(progress_percentage)

    def _touch(self) -> None:
        self._updated_at = datetime.now()

    # ---- identity / timestamps (read-only) ----

    @property
    def id(self) -> str:
        return self._id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def completed_at(self) -> datetime | None:
        return self._completed_at

    # ---- validated fields ----

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self._title = validate_title(value)
        self._touch()

    @property
    def description(self) -> str | None:
        return self._description

    @description.setter
    def description(self, value: str | None) -> None:
        self._description = validate_description(value)
        self._touch()

    @property
    def priority(self) -> Priority:
        return self._priority

    @priority.setter
    def priority(self, value: Priority) -> None:
        self._priority = Priority.parse(value)
        self._touch()

    @property
    def category(self) -> Category | None:
        return self._category

    @category.setter
    def category(self, value: Category | None) -> None:
        self._category = None if value is None else Category.parse(value)
        self._touch()

    @property
    def status(self) -> Status:
        return self._status

    @status.setter
    def status(self, value: Status) -> None:
        status = Status.parse(value)
        self._status = status
        self._touch()

        if status is Status.COMPLETED:
            self._completed_at = datetime.now()
            self._progress_percentage = 100
        elif status is Status.CANCELLED:
            self._completed_at = None

    @property
    def due_date(self) -> date | None:
        return self._due_date

    @due_date.setter
    def due_date(self, value: date | None) -> None:
        self._due_date = validate_due_date(value)
        self._touch()

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    @tags.setter
    def tags(self, value: Iterable[str] | None) -> None:
        self._tags = normalize_tags(value)
        self._touch()

    @property
    def notes(self) -> str | None:
        return self._notes

    @notes.setter
    def notes(self, value: str | None) -> None:
        self._notes = validate_notes(value)
        self._touch()

    @property
    def estimated_hours(self) -> int | None:
        return self._estimated_hours

    @estimated_hours.setter
    def estimated_hours(self, value: int | None) -> None:
        self._estimated_hours = validate_estimated_hours(value)
        self._touch()

    @property
    def progress_percentage(self) -> int:
        return self._progress_percentage

    @progress_percentage.setter
    def progress_percentage(self, value: int) -> None:
        progress = validate_progress(value)
        self._progress_percentage = progress
        self._touch()

        if progress == 100 and self._status is not Status.COMPLETED:
            self.status = Status.COMPLETED
        elif progress > 0 and self._status is Status.PENDING:
            self.status = Status.IN_PROGRESS

    # ---- behaviour ----

    def add_tag(self, tag: str) -> None:
        merged = normalize_tags([*self._tags, tag])
        if merged != self._tags:
            self._tags = merged
            self._touch()

    def remove_tag(self, tag: str) -> None:
        tag = tag.strip()
        if tag in self._tags:
            self._tags.remove(tag)
            self._touch()

    def mark_as_completed(self) -> None:
        self.status = Status.COMPLETED

    def mark_as_in_progress(self) -> None:
        self.status = Status.IN_PROGRESS
        if self._progress_percentage == 0:
            self.progress_percentage = 1

    def is_completed(self) -> bool:
        return self._status is Status.COMPLETED

    def is_overdue(self, today: date | None = None) -> bool:
        if self._due_date is None or self.is_completed():
            return False
        today = today or date.today()
        return today > self._due_date

    def is_due_soon(self, hours: int, now: datetime | None = None) -> bool:
        """True if the due day starts within `hours` from `now` (or already has)."""
        if self._due_date is None or self.is_completed():
            return False
        now = now or datetime.now()
        return now + timedelta(hours=hours) > datetime.combine(self._due_date, time.min)

    # ---- identity semantics ----

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Task(id={self._id!r}, title={self._title!r}, priority={self._priority.value}, "
            f"status={self._status.value}, category={self._category}, due_date={self._due_date})"
        )


_CLEARABLE = frozenset({"description", "category", "due_date", "notes", "estimated_hours"})

_NORMALIZERS: dict[str, Any] = {
    "title": validate_title,
    "description": validate_description,
    "priority": Priority.parse,
    "category": Category.parse,
    "status": Status.parse,
    "due_date": validate_due_date,
    "tags": normalize_tags,
    "notes": validate_notes,
    "estimated_hours": validate_estimated_hours,
    "progress_percentage": validate_progress,
}


@dataclass(frozen=True, slots=True)
class TaskPatch:
    """
    Partial task data for create/update.

    Every field defaults to UNSET ("leave unchanged"). None means "clear" and is
    accepted only for optional fields. Values may be given as text (enum names,
    ISO dates, numbers, comma-separated tags); normalized() coerces them.
    """

    title: Any = UNSET
    description: Any = UNSET
    priority: Any = UNSET
    category: Any = UNSET
    status: Any = UNSET
    due_date: Any = UNSET
    tags: Any = UNSET
    notes: Any = UNSET
    estimated_hours: Any = UNSET
    progress_percentage: Any = UNSET

    def provided(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not UNSET]

    def normalized(self) -> dict[str, Any]:
        """Validate every provided field; raise before anything is applied."""
        out: dict[str, Any] = {}
        for name in self.provided():
            raw = getattr(self, name)
            if raw is None:
                if name not in _CLEARABLE:
                    raise ValidationError(f"{name.replace('_', ' ').capitalize()} cannot be cleared")
                out[name] = None
                continue
            out[name] = _NORMALIZERS[name](raw)
        return out

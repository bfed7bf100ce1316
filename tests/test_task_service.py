# tests/test_task_service.py

from __future__ import annotations

from datetime import date

import pytest

from task_tracker.errors import NotFoundError, ValidationError
from task_tracker.tasks.task_models import Category, Priority, Status, Task, TaskPatch
from task_tracker.tasks.task_service import TaskService
from task_tracker.tasks.task_store import TaskStore

from .fakes import FakeTaskRepo


def test_create_buy_milk(service: TaskService) -> None:
    service.create_task(TaskPatch(title="Buy milk"))

    [task] = service.read_available_tasks()
    assert task.title == "Buy milk"
    assert task.status is Status.PENDING
    assert task.priority is Priority.MEDIUM


@pytest.mark.parametrize("length", [1, 37, 100])
def test_valid_titles_are_created_and_found(service: TaskService, length: int) -> None:
    title = "t" * length
    created = service.create_task(TaskPatch(title=title))

    assert service.find_task_by_id(created.id).title == title


def test_oversized_title_is_rejected_and_nothing_persisted(service: TaskService, store: TaskStore) -> None:
    with pytest.raises(ValidationError):
        service.create_task(TaskPatch(title="t" * 101))

    assert store.fetch_all() == []
    assert not store.path.exists()


@pytest.mark.parametrize("patch", [None, TaskPatch(), TaskPatch(title=None), TaskPatch(priority="high")])
def test_create_requires_a_title(service: TaskService, patch: TaskPatch | None) -> None:
    with pytest.raises(ValidationError):
        service.create_task(patch)


def test_create_applies_optional_fields(service: TaskService) -> None:
    task = service.create_task(
        TaskPatch(
            title="Quarterly report",
            description="Q3 numbers",
            priority="high",
            category=Category.WORK,
            due_date="2026-11-01",
        )
    )

    assert task.description == "Q3 numbers"
    assert task.priority is Priority.HIGH
    assert task.category is Category.WORK
    assert task.due_date == date(2026, 11, 1)


def test_update_to_completed_sets_completed_at(service: TaskService) -> None:
    task = service.create_task(TaskPatch(title="Water plants"))

    service.update_task(task.id, TaskPatch(status=Status.COMPLETED))

    found = service.find_task_by_id(task.id)
    assert found.status is Status.COMPLETED
    assert found.completed_at is not None


def test_update_to_in_progress_bumps_progress(service: TaskService) -> None:
    task = service.create_task(TaskPatch(title="Write essay"))

    service.update_task(task.id, TaskPatch(status="in_progress"))

    assert task.status is Status.IN_PROGRESS
    assert task.progress_percentage == 1


def test_update_only_touches_provided_fields(service: TaskService) -> None:
    task = service.create_task(TaskPatch(title="Call mom", description="Sunday", category="personal"))

    service.update_task(task.id, TaskPatch(priority=Priority.URGENT))

    assert task.priority is Priority.URGENT
    assert task.title == "Call mom"
    assert task.description == "Sunday"
    assert task.category is Category.PERSONAL


def test_update_can_clear_optional_fields(service: TaskService) -> None:
    task = service.create_task(TaskPatch(title="Gym", description="Legs", category="fitness"))

    service.update_task(task.id, TaskPatch(description=None, category=None))

    assert task.description is None
    assert task.category is None


def test_update_is_all_or_nothing(service: TaskService, store: TaskStore) -> None:
    task = service.create_task(TaskPatch(title="Original"))

    with pytest.raises(ValidationError):
        service.update_task(task.id, TaskPatch(title="Changed", description="x" * 201))

    assert task.title == "Original"
    assert TaskStore(store.path).find_by_id(task.id).title == "Original"


def test_update_persists(service: TaskService, store: TaskStore) -> None:
    task = service.create_task(TaskPatch(title="Draft"))

    service.update_task(task.id, TaskPatch(title="Final", tags=["doc"]))

    reloaded = TaskStore(store.path).find_by_id(task.id)
    assert reloaded.title == "Final"
    assert reloaded.tags == ["doc"]


def test_explicit_status_is_applied_after_progress(service: TaskService) -> None:
    task = service.create_task(TaskPatch(title="t"))

    service.update_task(task.id, TaskPatch(progress_percentage=100, status=Status.PENDING))

    assert task.progress_percentage == 100
    assert task.status is Status.PENDING


def test_update_input_errors() -> None:
    repo = FakeTaskRepo()
    service = TaskService(repo)

    with pytest.raises(ValidationError):
        service.update_task("", TaskPatch(title="x"))
    with pytest.raises(ValidationError):
        service.update_task("some-id", None)
    assert repo.calls == []

    with pytest.raises(NotFoundError):
        service.update_task("nonexistent-id", TaskPatch(title="x"))


def test_delete_twice(service: TaskService) -> None:
    keep = service.create_task(TaskPatch(title="keep"))
    drop = service.create_task(TaskPatch(title="drop"))

    service.delete_task(drop.id)
    with pytest.raises(NotFoundError):
        service.delete_task(drop.id)

    assert service.read_available_tasks() == [keep]


def test_empty_ids_never_reach_the_store() -> None:
    repo = FakeTaskRepo([Task("t")])
    service = TaskService(repo)

    with pytest.raises(ValidationError):
        service.delete_task("")
    with pytest.raises(ValidationError):
        service.find_task_by_id("   ")

    assert repo.calls == []


def test_find_unknown_id(service: TaskService) -> None:
    with pytest.raises(NotFoundError):
        service.find_task_by_id("nonexistent-id")


def test_read_available_tasks_filters() -> None:
    work = Task("report", priority=Priority.HIGH, category=Category.WORK)
    home = Task("dishes", category=Category.HOME)
    done = Task("laundry", category=Category.HOME)
    done.mark_as_completed()
    service = TaskService(FakeTaskRepo([work, home, done]))

    assert len(service.read_available_tasks()) == 3
    assert service.read_available_tasks(status=Status.COMPLETED) == [done]
    assert service.read_available_tasks(priority=Priority.HIGH) == [work]
    assert service.read_available_tasks(category=Category.HOME, status=Status.PENDING) == [home]


@pytest.mark.parametrize("title", ["", "   "])
def test_blank_titles_are_rejected(service: TaskService, store: TaskStore, title: str) -> None:
    with pytest.raises(ValidationError):
        service.create_task(TaskPatch(title=title))
    assert store.fetch_all() == []

    task = service.create_task(TaskPatch(title="Keep me"))
    with pytest.raises(ValidationError):
        service.update_task(task.id, TaskPatch(title=title))

    assert task.title == "Keep me"
    assert TaskStore(store.path).find_by_id(task.id).title == "Keep me"

# src/task_tracker/cli/commands.py

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from datetime import date, timedelta

from ..core.state import AppState
from ..errors import NotFoundError, PersistenceError, ValidationError
from ..tasks.task_models import Status, Task, TaskPatch

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Validation and not-found errors become the reply; persistence errors are
        logged and reported. Anything else propagates to the caller.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError:
            # Unbalanced quotes: fall back to a plain whitespace split.
            parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except ValidationError as e:
            return f"Invalid input: {e}"
        except NotFoundError as e:
            return str(e)
        except PersistenceError as e:
            logger.error("/%s could not persist: %s", name, e)
            return f"Could not write the tasks file: {e}. The change is kept for this session only."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----

_OPTION_KEYS = {
    "title": "title",
    "description": "description",
    "desc": "description",
    "priority": "priority",
    "category": "category",
    "cat": "category",
    "status": "status",
    "due": "due_date",
    "tags": "tags",
    "notes": "notes",
    "hours": "estimated_hours",
    "progress": "progress_percentage",
}

_CLEAR_WORDS = {"", "-", "none"}

# Only these fields read a clear word as "clear"; elsewhere it is a literal value.
_CLEARABLE_OPTIONS = frozenset({"description", "category", "due_date", "tags", "notes", "estimated_hours"})

_EDIT_USAGE = (
    "Usage: /edit <id> key=value [...]\n"
    "  keys: title, desc, priority, category, status, due, tags, notes, hours, progress\n"
    "  use key=- (or key=none) to clear desc, category, due, tags, notes or hours"
)


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Separate known key=value options from plain words."""
    words: list[str] = []
    options: dict[str, str] = {}
    for arg in args:
        key, sep, value = arg.partition("=")
        field = _OPTION_KEYS.get(key.lower()) if sep else None
        if field is None:
            words.append(arg)
        else:
            options[field] = value
    return words, options


def _parse_due(raw: str) -> str | date:
    word = raw.strip().lower()
    if word == "today":
        return date.today()
    if word == "tomorrow":
        return date.today() + timedelta(days=1)
    return raw


def _patch_from_options(options: dict[str, str]) -> TaskPatch:
    kwargs: dict[str, object] = {}
    for field, raw in options.items():
        if field in _CLEARABLE_OPTIONS and raw.strip().lower() in _CLEAR_WORDS:
            kwargs[field] = [] if field == "tags" else None
        elif field == "due_date":
            kwargs[field] = _parse_due(raw)
        else:
            kwargs[field] = raw
    return TaskPatch(**kwargs)


def _resolve_id(state: AppState, raw: str) -> str:
    """Expand a unique id prefix to the full id; anything else passes through."""
    raw = raw.strip()
    if not raw:
        return raw
    ids = [t.id for t in state.task_service.read_available_tasks()]
    if raw in ids:
        return raw
    matches = [i for i in ids if i.startswith(raw)]
    if len(matches) > 1:
        raise ValidationError(f"ID prefix '{raw}' matches {len(matches)} tasks; type more characters")
    return matches[0] if matches else raw


def _short(task_id: str) -> str:
    return task_id[:SHORT_ID_LEN]


_STATUS_ORDER = {s: i for i, s in enumerate(Status)}


def _sort_key(task: Task) -> tuple:
    return (
        _STATUS_ORDER[task.status],
        -task.priority.level,
        task.due_date or date.max,
        task.created_at,
    )


def _format_line(task: Task, due_soon_hours: int) -> str:
    line = (
        f"{_short(task.id)}  [{task.status.display_name:<11}] "
        f"{task.priority.display_name:<6}  {task.title}"
    )
    if task.category is not None:
        line += f" ({task.category.display_name})"
    if task.due_date is not None:
        line += f", due {task.due_date.isoformat()}"
    if task.is_overdue():
        line += " OVERDUE"
    elif task.is_due_soon(due_soon_hours):
        line += " (due soon)"
    return line


def _format_details(task: Task) -> str:
    def ts(value) -> str:
        return value.strftime("%Y-%m-%d %H:%M")

    rows: list[tuple[str, str]] = [
        ("ID", task.id),
        ("Title", task.title),
    ]
    if task.description:
        rows.append(("Description", task.description))
    rows.append(("Status", f"{task.status.display_name} ({task.progress_percentage}%)"))
    rows.append(("Priority", task.priority.display_name))
    if task.category is not None:
        rows.append(("Category", task.category.display_name))
    if task.due_date is not None:
        suffix = " (overdue)" if task.is_overdue() else ""
        rows.append(("Due", task.due_date.isoformat() + suffix))
    if task.tags:
        rows.append(("Tags", ", ".join(task.tags)))
    if task.estimated_hours is not None:
        rows.append(("Estimate", f"{task.estimated_hours}h"))
    if task.notes:
        rows.append(("Notes", task.notes))
    rows.append(("Created", ts(task.created_at)))
    rows.append(("Updated", ts(task.updated_at)))
    if task.completed_at is not None:
        rows.append(("Completed", ts(task.completed_at)))

    width = max(len(label) for label, _ in rows) + 1
    return "\n".join(f"  {label + ':':<{width}} {value}" for label, value in rows)


# ---- commands ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [priority=high] [category=work] [due=2026-01-31] [desc="..."]
    """
    words, options = _split_options(args)
    if words:
        options["title"] = " ".join(words)
    if not options.get("title", "").strip():
        return "Usage: /add <title> [priority=..] [category=..] [due=YYYY-MM-DD] [desc=..]"

    task = state.task_service.create_task(_patch_from_options(options))
    return f"Added task {_short(task.id)}: {task.title}"


def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list           -> every task
    /list <status>  -> only that status (pending, in_progress, completed, cancelled)
    /list overdue   -> past their due date and not completed
    """
    which = args[0].lower() if args else "all"
    service = state.task_service

    if which == "all":
        tasks = service.read_available_tasks()
    elif which == "overdue":
        tasks = [t for t in service.read_available_tasks() if t.is_overdue()]
    else:
        tasks = service.read_available_tasks(status=Status.parse(which))

    if not tasks:
        return "No tasks found." if which != "all" else "No tasks yet. Use /add <title> to create one."

    hours = int(getattr(state.settings, "due_soon_hours", 24))
    lines = [f"Tasks ({len(tasks)}):"]
    lines.extend(_format_line(t, hours) for t in sorted(tasks, key=_sort_key))
    return "\n".join(lines)


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    task = state.task_service.find_task_by_id(_resolve_id(state, args[0]))
    return _format_details(task)


def cmd_edit(state: AppState, args: list[str]) -> str:
    if not args:
        return _EDIT_USAGE
    task_id = _resolve_id(state, args[0])
    words, options = _split_options(args[1:])
    if words:
        return f"Unrecognized arguments: {' '.join(words)}\n{_EDIT_USAGE}"
    if not options:
        return _EDIT_USAGE

    task = state.task_service.update_task(task_id, _patch_from_options(options))
    return f"Updated task {_short(task.id)}: {task.title}"


def _set_status(state: AppState, args: list[str], status: Status, verb: str) -> str:
    if not args:
        return f"Usage: /{verb} <id>"
    task_id = _resolve_id(state, args[0])
    task = state.task_service.update_task(task_id, TaskPatch(status=status))
    return f"Task {_short(task.id)} is now {task.status.display_name}: {task.title}"


def cmd_start(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, Status.IN_PROGRESS, "start")


def cmd_complete(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, Status.COMPLETED, "complete")


def cmd_cancel(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, Status.CANCELLED, "cancel")


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /delete <id>"
    service = state.task_service
    task = service.find_task_by_id(_resolve_id(state, args[0]))
    service.delete_task(task.id)
    return f"Deleted task {_short(task.id)}: {task.title}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <title> [priority=..] [due=..].")
registry.register("list", cmd_list, help_text="List tasks: /list [status|overdue].", aliases=["ls"])
registry.register("show", cmd_show, help_text="Show one task in detail: /show <id>.")
registry.register("edit", cmd_edit, help_text="Change fields: /edit <id> key=value ...")
registry.register("start", cmd_start, help_text="Mark a task in progress: /start <id>.")
registry.register(
    "complete", cmd_complete, help_text="Mark a task completed: /complete <id>.", aliases=["done"]
)
registry.register("cancel", cmd_cancel, help_text="Cancel a task: /cancel <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])

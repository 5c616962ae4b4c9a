"""Error taxonomy for task discovery and resolution.

Every failure surfaces as a single `TaskError` carrying an `ErrorKind`; callers
branch on the kind (or its coarser `category`) rather than on exception classes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    INVALID_NAME = "invalid-name"
    INVALID_FILE = "invalid-file"
    INVALID_METADATA = "invalid-metadata"
    INVALID_TASK = "invalid-task"
    TASK_NOT_FOUND = "task-not-found"


class ErrorKind(str, Enum):
    INVALID_NAME = "invalid-name"
    INVALID_FILE = "invalid-file"
    INVALID_METADATA = "invalid-metadata"
    UNREADABLE_METADATA = "unreadable-metadata"
    UNPARSEABLE_METADATA = "unparseable-metadata"
    NO_IMPLEMENTATION = "no-implementation"
    MULTIPLE_IMPLEMENTATIONS = "multiple-implementations"
    MISSING_IMPLEMENTATION = "missing-implementation"
    TASK_NOT_FOUND = "task-not-found"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorKind.INVALID_NAME: ErrorCategory.INVALID_NAME,
    ErrorKind.INVALID_FILE: ErrorCategory.INVALID_FILE,
    ErrorKind.INVALID_METADATA: ErrorCategory.INVALID_METADATA,
    ErrorKind.UNREADABLE_METADATA: ErrorCategory.INVALID_METADATA,
    ErrorKind.UNPARSEABLE_METADATA: ErrorCategory.INVALID_METADATA,
    ErrorKind.NO_IMPLEMENTATION: ErrorCategory.INVALID_TASK,
    ErrorKind.MULTIPLE_IMPLEMENTATIONS: ErrorCategory.INVALID_TASK,
    ErrorKind.MISSING_IMPLEMENTATION: ErrorCategory.INVALID_TASK,
    ErrorKind.TASK_NOT_FOUND: ErrorCategory.TASK_NOT_FOUND,
}

INVALID_NAME_MESSAGE = (
    "Task names must start with a lowercase letter and be composed of only "
    "lowercase letters, numbers, and underscores"
)


class TaskError(Exception):
    def __init__(
        self, message: str, kind: ErrorKind, details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.details = details or {}

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category

    def to_dict(self) -> dict[str, Any]:
        """Serializable form handed to end users: message, kind tag and details."""
        return {"msg": self.message, "kind": self.kind.value, "details": self.details}

    def __repr__(self) -> str:
        return f"TaskError({self.message!r}, {self.kind.value!r}, {self.details!r})"


def invalid_name(name: str) -> TaskError:
    return TaskError(INVALID_NAME_MESSAGE, ErrorKind.INVALID_NAME, {"name": name})


def invalid_metadata(message: str, **details: Any) -> TaskError:
    return TaskError(message, ErrorKind.INVALID_METADATA, details)


def task_not_found(task_name: str, module_name: str) -> TaskError:
    return TaskError(
        f"Task {task_name} not found in module {module_name}.",
        ErrorKind.TASK_NOT_FOUND,
        {"name": task_name, "module": module_name},
    )

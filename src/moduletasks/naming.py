"""Filename rules for task artifacts living in a module's `tasks/` directory."""

from __future__ import annotations

import os
import re

TASK_NAME_RE = re.compile(r"[a-z][a-z0-9_]*")
FORBIDDEN_EXTENSIONS = (".conf", ".md")
METADATA_EXTENSION = ".json"


def is_task_name(name: str) -> bool:
    return bool(TASK_NAME_RE.fullmatch(name))


def task_name_from_path(path: str) -> str:
    """Basename with its extension stripped; also the key tasks are grouped by."""
    return os.path.splitext(os.path.basename(path))[0]


def is_tasks_filename(path: str) -> bool:
    """Whether `path` is a legal name for either a task executable or metadata file."""
    if not is_task_name(task_name_from_path(path)):
        return False
    return not path.endswith(FORBIDDEN_EXTENSIONS)


def is_tasks_metadata_filename(path: str) -> bool:
    return is_tasks_filename(path) and path.endswith(METADATA_EXTENSION)


def is_tasks_executable_filename(path: str) -> bool:
    return is_tasks_filename(path) and not path.endswith(METADATA_EXTENSION)

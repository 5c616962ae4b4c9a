"""Discovery, validation and file resolution for tasks shipped inside modules.

A module's `tasks/` directory holds executables and optional JSON metadata;
`tasks_in_module` groups them into `Task` objects whose implementations and
files are resolved lazily.
"""

from .core import Task, find_task, resolve_task, tasks_in_module
from .errors import ErrorCategory, ErrorKind, TaskError
from .files import FileEntry, find_files
from .implementations import Implementation, find_implementations
from .metadata import read_metadata
from .modules import LocalFilesystem, Module, ModulePathRegistry, ModuleRegistry
from .naming import (
    is_task_name,
    is_tasks_executable_filename,
    is_tasks_filename,
    is_tasks_metadata_filename,
)

__all__ = [
    "Task",
    "find_task",
    "resolve_task",
    "tasks_in_module",
    "ErrorCategory",
    "ErrorKind",
    "TaskError",
    "FileEntry",
    "find_files",
    "Implementation",
    "find_implementations",
    "read_metadata",
    "LocalFilesystem",
    "Module",
    "ModulePathRegistry",
    "ModuleRegistry",
    "is_task_name",
    "is_tasks_executable_filename",
    "is_tasks_filename",
    "is_tasks_metadata_filename",
]

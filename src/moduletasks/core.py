from __future__ import annotations

import threading
from dataclasses import asdict
from itertools import groupby
from typing import Any, Callable, Optional, Sequence, TypeVar

from .errors import invalid_metadata, invalid_name, task_not_found
from .files import FileEntry, find_files
from .implementations import (
    DEFAULT_BASENAME,
    SEPARATOR,
    Implementation,
    find_implementations,
)
from .logging import get_logger
from .metadata import read_metadata
from .modules import LOCAL_FS, Filesystem, Module, ModuleRegistry
from .naming import (
    is_task_name,
    is_tasks_filename,
    is_tasks_metadata_filename,
    task_name_from_path,
)

T = TypeVar("T")

log = get_logger("moduletasks.core")

_UNSET: Any = object()


class _OwnModuleRegistry:
    """Fallback lookup that only knows the task's own module."""

    def __init__(self, module: Module):
        self.module = module

    def find(self, name: str, environment: str) -> Optional[Module]:
        return self.module if name == self.module.name else None


class Task:
    """One task of a module.

    Only the name is checked up front. Metadata, implementations and files are
    computed on first access and then kept; a failed computation is not kept, so
    the next access tries again and raises again.
    """

    def __init__(
        self,
        module: Module,
        task_name: str,
        module_executables: Optional[Sequence[str]] = None,
        metadata_file: Optional[str] = None,
        *,
        registry: Optional[ModuleRegistry] = None,
        filesystem: Filesystem = LOCAL_FS,
    ):
        if not is_task_name(task_name):
            raise invalid_name(task_name)

        self.module = module
        self.short_name = task_name
        self.name = (
            module.name if task_name == DEFAULT_BASENAME
            else f"{module.name}{SEPARATOR}{task_name}"
        )
        self.metadata_file = metadata_file
        self.module_executables = module_executables if module_executables is not None else []
        self.registry = registry if registry is not None else _OwnModuleRegistry(module)
        self.filesystem = filesystem

        self._lock = threading.RLock()
        self._metadata: Any = _UNSET
        self._implementations: Any = _UNSET
        self._files: Any = _UNSET

    def _memo(self, attr: str, compute: Callable[[], T]) -> T:
        value = getattr(self, attr)
        if value is not _UNSET:
            return value
        with self._lock:
            value = getattr(self, attr)
            if value is _UNSET:
                value = compute()
                setattr(self, attr, value)
        return value

    def metadata(self) -> Optional[dict[str, Any]]:
        return self._memo(
            "_metadata", lambda: read_metadata(self.metadata_file, self.filesystem)
        )

    def implementations(self) -> list[Implementation]:
        return self._memo(
            "_implementations",
            lambda: find_implementations(
                self.name,
                self.module.tasks_directory,
                self.metadata(),
                self.module_executables,
            ),
        )

    def files(self) -> list[FileEntry]:
        """Implementation files first, then the files the metadata asks for.

        Agents rely on the implementation occupying the leading position(s).
        """
        return self._memo("_files", self._compute_files)

    def _compute_files(self) -> list[FileEntry]:
        md = self.metadata()
        task_files = [FileEntry(name=i.name, path=i.path) for i in self.implementations()]
        lib_files: list[FileEntry] = []
        if md is not None:
            lib_files = find_files(
                self._file_references(md), self.module, self.registry, self.filesystem
            )
        return task_files + lib_files

    def _file_references(self, md: dict[str, Any]) -> list[str]:
        outer = md.get("files", [])
        if not isinstance(outer, list):
            raise invalid_metadata(
                f"Task metadata for task {self.name} does not specify files as an array"
            )
        impl_files: list[str] = []
        impls = md.get("implementations", [])
        if isinstance(impls, list):
            for impl in impls:
                if not isinstance(impl, dict) or "files" not in impl:
                    continue
                if not isinstance(impl["files"], list):
                    raise invalid_metadata(
                        f"Implementation files for task {self.name} must be an array"
                    )
                impl_files.extend(impl["files"])
        return _uniq(_uniq(impl_files) + outer)

    def validate(self) -> bool:
        self.implementations()
        return True

    @property
    def description(self) -> Optional[str]:
        return (self.metadata() or {}).get("description")

    @property
    def is_private(self) -> bool:
        return bool((self.metadata() or {}).get("private", False))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "module": self.module.name,
            "description": self.description,
            "private": self.is_private,
            "implementations": [asdict(i) for i in self.implementations()],
            "files": [asdict(f) for f in self.files()],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self.name == other.name and self.module is other.module

    def __hash__(self) -> int:
        return hash((self.name, id(self.module)))

    def __repr__(self) -> str:
        return f"Task({self.name!r})"


def _uniq(items: Sequence[Any]) -> list[Any]:
    out: list[Any] = []
    for item in items:
        if item not in out:
            out.append(item)
    return out


def tasks_in_module(
    module: Module,
    registry: Optional[ModuleRegistry] = None,
    filesystem: Filesystem = LOCAL_FS,
) -> list[Task]:
    task_files = [
        f
        for f in filesystem.list_dir(module.tasks_directory)
        if is_tasks_filename(f) and not filesystem.is_dir(f)
    ]
    module_executables = [f for f in task_files if not is_tasks_metadata_filename(f)]

    tasks: list[Task] = []
    grouped = groupby(sorted(task_files, key=task_name_from_path), key=task_name_from_path)
    for task_name, group in grouped:
        metadata_file = next((f for f in group if is_tasks_metadata_filename(f)), None)
        tasks.append(
            Task(
                module,
                task_name,
                module_executables,
                metadata_file,
                registry=registry,
                filesystem=filesystem,
            )
        )
    log.debug("Discovered %d task(s) in module %s", len(tasks), module.name)
    return tasks


def find_task(
    module: Module,
    task_name: str,
    registry: Optional[ModuleRegistry] = None,
    filesystem: Filesystem = LOCAL_FS,
) -> Task:
    """Task `task_name` of `module` (`init` for the module's default task)."""
    for task in tasks_in_module(module, registry, filesystem):
        if task.short_name == task_name:
            return task
    raise task_not_found(task_name, module.name)


def split_task_name(qualified_name: str) -> tuple[str, str]:
    """`mod::install` -> (`mod`, `install`); `mod` -> (`mod`, `init`)."""
    if SEPARATOR in qualified_name:
        module_name, task_name = qualified_name.split(SEPARATOR, 1)
        return module_name, task_name
    return qualified_name, DEFAULT_BASENAME


def resolve_task(
    registry: ModuleRegistry,
    qualified_name: str,
    environment: str,
    filesystem: Filesystem = LOCAL_FS,
) -> Task:
    module_name, task_name = split_task_name(qualified_name)
    module = registry.find(module_name, environment)
    if module is None:
        raise task_not_found(task_name, module_name)
    return find_task(module, task_name, registry, filesystem)

"""Resolving the auxiliary files a task's metadata declares.

References have the form `<module>/<mount>/<path>`; a trailing slash asks for a
whole directory. Only the mount points below are reachable, and a reference must
resolve to exactly the path it spells out (no `..`, no `.`, no doubled slashes).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

from .errors import ErrorKind, TaskError, invalid_metadata
from .logging import get_logger
from .modules import LOCAL_FS, Filesystem, Module, ModuleRegistry

MOUNTS = ("lib", "files", "tasks")

log = get_logger("moduletasks.files")


@dataclass(frozen=True)
class FileEntry:
    name: str
    path: str


def join_literal(*parts: str) -> str:
    """Join with '/' without resetting on absolute parts.

    Separators are collapsed only at the boundaries between parts; anything odd
    inside a part is left in place for the traversal check to reject.
    """
    out = ""
    for i, part in enumerate(parts):
        if i == 0:
            out = part
            continue
        if out.endswith("/"):
            part = part.lstrip("/")
        elif not part.startswith("/"):
            part = "/" + part
        out += part
    return out


def file_entry(path: str, module: Module) -> FileEntry:
    """Name a resolved file after its module: `<module>/<path inside module>`."""
    rel = os.path.relpath(path, module.path).replace(os.sep, "/")
    return FileEntry(name=f"{module.name}/{rel}", path=path)


def find_files(
    references: Iterable[str],
    module: Module,
    registry: ModuleRegistry,
    filesystem: Filesystem = LOCAL_FS,
) -> list[FileEntry]:
    environment = module.environment_name
    entries: list[FileEntry] = []
    seen: set[str] = set()
    for ref in references:
        for entry in _resolve_reference(ref, environment, registry, filesystem):
            if entry.path in seen:
                continue
            seen.add(entry.path)
            entries.append(entry)
    log.debug("Resolved %d file(s) for module %s", len(entries), module.name)
    return entries


def _resolve_reference(
    ref: str, environment: str, registry: ModuleRegistry, filesystem: Filesystem
) -> list[FileEntry]:
    if not isinstance(ref, str):
        raise invalid_metadata(f"File references must be strings, got {ref!r}")
    parts = ref.split("/", 2)
    module_name = parts[0]
    mount = parts[1] if len(parts) > 1 else None
    # A bare mount ("mod/files") has no remainder; treat it as empty.
    endpath = parts[2] if len(parts) > 2 else ""

    target = registry.find(module_name, environment)
    if target is None:
        raise invalid_metadata(
            f"Could not find module {module_name} containing task file {endpath}",
            module=module_name,
            file=ref,
        )

    if mount not in MOUNTS:
        raise invalid_metadata(
            "Files must be saved in module directories that are made available "
            f"via mount points: {', '.join(MOUNTS)}",
            file=ref,
        )

    path = join_literal(target.path, mount, endpath)
    literal = path[:-1] if path.endswith("/") else path
    if os.path.abspath(path) != literal:
        raise invalid_metadata("File pathnames cannot include relative paths", file=ref)

    # "file.txt/" does not stat as existing; check without the slash so the
    # trailing-slash misuse is reported as such below.
    if not filesystem.exists(literal):
        raise TaskError(
            f"Could not find {path} on disk", ErrorKind.INVALID_FILE, {"file": ref}
        )

    wants_directory = ref.endswith("/")
    if filesystem.is_dir(literal):
        if not wants_directory:
            raise invalid_metadata(
                f"Directories specified in task metadata must include a trailing slash: {ref}",
                file=ref,
            )
        return [file_entry(f, target) for f in filesystem.walk_files(literal)]

    if wants_directory:
        raise invalid_metadata(
            f"Files specified in task metadata cannot include a trailing slash: {ref}",
            file=ref,
        )
    return [file_entry(literal, target)]

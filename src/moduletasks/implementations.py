"""Choosing the executable(s) that implement a task.

Metadata may list `implementations` explicitly (each must exist among the
module's executables); otherwise exactly one executable named after the task is
expected.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .errors import ErrorKind, TaskError, invalid_metadata
from .naming import task_name_from_path

DEFAULT_BASENAME = "init"
SEPARATOR = "::"


@dataclass(frozen=True)
class Implementation:
    name: str
    path: str
    requirements: list[str] = field(default_factory=list)


def task_basename(name: str) -> str:
    """`mod::install` -> `install`; a bare module name is its `init` task."""
    if SEPARATOR not in name:
        return DEFAULT_BASENAME
    return name.rsplit(SEPARATOR, 1)[1]


def find_implementations(
    name: str,
    directory: str,
    metadata: Optional[dict[str, Any]],
    executables: Sequence[str],
) -> list[Implementation]:
    metadata = metadata or {}
    if "implementations" in metadata:
        return _explicit_implementations(name, metadata["implementations"], executables)

    basename = task_basename(name)
    matches = [e for e in executables if task_name_from_path(e) == basename]
    if not matches:
        raise TaskError(
            f"No source besides task metadata was found in directory {directory} for task {name}",
            ErrorKind.NO_IMPLEMENTATION,
        )
    if len(matches) > 1:
        raise TaskError(
            f"Multiple executables were found in directory {directory} for task {name}; "
            "define 'implementations' in metadata to differentiate between them",
            ErrorKind.MULTIPLE_IMPLEMENTATIONS,
            {"candidates": [os.path.basename(m) for m in matches]},
        )
    return [Implementation(name=os.path.basename(matches[0]), path=matches[0])]


def _explicit_implementations(
    name: str, entries: Any, executables: Sequence[str]
) -> list[Implementation]:
    if not isinstance(entries, list):
        raise invalid_metadata(
            f"Task metadata for task {name} does not specify implementations as an array"
        )
    by_filename = {}
    for e in executables:
        by_filename.setdefault(os.path.basename(e), e)

    out: list[Implementation] = []
    for entry in entries:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise invalid_metadata(
                f"Task metadata for task {name} has an implementation without a name"
            )
        impl_name = entry["name"]
        path = by_filename.get(impl_name)
        if path is None:
            raise TaskError(
                f"Task metadata for task {name} specifies missing implementation {impl_name}",
                ErrorKind.MISSING_IMPLEMENTATION,
                {"missing": [impl_name]},
            )
        requirements = entry.get("requirements") or []
        if not isinstance(requirements, list):
            raise invalid_metadata(
                f"Requirements for implementation {impl_name} of task {name} must be an array"
            )
        out.append(Implementation(name=impl_name, path=path, requirements=list(requirements)))
    return out

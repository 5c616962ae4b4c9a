from __future__ import annotations

import json
from typing import Any, Optional

from .errors import ErrorKind, TaskError, invalid_metadata
from .logging import get_logger
from .modules import LOCAL_FS, Filesystem

log = get_logger("moduletasks.metadata")


def read_metadata(
    path: Optional[str], filesystem: Filesystem = LOCAL_FS
) -> Optional[dict[str, Any]]:
    """Load a task metadata file; `None` when the task has no metadata file."""
    if path is None:
        return None
    log.debug("Reading task metadata %s", path)
    try:
        text = filesystem.read_text(path)
    except (OSError, UnicodeDecodeError) as e:
        raise TaskError(
            f"Error reading metadata: {e}",
            ErrorKind.UNREADABLE_METADATA,
            {"path": path},
        ) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TaskError(
            f"Error parsing metadata {path}: {e}",
            ErrorKind.UNPARSEABLE_METADATA,
            {"path": path},
        ) from e
    if not isinstance(data, dict):
        raise invalid_metadata(
            f"Task metadata {path} must be a JSON object", path=path
        )
    return data

"""Content digests for task files, in the shape agents download them by."""

from __future__ import annotations

import hashlib
from functools import partial
from typing import Iterable, Optional

from .files import FileEntry
from .logging import get_logger

CHUNK_SIZE = 1024 * 1024

log = get_logger("moduletasks.digest")


def sha256_and_size(path: str) -> tuple[Optional[str], Optional[int]]:
    """Hash and byte count from a single read; `(None, None)` if unreadable."""
    h = hashlib.sha256()
    size = 0
    try:
        with open(path, "rb") as f:
            for chunk in iter(partial(f.read, CHUNK_SIZE), b""):
                h.update(chunk)
                size += len(chunk)
    except OSError as e:
        log.warning("Cannot read %s: %s", path, e)
        return None, None
    return h.hexdigest(), size


def file_details(entry: FileEntry) -> dict:
    sha256, size = sha256_and_size(entry.path)
    return {
        "filename": entry.name,
        "path": entry.path,
        "sha256": sha256,
        "size_bytes": size,
    }


def files_details(entries: Iterable[FileEntry]) -> list[dict]:
    return [file_details(e) for e in entries]

"""Modules and the capabilities task resolution depends on.

Task code never reaches for a global module lookup or touches the disk directly:
it is handed a `ModuleRegistry` and a `Filesystem`. `ModulePathRegistry` and
`LocalFilesystem` are the stock implementations; tests substitute their own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from .logging import get_logger
from .naming import is_task_name

log = get_logger("moduletasks.modules")

DEFAULT_ENVIRONMENT = "production"
TASKS_DIRNAME = "tasks"


@dataclass(frozen=True, eq=False)
class Module:
    """A named, directory-rooted unit of content. Compared by identity."""

    name: str
    path: str
    environment: Optional[str] = None

    @property
    def tasks_directory(self) -> str:
        return os.path.join(self.path, TASKS_DIRNAME)

    @property
    def environment_name(self) -> str:
        return self.environment or DEFAULT_ENVIRONMENT


class ModuleRegistry(Protocol):
    def find(self, name: str, environment: str) -> Optional[Module]: ...


class Filesystem(Protocol):
    def exists(self, path: str) -> bool: ...
    def is_dir(self, path: str) -> bool: ...
    def is_file(self, path: str) -> bool: ...
    def read_text(self, path: str) -> str: ...
    def walk_files(self, directory: str) -> List[str]: ...
    def list_dir(self, directory: str) -> List[str]: ...


class LocalFilesystem:
    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def read_text(self, path: str) -> str:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def walk_files(self, directory: str) -> List[str]:
        """All regular files below `directory`, sorted, hidden entries skipped."""
        paths: List[str] = []
        for root, dirs, files in os.walk(directory):
            dirs[:] = [d for d in dirs if not d.startswith(".")]
            for file in files:
                if file.startswith("."):
                    continue
                p = os.path.join(root, file)
                if os.path.isfile(p):
                    paths.append(p)
        return sorted(paths)

    def list_dir(self, directory: str) -> List[str]:
        """Full paths of the direct children of `directory`.

        Empty when `directory` is missing, is not a directory, or cannot be read.
        """
        try:
            names = os.listdir(directory)
        except (FileNotFoundError, NotADirectoryError):
            return []
        except PermissionError as e:
            log.warning("Cannot list %s: %s", directory, e)
            return []
        return [os.path.join(directory, n) for n in sorted(names)]


LOCAL_FS = LocalFilesystem()


class ModulePathRegistry:
    """Looks modules up on disk.

    For an environment `env` the search path is `<environmentpath>/<env>/modules`
    followed by every `basemodulepath` entry; the first directory containing a
    child named after the module wins.
    """

    def __init__(
        self,
        environmentpath: Optional[str | Path] = None,
        basemodulepath: Iterable[str | Path] = (),
    ):
        self.environmentpath = str(environmentpath) if environmentpath else None
        self.basemodulepath = [str(p) for p in basemodulepath]
        # Module objects are compared by identity, so hand out one per directory.
        self._cache: dict[tuple[str, str], Module] = {}

    def modulepath(self, environment: str) -> list[str]:
        dirs: list[str] = []
        if self.environmentpath:
            dirs.append(os.path.join(self.environmentpath, environment, "modules"))
        dirs.extend(self.basemodulepath)
        return [os.path.abspath(d) for d in dirs]

    def find(self, name: str, environment: str) -> Optional[Module]:
        if not is_task_name(name):
            return None
        for directory in self.modulepath(environment):
            path = os.path.join(directory, name)
            if os.path.isdir(path):
                return self._module(name, path, environment)
        return None

    def modules(self, environment: str) -> list[Module]:
        """Every module visible in `environment`, earlier path entries shadowing later."""
        found: dict[str, Module] = {}
        for directory in self.modulepath(environment):
            if not os.path.isdir(directory):
                continue
            for name in sorted(os.listdir(directory)):
                path = os.path.join(directory, name)
                if name in found or not is_task_name(name) or not os.path.isdir(path):
                    continue
                found[name] = self._module(name, path, environment)
        return [found[n] for n in sorted(found)]

    def _module(self, name: str, path: str, environment: str) -> Module:
        key = (environment, path)
        if key not in self._cache:
            self._cache[key] = Module(name=name, path=path, environment=environment)
        return self._cache[key]

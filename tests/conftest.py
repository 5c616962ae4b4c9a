# tests/conftest.py

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from moduletasks.modules import Module, ModulePathRegistry


def write_tree(root: Path, files: dict[str, object]) -> None:
    """
    Create files under `root`.

    Keys ending in "/" create (empty) directories; dict/list values are written
    as JSON, everything else as text.
    """
    root.mkdir(parents=True, exist_ok=True)
    for rel, content in files.items():
        p = root / rel
        if rel.endswith("/"):
            p.mkdir(parents=True, exist_ok=True)
            continue
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (dict, list)):
            p.write_text(json.dumps(content), encoding="utf-8")
        else:
            p.write_text(str(content), encoding="utf-8")


@pytest.fixture()
def modules_dir(tmp_path: Path) -> Path:
    d = tmp_path / "modules"
    d.mkdir()
    return d


@pytest.fixture()
def registry(modules_dir: Path) -> ModulePathRegistry:
    return ModulePathRegistry(basemodulepath=[modules_dir])


@pytest.fixture()
def make_module(
    modules_dir: Path, registry: ModulePathRegistry
) -> Callable[..., Module]:
    """
    Build a module directory on disk and return the registry's Module for it.

    Going through the registry matters: modules are compared by identity, so the
    object a task holds must be the one file resolution looks up.
    """

    def _make(name: str, files: dict[str, object] | None = None) -> Module:
        write_tree(modules_dir / name, files or {})
        module = registry.find(name, "production")
        assert module is not None
        return module

    return _make

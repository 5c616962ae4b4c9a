"""Settings: a YAML file, overridden by environment variables (and `.env`).

Example `moduletasks.yaml`:

    environment: production
    environmentpath: /etc/code/environments
    basemodulepath:
      - /etc/code/modules
    log_file: .local/moduletasks.log
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from .modules import DEFAULT_ENVIRONMENT, ModulePathRegistry

ENV_PREFIX = "MODTASKS"
DEFAULT_CONFIG = "moduletasks.yaml"


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def _env(suffix: str) -> Optional[str]:
    v = os.getenv(f"{ENV_PREFIX}_{suffix}")
    if v is None or v.strip() == "":
        return None
    return v


def _path_list(raw) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [p for p in raw.split(os.pathsep) if p]
    return [str(p) for p in raw]


def load_config(path: str | Path) -> dict:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


@dataclass(frozen=True)
class Settings:
    environment: str = DEFAULT_ENVIRONMENT
    environmentpath: Optional[str] = None
    basemodulepath: List[str] = field(default_factory=list)
    log_file: Optional[Path] = None

    def registry(self) -> ModulePathRegistry:
        return ModulePathRegistry(self.environmentpath, self.basemodulepath)


def load_settings(
    config_path: str | Path | None = None, environment: Optional[str] = None
) -> Settings:
    load_dotenv(find_dotenv(usecwd=True), override=False)
    config_path = config_path or _env("CONFIG")
    if config_path:
        cfg = load_config(config_path)
    elif Path(DEFAULT_CONFIG).exists():
        cfg = load_config(DEFAULT_CONFIG)
    else:
        cfg = {}

    log_file = _env("LOG_FILE") or _get(cfg, "log_file")
    return Settings(
        environment=environment
        or _env("ENVIRONMENT")
        or _get(cfg, "environment", default=DEFAULT_ENVIRONMENT),
        environmentpath=_env("ENVIRONMENTPATH") or _get(cfg, "environmentpath"),
        basemodulepath=_path_list(
            _env("BASEMODULEPATH") or _get(cfg, "basemodulepath")
        ),
        log_file=Path(log_file) if log_file else None,
    )

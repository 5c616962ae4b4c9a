# tests/test_config.py

from __future__ import annotations

import os
from pathlib import Path

import pytest

from moduletasks.config import load_config, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for key in list(os.environ):
        if key.startswith("MODTASKS_"):
            monkeypatch.delenv(key)
    # Keep a stray .env / moduletasks.yaml in the repo from leaking in.
    monkeypatch.chdir(tmp_path)


def test_defaults_without_config() -> None:
    settings = load_settings()
    assert settings.environment == "production"
    assert settings.environmentpath is None
    assert settings.basemodulepath == []
    assert settings.log_file is None


def test_yaml_config(tmp_path: Path) -> None:
    cfg = tmp_path / "custom.yaml"
    cfg.write_text(
        "environment: dev\n"
        "environmentpath: /etc/envs\n"
        "basemodulepath:\n  - /etc/modules\n  - /opt/modules\n"
        "log_file: logs/tasks.log\n",
        encoding="utf-8",
    )
    settings = load_settings(cfg)
    assert settings.environment == "dev"
    assert settings.environmentpath == "/etc/envs"
    assert settings.basemodulepath == ["/etc/modules", "/opt/modules"]
    assert settings.log_file == Path("logs/tasks.log")


def test_default_config_file_in_cwd(tmp_path: Path) -> None:
    (tmp_path / "moduletasks.yaml").write_text("environment: staging\n", encoding="utf-8")
    assert load_settings().environment == "staging"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = tmp_path / "custom.yaml"
    cfg.write_text("environment: dev\nbasemodulepath: [/etc/modules]\n", encoding="utf-8")
    monkeypatch.setenv("MODTASKS_ENVIRONMENT", "qa")
    monkeypatch.setenv("MODTASKS_BASEMODULEPATH", os.pathsep.join(["/a", "/b"]))

    settings = load_settings(cfg)

    assert settings.environment == "qa"
    assert settings.basemodulepath == ["/a", "/b"]


def test_explicit_environment_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MODTASKS_ENVIRONMENT", "qa")
    assert load_settings(environment="dev").environment == "dev"


def test_dotenv_is_loaded(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("MODTASKS_ENVIRONMENT=fromdotenv\n", encoding="utf-8")
    try:
        assert load_settings().environment == "fromdotenv"
    finally:
        os.environ.pop("MODTASKS_ENVIRONMENT", None)


def test_missing_explicit_config_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "nope.yaml")


def test_empty_yaml_is_empty_config(tmp_path: Path) -> None:
    cfg = tmp_path / "empty.yaml"
    cfg.write_text("", encoding="utf-8")
    assert load_config(cfg) == {}


def test_settings_registry(tmp_path: Path) -> None:
    (tmp_path / "mods" / "mymod").mkdir(parents=True)
    cfg = tmp_path / "c.yaml"
    cfg.write_text(f"basemodulepath: [{tmp_path / 'mods'}]\n", encoding="utf-8")
    reg = load_settings(cfg).registry()
    assert reg.find("mymod", "production").path == str(tmp_path / "mods" / "mymod")

from __future__ import annotations

import json
from typing import Optional

import typer

from .config import Settings, load_settings
from .core import Task, resolve_task, tasks_in_module
from .digest import files_details
from .errors import TaskError
from .logging import configure_logging, get_logger
from .modules import ModulePathRegistry


app = typer.Typer(add_completion=False, help="Discover and validate module tasks")
log = get_logger("moduletasks.cli")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to YAML config")
EnvironmentOption = typer.Option(None, "--environment", "-e", help="Environment name")


def _setup(config: Optional[str], environment: Optional[str]) -> tuple[Settings, ModulePathRegistry]:
    settings = load_settings(config, environment)
    configure_logging(log_file=settings.log_file)
    return settings, settings.registry()


def _module_tasks(
    settings: Settings, registry: ModulePathRegistry, module: Optional[str]
) -> list[Task]:
    if module:
        mod = registry.find(module, settings.environment)
        if mod is None:
            typer.echo(f"Module not found: {module}", err=True)
            raise typer.Exit(code=1)
        modules = [mod]
    else:
        modules = registry.modules(settings.environment)
    tasks: list[Task] = []
    for mod in modules:
        tasks.extend(tasks_in_module(mod, registry))
    return tasks


def _describe(task: Task) -> tuple[str, bool]:
    """Description and privacy flag; broken metadata just has neither."""
    try:
        return task.description or "", task.is_private
    except TaskError as e:
        log.warning("Task %s: %s", task.name, e.message)
        return "", False


@app.command("list")
def list_tasks(
    module: Optional[str] = typer.Argument(None, help="Only list tasks of this module"),
    show_all: bool = typer.Option(False, "--all", help="Include private tasks"),
    config: Optional[str] = ConfigOption,
    environment: Optional[str] = EnvironmentOption,
):
    """List discovered tasks."""
    settings, registry = _setup(config, environment)
    tasks = _module_tasks(settings, registry, module)
    shown = 0
    for task in sorted(tasks, key=lambda t: t.name):
        description, private = _describe(task)
        if private and not show_all:
            continue
        shown += 1
        typer.echo(f"{task.name:<40} {description}".rstrip())
    if not shown:
        typer.echo(f"No tasks found in environment {settings.environment}.")


@app.command()
def show(
    name: str = typer.Argument(..., help="Task name, e.g. mymod::install"),
    config: Optional[str] = ConfigOption,
    environment: Optional[str] = EnvironmentOption,
):
    """Print task details (implementations and files with digests) as JSON."""
    settings, registry = _setup(config, environment)
    try:
        task = resolve_task(registry, name, settings.environment)
        details = task.to_dict()
        details["files"] = files_details(task.files())
    except TaskError as e:
        log.warning("Task %s failed: %s", name, e.message)
        typer.echo(json.dumps(e.to_dict(), indent=2))
        raise typer.Exit(code=1)
    typer.echo(json.dumps(details, indent=2))


@app.command()
def validate(
    module: Optional[str] = typer.Argument(None, help="Only validate tasks of this module"),
    config: Optional[str] = ConfigOption,
    environment: Optional[str] = EnvironmentOption,
):
    """Validate every task; exits non-zero if any task is invalid."""
    settings, registry = _setup(config, environment)
    failed = 0
    for task in sorted(_module_tasks(settings, registry, module), key=lambda t: t.name):
        try:
            task.validate()
            task.files()
        except TaskError as e:
            failed += 1
            log.warning("Task %s is invalid: %s", task.name, e.message)
            typer.echo(f"{task.name}: {e.kind.value} {e.message}")
            continue
        typer.echo(f"{task.name}: ok")
    if failed:
        typer.echo(f"{failed} invalid task(s)", err=True)
        raise typer.Exit(code=1)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from .config import load_config, options_from_config, task_config
from .core import TaskRegistry
from .errors import InvalidArgument
from .groups import GroupCollector, initialize
from .logging import configure_logging, get_logger


app = typer.Typer(add_completion=False, help="Group tagged tasks into runnable group tasks")
log = get_logger("taskgroups.cli")


def _noop(name: str):
    def run() -> None:
        log.info("Task %s has no action outside its host runner.", name)

    return run


def build_registry(
    config: str, prefix: Optional[str], tag: Optional[str]
) -> tuple[TaskRegistry, GroupCollector, list[str]]:
    """Load a config, register its tasks as no-ops and collect its groups."""
    params = load_config(config)
    tasks = task_config(params)
    registry = TaskRegistry(name="cli")
    for name in tasks:
        registry.register_task(name, _noop(name))
    collector = initialize(registry, options_from_config(params, prefix=prefix, tag=tag))
    groups = collector.collect(tasks)
    return registry, collector, groups


def _echo_group(registry: TaskRegistry, group: str) -> None:
    spec = registry.get(group)
    if spec.is_alias:
        typer.echo(f"- {group}: {', '.join(spec.body)}")
    else:
        typer.echo(f"- {group} (empty)")


@app.command("list")
def list_groups(
    config: str = typer.Argument(..., help="Path to YAML task configuration"),
    prefix: Optional[str] = typer.Option(None, help="Group name prefix"),
    tag: Optional[str] = typer.Option(None, help="Tag property marking group membership"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log grouping details"),
    log_file: Optional[Path] = typer.Option(None, help="Also write logs to this file"),
):
    """List the groups collected from a configuration."""
    configure_logging(verbose, log_file)
    try:
        registry, _, groups = build_registry(config, prefix, tag)
    except InvalidArgument as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    if not groups:
        typer.echo("No groups found.")
        raise typer.Exit(code=0)
    typer.echo("Collected groups:")
    for group in groups:
        _echo_group(registry, group)


@app.command("tasks")
def list_tasks(
    config: str = typer.Argument(..., help="Path to YAML task configuration"),
    prefix: Optional[str] = typer.Option(None, help="Group name prefix"),
    tag: Optional[str] = typer.Option(None, help="Tag property marking group membership"),
):
    """List every runnable task, configured tasks and groups alike."""
    try:
        registry, _, _ = build_registry(config, prefix, tag)
    except InvalidArgument as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    typer.echo("Registered tasks:")
    for name in registry.names():
        typer.echo(f"- {name}")


@app.command()
def ensure(
    config: str = typer.Argument(..., help="Path to YAML task configuration"),
    groups: List[str] = typer.Argument(..., help="Group names, without prefix"),
    prefix: Optional[str] = typer.Option(None, help="Group name prefix"),
    tag: Optional[str] = typer.Option(None, help="Tag property marking group membership"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log grouping details"),
    log_file: Optional[Path] = typer.Option(None, help="Also write logs to this file"),
):
    """Make sure the named groups exist, registering empty ones as placeholders."""
    configure_logging(verbose, log_file)
    try:
        registry, collector, collected = build_registry(config, prefix, tag)
        collector.ensure_groups_exist(groups)
    except InvalidArgument as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    typer.echo("Groups:")
    names = list(collected)
    for group in groups:
        group = collector.prefixed(group)
        if group not in names:
            names.append(group)
    for group in names:
        _echo_group(registry, group)


@app.command()
def run(
    config: str = typer.Argument(..., help="Path to YAML task configuration"),
    name: str = typer.Argument(..., help="Task or group to run"),
    prefix: Optional[str] = typer.Option(None, help="Group name prefix"),
    tag: Optional[str] = typer.Option(None, help="Tag property marking group membership"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log grouping details"),
    log_file: Optional[Path] = typer.Option(None, help="Also write logs to this file"),
):
    """Run a task or group, expanding groups into their members."""
    configure_logging(verbose, log_file)
    try:
        registry, _, _ = build_registry(config, prefix, tag)
        executed = registry.run(name)
    except (KeyError, ValueError) as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    typer.echo("Executed:")
    for task_name in executed:
        typer.echo(f"- {task_name}")


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()

"""Tyro CLI application entrypoint."""

from __future__ import annotations

from typing import Annotated

import tyro

from lazyactions.cli import commands_watch


TopLevelCommand = Annotated[
    commands_watch.WatchCommand,
    tyro.conf.subcommand(name="watch"),
] | Annotated[
    commands_watch.SnapshotCommand,
    tyro.conf.subcommand(name="snapshot"),
] | Annotated[
    commands_watch.LogsCommand,
    tyro.conf.subcommand(name="logs"),
]


def dispatch(command: TopLevelCommand) -> None:
    """Dispatch parsed top-level command object."""

    if isinstance(command, commands_watch.WatchCommand):
        commands_watch.execute_watch(command)
        return
    if isinstance(command, commands_watch.SnapshotCommand):
        commands_watch.execute_snapshot(command)
        return
    if isinstance(command, commands_watch.LogsCommand):
        commands_watch.execute_logs(command)
        return
    raise TypeError(f"Unsupported command type: {type(command).__name__}")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run requested command."""

    command = tyro.cli(TopLevelCommand, args=argv)
    dispatch(command)

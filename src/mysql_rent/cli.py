"""Typer CLI for renting MySQL containers by hand."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import structlog
import typer
from rich.console import Console
from rich.table import Table

from mysql_rent.config.loader import load_rent_config
from mysql_rent.config.models import RentConfig
from mysql_rent.errors import RentError
from mysql_rent.provisioner import RentProvisioner
from mysql_rent.runtime.docker import DockerRuntime

console = Console()
app = typer.Typer(name="mysql-rent", help="Ephemeral MySQL containers for tests")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def _load(config_path: str | None, overrides: dict[str, Any]) -> RentConfig:
    if config_path is not None and not Path(config_path).exists():
        console.print(f"[red]Config file not found: {config_path}[/red]")
        raise typer.Exit(1)
    try:
        return load_rent_config(config_path, overrides)
    except (ValueError, TypeError, FileNotFoundError) as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(1) from exc


def _overrides(
    name: str | None,
    port: int | None,
    database: str | None,
    password: str | None,
    image: str | None,
    keep: bool,
) -> dict[str, Any]:
    values = {
        "container_name": name,
        "local_port": port,
        "database": database,
        "root_password": password,
        "image": image,
    }
    overrides = {k: v for k, v in values.items() if v is not None}
    if keep:
        overrides["avoid_cleanup"] = True
    return overrides


@app.command()
def up(
    config_path: str | None = typer.Option(None, "--config", "-c", help="Rent YAML"),
    name: str | None = typer.Option(None, "--name", help="Container name"),
    port: int | None = typer.Option(None, "--port", "-p", help="Local port"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database"),
    password: str | None = typer.Option(None, "--password", help="Root password"),
    image: str | None = typer.Option(None, "--image", help="Image reference"),
    script_files: list[Path] = typer.Option(
        [], "--script", "-s", help="Seed script file (repeatable, runs in order)"
    ),
    keep: bool = typer.Option(False, "--keep", help="Leave the container running"),
) -> None:
    """Rent a container and hold it until interrupted."""
    config = _load(config_path, _overrides(name, port, database, password, image, keep))
    if script_files:
        extra = []
        for path in script_files:
            if not path.exists():
                console.print(f"[red]Seed script file not found: {path}[/red]")
                raise typer.Exit(1)
            extra.append(path.read_text(encoding="utf-8"))
        config = config.model_copy(update={"scripts": config.scripts + tuple(extra)})

    async def _hold() -> None:
        rent = await RentProvisioner().provision(config)
        async with rent:
            console.print(f"[green]Ready:[/green] {rent.mysql_url()}")
            console.print(
                f"  container: {rent.container_name} ({rent.container_id})"
            )
            console.print("[dim]Press Ctrl+C to release[/dim]")
            await asyncio.Event().wait()

    try:
        asyncio.run(_hold())
    except RentError as exc:
        console.print(f"[red]Rent failed:[/red] {exc}")
        raise typer.Exit(1) from exc
    except KeyboardInterrupt:
        if config.avoid_cleanup:
            console.print(
                f"[yellow]Kept container {config.container_name}; "
                "remove it with `mysql-rent rm`[/yellow]"
            )
        else:
            console.print(f"[green]Released:[/green] {config.container_name}")


@app.command()
def validate(
    config_path: str | None = typer.Option(None, "--config", "-c", help="Rent YAML"),
) -> None:
    """Show the configuration a rent would use."""
    config = _load(config_path, {})

    table = Table(title="Rent configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("container_name", config.container_name)
    table.add_row("image", config.image)
    table.add_row("local_port", str(config.local_port))
    table.add_row("database", config.database)
    table.add_row("root_password", str(config.root_password))
    table.add_row("scripts", str(len(config.scripts)))
    table.add_row("avoid_cleanup", str(config.avoid_cleanup))
    table.add_row("global_timeout", f"{config.wait.global_timeout}s")
    connect_timeout = config.wait.connect_timeout
    table.add_row(
        "connect_timeout",
        "unbounded" if connect_timeout is None else f"{connect_timeout}s",
    )
    console.print(table)


@app.command()
def rm(
    container_id: str = typer.Argument(..., help="Container id or name"),
    binary: str = typer.Option("docker", "--binary", help="Container runtime"),
) -> None:
    """Force-remove a container left running with --keep."""
    if not DockerRuntime(binary=binary).remove(container_id):
        console.print(f"[red]Could not remove:[/red] {container_id}")
        raise typer.Exit(1)
    console.print(f"[green]Removed:[/green] {container_id}")


if __name__ == "__main__":
    app()

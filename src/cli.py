"""CLI entry point for managing golden reference images."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from src.comparator.golden_comparator import GoldenComparator
from src.models.config import GoldensConfiguration

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_comparator(config: str) -> GoldenComparator:
    try:
        cfg = GoldensConfiguration.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'goldens init' to create a default config.")
        sys.exit(1)
    return GoldenComparator(cfg)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Golden image reference management"""
    setup_logging(verbose)


@cli.command()
@click.option("--base-dir", "-b", default="goldens", help="Directory holding reference images")
@click.option("--config", "-c", default="goldens-config.json", help="Config file path")
def init(base_dir: str, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config_path} already exists. Overwrite?"):
            return

    cfg = GoldensConfiguration(base_dir=Path(base_dir), update_goldens=False)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nRecord references by running your tests with:")
    console.print("  [blue]pytest --update-goldens[/blue]")


@cli.command("list")
@click.option("--config", "-c", default="goldens-config.json", help="Config file path")
def list_goldens(config: str) -> None:
    """List stored reference images."""
    comparator = _load_comparator(config)
    references = comparator.references()
    if not references:
        console.print(f"[yellow]No references under {comparator.config.base_dir}[/yellow]")
        return

    table = Table(title=f"References in {comparator.config.base_dir}")
    table.add_column("Golden", style="bold", no_wrap=True)
    table.add_column("Size")
    for name in references:
        table.add_row(name, f"{comparator.golden_path(name).stat().st_size} B")
    console.print(table)


@cli.command()
@click.option("--config", "-c", default="goldens-config.json", help="Config file path")
def failures(config: str) -> None:
    """List goldens with recorded failure artifacts."""
    comparator = _load_comparator(config)
    failed = comparator.failures()
    if not failed:
        console.print("[green]No golden failures recorded[/green]")
        return

    table = Table(title="Golden failures")
    table.add_column("Golden", style="bold", no_wrap=True)
    table.add_column("Test image")
    for name in failed:
        table.add_row(f"[red]{name}[/red]", str(comparator.failure_path(name, "testImage")))
    console.print(table)


@cli.command()
@click.argument("names", nargs=-1)
@click.option("--config", "-c", default="goldens-config.json", help="Config file path")
def approve(names: tuple[str, ...], config: str) -> None:
    """Promote failing test images to references (all failures if no NAMES)."""
    comparator = _load_comparator(config)
    targets = list(names) or comparator.failures()
    if not targets:
        console.print("[yellow]Nothing to approve[/yellow]")
        return

    for name in targets:
        try:
            dest = comparator.approve(name)
        except FileNotFoundError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        console.print(f"[green]Approved[/green] {name} -> [blue]{dest}[/blue]")


@cli.command()
@click.option("--config", "-c", default="goldens-config.json", help="Config file path")
def clean(config: str) -> None:
    """Delete all failure artifacts."""
    comparator = _load_comparator(config)
    count = comparator.clean_failures()
    console.print(f"[green]Removed failure artifacts for {count} golden(s)[/green]")


if __name__ == "__main__":
    cli()

"""Output formatting utilities for CLI commands."""

from collections.abc import Iterable

import click


def success(message: str) -> None:
    """Print a success message in green."""
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print an error message in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def header(message: str) -> None:
    """Print a header message in cyan bold."""
    click.secho(f"\n{message}", fg="cyan", bold=True)


def diagnostics(lines: Iterable[str]) -> None:
    """Print verifier diagnostics as a bulleted list."""
    for line in lines:
        click.secho(f"  • {line}", fg="red")


def node_line(depth: int, label: str, left: int | None, right: int | None) -> None:
    """Print one tree node, indented by depth, with its bounds dimmed."""
    click.echo("  " * depth + label + click.style(f"  [{left}, {right}]", dim=True))

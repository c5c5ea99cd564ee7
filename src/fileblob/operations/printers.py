"""
Human-readable output formatting.

Centralizes all CLI output formatting so commands stay thin.
"""
from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from ..location import Resolution
from ..models import BlobReference

_console = Console()


def print_digest(path: str, hexdigest: str) -> None:
    typer.echo(f"{hexdigest}  {path}")


def print_dump_summary(info: str, size: int, raw_out: str | None) -> None:
    """Print the info column value and where the raw bytes went."""
    typer.echo(info)
    if raw_out:
        _console.print(f"[dim]Wrote {_format_bytes(size)} to {raw_out}[/]")


def print_resolution(ref: BlobReference, location: str, resolution: Resolution) -> None:
    """
    Print where a descriptor resolves and whether it must be materialized.

    Args:
        ref: Decoded descriptor
        location: Location key used for resolution ('' = default)
        resolution: Resolution outcome
    """
    table = Table(title="Resolution", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", ref.name)
    table.add_row("Digest", ref.hexdigest)
    table.add_row("Location", location or "(default)")
    table.add_row("Provenance", resolution.handle.provenance)
    table.add_row("Materialize", "yes" if resolution.needs_materialize else "no (local copy exists)")
    _console.print(table)


def print_load_summary(provenance: str, materialized: bool) -> None:
    action = "Materialized" if materialized else "Reused"
    typer.echo(f"{action} {provenance}")


def print_error(exc: BaseException) -> None:
    typer.echo(f"Error: {exc}", err=True)


def _format_bytes(size_bytes: int) -> str:
    """Format byte count in human-readable format."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"

"""
FileBlob CLI

Implements 4 CLI verbs over the blob engine:
- digest: Print the SHA-1 digest of a file
- dump: Produce the info column value (and raw bytes) for a file
- resolve: Show where a stored descriptor resolves, without copying
- load: Resolve a stored descriptor and materialize it when missing
"""
from __future__ import annotations

import logging
from typing import Optional

import typer

from .operations import Operations, run_and_exit
from .operations.printers import (
    print_digest, print_dump_summary, print_load_summary, print_resolution
)
from .settings import create_settings_from_env

app = typer.Typer(name="fileblob", help="FileBlob CLI")


def _operations(verbose: bool) -> Operations:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return Operations(settings=create_settings_from_env())


@app.command()
def digest(
    path: str = typer.Argument(..., help="File to hash"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging")
) -> None:
    """Print the SHA-1 digest of a file."""

    def _digest() -> None:
        ops = _operations(verbose)
        print_digest(path, ops.digest(path))

    run_and_exit(_digest)


@app.command()
def dump(
    path: str = typer.Argument(..., help="File to serialize"),
    raw_out: Optional[str] = typer.Option(None, "--raw-out", help="Write the raw column bytes to this file"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging")
) -> None:
    """Print the info column value (name;hexdigest) for a file."""

    def _dump() -> None:
        ops = _operations(verbose)
        values = ops.dump(path, raw_out=raw_out)
        print_dump_summary(values.info, len(values.raw), raw_out)

    run_and_exit(_dump)


@app.command()
def resolve(
    info: str = typer.Argument(..., help="Info column value (name;hexdigest)"),
    location: Optional[str] = typer.Option(None, "--location", envvar="FILEBLOB_LOCATION", help="Location key"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging")
) -> None:
    """Show where a descriptor resolves and whether it needs materializing."""

    def _resolve() -> None:
        ops = _operations(verbose)
        ref, key, resolution = ops.resolve(info, location=location)
        print_resolution(ref, key, resolution)

    run_and_exit(_resolve)


@app.command()
def load(
    info: str = typer.Argument(..., help="Info column value (name;hexdigest)"),
    raw_file: Optional[str] = typer.Argument(None, help="File holding the raw column bytes"),
    location: Optional[str] = typer.Option(None, "--location", envvar="FILEBLOB_LOCATION", help="Location key"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging")
) -> None:
    """Resolve a descriptor, materializing it from RAW_FILE when missing."""

    def _load() -> None:
        ops = _operations(verbose)
        result = ops.load(info, raw_path=raw_file, location=location)
        print_load_summary(result.provenance, result.materialized)

    run_and_exit(_load)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()

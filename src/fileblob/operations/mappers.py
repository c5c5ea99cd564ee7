"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and CLI command wrappers
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

EXIT_CODES = {
    "BlobNotFound": 1,
    "FileNotFoundError": 1,
    "BlobFormatError": 2,
    "ValidationError": 2,
    "ValueError": 2,
    "OSError": 3,
    "BlobDigestMismatch": 4,
}


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Walks the exception's class hierarchy so the most specific mapped
    class wins:
    - 0: Success
    - 1: Blob or file not found (BlobNotFound, FileNotFoundError)
    - 2: Malformed descriptor or invalid input (BlobFormatError, ValueError)
    - 3: I/O error (OSError) or unknown error
    - 4: Digest mismatch (BlobDigestMismatch)

    Args:
        exc: Exception to map

    Returns:
        Exit code (1-4, with 3 as fallback for unknown exceptions)
    """
    for cls in type(exc).__mro__:
        if cls.__name__ in EXIT_CODES:
            return EXIT_CODES[cls.__name__]
    return 3


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function and maps any exceptions to appropriate
    exit codes using typer.Exit, reporting the error on stderr.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except Exception as e:
        from .printers import print_error
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e

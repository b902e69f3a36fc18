"""CLI argument parsers and input resolution."""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from ..core.errors import InputError


def parse_file_mode(value: str) -> int:
    """Parse octal file mode string."""
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"Invalid octal mode: {value!r}") from e


def stdin_is_piped() -> bool:
    """Return True when stdin is redirected from a pipe or file."""
    return not sys.stdin.isatty()


def _read_stdin() -> bytes:
    try:
        return sys.stdin.read().encode("utf-8")
    except UnicodeDecodeError as e:
        raise InputError(f"failed to read data from stdin: {e}") from e


def read_input(content: str, input_file: str | None) -> tuple[bytes, str]:
    """Resolve the YAML input source.

    Priority: inline content, explicit ``-`` (stdin), input file argument,
    then piped stdin.

    Returns:
        Raw input bytes and a description of their source
    """
    if content:
        data, source = content.encode("utf-8"), "content flag"
    elif input_file == "-":
        data, source = _read_stdin(), "explicit stdin ('-')"
    elif input_file:
        try:
            data = Path(input_file).read_bytes()
        except OSError as e:
            raise InputError(
                f"failed to read YAML data from file '{input_file}': {e}"
            ) from e
        source = "file argument"
    elif stdin_is_piped():
        data, source = (
            _read_stdin(),
            "implicit stdin (pipe/redirect)",
        )
    else:
        raise InputError(
            "no data provided. Use a data file argument, the '-' argument for "
            "stdin, --input-content, or pipe via stdin"
        )

    if not data.strip():
        raise InputError(f"no input provided from {source}")
    return data, source

"""Main CLI application."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from .. import __version__
from ..core.errors import SimplateError
from ..core.models import RenderOptions
from ..core.settings import Settings
from ..inputs import json_schema_validator, yaml_provider
from ..pipeline import execute, execute_with_files
from ..rendering.engine import build_renderer
from ..rendering.io import FilesystemSink
from .parsers import parse_file_mode, read_input

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="simplate",
    help="A simple YAML-powered template engine with multi-file output.",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"simplate {__version__}")
        raise typer.Exit()


@app.command()
def render(
    template_file: Annotated[
        Path,
        typer.Argument(help="Jinja2 template file.", metavar="TEMPLATE"),
    ],
    input_file: Annotated[
        Optional[str],
        typer.Argument(
            help="YAML data file, or '-' to read stdin.", metavar="[INPUT | -]"
        ),
    ] = None,
    input_content: Annotated[
        str,
        typer.Option(
            "--input-content",
            "-c",
            help="Inline YAML data (takes priority over INPUT and stdin).",
        ),
    ] = "",
    schema_file: Annotated[
        Optional[Path],
        typer.Option(
            "--input-schema-file",
            "-s",
            help="Validate the input against this JSON Schema.",
            metavar="FILE",
        ),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--output-dir",
            "-o",
            help="Base directory for #FILE:...# blocks (default: cwd).",
            metavar="DIR",
        ),
    ] = None,
    file_directives: Annotated[
        Optional[bool],
        typer.Option(
            "--file-directives/--no-file-directives",
            help="Route #FILE:name# ... #FILE# blocks to files (default: on).",
        ),
    ] = None,
    file_mode: Annotated[
        Optional[str],
        typer.Option(
            "--mode",
            help="File permissions in octal (default: 0644).",
            metavar="OCTAL",
        ),
    ] = None,
    lenient: Annotated[
        bool,
        typer.Option(
            "--lenient",
            help="Render undefined variables as empty instead of failing.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show the version and exit.",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Render a Jinja2 template with YAML data."""
    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    logger.debug("Starting simplate")

    mode = parse_file_mode(file_mode) if file_mode else None

    try:
        try:
            settings = Settings()
        except ValidationError as e:
            raise SimplateError(f"invalid SIMPLATE_* configuration: {e}") from e
        if mode is None:
            mode = settings.file_mode
        use_files = (
            settings.file_directives if file_directives is None else file_directives
        )
        options = RenderOptions(
            strict_undefined=settings.strict_undefined and not lenient
        )

        data, source = read_input(input_content, input_file)
        logger.debug(f"Input: {len(data)} byte(s) from {source}")

        try:
            template = template_file.read_bytes()
        except OSError as e:
            raise SimplateError(
                f"failed to read template file '{template_file}': {e}"
            ) from e

        validators = []
        if schema_file is not None:
            try:
                validators.append(json_schema_validator(schema_file.read_bytes()))
            except OSError as e:
                raise SimplateError(
                    f"failed to read schema file '{schema_file}': {e}"
                ) from e

        renderer = build_renderer(options)
        provider = yaml_provider(data)

        if use_files:
            sink = FilesystemSink(file_mode=mode, dir_mode=settings.dir_mode)
            sink.set_base_dir(output_dir or settings.output_dir)
            result = execute_with_files(
                provider, template, sys.stdout, sink, *validators, renderer=renderer
            )
        else:
            result = execute(provider, template, sys.stdout, *validators, renderer=renderer)
    except SimplateError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    logger.debug(f"Completed: {result.segments} segment(s), {len(result.files)} file(s)")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

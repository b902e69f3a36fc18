"""Execution pipeline: input, validation, rendering and dispatch.

Files written before a failing segment are left in place; the pipeline
never rolls back earlier writes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, TextIO

from .core.errors import (
    InputError,
    InputValidationError,
    RenderError,
    SimplateError,
)
from .core.models import Segment, SegmentKind
from .inputs import InputProvider, Validator
from .rendering.engine import Renderer
from .rendering.io import FileSink
from .rendering.segments import parse_segments

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Summary of a pipeline run."""

    segments: int = 0
    files: list[str] = field(default_factory=list)


def acquire_input(provider: InputProvider) -> Any:
    try:
        data = provider()
    except SimplateError as e:
        raise InputError(f"failed to get input data: {e}") from e
    except (OSError, ValueError) as e:
        raise InputError(f"failed to get input data: {e}") from e

    if data is None:
        raise InputError("failed to get input data: input is empty")
    return data


def run_validators(data: Any, validators: tuple[Validator, ...]) -> None:
    for validator in validators:
        name = getattr(validator, "__name__", type(validator).__name__)
        logger.debug(f"Running validator: {name}")
        try:
            validator(data)
        except InputValidationError as e:
            raise InputValidationError(
                f"input validation failed ({e.validator or name}): {e}",
                validator=e.validator or name,
            ) from e
        except (ValueError, TypeError) as e:
            raise InputValidationError(
                f"input validation failed ({name}): {e}", validator=name
            ) from e


def _render_segment(
    renderer: Renderer, source: bytes, data: Any, index: int, part: str, what: str
) -> str:
    try:
        return renderer.render(source, data)
    except RenderError as e:
        raise RenderError(
            f"failed to render {what}: {e}", segment_index=index, part=part
        ) from e


def _dispatch(
    segments: list[Segment],
    data: Any,
    output: TextIO,
    sink: FileSink | None,
    renderer: Renderer,
) -> ExecutionResult:
    result = ExecutionResult()

    for index, segment in enumerate(segments):
        if segment.kind is SegmentKind.DEFAULT:
            text = _render_segment(
                renderer,
                segment.content,
                data,
                index,
                "content",
                f"stdout segment {index}",
            )
            output.write(text)
            logger.debug(f"Segment {index}: {len(text)} char(s) to output")

        else:
            if sink is None:
                raise RenderError(
                    f"segment {index} targets a file but no file sink is configured",
                    segment_index=index,
                    part="filename",
                )
            name = _render_segment(
                renderer,
                segment.name_template or b"",
                data,
                index,
                "filename",
                f"filename template for segment {index}",
            )
            text = _render_segment(
                renderer,
                segment.content,
                data,
                index,
                "content",
                f"file content for {name}",
            )
            sink.write(name, text.encode("utf-8"))
            result.files.append(name)
            logger.debug(f"Segment {index}: {len(text)} char(s) to {name}")

        result.segments += 1

    output.flush()
    return result


def execute(
    provider: InputProvider,
    template: bytes | str,
    output: TextIO,
    *validators: Validator,
    renderer: Renderer | None = None,
) -> ExecutionResult:
    """Render a whole template to ``output``.

    FILE directives are not interpreted; the template is rendered as a
    single segment.

    Args:
        provider: Input provider
        template: Template source
        output: Stream receiving the rendered text
        validators: Validators run against the input, in order
        renderer: Renderer to use (default helpers when omitted)

    Returns:
        Execution summary
    """
    data = acquire_input(provider)
    run_validators(data, validators)

    if isinstance(template, str):
        template = template.encode("utf-8")
    segments = [Segment(kind=SegmentKind.DEFAULT, content=template)]

    return _dispatch(segments, data, output, None, renderer or Renderer())


def execute_with_files(
    provider: InputProvider,
    template: bytes | str,
    output: TextIO,
    sink: FileSink,
    *validators: Validator,
    renderer: Renderer | None = None,
) -> ExecutionResult:
    """Render a template, routing FILE blocks to ``sink``.

    Content outside FILE blocks goes to ``output`` in source order. Each
    FILE block's filename is itself rendered before its content.

    Args:
        provider: Input provider
        template: Template source, possibly with FILE directives
        output: Stream receiving content outside FILE blocks
        sink: Destination for FILE blocks
        validators: Validators run against the input, in order
        renderer: Renderer to use (default helpers when omitted)

    Returns:
        Execution summary

    Raises:
        SimplateError: On the first failing step; earlier file writes remain
    """
    data = acquire_input(provider)
    run_validators(data, validators)

    segments = parse_segments(template)
    file_count = sum(1 for segment in segments if segment.is_file)
    logger.info(f"Rendering {len(segments)} segment(s), {file_count} file(s)")

    result = _dispatch(segments, data, output, sink, renderer or Renderer())

    logger.info(f"Successfully rendered {len(result.files)} file(s)")
    return result

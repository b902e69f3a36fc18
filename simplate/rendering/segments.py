"""FILE directive parsing.

A template is split into segments routed either to the default output or to
a named file::

    before
    #FILE:reports/{{ name }}.txt#
    file body
    #FILE#
    after

Filename templates are kept unrendered; the pipeline renders them later.
"""

from __future__ import annotations

import logging
from enum import Enum

from ..core.errors import (
    EmptyDestinationNameError,
    MalformedDirectiveError,
    NestedDirectiveError,
    UnclosedDirectiveError,
    UnexpectedClosingMarkerError,
)
from ..core.models import Segment, SegmentKind

logger = logging.getLogger(__name__)

FILE_OPEN_PREFIX = b"#FILE:"
FILE_OPEN_SUFFIX = b"#"
FILE_CLOSE = b"#FILE#"


class _State(Enum):
    OUTSIDE = "outside"
    INSIDE_FILE = "inside_file"


def _is_blank(segment: Segment) -> bool:
    if segment.kind is not SegmentKind.DEFAULT:
        return False
    # Unicode whitespace (NBSP, NEL, ...) counts as blank too.
    return not segment.content.decode("utf-8", errors="replace").strip()


def _trim_edges(segments: list[Segment]) -> list[Segment]:
    """Drop blank default segments from both ends of the list.

    FILE segments and blank segments between other segments are kept.
    """
    start, end = 0, len(segments)
    while start < end and _is_blank(segments[start]):
        start += 1
    while end > start and _is_blank(segments[end - 1]):
        end -= 1

    if start >= end:
        return [Segment(kind=SegmentKind.DEFAULT, content=b"")]
    return segments[start:end]


def parse_segments(template: bytes | str) -> list[Segment]:
    """Split a template into default and FILE segments.

    Args:
        template: Raw template source

    Returns:
        Ordered list of segments (never empty)

    Raises:
        DirectiveError: If the template contains a malformed directive
    """
    if isinstance(template, str):
        template = template.encode("utf-8")

    if not template:
        return [Segment(kind=SegmentKind.DEFAULT, content=b"")]

    segments: list[Segment] = []
    state = _State.OUTSIDE
    pos = 0
    block_start = 0
    name_template = b""

    while pos < len(template):
        open_idx = template.find(FILE_OPEN_PREFIX, pos)
        close_idx = template.find(FILE_CLOSE, pos)

        if state is _State.OUTSIDE:
            if open_idx == -1 and close_idx == -1:
                segments.append(
                    Segment(
                        kind=SegmentKind.DEFAULT, content=template[pos:], offset=pos
                    )
                )
                break

            if close_idx != -1 and (open_idx == -1 or close_idx < open_idx):
                raise UnexpectedClosingMarkerError(close_idx)

            if open_idx > pos:
                segments.append(
                    Segment(
                        kind=SegmentKind.DEFAULT,
                        content=template[pos:open_idx],
                        offset=pos,
                    )
                )

            name_start = open_idx + len(FILE_OPEN_PREFIX)
            name_end = template.find(FILE_OPEN_SUFFIX, name_start)
            if name_end == -1:
                raise MalformedDirectiveError(
                    open_idx, "missing closing # in filename"
                )

            name_template = template[name_start:name_end]
            if not name_template.strip():
                raise EmptyDestinationNameError(open_idx)
            if FILE_OPEN_PREFIX in name_template:
                raise NestedDirectiveError(open_idx)

            block_start = open_idx
            state = _State.INSIDE_FILE
            pos = name_end + len(FILE_OPEN_SUFFIX)

        else:
            if open_idx != -1 and (close_idx == -1 or open_idx < close_idx):
                raise NestedDirectiveError(open_idx)
            if close_idx == -1:
                raise UnclosedDirectiveError(block_start)

            segments.append(
                Segment(
                    kind=SegmentKind.FILE,
                    content=template[pos:close_idx],
                    name_template=name_template,
                    offset=block_start,
                )
            )
            state = _State.OUTSIDE
            pos = close_idx + len(FILE_CLOSE)

    if state is _State.INSIDE_FILE:
        raise UnclosedDirectiveError(block_start)

    logger.debug(f"Parsed {len(segments)} raw segment(s)")
    return _trim_edges(segments)


def reconstruct(segments: list[Segment]) -> bytes:
    """Reassemble template source from segments, re-inserting FILE markers."""
    parts: list[bytes] = []
    for segment in segments:
        if segment.is_file:
            parts.append(
                FILE_OPEN_PREFIX
                + (segment.name_template or b"")
                + FILE_OPEN_SUFFIX
                + segment.content
                + FILE_CLOSE
            )
        else:
            parts.append(segment.content)
    return b"".join(parts)

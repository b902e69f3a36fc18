"""Exception hierarchy shared by the parser, sinks and pipeline."""

from __future__ import annotations


class SimplateError(Exception):
    """Base class for every error raised by simplate."""


class DirectiveError(SimplateError, ValueError):
    """Raised when a template contains a malformed FILE directive."""

    reason = "invalid FILE directive"

    def __init__(self, offset: int, detail: str = "") -> None:
        self.offset = offset
        message = f"{self.reason} at position {offset}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class UnclosedDirectiveError(DirectiveError):
    reason = "unclosed FILE directive starting"


class NestedDirectiveError(DirectiveError):
    reason = "nested FILE directive not allowed"


class EmptyDestinationNameError(DirectiveError):
    reason = "empty filename in FILE directive"


class UnexpectedClosingMarkerError(DirectiveError):
    reason = "unexpected FILE closing marker"


class MalformedDirectiveError(DirectiveError):
    reason = "malformed FILE directive"


class InputError(SimplateError):
    """Raised when input data cannot be acquired."""


class InputValidationError(SimplateError):
    """Raised when input data is rejected by a validator."""

    def __init__(self, message: str, validator: str | None = None) -> None:
        self.validator = validator
        super().__init__(message)


class RenderError(SimplateError):
    """Raised when a filename or content template fails to render."""

    def __init__(
        self, message: str, segment_index: int | None = None, part: str = "content"
    ) -> None:
        self.segment_index = segment_index
        self.part = part
        super().__init__(message)


class SinkError(SimplateError):
    """Raised when rendered output cannot be written to its destination."""

    def __init__(self, message: str, destination: str = "") -> None:
        self.destination = destination
        super().__init__(message)


class UniqueError(SimplateError, TypeError):
    """Raised by the ``unique`` helper for unhashable elements."""

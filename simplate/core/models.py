"""Domain models for template segments and rendering configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SegmentKind(str, Enum):
    """Destination of a template segment."""

    DEFAULT = "default"
    FILE = "file"


class Segment(BaseModel):
    """A contiguous piece of a template routed to a single destination."""

    model_config = ConfigDict(frozen=True)

    kind: SegmentKind = Field(..., description="Destination kind")
    content: bytes = Field(default=b"", description="Raw template body")
    name_template: bytes | None = Field(
        default=None, description="Raw destination name template (FILE only)"
    )
    offset: int = Field(default=0, ge=0, description="Source byte offset")

    @property
    def is_file(self) -> bool:
        return self.kind is SegmentKind.FILE


class RenderOptions(BaseModel):
    """Configuration for the Jinja2 rendering environment."""

    strict_undefined: bool = Field(
        default=True, description="Fail on undefined template variables"
    )
    trim_blocks: bool = Field(default=True, description="Strip newline after blocks")
    lstrip_blocks: bool = Field(
        default=True, description="Strip whitespace before blocks"
    )


"""Template rendering engine."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError, Undefined

from ..core.errors import RenderError
from ..core.models import RenderOptions
from .functions import default_functions

logger = logging.getLogger(__name__)


def build_environment(
    options: RenderOptions,
    functions: Mapping[str, Callable[..., Any]] | None = None,
) -> Environment:
    """Create a Jinja2 environment with the helper functions registered.

    Args:
        options: Rendering options
        functions: Extra helpers, registered on top of the built-in ones

    Returns:
        Configured Jinja2 environment
    """
    env = Environment(
        loader=BaseLoader(),
        undefined=StrictUndefined if options.strict_undefined else Undefined,
        autoescape=False,
        trim_blocks=options.trim_blocks,
        lstrip_blocks=options.lstrip_blocks,
        keep_trailing_newline=True,
    )
    env.globals.update(default_functions())
    if functions:
        env.globals.update(functions)
    return env


def build_context(data: Any) -> dict[str, Any]:
    """Build the template context for an input value.

    Mapping keys become top-level variables; the whole value is always
    reachable as ``data``.
    """
    context: dict[str, Any] = {}
    if isinstance(data, Mapping):
        context.update({str(key): value for key, value in data.items()})
    # An input key named "data" stays reachable as data.data.
    context["data"] = data
    return context


class Renderer:
    """Renders template sources against input data.

    Each renderer owns its own environment, so renderers with different
    helper sets do not interfere with each other.
    """

    def __init__(
        self,
        options: RenderOptions | None = None,
        functions: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        self.options = options or RenderOptions()
        self.environment = build_environment(self.options, functions)

    def render(self, source: bytes | str, data: Any) -> str:
        """Render a template source.

        Args:
            source: Template source (UTF-8 when given as bytes)
            data: Input value

        Returns:
            Rendered text

        Raises:
            RenderError: If the template fails to parse or execute
        """
        if isinstance(source, bytes):
            try:
                source = source.decode("utf-8")
            except UnicodeDecodeError as e:
                raise RenderError(f"template is not valid UTF-8: {e}") from e

        try:
            template = self.environment.from_string(source)
        except TemplateError as e:
            raise RenderError(f"failed to parse template: {e}") from e

        try:
            return template.render(build_context(data))
        except Exception as e:
            # Arbitrary exceptions escape from expressions and helpers.
            raise RenderError(
                f"failed to execute template: {type(e).__name__}: {e}"
            ) from e


def build_renderer(
    options: RenderOptions | None = None,
    functions: Mapping[str, Callable[..., Any]] | None = None,
) -> Renderer:
    logger.debug(f"Building renderer (options={options})")
    return Renderer(options, functions)

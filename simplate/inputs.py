"""Input providers and validators."""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

import yaml
from jsonschema import SchemaError, ValidationError
from jsonschema.validators import validator_for

from .core.errors import InputError, InputValidationError

logger = logging.getLogger(__name__)

InputProvider = Callable[[], Any]
Validator = Callable[[Any], None]


def yaml_provider(raw: bytes | str) -> InputProvider:
    """Return a provider that parses ``raw`` as YAML when invoked."""

    def provide() -> Any:
        try:
            return yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise InputError(f"failed to unmarshal YAML input: {e}") from e

    return provide


def value_provider(value: Any) -> InputProvider:
    """Return a provider for an already-parsed value.

    The provider fails when ``value`` is None.
    """

    def provide() -> Any:
        if value is None:
            raise InputError("input is nil")
        return value

    return provide


def _load_schema(schema: bytes | str | dict[str, Any]) -> dict[str, Any]:
    if isinstance(schema, dict):
        return schema
    try:
        loaded = json.loads(schema)
    except json.JSONDecodeError as e:
        raise InputValidationError(
            f"failed to compile JSON Schema: {e}", validator="json_schema"
        ) from e
    if not isinstance(loaded, dict):
        raise InputValidationError(
            "failed to compile JSON Schema: schema must be a JSON object",
            validator="json_schema",
        )
    return loaded


def json_schema_validator(schema: bytes | str | dict[str, Any]) -> Validator:
    """Return a validator checking input against a JSON Schema.

    The schema is compiled when the validator runs, so a broken schema is
    reported as a validation failure.

    Args:
        schema: JSON Schema as raw JSON or an already-decoded object

    Returns:
        Validator callable
    """

    def validate(data: Any) -> None:
        schema_doc = _load_schema(schema)
        validator_cls = validator_for(schema_doc)
        try:
            validator_cls.check_schema(schema_doc)
        except SchemaError as e:
            raise InputValidationError(
                f"failed to compile JSON Schema: {e.message}", validator="json_schema"
            ) from e

        try:
            validator_cls(schema_doc).validate(data)
        except ValidationError as e:
            location = "/".join(str(part) for part in e.absolute_path) or "(root)"
            raise InputValidationError(
                f"{location}: {e.message}", validator="json_schema"
            ) from e

        logger.debug("Input matches JSON Schema")

    validate.__name__ = "json_schema"
    return validate

"""Helper functions exposed to every template."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from ..core.errors import UniqueError


def env(key: str) -> str:
    """Return the environment variable ``key`` or an empty string."""
    return os.environ.get(key, "")


def env_or_default(key: str, default: str) -> str:
    """Return the environment variable ``key``, or ``default`` if unset or empty."""
    return os.environ.get(key) or default


def unique(items: Iterable[Any] | None) -> list[Any] | None:
    """Return the distinct elements of ``items`` in order of first occurrence.

    Elements of different types never compare equal, so ``1``, ``1.0`` and
    ``True`` are all kept.

    Args:
        items: Sequence to de-duplicate, or None

    Returns:
        De-duplicated list, or None when ``items`` is None

    Raises:
        UniqueError: If ``items`` is not a sequence or holds unhashable elements
    """
    if items is None:
        return None
    if isinstance(items, (str, bytes, Mapping)):
        raise UniqueError(
            f"unique: expected a sequence, got {type(items).__name__}"
        )

    seen: set[tuple[type, Any]] = set()
    result: list[Any] = []
    for item in items:
        key = (type(item), item)
        try:
            hash(key)
        except TypeError as e:
            raise UniqueError(
                f"unique: elements of type {type(item).__name__} are not comparable"
            ) from e
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


def default_functions() -> dict[str, Callable[..., Any]]:
    """Return a fresh copy of the built-in helper table."""
    return {
        "env": env,
        "env_or_default": env_or_default,
        "unique": unique,
    }

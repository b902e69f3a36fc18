"""Output sinks for FILE segments."""

from __future__ import annotations

import contextlib
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from ..core.errors import SinkError

logger = logging.getLogger(__name__)

TEMP_SUFFIX = ".tmp"


def check_destination(name: str) -> None:
    """Reject empty names and names with parent-directory traversal.

    The check runs on the raw name, before any joining or normalization.
    """
    if not name:
        raise SinkError("filename cannot be empty", destination=name)
    if ".." in name:
        raise SinkError(
            f"path traversal not allowed in filename: {name}", destination=name
        )


def resolve_destination(name: str, base_dir: Path | None) -> Path:
    """Resolve a destination name to a normalized path.

    Args:
        name: Destination name as rendered from the template
        base_dir: Optional base directory the path must stay within

    Returns:
        Normalized destination path

    Raises:
        SinkError: If the name is invalid or escapes ``base_dir``
    """
    check_destination(name)

    if base_dir is None:
        return Path(os.path.normpath(name))

    full_path = os.path.normpath(os.path.join(base_dir, name))
    rel_path = os.path.relpath(full_path, base_dir)
    if rel_path == os.pardir or rel_path.startswith(os.pardir + os.sep):
        raise SinkError(
            f"resolved path {full_path} is outside output directory",
            destination=name,
        )
    return Path(full_path)


def ensure_parent(path: Path, mode: int = 0o755) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
        mode: Permissions for created directories
    """
    path.parent.mkdir(mode=mode, parents=True, exist_ok=True)


def atomic_write_bytes(path: Path, content: bytes, mode: int = 0o644) -> None:
    """Write bytes to a file atomically through a sibling temporary file.

    Args:
        path: Destination file path
        content: Bytes to write
        mode: File permissions (octal)
    """
    tmp_path = path.with_name(path.name + TEMP_SUFFIX)
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_path, path)
        os.chmod(path, mode)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(tmp_path)


class FileSink(ABC):
    """Destination for rendered FILE segments."""

    @abstractmethod
    def write(self, name: str, content: bytes) -> None:
        """Store ``content`` under the destination ``name``."""

    @abstractmethod
    def set_base_dir(self, directory: str | Path | None) -> None:
        """Resolve subsequent names relative to ``directory``."""


class FilesystemSink(FileSink):
    """Writes FILE segments to disk, confined to an optional base directory."""

    def __init__(
        self,
        base_dir: str | Path | None = None,
        file_mode: int = 0o644,
        dir_mode: int = 0o755,
    ) -> None:
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        self.base_dir: Path | None = None
        self.written: list[Path] = []
        if base_dir:
            self.set_base_dir(base_dir)

    def set_base_dir(self, directory: str | Path | None) -> None:
        if not directory:
            self.base_dir = None
            return

        clean_dir = Path(os.path.normpath(directory))
        try:
            clean_dir.mkdir(mode=self.dir_mode, parents=True, exist_ok=True)
        except FileExistsError as e:
            raise SinkError(
                f"output path {clean_dir} is not a directory",
                destination=str(clean_dir),
            ) from e
        except OSError as e:
            raise SinkError(
                f"failed to create output directory {clean_dir}: {e}",
                destination=str(clean_dir),
            ) from e

        if not clean_dir.is_dir():
            raise SinkError(
                f"output path {clean_dir} is not a directory",
                destination=str(clean_dir),
            )

        self.base_dir = clean_dir
        logger.debug(f"Output directory: {clean_dir}")

    def write(self, name: str, content: bytes) -> None:
        path = resolve_destination(name, self.base_dir)

        try:
            ensure_parent(path, self.dir_mode)
        except OSError as e:
            raise SinkError(
                f"failed to create directory {path.parent}: {e}", destination=name
            ) from e

        try:
            atomic_write_bytes(path, content, mode=self.file_mode)
        except OSError as e:
            raise SinkError(f"failed to write file {path}: {e}", destination=name) from e

        self.written.append(path)
        logger.info(f"Wrote {name} → {path}")


class MemorySink(FileSink):
    """Keeps FILE segments in memory; used by tests and dry runs."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.base_dir: Path | None = None

    def set_base_dir(self, directory: str | Path | None) -> None:
        self.base_dir = Path(os.path.normpath(directory)) if directory else None

    def write(self, name: str, content: bytes) -> None:
        key = name
        if self.base_dir is not None:
            key = str(resolve_destination(name, self.base_dir))
        else:
            check_destination(name)
        self.files[key] = bytes(content)

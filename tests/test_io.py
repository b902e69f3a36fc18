"""
Tests for FILE segment sinks.
"""

import os
import stat
from pathlib import Path

import pytest

from simplate.core.errors import SinkError
from simplate.rendering.io import FilesystemSink, MemorySink, atomic_write_bytes


def test_memory_sink_write():
    sink = MemorySink()
    sink.write("out.txt", b"content")
    assert sink.files == {"out.txt": b"content"}


def test_memory_sink_last_write_wins():
    sink = MemorySink()
    sink.write("same.txt", b"first")
    sink.write("same.txt", b"second")
    assert sink.files["same.txt"] == b"second"


def test_memory_sink_base_dir():
    sink = MemorySink()
    sink.set_base_dir("out/")
    sink.write("nested/file.txt", b"x")
    assert sink.files == {os.path.join("out", "nested", "file.txt"): b"x"}


@pytest.mark.parametrize("name", ["", "../escape.txt", "a/../../b.txt"])
def test_memory_sink_rejects_bad_names(name):
    with pytest.raises(SinkError):
        MemorySink().write(name, b"x")


def test_filesystem_sink_write(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path)
    sink.write("out.txt", b"hello\n")

    target = tmp_path / "out.txt"
    assert target.read_bytes() == b"hello\n"
    assert sink.written == [target]


def test_filesystem_sink_creates_parent_directories(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path)
    sink.write("a/b/c/file.txt", b"deep")

    assert (tmp_path / "a" / "b" / "c" / "file.txt").read_bytes() == b"deep"
    assert (tmp_path / "a" / "b").is_dir()


def test_filesystem_sink_file_permissions(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path)
    sink.write("perm.txt", b"x")

    mode = stat.S_IMODE((tmp_path / "perm.txt").stat().st_mode)
    assert mode == 0o644
    assert not mode & stat.S_IXUSR


def test_filesystem_sink_custom_file_mode(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path, file_mode=0o600)
    sink.write("secret.txt", b"x")
    assert stat.S_IMODE((tmp_path / "secret.txt").stat().st_mode) == 0o600


def test_filesystem_sink_overwrite(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path)
    sink.write("same.txt", b"first")
    sink.write("same.txt", b"second")
    assert (tmp_path / "same.txt").read_bytes() == b"second"


def test_filesystem_sink_leaves_no_temp_file(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path)
    sink.write("atomic.txt", b"x")
    assert sorted(p.name for p in tmp_path.iterdir()) == ["atomic.txt"]


def test_filesystem_sink_without_base_dir(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    sink = FilesystemSink()
    sink.write("rel/out.txt", b"x")
    assert (tmp_path / "rel" / "out.txt").read_bytes() == b"x"


def test_filesystem_sink_empty_name(tmp_path: Path):
    with pytest.raises(SinkError, match="cannot be empty"):
        FilesystemSink(base_dir=tmp_path).write("", b"x")


@pytest.mark.parametrize(
    "name",
    ["../escape.txt", "a/../../escape.txt", "..", "sub/../inside.txt", "a..b.txt"],
)
def test_filesystem_sink_rejects_traversal(tmp_path: Path, name):
    sink = FilesystemSink(base_dir=tmp_path / "out")
    with pytest.raises(SinkError, match="path traversal") as excinfo:
        sink.write(name, b"x")
    assert excinfo.value.destination == name
    assert not (tmp_path / "escape.txt").exists()


def test_filesystem_sink_rejects_traversal_without_base_dir(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SinkError, match="path traversal"):
        FilesystemSink().write("../escape.txt", b"x")


def test_filesystem_sink_rejects_absolute_name_outside_base(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path / "out")
    outside = tmp_path / "outside.txt"
    with pytest.raises(SinkError, match="outside output directory"):
        sink.write(str(outside), b"x")
    assert not outside.exists()


def test_set_base_dir_creates_directory(tmp_path: Path):
    target = tmp_path / "new" / "dir"
    FilesystemSink().set_base_dir(target)
    assert target.is_dir()


def test_set_base_dir_rejects_file(tmp_path: Path):
    existing = tmp_path / "file.txt"
    existing.write_text("x")
    with pytest.raises(SinkError, match="not a directory"):
        FilesystemSink().set_base_dir(existing)


def test_set_base_dir_clear(tmp_path: Path):
    sink = FilesystemSink(base_dir=tmp_path)
    sink.set_base_dir(None)
    assert sink.base_dir is None


def test_atomic_write_cleans_up_on_failure(tmp_path: Path, monkeypatch):
    target = tmp_path / "out.txt"

    def fail_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(os, "replace", fail_replace)
    with pytest.raises(OSError, match="rename failed"):
        atomic_write_bytes(target, b"x")

    assert list(tmp_path.iterdir()) == []


def test_filesystem_sink_wraps_write_errors(tmp_path: Path, monkeypatch):
    def fail_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(os, "replace", fail_replace)
    sink = FilesystemSink(base_dir=tmp_path)
    with pytest.raises(SinkError, match="failed to write file") as excinfo:
        sink.write("out.txt", b"x")
    assert excinfo.value.destination == "out.txt"
    assert not (tmp_path / "out.txt").exists()
    assert not (tmp_path / "out.txt.tmp").exists()

import zipfile
from pathlib import Path
from typing import Any

import pytest

from titlesequence.backends import (
    ArchiveBackend,
    BackendIOError,
    BackendOpenError,
    DirectoryBackend,
    EntryNotFoundError,
    SequenceNotFoundError,
    is_archive_path,
    open_backend,
)


def test_directory_enumeration_includes_legacy_extensions(
    make_directory_sequence: Any,
) -> None:
    path = make_directory_sequence(
        saves={
            "b.sv6": b"b",
            "a.SC6": b"a",
            "legacy.sv4": b"l",
            "scenario.sc4": b"s",
            "new.park": b"p",
            "nested/deep.sv6": b"d",
            "notes.txt": b"n",
        }
    )

    assert DirectoryBackend(path).enumerate_entries() == [
        "a.SC6",
        "b.sv6",
        "legacy.sv4",
        "nested/deep.sv6",
        "new.park",
        "scenario.sc4",
    ]


def test_archive_enumeration_only_lists_current_formats(
    make_archive_sequence: Any,
) -> None:
    path = make_archive_sequence(
        saves={
            "b.sv6": b"b",
            "a.SC6": b"a",
            "legacy.sv4": b"l",
            "new.park": b"p",
            "notes.txt": b"n",
        }
    )

    assert ArchiveBackend(path).enumerate_entries() == ["b.sv6", "a.SC6", "new.park"]


def test_directory_entry_operations(directory_sequence: Path, tmp_path: Path) -> None:
    backend = DirectoryBackend(directory_sequence)

    backend.add_entry("d.sv6", b"park-d")
    assert backend.read_entry("d.sv6") == b"park-d"

    backend.rename_entry("d.sv6", "e.sv6")
    assert not (directory_sequence / "d.sv6").exists()
    with backend.open_entry("e.sv6") as stream:
        assert stream.read() == b"park-d"

    backend.delete_entry("e.sv6")
    assert not (directory_sequence / "e.sv6").exists()

    source = tmp_path / "outside.park"
    source.write_bytes(b"outside")
    backend.import_entry(source, "imported.park")
    assert (directory_sequence / "imported.park").read_bytes() == b"outside"


def test_directory_failures_are_reported(directory_sequence: Path, tmp_path: Path) -> None:
    backend = DirectoryBackend(directory_sequence)

    with pytest.raises(EntryNotFoundError):
        backend.read_entry("missing.sv6")
    with pytest.raises(EntryNotFoundError):
        backend.rename_entry("missing.sv6", "other.sv6")
    with pytest.raises(BackendIOError):
        backend.delete_entry("missing.sv6")
    with pytest.raises(BackendIOError):
        backend.import_entry(tmp_path / "missing.sv6", "copy.sv6")
    with pytest.raises(SequenceNotFoundError):
        DirectoryBackend(tmp_path / "nowhere").read_script()


def test_archive_entry_operations(archive_sequence: Path, tmp_path: Path) -> None:
    backend = ArchiveBackend(archive_sequence)

    backend.add_entry("d.sv6", b"park-d")
    backend.rename_entry("a.sv6", "first.sv6")
    backend.delete_entry("b.sv6")
    backend.write_script(b"END\n")

    with zipfile.ZipFile(archive_sequence) as archive:
        assert archive.namelist() == ["script.txt", "first.sv6", "c.sv6", "d.sv6"]
        assert archive.read("first.sv6") == b"park-a"
        assert archive.read("script.txt") == b"END\n"

    with backend.open_entry("d.sv6") as stream:
        assert stream.read() == b"park-d"
    assert not (tmp_path / "sequences" / "Sample.parkseq.tmp").exists()


def test_archive_failures_are_reported(archive_sequence: Path, tmp_path: Path) -> None:
    backend = ArchiveBackend(archive_sequence)
    before = archive_sequence.read_bytes()

    with pytest.raises(EntryNotFoundError):
        backend.read_entry("missing.sv6")
    with pytest.raises(EntryNotFoundError):
        backend.rename_entry("missing.sv6", "other.sv6")
    with pytest.raises(EntryNotFoundError):
        backend.delete_entry("missing.sv6")
    assert archive_sequence.read_bytes() == before

    corrupt = tmp_path / "corrupt.parkseq"
    corrupt.write_bytes(b"definitely not a zip")
    with pytest.raises(BackendOpenError):
        ArchiveBackend(corrupt).enumerate_entries()
    with pytest.raises(BackendOpenError):
        ArchiveBackend(tmp_path / "absent.parkseq").read_script()


def test_archive_without_script_is_not_found(make_archive_sequence: Any) -> None:
    path = make_archive_sequence("NoScript")
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("a.sv6", b"a")

    with pytest.raises(SequenceNotFoundError):
        ArchiveBackend(path).read_script()


def test_archive_add_entry_creates_missing_archive(tmp_path: Path) -> None:
    backend = ArchiveBackend(tmp_path / "Fresh.parkseq")
    backend.write_script(b"# SCRIPT FOR Fresh\n")

    assert backend.read_script() == b"# SCRIPT FOR Fresh\n"
    assert backend.enumerate_entries() == []


def test_backend_detection(directory_sequence: Path, archive_sequence: Path, tmp_path: Path) -> None:
    assert not is_archive_path(directory_sequence)
    assert is_archive_path(archive_sequence)
    assert is_archive_path(tmp_path / "not-yet-created.PARKSEQ")

    assert isinstance(open_backend(directory_sequence), DirectoryBackend)
    assert isinstance(open_backend(archive_sequence), ArchiveBackend)
    assert isinstance(open_backend(archive_sequence, is_zip=False), DirectoryBackend)

"""Test configuration for the title sequence project."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import zipfile
from typing import Any, Mapping

import pytest

SAMPLE_SCRIPT = (
    "# SCRIPT FOR Sample\n"
    "LOAD a.sv6\n"
    "LOCATION 64 72\n"
    "LOAD b.sv6\n"
    "LOAD c.sv6\n"
    "WAIT 100\n"
    "LOAD b.sv6\n"
    "END\n"
)

SAMPLE_SAVES: Mapping[str, bytes] = {
    "a.sv6": b"park-a",
    "b.sv6": b"park-b",
    "c.sv6": b"park-c",
}


def write_directory_sequence(
    root: Path,
    name: str = "Sample",
    *,
    script: str = SAMPLE_SCRIPT,
    saves: Mapping[str, bytes] = SAMPLE_SAVES,
) -> Path:
    """Create a folder-based title sequence and return its path."""

    directory = root / name
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "script.txt").write_text(script, encoding="utf-8")
    for filename, data in saves.items():
        target = directory / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    return directory


def write_archive_sequence(
    root: Path,
    name: str = "Sample",
    *,
    script: str = SAMPLE_SCRIPT,
    saves: Mapping[str, bytes] = SAMPLE_SAVES,
) -> Path:
    """Create a ``.parkseq`` archive holding a title sequence and return its path."""

    root.mkdir(parents=True, exist_ok=True)
    archive_path = root / f"{name}.parkseq"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("script.txt", script)
        for filename, data in saves.items():
            archive.writestr(filename, data)
    return archive_path


@pytest.fixture()
def directory_sequence(tmp_path: Path) -> Path:
    """Return the path of a sample folder-based sequence."""

    return write_directory_sequence(tmp_path / "sequences")


@pytest.fixture()
def archive_sequence(tmp_path: Path) -> Path:
    """Return the path of a sample archived sequence."""

    return write_archive_sequence(tmp_path / "sequences")


@pytest.fixture()
def make_directory_sequence(tmp_path: Path) -> Any:
    """Factory fixture for folder-based sequences under ``tmp_path/sequences``."""

    def _factory(name: str = "Sample", **kwargs: Any) -> Path:
        return write_directory_sequence(tmp_path / "sequences", name, **kwargs)

    return _factory


@pytest.fixture()
def make_archive_sequence(tmp_path: Path) -> Any:
    """Factory fixture for archived sequences under ``tmp_path/sequences``."""

    def _factory(name: str = "Sample", **kwargs: Any) -> Path:
        return write_archive_sequence(tmp_path / "sequences", name, **kwargs)

    return _factory


@pytest.fixture()
def make_save_file(tmp_path: Path) -> Any:
    """Factory fixture writing a park save outside any sequence."""

    def _factory(name: str, data: bytes = b"imported") -> Path:
        incoming = tmp_path / "incoming"
        incoming.mkdir(exist_ok=True)
        path = incoming / name
        path.write_bytes(data)
        return path

    return _factory


__all__ = [
    "archive_sequence",
    "directory_sequence",
    "make_archive_sequence",
    "make_directory_sequence",
    "make_save_file",
]

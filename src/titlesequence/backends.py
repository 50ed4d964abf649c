"""Storage backends holding a title sequence's script and park saves.

A sequence lives either in a plain directory or in a single ZIP archive
(``*.parkseq``). Both expose the same operations so :class:`TitleSequence`
never needs to know which one it is talking to.
"""

from __future__ import annotations

import io
import logging
import shutil
import zipfile
from pathlib import Path
from typing import BinaryIO, Callable, Protocol

SCRIPT_FILENAME = "script.txt"
TITLE_SEQUENCE_EXTENSION = ".parkseq"

# Directories may still contain legacy saves; archives only carry the current formats.
DIRECTORY_SAVE_EXTENSIONS = (".sc6", ".sv6", ".park", ".sv4", ".sc4")
ARCHIVE_SAVE_EXTENSIONS = (".sv6", ".sc6", ".park")

log = logging.getLogger(__name__)


class TitleSequenceError(RuntimeError):
    """Base class for failures reported by title sequence storage."""


class EntryNotFoundError(TitleSequenceError):
    """Raised when a save entry does not exist in the backend."""


class SequenceNotFoundError(EntryNotFoundError):
    """Raised when a sequence has no readable ``script.txt``."""


class BackendOpenError(TitleSequenceError):
    """Raised when the directory or archive cannot be opened."""


class BackendIOError(TitleSequenceError):
    """Raised when writing, copying, moving or deleting an entry fails."""


class SequenceBackend(Protocol):
    """Operations a storage location must support for a title sequence."""

    path: Path

    def enumerate_entries(self) -> list[str]:
        """Return the names of the save entries, in storage order."""

    def read_entry(self, name: str) -> bytes:
        """Return the full contents of the entry called ``name``."""

    def open_entry(self, name: str) -> BinaryIO:
        """Return a fresh readable stream over the entry called ``name``."""

    def read_script(self) -> bytes:
        """Return the raw bytes of ``script.txt``."""

    def write_script(self, data: bytes) -> None:
        """Replace ``script.txt`` with ``data``."""

    def add_entry(self, name: str, data: bytes) -> None:
        """Store ``data`` under ``name``, replacing any existing entry."""

    def import_entry(self, source: Path, name: str) -> None:
        """Copy the file at ``source`` into the backend under ``name``."""

    def rename_entry(self, old: str, new: str) -> None:
        """Rename the entry ``old`` to ``new``."""

    def delete_entry(self, name: str) -> None:
        """Delete the entry called ``name``."""


class DirectoryBackend:
    """Backend storing the script and saves as loose files in a folder."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def enumerate_entries(self) -> list[str]:
        if not self.path.is_dir():
            return []
        saves = [
            candidate.relative_to(self.path).as_posix()
            for candidate in self.path.rglob("*")
            if candidate.is_file()
            and candidate.suffix.lower() in DIRECTORY_SAVE_EXTENSIONS
        ]
        return sorted(saves)

    def read_entry(self, name: str) -> bytes:
        entry_path = self.path / name
        try:
            return entry_path.read_bytes()
        except FileNotFoundError as exc:
            raise EntryNotFoundError(f"Unable to find '{entry_path}'.") from exc
        except OSError as exc:
            raise BackendOpenError(f"Unable to open '{entry_path}'.") from exc

    def open_entry(self, name: str) -> BinaryIO:
        entry_path = self.path / name
        try:
            return entry_path.open("rb")
        except FileNotFoundError as exc:
            raise EntryNotFoundError(f"Unable to find '{entry_path}'.") from exc
        except OSError as exc:
            raise BackendOpenError(f"Unable to open '{entry_path}'.") from exc

    def read_script(self) -> bytes:
        script_path = self.path / SCRIPT_FILENAME
        try:
            return script_path.read_bytes()
        except FileNotFoundError as exc:
            raise SequenceNotFoundError(f"Unable to open '{script_path}'.") from exc
        except OSError as exc:
            raise BackendOpenError(f"Unable to open '{script_path}'.") from exc

    def write_script(self, data: bytes) -> None:
        self.add_entry(SCRIPT_FILENAME, data)

    def add_entry(self, name: str, data: bytes) -> None:
        destination = self.path / name
        temporary = destination.with_name(destination.name + ".tmp")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            temporary.write_bytes(data)
            temporary.replace(destination)
        except OSError as exc:
            temporary.unlink(missing_ok=True)
            raise BackendIOError(f"Unable to write '{destination}'.") from exc

    def import_entry(self, source: Path, name: str) -> None:
        destination = self.path / name
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise BackendIOError(
                f"Unable to copy '{source}' to '{destination}'."
            ) from exc

    def rename_entry(self, old: str, new: str) -> None:
        source = self.path / old
        destination = self.path / new
        if not source.is_file():
            raise EntryNotFoundError(f"Unable to find '{source}'.")
        if new != old and destination.exists():
            raise BackendIOError(
                f"Unable to move '{source}' to '{destination}': target exists."
            )
        try:
            source.rename(destination)
        except OSError as exc:
            raise BackendIOError(
                f"Unable to move '{source}' to '{destination}'."
            ) from exc

    def delete_entry(self, name: str) -> None:
        target = self.path / name
        try:
            target.unlink()
        except OSError as exc:
            raise BackendIOError(f"Unable to delete '{target}'.") from exc


class ArchiveBackend:
    """Backend storing the script and saves inside a single ZIP archive.

    Every mutation reopens the archive and writes a complete replacement next
    to it, which is then moved over the original. A failure at any point
    leaves the previous archive in place.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def enumerate_entries(self) -> list[str]:
        with self._open() as archive:
            return [
                name
                for name in archive.namelist()
                if not name.endswith("/")
                and Path(name).suffix.lower() in ARCHIVE_SAVE_EXTENSIONS
            ]

    def read_entry(self, name: str) -> bytes:
        with self._open() as archive:
            try:
                return archive.read(name)
            except KeyError as exc:
                raise EntryNotFoundError(
                    f"Unable to find '{name}' in '{self.path}'."
                ) from exc
            except (OSError, zipfile.BadZipFile) as exc:
                raise BackendOpenError(
                    f"Failed to open zipped path '{name}' from zip '{self.path}'."
                ) from exc

    def open_entry(self, name: str) -> BinaryIO:
        return io.BytesIO(self.read_entry(name))

    def read_script(self) -> bytes:
        try:
            return self.read_entry(SCRIPT_FILENAME)
        except EntryNotFoundError as exc:
            raise SequenceNotFoundError(
                f"Unable to open {SCRIPT_FILENAME} in '{self.path}'."
            ) from exc

    def write_script(self, data: bytes) -> None:
        self.add_entry(SCRIPT_FILENAME, data)

    def add_entry(self, name: str, data: bytes) -> None:
        def _store(entries: dict[str, bytes]) -> None:
            entries[name] = data

        self._rewrite(_store, create=True)

    def import_entry(self, source: Path, name: str) -> None:
        try:
            data = Path(source).read_bytes()
        except OSError as exc:
            raise BackendIOError(f"Unable to read '{source}'.") from exc
        self.add_entry(name, data)

    def rename_entry(self, old: str, new: str) -> None:
        def _rename(entries: dict[str, bytes]) -> None:
            if old not in entries:
                raise EntryNotFoundError(f"Unable to find '{old}' in '{self.path}'.")
            if new != old and new in entries:
                raise BackendIOError(
                    f"Unable to rename '{old}' to '{new}' in '{self.path}': target exists."
                )
            renamed = {
                (new if name == old else name): data for name, data in entries.items()
            }
            entries.clear()
            entries.update(renamed)

        self._rewrite(_rename)

    def delete_entry(self, name: str) -> None:
        def _delete(entries: dict[str, bytes]) -> None:
            if entries.pop(name, None) is None:
                raise EntryNotFoundError(f"Unable to find '{name}' in '{self.path}'.")

        self._rewrite(_delete)

    def _open(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as exc:
            raise BackendOpenError(f"Unable to open '{self.path}'.") from exc

    def _read_all(self, *, create: bool) -> dict[str, bytes]:
        if create and not self.path.exists():
            return {}
        with self._open() as archive:
            try:
                return {
                    info.filename: archive.read(info)
                    for info in archive.infolist()
                }
            except (OSError, zipfile.BadZipFile) as exc:
                raise BackendOpenError(f"Unable to read '{self.path}'.") from exc

    def _rewrite(
        self, edit: Callable[[dict[str, bytes]], None], *, create: bool = False
    ) -> None:
        entries = self._read_all(create=create)
        edit(entries)

        temporary = self.path.with_name(self.path.name + ".tmp")
        try:
            with zipfile.ZipFile(
                temporary, "w", compression=zipfile.ZIP_DEFLATED
            ) as archive:
                for name, data in entries.items():
                    archive.writestr(name, data)
            temporary.replace(self.path)
        except OSError as exc:
            temporary.unlink(missing_ok=True)
            raise BackendIOError(f"Unable to write '{self.path}'.") from exc
        log.debug("Rewrote archive %s with %d entries", self.path, len(entries))


def is_archive_path(path: Path) -> bool:
    """Return ``True`` when ``path`` names a single-file archived sequence."""

    candidate = Path(path)
    if candidate.is_dir():
        return False
    return (
        candidate.suffix.lower() == TITLE_SEQUENCE_EXTENSION or candidate.is_file()
    )


def open_backend(path: Path, *, is_zip: bool | None = None) -> SequenceBackend:
    """Return the backend for ``path``, detecting the kind when ``is_zip`` is unset."""

    if is_zip is None:
        is_zip = is_archive_path(path)
    if is_zip:
        return ArchiveBackend(Path(path))
    return DirectoryBackend(Path(path))


__all__ = [
    "ARCHIVE_SAVE_EXTENSIONS",
    "ArchiveBackend",
    "BackendIOError",
    "BackendOpenError",
    "DIRECTORY_SAVE_EXTENSIONS",
    "DirectoryBackend",
    "EntryNotFoundError",
    "SCRIPT_FILENAME",
    "SequenceBackend",
    "SequenceNotFoundError",
    "TITLE_SEQUENCE_EXTENSION",
    "TitleSequenceError",
    "is_archive_path",
    "open_backend",
]

"""Title sequence store: loading, saving and editing a sequence's park saves."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List

from .backends import (
    SCRIPT_FILENAME,
    TITLE_SEQUENCE_EXTENSION,
    SequenceBackend,
    SequenceNotFoundError,
    TitleSequenceError,
    is_archive_path,
    open_backend,
)
from .commands import SAVE_INDEX_INVALID, TitleCommand
from .script import find_save_index, read_script, write_script

log = logging.getLogger(__name__)


@dataclass
class ParkHandle:
    """A readable stream over one park save, opened on demand.

    Each handle is independent and single use. Close it (or use it as a
    context manager) before renaming or removing the save it was opened for.
    """

    stream: BinaryIO
    hint_path: str

    def read(self, size: int = -1) -> bytes:
        return self.stream.read(size)

    def close(self) -> None:
        self.stream.close()

    def __enter__(self) -> "ParkHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass
class TitleSequence:
    """An attract-mode script together with the park saves it refers to.

    ``saves`` is positional: every ``LOAD`` command stores an index into it, or
    :data:`SAVE_INDEX_INVALID` once its save has been removed. The mutation
    methods perform the storage I/O first and only touch ``saves`` and
    ``commands`` once it succeeded. Changes to ``commands`` are persisted
    only by calling :meth:`save`.
    """

    name: str = ""
    path: Path | None = None
    is_zip: bool = False
    saves: List[str] = field(default_factory=list)
    commands: List[TitleCommand] = field(default_factory=list)

    @property
    def backend(self) -> SequenceBackend:
        if self.path is None:
            raise TitleSequenceError(
                f"Title sequence '{self.name}' has no storage location."
            )
        return open_backend(self.path, is_zip=self.is_zip)

    def script_text(self) -> str:
        """Return the script text :meth:`save` would write."""

        return write_script(self.name, self.commands, self.saves)

    def save(self) -> None:
        """Encode the commands and write them to ``script.txt``."""

        backend = self.backend
        try:
            backend.write_script(self.script_text().encode("utf-8"))
        except TitleSequenceError as exc:
            log.error("Unable to save title sequence '%s': %s", self.name, exc)
            raise
        log.info("Saved %s for title sequence '%s'", SCRIPT_FILENAME, self.name)

    def add_park(self, path: str | Path, name: str) -> int:
        """Import the save at ``path`` under ``name`` and return the index of ``name``.

        The name is only appended when ``path`` is not already listed in
        ``saves``. That check looks at the source path rather than ``name``,
        so re-adding a save under an existing name lists the name twice;
        ``LOAD`` lookups still resolve to the first occurrence. When the append
        is skipped and ``name`` is not listed, the save is stored but the
        return value is :data:`SAVE_INDEX_INVALID`.
        """

        source = Path(path)
        backend = self.backend
        try:
            backend.import_entry(source, name)
        except TitleSequenceError as exc:
            log.error("Unable to add park '%s' to '%s': %s", source, self.name, exc)
            raise

        if str(path) not in self.saves:
            self.saves.append(name)
        log.info("Added park '%s' to title sequence '%s'", name, self.name)
        return find_save_index(self.saves, name)

    def rename_park(self, index: int, name: str) -> None:
        """Rename the save at ``index``; ``LOAD`` commands keep pointing at it.

        Renaming onto another existing entry fails with :class:`BackendIOError`
        and leaves both saves in place.
        """

        self._check_index(index)
        old_name = self.saves[index]
        backend = self.backend
        try:
            backend.rename_entry(old_name, name)
        except TitleSequenceError as exc:
            log.error("Unable to rename '%s' to '%s': %s", old_name, name, exc)
            raise

        self.saves[index] = name
        log.info("Renamed park '%s' to '%s'", old_name, name)

    def remove_park(self, index: int) -> None:
        """Delete the save at ``index`` and repair every ``LOAD`` reference.

        Loads of the removed save become :data:`SAVE_INDEX_INVALID`; loads of
        later saves shift down by one so they keep naming the same file.
        """

        self._check_index(index)
        relative_path = self.saves[index]
        backend = self.backend
        try:
            backend.delete_entry(relative_path)
        except TitleSequenceError as exc:
            log.error("Unable to delete '%s': %s", relative_path, exc)
            raise

        del self.saves[index]
        self.commands[:] = [
            _reindex_load(command, index) for command in self.commands
        ]
        log.info("Removed park '%s' from title sequence '%s'", relative_path, self.name)

    def get_park_handle(self, index: int) -> ParkHandle | None:
        """Open the save at ``index`` for reading, or return ``None`` on failure."""

        if not 0 <= index < len(self.saves):
            log.error("Title sequence '%s' has no save #%d", self.name, index)
            return None

        filename = self.saves[index]
        try:
            stream = self.backend.open_entry(filename)
        except TitleSequenceError as exc:
            log.error("%s", exc)
            return None
        return ParkHandle(stream=stream, hint_path=filename)

    def save_path_for(self, index: int) -> Path:
        """Return the filesystem location of a save in a directory sequence."""

        self._check_index(index)
        if self.path is None or self.is_zip:
            raise TitleSequenceError(
                f"Saves of '{self.name}' are not stored as separate files."
            )
        return (self.path / self.saves[index]).absolute()

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.saves):
            raise IndexError(
                f"Save index {index} is out of range for '{self.name}' "
                f"({len(self.saves)} saves)."
            )


def _reindex_load(command: TitleCommand, removed: int) -> TitleCommand:
    if not command.has_valid_save or command.save_index < removed:
        return command
    if command.save_index == removed:
        return command.with_save_index(SAVE_INDEX_INVALID)
    return command.with_save_index(command.save_index - 1)


def create_title_sequence(
    name: str = "", path: str | Path | None = None, *, is_zip: bool = False
) -> TitleSequence:
    """Return an empty sequence, optionally bound to a storage location."""

    return TitleSequence(
        name=name,
        path=Path(path) if path is not None else None,
        is_zip=is_zip,
    )


def load_title_sequence(path: str | Path) -> TitleSequence:
    """Read the sequence stored at ``path`` (a directory or ``.parkseq`` archive).

    Raises:
        SequenceNotFoundError: If the script is missing or empty.
        BackendOpenError: If the directory or archive cannot be opened.
    """

    sequence_path = Path(path)
    log.debug("Loading title sequence: %s", sequence_path)

    is_zip = is_archive_path(sequence_path)
    backend = open_backend(sequence_path, is_zip=is_zip)
    try:
        script = backend.read_script()
        if not script:
            raise SequenceNotFoundError(f"Unable to open '{sequence_path}'.")
        saves = backend.enumerate_entries()
    except TitleSequenceError as exc:
        log.error("%s", exc)
        raise

    return TitleSequence(
        name=sequence_path.stem,
        path=sequence_path,
        is_zip=is_zip,
        saves=saves,
        commands=read_script(script, saves),
    )


def list_title_sequences(root: str | Path) -> list[Path]:
    """Return every sequence directory and archive directly under ``root``."""

    root_path = Path(root)
    if not root_path.is_dir():
        return []

    found = [
        candidate
        for candidate in root_path.iterdir()
        if (candidate.is_dir() and (candidate / SCRIPT_FILENAME).is_file())
        or (
            candidate.is_file()
            and candidate.suffix.lower() == TITLE_SEQUENCE_EXTENSION
        )
    ]
    return sorted(found, key=lambda candidate: candidate.name.lower())


__all__ = [
    "ParkHandle",
    "TitleSequence",
    "create_title_sequence",
    "list_title_sequences",
    "load_title_sequence",
]

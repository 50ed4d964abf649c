"""Core package for reading and editing title sequences."""

from .backends import (
    ArchiveBackend,
    BackendIOError,
    BackendOpenError,
    DirectoryBackend,
    EntryNotFoundError,
    SequenceBackend,
    SequenceNotFoundError,
    TitleSequenceError,
    open_backend,
)
from .commands import SAVE_INDEX_INVALID, TitleCommand, TitleScript, is_load_command
from .script import read_script, write_script
from .sequence import (
    ParkHandle,
    TitleSequence,
    create_title_sequence,
    list_title_sequences,
    load_title_sequence,
)
from .settings import TitleSequenceSettings
from .tokenizer import ScriptLine, iter_lines, read_line

__all__ = [
    "SAVE_INDEX_INVALID",
    "TitleCommand",
    "TitleScript",
    "is_load_command",
    "ScriptLine",
    "read_line",
    "iter_lines",
    "read_script",
    "write_script",
    "SequenceBackend",
    "DirectoryBackend",
    "ArchiveBackend",
    "open_backend",
    "TitleSequenceError",
    "EntryNotFoundError",
    "SequenceNotFoundError",
    "BackendOpenError",
    "BackendIOError",
    "ParkHandle",
    "TitleSequence",
    "create_title_sequence",
    "load_title_sequence",
    "list_title_sequences",
    "TitleSequenceSettings",
]

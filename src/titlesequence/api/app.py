"""FastAPI application exposing title sequence editing endpoints."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, field_validator

from ..backends import (
    EntryNotFoundError,
    TitleSequenceError,
    is_archive_path,
)
from ..commands import TitleCommand
from ..sequence import TitleSequence, list_title_sequences, load_title_sequence
from ..settings import TitleSequenceSettings

StorageKind = Literal["directory", "archive"]

log = logging.getLogger(__name__)


class ReadOnlyError(TitleSequenceError):
    """Raised when a mutation is attempted while the service is read-only."""


class SequenceSummary(BaseModel):
    """Lightweight description of a title sequence for overview lists."""

    name: str
    kind: StorageKind
    filename: str


class SequenceListResponse(BaseModel):
    """Response envelope for the sequence collection endpoint."""

    data: list[SequenceSummary]


class CommandResource(BaseModel):
    """A decoded script command; only the fields for ``type`` are populated."""

    type: str
    save_index: int | None = None
    save_name: str | None = None
    scenario: str | None = None
    x: int | None = None
    y: int | None = None
    rotations: int | None = None
    zoom: int | None = None
    speed: int | None = None
    sprite_index: int | None = None
    sprite_name: str | None = None
    milliseconds: int | None = None


class SequenceDetailResponse(BaseModel):
    """Full representation of a title sequence."""

    name: str
    kind: StorageKind
    saves: list[str]
    commands: list[CommandResource]
    script: str


def _validate_entry_name(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError("Save name must be provided as a string.")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError("Save name must be a non-empty string.")
    candidate = PurePosixPath(trimmed.replace("\\", "/"))
    if candidate.is_absolute() or ".." in candidate.parts:
        raise ValueError("Save name must be a path inside the sequence.")
    return trimmed


class SaveCreateRequest(BaseModel):
    """Request payload for importing a park save into a sequence."""

    source_path: str = Field(..., description="File under the sequence root to import.")
    name: str = Field(..., description="Name to store the save under.")

    @field_validator("source_path")
    @classmethod
    def _validate_source_path(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Source path must be a non-empty string.")
        return value.strip()

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return _validate_entry_name(value)


class SaveRenameRequest(BaseModel):
    """Request payload for renaming a park save."""

    name: str

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return _validate_entry_name(value)


def _command_resource(command: TitleCommand, saves: list[str]) -> CommandResource:
    payload = command.to_payload()
    save_index = payload.get("save_index")
    if isinstance(save_index, int) and 0 <= save_index < len(saves):
        payload["save_name"] = saves[save_index]
    return CommandResource(**payload)


def _storage_kind(sequence_path: Path) -> StorageKind:
    return "archive" if is_archive_path(sequence_path) else "directory"


class TitleSequenceService:
    """Resolve sequences under a root directory and apply save mutations.

    Every mutation writes the re-encoded script back so the stored sequence
    stays consistent with its save list.
    """

    def __init__(self, root: Path, *, read_only: bool = False) -> None:
        self.root = Path(root)
        self.read_only = read_only

    def list_sequences(self) -> SequenceListResponse:
        return SequenceListResponse(
            data=[
                SequenceSummary(
                    name=path.stem,
                    kind=_storage_kind(path),
                    filename=path.name,
                )
                for path in list_title_sequences(self.root)
            ]
        )

    def get_detail(self, name: str) -> SequenceDetailResponse:
        return self._detail(self._load(name))

    def add_save(self, name: str, request: SaveCreateRequest) -> SequenceDetailResponse:
        sequence = self._load_for_update(name)
        source = Path(request.source_path)
        if not source.is_absolute():
            source = self.root / source
        if not source.resolve().is_relative_to(self.root.resolve()):
            raise ValueError(
                f"Source save '{request.source_path}' is outside {self.root}."
            )
        if not source.is_file():
            raise ValueError(f"Source save '{request.source_path}' does not exist.")
        sequence.add_park(source, request.name)
        sequence.save()
        return self._detail(sequence)

    def rename_save(
        self, name: str, index: int, request: SaveRenameRequest
    ) -> SequenceDetailResponse:
        sequence = self._load_for_update(name)
        sequence.rename_park(index, request.name)
        sequence.save()
        return self._detail(sequence)

    def remove_save(self, name: str, index: int) -> SequenceDetailResponse:
        sequence = self._load_for_update(name)
        sequence.remove_park(index)
        sequence.save()
        return self._detail(sequence)

    def _load_for_update(self, name: str) -> TitleSequence:
        if self.read_only:
            raise ReadOnlyError("Title sequences are read-only on this server.")
        return self._load(name)

    def _load(self, name: str) -> TitleSequence:
        for path in list_title_sequences(self.root):
            if path.stem == name or path.name == name:
                return load_title_sequence(path)
        raise EntryNotFoundError(f"Title sequence '{name}' does not exist.")

    @staticmethod
    def _detail(sequence: TitleSequence) -> SequenceDetailResponse:
        return SequenceDetailResponse(
            name=sequence.name,
            kind="archive" if sequence.is_zip else "directory",
            saves=list(sequence.saves),
            commands=[
                _command_resource(command, sequence.saves)
                for command in sequence.commands
            ],
            script=sequence.script_text(),
        )


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, ReadOnlyError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, (EntryNotFoundError, IndexError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def create_app(
    sequence_service: TitleSequenceService | None = None,
    *,
    settings: TitleSequenceSettings | None = None,
) -> FastAPI:
    """Create a FastAPI app exposing the title sequence endpoints."""

    service = sequence_service
    if service is None:
        resolved_settings = settings or TitleSequenceSettings.from_env()
        if resolved_settings.root is None:
            raise RuntimeError(
                "Configure TITLESEQUENCE_ROOT to serve title sequences."
            )
        service = TitleSequenceService(
            resolved_settings.root, read_only=resolved_settings.read_only
        )

    tags_metadata = [
        {
            "name": "Sequences",
            "description": "Browse title sequences and their decoded scripts.",
        },
        {
            "name": "Saves",
            "description": (
                "Import, rename and remove the park saves a sequence loads."
            ),
        },
    ]

    app = FastAPI(
        title="Title Sequence Editor API",
        description=(
            "HTTP API for editing attract-mode title sequences stored as "
            "folders or .parkseq archives."
        ),
        openapi_tags=tags_metadata,
    )

    @app.get(
        "/api/sequences",
        response_model=SequenceListResponse,
        tags=["Sequences"],
    )
    def get_sequences() -> SequenceListResponse:
        return service.list_sequences()

    @app.get(
        "/api/sequences/{name}",
        response_model=SequenceDetailResponse,
        tags=["Sequences"],
    )
    def get_sequence(name: str) -> SequenceDetailResponse:
        try:
            return service.get_detail(name)
        except (TitleSequenceError, ValueError) as exc:
            raise _http_error(exc) from exc

    @app.post(
        "/api/sequences/{name}/saves",
        response_model=SequenceDetailResponse,
        status_code=201,
        tags=["Saves"],
    )
    def add_save(name: str, payload: SaveCreateRequest) -> SequenceDetailResponse:
        try:
            return service.add_save(name, payload)
        except (TitleSequenceError, ValueError) as exc:
            raise _http_error(exc) from exc

    @app.put(
        "/api/sequences/{name}/saves/{index}",
        response_model=SequenceDetailResponse,
        tags=["Saves"],
    )
    def rename_save(
        name: str, index: int, payload: SaveRenameRequest
    ) -> SequenceDetailResponse:
        try:
            return service.rename_save(name, index, payload)
        except (TitleSequenceError, IndexError, ValueError) as exc:
            raise _http_error(exc) from exc

    @app.delete(
        "/api/sequences/{name}/saves/{index}",
        response_model=SequenceDetailResponse,
        tags=["Saves"],
    )
    def remove_save(name: str, index: int) -> SequenceDetailResponse:
        try:
            return service.remove_save(name, index)
        except (TitleSequenceError, IndexError, ValueError) as exc:
            raise _http_error(exc) from exc

    log.debug("Serving title sequences from %s", service.root)
    return app


__all__ = [
    "CommandResource",
    "ReadOnlyError",
    "SaveCreateRequest",
    "SaveRenameRequest",
    "SequenceDetailResponse",
    "SequenceListResponse",
    "SequenceSummary",
    "TitleSequenceService",
    "create_app",
]

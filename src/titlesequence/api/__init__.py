"""FastAPI application exposing title sequence editing endpoints."""

from .app import TitleSequenceService, create_app

__all__ = ["TitleSequenceService", "create_app"]

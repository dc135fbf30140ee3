"""Temporary file storage for rendered videos."""

from ayahrender.storage.artifact import RenderArtifact
from ayahrender.storage.temp_store import TempFileManager

__all__ = ["RenderArtifact", "TempFileManager"]

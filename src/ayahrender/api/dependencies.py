"""Dependency injection providers for FastAPI."""

from functools import lru_cache

from ayahrender.config import get_settings
from ayahrender.pipeline.orchestrator import RenderOrchestrator
from ayahrender.storage.temp_store import TempFileManager


@lru_cache
def get_temp_store() -> TempFileManager:
    return TempFileManager(get_settings().temp_dir)


@lru_cache
def get_orchestrator() -> RenderOrchestrator:
    return RenderOrchestrator(settings=get_settings(), temp_store=get_temp_store())

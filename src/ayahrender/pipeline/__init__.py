"""Render request orchestration."""

from ayahrender.pipeline.orchestrator import RenderOrchestrator

__all__ = ["RenderOrchestrator"]

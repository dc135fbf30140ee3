"""Data models for the ayah render service."""

from ayahrender.models.browser import BrowserConnection, BrowserStrategy
from ayahrender.models.errors import (
    AudioProbeError,
    AyahRenderError,
    BrowserConnectionError,
    BundleError,
    CompositionError,
    ErrorResponse,
    InvalidTemplateError,
    RenderError,
    StreamError,
)
from ayahrender.models.render import (
    TEMPLATE_COMPOSITIONS,
    AudioTrack,
    Bundle,
    Composition,
    RenderConfig,
    RenderRequest,
    RenderResult,
)

__all__ = [
    "TEMPLATE_COMPOSITIONS",
    "AudioProbeError",
    "AudioTrack",
    "AyahRenderError",
    "BrowserConnection",
    "BrowserConnectionError",
    "BrowserStrategy",
    "Bundle",
    "BundleError",
    "Composition",
    "CompositionError",
    "ErrorResponse",
    "InvalidTemplateError",
    "RenderConfig",
    "RenderError",
    "RenderRequest",
    "RenderResult",
    "StreamError",
]

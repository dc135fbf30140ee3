"""Error hierarchy and error response models."""

from pydantic import BaseModel, Field


class AyahRenderError(Exception):
    """Base error for all render service errors."""

    def __init__(self, message: str, component: str = "", details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.component = component
        self.details = details or {}


class InvalidTemplateError(AyahRenderError):
    """Requested template does not resolve to an available composition."""

    def __init__(self, message: str = "Invalid template", details: dict | None = None):
        super().__init__(message, component="validation", details=details)


class BundleError(AyahRenderError):
    """Composition source could not be packaged into a bundle."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="bundler", details=details)


class BrowserConnectionError(AyahRenderError):
    """A controllable browser could not be obtained."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="browser", details=details)


class CompositionError(AyahRenderError):
    """Compositions could not be discovered in the bundle."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="composition", details=details)


class RenderError(AyahRenderError):
    """Errors during video rendering."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="rendering", details=details)


class StreamError(AyahRenderError):
    """The rendered file could not be opened for streaming."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="stream", details=details)


class AudioProbeError(AyahRenderError):
    """Audio duration could not be determined."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, component="audio", details=details)


class ErrorResponse(BaseModel):
    """JSON body returned for failed requests."""

    error: str = Field(..., description="Short error category")
    details: str | None = Field(default=None, description="Underlying failure message")

    @classmethod
    def from_exception(cls, exc: AyahRenderError) -> "ErrorResponse":
        if isinstance(exc, InvalidTemplateError):
            return cls(error="Invalid template")
        return cls(error="Render failed", details=exc.message)

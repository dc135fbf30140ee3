"""Render request, composition and result data models."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Origin the bundle is served under, via request interception in the page.
BUNDLE_ORIGIN = "http://ayah-bundle.local"

TEMPLATE_COMPOSITIONS: dict[str, str] = {
    "classic": "ClassicTemplate",
    "modern": "ModernTemplate",
    "capcut": "CapcutTemplate",
}


class RenderConfig(BaseModel):
    """Rendering options. Fields other than template and audioUrl pass through untouched."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    template: Any = None
    audio_url: list[str] = Field(default_factory=list, alias="audioUrl")

    @field_validator("audio_url", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def composition_id(self) -> str | None:
        """Composition identifier for the template, or None if the template is unknown."""
        if not isinstance(self.template, str):
            return None
        return TEMPLATE_COMPOSITIONS.get(self.template)


class RenderRequest(BaseModel):
    """Body of POST /render-video."""

    model_config = ConfigDict(frozen=True)

    ayahs: list[Any] = Field(default_factory=list)
    config: RenderConfig

    def input_props(self, audio_durations: list[float | None] | None = None) -> dict[str, Any]:
        """Props handed to the composition; audioDurations is added for the render call."""
        props: dict[str, Any] = {
            "ayahs": self.ayahs,
            "config": self.config.model_dump(by_alias=True),
        }
        if audio_durations is not None:
            props["audioDurations"] = audio_durations
        return props


class AudioTrack(BaseModel):
    """An audio source a composition wants mixed into the output."""

    model_config = ConfigDict(populate_by_name=True)

    src: str
    offset_seconds: float = Field(default=0.0, ge=0, alias="offsetSeconds")
    volume: float = Field(default=1.0, ge=0)


class Composition(BaseModel):
    """Metadata of a composition exposed by a bundle."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    width: int = Field(default=1080, gt=0)
    height: int = Field(default=1920, gt=0)
    fps: float = Field(default=30.0, gt=0)
    duration_in_frames: int = Field(..., gt=0, alias="durationInFrames")
    audio: list[AudioTrack] = Field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.duration_in_frames / self.fps


class Bundle(BaseModel):
    """A servable packaging of the composition source."""

    root: Path
    entry: Path

    @property
    def serve_url(self) -> str:
        return f"{BUNDLE_ORIGIN}/{self.entry.relative_to(self.root).as_posix()}"


class RenderResult(BaseModel):
    """Result of a rendering operation."""

    output_path: str = Field(..., description="Path to rendered output file")
    composition_id: str
    frames: int = Field(..., ge=0)
    file_size_bytes: int = Field(..., ge=0)
    video_codec: str = Field(default="h264")
    container_format: str = Field(default="mp4")

    @property
    def file_size_mb(self) -> float:
        return self.file_size_bytes / (1024 * 1024)

    @property
    def output_file(self) -> Path:
        return Path(self.output_path)

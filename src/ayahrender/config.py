"""Application configuration using Pydantic BaseSettings."""

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Render service configuration loaded from environment variables."""

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore", "frozen": True}

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    max_body_mb: int = 50

    # Remote browser (Browserless)
    browserless_url: str = ""
    browserless_token: str = ""
    remote_fallback_to_local: bool = False

    # Local browser; empty selects the engine's bundled browser
    local_browser_preset: str = "container"

    # Compositions
    composition_entry: Path = Path("compositions/index.html")
    bundle_dir: Path = Path("dist")

    # Rendering
    render_concurrency: int = 1
    render_verbose: bool = True
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"

    # Audio
    audio_fetch_timeout: float = 30.0

    # Temp files
    temp_dir: Path = Path(tempfile.gettempdir())
    temp_file_ttl_seconds: int = 3600

    @property
    def max_body_bytes(self) -> int:
        return self.max_body_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()

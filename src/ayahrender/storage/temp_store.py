"""Temporary render output lifecycle management."""

import logging
import threading
import time
import uuid
from pathlib import Path

from ayahrender.config import get_settings

logger = logging.getLogger(__name__)

OUTPUT_PREFIX = "video-"
OUTPUT_SUFFIX = ".mp4"


class TempFileManager:
    """Hands out per-request output paths and removes each one exactly once."""

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir or get_settings().temp_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._owned: dict[Path, float] = {}
        self._lock = threading.Lock()

    def allocate(self) -> Path:
        """Reserve a fresh output path. The file itself is created by the renderer."""
        name = f"{OUTPUT_PREFIX}{time.time_ns()}-{uuid.uuid4().hex[:8]}{OUTPUT_SUFFIX}"
        path = self.base_dir / name
        with self._lock:
            self._owned[path] = time.time()
        return path

    def owns(self, path: Path) -> bool:
        with self._lock:
            return path in self._owned

    def release(self, path: Path) -> bool:
        """Delete a previously allocated file. Returns False if it was already released."""
        with self._lock:
            if self._owned.pop(path, None) is None:
                return False
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Failed to remove temp file %s: %s", path, e)
        else:
            logger.info("Removed temp file %s", path)
        return True

    def cleanup_expired(self, ttl_seconds: int | None = None) -> int:
        """Remove render outputs older than the TTL, including ones left by a previous process."""
        ttl = ttl_seconds if ttl_seconds is not None else get_settings().temp_file_ttl_seconds
        now = time.time()
        cleaned = 0
        for path in self.base_dir.glob(f"{OUTPUT_PREFIX}*{OUTPUT_SUFFIX}"):
            with self._lock:
                created = self._owned.get(path)
            if created is None:
                try:
                    created = path.stat().st_mtime
                except FileNotFoundError:
                    continue
            if now - created <= ttl:
                continue
            if self.owns(path):
                self.release(path)
            else:
                path.unlink(missing_ok=True)
            cleaned += 1
        if cleaned:
            logger.info("Cleaned up %d expired temp files", cleaned)
        return cleaned

"""Rendered video held on disk for the duration of a response."""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from ayahrender.models.errors import StreamError
from ayahrender.models.render import RenderResult
from ayahrender.storage.temp_store import TempFileManager

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


@dataclass
class RenderArtifact:
    """The one output file of a request. Discarding it removes the file exactly once."""

    path: Path
    store: TempFileManager
    result: RenderResult | None = None
    _handle: BinaryIO | None = field(default=None, repr=False)

    def open(self) -> None:
        """Open the file for streaming; on failure the file is discarded."""
        if self._handle is not None:
            return
        try:
            self._handle = self.path.open("rb")
        except OSError as e:
            self.discard()
            raise StreamError(
                f"Failed to open rendered video: {e}", details={"path": str(self.path)}
            )

    async def stream(self, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
        """Yield the file's bytes, discarding it when the stream ends, fails or is cancelled."""
        try:
            self.open()
            while chunk := await asyncio.to_thread(self._handle.read, chunk_size):
                yield chunk
        finally:
            self.discard()

    def discard(self) -> bool:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        return self.store.release(self.path)

"""Resolve playback durations for the audio URLs of a render request."""

import asyncio
import logging
from collections.abc import AsyncIterable, Sequence
from typing import Protocol

import httpx

from ayahrender.audio.probe import FFprobeDurationParser

logger = logging.getLogger(__name__)


class DurationParser(Protocol):
    async def parse(self, chunks: AsyncIterable[bytes]) -> float | None: ...


class AudioDurationResolver:
    """Fetches each audio URL concurrently and extracts its duration.

    Results are index-aligned with the input. A URL that cannot be fetched
    or parsed resolves to None without affecting its siblings.
    """

    def __init__(
        self,
        parser: DurationParser | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.parser = parser or FFprobeDurationParser()
        self.timeout = timeout
        self.transport = transport

    async def resolve(self, urls: Sequence[str]) -> list[float | None]:
        if not urls:
            return []
        async with httpx.AsyncClient(
            timeout=self.timeout, follow_redirects=True, transport=self.transport
        ) as client:
            durations = await asyncio.gather(*(self.duration_for(client, url) for url in urls))
        return list(durations)

    async def duration_for(self, client: httpx.AsyncClient, url: str) -> float | None:
        try:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    logger.warning(
                        "Audio fetch for %s returned status %d", url, response.status_code
                    )
                    return None
                return await self.parser.parse(response.aiter_bytes())
        except Exception as e:
            logger.warning("Failed to get duration for %s: %s", url, e)
            return None

"""Video render endpoint."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ayahrender.api.dependencies import get_orchestrator
from ayahrender.models.errors import RenderError
from ayahrender.models.render import RenderRequest
from ayahrender.pipeline.orchestrator import RenderOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["render"])

DISCONNECT_POLL_SECONDS = 0.5

T = TypeVar("T")


async def run_until_disconnected(request: Request, work: Awaitable[T]) -> T:
    """Await work, cancelling it if the caller goes away first."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning("Client disconnected, cancelling render")
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                raise RenderError("Client disconnected before the render finished")
    finally:
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)


@router.post("/render-video")
async def render_video(
    body: RenderRequest,
    request: Request,
    orchestrator: RenderOrchestrator = Depends(get_orchestrator),
):
    """Render the ayahs with the requested template and stream back the MP4."""
    artifact = await run_until_disconnected(request, orchestrator.render(body))
    # Open before any header is sent so a failure can still be answered with JSON.
    artifact.open()
    return StreamingResponse(
        artifact.stream(),
        media_type="video/mp4",
        headers={"Content-Disposition": 'attachment; filename="video.mp4"'},
        background=BackgroundTask(artifact.discard),
    )

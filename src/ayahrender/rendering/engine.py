"""Discover compositions in a bundle and render them to MP4."""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

from playwright.async_api import Browser, BrowserContext, Page, Route
from playwright.async_api import Error as PlaywrightError
from pydantic import ValidationError

from ayahrender.models.errors import AyahRenderError, CompositionError, RenderError
from ayahrender.models.render import BUNDLE_ORIGIN, Bundle, Composition, RenderResult
from ayahrender.rendering.bundler import bundle_source
from ayahrender.rendering.ffmpeg_builder import VIDEO_CODECS, FFmpegCommandBuilder
from ayahrender.rendering.progress import RenderProgressMonitor

logger = logging.getLogger(__name__)

CONTRACT_READY = "() => typeof window.ayahCompositions === 'object'"
LIST_COMPOSITIONS = "(props) => window.ayahCompositions.list(props)"
MOUNT_COMPOSITION = "([id, props]) => window.ayahCompositions.mount(id, props)"
SEEK_FRAME = "(frame) => window.ayahCompositions.seek(frame)"


class CompositionEngine(ABC):
    """Bundles composition source, enumerates compositions and renders one to a file."""

    @abstractmethod
    async def bundle(self, entry: Path, out_dir: Path) -> Bundle: ...

    @abstractmethod
    async def get_compositions(
        self, bundle: Bundle, browser: Any, input_props: dict[str, Any]
    ) -> list[Composition]: ...

    @abstractmethod
    async def render_media(
        self,
        bundle: Bundle,
        composition: Composition,
        browser: Any,
        output_path: Path,
        input_props: dict[str, Any],
        codec: str = "h264",
        concurrency: int = 1,
        overwrite: bool = True,
        verbose: bool = False,
        progress_callback: Callable[[float], None] | None = None,
    ) -> RenderResult: ...


class PlaywrightCompositionEngine(CompositionEngine):
    """Renders HTML compositions frame by frame in Chromium and encodes them with FFmpeg."""

    def __init__(self, ffmpeg: FFmpegCommandBuilder | None = None, page_timeout: float = 60.0):
        self.ffmpeg = ffmpeg or FFmpegCommandBuilder()
        self.page_timeout_ms = page_timeout * 1000

    async def bundle(self, entry: Path, out_dir: Path) -> Bundle:
        return await asyncio.to_thread(bundle_source, entry, out_dir)

    async def get_compositions(
        self, bundle: Bundle, browser: Browser, input_props: dict[str, Any]
    ) -> list[Composition]:
        try:
            context = await browser.new_context()
            try:
                page = await self._open_page(context, bundle)
                raw = await page.evaluate(LIST_COMPOSITIONS, input_props)
            finally:
                await self._close_context(context)
        except PlaywrightError as e:
            raise CompositionError(
                f"Failed to read compositions from bundle: {e.message}",
                details={"serve_url": bundle.serve_url},
            )
        return self._parse_compositions(raw)

    async def render_media(
        self,
        bundle: Bundle,
        composition: Composition,
        browser: Browser,
        output_path: Path,
        input_props: dict[str, Any],
        codec: str = "h264",
        concurrency: int = 1,
        overwrite: bool = True,
        verbose: bool = False,
        progress_callback: Callable[[float], None] | None = None,
    ) -> RenderResult:
        """Render composition to output_path.

        Composition metadata is re-read with the render props, since a
        composition's duration may depend on them (e.g. audio durations).
        Frames are captured on `concurrency` pages and written to FFmpeg in
        frame order.
        """
        if codec not in VIDEO_CODECS:
            raise RenderError(f"Unsupported codec: {codec}", details={"codec": codec})
        if concurrency < 1:
            raise RenderError("Concurrency must be at least 1", details={"concurrency": concurrency})
        if output_path.exists() and not overwrite:
            raise RenderError(
                f"Output already exists: {output_path}", details={"output": str(output_path)}
            )
        output_path.parent.mkdir(parents=True, exist_ok=True)

        process = None
        stderr_task = None
        try:
            context = await browser.new_context(
                viewport={"width": composition.width, "height": composition.height},
                device_scale_factor=1,
            )
        except PlaywrightError as e:
            raise RenderError(f"Browser failed during render: {e.message}")

        try:
            pages = [await self._open_page(context, bundle) for _ in range(concurrency)]
            composition = self._select(
                await pages[0].evaluate(LIST_COMPOSITIONS, input_props), composition.id
            )
            for page in pages:
                await page.evaluate(MOUNT_COMPOSITION, [composition.id, input_props])

            cmd = self.ffmpeg.build_command(composition, output_path, codec, overwrite, verbose)
            if verbose:
                logger.info("Encoding with: %s", " ".join(cmd))
            try:
                process = await asyncio.create_subprocess_exec(
                    *cmd,
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError:
                raise RenderError(
                    "FFmpeg not found. Please install FFmpeg.",
                    details={"command": self.ffmpeg.ffmpeg_bin},
                )
            stderr_task = asyncio.create_task(process.stderr.read())

            monitor = RenderProgressMonitor(
                composition.duration_in_frames, progress_callback, verbose=verbose
            )
            total = composition.duration_in_frames
            truncated = False
            try:
                for start in range(0, total, len(pages)):
                    frames = range(start, min(start + len(pages), total))
                    shots = await asyncio.gather(
                        *(self._capture(page, frame) for page, frame in zip(pages, frames))
                    )
                    for shot in shots:
                        process.stdin.write(shot)
                        await process.stdin.drain()
                    monitor.advance(len(shots))
                process.stdin.close()
            except (BrokenPipeError, ConnectionResetError):
                truncated = True
                logger.error("FFmpeg closed its input after %d frames", monitor.frames_done)

            returncode = await process.wait()
            stderr = (await stderr_task).decode(errors="replace")
            if returncode != 0 or truncated:
                logger.error("FFmpeg failed (code %d)", returncode)
                raise RenderError(
                    f"FFmpeg exited with code {returncode} after {monitor.frames_done}/{total} frames",
                    details={"stderr": stderr[-2000:]},
                )
        except PlaywrightError as e:
            raise RenderError(f"Browser failed during render: {e.message}")
        finally:
            if process is not None and process.returncode is None:
                process.kill()
                await process.wait()
            if stderr_task is not None and not stderr_task.done():
                stderr_task.cancel()
            await self._close_context(context)

        if not output_path.exists():
            raise RenderError("Output file was not created")
        return RenderResult(
            output_path=str(output_path),
            composition_id=composition.id,
            frames=total,
            file_size_bytes=output_path.stat().st_size,
            video_codec=codec,
        )

    async def _open_page(self, context: BrowserContext, bundle: Bundle) -> Page:
        page = await context.new_page()
        await page.route(f"{BUNDLE_ORIGIN}/**", lambda route: self._serve(bundle, route))
        await page.goto(bundle.serve_url, timeout=self.page_timeout_ms)
        await page.wait_for_function(CONTRACT_READY, timeout=self.page_timeout_ms)
        return page

    async def _serve(self, bundle: Bundle, route: Route) -> None:
        root = bundle.root.resolve()
        relative = unquote(urlsplit(route.request.url).path).lstrip("/")
        path = (root / relative).resolve()
        if not path.is_relative_to(root) or not path.is_file():
            await route.fulfill(status=404, body="Not found")
            return
        await route.fulfill(path=path)

    async def _capture(self, page: Page, frame: int) -> bytes:
        await page.evaluate(SEEK_FRAME, frame)
        return await page.screenshot(type="png", timeout=self.page_timeout_ms)

    async def _close_context(self, context: BrowserContext) -> None:
        try:
            await context.close()
        except PlaywrightError as e:
            logger.debug("Browser context already gone: %s", e.message)

    def _parse_compositions(self, raw: Any) -> list[Composition]:
        if not isinstance(raw, list):
            raise CompositionError("Bundle did not return a list of compositions")
        try:
            return [Composition.model_validate(item) for item in raw]
        except ValidationError as e:
            raise CompositionError(f"Invalid composition metadata: {e}")

    def _select(self, raw: Any, composition_id: str) -> Composition:
        try:
            compositions = self._parse_compositions(raw)
        except AyahRenderError as e:
            raise RenderError(e.message)
        for candidate in compositions:
            if candidate.id == composition_id:
                return candidate
        raise RenderError(f"Composition {composition_id} is not available for these props")

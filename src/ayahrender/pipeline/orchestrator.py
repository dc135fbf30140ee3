"""Run one render request from bundle to streamable file."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from ayahrender.audio.durations import AudioDurationResolver
from ayahrender.audio.probe import FFprobeDurationParser
from ayahrender.browser.launcher import BrowserLauncher
from ayahrender.browser.strategy import BrowserStrategySelector
from ayahrender.config import Settings, get_settings
from ayahrender.models.errors import (
    AyahRenderError,
    BundleError,
    CompositionError,
    InvalidTemplateError,
    RenderError,
)
from ayahrender.models.render import RenderRequest
from ayahrender.rendering.engine import CompositionEngine, PlaywrightCompositionEngine
from ayahrender.rendering.ffmpeg_builder import FFmpegCommandBuilder
from ayahrender.storage.artifact import RenderArtifact
from ayahrender.storage.temp_store import TempFileManager

logger = logging.getLogger(__name__)


@contextmanager
def _stage(name: str, error_cls: type[AyahRenderError]) -> Iterator[None]:
    """Wrap unexpected exceptions of a stage in that stage's error type."""
    try:
        yield
    except AyahRenderError:
        raise
    except Exception as e:
        logger.exception("%s failed", name)
        raise error_cls(f"{name} failed: {e}", details={"error": str(e)}) from e


class RenderOrchestrator:
    """Sequences a render request.

    Strict ordering: validate template -> bundle -> acquire browser ->
    discover composition -> resolve audio durations -> render. The first
    failure ends the request; the browser is released and any output file
    removed on every exit path.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        engine: CompositionEngine | None = None,
        selector: BrowserStrategySelector | None = None,
        launcher: BrowserLauncher | None = None,
        audio_resolver: AudioDurationResolver | None = None,
        temp_store: TempFileManager | None = None,
    ):
        self.settings = settings or get_settings()
        self.engine = engine or PlaywrightCompositionEngine(
            FFmpegCommandBuilder(ffmpeg_bin=self.settings.ffmpeg_bin)
        )
        self.selector = selector or BrowserStrategySelector(self.settings)
        self.launcher = launcher or BrowserLauncher()
        self.audio_resolver = audio_resolver or AudioDurationResolver(
            parser=FFprobeDurationParser(
                ffprobe_bin=self.settings.ffprobe_bin,
                timeout=self.settings.audio_fetch_timeout,
            ),
            timeout=self.settings.audio_fetch_timeout,
        )
        self.temp_store = temp_store or TempFileManager(self.settings.temp_dir)

    async def render(self, request: RenderRequest) -> RenderArtifact:
        composition_id = request.config.composition_id
        if composition_id is None:
            raise InvalidTemplateError(details={"template": request.config.template})

        input_props = request.input_props()

        with _stage("Bundling", BundleError):
            bundle = await self.engine.bundle(
                self.settings.composition_entry, self.settings.bundle_dir
            )

        connection = self.selector.select()
        fallback = self.selector.fallback_for(connection)

        artifact = None
        try:
            async with self.launcher.open(connection, fallback) as browser:
                with _stage("Composition discovery", CompositionError):
                    compositions = await self.engine.get_compositions(
                        bundle, browser, input_props
                    )
                composition = next((c for c in compositions if c.id == composition_id), None)
                if composition is None:
                    logger.warning(
                        "Composition %s not among %s",
                        composition_id,
                        [c.id for c in compositions],
                    )
                    raise InvalidTemplateError(details={"template": request.config.template})

                audio_durations = await self.audio_resolver.resolve(request.config.audio_url)

                artifact = RenderArtifact(path=self.temp_store.allocate(), store=self.temp_store)
                with _stage("Rendering", RenderError):
                    artifact.result = await self.engine.render_media(
                        bundle,
                        composition,
                        browser,
                        artifact.path,
                        request.input_props(audio_durations),
                        codec="h264",
                        concurrency=self.settings.render_concurrency,
                        overwrite=True,
                        verbose=self.settings.render_verbose,
                    )
        except BaseException:
            if artifact is not None:
                artifact.discard()
            raise

        logger.info("Rendered %s to %s", composition_id, artifact.path)
        return artifact

"""Shared test fixtures and fakes for the render pipeline collaborators."""

import asyncio
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

from ayahrender.browser.strategy import BrowserStrategySelector
from ayahrender.config import Settings
from ayahrender.models.render import Bundle, Composition, RenderResult
from ayahrender.pipeline.orchestrator import RenderOrchestrator
from ayahrender.rendering.engine import CompositionEngine
from ayahrender.storage.temp_store import TempFileManager

ALL_COMPOSITIONS = ("ClassicTemplate", "ModernTemplate", "CapcutTemplate")
FAKE_MP4 = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom" + b"\x00" * 64


def make_settings(tmp_dir: Path, **overrides) -> Settings:
    """Settings isolated from the process environment and .env files."""
    values = {
        "browserless_url": "",
        "browserless_token": "",
        "local_browser_preset": "container",
        "temp_dir": tmp_dir,
        "bundle_dir": tmp_dir / "dist",
        "render_verbose": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeEngine(CompositionEngine):
    """Records calls instead of driving a browser; writes a small MP4 stand-in."""

    def __init__(
        self,
        composition_ids=ALL_COMPOSITIONS,
        bundle_error: Exception | None = None,
        render_error: BaseException | None = None,
        block_render: bool = False,
    ):
        self.composition_ids = composition_ids
        self.bundle_error = bundle_error
        self.render_error = render_error
        self.block_render = block_render
        self.render_started = asyncio.Event() if block_render else None
        self.calls: list[str] = []
        self.discovery_props: dict | None = None
        self.render_props: dict | None = None
        self.render_kwargs: dict = {}
        self.output_paths: list[Path] = []

    async def bundle(self, entry, out_dir):
        self.calls.append("bundle")
        if self.bundle_error:
            raise self.bundle_error
        return Bundle(root=out_dir, entry=out_dir / "index.html")

    async def get_compositions(self, bundle, browser, input_props):
        self.calls.append("get_compositions")
        self.discovery_props = input_props
        return [Composition(id=cid, durationInFrames=30) for cid in self.composition_ids]

    async def render_media(self, bundle, composition, browser, output_path, input_props, **kwargs):
        self.calls.append("render_media")
        self.render_props = input_props
        self.render_kwargs = kwargs
        self.output_paths.append(output_path)
        output_path.write_bytes(b"partial")
        if self.block_render:
            self.render_started.set()
            await asyncio.Event().wait()
        if self.render_error:
            raise self.render_error
        output_path.write_bytes(FAKE_MP4)
        return RenderResult(
            output_path=str(output_path),
            composition_id=composition.id,
            frames=composition.duration_in_frames,
            file_size_bytes=len(FAKE_MP4),
        )


class FakeLauncher:
    """Hands out a sentinel browser and counts releases."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.opened = []
        self.fallbacks = []
        self.released = 0

    @asynccontextmanager
    async def open(self, connection, fallback=None):
        self.opened.append(connection)
        self.fallbacks.append(fallback)
        if self.error:
            raise self.error
        try:
            yield object()
        finally:
            self.released += 1


class FakeAudioResolver:
    """Returns a fixed duration per URL, or None for URLs containing 'missing'."""

    def __init__(self, duration: float = 4.25):
        self.duration = duration
        self.calls: list[list[str]] = []

    async def resolve(self, urls):
        self.calls.append(list(urls))
        return [None if "missing" in url else self.duration for url in urls]


def leftover_outputs(tmp_dir: Path) -> list[Path]:
    return sorted(tmp_dir.glob("video-*.mp4"))


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def settings(tmp_dir):
    return make_settings(tmp_dir)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def audio_resolver():
    return FakeAudioResolver()


@pytest.fixture
def orchestrator(settings, engine, launcher, audio_resolver, tmp_dir):
    return RenderOrchestrator(
        settings=settings,
        engine=engine,
        selector=BrowserStrategySelector(settings),
        launcher=launcher,
        audio_resolver=audio_resolver,
        temp_store=TempFileManager(tmp_dir),
    )


@pytest.fixture
def classic_request_body():
    return {
        "ayahs": [{"text": "بِسْمِ اللَّهِ الرَّحْمَٰنِ الرَّحِيمِ"}],
        "config": {"template": "classic", "audioUrl": []},
    }

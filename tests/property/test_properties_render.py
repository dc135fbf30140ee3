"""Property-based tests for template validation, duration alignment and temp files."""

import asyncio
import tempfile
from pathlib import Path

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ayahrender.audio.durations import AudioDurationResolver
from ayahrender.browser.strategy import BrowserStrategySelector
from ayahrender.models.errors import InvalidTemplateError
from ayahrender.models.render import TEMPLATE_COMPOSITIONS, RenderConfig, RenderRequest
from ayahrender.pipeline.orchestrator import RenderOrchestrator
from ayahrender.storage.temp_store import TempFileManager
from tests.conftest import FakeAudioResolver, FakeEngine, FakeLauncher, make_settings
from tests.property.conftest import generate_audio_entries, generate_unknown_template

pytestmark = pytest.mark.property


class PathDurationParser:
    """Takes the duration from the URL path segment echoed back as the body."""

    async def parse(self, chunks):
        body = b"".join([chunk async for chunk in chunks])
        return float(body)


def _transport():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "unreachable.invalid":
            raise httpx.ConnectError("connection refused", request=request)
        segment = request.url.path.split("/")[1]
        if segment == "404":
            return httpx.Response(404)
        return httpx.Response(200, content=segment.encode())

    return httpx.MockTransport(handler)


class TestTemplateProperties:
    @given(template=generate_unknown_template())
    @settings(max_examples=50)
    def test_unknown_templates_have_no_composition(self, template):
        assert RenderConfig(template=template).composition_id is None

    @given(template=st.sampled_from(sorted(TEMPLATE_COMPOSITIONS)))
    def test_known_templates_map(self, template):
        assert RenderConfig(template=template).composition_id == TEMPLATE_COMPOSITIONS[template]

    @given(template=generate_unknown_template())
    @settings(max_examples=25, deadline=None)
    def test_unknown_template_rejected_before_any_work(self, template):
        with tempfile.TemporaryDirectory() as d:
            tmp_dir = Path(d)
            app_settings = make_settings(tmp_dir)
            engine, launcher = FakeEngine(), FakeLauncher()
            orchestrator = RenderOrchestrator(
                settings=app_settings,
                engine=engine,
                selector=BrowserStrategySelector(app_settings),
                launcher=launcher,
                audio_resolver=FakeAudioResolver(),
                temp_store=TempFileManager(tmp_dir),
            )
            request = RenderRequest.model_validate(
                {"ayahs": [], "config": {"template": template}}
            )
            with pytest.raises(InvalidTemplateError):
                asyncio.run(orchestrator.render(request))
            assert engine.calls == []
            assert launcher.opened == []
            assert list(tmp_dir.glob("video-*.mp4")) == []


class TestDurationProperties:
    @given(entries=generate_audio_entries())
    @settings(max_examples=40, deadline=None)
    def test_durations_index_aligned(self, entries):
        urls = [url for url, _ in entries]
        expected = [duration for _, duration in entries]
        resolver = AudioDurationResolver(parser=PathDurationParser(), transport=_transport())
        result = asyncio.run(resolver.resolve(urls))
        assert len(result) == len(urls)
        assert result == expected


class TestTempStoreProperties:
    @given(count=st.integers(min_value=1, max_value=100))
    @settings(max_examples=20)
    def test_allocated_paths_unique(self, count):
        with tempfile.TemporaryDirectory() as d:
            store = TempFileManager(Path(d))
            paths = [store.allocate() for _ in range(count)]
            assert len(set(paths)) == count
            for path in paths:
                assert store.release(path) is True
                assert store.release(path) is False

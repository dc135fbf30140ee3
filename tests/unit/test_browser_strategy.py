"""Tests for BrowserStrategySelector."""

from unittest.mock import patch

import pytest

from ayahrender.browser.presets import CONTAINER_FLAGS, LAUNCH_PRESETS, is_placeholder_token
from ayahrender.browser.strategy import BrowserStrategySelector
from ayahrender.models.browser import BrowserStrategy
from ayahrender.models.errors import BrowserConnectionError
from tests.conftest import make_settings


class TestSelect:
    def test_remote_when_url_and_token(self, tmp_dir):
        settings = make_settings(
            tmp_dir,
            browserless_url="wss://chrome.browserless.io",
            browserless_token="s3cr3t",
        )
        conn = BrowserStrategySelector(settings).select()
        assert conn.strategy == BrowserStrategy.REMOTE
        assert conn.ws_endpoint == "wss://chrome.browserless.io?token=s3cr3t"
        assert conn.launch_args == []

    @pytest.mark.parametrize(
        "url,token",
        [("", ""), ("wss://chrome.browserless.io", ""), ("", "s3cr3t")],
    )
    def test_local_without_credentials(self, tmp_dir, url, token):
        settings = make_settings(tmp_dir, browserless_url=url, browserless_token=token)
        conn = BrowserStrategySelector(settings).select()
        assert conn.strategy == BrowserStrategy.LOCAL
        assert conn.preset == "container"
        assert conn.ws_endpoint is None

    @pytest.mark.parametrize("token", ["your-token-here", "YOUR_BROWSERLESS_TOKEN", " changeme "])
    def test_placeholder_token_is_ignored(self, tmp_dir, token):
        settings = make_settings(
            tmp_dir, browserless_url="wss://chrome.browserless.io", browserless_token=token
        )
        assert BrowserStrategySelector(settings).select().strategy == BrowserStrategy.LOCAL

    def test_no_remote_attempt_without_credentials(self, tmp_dir):
        selector = BrowserStrategySelector(make_settings(tmp_dir))
        with patch.object(BrowserStrategySelector, "remote") as remote:
            conn = selector.select()
        remote.assert_not_called()
        assert "browserless" not in conn.target

    def test_default_when_no_preset(self, tmp_dir):
        settings = make_settings(tmp_dir, local_browser_preset="")
        conn = BrowserStrategySelector(settings).select()
        assert conn.strategy == BrowserStrategy.DEFAULT
        assert conn.launch_args == []
        assert conn.ws_endpoint is None

    def test_selects_named_preset(self, tmp_dir):
        settings = make_settings(tmp_dir, local_browser_preset="minimal")
        conn = BrowserStrategySelector(settings).select()
        assert conn.preset == "minimal"
        assert conn.launch_args == list(LAUNCH_PRESETS["minimal"])

    def test_unknown_preset(self, tmp_dir):
        settings = make_settings(tmp_dir, local_browser_preset="turbo")
        with pytest.raises(BrowserConnectionError, match="turbo"):
            BrowserStrategySelector(settings).select()


class TestFallback:
    def _remote_settings(self, tmp_dir, **overrides):
        return make_settings(
            tmp_dir,
            browserless_url="wss://chrome.browserless.io",
            browserless_token="s3cr3t",
            **overrides,
        )

    def test_no_fallback_by_default(self, tmp_dir):
        selector = BrowserStrategySelector(self._remote_settings(tmp_dir))
        assert selector.fallback_for(selector.select()) is None

    def test_fallback_to_local_when_enabled(self, tmp_dir):
        selector = BrowserStrategySelector(
            self._remote_settings(tmp_dir, remote_fallback_to_local=True)
        )
        fallback = selector.fallback_for(selector.select())
        assert fallback.strategy == BrowserStrategy.LOCAL

    def test_fallback_to_default_without_preset(self, tmp_dir):
        selector = BrowserStrategySelector(
            self._remote_settings(tmp_dir, remote_fallback_to_local=True, local_browser_preset="")
        )
        assert selector.fallback_for(selector.select()).strategy == BrowserStrategy.DEFAULT

    def test_local_has_no_fallback(self, tmp_dir):
        selector = BrowserStrategySelector(
            make_settings(tmp_dir, remote_fallback_to_local=True)
        )
        assert selector.fallback_for(selector.select()) is None


class TestPresets:
    def test_container_preset_flags(self):
        assert "--no-sandbox" in CONTAINER_FLAGS
        assert "--disable-gpu" in CONTAINER_FLAGS
        assert "--use-gl=swiftshader" in CONTAINER_FLAGS
        assert len(set(CONTAINER_FLAGS)) == len(CONTAINER_FLAGS)

    def test_real_token_is_not_placeholder(self):
        assert not is_placeholder_token("2f9c1e0b-77aa-4b3c")

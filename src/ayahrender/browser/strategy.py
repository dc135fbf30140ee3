"""Browser strategy selection."""

import logging

from ayahrender.browser.presets import LAUNCH_PRESETS, is_placeholder_token
from ayahrender.config import Settings
from ayahrender.models.browser import BrowserConnection, BrowserStrategy, with_token
from ayahrender.models.errors import BrowserConnectionError

logger = logging.getLogger(__name__)


class BrowserStrategySelector:
    """Chooses how the engine obtains a browser: remote, local launch, or engine default.

    The first matching rule wins:

    1. Remote endpoint and a real token are configured -> connect remotely.
    2. A local launch preset is configured -> launch Chromium with its flags.
    3. Otherwise let Playwright launch its bundled Chromium unmodified.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def has_remote_credentials(self) -> bool:
        url = self.settings.browserless_url.strip()
        token = self.settings.browserless_token.strip()
        return bool(url and token) and not is_placeholder_token(token)

    def select(self) -> BrowserConnection:
        if self.has_remote_credentials():
            connection = self.remote()
        else:
            connection = self.local() or self.default()
        logger.info("Using %s browser strategy: %s", connection.strategy, connection.target)
        return connection

    def remote(self) -> BrowserConnection:
        endpoint = with_token(
            self.settings.browserless_url.strip(), self.settings.browserless_token.strip()
        )
        return BrowserConnection(strategy=BrowserStrategy.REMOTE, ws_endpoint=endpoint)

    def local(self) -> BrowserConnection | None:
        preset = self.settings.local_browser_preset.strip()
        if not preset:
            return None
        if preset not in LAUNCH_PRESETS:
            raise BrowserConnectionError(
                f"Unknown local browser preset: {preset}",
                details={"preset": preset, "available": sorted(LAUNCH_PRESETS)},
            )
        return BrowserConnection(
            strategy=BrowserStrategy.LOCAL,
            launch_args=list(LAUNCH_PRESETS[preset]),
            preset=preset,
        )

    def default(self) -> BrowserConnection:
        return BrowserConnection(strategy=BrowserStrategy.DEFAULT)

    def fallback_for(self, connection: BrowserConnection) -> BrowserConnection | None:
        """Connection to try when the primary one fails, if policy allows any."""
        if connection.strategy != BrowserStrategy.REMOTE:
            return None
        if not self.settings.remote_fallback_to_local:
            return None
        return self.local() or self.default()

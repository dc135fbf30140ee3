"""Browser strategy selection and lifecycle."""

from ayahrender.browser.launcher import BrowserLauncher
from ayahrender.browser.strategy import BrowserStrategySelector

__all__ = ["BrowserLauncher", "BrowserStrategySelector"]

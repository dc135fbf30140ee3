"""Browser connection models."""

from enum import StrEnum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field


class BrowserStrategy(StrEnum):
    """How the engine obtains a controllable browser."""

    REMOTE = "remote"
    LOCAL = "local"
    DEFAULT = "default"


class BrowserConnection(BaseModel):
    """A resolved browser strategy for one request."""

    model_config = {"frozen": True}

    strategy: BrowserStrategy
    ws_endpoint: str | None = None
    launch_args: list[str] = Field(default_factory=list)
    preset: str | None = None

    @property
    def target(self) -> str:
        """Identity of the browser for logs and errors, with credentials masked."""
        if self.strategy == BrowserStrategy.REMOTE and self.ws_endpoint:
            return redact_token(self.ws_endpoint)
        if self.strategy == BrowserStrategy.LOCAL:
            return f"local chromium (preset {self.preset})"
        return "bundled chromium"


def with_token(url: str, token: str) -> str:
    """Append token as a query parameter, keeping any existing ones."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "token"]
    query.append(("token", token))
    return urlunsplit(parts._replace(query=urlencode(query)))


def redact_token(url: str) -> str:
    parts = urlsplit(url)
    query = [
        (k, "***" if k == "token" else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(query, safe="*")))

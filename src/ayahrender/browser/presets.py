"""Static browser launch presets."""

# Sandboxless, GPU-less container with a software rasterizer.
CONTAINER_FLAGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-web-security",
    "--disable-features=TranslateUI,VizDisplayCompositor",
    "--disable-extensions",
    "--disable-default-apps",
    "--use-gl=swiftshader",
    "--disable-software-rasterizer",
    "--disable-background-networking",
    "--disable-background-mode",
    "--disable-client-side-phishing-detection",
    "--disable-component-update",
    "--disable-domain-reliability",
    "--disable-hang-monitor",
    "--disable-prompt-on-repost",
    "--disable-sync",
    "--metrics-recording-only",
    "--safebrowsing-disable-auto-update",
    "--memory-pressure-off",
    "--js-flags=--max-old-space-size=4096",
    "--disable-ipc-flooding-protection",
)

LAUNCH_PRESETS: dict[str, tuple[str, ...]] = {
    "container": CONTAINER_FLAGS,
    "minimal": ("--no-sandbox", "--disable-dev-shm-usage", "--disable-gpu"),
}

# Values shipped in example env files that must never be sent as credentials.
PLACEHOLDER_TOKENS: frozenset[str] = frozenset(
    {
        "your-token",
        "your-token-here",
        "your_token_here",
        "your-browserless-token",
        "your_browserless_token",
        "browserless_token",
        "changeme",
        "token",
        "xxx",
        "<token>",
    }
)


def is_placeholder_token(token: str) -> bool:
    return token.strip().lower() in PLACEHOLDER_TOKENS

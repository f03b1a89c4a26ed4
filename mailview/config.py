"""Configuration management for mailview."""

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


# Providers whose embeds may render live when remote content is allowed
DEFAULT_TRUSTED_DOMAINS = [
    # Video
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    # Maps and documents
    "google.com",
    "maps.google.com",
    "openstreetmap.org",
    "mapbox.com",
    # Forms and surveys
    "forms.gle",
    "docs.google.com",
    "typeform.com",
    "surveymonkey.com",
    # Social
    "twitter.com",
    "facebook.com",
    "linkedin.com",
    "instagram.com",
]

DEFAULT_TRACKING_MARKERS = ["tracking", "pixel", "beacon"]


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RenderConfig:
    """Content transformation settings.

    The remote-content default can be forced with MAILVIEW_ALLOW_REMOTE.
    """
    allow_remote_default: bool = False
    trusted_domains: list[str] = field(default_factory=lambda: DEFAULT_TRUSTED_DOMAINS.copy())
    exact_host_match: bool = False  # Require host == domain or a subdomain of it
    tracking_markers: list[str] = field(default_factory=lambda: DEFAULT_TRACKING_MARKERS.copy())
    image_max_height: int = 400  # px

    def __post_init__(self):
        """Load overrides from environment variables."""
        env_allow = os.environ.get("MAILVIEW_ALLOW_REMOTE")
        if env_allow:
            self.allow_remote_default = _env_flag(env_allow)


@dataclass
class WebSocketConfig:
    """Render service settings.

    The port can be set via MAILVIEW_WS_PORT environment variable.
    """
    host: str = "127.0.0.1"  # Localhost only
    port: int = 9754

    def __post_init__(self):
        env_port = os.environ.get("MAILVIEW_WS_PORT")
        if env_port:
            try:
                self.port = int(env_port)
            except ValueError:
                logger.warning(f"Ignoring invalid MAILVIEW_WS_PORT: {env_port}")


@dataclass
class Config:
    render: RenderConfig = field(default_factory=RenderConfig)
    websocket: WebSocketConfig = field(default_factory=WebSocketConfig)


def load_config(path: str | Path) -> Config:
    """Load configuration from a TOML file."""
    path = Path(path)
    with path.open("rb") as f:
        data = tomllib.load(f)

    render_data = data.get("render", {})
    render_config = RenderConfig(
        allow_remote_default=render_data.get("allow_remote_default", False),
        trusted_domains=render_data.get("trusted_domains", DEFAULT_TRUSTED_DOMAINS.copy()),
        exact_host_match=render_data.get("exact_host_match", False),
        tracking_markers=render_data.get("tracking_markers", DEFAULT_TRACKING_MARKERS.copy()),
        image_max_height=render_data.get("image_max_height", 400),
    )

    ws_data = data.get("websocket", {})
    ws_config = WebSocketConfig(
        host=ws_data.get("host", "127.0.0.1"),
        port=ws_data.get("port", 9754),
    )

    return Config(render=render_config, websocket=ws_config)

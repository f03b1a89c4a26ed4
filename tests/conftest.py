"""Shared test fixtures."""

import pytest

from mailview.config import RenderConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep environment overrides from leaking into tests."""
    monkeypatch.delenv("MAILVIEW_ALLOW_REMOTE", raising=False)
    monkeypatch.delenv("MAILVIEW_WS_PORT", raising=False)


@pytest.fixture
def render_config():
    """Default render configuration."""
    return RenderConfig()


@pytest.fixture
def newsletter_body():
    """A typical marketing email with every kind of resource."""
    return """<html><body>
<p>Hello &amp; welcome, AT&T customer!</p>
<img src="https://cdn.example.com/banner.png" alt="Spring sale">
<img src="https://cdn.example.com/logo.png">
<img src="https://mail.example.com/open/pixel.gif" width="1" height="1">
<iframe src="https://www.youtube.com/embed/abc123" width="560" height="315"></iframe>
<iframe src="https://ads.example.net/widget"></iframe>
<p>Read more at https://example.com/news.</p>
<script>alert(document.cookie)</script>
<a href="https://example.com/unsubscribe" onclick="track()">Unsubscribe</a>
</body></html>"""


@pytest.fixture
def sample_config_toml(tmp_path):
    """Create a sample TOML config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text('''
[render]
allow_remote_default = true
exact_host_match = true
image_max_height = 250
tracking_markers = ["open.gif", "beacon"]
trusted_domains = ["example.org", "youtube.com"]

[websocket]
host = "0.0.0.0"
port = 19876
''')
    return config_path

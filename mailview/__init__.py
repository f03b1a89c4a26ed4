"""Safe rendering of untrusted email HTML.

This package turns raw email bodies into display fragments:
- transform(): rewrite a body into safe markup, with remote content on or off
- count_resources(): count images and iframes for badges and banners
- classify(): categorize an embed URL and check it against the allow-list
"""

from .classifier import Classification, ResourceCategory, classify
from .config import Config, RenderConfig, WebSocketConfig, load_config
from .inspector import ResourceDescriptor, ResourceKind, count_resources, inspect_resources
from .transform import NO_CONTENT_HTML, ContentTransformer, RenderResult, render, transform

__all__ = [
    "Classification",
    "Config",
    "ContentTransformer",
    "NO_CONTENT_HTML",
    "RenderConfig",
    "RenderResult",
    "ResourceCategory",
    "ResourceDescriptor",
    "ResourceKind",
    "WebSocketConfig",
    "classify",
    "count_resources",
    "inspect_resources",
    "load_config",
    "render",
    "transform",
]

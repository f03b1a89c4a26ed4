"""Classification of embedded resource URLs.

Each URL gets a content category, chosen by keyword in priority order
(video, map, form, social, generic), and a trust verdict from a
host allow-list. Matching is by substring, so a host such as
``www.youtube.com`` is trusted through the ``youtube.com`` entry.

Examples:
    >>> classify("https://www.youtube.com/embed/abc")
    Classification(category=<ResourceCategory.VIDEO: 'video'>, trusted=True)
    >>> classify("https://evil.example.com/x").trusted
    False
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from .config import DEFAULT_TRACKING_MARKERS, DEFAULT_TRUSTED_DOMAINS

TRUSTED_DOMAINS = tuple(DEFAULT_TRUSTED_DOMAINS)
TRACKING_MARKERS = tuple(DEFAULT_TRACKING_MARKERS)


class ResourceCategory(str, Enum):
    """Content-type bucket for an embedded resource."""
    VIDEO = "video"
    MAP = "map"
    FORM = "form"
    SOCIAL = "social"
    GENERIC = "generic"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    ResourceCategory.VIDEO: "Video",
    ResourceCategory.MAP: "Map",
    ResourceCategory.FORM: "Form",
    ResourceCategory.SOCIAL: "Social media post",
    ResourceCategory.GENERIC: "Embedded content",
}

# Priority order matters: first match wins
CATEGORY_KEYWORDS: tuple[tuple[ResourceCategory, tuple[str, ...]], ...] = (
    (ResourceCategory.VIDEO, ("youtube", "vimeo", "video")),
    (ResourceCategory.MAP, ("maps.google", "openstreetmap", "mapbox")),
    (ResourceCategory.FORM, ("forms.", "typeform", "survey")),
    (ResourceCategory.SOCIAL, ("twitter", "facebook", "instagram", "linkedin")),
)


@dataclass(frozen=True)
class Classification:
    """Category and trust verdict for a URL."""
    category: ResourceCategory
    trusted: bool


def host_of(url: str) -> str:
    """Return the host part of a URL, or an empty string if there is none.

    Protocol-relative URLs (``//host/path``) are handled. The host comes back
    lowercased.
    """
    try:
        return urlsplit(url.strip()).hostname or ""
    except ValueError:
        return ""


def categorize(url: str) -> ResourceCategory:
    """Pick a category by URL keyword."""
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in url for keyword in keywords):
            return category
    return ResourceCategory.GENERIC


def is_trusted(
    url: str,
    trusted_domains: Iterable[str] = TRUSTED_DOMAINS,
    exact_host: bool = False,
) -> bool:
    """Check the URL's host against the allow-list.

    Hosts are compared lowercased, as DNS names are case-insensitive;
    ``WWW.YouTube.com`` is the same host as ``www.youtube.com``. Paths and
    query strings never take part in the match.

    Args:
        url: Resource URL
        trusted_domains: Allowed domain entries
        exact_host: If True, the host must equal an entry or be a subdomain
            of it instead of merely containing it

    Returns:
        True if the host matches an entry
    """
    host = host_of(url)
    if not host:
        return False

    for domain in trusted_domains:
        domain = domain.lower()
        if exact_host:
            if host == domain or host.endswith("." + domain):
                return True
        elif domain in host:
            return True
    return False


def classify(
    url: str,
    trusted_domains: Iterable[str] = TRUSTED_DOMAINS,
    exact_host: bool = False,
) -> Classification:
    """Classify a resource URL into a category and trust verdict."""
    return Classification(
        category=categorize(url),
        trusted=is_trusted(url, trusted_domains, exact_host),
    )


def is_tracking_url(url: str, markers: Iterable[str] = TRACKING_MARKERS) -> bool:
    """Check whether an image URL looks like a tracking pixel.

    Inline ``data:`` URIs can't phone home and are never tracking.
    """
    if not url or url.lstrip().lower().startswith("data:"):
        return False
    lowered = url.lower()
    return any(marker.lower() in lowered for marker in markers)

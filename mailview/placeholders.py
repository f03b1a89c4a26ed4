"""Markup templates for blocked resources.

Every placeholder keeps a fixed minimum height so the layout doesn't jump
when remote content is toggled. Placeholders never carry inline event
handlers; the reveal affordance is a plain button tagged with
``data-mv-action="show-remote"`` that the rendering layer wires up.
"""

import html

from .classifier import ResourceCategory

NO_CONTENT_HTML = '<p class="mv-empty">No content available</p>'

_SVG = (
    '<svg class="{cls}" fill="none" stroke="currentColor" viewBox="0 0 24 24" aria-hidden="true">'
    '<path stroke-linecap="round" stroke-linejoin="round" stroke-width="2" d="{path}"></path>'
    "</svg>"
)

IMAGE_ICON = (
    "M4 16l4.586-4.586a2 2 0 012.828 0L16 16m-2-2l1.586-1.586a2 2 0 012.828 0L20 14"
    "m-6-6h.01M6 20h12a2 2 0 002-2V6a2 2 0 00-2-2H6a2 2 0 00-2 2v12a2 2 0 002 2z"
)
BLOCKED_ICON = (
    "M18.364 18.364A9 9 0 005.636 5.636m12.728 12.728L5.636 5.636"
    "m12.728 12.728L18.364 5.636 5.636 18.364"
)
WARNING_ICON = (
    "M12 9v2m0 4h.01m-6.938 4h13.856c1.54 0 2.502-1.667 1.732-2.5L13.732 4"
    "c-.77-.833-1.732-.833-2.5 0L4.268 15.5c-.77.833.192 2.5 1.732 2.5z"
)
CATEGORY_ICONS = {
    ResourceCategory.VIDEO: (
        "M14.828 14.828a4 4 0 01-5.656 0M9 10h1.586a1 1 0 01.707.293l2.414 2.414"
        "a1 1 0 00.707.293H15M9 10V9a2 2 0 012-2h2a2 2 0 012 2v1M9 10v5a2 2 0 002 2h2"
        "a2 2 0 002-2v-5"
    ),
    ResourceCategory.MAP: (
        "M9 20l-5.447-2.724A1 1 0 013 16.382V5.618a1 1 0 011.447-.894L9 7m0 13l6-3"
        "m-6 3V7m6 10l4.553 2.276A1 1 0 0021 18.382V7.618a1 1 0 00-.553-.894L15 4"
        "m0 13V4m0 0L9 7"
    ),
    ResourceCategory.FORM: (
        "M9 12h6m-6 4h6m2 5H7a2 2 0 01-2-2V5a2 2 0 012-2h5.586a1 1 0 01.707.293"
        "l5.414 5.414a1 1 0 01.293.707V19a2 2 0 01-2 2z"
    ),
    ResourceCategory.SOCIAL: (
        "M8.684 13.342C8.886 12.938 9 12.482 9 12c0-.482-.114-.938-.316-1.342"
        "m0 2.684a3 3 0 110-2.684m0 2.684l6.632 3.316m-6.632-6l6.632-3.316"
        "m0 0a3 3 0 105.367-2.684 3 3 0 00-5.367 2.684zm0 9.316a3 3 0 105.367 2.684"
        " 3 3 0 00-5.367-2.684z"
    ),
    ResourceCategory.GENERIC: (
        "M9.75 17L9 20l-1 1h8l-1-1-.75-3M3 13h18M5 17h14a2 2 0 002-2V5"
        "a2 2 0 00-2-2H5a2 2 0 00-2 2v10a2 2 0 002 2z"
    ),
}

REVEAL_BUTTON = (
    '<button type="button" class="mv-reveal" data-mv-action="show-remote">'
    "Show remote content</button>"
)


def _icon(path: str, cls: str = "mv-icon") -> str:
    return _SVG.format(cls=cls, path=path)


def _open_link(url: str) -> str:
    if not url:
        return ""
    return (
        f'<a href="{html.escape(url, quote=True)}" target="_blank" rel="noopener noreferrer" '
        'class="mv-open-link">Open in new tab →</a>'
    )


def image_blocked(label: str) -> str:
    """Placeholder for an image while remote content is off."""
    return (
        '<div class="mv-placeholder mv-placeholder-image" data-mv-blocked="image">'
        f'<div class="mv-placeholder-icon">{_icon(IMAGE_ICON)}</div>'
        '<div class="mv-placeholder-body">'
        '<p class="mv-placeholder-title">Image blocked for privacy</p>'
        f'<p class="mv-placeholder-detail">{html.escape(label)}</p>'
        f"{REVEAL_BUTTON}"
        "</div></div>"
    )


def embed_blocked(category: ResourceCategory, host: str, url: str) -> str:
    """Placeholder for an iframe while remote content is off."""
    return (
        f'<div class="mv-placeholder mv-placeholder-embed" data-mv-blocked="{category.value}">'
        f'<div class="mv-placeholder-icon">{_icon(CATEGORY_ICONS[category])}</div>'
        '<div class="mv-placeholder-body">'
        f'<p class="mv-placeholder-title">{category.label} blocked</p>'
        f'<p class="mv-placeholder-detail">{html.escape(host or "unknown source")}</p>'
        f"{REVEAL_BUTTON}"
        f"{_open_link(url)}"
        "</div></div>"
    )


def embed_untrusted(host: str, url: str) -> str:
    """Placeholder for an iframe from a host outside the allow-list."""
    return (
        '<div class="mv-placeholder mv-placeholder-untrusted" data-mv-blocked="untrusted">'
        f'<div class="mv-placeholder-icon">{_icon(WARNING_ICON)}</div>'
        '<div class="mv-placeholder-body">'
        '<p class="mv-placeholder-title">Embedded content blocked</p>'
        f'<p class="mv-placeholder-detail">Untrusted domain: {html.escape(host or "unknown")}</p>'
        f"{_open_link(url)}"
        "</div></div>"
    )


def tracking_notice() -> str:
    """Small inline notice shown in place of a tracking pixel."""
    return (
        '<span class="mv-tracking-notice" data-mv-blocked="tracking">'
        f"{_icon(BLOCKED_ICON, 'mv-icon-small')}"
        "Blocked tracking image</span>"
    )

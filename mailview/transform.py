"""Email HTML content transformation.

Turns an untrusted email body into a fragment that is safe to inject into
the viewer as-is. The body is parsed once (see ``markup``) and every rule
is applied while walking the tree, so markup produced by one rule is never
re-scanned by another. Every tag in the output is rebuilt here from a
validated name and escaped attribute values.

Rules, in order of concern:

1. Active content is neutralized in every mode: ``<script>`` and
   ``<style>`` blocks, foreign ``<svg>``/``<math>`` content and other
   page-level elements are dropped with their content,
   ``javascript:``/``vbscript:`` schemes are stripped and every ``on*``
   attribute is removed.
2. Bare ``&`` characters are escaped unless they start a character
   reference.
3. Links open in a new tab without opener access; bare URLs in text
   become such links.
4. Images and iframes are either replaced by placeholders or passed
   through with layout-safe styling, depending on ``allow_remote``.
   Iframes from hosts outside the allow-list are always replaced.
5. Tracking pixels are replaced by a small notice in every mode.

Presentation classes (``mv-*``) are added to common block elements; the
matching CSS lives in ``styles``.
"""

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import Tag

from . import placeholders
from .classifier import ResourceCategory, classify, host_of, is_tracking_url
from .config import RenderConfig
from .inspector import count_in_document
from .markup import (
    DROPPED_ELEMENTS,
    OPAQUE_ELEMENTS,
    UNWRAPPED_ELEMENTS,
    element_name,
    escape_attr,
    escape_text,
    is_markup_node,
    is_valid_attr_name,
    is_valid_tag_name,
    parse,
    render_start,
    walk,
)

logger = logging.getLogger("mailview")

NO_CONTENT_HTML = placeholders.NO_CONTENT_HTML

_CRLF_RE = re.compile(r"\r\n?")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_INDENT_RE = re.compile(r"(^|\n)( {2,})(?=\S)")
_SCRIPT_SCHEME_RE = re.compile(
    r"(?:j\s*a\s*v\s*a|v\s*b)\s*s\s*c\s*r\s*i\s*p\s*t\s*:", re.IGNORECASE
)
_EVENT_HANDLER_RE = re.compile(r"^on[a-z0-9_-]+$")
_URL_RE = re.compile(r"https?://[^\s<>\"']+")

# Element -> classes merged into its class attribute
ELEMENT_CLASSES = {
    "pre": "mv-pre",
    "code": "mv-code",
    "blockquote": "mv-blockquote",
    "ul": "mv-list mv-list-disc",
    "ol": "mv-list mv-list-decimal",
    "li": "mv-list-item",
    "table": "mv-table",
    "th": "mv-cell mv-cell-head",
    "td": "mv-cell",
    "p": "mv-paragraph",
}

# Inline div styles keep only declarations whose property contains one of these
LAYOUT_PROPERTIES = ("margin", "padding", "text-align", "text-indent", "white-space", "display")

EMBED_HEIGHTS = {
    ResourceCategory.VIDEO: "100%",  # container fixes a 16:9 aspect ratio
    ResourceCategory.MAP: "300px",
    ResourceCategory.FORM: "600px",
    ResourceCategory.SOCIAL: "500px",
    ResourceCategory.GENERIC: "400px",
}
EMBED_SANDBOX = "allow-scripts allow-same-origin allow-popups allow-forms allow-presentation"

# Attributes the live embed sets itself
_EMBED_OVERRIDDEN = frozenset({
    "class", "style", "width", "height", "loading", "sandbox", "allowfullscreen", "srcdoc",
})
_IMAGE_OVERRIDDEN = frozenset({"loading", "referrerpolicy"})

_LINK_REL = ("noopener", "noreferrer")


def strip_script_schemes(value: str) -> str:
    """Remove javascript:/vbscript: schemes until none are left."""
    while True:
        stripped = _SCRIPT_SCHEME_RE.sub("", value)
        if stripped == value:
            return stripped
        value = stripped


def normalize_whitespace(raw: str) -> str:
    """Normalize line endings, collapse blank runs and trim."""
    text = _CRLF_RE.sub("\n", raw)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def filter_layout_style(style: str) -> str:
    """Keep only layout declarations from an inline style."""
    kept = []
    for declaration in style.split(";"):
        declaration = declaration.strip()
        if not declaration:
            continue
        prop = declaration.split(":", 1)[0].strip().lower()
        if any(name in prop for name in LAYOUT_PROPERTIES):
            kept.append(declaration)
    return "; ".join(kept)


def _merge_class(attrs: list[tuple[str, str]], extra: str) -> list[tuple[str, str]]:
    existing = next((value for name, value in attrs if name == "class"), "")
    merged = f"{existing} {extra}".strip() if existing else extra
    return [(name, value) for name, value in attrs if name != "class"] + [("class", merged)]


def _set_attr(attrs: list[tuple[str, str]], name: str, value: str | None) -> list[tuple[str, str]]:
    return [(n, v) for n, v in attrs if n != name] + [(name, value)]


def _is_rebuilt(tag: Tag) -> bool:
    """Whether a tag is emitted with its own start and end tags."""
    name = element_name(tag)
    return (
        name not in OPAQUE_ELEMENTS
        and name not in UNWRAPPED_ELEMENTS
        and name != "img"
        and is_valid_tag_name(name)
    )


@dataclass(frozen=True)
class RenderResult:
    """Transformed markup plus the raw body's resource count."""
    html: str
    resource_count: int


class _TransformPass:
    """State for one walk over a parsed body."""

    def __init__(self, allow_remote: bool, config: RenderConfig):
        self.allow_remote = allow_remote
        self.config = config
        self.out: list[str] = []
        self.image_count = 0
        self.anchor_depth = 0
        self.pre_depth = 0
        self.at_line_start = True

    def run(self, document: BeautifulSoup) -> str:
        for node, closing in walk(document):
            if isinstance(node, Tag):
                markup = self._end(node) if closing else self._start(node)
                if markup:
                    self.out.append(markup)
                    self.at_line_start = False
            elif not is_markup_node(node):
                text = str(node)
                self.out.append(self._text(text))
                self.at_line_start = text.endswith("\n")
            # Comments and declarations are dropped
        return "".join(self.out)

    # -- text -----------------------------------------------------------

    def _text(self, text: str) -> str:
        text = strip_script_schemes(text)
        if self.anchor_depth:
            parts = [escape_text(text)]
        else:
            parts = []
            pos = 0
            for match in _URL_RE.finditer(text):
                url = self._trim_url(match.group(0))
                parts.append(escape_text(text[pos:match.start()]))
                parts.append(self._link(url))
                pos = match.start() + len(url)
            parts.append(escape_text(text[pos:]))
        result = "".join(parts)

        if not self.pre_depth:
            result = self._indent(result)
        return result

    @staticmethod
    def _trim_url(url: str) -> str:
        url = url.rstrip(".,;:!?")
        if url.endswith(")") and "(" not in url:
            url = url.rstrip(")")
        return url

    def _link(self, url: str) -> str:
        return (
            f'<a href="{escape_attr(url)}" target="_blank" '
            f'rel="noopener noreferrer" class="mv-link">{escape_text(url)}</a>'
        )

    def _indent(self, text: str) -> str:
        def _nbsp(match: re.Match) -> str:
            if match.start() == 0 and not match.group(1) and not self.at_line_start:
                return match.group(0)
            return match.group(1) + "&nbsp;" * len(match.group(2))

        return _INDENT_RE.sub(_nbsp, text)

    # -- tags -----------------------------------------------------------

    def _clean_attrs(self, tag: Tag) -> list[tuple[str, str | None]]:
        """Drop event handlers and invalid names; neutralize values."""
        attrs = []
        for name, value in tag.attrs.items():
            if _EVENT_HANDLER_RE.match(name) or not is_valid_attr_name(name):
                continue
            attrs.append((name, strip_script_schemes(value or "")))
        return attrs

    def _start(self, tag: Tag) -> str:
        name = element_name(tag)
        if name in DROPPED_ELEMENTS:
            logger.debug(f"Dropped <{name}> element")
            return ""
        if name == "img":
            return self._image(self._clean_attrs(tag))
        if name == "iframe":
            return self._iframe(self._clean_attrs(tag))
        if not _is_rebuilt(tag):
            return ""

        attrs = self._clean_attrs(tag)
        if name == "a":
            attrs = self._normalize_link(attrs)
            self.anchor_depth += 1
        elif name == "pre":
            self.pre_depth += 1
        elif name == "div":
            attrs = self._filter_div_style(attrs)

        if name in ELEMENT_CLASSES:
            attrs = _merge_class(attrs, ELEMENT_CLASSES[name])

        markup = render_start(name, attrs)
        if name == "table":
            markup = '<div class="mv-table-wrap">' + markup
        return markup

    def _end(self, tag: Tag) -> str:
        if not _is_rebuilt(tag) or tag.can_be_empty_element:
            return ""
        name = element_name(tag)
        if name == "a":
            self.anchor_depth -= 1
        elif name == "pre":
            self.pre_depth -= 1
        elif name == "table":
            return "</table></div>"
        return f"</{name}>"

    def _normalize_link(self, attrs: list[tuple[str, str | None]]) -> list[tuple[str, str | None]]:
        names = {name for name, _ in attrs}
        if "href" not in names:
            return attrs
        if "target" not in names:
            attrs = attrs + [("target", "_blank")]
        rel = next((value or "" for name, value in attrs if name == "rel"), "")
        tokens = rel.split()
        missing = [value for value in _LINK_REL if value not in (t.lower() for t in tokens)]
        if missing:
            attrs = _set_attr(attrs, "rel", " ".join(tokens + missing))
        return attrs

    def _filter_div_style(self, attrs: list[tuple[str, str | None]]) -> list[tuple[str, str | None]]:
        result = []
        for name, value in attrs:
            if name == "style":
                value = filter_layout_style(value or "")
                if not value:
                    continue
            result.append((name, value))
        return result

    # -- resources ------------------------------------------------------

    def _image(self, attrs: list[tuple[str, str | None]]) -> str:
        self.image_count += 1
        src = next((value or "" for name, value in attrs if name == "src"), "")

        if is_tracking_url(src, self.config.tracking_markers):
            logger.debug(f"Blocked tracking image: {src[:80]}")
            return placeholders.tracking_notice()

        if not self.allow_remote:
            alt = next((value for name, value in attrs if name == "alt"), None)
            label = alt.strip() if alt and alt.strip() else f"Image {self.image_count}"
            return placeholders.image_blocked(label)

        attrs = [(name, value) for name, value in attrs if name not in _IMAGE_OVERRIDDEN]
        style = next((value or "" for name, value in attrs if name == "style"), "").strip().rstrip(";")
        safety = (
            f"max-width: 100%; max-height: {self.config.image_max_height}px; "
            "height: auto; border-radius: 8px"
        )
        attrs = _set_attr(attrs, "style", f"{style}; {safety}" if style else safety)
        attrs = _merge_class(attrs, "mv-image")
        attrs += [("loading", "lazy"), ("referrerpolicy", "no-referrer")]
        return f'<span class="mv-image-wrap">{render_start("img", attrs)}</span>'

    def _iframe(self, attrs: list[tuple[str, str | None]]) -> str:
        src = next((value or "" for name, value in attrs if name == "src"), "").strip()
        result = classify(src, self.config.trusted_domains, self.config.exact_host_match)
        host = host_of(src)

        if not self.allow_remote:
            return placeholders.embed_blocked(result.category, host, src)
        if not src or not result.trusted:
            logger.debug(f"Blocked untrusted embed from {host or 'unknown host'}")
            return placeholders.embed_untrusted(host, src)

        attrs = [(name, value) for name, value in attrs if name not in _EMBED_OVERRIDDEN]
        attrs += [
            ("class", "mv-embed-frame"),
            ("style", f"height: {EMBED_HEIGHTS[result.category]}; width: 100%; border: 0"),
            ("loading", "lazy"),
            ("allowfullscreen", None),
            ("sandbox", EMBED_SANDBOX),
        ]
        return (
            f'<div class="mv-embed mv-embed-{result.category.value}">'
            f"{render_start('iframe', attrs)}</iframe></div>"
        )


class ContentTransformer:
    """Transforms email bodies with a fixed configuration.

    Holds no per-call state, so one instance can serve any number of
    concurrent callers.
    """

    def __init__(self, config: RenderConfig | None = None):
        self.config = config or RenderConfig()

    def transform(self, raw: str | None, allow_remote: bool | None = None) -> str:
        """Rewrite a raw email body into safe display markup.

        Args:
            raw: Decoded email body (HTML or plain text), or None
            allow_remote: Render remote images and trusted embeds live.
                Defaults to the configured default.

        Returns:
            Markup safe to inject verbatim. Never empty; an absent body
            yields NO_CONTENT_HTML.
        """
        if not raw or not raw.strip():
            return NO_CONTENT_HTML
        return self._transform_document(parse(normalize_whitespace(raw)), allow_remote)

    def render(self, raw: str | None, allow_remote: bool | None = None) -> RenderResult:
        """Transform a body and count its embeddable resources.

        The body is parsed once for both.
        """
        if not raw or not raw.strip():
            return RenderResult(html=NO_CONTENT_HTML, resource_count=0)
        document = parse(normalize_whitespace(raw))
        return RenderResult(
            html=self._transform_document(document, allow_remote),
            resource_count=count_in_document(document),
        )

    def _transform_document(self, document: BeautifulSoup, allow_remote: bool | None) -> str:
        if allow_remote is None:
            allow_remote = self.config.allow_remote_default
        result = _TransformPass(allow_remote, self.config).run(document).strip()
        return result or NO_CONTENT_HTML


_default_transformer = ContentTransformer()


def transform(raw: str | None, allow_remote: bool = False, config: RenderConfig | None = None) -> str:
    """Rewrite a raw email body into safe display markup."""
    transformer = ContentTransformer(config) if config else _default_transformer
    return transformer.transform(raw, allow_remote)


def render(raw: str | None, allow_remote: bool = False, config: RenderConfig | None = None) -> RenderResult:
    """Transform a body and count its embeddable resources."""
    transformer = ContentTransformer(config) if config else _default_transformer
    return transformer.render(raw, allow_remote)

"""HTML parsing and serialization helpers.

Email bodies are parsed once with BeautifulSoup's ``html.parser`` backend
and walked as a stream of open/close events. Nothing is ever serialized
by BeautifulSoup itself: callers rebuild every tag from validated names
and escaped values, so the output only contains markup they produced.

Two passes run on the source before parsing:

- ``repair_entities`` escapes every "&" that doesn't start a recognized
  character reference, so query strings like ``?a=1&copy=2`` survive the
  parser's entity decoding.
- ``defuse_unterminated`` escapes openers that can't be completed (a "<"
  after the last ">", a "<!--" after the last "-->"). They would only ever
  become text, and leaving them in makes some parser versions rescan the
  rest of the input once per opener.
"""

import html
import re
from collections.abc import Collection, Iterator
from html.entities import html5

from bs4 import BeautifulSoup
from bs4.element import (
    CData,
    Comment,
    Declaration,
    Doctype,
    PageElement,
    ProcessingInstruction,
    Tag,
)

PARSER = "html.parser"

_ENTITY_RE = re.compile(r"&(#[0-9]+;|#[xX][0-9a-fA-F]+;|[A-Za-z][A-Za-z0-9]*;)?")
_TAG_NAME_RE = re.compile(r"^[a-z][a-z0-9:-]*$")
_ATTR_NAME_RE = re.compile(r"^[a-z_:][a-z0-9_:.-]*$")

# Removed together with everything inside them
DROPPED_ELEMENTS = frozenset({
    "script", "style", "title", "template",
    # Foreign content changes how browsers tokenize what's inside
    "svg", "math",
    # Active or page-level content
    "object", "embed", "applet", "base", "meta", "link",
})

# Emitted without their own tags; only their content is kept
UNWRAPPED_ELEMENTS = frozenset({"html", "head", "body"})

# Content never visited: dropped elements, plus iframes whose content is replaced
OPAQUE_ELEMENTS = DROPPED_ELEMENTS | {"iframe"}

# Parser nodes that carry no displayable text
_MARKUP_NODES = (CData, Comment, Declaration, Doctype, ProcessingInstruction)

# Unfinished openers and the closers that would complete them
_UNTERMINATED = ((">", "<"), ("-->", "<!--"), ("]>", "<!["))


def repair_entities(text: str) -> str:
    """Escape every "&" that doesn't start a recognized character reference.

    Numeric and hex references and HTML5 named references ending in ";"
    are kept; anything else gets its "&" turned into "&amp;".
    """
    def _fix(match: re.Match) -> str:
        ref = match.group(1)
        if ref and (ref.startswith("#") or ref in html5):
            return match.group(0)
        return "&amp;" + (ref or "")

    return _ENTITY_RE.sub(_fix, text)


def defuse_unterminated(source: str) -> str:
    """Escape openers that no later closer can complete."""
    for closer, opener in _UNTERMINATED:
        end = source.rfind(closer)
        cut = end + len(closer) if end >= 0 else 0
        tail = source[cut:]
        if opener in tail:
            source = source[:cut] + tail.replace(opener, "&lt;" + opener[1:])
    return source


def parse(source: str) -> BeautifulSoup:
    """Parse an email body into a document tree.

    Attribute values are kept as plain strings (``class`` is not split).
    """
    return BeautifulSoup(
        defuse_unterminated(repair_entities(source)),
        PARSER,
        multi_valued_attributes=None,
    )


def walk(root: Tag, opaque: Collection[str] = OPAQUE_ELEMENTS) -> Iterator[tuple[PageElement, bool]]:
    """Yield (node, closing) events in document order.

    Tags get an opening and a closing event, strings only an opening one.
    Tags named in ``opaque`` are reported but their content is skipped.
    Runs without recursion, so deeply nested bodies are fine.
    """
    stack: list[tuple[PageElement, bool]] = [(child, False) for child in reversed(root.contents)]
    while stack:
        node, closing = stack.pop()
        yield node, closing
        if closing or not isinstance(node, Tag):
            continue
        stack.append((node, True))
        if element_name(node) not in opaque:
            stack.extend((child, False) for child in reversed(node.contents))


def element_name(tag: Tag) -> str:
    """Name a tag the way browsers treat it (``<image>`` is an image)."""
    return "img" if tag.name == "image" else tag.name


def is_markup_node(node: PageElement) -> bool:
    """Return True for comments, declarations and other non-text strings."""
    return isinstance(node, _MARKUP_NODES)


def is_valid_tag_name(name: str) -> bool:
    return bool(_TAG_NAME_RE.match(name))


def is_valid_attr_name(name: str) -> bool:
    return bool(_ATTR_NAME_RE.match(name))


def escape_text(text: str) -> str:
    """Escape decoded text for element content."""
    return html.escape(text, quote=False).replace("\xa0", "&nbsp;")


def escape_attr(value: str) -> str:
    """Escape a decoded value for a double-quoted attribute."""
    return html.escape(value, quote=True)


def render_start(name: str, attrs: list[tuple[str, str | None]]) -> str:
    """Serialize a start tag. Attribute values must already be decoded."""
    parts = [name]
    for attr_name, value in attrs:
        if value is None:
            parts.append(attr_name)
        else:
            parts.append(f'{attr_name}="{escape_attr(value)}"')
    return "<" + " ".join(parts) + ">"

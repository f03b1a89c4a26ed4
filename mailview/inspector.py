"""Resource counting on raw email bodies.

Counts come from the same parse and walk the transformer uses, so the
badge a viewer shows always matches what the transformer acts on. Tags
hidden in comments or inside dropped elements (``<script>``, ``<style>``,
``<svg>`` and the like) don't count, and neither does an unterminated tag
such as a trailing ``<img src="x"`` with no ``>``. Whatever sits inside an
``<iframe>`` is replaced along with it and isn't counted either.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from bs4 import BeautifulSoup
from bs4.element import Tag

from .classifier import TRUSTED_DOMAINS, ResourceCategory, classify
from .markup import element_name, parse, walk

RESOURCE_TAGS = frozenset({"img", "iframe"})


class ResourceKind(str, Enum):
    IMAGE = "image"
    IFRAME = "iframe"


@dataclass(frozen=True)
class ResourceDescriptor:
    """An embeddable resource found in a body."""
    url: str
    kind: ResourceKind
    category: ResourceCategory
    trusted: bool

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "kind": self.kind.value,
            "category": self.category.value,
            "trusted": self.trusted,
        }


def iter_resource_tags(document: BeautifulSoup) -> Iterator[Tag]:
    """Yield every image and iframe tag of a parsed body, in document order."""
    for node, closing in walk(document):
        if not closing and isinstance(node, Tag) and element_name(node) in RESOURCE_TAGS:
            yield node


def count_in_document(document: BeautifulSoup) -> int:
    """Count images and iframes in an already parsed body."""
    return sum(1 for _ in iter_resource_tags(document))


def count_resources(raw: str | None) -> int:
    """Count <img> and <iframe> tags in an unprocessed body."""
    if not raw:
        return 0
    return count_in_document(parse(raw))


def inspect_resources(
    raw: str | None,
    trusted_domains: Iterable[str] = TRUSTED_DOMAINS,
    exact_host: bool = False,
) -> list[ResourceDescriptor]:
    """Describe every image and iframe in a raw body, in document order."""
    if not raw:
        return []

    resources = []
    for tag in iter_resource_tags(parse(raw)):
        url = (tag.get("src") or "").strip()
        result = classify(url, trusted_domains, exact_host)
        resources.append(ResourceDescriptor(
            url=url,
            kind=ResourceKind.IMAGE if element_name(tag) == "img" else ResourceKind.IFRAME,
            category=result.category,
            trusted=result.trusted,
        ))
    return resources

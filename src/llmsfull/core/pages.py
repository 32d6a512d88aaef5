"""Sidebar flattening.

Turns sidebar trees into an ordered list of page descriptors. Traversal is
depth-first pre-order, so the corpus follows the order readers see in the
site navigation.
"""

import posixpath
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from llmsfull.core.sidebar import NavNode
from llmsfull.core.types import DocPath

TAG_PATTERN = re.compile(r"<[^>]+>")

# Numeric references may omit the semicolon (e.g., "&#8594")
CHAR_REF_PATTERN = re.compile(r"&#[0-9]+;?|&#x[0-9a-fA-F]+;?|&[a-zA-Z][a-zA-Z0-9]*;")

WHITESPACE_PATTERN = re.compile(r"\s+")

EXTERNAL_LINK_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class PageDescriptor:
    """A document referenced by a sidebar entry."""

    collection: str
    nav_path: tuple[str, ...]
    sidebar_title: str | None
    doc_rel_path: DocPath

    @property
    def title(self) -> str:
        """Title used when the document needs a synthesized heading."""
        return self.sidebar_title or self.doc_rel_path

    @property
    def key(self) -> tuple[str, DocPath]:
        """Identity of the page within the corpus."""
        return (self.collection, self.doc_rel_path)


def clean_text(text: str | None) -> str:
    """Strip markup from a sidebar label.

    Labels may contain HTML for icons or arrow glyphs, which must not
    reach the corpus.
    """
    if not text:
        return ""
    text = TAG_PATTERN.sub("", text)
    text = CHAR_REF_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def is_external_link(link: str) -> bool:
    """Return True for absolute http(s) links, which have no local document."""
    return EXTERNAL_LINK_PATTERN.match(link) is not None


def normalize_doc_link(link: str) -> DocPath | None:
    """Convert a sidebar link to a document path.

    Args:
        link: Sidebar link (e.g., "/guide/", "guide/intro", "guide/intro.md")

    Returns:
        Path relative to the docs directory, or None for the site root
    """
    path = link.strip()
    if not path or path == "/":
        return None

    path = path.removeprefix("/")

    if path.endswith("/"):
        path += "index.md"

    if not posixpath.splitext(path)[1]:
        path += ".md"

    return DocPath(path)


def flatten_sidebar(nodes: Sequence[NavNode], collection: str) -> list[PageDescriptor]:
    """Flatten a sidebar tree into deduplicated page descriptors.

    Args:
        nodes: Root-level sidebar nodes
        collection: Collection name stamped on every descriptor

    Returns:
        Descriptors in pre-order, first occurrence of each document kept
    """
    pages: list[PageDescriptor] = []
    _walk(nodes, collection, (), pages)
    return dedupe_pages(pages)


def _walk(
    nodes: Sequence[NavNode],
    collection: str,
    nav_path: tuple[str, ...],
    pages: list[PageDescriptor],
) -> None:
    for node in nodes:
        if node.is_cta:
            continue

        label = clean_text(node.text)
        node_path = (*nav_path, label) if label else nav_path

        if node.link and not is_external_link(node.link):
            doc_rel_path = normalize_doc_link(node.link)
            if doc_rel_path is not None:
                pages.append(
                    PageDescriptor(
                        collection=collection,
                        nav_path=node_path,
                        sidebar_title=label or None,
                        doc_rel_path=doc_rel_path,
                    ),
                )

        if node.items:
            _walk(node.items, collection, node_path, pages)


def dedupe_pages(pages: Iterable[PageDescriptor]) -> list[PageDescriptor]:
    """Drop repeated (collection, document) pairs, keeping the first."""
    seen: set[tuple[str, DocPath]] = set()
    result: list[PageDescriptor] = []
    for page in pages:
        if page.key in seen:
            continue
        seen.add(page.key)
        result.append(page)
    return result


def collect_pages(trees: Iterable[tuple[str, Sequence[NavNode]]]) -> list[PageDescriptor]:
    """Flatten several collections into one ordered page list.

    Args:
        trees: (collection, nodes) pairs in output order

    Returns:
        Combined descriptors, deduplicated across the whole list
    """
    pages: list[PageDescriptor] = []
    for collection, nodes in trees:
        pages.extend(flatten_sidebar(nodes, collection))
    return dedupe_pages(pages)

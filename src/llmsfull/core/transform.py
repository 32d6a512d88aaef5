"""Document resolution and Markdown clean-up.

Reads the source file behind each page and reduces it to plain Markdown
suitable for the corpus: site-generator front matter, component imports and
container markers are removed, and each page starts with a single H1.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from llmsfull.core.pages import PageDescriptor

logger = logging.getLogger(__name__)

FRONT_MATTER_PATTERN = re.compile(r"\A---[ \t]*\n(?:.*?\n)?---[ \t]*(?:\n|\Z)", re.DOTALL)

# import Foo from './Foo.vue'; / import { a, b } from "x" / import './style.css'
IMPORT_LINE_PATTERN = re.compile(
    r"""^\s*import\s+(?:[\w$\s{},*]+\s+from\s+)?(['"])[^'"]+\1\s*;?\s*$""",
)

BLANK_LINE_PATTERN = re.compile(r"^\s*$")

# ::: / ::: tip / :::warning Custom title / ::: details{open}
CONTAINER_MARKER_PATTERN = re.compile(r"^\s*:{3,}\s*(?:[\w-]+(?:\{[^}]*\})?)?\s*(?P<title>.*)$")

H1_PATTERN = re.compile(r"^\s*#\s+.+$", re.MULTILINE)


@dataclass
class ResolvedDocument:
    """Corpus body for one page."""

    page: PageDescriptor
    found: bool
    text: str


def strip_front_matter(markdown: str) -> str:
    """Remove a leading --- delimited metadata block."""
    return FRONT_MATTER_PATTERN.sub("", markdown, count=1)


def strip_import_preamble(markdown: str) -> str:
    """Remove import statements and blank lines preceding the content.

    Only the preamble is touched; once a content line is seen, later lines
    are kept even if they look like imports.
    """
    lines = markdown.split("\n")
    for i, line in enumerate(lines):
        if IMPORT_LINE_PATTERN.match(line) or BLANK_LINE_PATTERN.match(line):
            continue
        return "\n".join(lines[i:])
    return ""


def strip_container_markers(markdown: str) -> str:
    """Remove container directive marker lines, keeping their content.

    A container title given on the opening line is kept as a line of its
    own.
    """
    result: list[str] = []
    for line in markdown.split("\n"):
        match = CONTAINER_MARKER_PATTERN.match(line)
        if match is None:
            result.append(line)
            continue
        title = match.group("title").strip()
        if title:
            result.append(title)
    return "\n".join(result)


def ensure_h1(markdown: str, title: str) -> str:
    """Prepend a top-level heading unless the document already has one."""
    if H1_PATTERN.search(markdown):
        return markdown
    return f"# {title}\n\n{markdown}"


def transform_markdown(markdown: str, title: str) -> str:
    """Apply the full clean-up pipeline to a source document.

    Args:
        markdown: Raw file content
        title: Fallback title for the synthesized H1

    Returns:
        Cleaned Markdown starting with exactly one top-level heading
    """
    text = markdown.replace("\r\n", "\n").replace("\r", "\n")
    text = strip_front_matter(text)
    text = strip_import_preamble(text)
    text = strip_container_markers(text)
    text = text.strip()
    return ensure_h1(text, title)


def missing_placeholder(page: PageDescriptor) -> str:
    """Body emitted for a page whose source file cannot be read."""
    return f"# {page.title}\n(MISSING_FILE: {page.doc_rel_path})"


def read_document(path: Path) -> str | None:
    """Read a source document.

    Returns:
        File content, or None if the file is missing, unreadable or empty
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None
    return content or None


def resolve_page(page: PageDescriptor, source_dir: Path) -> ResolvedDocument:
    """Resolve a page to its corpus body.

    Never raises for unreadable documents; they yield a placeholder with
    found=False instead.

    Args:
        page: Page to resolve
        source_dir: Documentation source directory

    Returns:
        ResolvedDocument with transformed text or placeholder
    """
    raw = read_document(source_dir / page.doc_rel_path)
    if raw is None:
        logger.warning(f"Missing document for {page.collection}: {page.doc_rel_path}")
        return ResolvedDocument(page=page, found=False, text=missing_placeholder(page))

    logger.debug(f"Resolved {page.doc_rel_path} ({len(raw)} characters)")
    return ResolvedDocument(page=page, found=True, text=transform_markdown(raw, page.title))

"""Corpus rendering and output.

Output format:
    LLMS_FULL_VERSION: 1
    SITE_BASE_URL: https://example.com/docs
    GENERATED_AT: 2024-01-01T00:00:00.000Z
    TOTAL_PAGES: 2

    ================================================================================
    COLLECTION: guides
    NAV_PATH: Getting Started > Introduction
    DOC_PATH: guide/introduction.md
    URL: https://example.com/docs/guide/introduction
    ================================================================================
    # Introduction
    ...

Downstream consumers parse the header and banner lines, so their format
must stay stable.
"""

import logging
import os
import re
import stat
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from llmsfull.core.transform import ResolvedDocument
from llmsfull.core.types import DocPath

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

RULE = "=" * 80

NAV_PATH_SEPARATOR = " > "

MD_SUFFIX_PATTERN = re.compile(r"\.md$", re.IGNORECASE)

INDEX_SUFFIX_PATTERN = re.compile(r"/index$", re.IGNORECASE)

SLASH_RUN_PATTERN = re.compile(r"/{2,}")


@dataclass
class CorpusResult:
    """Rendered corpus with page accounting."""

    text: str
    total_pages: int
    missing: list[DocPath] = field(default_factory=list)


def doc_path_to_url(doc_rel_path: str, base_url: str) -> str:
    """Build the published URL of a document.

    guide/foo.md -> {base_url}/guide/foo
    guide/index.md -> {base_url}/guide/

    Args:
        doc_rel_path: Document path relative to the docs directory
        base_url: Site base URL

    Returns:
        Absolute page URL
    """
    route = MD_SUFFIX_PATTERN.sub("", doc_rel_path)
    route = INDEX_SUFFIX_PATTERN.sub("/", route)
    url = SLASH_RUN_PATTERN.sub("/", f"{base_url}/{route}")
    return url.replace(":/", "://", 1)


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with milliseconds."""
    utc = moment.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def render_corpus(
    documents: Sequence[ResolvedDocument],
    base_url: str,
    generated_at: datetime,
) -> CorpusResult:
    """Render the corpus text for resolved documents.

    Args:
        documents: Resolved documents in output order
        base_url: Site base URL for the header and page URLs
        generated_at: Generation timestamp for the header

    Returns:
        CorpusResult with the full text and missing document paths
    """
    out = [
        f"LLMS_FULL_VERSION: {FORMAT_VERSION}",
        f"SITE_BASE_URL: {base_url}",
        f"GENERATED_AT: {format_timestamp(generated_at)}",
        f"TOTAL_PAGES: {len(documents)}",
        "",
    ]
    missing: list[DocPath] = []

    for doc in documents:
        page = doc.page
        out.append(RULE)
        out.append(f"COLLECTION: {page.collection}")
        out.append(f"NAV_PATH: {NAV_PATH_SEPARATOR.join(page.nav_path)}")
        out.append(f"DOC_PATH: {page.doc_rel_path}")
        out.append(f"URL: {doc_path_to_url(page.doc_rel_path, base_url)}")
        out.append(RULE)
        out.append(doc.text)
        out.append("")
        if not doc.found:
            missing.append(page.doc_rel_path)

    return CorpusResult(text="\n".join(out), total_pages=len(documents), missing=missing)


def _output_mode(path: Path) -> int:
    """Permission bits for the corpus file.

    An existing target keeps its mode; a new one gets the regular
    file-creation mode under the current umask.
    """
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def write_corpus(path: Path, text: str) -> None:
    """Write the corpus file atomically.

    The text goes to a temporary file in the target directory which then
    replaces the target, so a failed run never leaves a partial file.
    The published file stays readable by the web server: it gets the mode
    of the file it replaces, or the umask default for a new file.

    Args:
        path: Output file path
        text: Full corpus text

    Raises:
        OSError: If the directory cannot be created or the file written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _output_mode(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info(f"Wrote {len(text)} characters to {path}")

"""Corpus generation pipeline.

load sidebars -> flatten -> resolve documents -> render -> write
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from llmsfull.config import Config
from llmsfull.core.corpus import render_corpus, write_corpus
from llmsfull.core.pages import PageDescriptor, collect_pages
from llmsfull.core.sidebar import NavNode, load_sidebar
from llmsfull.core.transform import resolve_page
from llmsfull.core.types import DocPath

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Summary of a generation run."""

    output_path: Path
    pages: list[PageDescriptor]
    missing: list[DocPath] = field(default_factory=list)
    written: bool = False


def load_pages(config: Config) -> list[PageDescriptor]:
    """Load every configured sidebar and flatten them into one page list.

    All sidebars are loaded before any page is produced, so a broken
    definition fails the run up front.

    Raises:
        FileNotFoundError: If a sidebar definition is missing
        ValueError: If a sidebar export is missing or malformed
    """
    trees: list[tuple[str, list[NavNode]]] = []
    for source in config.sidebars:
        nodes = load_sidebar(source, config.docs.root_dir, config.docs.source_dir)
        trees.append((source.collection, nodes))
    pages = collect_pages(trees)
    logger.info(f"Collected {len(pages)} pages from {len(trees)} sidebars")
    return pages


def generate(
    config: Config,
    *,
    now: datetime | None = None,
    dry_run: bool = False,
) -> GenerateResult:
    """Generate the corpus file.

    Missing documents become placeholders and are reported in the result;
    every other failure propagates.

    Args:
        config: Application configuration
        now: Timestamp for the header (default: current UTC time)
        dry_run: Build the corpus without writing it

    Returns:
        GenerateResult with page list and missing documents
    """
    pages = load_pages(config)
    documents = [resolve_page(page, config.docs.source_dir) for page in pages]

    result = render_corpus(
        documents,
        config.site.base_url,
        now if now is not None else datetime.now(UTC),
    )

    if not dry_run:
        write_corpus(config.output.path, result.text)

    return GenerateResult(
        output_path=config.output.path,
        pages=pages,
        missing=result.missing,
        written=not dry_run,
    )

"""CLI interface for llmsfull.

Command-line tool for exporting documentation sidebars into a single
llms-full.txt corpus.
"""

import logging
import sys
from pathlib import Path

import click

from llmsfull.config import Config
from llmsfull.core.types import DocPath


@click.group()
def cli() -> None:
    """llmsfull - documentation corpus export for language models."""


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover llmsfull.toml)",
)
@click.option(
    "--root-dir",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Repository root for sidebar definitions (overrides config)",
)
@click.option(
    "--source-dir",
    "-s",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Documentation source directory (overrides config)",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Output file (overrides config and LLMS_FULL_OUT)",
)
@click.option(
    "--base-url",
    default=None,
    help="Published site base URL (overrides config and DOCS_BASE_URL)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Build the corpus without writing the output file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output",
)
def generate(
    config_path: Path | None,
    root_dir: Path | None,
    source_dir: Path | None,
    output_path: Path | None,
    base_url: str | None,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Generate the llms-full.txt corpus from the sidebars."""
    from llmsfull.core.generator import generate as run_generate

    _configure_logging(verbose)

    try:
        config = _load_config(config_path, root_dir, source_dir, output_path, base_url)
        result = run_generate(config, dry_run=dry_run)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        if verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    if result.written:
        click.echo(click.style(f"Wrote {result.output_path}", fg="green"))
    else:
        click.echo(click.style("[DRY RUN] No file written.", fg="cyan", bold=True))
    click.echo(f"Pages: {len(result.pages)} | Missing: {len(result.missing)}")
    _print_missing_warning(result.missing)


@cli.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: auto-discover llmsfull.toml)",
)
@click.option(
    "--root-dir",
    type=click.Path(exists=True, path_type=Path, file_okay=False),
    default=None,
    help="Repository root for sidebar definitions (overrides config)",
)
def pages(config_path: Path | None, root_dir: Path | None) -> None:
    """List the pages collected from the sidebars."""
    from llmsfull.core.generator import load_pages

    try:
        config = _load_config(config_path, root_dir, None, None, None)
        page_list = load_pages(config)
    except Exception as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    for page in page_list:
        nav_path = " > ".join(page.nav_path)
        click.echo(f"{page.collection}\t{nav_path}\t{page.doc_rel_path}")
    click.echo(f"\nPages: {len(page_list)}")


def _load_config(
    config_path: Path | None,
    root_dir: Path | None,
    source_dir: Path | None,
    output_path: Path | None,
    base_url: str | None,
) -> Config:
    """Load config and apply environment then CLI overrides.

    Args:
        config_path: Explicit config file, or None to auto-discover
        root_dir: CLI root directory override
        source_dir: CLI source directory override
        output_path: CLI output path override
        base_url: CLI base URL override

    Returns:
        Effective configuration
    """
    config = Config.load(config_path).with_env()
    return config.with_overrides(
        root_dir=root_dir,
        source_dir=source_dir,
        output_path=output_path,
        base_url=base_url,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_missing_warning(missing: list[DocPath]) -> None:
    """Print warning about documents that could not be read.

    Args:
        missing: Document paths replaced by placeholders
    """
    if not missing:
        return

    click.echo(
        click.style(
            f"\nWarning: {len(missing)} document(s) missing:",
            fg="yellow",
        ),
    )
    for doc_path in missing:
        click.echo(f"  - {doc_path}")


if __name__ == "__main__":
    cli()

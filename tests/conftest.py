"""Shared test fixtures."""

from pathlib import Path

import pytest
from llmsfull.config import Config, DocsConfig, OutputConfig, SiteConfig
from llmsfull.core.sidebar import SidebarSource


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Sidebars are JSON files under tmp_path/sidebars; the tests write them.
    """
    source_dir = tmp_path / "docs"
    source_dir.mkdir(exist_ok=True)
    (tmp_path / "sidebars").mkdir(exist_ok=True)

    return Config(
        docs=DocsConfig(root_dir=tmp_path, source_dir=source_dir),
        site=SiteConfig(base_url="https://example.com/docs"),
        output=OutputConfig(path=tmp_path / "out" / "llms-full.txt"),
        sidebars=[
            SidebarSource(
                collection="guides",
                path=Path("sidebars/guide.json"),
                export="sidebarGuide",
            ),
            SidebarSource(
                collection="tutorials",
                path=Path("sidebars/tutorials.json"),
                export="sidebarTutorials",
            ),
        ],
    )

"""Configuration management for llmsfull.

Supports TOML configuration format with auto-discovery, environment
overrides and CLI overrides (in increasing precedence).
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from llmsfull.core.sidebar import SidebarSource

CONFIG_FILENAME = "llmsfull.toml"

DEFAULT_BASE_URL = "https://apostrophecms.com/docs"

GUIDES_COLLECTION = "guides"
TUTORIALS_COLLECTION = "tutorials"

# Environment variable -> collection whose sidebar path it overrides
SIDEBAR_ENV_VARS = {
    "GUIDE_SIDEBAR": GUIDES_COLLECTION,
    "TUTORIALS_SIDEBAR": TUTORIALS_COLLECTION,
}
OUTPUT_ENV_VAR = "LLMS_FULL_OUT"
BASE_URL_ENV_VAR = "DOCS_BASE_URL"


def _default_sidebars() -> list[SidebarSource]:
    return [
        SidebarSource(
            collection=GUIDES_COLLECTION,
            path=Path("docs/sidebar_guide.py"),
            export="sidebar_guide",
        ),
        SidebarSource(
            collection=TUTORIALS_COLLECTION,
            path=Path("docs/sidebar_tutorials.py"),
            export="sidebar_tutorials",
        ),
    ]


@dataclass
class DocsConfig:
    """Documentation tree configuration."""

    root_dir: Path = field(default_factory=lambda: Path("."))
    source_dir: Path = field(default_factory=lambda: Path("docs"))


@dataclass
class SiteConfig:
    """Published site configuration."""

    base_url: str = DEFAULT_BASE_URL


@dataclass
class OutputConfig:
    """Corpus output configuration."""

    path: Path = field(default_factory=lambda: Path("docs/public/llms-full.txt"))


@dataclass
class Config:
    """Application configuration."""

    docs: DocsConfig
    site: SiteConfig
    output: OutputConfig
    sidebars: list[SidebarSource]
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for llmsfull.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults, rooted at the working directory."""
        root_dir = Path.cwd()
        return cls(
            docs=DocsConfig(root_dir=root_dir, source_dir=root_dir / "docs"),
            site=SiteConfig(),
            output=OutputConfig(path=root_dir / "docs" / "public" / "llms-full.txt"),
            sidebars=_default_sidebars(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        docs = cls._parse_docs(data.get("docs"), path.parent)
        site = cls._parse_site(data.get("site"))
        output = cls._parse_output(data.get("output"), docs.root_dir)
        sidebars = cls._parse_sidebars(data.get("sidebars"))

        return cls(
            docs=docs,
            site=site,
            output=output,
            sidebars=sidebars,
            config_path=path,
        )

    @classmethod
    def _parse_docs(cls, data: object, config_dir: Path) -> DocsConfig:
        """Parse docs configuration section.

        Args:
            data: Raw docs section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DocsConfig instance
        """
        if data is None:
            return DocsConfig(root_dir=config_dir, source_dir=config_dir / "docs")

        if not isinstance(data, dict):
            raise ValueError("docs section must be a dictionary")

        root_dir = data.get("root_dir", ".")
        if not isinstance(root_dir, str):
            raise ValueError("docs.root_dir must be a string")
        root_path = config_dir / root_dir

        source_dir = data.get("source_dir", "docs")
        if not isinstance(source_dir, str):
            raise ValueError("docs.source_dir must be a string")

        return DocsConfig(root_dir=root_path, source_dir=root_path / source_dir)

    @classmethod
    def _parse_site(cls, data: object) -> SiteConfig:
        if data is None:
            return SiteConfig()

        if not isinstance(data, dict):
            raise ValueError("site section must be a dictionary")

        base_url = data.get("base_url", DEFAULT_BASE_URL)
        if not isinstance(base_url, str):
            raise ValueError("site.base_url must be a string")

        return SiteConfig(base_url=base_url)

    @classmethod
    def _parse_output(cls, data: object, root_dir: Path) -> OutputConfig:
        if data is None:
            return OutputConfig(path=root_dir / "docs" / "public" / "llms-full.txt")

        if not isinstance(data, dict):
            raise ValueError("output section must be a dictionary")

        output_path = data.get("path", "docs/public/llms-full.txt")
        if not isinstance(output_path, str):
            raise ValueError("output.path must be a string")

        return OutputConfig(path=root_dir / output_path)

    @classmethod
    def _parse_sidebars(cls, data: object) -> list[SidebarSource]:
        """Parse the sidebars array of tables.

        Args:
            data: Raw sidebars data

        Returns:
            SidebarSource list in configured order (defaults if absent)
        """
        if data is None:
            return _default_sidebars()

        if not isinstance(data, list):
            raise ValueError("sidebars must be an array of tables")

        sidebars: list[SidebarSource] = []
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("sidebars items must be tables")
            collection = item.get("collection")
            if not isinstance(collection, str):
                raise ValueError("sidebars.collection must be a string")
            sidebar_path = item.get("path")
            if not isinstance(sidebar_path, str):
                raise ValueError("sidebars.path must be a string")
            export = item.get("export")
            if not isinstance(export, str):
                raise ValueError("sidebars.export must be a string")
            sidebars.append(
                SidebarSource(collection=collection, path=Path(sidebar_path), export=export),
            )

        collections = [s.collection for s in sidebars]
        if len(set(collections)) != len(collections):
            raise ValueError("sidebars.collection values must be unique")

        return sidebars

    def with_env(self, environ: Mapping[str, str] | None = None) -> Config:
        """Create a new Config with environment overrides applied.

        Relative paths from the environment resolve against docs.root_dir.

        Args:
            environ: Environment mapping (default: os.environ)

        Returns:
            New Config instance with overrides applied
        """
        env = os.environ if environ is None else environ

        sidebars = list(self.sidebars)
        for var, collection in SIDEBAR_ENV_VARS.items():
            value = env.get(var)
            if not value:
                continue
            sidebars = [
                replace(s, path=Path(value)) if s.collection == collection else s
                for s in sidebars
            ]

        output = self.output
        output_value = env.get(OUTPUT_ENV_VAR)
        if output_value:
            output = replace(self.output, path=self.docs.root_dir / output_value)

        site = self.site
        base_url = env.get(BASE_URL_ENV_VAR)
        if base_url:
            site = replace(self.site, base_url=base_url)

        return replace(self, site=site, output=output, sidebars=sidebars)

    def with_overrides(
        self,
        *,
        root_dir: Path | None = None,
        source_dir: Path | None = None,
        output_path: Path | None = None,
        base_url: str | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. This follows
        the immutable pattern - the original Config is not modified.
        A new root_dir also moves source and output paths located under
        the old root, unless they are overridden as well.

        Args:
            root_dir: Override docs.root_dir
            source_dir: Override docs.source_dir
            output_path: Override output.path
            base_url: Override site.base_url

        Returns:
            New Config instance with overrides applied
        """
        old_root = self.docs.root_dir
        new_root = root_dir if root_dir is not None else old_root

        docs = self.docs
        if root_dir is not None or source_dir is not None:
            docs = replace(
                self.docs,
                root_dir=new_root,
                source_dir=source_dir
                if source_dir is not None
                else _rebase(self.docs.source_dir, old_root, new_root),
            )

        output = self.output
        if output_path is not None:
            output = replace(self.output, path=output_path)
        elif root_dir is not None:
            output = replace(self.output, path=_rebase(self.output.path, old_root, new_root))

        site = self.site
        if base_url is not None:
            site = replace(self.site, base_url=base_url)

        return replace(self, docs=docs, site=site, output=output)


def _rebase(path: Path, old_root: Path, new_root: Path) -> Path:
    """Move path from old_root to new_root if it lies under old_root."""
    if not path.is_relative_to(old_root):
        return path
    return new_root / path.relative_to(old_root)

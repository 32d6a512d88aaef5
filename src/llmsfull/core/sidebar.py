"""Sidebar definitions.

Loads navigation trees from Python modules, JSON or TOML files. Each
definition exposes a named list of nodes; Python modules may instead expose
a callable that builds the list from the documentation source directory.
"""

from __future__ import annotations

import importlib.machinery
import importlib.util
import json
import logging
import tomllib
import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CTA_STYLE = "cta"


@dataclass
class NavNode:
    """One entry in a sidebar tree."""

    text: str | None = None
    link: str | None = None
    items: list[NavNode] = field(default_factory=list)
    style: str | None = None

    @property
    def is_cta(self) -> bool:
        """Whether the node is a promotional call-to-action entry."""
        return self.style == CTA_STYLE

    @classmethod
    def from_dict(cls, data: object) -> NavNode:
        """Build a node tree from plain sidebar data.

        Unknown keys (collapsed, icon, customClass, ...) are ignored.

        Args:
            data: Mapping with optional text, link, items and style keys

        Returns:
            NavNode with children converted recursively

        Raises:
            ValueError: If the data or one of its fields has the wrong type
        """
        if isinstance(data, NavNode):
            return data
        if not isinstance(data, Mapping):
            raise ValueError(f"Sidebar item must be a mapping, got {type(data).__name__}")

        text = data.get("text")
        if text is not None and not isinstance(text, str):
            raise ValueError("Sidebar item text must be a string")

        link = data.get("link")
        if link is not None and not isinstance(link, str):
            raise ValueError("Sidebar item link must be a string")

        style = data.get("style")
        if style is not None and not isinstance(style, str):
            raise ValueError("Sidebar item style must be a string")

        items_raw = data.get("items")
        if items_raw is None:
            items_raw = []
        if not isinstance(items_raw, list):
            raise ValueError("Sidebar item items must be a list")

        return cls(
            text=text,
            link=link,
            items=[cls.from_dict(item) for item in items_raw],
            style=style,
        )


@dataclass(frozen=True)
class SidebarSource:
    """Where a collection's sidebar is defined."""

    collection: str
    path: Path
    export: str


def load_sidebar(source: SidebarSource, root_dir: Path, docs_dir: Path) -> list[NavNode]:
    """Load a sidebar tree.

    The definition is read fresh on every call. Relative paths resolve
    against root_dir. Callable exports receive docs_dir, the same source
    tree that page documents are read from.

    Args:
        source: Sidebar location and export name
        root_dir: Repository root
        docs_dir: Documentation source directory

    Returns:
        Root-level nodes in definition order

    Raises:
        FileNotFoundError: If the definition file does not exist
        ValueError: If the export is missing or malformed
    """
    path = source.path if source.path.is_absolute() else root_dir / source.path
    if not path.is_file():
        raise FileNotFoundError(f"Sidebar definition not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".py":
        raw = _load_python_export(path, source.export, docs_dir)
    elif suffix in (".json", ".toml"):
        raw = _load_data_export(path, source.export)
    else:
        raise ValueError(f"Unsupported sidebar format: {path}")

    if not isinstance(raw, list):
        raise ValueError(f"Export `{source.export}` in {path} must be a list")

    nodes = [NavNode.from_dict(item) for item in raw]
    logger.info(f"Loaded {source.collection} sidebar from {path} ({len(nodes)} root items)")
    return nodes


class _FreshSourceLoader(importlib.machinery.SourceFileLoader):
    """Source loader that neither reads nor writes cached bytecode."""

    def get_code(self, fullname: str) -> types.CodeType:
        return self.source_to_code(self.get_data(self.path), self.path)


def _load_python_export(path: Path, export: str, docs_dir: Path) -> object:
    """Execute a sidebar module and return its export.

    The module is loaded from source on every call and is not registered
    in sys.modules, so edits are always picked up.
    """
    name = f"_llmsfull_sidebar_{path.stem}"
    loader = _FreshSourceLoader(name, str(path))
    spec = importlib.util.spec_from_file_location(name, str(path), loader=loader)
    if spec is None:
        raise ValueError(f"Cannot load sidebar module: {path}")
    module = importlib.util.module_from_spec(spec)
    loader.exec_module(module)

    if not hasattr(module, export):
        raise ValueError(f"Could not find export `{export}` in {path}")
    value = getattr(module, export)
    if callable(value):
        builder: Callable[[Path], object] = value
        value = builder(docs_dir)
    return value


def _load_data_export(path: Path, export: str) -> object:
    """Return the export key of a JSON or TOML sidebar file."""
    if path.suffix.lower() == ".toml":
        with path.open("rb") as f:
            data = tomllib.load(f)
    else:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict) or export not in data:
        raise ValueError(f"Could not find export `{export}` in {path}")
    return data[export]


def item_refs(
    docs_dir: Path,
    folder: str,
    sub_folder: str = "",
    *,
    exclude_prefixes: tuple[str, ...] = (),
    title_prefix: str = "",
    display_names: Mapping[str, str] | None = None,
) -> list[NavNode]:
    """Build sidebar entries from the files of a documentation folder.

    Used by sidebar modules for reference sections whose pages are not
    listed by hand.

    Args:
        docs_dir: Documentation source directory that links are relative to
        folder: Folder under docs_dir (e.g., "reference")
        sub_folder: Optional folder below it (e.g., "modules")
        exclude_prefixes: File name prefixes to skip (e.g., "_template")
        title_prefix: Prefix for every label (e.g., "@apostrophecms/")
        display_names: Label overrides keyed by file name

    Returns:
        One NavNode per file, sorted by file name

    Raises:
        FileNotFoundError: If the folder does not exist
    """
    display_names = display_names or {}
    directory = docs_dir / folder
    if sub_folder:
        directory = directory / sub_folder

    nodes: list[NavNode] = []
    for filename in sorted(p.name for p in directory.iterdir()):
        if filename.startswith(exclude_prefixes):
            continue
        label = display_names.get(filename, filename.removesuffix(".md"))
        link = f"{folder}/{sub_folder}/{filename}" if sub_folder else f"{folder}/{filename}"
        nodes.append(NavNode(text=f"{title_prefix}{label}", link=link))
    return nodes

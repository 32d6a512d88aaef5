"""Tests for sidebar loading."""

import json
import sys
from pathlib import Path

import pytest
from llmsfull.core.sidebar import NavNode, SidebarSource, item_refs, load_sidebar


class TestNavNodeFromDict:
    """Tests for NavNode.from_dict()."""

    def test_builds_nested_tree(self) -> None:
        node = NavNode.from_dict(
            {
                "text": "Getting Started",
                "collapsed": False,
                "items": [{"text": "Introduction", "link": "guide/introduction.md"}],
            },
        )

        assert node.text == "Getting Started"
        assert node.link is None
        assert node.items == [NavNode(text="Introduction", link="guide/introduction.md")]

    def test_reads_cta_style(self) -> None:
        node = NavNode.from_dict({"text": "Tutorials", "link": "/tutorials/", "style": "cta"})

        assert node.is_cta

    def test_accepts_existing_nodes(self) -> None:
        child = NavNode(text="Child", link="child.md")

        node = NavNode.from_dict({"text": "Parent", "items": [child]})

        assert node.items[0] is child

    def test__non_mapping__raises_error(self) -> None:
        with pytest.raises(ValueError, match="must be a mapping"):
            NavNode.from_dict("guide/intro.md")

    def test__non_string_link__raises_error(self) -> None:
        with pytest.raises(ValueError, match="link must be a string"):
            NavNode.from_dict({"text": "X", "link": 42})

    def test__non_list_items__raises_error(self) -> None:
        with pytest.raises(ValueError, match="items must be a list"):
            NavNode.from_dict({"text": "X", "items": {"text": "Y"}})


class TestLoadSidebar:
    """Tests for load_sidebar()."""

    def test__python_list_export__loads(self, tmp_path: Path) -> None:
        (tmp_path / "sidebar_guide.py").write_text(
            'sidebar_guide = [{"text": "Intro", "link": "guide/intro.md"}]\n',
        )
        source = SidebarSource("guides", Path("sidebar_guide.py"), "sidebar_guide")

        nodes = load_sidebar(source, tmp_path, tmp_path / "docs")

        assert nodes == [NavNode(text="Intro", link="guide/intro.md")]

    def test__python_callable_export__receives_docs_dir(self, tmp_path: Path) -> None:
        """Callable exports build items from the injected docs directory."""
        modules_dir = tmp_path / "docs" / "reference" / "modules"
        modules_dir.mkdir(parents=True)
        (modules_dir / "asset.md").write_text("# asset")
        (tmp_path / "sidebar.py").write_text(
            "from llmsfull.core.sidebar import item_refs\n"
            "\n"
            "def sidebar_guide(docs_dir):\n"
            '    return [{"text": "Core", "items": item_refs(docs_dir, "reference", "modules")}]\n',
        )
        source = SidebarSource("guides", tmp_path / "sidebar.py", "sidebar_guide")

        nodes = load_sidebar(source, tmp_path, tmp_path / "docs")

        assert nodes[0].items == [NavNode(text="asset", link="reference/modules/asset.md")]

    def test__python_module__reloaded_each_call(self, tmp_path: Path) -> None:
        module = tmp_path / "sidebar.py"
        module.write_text('sidebar = [{"text": "One", "link": "one.md"}]\n')
        source = SidebarSource("guides", module, "sidebar")
        load_sidebar(source, tmp_path, tmp_path / "docs")

        module.write_text('sidebar = [{"text": "Two", "link": "two.md"}]\n')
        nodes = load_sidebar(source, tmp_path, tmp_path / "docs")

        assert nodes[0].text == "Two"

    def test__python_module__loaded_as_module(self, tmp_path: Path) -> None:
        module = tmp_path / "sidebar.py"
        module.write_text(
            "sidebar = [{'text': __spec__.origin, 'link': 'one.md'}]\n"
            "assert __loader__ is not None\n",
        )
        source = SidebarSource("guides", module, "sidebar")

        nodes = load_sidebar(source, tmp_path, tmp_path / "docs")

        assert nodes[0].text == str(module)
        assert not (tmp_path / "__pycache__").exists()
        assert not any(name.startswith("_llmsfull_sidebar_") for name in sys.modules)

    def test__json_export__loads(self, tmp_path: Path) -> None:
        (tmp_path / "guide.json").write_text(
            json.dumps({"sidebarGuide": [{"text": "Intro", "link": "guide/intro.md"}]}),
        )
        source = SidebarSource("guides", Path("guide.json"), "sidebarGuide")

        nodes = load_sidebar(source, tmp_path, tmp_path / "docs")

        assert nodes[0].link == "guide/intro.md"

    def test__toml_export__loads(self, tmp_path: Path) -> None:
        (tmp_path / "guide.toml").write_text(
            '[[sidebar]]\ntext = "Intro"\nlink = "guide/intro.md"\n',
        )
        source = SidebarSource("guides", Path("guide.toml"), "sidebar")

        nodes = load_sidebar(source, tmp_path, tmp_path / "docs")

        assert nodes == [NavNode(text="Intro", link="guide/intro.md")]

    def test__missing_file__raises_error(self, tmp_path: Path) -> None:
        source = SidebarSource("guides", Path("nope.py"), "sidebar_guide")

        with pytest.raises(FileNotFoundError, match="Sidebar definition not found"):
            load_sidebar(source, tmp_path, tmp_path / "docs")

    def test__missing_python_export__raises_error(self, tmp_path: Path) -> None:
        (tmp_path / "sidebar.py").write_text("other = []\n")
        source = SidebarSource("guides", Path("sidebar.py"), "sidebar_guide")

        with pytest.raises(ValueError, match="Could not find export `sidebar_guide`"):
            load_sidebar(source, tmp_path, tmp_path / "docs")

    def test__missing_json_export__raises_error(self, tmp_path: Path) -> None:
        (tmp_path / "guide.json").write_text("{}")
        source = SidebarSource("guides", Path("guide.json"), "sidebarGuide")

        with pytest.raises(ValueError, match="Could not find export"):
            load_sidebar(source, tmp_path, tmp_path / "docs")

    def test__export_not_a_list__raises_error(self, tmp_path: Path) -> None:
        (tmp_path / "sidebar.py").write_text('sidebar = {"text": "x"}\n')
        source = SidebarSource("guides", Path("sidebar.py"), "sidebar")

        with pytest.raises(ValueError, match="must be a list"):
            load_sidebar(source, tmp_path, tmp_path / "docs")

    def test__unsupported_format__raises_error(self, tmp_path: Path) -> None:
        (tmp_path / "sidebar.js").write_text("export const sidebar = []")
        source = SidebarSource("guides", Path("sidebar.js"), "sidebar")

        with pytest.raises(ValueError, match="Unsupported sidebar format"):
            load_sidebar(source, tmp_path, tmp_path / "docs")


class TestItemRefs:
    """Tests for item_refs()."""

    @pytest.fixture
    def field_types_dir(self, tmp_path: Path) -> Path:
        directory = tmp_path / "docs" / "reference" / "field-types"
        directory.mkdir(parents=True)
        for name in ["string.md", "index.md", "_choices-setting.md", "relationship-reverse.md"]:
            (directory / name).write_text("content")
        return directory

    def test_lists_files_sorted(self, tmp_path: Path, field_types_dir: Path) -> None:
        nodes = item_refs(tmp_path / "docs", "reference", "field-types")

        assert [n.text for n in nodes] == [
            "_choices-setting",
            "index",
            "relationship-reverse",
            "string",
        ]

    def test_excludes_prefixes(self, tmp_path: Path, field_types_dir: Path) -> None:
        nodes = item_refs(
            tmp_path / "docs",
            "reference",
            "field-types",
            exclude_prefixes=("_choices-setting", "index"),
        )

        assert [n.link for n in nodes] == [
            "reference/field-types/relationship-reverse.md",
            "reference/field-types/string.md",
        ]

    def test_applies_prefix_and_display_names(
        self,
        tmp_path: Path,
        field_types_dir: Path,
    ) -> None:
        nodes = item_refs(
            tmp_path / "docs",
            "reference",
            "field-types",
            exclude_prefixes=("_", "index"),
            title_prefix="@apostrophecms/",
            display_names={"relationship-reverse.md": "relationshipReverse"},
        )

        assert [n.text for n in nodes] == [
            "@apostrophecms/relationshipReverse",
            "@apostrophecms/string",
        ]

    def test_without_sub_folder(self, tmp_path: Path) -> None:
        (tmp_path / "docs" / "starters").mkdir(parents=True)
        (tmp_path / "docs" / "starters" / "essentials.md").write_text("x")

        nodes = item_refs(tmp_path / "docs", "starters")

        assert nodes == [NavNode(text="essentials", link="starters/essentials.md")]

    def test__md_inside_name__only_suffix_removed(self, tmp_path: Path) -> None:
        (tmp_path / "docs" / "guide").mkdir(parents=True)
        (tmp_path / "docs" / "guide" / "read.md-files.md").write_text("x")

        nodes = item_refs(tmp_path / "docs", "guide")

        assert [n.text for n in nodes] == ["read.md-files"]

    def test__missing_folder__raises_error(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            item_refs(tmp_path / "docs", "reference", "nope")

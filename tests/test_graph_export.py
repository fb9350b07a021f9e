"""Tests for graph export helpers."""

import json
from pathlib import Path

import pytest

from typegraph_cli.converter import GraphConverter
from typegraph_cli.graph_export import export_dot, export_html, export_json
from typegraph_cli.hierarchy import link_declarations
from typegraph_cli.models import GraphData
from typegraph_cli.parser import DeclarationParser


@pytest.fixture
def sample_graph(sample_workspace_path: Path) -> GraphData:
    decls = DeclarationParser().parse_file(sample_workspace_path / ".tactica" / "types.ts")
    return GraphConverter.convert(link_declarations(decls, root_suffix="Instance"))


def test_export_json(sample_graph: GraphData, temp_dir: Path):
    output = temp_dir / "graph.json"
    export_json(sample_graph, output)

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert set(payload) == {"nodes", "links"}
    assert len(payload["nodes"]) == 5
    assert payload["nodes"][0]["isRoot"] is True
    assert {"source": "UserInstance", "target": "UserInstance.GuestInstance"} in payload["links"]


def test_export_json_focus(sample_graph: GraphData, temp_dir: Path):
    output = temp_dir / "graph.json"
    export_json(sample_graph, output, focus="GuestInstance")

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert [n["id"] for n in payload["nodes"]] == ["UserInstance", "UserInstance.GuestInstance"]
    assert payload["links"] == [{"source": "UserInstance", "target": "UserInstance.GuestInstance"}]


def test_export_json_unmatched_focus_keeps_everything(sample_graph: GraphData, temp_dir: Path):
    output = temp_dir / "graph.json"
    export_json(sample_graph, output, focus="NoSuchType")
    assert len(json.loads(output.read_text(encoding="utf-8"))["nodes"]) == 5


def test_export_dot(sample_graph: GraphData, temp_dir: Path):
    output = temp_dir / "graph.dot"
    export_dot(sample_graph, output, layout="tree", node_size="propertyCount")

    text = output.read_text(encoding="utf-8")
    assert text.startswith("digraph TypeGraph {")
    assert '"UserInstance" -> "UserInstance.AdminInstance";' in text
    assert "shape=box" in text
    assert text.rstrip().endswith("}")


def test_export_html(sample_graph: GraphData, temp_dir: Path):
    output = temp_dir / "graph.html"
    export_html(sample_graph, output, node_size="propertyCount")

    text = output.read_text(encoding="utf-8")
    assert "<title>TypeGraph Export</title>" in text
    assert "TypeConstructor<AdminInstance>" in text
    assert "</script>" in text


def test_export_empty_graph(temp_dir: Path):
    output = temp_dir / "empty.json"
    export_json(GraphData(), output)
    assert json.loads(output.read_text(encoding="utf-8")) == {"nodes": [], "links": []}


class TestDotSettings:
    """Layout and node sizing in DOT output."""

    def test_tree_layout_ranks_top_down(self, sample_graph: GraphData, temp_dir: Path):
        output = temp_dir / "graph.dot"
        export_dot(sample_graph, output, layout="tree")

        text = output.read_text(encoding="utf-8")
        assert "rankdir=TB;" in text
        assert "layout=neato" not in text
        assert "subgraph" not in text

    def test_force_layout_uses_neato(self, sample_graph: GraphData, temp_dir: Path):
        output = temp_dir / "graph.dot"
        export_dot(sample_graph, output, layout="force")

        text = output.read_text(encoding="utf-8")
        assert "layout=neato;" in text
        assert "rankdir" not in text

    def test_cluster_layout_groups_by_root(self, sample_graph: GraphData, temp_dir: Path):
        output = temp_dir / "graph.dot"
        export_dot(sample_graph, output, layout="cluster")

        text = output.read_text(encoding="utf-8")
        assert text.count("subgraph cluster_") == 2
        assert 'label="UserInstance";' in text
        assert 'label="OrderInstance";' in text
        user_cluster = text.split("subgraph cluster_1")[0]
        assert '"UserInstance.AdminInstance.SuperAdminInstance"' in user_cluster

    def test_node_width_follows_property_count(self, sample_graph: GraphData, temp_dir: Path):
        output = temp_dir / "graph.dot"
        export_dot(sample_graph, output, layout="tree", node_size="propertyCount")

        text = output.read_text(encoding="utf-8")
        assert '"UserInstance" [label="UserInstance\\n(3 props)", shape=box, width=1.30];' in text
        assert "width=1.60" in text

    def test_uniform_node_size(self, sample_graph: GraphData, temp_dir: Path):
        output = temp_dir / "graph.dot"
        export_dot(sample_graph, output, layout="tree", node_size="uniform")

        text = output.read_text(encoding="utf-8")
        assert text.count("width=1.00") == 5


def test_export_html_embeds_node_size(sample_graph: GraphData, temp_dir: Path):
    output = temp_dir / "graph.html"
    export_html(sample_graph, output, node_size="uniform")

    text = output.read_text(encoding="utf-8")
    assert '<script type="application/json" id="graph-settings">{"nodeSize": "uniform"}</script>' in text


def test_exports_default_to_configured_settings(sample_graph: GraphData, temp_dir: Path, monkeypatch):
    monkeypatch.setattr("typegraph_cli.config.LAYOUT", "cluster")
    monkeypatch.setattr("typegraph_cli.config.NODE_SIZE", "uniform")
    output = temp_dir / "graph.dot"

    export_dot(sample_graph, output)

    text = output.read_text(encoding="utf-8")
    assert "subgraph cluster_0" in text
    assert "width=1.30" not in text

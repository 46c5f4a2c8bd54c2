"""
Tests for the export module.

Tests the {nodes, links} visualization export and Mermaid rendering.
"""

import pytest

from lineage.export import (
    DiagramRenderer,
    escape_label,
    export_graph,
    mermaid_ids,
    render_diagram,
)
from lineage.graph import build_lineage_graph
from tests.fixtures import PIPELINE_RECORDS, QUOTED_RECORDS, chain_records

PIPELINE_DIAGRAM = """graph TD
    j1("Transform Customer Data"):::job
    j2("Generate Customer Report"):::job
    d1["Raw Customer Data"]:::entity
    d2["Cleaned Customer Data"]:::entity
    d3["Customer Report"]:::entity
    d1 --> j1
    j1 ==> d2
    d2 --> j2
    j2 ==> d3

    classDef entity fill:#e1f5fe,stroke:#01579b,stroke-width:2px
    classDef job fill:#f3e5f5,stroke:#4a148c,stroke-width:2px"""


def _node_lines(diagram: str) -> list[str]:
    return [line for line in diagram.splitlines() if ":::" in line]


class TestExportGraph:
    """Tests for the visualization export."""

    def test_nodes_and_links(self):
        """Test every node and edge is exported."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        data = export_graph(graph)

        assert len(data["nodes"]) == 5
        assert len(data["links"]) == 4
        assert data["links"][0] == {"source": "d1", "target": "j1", "kind": "reads"}
        assert data["links"][1] == {"source": "j1", "target": "d2", "kind": "writes"}

    def test_order_preserved(self):
        """Test nodes and links follow insertion order."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        data = export_graph(graph)

        assert [n["id"] for n in data["nodes"]] == ["j1", "j2", "d1", "d2", "d3"]
        assert [(l["source"], l["target"]) for l in data["links"]] == [
            (e.source, e.target) for e in graph.edges
        ]

    def test_node_shape(self):
        """Test entity nodes carry id, type and label only."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        nodes = {n["id"]: n for n in export_graph(graph)["nodes"]}

        assert nodes["d1"] == {"id": "d1", "type": "entity", "label": "Raw Customer Data"}
        assert nodes["j1"]["type"] == "job"
        assert nodes["j1"]["metadata"]["owner"] == "John Doe"

    def test_empty_graph(self):
        """Test exporting an empty graph."""
        assert export_graph(build_lineage_graph([])) == {"nodes": [], "links": []}


class TestRenderDiagram:
    """Tests for Mermaid rendering."""

    def test_full_diagram(self):
        """Test exact output for the pipeline fixture."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        assert render_diagram(graph) == PIPELINE_DIAGRAM

    def test_connectors_differ_by_kind(self):
        """Test reads and writes use different arrows."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        diagram = render_diagram(graph)

        assert "d1 --> j1" in diagram
        assert "j1 ==> d2" in diagram

    def test_escapes_quotes(self):
        """Test double quotes in labels become single quotes."""
        graph = build_lineage_graph(QUOTED_RECORDS)

        diagram = render_diagram(graph)

        assert "Dataflow with 'quotes'" in diagram
        assert "Dataset with 'quotes'" in diagram
        for line in _node_lines(diagram):
            label = line.split('"')[1:-1]
            assert len(label) == 1

    def test_escape_label_line_breaks(self):
        """Test labels stay on one line."""
        assert escape_label('two\nlines "here"') == "two lines 'here'"

    def test_max_nodes_caps_declarations(self):
        """Test node declarations never exceed max_nodes."""
        graph = build_lineage_graph(chain_records(100))

        diagram = render_diagram(graph, max_nodes=10)

        assert len(_node_lines(diagram)) == 10

    def test_max_nodes_drops_edges_to_undeclared_nodes(self):
        """Test only edges between declared nodes are drawn."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        diagram = render_diagram(graph, max_nodes=3)

        assert _node_lines(diagram) == [
            '    j1("Transform Customer Data"):::job',
            '    j2("Generate Customer Report"):::job',
            '    d1["Raw Customer Data"]:::entity',
        ]
        assert "d1 --> j1" in diagram
        assert "j1 ==> d2" not in diagram

    def test_max_nodes_larger_than_graph(self):
        """Test a generous cap renders everything."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        assert render_diagram(graph, max_nodes=500) == PIPELINE_DIAGRAM

    def test_max_nodes_zero(self):
        """Test a zero cap leaves only the header and class definitions."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        diagram = render_diagram(graph, max_nodes=0)

        assert _node_lines(diagram) == []
        assert diagram.splitlines()[0] == "graph TD"
        assert diagram.count("classDef") == 2

    def test_negative_max_nodes(self):
        """Test a negative cap is a caller error."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        with pytest.raises(ValueError):
            render_diagram(graph, max_nodes=-1)

    def test_empty_graph(self):
        """Test rendering an empty graph."""
        diagram = render_diagram(build_lineage_graph([]))

        assert diagram.splitlines()[0] == "graph TD"
        assert _node_lines(diagram) == []

    def test_highlight(self):
        """Test a highlighted node gets its own class."""
        graph = build_lineage_graph(PIPELINE_RECORDS)

        diagram = DiagramRenderer(graph).render(highlight="d2")

        assert '    d2["Cleaned Customer Data"]:::entity_highlight' in diagram
        assert "classDef entity_highlight" in diagram
        assert "classDef job_highlight" in diagram

    def test_focused_neighborhood(self):
        """Test rendering a pre-filtered neighborhood."""
        graph = build_lineage_graph(chain_records(20))

        diagram = render_diagram(graph.neighborhood("df10", 1), highlight="df10")

        assert len(_node_lines(diagram)) == 3
        assert ":::job_highlight" in diagram
        assert "df9 ==> ds10" not in diagram
        assert "ds10 --> df10" in diagram
        assert "df10 ==> ds11" in diagram

    def test_unsafe_ids_get_generated_identifiers(self):
        """Test ids Mermaid cannot parse are drawn under generated names."""
        graph = build_lineage_graph(
            [
                {
                    "id": "end",
                    "name": "Final Step",
                    "inputs": [{"id": 'raw"x', "name": "Raw"}],
                    "outputs": [{"id": "has space", "name": "Spaced"}],
                }
            ]
        )

        diagram = render_diagram(graph)

        assert _node_lines(diagram) == [
            '    n0("Final Step"):::job',
            '    n1["Raw"]:::entity',
            '    n2["Spaced"]:::entity',
        ]
        assert "    n1 --> n0" in diagram
        assert "    n0 ==> n2" in diagram
        for line in _node_lines(diagram):
            assert line.count('"') == 2


class TestMermaidIds:
    """Tests for Mermaid identifier mapping."""

    def test_plain_ids_kept(self):
        assert mermaid_ids(["d1", "job_2", "a1b2-c3d4", "42"]) == {
            "d1": "d1",
            "job_2": "job_2",
            "a1b2-c3d4": "a1b2-c3d4",
            "42": "42",
        }

    def test_keywords_and_punctuation_replaced(self):
        mapping = mermaid_ids(["End", "a b", "x--y", "d1 "])

        assert mapping == {"End": "n0", "a b": "n1", "x--y": "n2", "d1 ": "n3"}

    def test_generated_names_avoid_existing_ids(self):
        """Test a generated identifier never collides with a real id."""
        mapping = mermaid_ids(["a b", "n0"])

        assert mapping == {"a b": "n0_", "n0": "n0"}
        assert len(set(mapping.values())) == 2

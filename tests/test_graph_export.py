"""Tests for graph export."""

import json

import pytest

from fluxcode.graph_export import export_dot, export_json, node_color, node_size, to_dot, to_graph_data
from fluxcode.models import Issue, SourceFile


def _file(complexity=0, issues=None):
    return SourceFile(
        id="a.js", name="a.js", extension=".js", size=0, content="",
        language="javascript", complexity=complexity, issues=issues or [],
    )


@pytest.mark.parametrize("complexity,color", [(0, "#10b981"), (11, "#eab308"), (21, "#f59e0b")])
def test_node_color_by_complexity(complexity, color):
    assert node_color(_file(complexity)) == color


def test_node_color_issues_win():
    issue = Issue(id="i", kind="x", severity="warning", message="", file="a.js")
    assert node_color(_file(50, [issue])) == "#ef4444"


@pytest.mark.parametrize("complexity,size", [(0, 10), (12, 24), (100, 50)])
def test_node_size(complexity, size):
    assert node_size(_file(complexity)) == size


@pytest.fixture
def result(engine, make_input):
    return engine.analyze([
        make_input("a.js", "export function helper() {}\n"),
        make_input("b.js", "import { helper } from './a';\nhelper();\n"),
    ])


def test_graph_data(result):
    data = to_graph_data(result)

    assert [n["id"] for n in data["nodes"]] == ["a.js", "b.js"]
    assert {e["type"] for e in data["edges"]} == {"import", "function_call"}
    call = next(e for e in data["edges"] if e["type"] == "function_call")
    assert call["animated"] is True
    assert data["layout"] == "force"
    assert data["filters"]["fileTypes"] == ["javascript"]


def test_dot(result):
    dot = to_dot(result)

    assert dot.startswith("digraph Fluxcode {")
    assert '"b.js" -> "a.js"' in dot
    assert "style=dashed" in dot
    assert dot.rstrip().endswith("}")


def test_export_files(result, temp_dir):
    export_json(result, temp_dir / "graph.json")
    export_dot(result, temp_dir / "graph.dot")

    assert len(json.loads((temp_dir / "graph.json").read_text())["nodes"]) == 2
    assert (temp_dir / "graph.dot").read_text().startswith("digraph")

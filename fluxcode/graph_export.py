"""Graph export helpers: JSON graph payload and Graphviz DOT."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .models import AnalysisResult, SourceFile

EDGE_COLORS: Dict[str, str] = {
    "import": "#6366f1",
    "function_call": "#8b5cf6",
}
DEFAULT_EDGE_COLOR = "#6b7280"


def node_color(source_file: SourceFile) -> str:
    if source_file.issues:
        return "#ef4444"
    if source_file.complexity > 20:
        return "#f59e0b"
    if source_file.complexity > 10:
        return "#eab308"
    return "#10b981"


def node_size(source_file: SourceFile) -> int:
    return max(10, min(50, source_file.complexity * 2))


def to_graph_data(result: AnalysisResult) -> Dict[str, Any]:
    """Convert an analysis into node/edge lists for a graph view."""
    nodes: List[Dict[str, Any]] = [
        {
            "id": f.id,
            "label": f.name,
            "type": "file",
            "size": node_size(f),
            "color": node_color(f),
            "data": {
                "path": f.path,
                "language": f.language,
                "complexity": f.complexity,
                "functions": len(f.functions),
                "errors": len(f.issues),
            },
            "errors": len(f.issues),
            "complexity": f.complexity,
        }
        for f in result.files
    ]
    edges: List[Dict[str, Any]] = [
        {
            "id": r.id,
            "source": r.source,
            "target": r.target,
            "type": r.kind,
            "weight": r.strength,
            "color": EDGE_COLORS.get(r.kind, DEFAULT_EDGE_COLOR),
            "animated": r.kind == "function_call",
        }
        for r in result.relationships
    ]
    return {
        "nodes": nodes,
        "edges": edges,
        "layout": "force",
        "filters": {
            "fileTypes": sorted({f.language or "unknown" for f in result.files}),
            "errorLevels": ["error", "warning", "info"],
            "complexityRange": [0, max((f.complexity for f in result.files), default=0)],
        },
    }


def to_dot(result: AnalysisResult) -> str:
    lines = ["digraph Fluxcode {"]
    lines.append("  rankdir=LR;")

    for f in result.files:
        label = f"{f.id}\\ncomplexity {f.complexity}"
        lines.append(
            f'  "{_esc(f.id)}" [label="{_esc(label)}", color="{node_color(f)}"];'
        )

    for r in result.relationships:
        style = "dashed" if r.kind == "function_call" else "solid"
        lines.append(
            f'  "{_esc(r.source)}" -> "{_esc(r.target)}" '
            f'[label="{r.kind}", style={style}, color="{EDGE_COLORS.get(r.kind, DEFAULT_EDGE_COLOR)}"];'
        )

    lines.append("}")
    return "\n".join(lines)


def export_dot(result: AnalysisResult, output_file: Path) -> None:
    output_file.write_text(to_dot(result), encoding="utf-8")


def export_json(result: AnalysisResult, output_file: Path) -> None:
    output_file.write_text(json.dumps(to_graph_data(result), indent=2), encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace('"', '\\"')

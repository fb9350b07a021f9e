"""Graph export helpers for JSON, DOT and simple standalone HTML outputs.

DOT and HTML exports follow the ``layout`` and ``node_size`` graph settings
unless explicit values are passed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import config
from .models import GraphData


def export_json(graph: GraphData, output_file: Path, focus: str = "") -> None:
    """Write the renderer payload ``{"nodes": [...], "links": [...]}``."""
    payload = _focused_payload(graph, focus)
    output_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def export_dot(
    graph: GraphData,
    output_file: Path,
    focus: str = "",
    layout: Optional[str] = None,
    node_size: Optional[str] = None,
) -> None:
    """Write a Graphviz digraph.

    ``layout``: ``tree`` ranks top-down, ``force`` asks for the neato
    spring layout, ``cluster`` boxes each root's subtree. ``node_size``:
    ``propertyCount`` widens nodes with more properties, ``uniform`` does not.
    """
    layout = layout or config.LAYOUT
    node_size = node_size or config.NODE_SIZE
    payload = _focused_payload(graph, focus)

    lines = ["digraph TypeGraph {"]
    if layout == "force":
        lines.append("  layout=neato;")
        lines.append("  overlap=false;")
    else:
        lines.append("  rankdir=TB;")

    if layout == "cluster":
        groups: Dict[str, List[Dict[str, Any]]] = {}
        top = _topmost_ancestors(payload)
        for node in payload["nodes"]:
            groups.setdefault(top[node["id"]], []).append(node)
        for index, (group_id, members) in enumerate(groups.items()):
            lines.append(f"  subgraph cluster_{index} {{")
            lines.append(f'    label="{_esc(group_id)}";')
            for node in members:
                lines.append("  " + _dot_node(node, node_size))
            lines.append("  }")
    else:
        for node in payload["nodes"]:
            lines.append(_dot_node(node, node_size))

    for link in payload["links"]:
        lines.append(f'  "{_esc(link["source"])}" -> "{_esc(link["target"])}";')

    lines.append("}")
    output_file.write_text("\n".join(lines), encoding="utf-8")


def _dot_node(node: Dict[str, Any], node_size: str) -> str:
    prop_count = len(node["properties"])
    label = f"{node['name']}\\n({prop_count} props)"
    shape = "box" if node["isRoot"] else "ellipse"
    width = _node_scale(prop_count, node_size)
    return f'  "{_esc(node["id"])}" [label="{_esc(label)}", shape={shape}, width={width:.2f}];'


def _node_scale(prop_count: int, node_size: str) -> float:
    if node_size == "uniform":
        return 1.0
    return 1.0 + 0.1 * min(prop_count, 20)


def _topmost_ancestors(payload: Dict[str, List[Dict[str, Any]]]) -> Dict[str, str]:
    """Map each node id to the topmost ancestor present in *payload*."""
    parents = {link["target"]: link["source"] for link in payload["links"]}
    result: Dict[str, str] = {}
    for node in payload["nodes"]:
        current = node["id"]
        seen = {current}
        while current in parents and parents[current] not in seen:
            current = parents[current]
            seen.add(current)
        result[node["id"]] = current
    return result


def export_html(
    graph: GraphData,
    output_file: Path,
    focus: str = "",
    node_size: Optional[str] = None,
) -> None:
    """Export a standalone HTML page listing types, fields and links."""
    payload = _focused_payload(graph, focus)
    settings = {"nodeSize": node_size or config.NODE_SIZE}
    output_file.write_text(_basic_html_export(payload, settings), encoding="utf-8")


def _basic_html_export(graph_payload: Dict[str, List[Dict[str, Any]]], settings: Dict[str, Any]) -> str:
    # Script bodies are raw text; only "</" could end the element early
    data = json.dumps(graph_payload).replace("</", "<\\/")
    settings_data = json.dumps(settings).replace("</", "<\\/")
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>TypeGraph Export</title>
  <style>
    body {{ font-family: ui-monospace, SFMono-Regular, Menlo, monospace; margin: 20px; }}
    #container {{ display: grid; grid-template-columns: 1fr 1fr; gap: 18px; }}
    .panel {{ border: 1px solid #ddd; border-radius: 8px; padding: 10px; }}
    ul {{ list-style: none; padding: 0; margin: 0; }}
    li {{ margin: 4px 0; }}
    .props {{ color: #777; font-size: 12px; padding-left: 16px; }}
  </style>
</head>
<body>
  <h1>TypeGraph Export</h1>
  <div id="container">
    <div class="panel">
      <h2>Types</h2>
      <ul id="nodes"></ul>
    </div>
    <div class="panel">
      <h2>Links</h2>
      <ul id="links"></ul>
    </div>
  </div>
  <script type="application/json" id="graph-data">{data}</script>
  <script type="application/json" id="graph-settings">{settings_data}</script>
  <script>
    const graph = JSON.parse(document.getElementById('graph-data').textContent);
    const settings = JSON.parse(document.getElementById('graph-settings').textContent);
    const nodesEl = document.getElementById('nodes');
    const linksEl = document.getElementById('links');
    graph.nodes.forEach(n => {{
      const li = document.createElement('li');
      li.style.paddingLeft = (n.depth * 16) + 'px';
      li.style.fontSize = settings.nodeSize === 'uniform'
        ? '14px'
        : (12 + Math.min(n.properties.length, 12)) + 'px';
      li.textContent = `${{n.name}}  ${{n.location.fileName}}:${{n.location.line}}`;
      const props = document.createElement('div');
      props.className = 'props';
      props.textContent = n.properties
        .map(p => `${{p.name}}${{p.optional ? '?' : ''}}: ${{p.type}}`)
        .join('; ');
      li.appendChild(props);
      nodesEl.appendChild(li);
    }});
    graph.links.forEach(l => {{
      const li = document.createElement('li');
      li.textContent = `${{l.source}} --> ${{l.target}}`;
      linksEl.appendChild(li);
    }});
  </script>
</body>
</html>
"""


def _focused_payload(graph: GraphData, focus: str) -> Dict[str, List[Dict[str, Any]]]:
    """Restrict *graph* to nodes matching *focus* plus their direct neighbours.

    An empty or unmatched focus keeps the whole graph.
    """
    payload = graph.to_dict()
    if not focus:
        return payload

    focus_ids = {
        node["id"]
        for node in payload["nodes"]
        if focus in node["id"] or focus in node["name"]
    }
    if not focus_ids:
        return payload

    link_subset = [
        link for link in payload["links"]
        if link["source"] in focus_ids or link["target"] in focus_ids
    ]
    node_subset = set(focus_ids)
    for link in link_subset:
        node_subset.add(link["source"])
        node_subset.add(link["target"])

    return {
        "nodes": [node for node in payload["nodes"] if node["id"] in node_subset],
        "links": link_subset,
    }


def _esc(text: str) -> str:
    return text.replace('"', '\\"')

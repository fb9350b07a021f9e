"""Convert a linked type hierarchy into flat renderer-ready graph data."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Set

from .models import (
    DepthStats,
    FieldInfo,
    GraphData,
    GraphEdge,
    GraphNode,
    SourceLocation,
    TypeNode,
)


class GraphConverter:
    """Depth-first flattening of ``TypeNode`` trees into nodes and links.

    Each node is emitted once per qualified path: the visited set belongs to
    a single :meth:`convert` call, so conversions never share state.
    """

    @classmethod
    def convert(cls, roots: Iterable[TypeNode], inherit_properties: bool = True) -> GraphData:
        """Flatten *roots* (processed in the given order) into graph data.

        With *inherit_properties*, a node's property list starts with its
        ancestors' fields (outermost first) and its own fields override them.
        """
        graph = GraphData()
        visited: Set[str] = set()
        for root in roots:
            cls._process_node(root, 0, None, {}, graph, visited, inherit_properties)
        return graph

    @classmethod
    def _process_node(
        cls,
        node: TypeNode,
        depth: int,
        parent_id: Optional[str],
        inherited: Dict[str, FieldInfo],
        graph: GraphData,
        visited: Set[str],
        inherit_properties: bool,
    ) -> None:
        if node.qualified_path in visited:
            return
        visited.add(node.qualified_path)

        properties: Dict[str, FieldInfo] = dict(inherited) if inherit_properties else {}
        properties.update(node.fields)

        graph.nodes.append(GraphNode(
            id=node.qualified_path,
            name=node.name,
            depth=depth,
            is_root=depth == 0,
            properties=list(properties.values()),
            location=SourceLocation(
                file_name=node.source_file,
                line=node.line,
                column=node.column,
            ),
        ))

        if parent_id is not None:
            graph.links.append(GraphEdge(source=parent_id, target=node.qualified_path))

        for child in list(node.children.values()):
            cls._process_node(
                child, depth + 1, node.qualified_path, properties,
                graph, visited, inherit_properties,
            )

    @staticmethod
    def get_depth_stats(nodes: List[GraphNode]) -> DepthStats:
        """Max / mean depth and node count per depth (zeros when empty)."""
        depths = [n.depth for n in nodes]
        max_depth = max(depths, default=0)
        average_depth = sum(depths) / len(depths) if depths else 0.0
        type_count_by_depth = dict(sorted(Counter(depths).items()))
        return DepthStats(
            max_depth=max_depth,
            average_depth=average_depth,
            type_count_by_depth=type_count_by_depth,
        )

    @staticmethod
    def get_total_properties(nodes: List[GraphNode]) -> int:
        return sum(len(n.properties) for n in nodes)

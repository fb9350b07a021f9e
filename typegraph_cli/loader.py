"""Workspace loading: find declarations, link them, and cache the result.

Two sources, in order of preference:

1. ``<workspace>/.tactica/types.ts``: generated declarations with
   inheritance and fields, parsed by :class:`DeclarationParser`.
2. ``<workspace>/src/**/*.ts``: ``define('Name', ...)`` calls found by
   :class:`DefineCallScanner`.  Presence only, every hit becomes a root.

Read failures (``OSError``) propagate; an empty workspace is a valid empty
result.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from . import config
from .converter import GraphConverter
from .hierarchy import bare_roots, iter_nodes, link_declarations
from .models import GraphData, GraphStats, TypeNode
from .parser import DeclarationParser, DefineCallScanner

logger = logging.getLogger(__name__)


def declarations_path(workspace: Path) -> Path:
    return workspace / config.TACTICA_DIR / config.TACTICA_FILE


class TypeGraphLoader:
    """Load root ``TypeNode``s for a workspace, memoised per workspace path."""

    def __init__(self, root_suffix: Optional[str] = None) -> None:
        self.root_suffix = root_suffix
        self._cache: Dict[str, List[TypeNode]] = {}

    def load_type_graph(self, workspace: Path) -> List[TypeNode]:
        key = str(workspace.resolve())
        if key in self._cache:
            logger.debug("Returning cached type graph for %s", key)
            return self._cache[key]

        tactica_path = declarations_path(workspace)
        if tactica_path.is_file():
            logger.info("Found %s, parsing...", tactica_path)
            declarations = DeclarationParser().parse_file(tactica_path)
            roots = link_declarations(
                declarations,
                source_file=str(tactica_path),
                root_suffix=self.root_suffix,
            )
            reachable = sum(1 for _ in iter_nodes(roots))
            logger.info(
                "Parsed %d types from generated declarations, %d reachable from %d roots",
                len(declarations), reachable, len(roots),
            )
            if reachable < len(declarations):
                logger.debug(
                    "%d declarations are not under a root (suffix or parent mismatch)",
                    len(declarations) - reachable,
                )
        else:
            logger.info("No %s found, scanning source files...", tactica_path)
            scanner = DefineCallScanner(config.SOURCE_EXTENSIONS)
            records = scanner.parse_project(workspace / config.SOURCE_DIR)
            roots = bare_roots(records.values())

        self._cache[key] = roots
        return roots

    def clear_cache(self) -> None:
        self._cache.clear()


class GraphProvider:
    """Holds the most recently loaded graph for one consumer."""

    def __init__(self, loader: Optional[TypeGraphLoader] = None) -> None:
        self.loader = loader or TypeGraphLoader()
        self._roots: List[TypeNode] = []
        self._graph: Optional[GraphData] = None

    def load_graph(self, workspace: Path) -> GraphData:
        logger.info("Loading graph from %s", workspace)
        self._roots = self.loader.load_type_graph(workspace)
        self._graph = GraphConverter.convert(self._roots)
        logger.info(
            "Converted %d root types into %d nodes / %d links",
            len(self._roots), len(self._graph.nodes), len(self._graph.links),
        )
        return self._graph

    def get_graph_data(self) -> Optional[GraphData]:
        return self._graph

    def get_roots(self) -> List[TypeNode]:
        return self._roots

    def clear_cache(self) -> None:
        self._graph = None
        self._roots = []
        self.loader.clear_cache()

    def get_stats(self) -> Optional[GraphStats]:
        if self._graph is None:
            return None
        depth_stats = GraphConverter.get_depth_stats(self._graph.nodes)
        return GraphStats(
            type_count=len(self._graph.nodes),
            relationship_count=len(self._graph.links),
            property_count=GraphConverter.get_total_properties(self._graph.nodes),
            max_depth=depth_stats.max_depth,
        )

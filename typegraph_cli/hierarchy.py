"""Link declaration records into a single-parent type hierarchy."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from . import config
from .models import DeclarationRecord, TypeNode

logger = logging.getLogger(__name__)


def link_declarations(
    declarations: Dict[str, DeclarationRecord],
    source_file: Optional[str] = None,
    root_suffix: Optional[str] = None,
) -> List[TypeNode]:
    """Build the hierarchy and return its roots in declaration order.

    A record whose parent is not declared is neither linked nor a root, so
    it (and its subtree) never reaches the graph.  Parentless records become
    roots only when their name ends with *root_suffix*.
    """
    suffix = config.ROOT_SUFFIX if root_suffix is None else root_suffix

    nodes: Dict[str, TypeNode] = {}
    for name, record in declarations.items():
        nodes[name] = TypeNode(
            name=name,
            fields=dict(record.fields),
            source_file=source_file if source_file is not None else record.source_file,
            line=record.line,
        )

    roots: List[TypeNode] = []
    for name, record in declarations.items():
        node = nodes[name]
        if record.parent_name:
            parent = nodes.get(record.parent_name)
            if parent is None:
                logger.debug("'%s' extends unknown type '%s'; excluded", name, record.parent_name)
                continue
            node.parent = parent
            parent.children[name] = node
        elif name.endswith(suffix):
            roots.append(node)

    for node in nodes.values():
        node.qualified_path = qualified_path(node)

    logger.info("Linked %d declarations into %d root types", len(nodes), len(roots))
    return roots


def qualified_path(node: TypeNode) -> str:
    """Dot-join the ancestor chain from the topmost ancestor down to *node*.

    A parent cycle (malformed input) stops the walk at the first repeat.
    """
    chain: List[str] = []
    seen: Set[int] = set()
    current: Optional[TypeNode] = node
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(current.name)
        current = current.parent
    return ".".join(reversed(chain))


def bare_roots(records: Iterable[DeclarationRecord]) -> List[TypeNode]:
    """Turn fallback-scan records into unlinked root nodes, in scan order."""
    return [
        TypeNode(
            name=record.name,
            fields=dict(record.fields),
            source_file=record.source_file,
            line=record.line,
        )
        for record in records
    ]


def iter_nodes(roots: Iterable[TypeNode]) -> Iterable[TypeNode]:
    """Yield every node reachable from *roots* once, depth-first."""
    seen: Set[int] = set()
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(list(node.children.values())))

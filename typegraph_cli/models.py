"""Core data models shared by the extractor, linker, converter and exporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class FieldKind(str, Enum):
    PLAIN = "plain"
    SUBTYPE_SLOT = "subtype_slot"


@dataclass
class FieldInfo:
    name: str
    type: str
    optional: bool = False
    kind: FieldKind = FieldKind.PLAIN

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "optional": self.optional}


@dataclass
class DeclarationRecord:
    name: str
    parent_name: Optional[str]
    fields: Dict[str, FieldInfo]
    line: int
    source_file: str = ""


@dataclass(eq=False)
class TypeNode:
    """One type in the linked hierarchy.

    ``children`` owns the subtree; ``parent`` is only a back-reference used
    for path computation and edge emission.
    """

    name: str
    fields: Dict[str, FieldInfo]
    source_file: str
    line: int
    column: int = 0
    qualified_path: str = ""
    parent: Optional["TypeNode"] = field(default=None, repr=False)
    children: Dict[str, "TypeNode"] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if not self.qualified_path:
            self.qualified_path = self.name


@dataclass
class SourceLocation:
    file_name: str
    line: int
    column: int

    def to_dict(self) -> Dict[str, Any]:
        return {"fileName": self.file_name, "line": self.line, "column": self.column}


@dataclass
class GraphNode:
    id: str
    name: str
    depth: int
    is_root: bool
    properties: List[FieldInfo]
    location: SourceLocation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "depth": self.depth,
            "isRoot": self.is_root,
            "properties": [p.to_dict() for p in self.properties],
            "location": self.location.to_dict(),
        }


@dataclass
class GraphEdge:
    source: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target}


@dataclass
class GraphData:
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[GraphEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Build the renderer payload.

        Fresh dicts every call: renderers rewrite link endpoints into live
        node references during layout.
        """
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [e.to_dict() for e in self.links],
        }


@dataclass
class DepthStats:
    max_depth: int
    average_depth: float
    type_count_by_depth: Dict[int, int]


@dataclass
class GraphStats:
    type_count: int
    relationship_count: int
    property_count: int
    max_depth: int

"""In-memory graph view for one focal process.

Never persisted; rebuilt by the assembler from entities, relations and the
diagram snapshot.
"""

from pydantic import BaseModel

from bcmgraph.models.diagram import NodeKind, Position
from bcmgraph.models.entities import ResourceType, TimeValue
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationKind,
    ResourceDependency,
)


class GraphNode(BaseModel):
    """a rendered process or resource node."""

    id: str
    kind: NodeKind
    position: Position
    label: str
    is_main: bool = False
    criticality: str | None = None  # processes only
    resource_type: ResourceType | None = None  # resources only
    resource_type_label: str | None = None
    rto: TimeValue | None = None
    rpo: TimeValue | None = None
    main_rto: float | None = None  # baseline from the focal process, hours
    main_rpo: float | None = None

    @property
    def rto_hours(self) -> float | None:
        return self.rto.to_hours() if self.rto is not None else None

    @property
    def rpo_hours(self) -> float | None:
        return self.rpo.to_hours() if self.rpo is not None else None


class EdgeStyle(BaseModel):
    stroke: str
    width: float = 2.0
    dashed: bool = False
    animated: bool = True
    opacity: float = 1.0


class GraphEdge(BaseModel):
    """a rendered relation; `kind` says which store owns it."""

    id: str
    kind: RelationKind
    source: str
    target: str
    source_handle: str | None = None
    target_handle: str | None = None
    style: EdgeStyle
    relation: ProcessDependency | ProcessResourceLink | ResourceDependency


class GraphView(BaseModel):
    """nodes and edges rendered for a focal process."""

    focal_process_id: str
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None

    @property
    def main_node(self) -> GraphNode | None:
        for node in self.nodes:
            if node.is_main:
                return node
        return None

    def edges_touching(self, node_id: str) -> list[GraphEdge]:
        return [e for e in self.edges if e.source == node_id or e.target == node_id]

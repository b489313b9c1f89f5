"""Core data models for the continuity map engine."""

from bcmgraph.models.diagram import (
    DiagramSnapshot,
    NodeKind,
    Position,
    SnapshotNode,
)
from bcmgraph.models.entities import (
    RESOURCE_TYPE_LABELS,
    BusinessResource,
    EntityBundle,
    Process,
    RecoveryObjective,
    ResourceType,
    TimeUnit,
    TimeValue,
)
from bcmgraph.models.graph_view import (
    EdgeStyle,
    GraphEdge,
    GraphNode,
    GraphView,
)
from bcmgraph.models.relations import (
    DependencyType,
    ProcessDependency,
    ProcessResourceLink,
    Relation,
    RelationKind,
    RelationSet,
    ResourceCriticality,
    ResourceDependency,
)

__all__ = [
    # Entities
    "RESOURCE_TYPE_LABELS",
    "BusinessResource",
    "EntityBundle",
    "Process",
    "RecoveryObjective",
    "ResourceType",
    "TimeUnit",
    "TimeValue",
    # Relations
    "DependencyType",
    "ProcessDependency",
    "ProcessResourceLink",
    "Relation",
    "RelationKind",
    "RelationSet",
    "ResourceCriticality",
    "ResourceDependency",
    # Diagram snapshots
    "DiagramSnapshot",
    "NodeKind",
    "Position",
    "SnapshotNode",
    # Graph view
    "EdgeStyle",
    "GraphEdge",
    "GraphNode",
    "GraphView",
]

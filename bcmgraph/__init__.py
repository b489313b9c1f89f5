"""Continuity Map - dependency and recovery-compliance graph engine."""

from bcmgraph.models.diagram import DiagramSnapshot, NodeKind, Position
from bcmgraph.models.entities import (
    BusinessResource,
    EntityBundle,
    Process,
    RecoveryObjective,
    TimeValue,
)
from bcmgraph.models.graph_view import GraphEdge, GraphNode, GraphView
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationKind,
    RelationSet,
    ResourceDependency,
)
from bcmgraph.adapters import HttpStore, InMemoryStore, RecordStore, StoreError
from bcmgraph.analysis import ComplianceReport, evaluate, network_stats
from bcmgraph.engine import MutationController, PersistenceCoordinator, assemble_graph
from bcmgraph.sdk import MapSession, open_map

__all__ = [
    # Entities
    "BusinessResource",
    "EntityBundle",
    "Process",
    "RecoveryObjective",
    "TimeValue",
    # Relations
    "ProcessDependency",
    "ProcessResourceLink",
    "RelationKind",
    "RelationSet",
    "ResourceDependency",
    # Diagrams and views
    "DiagramSnapshot",
    "GraphEdge",
    "GraphNode",
    "GraphView",
    "NodeKind",
    "Position",
    # Stores
    "HttpStore",
    "InMemoryStore",
    "RecordStore",
    "StoreError",
    # Engine and analysis
    "ComplianceReport",
    "MutationController",
    "PersistenceCoordinator",
    "assemble_graph",
    "evaluate",
    "network_stats",
    # High-level APIs
    "MapSession",
    "open_map",
]

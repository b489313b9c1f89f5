"""Data model for persisted diagram snapshots.

A snapshot stores where each node was placed for one focal process. It is a
layout cache: graph membership always comes from the relation store.
"""

from enum import Enum

from pydantic import BaseModel


class NodeKind(str, Enum):
    process = "processNode"
    resource = "resourceNode"


class Position(BaseModel):
    x: float
    y: float


class SnapshotNode(BaseModel):
    """placement of a single node."""

    id: str
    position: Position
    kind: NodeKind


class DiagramSnapshot(BaseModel):
    """saved node placements for a focal process."""

    process_id: str
    nodes: list[SnapshotNode]
    timestamp: int  # epoch milliseconds

    def position_of(self, node_id: str) -> Position | None:
        for node in self.nodes:
            if node.id == node_id:
                return node.position
        return None

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

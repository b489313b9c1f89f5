"""Turn map gestures into relation mutations.

The controller owns the working copy of the graph for one focal process:
the rendered view, the relation collections it was built from, and the set
of staged deletions. Every collection is handed in by the caller; the
controller never reaches for shared application state.

Creates are applied locally first and then sent to the store. Deletions are
only staged; they reach the store when the layout is saved. Store failures
are logged and the local state is kept as is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum

from bcmgraph.adapters.store import RecordStore, StoreError
from bcmgraph.engine.assembler import (
    PROCESS_COLUMN_WIDTH,
    PROCESS_COLUMNS,
    ROW_HEIGHT,
    UPSTREAM_BAND_Y,
    build_node,
    derive_edges,
    process_node,
)
from bcmgraph.engine.layout import Direction, layered_layout
from bcmgraph.engine.pending import PendingDeletions
from bcmgraph.engine.persistence import PersistenceCoordinator, SaveResult
from bcmgraph.models.diagram import NodeKind, Position
from bcmgraph.models.entities import EntityBundle, RecoveryObjective
from bcmgraph.models.graph_view import GraphNode, GraphView
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
from bcmgraph.utils.identifiers import generate_relation_id

logger = logging.getLogger(__name__)

CREATE_METHODS: dict[RelationKind, str] = {
    RelationKind.process_dependency: "create_process_dependency",
    RelationKind.resource_link: "create_resource_link",
    RelationKind.resource_dependency: "create_resource_dependency",
}


class InteractionState(str, Enum):
    idle = "idle"
    connecting = "connecting"
    staged_deletion = "staged_deletion"
    auto_layout = "auto_layout"


def classify_connection(
    source_id: str,
    target_id: str,
    entities: EntityBundle,
) -> RelationKind | None:
    """Decide which relation a drawn connection creates.

    process->resource and resource->process both become a resource link,
    process->process a process dependency, resource->resource a resource
    dependency. Anything else is not a valid connection.
    """
    source_process = entities.is_process(source_id)
    target_process = entities.is_process(target_id)
    source_resource = entities.is_resource(source_id)
    target_resource = entities.is_resource(target_id)

    if source_process and target_resource:
        return RelationKind.resource_link
    if source_resource and target_process:
        return RelationKind.resource_link
    if source_process and target_process:
        return RelationKind.process_dependency
    if source_resource and target_resource:
        return RelationKind.resource_dependency
    return None


class MutationController:
    """Interaction state machine for one focal process."""

    def __init__(
        self,
        store: RecordStore,
        persistence: PersistenceCoordinator,
        focal_process_id: str,
        entities: EntityBundle,
        relations: RelationSet,
        view: GraphView,
        pending: PendingDeletions | None = None,
    ) -> None:
        self.store = store
        self.persistence = persistence
        self.focal_process_id = focal_process_id
        self.entities = entities
        self.relations = relations
        self.view = view
        self.pending = pending if pending is not None else PendingDeletions()
        self.removed_nodes: set[str] = set()
        self._state = InteractionState.idle
        self._connect_from: tuple[str, str | None] | None = None
        self._settle()

    @property
    def state(self) -> InteractionState:
        return self._state

    def _settle(self) -> None:
        self._state = (
            InteractionState.staged_deletion if self.pending else InteractionState.idle
        )

    def _refresh_edges(self) -> None:
        self.view.edges = derive_edges(self.view.nodes, self.relations, self.pending.ids())

    def _baseline(self) -> RecoveryObjective:
        main = self.view.main_node
        if main is None:
            return RecoveryObjective()
        return RecoveryObjective(rto=main.main_rto, rpo=main.main_rpo)

    async def _create(self, relation: Relation) -> None:
        method = getattr(self.store, CREATE_METHODS[relation.kind])
        try:
            await method(relation)
        except StoreError as e:
            # local state keeps the relation until the next reload
            logger.warning("failed to create %s %s: %s", relation.kind.value, relation.id, e)

    # ------------------------------------------------------------------
    # connecting
    # ------------------------------------------------------------------

    def begin_connect(self, source_id: str, source_handle: str | None = None) -> bool:
        """Start dragging a connection out of a node's handle."""
        if not self.view.has_node(source_id):
            return False
        self._connect_from = (source_id, source_handle)
        self._state = InteractionState.connecting
        return True

    def cancel_connect(self) -> None:
        self._connect_from = None
        self._settle()

    def build_relation(
        self,
        source: str,
        target: str,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> Relation | None:
        """Create (but do not store) the relation a connection stands for."""
        kind = classify_connection(source, target, self.entities)
        if kind is None:
            return None

        relation_id = generate_relation_id()
        if kind == RelationKind.process_dependency:
            return ProcessDependency(
                id=relation_id,
                source_process_id=source,
                target_process_id=target,
                type=DependencyType.operational,
                criticality=3,
                description="Created via map",
                source_handle=source_handle,
                target_handle=target_handle,
            )
        if kind == RelationKind.resource_dependency:
            return ResourceDependency(
                id=relation_id,
                source_resource_id=source,
                target_resource_id=target,
                type=DependencyType.technical,
                is_blocking=False,
                description="Created via map",
                source_handle=source_handle,
                target_handle=target_handle,
            )
        if self.entities.is_process(source):
            return ProcessResourceLink(
                id=relation_id,
                process_id=source,
                resource_id=target,
                criticality=ResourceCriticality.important,
                quantity_required=1,
                notes="Created via map",
                process_handle=source_handle,
                resource_handle=target_handle,
            )
        # drawn from the resource: the process is the target side
        return ProcessResourceLink(
            id=relation_id,
            process_id=target,
            resource_id=source,
            criticality=ResourceCriticality.important,
            quantity_required=1,
            notes="Created via map (reverse link)",
            process_handle=target_handle,
            resource_handle=source_handle,
        )

    async def connect(
        self,
        source: str | None = None,
        target: str | None = None,
        source_handle: str | None = None,
        target_handle: str | None = None,
    ) -> Relation | None:
        """Finish a connection and create the matching relation.

        When `source` is omitted the source recorded by begin_connect() is used.
        Incomplete connections, unknown endpoints and self-connections are
        ignored and return None.
        """
        if source is None and self._connect_from is not None:
            source, source_handle = self._connect_from
        self._connect_from = None
        try:
            if not source or not target:
                logger.debug("ignoring incomplete connection %r -> %r", source, target)
                return None
            if source == target:
                logger.debug("ignoring self-connection on %s", source)
                return None
            if not (self.view.has_node(source) and self.view.has_node(target)):
                logger.debug("ignoring connection to a node not on the map: %s -> %s", source, target)
                return None

            relation = self.build_relation(source, target, source_handle, target_handle)
            if relation is None:
                logger.debug("no relation kind for %s -> %s", source, target)
                return None

            self.relations.add(relation)
            self._refresh_edges()
            await self._create(relation)
            return relation
        finally:
            self._settle()

    def _free_upstream_slot(self) -> Position:
        """First upstream grid slot no node on the map occupies."""
        occupied = {(node.position.x, node.position.y) for node in self.view.nodes}
        index = 0
        while True:
            position = Position(
                x=(index % PROCESS_COLUMNS) * PROCESS_COLUMN_WIDTH,
                y=UPSTREAM_BAND_Y - (index // PROCESS_COLUMNS) * ROW_HEIGHT,
            )
            if (position.x, position.y) not in occupied:
                return position
            index += 1

    async def add_upstream(self, source_process_id: str) -> ProcessDependency | None:
        """Add a process that depends on the focal process."""
        if source_process_id == self.focal_process_id:
            return None
        if not self.entities.is_process(source_process_id):
            logger.debug("ignoring unknown upstream process %s", source_process_id)
            return None

        dependency = ProcessDependency(
            id=generate_relation_id(),
            source_process_id=source_process_id,
            target_process_id=self.focal_process_id,
            type=DependencyType.operational,
            criticality=3,
            description="Upstream added via map",
        )
        if not self.view.has_node(source_process_id):
            position = self._free_upstream_slot()
            node = process_node(source_process_id, self.entities, position, self._baseline())
            if node is not None:
                self.view.nodes.append(node)
                self.removed_nodes.discard(source_process_id)

        self.relations.add(dependency)
        self._refresh_edges()
        await self._create(dependency)
        return dependency

    # ------------------------------------------------------------------
    # library drops and moves
    # ------------------------------------------------------------------

    def drop_node(
        self,
        payload: Mapping | None,
        position: Position | Mapping,
    ) -> GraphNode | None:
        """Place a library item on the map without creating any relation."""
        if not isinstance(payload, Mapping):
            return None
        node_type = payload.get("type")
        node_id = payload.get("id")
        if not node_type or not node_id:
            logger.debug("ignoring malformed drop payload %r", payload)
            return None
        try:
            kind = NodeKind(node_type)
        except ValueError:
            logger.debug("ignoring drop of unknown node type %r", node_type)
            return None
        if self.view.has_node(node_id):
            return None

        if not isinstance(position, Position):
            position = Position.model_validate(position)
        node = build_node(node_id, kind, self.entities, position, self._baseline())
        if node is None:
            logger.debug("ignoring drop of unknown %s %s", kind.value, node_id)
            return None

        self.view.nodes.append(node)
        self.removed_nodes.discard(node_id)
        self._refresh_edges()
        return node

    def move_node(self, node_id: str, position: Position) -> bool:
        node = self.view.get_node(node_id)
        if node is None:
            return False
        node.position = position
        return True

    # ------------------------------------------------------------------
    # staged deletion
    # ------------------------------------------------------------------

    def delete_edges(self, edge_ids: Iterable[str]) -> int:
        """Stage edges for deletion and hide them right away.

        Returns the number of newly staged edges.
        """
        staged = 0
        for edge_id in edge_ids:
            edge = self.view.get_edge(edge_id)
            if edge is not None:
                kind = edge.kind
            else:
                relation = self.relations.get(edge_id)
                if relation is None:
                    continue
                kind = relation.kind
            if self.pending.stage(edge_id, kind):
                staged += 1
        self._refresh_edges()
        self._settle()
        return staged

    def delete_nodes(self, node_ids: Iterable[str]) -> int:
        """Remove nodes and stage every edge touching them.

        The focal node cannot be removed. Returns the number of removed nodes.
        """
        edge_ids: list[str] = []
        removed: set[str] = set()
        for node_id in node_ids:
            if node_id == self.focal_process_id:
                logger.debug("refusing to delete the focal node %s", node_id)
                continue
            if not self.view.has_node(node_id):
                continue
            edge_ids.extend(edge.id for edge in self.view.edges_touching(node_id))
            removed.add(node_id)

        self.removed_nodes |= removed
        self.view.nodes = [node for node in self.view.nodes if node.id not in removed]
        self.delete_edges(edge_ids)
        return len(removed)

    # ------------------------------------------------------------------
    # layout and save
    # ------------------------------------------------------------------

    async def save_layout(self) -> SaveResult:
        """Flush staged deletions and write the snapshot."""
        staged = self.pending.ids()
        result = await self.persistence.save_layout(self.focal_process_id, self.view, self.pending)
        # failed deletions stay hidden locally until the next reload
        for relation_id in staged:
            self.relations.remove(relation_id)
        self._refresh_edges()
        self._settle()
        return result

    async def auto_layout(self, direction: Direction = "TB") -> SaveResult:
        """Recompute every position, then save so the layout is kept."""
        self._state = InteractionState.auto_layout
        try:
            positions = layered_layout(
                [node.id for node in self.view.nodes],
                [(edge.source, edge.target) for edge in self.view.edges],
                direction,
            )
            for node in self.view.nodes:
                node.position = positions[node.id]
            return await self.save_layout()
        finally:
            self._settle()

    # ------------------------------------------------------------------
    # external changes
    # ------------------------------------------------------------------

    def replace_relations(self, relations: RelationSet) -> None:
        """Swap in freshly loaded relations and re-derive edges."""
        self.relations = relations
        self._refresh_edges()

    def replace_entities(self, entities: EntityBundle) -> None:
        """Swap in fresh entities; node metrics are rebuilt in place."""
        self.entities = entities
        baseline = entities.objective_for(self.focal_process_id) or RecoveryObjective()
        nodes: list[GraphNode] = []
        for node in self.view.nodes:
            if node.is_main:
                rebuilt = process_node(node.id, entities, node.position, baseline, is_main=True)
            else:
                rebuilt = build_node(node.id, node.kind, entities, node.position, baseline)
            if rebuilt is not None:
                nodes.append(rebuilt)
        self.view.nodes = nodes
        self._refresh_edges()

"""Assemble the rendered graph for one focal process.

The node set starts with the focal process, adds whatever the saved diagram
snapshot placed, then adds every neighbour the live relation collections
reveal. Edges are always re-derived from the relations against the final
node set, so a stale snapshot can never produce a dangling edge.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Collection

from bcmgraph.engine.styles import edge_style
from bcmgraph.models.diagram import DiagramSnapshot, NodeKind, Position
from bcmgraph.models.entities import EntityBundle, RecoveryObjective, TimeValue
from bcmgraph.models.graph_view import GraphEdge, GraphNode, GraphView
from bcmgraph.models.relations import Relation, RelationSet

logger = logging.getLogger(__name__)

MAIN_POSITION = Position(x=400, y=50)

# default bands, used when the focal process has no saved snapshot
UPSTREAM_BAND_Y = -200.0
DOWNSTREAM_BAND_Y = 300.0
PROCESS_COLUMNS = 3
PROCESS_COLUMN_WIDTH = 300.0
RESOURCE_COLUMNS = 4
RESOURCE_COLUMN_WIDTH = 200.0
ROW_HEIGHT = 150.0
RESOURCE_BAND_GAP = 50.0

# placement for neighbours missing from an existing snapshot
EXTENSION_GAP = 250.0

BAND_UPSTREAM = "upstream"
BAND_DOWNSTREAM = "downstream"
BAND_RESOURCE = "resource"


def process_node(
    process_id: str,
    entities: EntityBundle,
    position: Position,
    baseline: RecoveryObjective,
    is_main: bool = False,
) -> GraphNode | None:
    """Build a process node with current recovery metrics.

    Returns None for an unknown process, except for the focal one, which is
    always rendered (labelled with its id).
    """
    process = entities.get_process(process_id)
    if process is None and not is_main:
        return None
    objective = entities.objective_for(process_id) or RecoveryObjective()
    return GraphNode(
        id=process_id,
        kind=NodeKind.process,
        position=position,
        label=process.name if process else process_id,
        is_main=is_main,
        criticality=process.criticality if process else None,
        rto=TimeValue.hours(objective.rto),
        rpo=TimeValue.hours(objective.rpo),
        main_rto=baseline.rto,
        main_rpo=baseline.rpo,
    )


def resource_node(
    resource_id: str,
    entities: EntityBundle,
    position: Position,
    baseline: RecoveryObjective,
) -> GraphNode | None:
    resource = entities.get_resource(resource_id)
    if resource is None:
        return None
    return GraphNode(
        id=resource_id,
        kind=NodeKind.resource,
        position=position,
        label=resource.name,
        resource_type=resource.type,
        resource_type_label=resource.type_label,
        rto=resource.rto,
        rpo=resource.rpo,
        main_rto=baseline.rto,
        main_rpo=baseline.rpo,
    )


def build_node(
    node_id: str,
    kind: NodeKind,
    entities: EntityBundle,
    position: Position,
    baseline: RecoveryObjective,
) -> GraphNode | None:
    if kind == NodeKind.process:
        return process_node(node_id, entities, position, baseline)
    return resource_node(node_id, entities, position, baseline)


def edge_from_relation(relation: Relation) -> GraphEdge:
    source, target = relation.endpoints()
    source_handle, target_handle = relation.handles()
    return GraphEdge(
        id=relation.id,
        kind=relation.kind,
        source=source,
        target=target,
        source_handle=source_handle,
        target_handle=target_handle,
        style=edge_style(relation),
        relation=relation,
    )


def derive_edges(
    nodes: list[GraphNode],
    relations: RelationSet,
    pending: Collection[str] = (),
) -> list[GraphEdge]:
    """Render every relation whose endpoints are both present.

    Relations staged for deletion are skipped.
    """
    present = {node.id for node in nodes}
    edges: list[GraphEdge] = []
    for relation in relations.all():
        if relation.id in pending:
            continue
        source, target = relation.endpoints()
        if source in present and target in present:
            edges.append(edge_from_relation(relation))
    return edges


def discover_neighbours(
    focal_process_id: str,
    relations: RelationSet,
    pending: Collection[str] = (),
) -> list[tuple[str, NodeKind, str]]:
    """List (node_id, kind, band) for every node one relation away.

    Covers resources linked to the focal process, processes on either side of
    a process dependency, and resources on the other side of a resource
    dependency from a linked resource. First occurrence wins.
    """
    found: list[tuple[str, NodeKind, str]] = []
    seen = {focal_process_id}

    def _add(node_id: str, kind: NodeKind, band: str) -> None:
        if node_id not in seen:
            seen.add(node_id)
            found.append((node_id, kind, band))

    linked_resources: set[str] = set()
    for link in relations.resource_links:
        if link.id in pending or link.process_id != focal_process_id:
            continue
        linked_resources.add(link.resource_id)
        _add(link.resource_id, NodeKind.resource, BAND_RESOURCE)

    for dep in relations.process_dependencies:
        if dep.id in pending:
            continue
        if dep.source_process_id == focal_process_id:
            # the focal process depends on it: a provider, placed below
            _add(dep.target_process_id, NodeKind.process, BAND_DOWNSTREAM)
        elif dep.target_process_id == focal_process_id:
            _add(dep.source_process_id, NodeKind.process, BAND_UPSTREAM)

    for dep in relations.resource_dependencies:
        if dep.id in pending:
            continue
        if dep.source_resource_id in linked_resources:
            _add(dep.target_resource_id, NodeKind.resource, BAND_RESOURCE)
        elif dep.target_resource_id in linked_resources:
            _add(dep.source_resource_id, NodeKind.resource, BAND_RESOURCE)

    return found


def default_positions(discovered: list[tuple[str, NodeKind, str]]) -> list[Position]:
    """Grid-pack discovered nodes into bands around the focal node."""
    downstream_count = sum(1 for _, _, band in discovered if band == BAND_DOWNSTREAM)
    downstream_rows = max(1, math.ceil(downstream_count / PROCESS_COLUMNS))
    resource_band_y = DOWNSTREAM_BAND_Y + downstream_rows * ROW_HEIGHT + RESOURCE_BAND_GAP

    counters = {BAND_UPSTREAM: 0, BAND_DOWNSTREAM: 0, BAND_RESOURCE: 0}
    positions: list[Position] = []
    for _, _, band in discovered:
        index = counters[band]
        counters[band] += 1
        if band == BAND_RESOURCE:
            positions.append(Position(
                x=(index % RESOURCE_COLUMNS) * RESOURCE_COLUMN_WIDTH,
                y=resource_band_y + (index // RESOURCE_COLUMNS) * ROW_HEIGHT,
            ))
        elif band == BAND_UPSTREAM:
            positions.append(Position(
                x=(index % PROCESS_COLUMNS) * PROCESS_COLUMN_WIDTH,
                y=UPSTREAM_BAND_Y - (index // PROCESS_COLUMNS) * ROW_HEIGHT,
            ))
        else:
            positions.append(Position(
                x=(index % PROCESS_COLUMNS) * PROCESS_COLUMN_WIDTH,
                y=DOWNSTREAM_BAND_Y + (index // PROCESS_COLUMNS) * ROW_HEIGHT,
            ))
    return positions


def extension_positions(count: int, existing: list[GraphNode]) -> list[Position]:
    """Stack newly discovered nodes in a column right of the saved layout."""
    max_x = max(node.position.x for node in existing)
    min_y = min(node.position.y for node in existing)
    return [
        Position(x=max_x + EXTENSION_GAP, y=min_y + index * ROW_HEIGHT)
        for index in range(count)
    ]


def _entity_exists(entities: EntityBundle, node_id: str, kind: NodeKind) -> bool:
    if kind == NodeKind.process:
        return entities.is_process(node_id)
    return entities.is_resource(node_id)


def assemble_graph(
    focal_process_id: str,
    entities: EntityBundle,
    relations: RelationSet,
    snapshot: DiagramSnapshot | None = None,
    pending: Collection[str] = (),
    excluded_node_ids: Collection[str] = (),
    keep_unlinked: bool = False,
) -> GraphView:
    """Build the GraphView for a focal process.

    Args:
        focal_process_id: the process being visualized
        entities: current processes, resources and recovery objectives
        relations: the three live relation collections
        snapshot: previously saved node placements, if any
        pending: relation ids staged for deletion; treated as absent
        excluded_node_ids: nodes removed locally in this session
        keep_unlinked: keep snapshot nodes that no longer have any edge

    Returns:
        GraphView whose edges only reference nodes in its node set.
    """
    pending = set(pending)
    excluded = set(excluded_node_ids)
    baseline = entities.objective_for(focal_process_id) or RecoveryObjective()

    main_position = snapshot.position_of(focal_process_id) if snapshot else None
    main = process_node(
        focal_process_id,
        entities,
        main_position or MAIN_POSITION,
        baseline,
        is_main=True,
    )
    nodes: list[GraphNode] = [main]
    present = {focal_process_id}
    from_snapshot: set[str] = set()

    if snapshot is not None:
        for saved in snapshot.nodes:
            if saved.id in present or saved.id in excluded:
                continue
            node = build_node(saved.id, saved.kind, entities, saved.position, baseline)
            if node is None:
                logger.debug("snapshot node %s no longer exists, skipping", saved.id)
                continue
            nodes.append(node)
            present.add(saved.id)
            from_snapshot.add(saved.id)

    discovered = [
        (node_id, kind, band)
        for node_id, kind, band in discover_neighbours(focal_process_id, relations, pending)
        if node_id not in present
        and node_id not in excluded
        and _entity_exists(entities, node_id, kind)
    ]
    if snapshot is None:
        positions = default_positions(discovered)
    else:
        positions = extension_positions(len(discovered), nodes)

    for (node_id, kind, _), position in zip(discovered, positions):
        node = build_node(node_id, kind, entities, position, baseline)
        if node is not None:
            nodes.append(node)
            present.add(node_id)

    edges = derive_edges(nodes, relations, pending)

    if not keep_unlinked and from_snapshot:
        linked = {edge.source for edge in edges} | {edge.target for edge in edges}
        stale = from_snapshot - linked
        if stale:
            logger.debug("dropping %d unlinked snapshot nodes: %s", len(stale), sorted(stale))
            nodes = [node for node in nodes if node.id not in stale]

    return GraphView(focal_process_id=focal_process_id, nodes=nodes, edges=edges)

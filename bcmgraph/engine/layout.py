"""Layered (hierarchical) layout for the dependency map.

A small Sugiyama-style pipeline:
1. break cycles by reversing DFS back-edges
2. rank nodes by longest path from the sources
3. order nodes within each rank with barycenter sweeps
4. assign coordinates per rank, centring every rank on the widest one

Positions returned are top-left corners, matching how the map places nodes.
"""

from collections import defaultdict
from typing import Literal

import networkx as nx

from bcmgraph.models.diagram import Position

Direction = Literal["TB", "LR"]

NODE_WIDTH = 200.0
NODE_HEIGHT = 100.0
NODE_SEP = 50.0
RANK_SEP = 50.0
SWEEPS = 4


def _acyclic_edges(node_ids: list[str], edges: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """Reverse back-edges found by DFS so the graph becomes a DAG."""
    graph = nx.DiGraph()
    graph.add_nodes_from(node_ids)
    graph.add_edges_from(edges)

    on_stack: set[str] = set()
    back_edges: set[tuple[str, str]] = set()
    for source, target, label in nx.dfs_labeled_edges(graph):
        if label == "forward":
            on_stack.add(target)
        elif label == "reverse":
            on_stack.discard(target)
        elif label == "nontree" and target in on_stack:
            back_edges.add((source, target))

    return [(t, s) if (s, t) in back_edges else (s, t) for s, t in edges]


def assign_ranks(node_ids: list[str], edges: list[tuple[str, str]]) -> dict[str, int]:
    """Longest-path ranking; sources get rank 0."""
    dag = nx.DiGraph()
    dag.add_nodes_from(node_ids)
    dag.add_edges_from((s, t) for s, t in _acyclic_edges(node_ids, edges) if s != t)

    ranks: dict[str, int] = {}
    for node in nx.topological_sort(dag):
        ranks[node] = max((ranks[p] + 1 for p in dag.predecessors(node)), default=0)
    return {node_id: ranks[node_id] for node_id in node_ids}


def _order_layers(
    ranks: dict[str, int],
    node_ids: list[str],
    edges: list[tuple[str, str]],
) -> list[list[str]]:
    layer_count = max(ranks.values()) + 1 if ranks else 0
    layers: list[list[str]] = [[] for _ in range(layer_count)]
    for node_id in node_ids:
        layers[ranks[node_id]].append(node_id)

    neighbours: dict[str, set[str]] = defaultdict(set)
    for source, target in edges:
        if source != target:
            neighbours[source].add(target)
            neighbours[target].add(source)

    def _sweep(indices: range, reference_offset: int) -> None:
        for index in indices:
            reference = layers[index + reference_offset]
            slot = {node_id: pos for pos, node_id in enumerate(reference)}
            current = {node_id: pos for pos, node_id in enumerate(layers[index])}

            def barycenter(node_id: str) -> float:
                linked = [slot[n] for n in neighbours[node_id] if n in slot]
                if not linked:
                    return float(current[node_id])
                return sum(linked) / len(linked)

            layers[index].sort(key=lambda n: (barycenter(n), current[n]))

    for sweep in range(SWEEPS):
        if sweep % 2 == 0:
            _sweep(range(1, layer_count), -1)
        else:
            _sweep(range(layer_count - 2, -1, -1), 1)
    return layers


def layered_layout(
    node_ids: list[str],
    edges: list[tuple[str, str]],
    direction: Direction = "TB",
) -> dict[str, Position]:
    """Compute a position for every node.

    Args:
        node_ids: nodes to place, in a stable order
        edges: (source, target) pairs; edges to unknown nodes are ignored
        direction: "TB" ranks top to bottom, "LR" left to right

    Returns:
        Mapping of node id to top-left position.
    """
    if not node_ids:
        return {}
    known = set(node_ids)
    edges = [(s, t) for s, t in edges if s in known and t in known]

    ranks = assign_ranks(node_ids, edges)
    layers = _order_layers(ranks, node_ids, edges)

    horizontal = direction == "LR"
    # extent of a node along the rank (across) and between ranks (along)
    across = NODE_HEIGHT if horizontal else NODE_WIDTH
    along = NODE_WIDTH if horizontal else NODE_HEIGHT

    widest = max(len(layer) for layer in layers)
    full_span = widest * across + (widest - 1) * NODE_SEP

    positions: dict[str, Position] = {}
    for rank, layer in enumerate(layers):
        span = len(layer) * across + (len(layer) - 1) * NODE_SEP
        offset = (full_span - span) / 2
        rank_coord = rank * (along + RANK_SEP)
        for slot, node_id in enumerate(layer):
            slot_coord = offset + slot * (across + NODE_SEP)
            if horizontal:
                positions[node_id] = Position(x=rank_coord, y=slot_coord)
            else:
                positions[node_id] = Position(x=slot_coord, y=rank_coord)
    return positions

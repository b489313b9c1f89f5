"""Basic statistics over the whole dependency network.

Counts every process and resource as a node and every relation (of any kind)
as an edge. Degree is undirected; parallel relations each count.
"""

from dataclasses import dataclass, field

import networkx as nx

from bcmgraph.models.entities import EntityBundle
from bcmgraph.models.relations import RelationSet


@dataclass
class NetworkStats:
    node_count: int
    edge_count: int
    density: float
    avg_degree: float
    degree: dict[str, int] = field(default_factory=dict)

    def top_degree(self, n: int = 10) -> list[tuple[str, int]]:
        """Most connected nodes first; ties broken by id."""
        ranked = sorted(self.degree.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:n]


def build_network(entities: EntityBundle, relations: RelationSet) -> nx.MultiGraph:
    """Undirected multigraph of every entity, keyed by relation id."""
    graph = nx.MultiGraph()
    for process in entities.processes:
        graph.add_node(process.id, kind="process", name=process.name)
    for resource in entities.resources:
        graph.add_node(resource.id, kind="resource", name=resource.name)

    for relation in relations.all():
        source, target = relation.endpoints()
        # relations to deleted entities do not count
        if source not in graph or target not in graph:
            continue
        graph.add_edge(source, target, key=relation.id, kind=relation.kind.value)
    return graph


def network_stats(entities: EntityBundle, relations: RelationSet) -> NetworkStats:
    graph = build_network(entities, relations)
    nodes = graph.number_of_nodes()
    edges = graph.number_of_edges()
    return NetworkStats(
        node_count=nodes,
        edge_count=edges,
        density=nx.density(graph),
        avg_degree=(2 * edges) / nodes if nodes else 0.0,
        degree=dict(graph.degree()),
    )

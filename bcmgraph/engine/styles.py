"""Edge styling by relation kind."""

from bcmgraph.models.graph_view import EdgeStyle
from bcmgraph.models.relations import (
    DependencyType,
    ProcessDependency,
    ProcessResourceLink,
    Relation,
    ResourceCriticality,
    ResourceDependency,
)

LINK_COLORS: dict[ResourceCriticality, str] = {
    ResourceCriticality.essential: "#EF4444",
    ResourceCriticality.important: "#F59E0B",
    ResourceCriticality.supporting: "#10B981",
}

RESOURCE_DEP_COLORS: dict[DependencyType, str] = {
    DependencyType.technical: "#3B82F6",
    DependencyType.operational: "#F97316",
    DependencyType.resource: "#A855F7",
}

BLOCKING_COLOR = "#EF4444"
PROCESS_DEP_COLOR = "#EC4899"


def edge_style(relation: Relation) -> EdgeStyle:
    """Pick the rendering style for a relation."""
    if isinstance(relation, ProcessResourceLink):
        return EdgeStyle(
            stroke=LINK_COLORS.get(relation.criticality, "#FFFFFF"),
            width=2.0,
            dashed=True,
        )
    if isinstance(relation, ResourceDependency):
        if relation.is_blocking:
            return EdgeStyle(stroke=BLOCKING_COLOR, width=3.0, opacity=0.8)
        return EdgeStyle(
            stroke=RESOURCE_DEP_COLORS.get(relation.type, "#64748B"),
            width=1.5,
            opacity=0.8,
        )
    if isinstance(relation, ProcessDependency):
        return EdgeStyle(stroke=PROCESS_DEP_COLOR, width=2.0)
    raise TypeError(f"not a relation: {relation!r}")

"""Relation records and the edge discriminant.

Three independently stored relation collections make up the dependency graph.
Each record knows which RelationKind it is and where its endpoints are, so the
rest of the engine can treat edges uniformly.
"""

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, Field


class RelationKind(str, Enum):
    """Discriminant carried by every graph edge."""

    process_dependency = "process-dep"
    resource_link = "process-link"
    resource_dependency = "resource-dep"


class DependencyType(str, Enum):
    technical = "technical"
    operational = "operational"
    resource = "resource"


class ResourceCriticality(str, Enum):
    essential = "essential"
    important = "important"
    supporting = "supporting"


class ProcessDependency(BaseModel):
    """source process's continuity depends on target process."""

    kind: ClassVar[RelationKind] = RelationKind.process_dependency

    id: str
    source_process_id: str
    target_process_id: str
    type: DependencyType = DependencyType.operational
    criticality: int = Field(default=3, ge=1, le=5)
    description: str = ""
    source_handle: str | None = None
    target_handle: str | None = None

    def endpoints(self) -> tuple[str, str]:
        return self.source_process_id, self.target_process_id

    def handles(self) -> tuple[str | None, str | None]:
        return self.source_handle, self.target_handle


class ProcessResourceLink(BaseModel):
    """process consumes this resource."""

    kind: ClassVar[RelationKind] = RelationKind.resource_link

    id: str
    process_id: str
    resource_id: str
    criticality: ResourceCriticality = ResourceCriticality.important
    quantity_required: int | None = 1
    notes: str = ""
    process_handle: str | None = None
    resource_handle: str | None = None

    def endpoints(self) -> tuple[str, str]:
        return self.process_id, self.resource_id

    def handles(self) -> tuple[str | None, str | None]:
        return self.process_handle, self.resource_handle


class ResourceDependency(BaseModel):
    """source resource requires target resource to function."""

    kind: ClassVar[RelationKind] = RelationKind.resource_dependency

    id: str
    source_resource_id: str
    target_resource_id: str
    type: DependencyType = DependencyType.technical
    is_blocking: bool = False
    description: str = ""
    source_handle: str | None = None
    target_handle: str | None = None

    def endpoints(self) -> tuple[str, str]:
        return self.source_resource_id, self.target_resource_id

    def handles(self) -> tuple[str | None, str | None]:
        return self.source_handle, self.target_handle


Relation = ProcessDependency | ProcessResourceLink | ResourceDependency


class RelationSet(BaseModel):
    """the three relation collections as loaded from the relation store."""

    process_dependencies: list[ProcessDependency] = []
    resource_links: list[ProcessResourceLink] = []
    resource_dependencies: list[ResourceDependency] = []

    def all(self) -> list[Relation]:
        """All relations in rendering order: links, resource deps, process deps."""
        return [
            *self.resource_links,
            *self.resource_dependencies,
            *self.process_dependencies,
        ]

    def get(self, relation_id: str) -> Relation | None:
        for relation in self.all():
            if relation.id == relation_id:
                return relation
        return None

    def add(self, relation: Relation) -> None:
        """Append a relation to the collection matching its kind."""
        if isinstance(relation, ProcessDependency):
            self.process_dependencies.append(relation)
        elif isinstance(relation, ProcessResourceLink):
            self.resource_links.append(relation)
        elif isinstance(relation, ResourceDependency):
            self.resource_dependencies.append(relation)
        else:
            raise TypeError(f"not a relation: {relation!r}")

    def around(self, process_id: str) -> "RelationSet":
        """Relations in the neighbourhood of one process.

        Process dependencies touching it, its resource links, and resource
        dependencies touching one of its linked resources.
        """
        links = [link for link in self.resource_links if link.process_id == process_id]
        linked = {link.resource_id for link in links}
        return RelationSet(
            process_dependencies=[
                dep for dep in self.process_dependencies
                if process_id in (dep.source_process_id, dep.target_process_id)
            ],
            resource_links=links,
            resource_dependencies=[
                dep for dep in self.resource_dependencies
                if dep.source_resource_id in linked or dep.target_resource_id in linked
            ],
        )

    def remove(self, relation_id: str) -> Relation | None:
        """Remove a relation by id from whichever collection holds it."""
        for collection in (
            self.process_dependencies,
            self.resource_links,
            self.resource_dependencies,
        ):
            for index, relation in enumerate(collection):
                if relation.id == relation_id:
                    return collection.pop(index)
        return None

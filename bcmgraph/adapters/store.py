"""Record store protocol shared by every adapter."""

from typing import Protocol

from bcmgraph.models.diagram import DiagramSnapshot
from bcmgraph.models.entities import EntityBundle
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationSet,
    ResourceDependency,
)


class StoreError(Exception):
    """Raised when a store call fails (network error or rejected request)."""
    pass


class RecordStore(Protocol):
    """The entity, relation and diagram stores as seen by the engine."""

    async def load_entities(self) -> EntityBundle:
        ...

    async def load_relations(self, focal_process_id: str | None = None) -> RelationSet:
        ...

    async def load_diagram(self, process_id: str) -> DiagramSnapshot | None:
        ...

    async def save_diagram(self, snapshot: DiagramSnapshot) -> None:
        ...

    async def create_process_dependency(self, dependency: ProcessDependency) -> None:
        ...

    async def remove_process_dependency(self, dependency_id: str) -> None:
        ...

    async def create_resource_link(self, link: ProcessResourceLink) -> None:
        ...

    async def remove_resource_link(self, link_id: str) -> None:
        ...

    async def create_resource_dependency(self, dependency: ResourceDependency) -> None:
        ...

    async def remove_resource_dependency(self, dependency_id: str) -> None:
        ...

"""In-process record store.

Keeps entities, relations and snapshots in memory and records every call,
which makes it the store of choice for tests and offline demos.
"""

from bcmgraph.adapters.store import StoreError
from bcmgraph.models.diagram import DiagramSnapshot
from bcmgraph.models.entities import EntityBundle
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationSet,
    ResourceDependency,
)


class InMemoryStore:
    """stores records in plain python collections."""

    def __init__(
        self,
        entities: EntityBundle | None = None,
        relations: RelationSet | None = None,
        diagrams: dict[str, DiagramSnapshot] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        """
        Args:
            entities: initial entity records
            relations: initial relation collections
            diagrams: saved snapshots keyed by process id
            fail_on: names of methods that should raise StoreError
        """
        self.entities = entities or EntityBundle()
        self.relations = relations or RelationSet()
        self.diagrams: dict[str, DiagramSnapshot] = dict(diagrams or {})
        self.fail_on: set[str] = set(fail_on or ())
        self.calls: list[tuple[str, str | None]] = []

    def _record(self, method: str, argument: str | None = None) -> None:
        self.calls.append((method, argument))
        if method in self.fail_on:
            raise StoreError(f"{method} rejected by store")

    def calls_to(self, method: str) -> list[str | None]:
        """Arguments of every recorded call to `method`."""
        return [argument for name, argument in self.calls if name == method]

    def clear_calls(self) -> None:
        self.calls.clear()

    async def load_entities(self) -> EntityBundle:
        self._record("load_entities")
        return self.entities.model_copy(deep=True)

    async def load_relations(self, focal_process_id: str | None = None) -> RelationSet:
        self._record("load_relations", focal_process_id)
        if focal_process_id is not None:
            return self.relations.around(focal_process_id).model_copy(deep=True)
        return self.relations.model_copy(deep=True)

    async def load_diagram(self, process_id: str) -> DiagramSnapshot | None:
        self._record("load_diagram", process_id)
        snapshot = self.diagrams.get(process_id)
        return snapshot.model_copy(deep=True) if snapshot else None

    async def save_diagram(self, snapshot: DiagramSnapshot) -> None:
        self._record("save_diagram", snapshot.process_id)
        self.diagrams[snapshot.process_id] = snapshot.model_copy(deep=True)

    async def create_process_dependency(self, dependency: ProcessDependency) -> None:
        self._record("create_process_dependency", dependency.id)
        self.relations.process_dependencies.append(dependency.model_copy())

    async def remove_process_dependency(self, dependency_id: str) -> None:
        self._record("remove_process_dependency", dependency_id)
        self.relations.process_dependencies = [
            d for d in self.relations.process_dependencies if d.id != dependency_id
        ]

    async def create_resource_link(self, link: ProcessResourceLink) -> None:
        self._record("create_resource_link", link.id)
        self.relations.resource_links.append(link.model_copy())

    async def remove_resource_link(self, link_id: str) -> None:
        self._record("remove_resource_link", link_id)
        self.relations.resource_links = [
            l for l in self.relations.resource_links if l.id != link_id
        ]

    async def create_resource_dependency(self, dependency: ResourceDependency) -> None:
        self._record("create_resource_dependency", dependency.id)
        self.relations.resource_dependencies.append(dependency.model_copy())

    async def remove_resource_dependency(self, dependency_id: str) -> None:
        self._record("remove_resource_dependency", dependency_id)
        self.relations.resource_dependencies = [
            d for d in self.relations.resource_dependencies if d.id != dependency_id
        ]

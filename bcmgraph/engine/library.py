"""Entries for the drag-and-drop library panel."""

from dataclasses import dataclass
from typing import Literal

from bcmgraph.models.diagram import NodeKind
from bcmgraph.models.entities import EntityBundle, Process
from bcmgraph.models.relations import RelationSet


@dataclass
class LibraryEntry:
    """one draggable item; `payload()` is what a drop hands the controller."""

    id: str
    label: str
    kind: NodeKind
    detail: str | None = None  # resource type or process criticality

    def payload(self) -> dict:
        return {"type": self.kind.value, "id": self.id, "label": self.label}


def library_entries(
    entities: EntityBundle,
    focal_process_id: str | None,
    query: str = "",
    tab: Literal["resources", "processes"] = "resources",
) -> list[LibraryEntry]:
    """List resources (matched on name or type) or processes other than the focal one."""
    needle = query.lower()
    if tab == "resources":
        return [
            LibraryEntry(id=r.id, label=r.name, kind=NodeKind.resource, detail=r.type.value)
            for r in entities.resources
            if needle in r.name.lower() or needle in r.type.value.lower()
        ]
    return [
        LibraryEntry(id=p.id, label=p.name, kind=NodeKind.process, detail=p.criticality)
        for p in entities.processes
        if p.id != focal_process_id and needle in p.name.lower()
    ]


def upstream_candidates(
    entities: EntityBundle,
    relations: RelationSet,
    focal_process_id: str,
    query: str = "",
) -> list[Process]:
    """Processes that could be added as upstream dependents of the focal one."""
    needle = query.lower()
    existing = {
        dep.source_process_id
        for dep in relations.process_dependencies
        if dep.target_process_id == focal_process_id
    }
    return [
        p for p in entities.processes
        if p.id != focal_process_id and p.id not in existing and needle in p.name.lower()
    ]

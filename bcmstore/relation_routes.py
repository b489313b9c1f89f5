"""API routes for process dependencies, resource links and resource dependencies."""

from fastapi import APIRouter, HTTPException

from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    Relation,
    RelationKind,
    RelationSet,
    ResourceDependency,
)
from bcmstore.relation_db import (
    delete_relation as db_delete_relation,
    get_relation as db_get_relation,
    insert_relation as db_insert_relation,
    list_relations as db_list_relations,
    load_relation_set as db_load_relation_set,
)

router = APIRouter()


def _create(relation: Relation) -> Relation:
    source, target = relation.endpoints()
    if source == target:
        raise HTTPException(status_code=400, detail="A relation cannot connect a node to itself")
    if not db_insert_relation(relation):
        raise HTTPException(status_code=409, detail=f"Relation already exists: {relation.id}")
    return relation


def _get(kind: RelationKind, relation_id: str) -> Relation:
    relation = db_get_relation(kind, relation_id)
    if not relation:
        raise HTTPException(status_code=404, detail=f"Relation not found: {relation_id}")
    return relation


def _delete(kind: RelationKind, relation_id: str) -> dict:
    if not db_delete_relation(kind, relation_id):
        raise HTTPException(status_code=404, detail=f"Relation not found: {relation_id}")
    return {"deleted": relation_id}


@router.get("/relations")
def get_relations(process_id: str | None = None) -> RelationSet:
    """all relations, or the neighbourhood of one process."""
    return db_load_relation_set(process_id)


# process dependencies

@router.get("/dependencies")
def list_dependencies() -> list[ProcessDependency]:
    return db_list_relations(RelationKind.process_dependency)


@router.get("/dependencies/{dependency_id}")
def get_dependency(dependency_id: str) -> ProcessDependency:
    return _get(RelationKind.process_dependency, dependency_id)


@router.post("/dependencies")
def create_dependency(dependency: ProcessDependency) -> ProcessDependency:
    return _create(dependency)


@router.delete("/dependencies/{dependency_id}")
def delete_dependency(dependency_id: str) -> dict:
    return _delete(RelationKind.process_dependency, dependency_id)


# process-resource links

@router.get("/process-resource-links")
def list_links() -> list[ProcessResourceLink]:
    return db_list_relations(RelationKind.resource_link)


@router.get("/process-resource-links/{link_id}")
def get_link(link_id: str) -> ProcessResourceLink:
    return _get(RelationKind.resource_link, link_id)


@router.post("/process-resource-links")
def create_link(link: ProcessResourceLink) -> ProcessResourceLink:
    return _create(link)


@router.delete("/process-resource-links/{link_id}")
def delete_link(link_id: str) -> dict:
    return _delete(RelationKind.resource_link, link_id)


# resource dependencies

@router.get("/resource-dependencies")
def list_resource_dependencies() -> list[ResourceDependency]:
    return db_list_relations(RelationKind.resource_dependency)


@router.get("/resource-dependencies/{dependency_id}")
def get_resource_dependency(dependency_id: str) -> ResourceDependency:
    return _get(RelationKind.resource_dependency, dependency_id)


@router.post("/resource-dependencies")
def create_resource_dependency(dependency: ResourceDependency) -> ResourceDependency:
    return _create(dependency)


@router.delete("/resource-dependencies/{dependency_id}")
def delete_resource_dependency(dependency_id: str) -> dict:
    return _delete(RelationKind.resource_dependency, dependency_id)

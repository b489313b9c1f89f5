"""API routes for processes, resources and recovery objectives."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from bcmgraph.models.entities import (
    BusinessResource,
    EntityBundle,
    Process,
    RecoveryObjective,
    ResourceType,
    TimeValue,
)
from bcmstore.entity_db import (
    delete_process as db_delete_process,
    delete_resource as db_delete_resource,
    get_objective as db_get_objective,
    get_process as db_get_process,
    get_resource as db_get_resource,
    list_objectives as db_list_objectives,
    list_processes as db_list_processes,
    list_resources as db_list_resources,
    load_bundle as db_load_bundle,
    upsert_objective as db_upsert_objective,
    upsert_process as db_upsert_process,
    upsert_resource as db_upsert_resource,
)

router = APIRouter()


class UpsertProcessRequest(BaseModel):
    """request body for creating or updating a process."""

    name: str
    criticality: str = "medium"
    owner: str | None = None
    department: str | None = None
    description: str = ""


class UpsertResourceRequest(BaseModel):
    """request body for creating or updating a business resource."""

    name: str
    type: ResourceType
    description: str = ""
    rto: TimeValue | None = None
    rpo: TimeValue | None = None


@router.get("/entities")
def get_entities() -> EntityBundle:
    """processes, resources and recovery objectives in one bundle."""
    return db_load_bundle()


@router.get("/processes")
def list_processes() -> list[Process]:
    return db_list_processes()


@router.get("/processes/{process_id}")
def get_process(process_id: str) -> Process:
    process = db_get_process(process_id)
    if not process:
        raise HTTPException(status_code=404, detail=f"Process not found: {process_id}")
    return process


@router.put("/processes/{process_id}")
def upsert_process(process_id: str, request: UpsertProcessRequest) -> Process:
    process = Process(id=process_id, **request.model_dump())
    db_upsert_process(process)
    return process


@router.delete("/processes/{process_id}")
def delete_process(process_id: str) -> dict:
    if not db_delete_process(process_id):
        raise HTTPException(status_code=404, detail=f"Process not found: {process_id}")
    return {"deleted": process_id}


@router.get("/resources")
def list_resources() -> list[BusinessResource]:
    return db_list_resources()


@router.get("/resources/{resource_id}")
def get_resource(resource_id: str) -> BusinessResource:
    resource = db_get_resource(resource_id)
    if not resource:
        raise HTTPException(status_code=404, detail=f"Resource not found: {resource_id}")
    return resource


@router.put("/resources/{resource_id}")
def upsert_resource(resource_id: str, request: UpsertResourceRequest) -> BusinessResource:
    resource = BusinessResource(id=resource_id, **request.model_dump())
    db_upsert_resource(resource)
    return resource


@router.delete("/resources/{resource_id}")
def delete_resource(resource_id: str) -> dict:
    if not db_delete_resource(resource_id):
        raise HTTPException(status_code=404, detail=f"Resource not found: {resource_id}")
    return {"deleted": resource_id}


@router.get("/recovery-objectives")
def list_objectives() -> dict[str, RecoveryObjective]:
    return db_list_objectives()


@router.get("/recovery-objectives/{process_id}")
def get_objective(process_id: str) -> RecoveryObjective:
    objective = db_get_objective(process_id)
    if not objective:
        raise HTTPException(
            status_code=404, detail=f"Recovery objective not found: {process_id}"
        )
    return objective


@router.put("/recovery-objectives/{process_id}")
def upsert_objective(process_id: str, objective: RecoveryObjective) -> RecoveryObjective:
    """set RTO/RPO (hours) for a process; the process must exist."""
    if not db_get_process(process_id):
        raise HTTPException(status_code=404, detail=f"Process not found: {process_id}")
    db_upsert_objective(process_id, objective)
    return objective

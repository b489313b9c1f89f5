"""API routes for diagram snapshots."""

from fastapi import APIRouter

from bcmgraph.models.diagram import DiagramSnapshot
from bcmstore.diagram_db import (
    get_diagram as db_get_diagram,
    upsert_diagram as db_upsert_diagram,
)

router = APIRouter()


@router.get("/diagrams")
def get_diagram(process_id: str) -> DiagramSnapshot | None:
    """saved snapshot for a process, or null if it was never saved."""
    return db_get_diagram(process_id)


@router.post("/diagrams")
def save_diagram(snapshot: DiagramSnapshot) -> DiagramSnapshot:
    """upsert the snapshot for snapshot.process_id."""
    db_upsert_diagram(snapshot)
    return snapshot

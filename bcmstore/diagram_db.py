"""SQLite storage for diagram snapshots, one per focal process."""

from bcmgraph.models.diagram import DiagramSnapshot
from bcmgraph.utils.identifiers import utc_timestamp
from bcmstore.connection import connect


def init_db() -> None:
    with connect() as conn:
        conn.execute(
            """
            create table if not exists diagrams (
                process_id text primary key,
                snapshot_json text not null,
                updated_at text not null
            )
            """
        )
        conn.commit()


def upsert_diagram(snapshot: DiagramSnapshot) -> None:
    """insert or replace the snapshot; the last write wins."""
    with connect() as conn:
        conn.execute(
            """
            insert into diagrams (process_id, snapshot_json, updated_at)
            values (?, ?, ?)
            on conflict(process_id) do update set
                snapshot_json = excluded.snapshot_json,
                updated_at = excluded.updated_at
            """,
            (snapshot.process_id, snapshot.model_dump_json(), utc_timestamp()),
        )
        conn.commit()


def get_diagram(process_id: str) -> DiagramSnapshot | None:
    with connect() as conn:
        row = conn.execute(
            "select snapshot_json from diagrams where process_id = ?",
            (process_id,),
        ).fetchone()
    if not row:
        return None
    return DiagramSnapshot.model_validate_json(row["snapshot_json"])

"""SQLite storage for processes, resources and recovery objectives."""

from bcmgraph.models.entities import (
    BusinessResource,
    EntityBundle,
    Process,
    RecoveryObjective,
)
from bcmgraph.utils.identifiers import utc_timestamp
from bcmstore.connection import connect


def init_db() -> None:
    with connect() as conn:
        conn.execute(
            """
            create table if not exists processes (
                process_id text primary key,
                process_json text not null,
                name text not null,
                updated_at text not null
            )
            """
        )
        conn.execute(
            """
            create table if not exists resources (
                resource_id text primary key,
                resource_json text not null,
                name text not null,
                updated_at text not null
            )
            """
        )
        conn.execute(
            """
            create table if not exists recovery_objectives (
                process_id text primary key,
                objective_json text not null,
                updated_at text not null
            )
            """
        )
        conn.commit()


# processes

def upsert_process(process: Process) -> None:
    """insert or update a process."""
    with connect() as conn:
        conn.execute(
            """
            insert into processes (process_id, process_json, name, updated_at)
            values (?, ?, ?, ?)
            on conflict(process_id) do update set
                process_json = excluded.process_json,
                name = excluded.name,
                updated_at = excluded.updated_at
            """,
            (process.id, process.model_dump_json(), process.name, utc_timestamp()),
        )
        conn.commit()


def get_process(process_id: str) -> Process | None:
    with connect() as conn:
        row = conn.execute(
            "select process_json from processes where process_id = ?",
            (process_id,),
        ).fetchone()
    if not row:
        return None
    return Process.model_validate_json(row["process_json"])


def list_processes() -> list[Process]:
    with connect() as conn:
        rows = conn.execute(
            "select process_json from processes order by name"
        ).fetchall()
    return [Process.model_validate_json(row["process_json"]) for row in rows]


def delete_process(process_id: str) -> bool:
    """delete a process; its relations are left for the engine to ignore."""
    with connect() as conn:
        cursor = conn.execute("delete from processes where process_id = ?", (process_id,))
        conn.commit()
    return cursor.rowcount > 0


# resources

def upsert_resource(resource: BusinessResource) -> None:
    """insert or update a business resource."""
    with connect() as conn:
        conn.execute(
            """
            insert into resources (resource_id, resource_json, name, updated_at)
            values (?, ?, ?, ?)
            on conflict(resource_id) do update set
                resource_json = excluded.resource_json,
                name = excluded.name,
                updated_at = excluded.updated_at
            """,
            (resource.id, resource.model_dump_json(), resource.name, utc_timestamp()),
        )
        conn.commit()


def get_resource(resource_id: str) -> BusinessResource | None:
    with connect() as conn:
        row = conn.execute(
            "select resource_json from resources where resource_id = ?",
            (resource_id,),
        ).fetchone()
    if not row:
        return None
    return BusinessResource.model_validate_json(row["resource_json"])


def list_resources() -> list[BusinessResource]:
    with connect() as conn:
        rows = conn.execute(
            "select resource_json from resources order by name"
        ).fetchall()
    return [BusinessResource.model_validate_json(row["resource_json"]) for row in rows]


def delete_resource(resource_id: str) -> bool:
    with connect() as conn:
        cursor = conn.execute("delete from resources where resource_id = ?", (resource_id,))
        conn.commit()
    return cursor.rowcount > 0


# recovery objectives

def upsert_objective(process_id: str, objective: RecoveryObjective) -> None:
    with connect() as conn:
        conn.execute(
            """
            insert into recovery_objectives (process_id, objective_json, updated_at)
            values (?, ?, ?)
            on conflict(process_id) do update set
                objective_json = excluded.objective_json,
                updated_at = excluded.updated_at
            """,
            (process_id, objective.model_dump_json(), utc_timestamp()),
        )
        conn.commit()


def get_objective(process_id: str) -> RecoveryObjective | None:
    with connect() as conn:
        row = conn.execute(
            "select objective_json from recovery_objectives where process_id = ?",
            (process_id,),
        ).fetchone()
    if not row:
        return None
    return RecoveryObjective.model_validate_json(row["objective_json"])


def list_objectives() -> dict[str, RecoveryObjective]:
    with connect() as conn:
        rows = conn.execute(
            "select process_id, objective_json from recovery_objectives"
        ).fetchall()
    return {
        row["process_id"]: RecoveryObjective.model_validate_json(row["objective_json"])
        for row in rows
    }


def load_bundle() -> EntityBundle:
    """everything the engine reads in one load."""
    return EntityBundle(
        processes=list_processes(),
        resources=list_resources(),
        recovery_objectives=list_objectives(),
    )

"""SQLite storage for the three relation collections.

Each relation kind has its own table; rows keep insertion order so the
engine sees relations in the order they were created.
"""

from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    Relation,
    RelationKind,
    RelationSet,
    ResourceDependency,
)
from bcmgraph.utils.identifiers import utc_timestamp
from bcmstore.connection import connect

TABLES: dict[RelationKind, str] = {
    RelationKind.process_dependency: "process_dependencies",
    RelationKind.resource_link: "process_resource_links",
    RelationKind.resource_dependency: "resource_dependencies",
}

MODELS: dict[RelationKind, type[Relation]] = {
    RelationKind.process_dependency: ProcessDependency,
    RelationKind.resource_link: ProcessResourceLink,
    RelationKind.resource_dependency: ResourceDependency,
}


def init_db() -> None:
    with connect() as conn:
        for table in TABLES.values():
            conn.execute(
                f"""
                create table if not exists {table} (
                    relation_id text primary key,
                    source_id text not null,
                    target_id text not null,
                    relation_json text not null,
                    created_at text not null
                )
                """
            )
        conn.commit()


def insert_relation(relation: Relation) -> bool:
    """insert a relation; returns False if the id is already taken."""
    source, target = relation.endpoints()
    with connect() as conn:
        cursor = conn.execute(
            f"""
            insert into {TABLES[relation.kind]}
                (relation_id, source_id, target_id, relation_json, created_at)
            values (?, ?, ?, ?, ?)
            on conflict(relation_id) do nothing
            """,
            (relation.id, source, target, relation.model_dump_json(), utc_timestamp()),
        )
        conn.commit()
    return cursor.rowcount > 0


def get_relation(kind: RelationKind, relation_id: str) -> Relation | None:
    with connect() as conn:
        row = conn.execute(
            f"select relation_json from {TABLES[kind]} where relation_id = ?",
            (relation_id,),
        ).fetchone()
    if not row:
        return None
    return MODELS[kind].model_validate_json(row["relation_json"])


def list_relations(kind: RelationKind) -> list[Relation]:
    with connect() as conn:
        rows = conn.execute(
            f"select relation_json from {TABLES[kind]} order by rowid"
        ).fetchall()
    model = MODELS[kind]
    return [model.model_validate_json(row["relation_json"]) for row in rows]


def delete_relation(kind: RelationKind, relation_id: str) -> bool:
    with connect() as conn:
        cursor = conn.execute(
            f"delete from {TABLES[kind]} where relation_id = ?",
            (relation_id,),
        )
        conn.commit()
    return cursor.rowcount > 0


def load_relation_set(process_id: str | None = None) -> RelationSet:
    """all relations, or only those around `process_id`."""
    relations = RelationSet(
        process_dependencies=list_relations(RelationKind.process_dependency),
        resource_links=list_relations(RelationKind.resource_link),
        resource_dependencies=list_relations(RelationKind.resource_dependency),
    )
    if process_id:
        return relations.around(process_id)
    return relations

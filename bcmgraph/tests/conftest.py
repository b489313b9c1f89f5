"""Shared fixtures: a small business with three processes and three resources.

proc-p (RTO 24h) depends on proc-q (RTO 48h) and uses res-r (RTO 4h).
res-r needs res-db to function.
"""

import pytest

from bcmgraph.adapters.memory_store import InMemoryStore
from bcmgraph.models.entities import (
    BusinessResource,
    EntityBundle,
    Process,
    RecoveryObjective,
    ResourceType,
    TimeUnit,
    TimeValue,
)
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationSet,
    ResourceDependency,
)


def make_entities() -> EntityBundle:
    return EntityBundle(
        processes=[
            Process(id="proc-p", name="Payroll", criticality="critical"),
            Process(id="proc-q", name="Quarterly Close", criticality="high"),
            Process(id="proc-s", name="Sales Ops"),
        ],
        resources=[
            BusinessResource(
                id="res-r",
                name="HR System",
                type=ResourceType.systems,
                rto=TimeValue(value=4, unit=TimeUnit.hours),
                rpo=TimeValue(value=30, unit=TimeUnit.minutes),
            ),
            BusinessResource(
                id="res-db",
                name="HR Database",
                type=ResourceType.data,
                rto=TimeValue(value=2, unit=TimeUnit.days),
            ),
            BusinessResource(id="res-desk", name="Front Desk", type=ResourceType.facilities),
        ],
        recovery_objectives={
            "proc-p": RecoveryObjective(rto=24, rpo=4),
            "proc-q": RecoveryObjective(rto=48, rpo=2),
            "proc-s": RecoveryObjective(rto=8, rpo=8),
        },
    )


def make_relations() -> RelationSet:
    return RelationSet(
        process_dependencies=[
            ProcessDependency(id="dep-pq", source_process_id="proc-p", target_process_id="proc-q"),
        ],
        resource_links=[
            ProcessResourceLink(id="link-pr", process_id="proc-p", resource_id="res-r"),
        ],
        resource_dependencies=[
            ResourceDependency(
                id="rdep-r-db",
                source_resource_id="res-r",
                target_resource_id="res-db",
                is_blocking=True,
            ),
        ],
    )


@pytest.fixture
def entities() -> EntityBundle:
    return make_entities()


@pytest.fixture
def relations() -> RelationSet:
    return make_relations()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore(entities=make_entities(), relations=make_relations())

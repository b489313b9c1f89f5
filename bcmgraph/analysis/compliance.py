"""Recovery-objective compliance and single points of failure.

Everything a process depends on must be able to recover at least as fast as
the process itself requires. A node whose RTO (or RPO) exceeds the focal
process's target is a violation.

A process is a single point of failure when two or more dependency edges
target it. That is a property of the whole topology, so it is computed over
every process dependency, not only the ones on the current map.
"""

from collections import defaultdict
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Literal

from bcmgraph.models.diagram import NodeKind
from bcmgraph.models.entities import EntityBundle, Process
from bcmgraph.models.graph_view import GraphView
from bcmgraph.models.relations import ProcessDependency, RelationSet

Metric = Literal["rto", "rpo"]


@dataclass
class ComplianceViolation:
    """A node that cannot recover within the focal process's target."""

    node_id: str
    name: str
    node_type: Literal["process", "resource"]
    metric: Metric
    value_hours: float
    target_hours: float

    @property
    def excess_hours(self) -> float:
        return self.value_hours - self.target_hours


@dataclass
class SpofCandidate:
    """A process that several dependency edges point at."""

    process_id: str
    name: str
    dependent_count: int
    dependent_process_ids: list[str] = field(default_factory=list)


@dataclass
class ComplianceReport:
    violations: list[ComplianceViolation] = field(default_factory=list)
    spof: list[SpofCandidate] = field(default_factory=list)

    def violations_for(self, metric: Metric) -> list[ComplianceViolation]:
        return [v for v in self.violations if v.metric == metric]

    @property
    def has_issues(self) -> bool:
        return bool(self.violations or self.spof)


def find_recovery_violations(view: GraphView) -> list[ComplianceViolation]:
    """Flag every non-focal node whose recovery time exceeds the baseline.

    Checks RTO and RPO independently. Nodes missing either the value or the
    baseline are skipped.
    """
    violations: list[ComplianceViolation] = []
    checked: set[tuple[str, str]] = set()

    for node in view.nodes:
        if node.is_main or node.id == view.focal_process_id:
            continue
        node_type = "resource" if node.kind == NodeKind.resource else "process"
        for metric, value, target in (
            ("rto", node.rto_hours, node.main_rto),
            ("rpo", node.rpo_hours, node.main_rpo),
        ):
            if value is None or target is None:
                continue
            if value > target and (node.id, metric) not in checked:
                checked.add((node.id, metric))
                violations.append(ComplianceViolation(
                    node_id=node.id,
                    name=node.label,
                    node_type=node_type,
                    metric=metric,
                    value_hours=value,
                    target_hours=target,
                ))
    return violations


def find_single_points_of_failure(
    processes: list[Process],
    dependencies: list[ProcessDependency],
    pending: Collection[str] = (),
) -> list[SpofCandidate]:
    """Processes targeted by at least two distinct dependency edges.

    Dependencies staged for deletion are not counted.
    """
    edges_by_target: dict[str, set[str]] = defaultdict(set)
    dependents: dict[str, list[str]] = defaultdict(list)
    for dep in dependencies:
        if dep.id in pending:
            continue
        if dep.id in edges_by_target[dep.target_process_id]:
            continue
        edges_by_target[dep.target_process_id].add(dep.id)
        if dep.source_process_id not in dependents[dep.target_process_id]:
            dependents[dep.target_process_id].append(dep.source_process_id)

    candidates: list[SpofCandidate] = []
    for process in processes:
        count = len(edges_by_target.get(process.id, ()))
        if count >= 2:
            candidates.append(SpofCandidate(
                process_id=process.id,
                name=process.name,
                dependent_count=count,
                dependent_process_ids=list(dependents[process.id]),
            ))
    return candidates


def evaluate(
    view: GraphView,
    entities: EntityBundle,
    relations: RelationSet,
    pending: Collection[str] = (),
) -> ComplianceReport:
    """Run both checks against the rendered view and the full topology."""
    return ComplianceReport(
        violations=find_recovery_violations(view),
        spof=find_single_points_of_failure(
            entities.processes,
            relations.process_dependencies,
            pending,
        ),
    )

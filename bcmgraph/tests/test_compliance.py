"""Tests for recovery compliance, single points of failure and network stats."""

import pytest

from bcmgraph.analysis.compliance import (
    evaluate,
    find_recovery_violations,
    find_single_points_of_failure,
)
from bcmgraph.analysis.network_stats import build_network, network_stats
from bcmgraph.engine.assembler import assemble_graph
from bcmgraph.models.entities import (
    BusinessResource,
    EntityBundle,
    Process,
    RecoveryObjective,
    ResourceType,
    TimeUnit,
    TimeValue,
)
from bcmgraph.models.relations import ProcessDependency, ProcessResourceLink, RelationSet


def _dep(dep_id: str, source: str, target: str) -> ProcessDependency:
    return ProcessDependency(id=dep_id, source_process_id=source, target_process_id=target)


class TestScenario:
    """proc-p (RTO 24h) uses res-r (RTO 4h) and depends on proc-q (RTO 48h)."""

    @pytest.fixture
    def view(self, entities, relations):
        relations.remove("rdep-r-db")
        return assemble_graph("proc-p", entities, relations)

    def test_single_rto_violation_for_q(self, view):
        violations = find_recovery_violations(view)
        rto = [v for v in violations if v.metric == "rto"]
        assert len(rto) == 1
        assert rto[0].node_id == "proc-q"
        assert rto[0].node_type == "process"
        assert rto[0].value_hours == 48
        assert rto[0].target_hours == 24
        assert rto[0].excess_hours == 24

    def test_no_violation_for_r(self, view):
        assert all(v.node_id != "res-r" for v in find_recovery_violations(view))

    def test_q_is_not_spof_with_only_p_depending(self, entities, relations, view):
        report = evaluate(view, entities, relations)
        assert report.spof == []

    def test_q_is_spof_once_another_process_depends(self, entities, relations, view):
        relations.add(_dep("dep-sq", "proc-s", "proc-q"))
        report = evaluate(view, entities, relations)
        assert [c.process_id for c in report.spof] == ["proc-q"]
        assert report.spof[0].dependent_count == 2
        assert report.spof[0].dependent_process_ids == ["proc-p", "proc-s"]
        assert report.has_issues


class TestRecoveryViolations:
    def test_resource_in_days_is_normalized(self, entities, relations):
        view = assemble_graph("proc-p", entities, relations)
        violations = {(v.node_id, v.metric) for v in find_recovery_violations(view)}
        # res-db recovers in 2 days
        assert ("res-db", "rto") in violations

    def test_rpo_checked_separately(self, entities, relations):
        entities.recovery_objectives["proc-p"] = RecoveryObjective(rto=100, rpo=0.25)
        view = assemble_graph("proc-p", entities, relations)
        violations = find_recovery_violations(view)
        assert {v.metric for v in violations} == {"rpo"}
        # res-r: 30 minutes > 15 minutes; proc-q: 2h > 0.25h
        assert {v.node_id for v in violations} == {"res-r", "proc-q"}

    def test_focal_node_never_flagged(self, entities, relations):
        entities.recovery_objectives["proc-p"] = RecoveryObjective(rto=1, rpo=1)
        view = assemble_graph("proc-p", entities, relations)
        assert all(v.node_id != "proc-p" for v in find_recovery_violations(view))

    def test_missing_baseline_flags_nothing(self, entities, relations):
        entities.recovery_objectives.pop("proc-p")
        view = assemble_graph("proc-p", entities, relations)
        assert find_recovery_violations(view) == []

    def test_missing_value_is_skipped(self, entities, relations):
        relations.add(ProcessResourceLink(id="link-desk", process_id="proc-p", resource_id="res-desk"))
        view = assemble_graph("proc-p", entities, relations)
        assert all(v.node_id != "res-desk" for v in find_recovery_violations(view))

    def test_equal_to_target_is_compliant(self, entities, relations):
        entities.recovery_objectives["proc-p"] = RecoveryObjective(rto=48, rpo=None)
        view = assemble_graph("proc-p", entities, relations)
        assert find_recovery_violations(view) == []


@pytest.mark.parametrize("target, raised", [(1, 5), (4, 24), (24, 48), (30, 100)])
def test_compliance_monotonicity(target, raised):
    """Raising the focal target never flags a new node nor clears one still over it."""
    durations = [
        TimeValue(value=30, unit=TimeUnit.minutes),
        TimeValue(value=4),
        TimeValue(value=1, unit=TimeUnit.days),
        TimeValue(value=36),
        TimeValue(value=3, unit=TimeUnit.days),
    ]
    resources = [
        BusinessResource(id=f"r{i}", name=f"R{i}", type=ResourceType.systems, rto=d)
        for i, d in enumerate(durations)
    ]
    relations = RelationSet(resource_links=[
        ProcessResourceLink(id=f"l{i}", process_id="focal", resource_id=r.id)
        for i, r in enumerate(resources)
    ])

    def flagged(rto: float) -> set[str]:
        entities = EntityBundle(
            processes=[Process(id="focal", name="Focal")],
            resources=resources,
            recovery_objectives={"focal": RecoveryObjective(rto=rto)},
        )
        view = assemble_graph("focal", entities, relations)
        return {v.node_id for v in find_recovery_violations(view)}

    before, after = flagged(target), flagged(raised)
    assert after <= before
    still_over = {r.id for r in resources if r.rto.to_hours() > raised}
    assert still_over == after


class TestSinglePointsOfFailure:
    """SPOF is computed over every process, not just the focal neighbourhood."""

    def _processes(self):
        return [Process(id=p, name=p.upper()) for p in ("a", "b", "c", "d")]

    def test_two_edges_make_a_spof(self):
        deps = [_dep("1", "a", "c"), _dep("2", "b", "c"), _dep("3", "a", "b")]
        spof = find_single_points_of_failure(self._processes(), deps)
        assert [c.process_id for c in spof] == ["c"]

    def test_duplicate_edge_ids_counted_once(self):
        deps = [_dep("1", "a", "c"), _dep("1", "a", "c")]
        assert find_single_points_of_failure(self._processes(), deps) == []

    def test_distinct_edges_from_same_source_both_count(self):
        deps = [_dep("1", "a", "c"), _dep("2", "a", "c")]
        spof = find_single_points_of_failure(self._processes(), deps)
        assert spof[0].dependent_count == 2
        assert spof[0].dependent_process_ids == ["a"]

    def test_pending_deletions_not_counted(self):
        deps = [_dep("1", "a", "c"), _dep("2", "b", "c")]
        assert find_single_points_of_failure(self._processes(), deps, pending={"2"}) == []

    def test_independent_of_focal(self, entities, relations):
        relations.add(_dep("dep-sq", "proc-s", "proc-q"))
        for focal in ("proc-p", "proc-s", "proc-q"):
            view = assemble_graph(focal, entities, relations)
            report = evaluate(view, entities, relations)
            assert [c.process_id for c in report.spof] == ["proc-q"]


class TestNetworkStats:
    def test_counts(self, entities, relations):
        stats = network_stats(entities, relations)
        assert stats.node_count == 6
        assert stats.edge_count == 3
        assert stats.density == pytest.approx(0.2)
        assert stats.avg_degree == pytest.approx(1.0)
        assert stats.degree["proc-s"] == 0

    def test_top_degree(self, entities, relations):
        stats = network_stats(entities, relations)
        assert stats.top_degree(2) == [("proc-p", 2), ("res-r", 2)]

    def test_ignores_relations_to_deleted_entities(self, entities, relations):
        relations.add(ProcessResourceLink(id="link-gone", process_id="proc-p", resource_id="res-gone"))
        assert network_stats(entities, relations).edge_count == 3

    def test_parallel_relations_each_count(self, entities, relations):
        relations.add(_dep("dep-pq-2", "proc-p", "proc-q"))
        graph = build_network(entities, relations)
        assert graph.number_of_edges("proc-p", "proc-q") == 2
        assert graph.edges["proc-p", "proc-q", "dep-pq-2"]["kind"] == "process-dep"
        assert graph.nodes["res-db"]["kind"] == "resource"
        assert network_stats(entities, relations).degree["proc-q"] == 2

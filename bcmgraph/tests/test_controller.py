"""Tests for map gestures, staged deletion and the save path."""

import asyncio
import logging

import pytest

from bcmgraph.adapters.memory_store import InMemoryStore

from bcmgraph.engine.assembler import assemble_graph
from bcmgraph.engine.controller import (
    InteractionState,
    MutationController,
    classify_connection,
)
from bcmgraph.engine.library import library_entries, upstream_candidates
from bcmgraph.engine.persistence import PersistenceCoordinator
from bcmgraph.models.diagram import NodeKind, Position
from bcmgraph.models.entities import Process, RecoveryObjective
from bcmgraph.models.relations import (
    ProcessDependency,
    ProcessResourceLink,
    RelationKind,
    RelationSet,
    ResourceDependency,
)


class SlowRemoveStore(InMemoryStore):
    """Holds remove_process_dependency until `release` is set."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.removing = asyncio.Event()
        self.release = asyncio.Event()

    async def remove_process_dependency(self, dependency_id):
        self.removing.set()
        await self.release.wait()
        await super().remove_process_dependency(dependency_id)


@pytest.fixture
def controller(store, entities, relations):
    view = assemble_graph("proc-p", entities, relations)
    return MutationController(
        store, PersistenceCoordinator(store), "proc-p", entities, relations, view
    )


class TestClassifyConnection:
    """Which relation a drawn connection becomes."""

    def test_process_to_resource(self, entities):
        assert classify_connection("proc-p", "res-r", entities) == RelationKind.resource_link

    def test_resource_to_process(self, entities):
        assert classify_connection("res-r", "proc-p", entities) == RelationKind.resource_link

    def test_process_to_process(self, entities):
        assert classify_connection("proc-p", "proc-s", entities) == RelationKind.process_dependency

    def test_resource_to_resource(self, entities):
        assert classify_connection("res-r", "res-desk", entities) == RelationKind.resource_dependency

    def test_unknown_endpoint(self, entities):
        assert classify_connection("proc-p", "nowhere", entities) is None


class TestConnect:
    def test_starts_idle(self, controller):
        assert controller.state == InteractionState.idle

    def test_begin_connect(self, controller):
        assert controller.begin_connect("proc-p", "bottom")
        assert controller.state == InteractionState.connecting
        assert not controller.begin_connect("proc-s")

    def test_cancel_connect(self, controller):
        controller.begin_connect("proc-p")
        controller.cancel_connect()
        assert controller.state == InteractionState.idle

    @pytest.mark.asyncio
    async def test_process_to_resource_link(self, controller, store):
        controller.drop_node({"type": "resourceNode", "id": "res-desk"}, Position(x=0, y=0))
        link = await controller.connect("proc-p", "res-desk", "bottom", "top")

        assert isinstance(link, ProcessResourceLink)
        assert (link.process_id, link.resource_id) == ("proc-p", "res-desk")
        assert (link.process_handle, link.resource_handle) == ("bottom", "top")
        assert link.notes == "Created via map"
        assert link.criticality.value == "important"
        assert link.quantity_required == 1
        assert controller.view.get_edge(link.id) is not None
        assert store.calls_to("create_resource_link") == [link.id]
        assert controller.state == InteractionState.idle

    @pytest.mark.asyncio
    async def test_resource_to_process_is_normalized(self, controller):
        controller.drop_node({"type": "resourceNode", "id": "res-desk"}, Position(x=0, y=0))
        link = await controller.connect("res-desk", "proc-p", "right", "left")

        assert (link.process_id, link.resource_id) == ("proc-p", "res-desk")
        assert link.process_handle == "left"
        assert link.resource_handle == "right"
        assert link.notes == "Created via map (reverse link)"
        edge = controller.view.get_edge(link.id)
        assert (edge.source, edge.target) == ("proc-p", "res-desk")

    @pytest.mark.asyncio
    async def test_process_dependency_defaults(self, controller, store):
        dep = await controller.connect("proc-q", "proc-p")
        assert isinstance(dep, ProcessDependency)
        assert dep.type.value == "operational"
        assert dep.criticality == 3
        assert store.calls_to("create_process_dependency") == [dep.id]

    @pytest.mark.asyncio
    async def test_resource_dependency_defaults(self, controller, store):
        dep = await controller.connect("res-db", "res-r")
        assert isinstance(dep, ResourceDependency)
        assert dep.type.value == "technical"
        assert dep.is_blocking is False
        assert store.calls_to("create_resource_dependency") == [dep.id]

    @pytest.mark.asyncio
    async def test_uses_source_from_begin_connect(self, controller):
        controller.begin_connect("proc-q", "top")
        dep = await controller.connect(target="proc-p", target_handle="bottom")
        assert dep.source_process_id == "proc-q"
        assert dep.handles() == ("top", "bottom")
        assert controller.state == InteractionState.idle

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source, target", [
        ("proc-p", "proc-p"),
        ("proc-p", None),
        (None, "proc-p"),
        ("proc-p", "proc-s"),  # not on the map
        ("proc-p", "nowhere"),
    ])
    async def test_ignored_connections(self, controller, store, source, target):
        edges_before = len(controller.view.edges)
        assert await controller.connect(source, target) is None
        assert len(controller.view.edges) == edges_before
        assert store.calls == []

    @pytest.mark.asyncio
    async def test_create_failure_keeps_local_relation(self, controller, store, caplog):
        store.fail_on.add("create_process_dependency")
        with caplog.at_level(logging.WARNING, logger="bcmgraph"):
            dep = await controller.connect("proc-q", "proc-p")

        assert dep is not None
        assert controller.relations.get(dep.id) is not None
        assert controller.view.get_edge(dep.id) is not None
        assert "failed to create" in caplog.text

    @pytest.mark.asyncio
    async def test_add_upstream(self, controller, store, entities):
        dep = await controller.add_upstream("proc-s")

        assert (dep.source_process_id, dep.target_process_id) == ("proc-s", "proc-p")
        assert dep.description == "Upstream added via map"
        assert controller.view.get_node("proc-s").position == Position(x=0, y=-200)
        assert controller.view.get_edge(dep.id) is not None
        assert store.calls_to("create_process_dependency") == [dep.id]
        assert upstream_candidates(entities, controller.relations, "proc-p") == [
            entities.get_process("proc-q")
        ]

    @pytest.mark.asyncio
    async def test_add_upstream_skips_occupied_slots(self, controller, entities):
        """A process whose upstream edge is staged for deletion keeps its slot."""
        entities.processes.append(Process(id="proc-t", name="Treasury"))
        first = await controller.add_upstream("proc-s")
        controller.delete_edges([first.id])
        assert controller.view.has_node("proc-s")

        await controller.add_upstream("proc-t")
        assert controller.view.get_node("proc-s").position == Position(x=0, y=-200)
        assert controller.view.get_node("proc-t").position == Position(x=300, y=-200)

    @pytest.mark.asyncio
    async def test_add_upstream_rejects_focal_and_unknown(self, controller, store):
        assert await controller.add_upstream("proc-p") is None
        assert await controller.add_upstream("res-r") is None
        assert store.calls == []


class TestDropAndMove:
    def test_drop_library_entry(self, controller, store, entities):
        entry = next(e for e in library_entries(entities, "proc-p", query="front") if e.id == "res-desk")
        node = controller.drop_node(entry.payload(), {"x": 120, "y": 80})

        assert node.kind == NodeKind.resource
        assert node.position == Position(x=120, y=80)
        assert node.label == "Front Desk"
        assert node.main_rto == 24
        # a drop never creates a relation
        assert store.calls == []

    def test_drop_process(self, controller):
        node = controller.drop_node({"type": "processNode", "id": "proc-s"}, Position(x=1, y=2))
        assert node.kind == NodeKind.process
        assert node.rto_hours == 8

    @pytest.mark.parametrize("payload", [
        None,
        "res-desk",
        {},
        {"type": "resourceNode"},
        {"type": "bogusNode", "id": "res-desk"},
        {"type": "resourceNode", "id": "res-gone"},
        {"type": "processNode", "id": "res-desk"},
    ])
    def test_malformed_drops_ignored(self, controller, payload):
        nodes_before = len(controller.view.nodes)
        assert controller.drop_node(payload, Position(x=0, y=0)) is None
        assert len(controller.view.nodes) == nodes_before

    def test_duplicate_drop_ignored(self, controller):
        assert controller.drop_node({"type": "resourceNode", "id": "res-r"}, Position(x=0, y=0)) is None
        assert [n.id for n in controller.view.nodes].count("res-r") == 1

    def test_move_node(self, controller):
        assert controller.move_node("proc-q", Position(x=9, y=9))
        assert controller.view.get_node("proc-q").position == Position(x=9, y=9)
        assert not controller.move_node("nowhere", Position(x=0, y=0))


class TestStagedDeletion:
    """Deletions are hidden at once and only reach the store on save."""

    @pytest.mark.asyncio
    async def test_delete_edge_then_save(self, controller, store):
        assert controller.delete_edges(["dep-pq"]) == 1

        # gone from the view before any store call
        assert controller.view.get_edge("dep-pq") is None
        assert store.calls == []
        assert controller.state == InteractionState.staged_deletion

        result = await controller.save_layout()
        assert store.calls_to("remove_process_dependency") == ["dep-pq"]
        assert result.deleted == ["dep-pq"]
        assert result.ok
        assert len(controller.pending) == 0
        assert controller.relations.get("dep-pq") is None
        assert controller.state == InteractionState.idle
        assert "proc-p" in store.diagrams

    @pytest.mark.asyncio
    async def test_staging_twice_is_staging_once(self, controller, store):
        assert controller.delete_edges(["dep-pq"]) == 1
        assert controller.delete_edges(["dep-pq"]) == 0
        assert len(controller.pending) == 1

        await controller.save_layout()
        assert store.calls_to("remove_process_dependency") == ["dep-pq"]

    def test_unknown_edge_ignored(self, controller):
        assert controller.delete_edges(["nowhere"]) == 0
        assert controller.state == InteractionState.idle

    @pytest.mark.asyncio
    async def test_delete_node_stages_incident_edges(self, controller, store):
        assert controller.delete_nodes(["res-r"]) == 1

        assert not controller.view.has_node("res-r")
        assert controller.pending.ids() == {"link-pr", "rdep-r-db"}
        assert controller.removed_nodes == {"res-r"}
        assert [e.id for e in controller.view.edges] == ["dep-pq"]

        await controller.save_layout()
        assert store.calls_to("remove_resource_link") == ["link-pr"]
        assert store.calls_to("remove_resource_dependency") == ["rdep-r-db"]

    def test_focal_node_cannot_be_deleted(self, controller):
        assert controller.delete_nodes(["proc-p"]) == 0
        assert controller.view.has_node("proc-p")
        assert controller.pending.ids() == set()

    @pytest.mark.asyncio
    async def test_deletion_staged_during_save_is_kept(self, entities, relations):
        store = SlowRemoveStore(entities, relations)
        view = assemble_graph("proc-p", entities, relations)
        controller = MutationController(
            store, PersistenceCoordinator(store), "proc-p", entities, relations, view
        )
        controller.delete_edges(["dep-pq"])

        saving = asyncio.create_task(controller.save_layout())
        await store.removing.wait()
        controller.delete_edges(["link-pr"])
        store.release.set()
        result = await saving

        assert result.deleted == ["dep-pq"]
        assert controller.pending.ids() == {"link-pr"}
        assert controller.view.get_edge("link-pr") is None
        assert controller.state == InteractionState.staged_deletion
        assert store.calls_to("remove_resource_link") == []

        await controller.save_layout()
        assert store.calls_to("remove_resource_link") == ["link-pr"]
        assert len(controller.pending) == 0

    @pytest.mark.asyncio
    async def test_failed_deletion_is_not_rolled_back(self, controller, store, caplog):
        store.fail_on.add("remove_resource_link")
        controller.delete_edges(["link-pr", "dep-pq"])

        with caplog.at_level(logging.WARNING, logger="bcmgraph"):
            result = await controller.save_layout()

        assert result.failed_deletions == ["link-pr"]
        assert result.deleted == ["dep-pq"]
        assert result.snapshot_saved
        assert not result.ok
        assert len(controller.pending) == 0
        assert controller.view.get_edge("link-pr") is None
        assert "failed to delete" in caplog.text

    @pytest.mark.asyncio
    async def test_snapshot_failure_reported(self, controller, store):
        store.fail_on.add("save_diagram")
        result = await controller.save_layout()
        assert not result.snapshot_saved
        assert result.snapshot is not None
        assert "proc-p" not in store.diagrams


class TestAutoLayout:
    @pytest.mark.asyncio
    async def test_repositions_and_saves(self, controller, store):
        before = {n.id: n.position.model_copy() for n in controller.view.nodes}
        result = await controller.auto_layout("TB")

        after = {n.id: n.position for n in controller.view.nodes}
        assert after != before
        assert result.snapshot_saved
        saved = store.diagrams["proc-p"]
        assert {n.id: n.position for n in saved.nodes} == after
        assert controller.state == InteractionState.idle

    @pytest.mark.asyncio
    async def test_flushes_pending_deletions(self, controller, store):
        controller.delete_edges(["dep-pq"])
        await controller.auto_layout("LR")
        assert store.calls_to("remove_process_dependency") == ["dep-pq"]
        assert controller.state == InteractionState.idle


class TestExternalChanges:
    def test_replace_relations(self, controller):
        controller.replace_relations(RelationSet())
        assert controller.view.edges == []

    def test_replace_entities(self, controller, entities):
        entities = entities.model_copy(deep=True)
        entities.recovery_objectives["proc-q"] = RecoveryObjective(rto=6)
        entities.resources = [r for r in entities.resources if r.id != "res-db"]

        controller.replace_entities(entities)
        assert controller.view.get_node("proc-q").rto_hours == 6
        assert not controller.view.has_node("res-db")
        assert controller.view.get_edge("rdep-r-db") is None

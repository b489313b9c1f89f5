"""Map session - single entry point for working with one focal process at a time.

A session loads entities, relations and the saved diagram for the selected
process, assembles the view, and hands every gesture to a MutationController.

Example:
    from bcmgraph.sdk import open_map

    async with open_map("proc-payroll") as session:
        report = session.compliance()
        await session.auto_layout()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Literal

from bcmgraph.adapters.http_store import HttpStore
from bcmgraph.adapters.store import RecordStore, StoreError
from bcmgraph.analysis.compliance import ComplianceReport, evaluate
from bcmgraph.analysis.network_stats import NetworkStats, network_stats
from bcmgraph.config import Settings, load_settings
from bcmgraph.engine.assembler import assemble_graph
from bcmgraph.engine.controller import MutationController
from bcmgraph.engine.layout import Direction
from bcmgraph.engine.library import LibraryEntry, library_entries, upstream_candidates
from bcmgraph.engine.pending import PendingDeletions
from bcmgraph.engine.persistence import PersistenceCoordinator, SaveResult, snapshot_from_view
from bcmgraph.models.diagram import DiagramSnapshot
from bcmgraph.models.entities import EntityBundle, Process
from bcmgraph.models.graph_view import GraphView
from bcmgraph.models.relations import RelationSet

logger = logging.getLogger(__name__)


class MapSession:
    """Holds the working graph for the currently selected process."""

    def __init__(self, store: RecordStore, settings: Settings | None = None) -> None:
        self.store = store
        self.settings = settings or Settings()
        self.persistence = PersistenceCoordinator(store)
        self.focal_process_id: str | None = None
        self._entities = EntityBundle()
        self._controller: MutationController | None = None
        self._generation = 0

    @property
    def controller(self) -> MutationController:
        if self._controller is None:
            raise RuntimeError("no process selected")
        return self._controller

    @property
    def view(self) -> GraphView | None:
        return self._controller.view if self._controller else None

    @property
    def pending(self) -> PendingDeletions | None:
        return self._controller.pending if self._controller else None

    @property
    def entities(self) -> EntityBundle:
        return self._controller.entities if self._controller else self._entities

    @property
    def relations(self) -> RelationSet:
        return self._controller.relations if self._controller else RelationSet()

    async def _load(
        self, process_id: str
    ) -> tuple[EntityBundle, RelationSet, DiagramSnapshot | None] | StoreError:
        results = await asyncio.gather(
            self.store.load_entities(),
            # the whole topology: single points of failure are not local
            self.store.load_relations(),
            self.store.load_diagram(process_id),
            return_exceptions=True,
        )
        for outcome in results:
            if isinstance(outcome, StoreError):
                return outcome
            if isinstance(outcome, BaseException):
                raise outcome
        entities, relations, snapshot = results
        return entities, relations, snapshot

    async def select_process(self, process_id: str) -> GraphView | None:
        """Load and assemble the map for `process_id`.

        Selecting discards any staged deletions of the previous process.
        Returns None when another selection was made while this one was
        loading; that result is thrown away.
        """
        self._generation += 1
        generation = self._generation
        self.focal_process_id = process_id

        loaded = await self._load(process_id)
        if generation != self._generation:
            logger.debug("discarding stale load for %s", process_id)
            return None

        if isinstance(loaded, StoreError):
            logger.warning("failed to load map for %s: %s", process_id, loaded)
            entities, relations, snapshot = self.entities, RelationSet(), None
        else:
            entities, relations, snapshot = loaded

        self._entities = entities
        view = assemble_graph(
            process_id,
            entities,
            relations,
            snapshot,
            keep_unlinked=self.settings.keep_unlinked_nodes,
        )
        self._controller = MutationController(
            self.store,
            self.persistence,
            process_id,
            entities,
            relations,
            view,
            PendingDeletions(),
        )
        logger.info(
            "selected %s: %d nodes, %d edges", process_id, len(view.nodes), len(view.edges)
        )
        return view

    async def refresh(self) -> GraphView | None:
        """Reload entities and relations, keeping positions and staged deletions.

        Nodes removed in this session stay removed and staged relations stay
        hidden until the next save.
        """
        controller = self.controller
        generation = self._generation
        known_before = {relation.id for relation in controller.relations.all()}
        try:
            entities, relations = await asyncio.gather(
                self.store.load_entities(),
                self.store.load_relations(),
            )
        except StoreError as e:
            logger.warning("failed to refresh %s: %s", controller.focal_process_id, e)
            return controller.view
        if generation != self._generation:
            logger.debug("discarding stale refresh for %s", controller.focal_process_id)
            return None

        # relations created or removed locally while loading win over the load
        local_ids: set[str] = set()
        for relation in controller.relations.all():
            local_ids.add(relation.id)
            if relation.id not in known_before and relations.get(relation.id) is None:
                relations.add(relation)
        for relation_id in known_before - local_ids:
            relations.remove(relation_id)

        view = assemble_graph(
            controller.focal_process_id,
            entities,
            relations,
            snapshot_from_view(controller.view),
            pending=controller.pending.ids(),
            excluded_node_ids=controller.removed_nodes,
            keep_unlinked=True,
        )
        self._entities = entities
        controller.entities = entities
        controller.relations = relations
        controller.view = view
        return view

    def compliance(self) -> ComplianceReport:
        controller = self.controller
        return evaluate(
            controller.view,
            controller.entities,
            controller.relations,
            controller.pending.ids(),
        )

    def network(self) -> NetworkStats:
        return network_stats(self.entities, self.relations)

    def library(
        self,
        query: str = "",
        tab: Literal["resources", "processes"] = "resources",
    ) -> list[LibraryEntry]:
        return library_entries(self.entities, self.focal_process_id, query, tab)

    def upstream_candidates(self, query: str = "") -> list[Process]:
        return upstream_candidates(
            self.entities, self.relations, self.controller.focal_process_id, query
        )

    async def save_layout(self) -> SaveResult:
        return await self.controller.save_layout()

    async def auto_layout(self, direction: Direction = "TB") -> SaveResult:
        return await self.controller.auto_layout(direction)


@asynccontextmanager
async def open_map(
    process_id: str | None = None,
    settings: Settings | None = None,
    store: RecordStore | None = None,
) -> AsyncIterator[MapSession]:
    """Open a map session against the configured store.

    Args:
        process_id: process to select right away (optional)
        settings: runtime settings; read from the environment if not provided
        store: record store to use; an HttpStore on settings.store_url otherwise

    Yields:
        MapSession ready for gestures and analysis
    """
    settings = settings or load_settings()
    owned: HttpStore | None = None
    if store is None:
        owned = HttpStore(settings.store_url, timeout=settings.store_timeout)
        store = owned

    session = MapSession(store, settings)
    try:
        if process_id:
            await session.select_process(process_id)
        yield session
    finally:
        if owned is not None:
            await owned.aclose()

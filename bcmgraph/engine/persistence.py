"""Flush staged deletions and write the diagram snapshot.

The save is two sequential phases (deletions, then snapshot) and is not
atomic. If the process dies between them the relation store is already
correct while the stale snapshot still names deleted nodes; the assembler's
reconciliation drops those on the next load.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from bcmgraph.adapters.store import RecordStore, StoreError
from bcmgraph.engine.pending import PendingDeletions
from bcmgraph.models.diagram import DiagramSnapshot, SnapshotNode
from bcmgraph.models.graph_view import GraphView
from bcmgraph.models.relations import RelationKind
from bcmgraph.utils.identifiers import epoch_millis

logger = logging.getLogger(__name__)

# store method that deletes each relation kind
REMOVE_METHODS: dict[RelationKind, str] = {
    RelationKind.process_dependency: "remove_process_dependency",
    RelationKind.resource_link: "remove_resource_link",
    RelationKind.resource_dependency: "remove_resource_dependency",
}


@dataclass
class SaveResult:
    """Outcome of a save; failures are reported here and in the log only."""

    process_id: str
    deleted: list[str] = field(default_factory=list)
    failed_deletions: list[str] = field(default_factory=list)
    snapshot: DiagramSnapshot | None = None
    snapshot_saved: bool = False

    @property
    def ok(self) -> bool:
        return self.snapshot_saved and not self.failed_deletions


def snapshot_from_view(view: GraphView) -> DiagramSnapshot:
    """Serialize node ids, positions and kinds."""
    return DiagramSnapshot(
        process_id=view.focal_process_id,
        nodes=[
            SnapshotNode(id=node.id, position=node.position.model_copy(), kind=node.kind)
            for node in view.nodes
        ],
        timestamp=epoch_millis(),
    )


class PersistenceCoordinator:
    """Write path from the map back to the relation and diagram stores."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    async def _remove(self, relation_id: str, kind: RelationKind) -> None:
        method = getattr(self.store, REMOVE_METHODS[kind])
        await method(relation_id)

    async def flush_deletions(self, pending: PendingDeletions) -> tuple[list[str], list[str]]:
        """Issue every staged deletion concurrently, then drop the flushed ones.

        Returns:
            (deleted ids, failed ids). Failures are not retried or rolled back.
        """
        entries = pending.items()
        if not entries:
            return [], []

        results = await asyncio.gather(
            *(self._remove(relation_id, kind) for relation_id, kind in entries),
            return_exceptions=True,
        )
        # deletions staged while the calls were in flight wait for the next save
        pending.discard(relation_id for relation_id, _ in entries)

        deleted: list[str] = []
        failed: list[str] = []
        for (relation_id, kind), outcome in zip(entries, results):
            if isinstance(outcome, Exception):
                logger.warning(
                    "failed to delete %s %s: %s", kind.value, relation_id, outcome
                )
                failed.append(relation_id)
            else:
                deleted.append(relation_id)
        logger.info("flushed %d deletions (%d failed)", len(deleted), len(failed))
        return deleted, failed

    async def save_layout(
        self,
        focal_process_id: str,
        view: GraphView,
        pending: PendingDeletions,
    ) -> SaveResult:
        """Flush staged deletions, then write the snapshot for the focal process."""
        result = SaveResult(process_id=focal_process_id)
        result.deleted, result.failed_deletions = await self.flush_deletions(pending)

        snapshot = snapshot_from_view(view)
        result.snapshot = snapshot
        try:
            await self.store.save_diagram(snapshot)
            result.snapshot_saved = True
        except StoreError as e:
            logger.warning("failed to save diagram for %s: %s", focal_process_id, e)
        return result

"""Graph assembly, mutation and persistence for the continuity map."""

from bcmgraph.engine.assembler import (
    assemble_graph,
    derive_edges,
    discover_neighbours,
)
from bcmgraph.engine.controller import (
    InteractionState,
    MutationController,
    classify_connection,
)
from bcmgraph.engine.layout import layered_layout
from bcmgraph.engine.library import LibraryEntry, library_entries, upstream_candidates
from bcmgraph.engine.pending import PendingDeletions
from bcmgraph.engine.persistence import (
    PersistenceCoordinator,
    SaveResult,
    snapshot_from_view,
)

__all__ = [
    # assembler
    "assemble_graph",
    "derive_edges",
    "discover_neighbours",
    # controller
    "InteractionState",
    "MutationController",
    "classify_connection",
    "PendingDeletions",
    # layout
    "layered_layout",
    # library panel
    "LibraryEntry",
    "library_entries",
    "upstream_candidates",
    # persistence
    "PersistenceCoordinator",
    "SaveResult",
    "snapshot_from_view",
]

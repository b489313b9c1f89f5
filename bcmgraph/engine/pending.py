"""Staged deletions awaiting the next save."""

from collections.abc import Iterable, Iterator

from bcmgraph.models.relations import RelationKind


class PendingDeletions:
    """relation id -> kind, recorded locally until the save flushes them.

    Staging the same id twice is a no-op.
    """

    def __init__(self) -> None:
        self._entries: dict[str, RelationKind] = {}

    def stage(self, relation_id: str, kind: RelationKind) -> bool:
        """Stage a relation; returns False if it was already staged."""
        if relation_id in self._entries:
            return False
        self._entries[relation_id] = kind
        return True

    def items(self) -> list[tuple[str, RelationKind]]:
        return list(self._entries.items())

    def ids(self) -> set[str]:
        return set(self._entries)

    def discard(self, relation_ids: Iterable[str]) -> None:
        """Drop the given ids; entries staged since are kept."""
        for relation_id in relation_ids:
            self._entries.pop(relation_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, relation_id: object) -> bool:
        return relation_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PendingDeletions({self._entries!r})"

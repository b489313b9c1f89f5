"""Utility functions for the continuity map engine."""

from bcmgraph.utils.identifiers import (
    epoch_millis,
    generate_relation_id,
    utc_timestamp,
)

__all__ = [
    "epoch_millis",
    "generate_relation_id",
    "utc_timestamp",
]

"""SDK entry points for driving a continuity map."""

from bcmgraph.sdk.session import MapSession, open_map

__all__ = ["MapSession", "open_map"]

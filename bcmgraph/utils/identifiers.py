"""ID generation and timestamp utilities."""

import time
import uuid
from datetime import datetime, timezone


def generate_relation_id() -> str:
    """Generate a unique relation ID (UUID4)."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def epoch_millis() -> int:
    """Milliseconds since the epoch, used to stamp diagram snapshots."""
    return int(time.time() * 1000)

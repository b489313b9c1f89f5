"""database initialization helpers."""

from bcmstore.diagram_db import init_db as init_diagram_db
from bcmstore.entity_db import init_db as init_entity_db
from bcmstore.relation_db import init_db as init_relation_db


def init_all() -> None:
    """initialize all sqlite tables."""
    init_entity_db()
    init_relation_db()
    init_diagram_db()

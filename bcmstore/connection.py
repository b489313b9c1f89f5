"""SQLite connection shared by the store tables."""

import os
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = Path(__file__).parent / "data" / "bcmstore.db"
STORE_DB_PATH = Path(os.getenv("STORE_DB_PATH", str(DEFAULT_DB_PATH)))


def connect() -> sqlite3.Connection:
    # STORE_DB_PATH is read on every call
    path = Path(STORE_DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn

"""Reference record store for the continuity map (FastAPI + SQLite)."""

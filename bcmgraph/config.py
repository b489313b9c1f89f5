"""Runtime settings for the continuity map engine.

Values come from the environment; a `.env` file in the working directory is
loaded first when present.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """where the store lives and how the assembler reconciles snapshots."""

    store_url: str = "http://localhost:8000"
    store_timeout: float = 10.0
    log_level: str = "INFO"
    keep_unlinked_nodes: bool = False


def load_settings() -> Settings:
    """Read settings from the environment (and `.env`)."""
    load_dotenv()
    return Settings(
        store_url=os.getenv("BCM_STORE_URL", Settings.store_url),
        store_timeout=float(os.getenv("BCM_STORE_TIMEOUT", Settings.store_timeout)),
        log_level=os.getenv("BCM_LOG_LEVEL", Settings.log_level).upper(),
        keep_unlinked_nodes=os.getenv("BCM_KEEP_UNLINKED_NODES", "").lower() in _TRUTHY,
    )


def configure_logging(level: str | int = "INFO") -> None:
    """Set up the root handler once for entry points (server, scripts)."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("bcmgraph").setLevel(level)

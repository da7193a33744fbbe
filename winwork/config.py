"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from pathlib import Path

DATA_DIR = Path(os.getenv("WINWORK_DATA_DIR", "data"))
DATABASE_URL = os.getenv("WINWORK_DATABASE_URL", f"sqlite:///{DATA_DIR / 'winwork.sqlite3'}")
HOST = os.getenv("WINWORK_HOST", "127.0.0.1")
PORT = int(os.getenv("WINWORK_PORT", "8765"))
LOG_LEVEL = os.getenv("WINWORK_LOG_LEVEL", "INFO").upper()
SEED_DEFAULTS = os.getenv("WINWORK_SEED_DEFAULTS", "1") not in {"0", "false", "no"}

# watchworthy/core/config.py
from __future__ import annotations

import os
from typing import List

# ------------ ESPN fetch ------------
ESPN_TIMEOUT: float = float(os.getenv("ESPN_TIMEOUT", "10.0"))
ESPN_MAX_TRIES: int = int(os.getenv("ESPN_MAX_TRIES", "2"))
# max in-flight summary/standings requests per slate
ESPN_CONCURRENCY: int = int(os.getenv("ESPN_CONCURRENCY", "6"))

HEADERS = {"User-Agent": "Mozilla/5.0", "Accept": "application/json"}

# ------------ App ------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_TZ: str = os.getenv("DEFAULT_TZ", "America/New_York")

# ------------ Server ------------
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))


def cors_origins() -> List[str]:
    """Comma-separated CORS_ORIGINS; open by default."""
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]

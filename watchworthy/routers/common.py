# watchworthy/routers/common.py
from __future__ import annotations

from typing import Optional

from watchworthy.services.espn_common import today_iso

CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=60"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def resolve_date(date: Optional[str]) -> str:
    """Requested day as YYYY-MM-DD, today in the configured timezone by default."""
    return date or today_iso()

"""
Kurasi carrier API configuration
"""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_seconds(name: str, default: Optional[float] = None) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


KURASI_BASE = os.getenv("KURASI_BASE", "https://api.kurasi.app").rstrip("/")
KURASI_ORIGIN = "https://kurasi.app"

# fallback token for server-side calls when no session cookie is present
KURASI_TOKEN = os.getenv("KURASI_TOKEN", "")
KURASI_CLIENT_CODE = os.getenv("KURASI_CLIENT_CODE", "")

# quote calls wait as long as the carrier takes unless configured
KURASI_QUOTE_TIMEOUT = _optional_seconds("KURASI_QUOTE_TIMEOUT")
KURASI_LIST_TIMEOUT = _optional_seconds("KURASI_LIST_TIMEOUT", 120)
KURASI_CALL_TIMEOUT = _optional_seconds("KURASI_CALL_TIMEOUT", 60)

# session cookies
TOKEN_COOKIE = "kurasi_token"
LABEL_COOKIE = "kurasi_label"
COOKIE_MAX_AGE = 60 * 60 * 24 * 30
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

# shipment listing paging used by the buyer sync
SYNC_PAGE_SIZE = 500
SYNC_DEFAULT_DAYS = 7
SYNC_FULL_START_DATE = "2022-01-01"
SYNC_TIMEZONE = "Asia/Jakarta"

# shipments-stats
SHIPMENT_STATS_RECENT = 10

# draft shipments listing window
TEMP_SHIPMENTS_DEFAULT_DAYS = 30

# backend/tourbooking/services/generators.py

import secrets
import string
from datetime import datetime

_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number(now: datetime | None = None) -> str:
    """ORD-YYYYMMDD-XXXXXX, e.g. ORD-20251031-A1B2C3."""
    now = now or datetime.utcnow()
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(6))
    return f"ORD-{now.strftime('%Y%m%d')}-{suffix}"

# one JSON line per request: method / path / query / status; IP / UA; processing time
# 5xx responses are logged at WARNING
# does NOT block the request; does NOT write to the DB

import time
from fastapi import Request
import json
import logging

logger = logging.getLogger("tourbooking.audit")


async def audit_middleware(request: Request, call_next):
    start_ts = time.time()

    response = await call_next(request)

    duration_ms = int((time.time() - start_ts) * 1000)

    record = {
        "ts": int(start_ts),
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query,
        "status": response.status_code,
        "ip": request.headers.get("X-Real-IP") or (request.client.host if request.client else None),
        "ua": request.headers.get("User-Agent", ""),
        "duration_ms": duration_ms
    }

    line = json.dumps(record, ensure_ascii=False)
    if response.status_code >= 500:
        logger.warning(line)
    else:
        logger.info(line)

    return response

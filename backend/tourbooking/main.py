# backend/tourbooking/main.py

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy.exc import OperationalError

from .config import settings
from .database import init_db
from .errors import NotFoundError
from .middleware.audit import audit_middleware
from .redis_client import redis_client
from .routers import admin, holidays, orders, tours
from .services.order_expiration import order_expiration_loop

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    tasks: list[asyncio.Task] = []
    if settings.enable_background_jobs:
        tasks.append(asyncio.create_task(order_expiration_loop()))

    yield

    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


app = FastAPI(title="Tour Booking API", lifespan=lifespan)

app.middleware("http")(audit_middleware)

app.include_router(tours.router)
app.include_router(orders.router)
app.include_router(holidays.router)
app.include_router(admin.router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(OperationalError)
async def storage_unavailable_handler(request: Request, exc: OperationalError):
    # Storage failure, not a "no slots" answer
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Storage temporarily unavailable"})


@app.get("/health")
def health():
    try:
        redis_ok = bool(redis_client.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        redis_ok = False
    return {"status": "ok", "redis": redis_ok}

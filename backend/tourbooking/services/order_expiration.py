"""
Pending order expiration.

Orders left in `pending` longer than order_expiration_minutes are marked
`expired`. Can be triggered manually (POST /admin/expire-orders) or run
periodically as an asyncio task in the backend lifespan.
Uses synchronous DB (via asyncio.to_thread).

Instance attendant counters are not released: instances only accumulate.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import SessionLocal
from ..models.generated import Orders
from .events import emit_event

logger = logging.getLogger(__name__)


def expire_pending_orders(
    db: Session,
    now: Optional[datetime] = None,
    expiration_minutes: Optional[int] = None,
) -> dict:
    """
    Expire pending orders created before now - expiration_minutes.

    Each order is committed on its own; a failure on one order is
    logged and counted without stopping the sweep.

    Returns:
        {"expired": int, "errors": int}
    """
    now = now or datetime.utcnow()
    if expiration_minutes is None:
        expiration_minutes = settings.order_expiration_minutes

    threshold = (now - timedelta(minutes=expiration_minutes)).strftime("%Y-%m-%d %H:%M:%S")

    orders = (
        db.query(Orders)
        .filter(
            Orders.status == "pending",
            Orders.created_at < threshold,
        )
        .all()
    )

    if not orders:
        logger.debug("No expired orders found")
        return {"expired": 0, "errors": 0}

    logger.info(f"Found {len(orders)} expired order(s)")

    expired = 0
    errors = 0
    for order in orders:
        order_number = order.order_number
        try:
            order.status = "expired"
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            errors += 1
            logger.exception(f"Error expiring order {order_number}")
            continue

        expired += 1
        logger.info(f"Expired order {order_number} (ID: {order.id})")
        emit_event("order_expired", {"order_number": order_number})

    return {"expired": expired, "errors": errors}


async def order_expiration_loop() -> None:
    """Periodic loop expiring stale pending orders."""
    logger.info("order_expiration_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(_run_expiration_sweep)
            except asyncio.CancelledError:
                logger.info("order_expiration_loop cancelled")
                raise
            except Exception:
                logger.exception("order_expiration_loop error")

            await asyncio.sleep(settings.expiration_check_interval)
    except asyncio.CancelledError:
        pass


def _run_expiration_sweep() -> None:
    db = SessionLocal()
    try:
        expire_pending_orders(db)
    finally:
        db.close()

# backend/tourbooking/services/orders.py
"""
Order creation for tour instances.

The availability engine is advisory; this module is where capacity is
actually reserved. The instance row is locked (SELECT ... FOR UPDATE)
and capacity is re-checked inside the same transaction before the
attendant counter is incremented.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import (
    BookingConflict,
    BookingRejected,
    InsufficientCapacity,
    OrderNotFound,
    SlotUnavailable,
    TourNotFound,
)
from ..models.generated import (
    Orders as DBOrder,
    TourInstances as DBTourInstance,
    Tours as DBTour,
)
from ..schemas.orders import OrderCreate
from .events import emit_event
from .generators import generate_order_number
from .pricing import PricingConfig, calc_order_total, get_pricing_config
from .slots.availability import is_slot_available
from .slots.config import (
    BookingConfig,
    get_booking_config,
    normalize_time_str,
    time_str_to_minutes,
)

logger = logging.getLogger(__name__)

SUNDAY = 6


def create_order(
    db: Session,
    data: OrderCreate,
    booking_config: Optional[BookingConfig] = None,
    pricing_config: Optional[PricingConfig] = None,
    skip_payment: bool = False,
) -> DBOrder:
    """
    Create an order and reserve places on the matching tour instance.

    Algorithm:
    1. Validate tour (exists, active) and booking rules
    2. Check the start time against current availability
    3. Lock or create the instance: (tour, date) for exclusive tours,
       (tour, date, time) otherwise
    4. Re-check capacity under the lock
    5. Create order, increment current_attendants, commit

    Raises:
        TourNotFound, BookingRejected, SlotUnavailable,
        InsufficientCapacity, BookingConflict
    """
    booking_config = booking_config or get_booking_config()
    pricing_config = pricing_config or get_pricing_config()

    # Step 1: Tour and booking rules
    tour = db.get(DBTour, data.tour_id)
    if not tour or not tour.is_active:
        raise TourNotFound(data.tour_id)

    _validate_booking_rules(tour, data)
    start_time = normalize_time_str(data.time)

    # Step 2: Availability
    if not is_slot_available(db, data.date, tour.id, start_time, booking_config):
        raise SlotUnavailable(
            f"{start_time} on {data.date.isoformat()} is not available for this tour"
        )

    # Step 3-5: Reserve under lock
    try:
        instance = _lock_or_create_instance(db, tour, data.date.isoformat(), start_time, booking_config)

        if instance.current_attendants + data.attendees_count > tour.max_attendants:
            available = max(tour.max_attendants - instance.current_attendants, 0)
            db.rollback()
            raise InsufficientCapacity(available)

        total_amount = calc_order_total(tour.base_price, data.attendees_count, pricing_config)

        order = DBOrder(
            order_number=generate_order_number(),
            tour_instance_id=instance.id,
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            customer_phone=data.customer_phone,
            attendees_count=data.attendees_count,
            total_amount=total_amount,
            status="confirmed" if skip_payment else "pending",
        )
        db.add(order)
        instance.current_attendants += data.attendees_count
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Booking conflict for tour={tour.id} date={data.date} time={start_time}: {e}")
        raise BookingConflict("A booking conflict occurred. Please try again.") from e

    db.refresh(order)

    logger.info(
        f"Order created: order={order.order_number}, tour={tour.id}, "
        f"instance={instance.id}, time={data.date.isoformat()} {start_time}, "
        f"attendees={data.attendees_count}, total={total_amount:.2f}"
    )

    emit_event("order_created", {
        "order_number": order.order_number,
        "tour_id": tour.id,
        "tour_instance_id": instance.id,
        "attendees_count": order.attendees_count,
        "status": order.status,
    })

    return order


def get_order_by_number(db: Session, order_number: str) -> DBOrder:
    order = db.query(DBOrder).filter(DBOrder.order_number == order_number).first()
    if not order:
        raise OrderNotFound(order_number)
    return order


def confirm_order(db: Session, order_number: str) -> DBOrder:
    """Mark a pending order as confirmed (payment settled)."""
    order = get_order_by_number(db, order_number)
    if order.status != "pending":
        raise BookingRejected(f"Order {order_number} is {order.status}, only pending orders can be confirmed")

    order.status = "confirmed"
    db.commit()
    db.refresh(order)

    logger.info(f"Order confirmed: order={order_number}")
    emit_event("order_confirmed", {"order_number": order_number})
    return order


def cancel_order(db: Session, order_number: str) -> DBOrder:
    """
    Cancel a pending order and give its places back to the instance.

    Raises:
        OrderNotFound: unknown order number
        BookingRejected: order is confirmed, already cancelled or expired
    """
    order = get_order_by_number(db, order_number)
    if order.status == "confirmed":
        raise BookingRejected("Cannot cancel a confirmed order")
    if order.status in ("cancelled", "expired"):
        raise BookingRejected("Order is already cancelled or expired")

    instance = (
        db.query(DBTourInstance)
        .filter(DBTourInstance.id == order.tour_instance_id)
        .with_for_update()
        .first()
    )
    if instance:
        instance.current_attendants = max(instance.current_attendants - order.attendees_count, 0)

    order.status = "cancelled"
    db.commit()
    db.refresh(order)

    logger.info(f"Order cancelled: order={order_number}, released={order.attendees_count}")
    emit_event("order_cancelled", {
        "order_number": order_number,
        "tour_instance_id": order.tour_instance_id,
        "attendees_count": order.attendees_count,
    })
    return order


def list_orders(db: Session, status: Optional[str] = None) -> list[DBOrder]:
    """All orders, newest first. Optionally filtered by status."""
    query = db.query(DBOrder)
    if status:
        query = query.filter(DBOrder.status == status)
    return query.order_by(DBOrder.created_at.desc(), DBOrder.id.desc()).all()


def list_orders_by_email(db: Session, email: str) -> list[DBOrder]:
    """Orders of one customer, newest first. Emails are stored lower-cased."""
    return (
        db.query(DBOrder)
        .filter(DBOrder.customer_email == email.strip().lower())
        .order_by(DBOrder.created_at.desc(), DBOrder.id.desc())
        .all()
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _validate_booking_rules(tour: DBTour, data: OrderCreate) -> None:
    if data.attendees_count < tour.min_attendants:
        raise BookingRejected(f"Minimum {tour.min_attendants} attendants required for this tour")

    if tour.tour_type == "Standard" and data.date.weekday() == SUNDAY:
        raise BookingRejected("Standard tours are only available Mon-Sat")

    start_min = time_str_to_minutes(data.time)
    if not (
        time_str_to_minutes(tour.earliest_hour)
        <= start_min
        <= time_str_to_minutes(tour.latest_hour)
    ):
        raise BookingRejected(
            f"Time must be between {tour.earliest_hour} and {tour.latest_hour}"
        )


def _lock_or_create_instance(
    db: Session,
    tour: DBTour,
    date_str: str,
    start_time: str,
    config: BookingConfig,
) -> DBTourInstance:
    """Get the instance for this booking with a row lock, creating it if missing."""
    exclusive = config.is_exclusive(tour.tour_type)
    instance = _find_locked_instance(db, tour, date_str, start_time, exclusive)
    if instance:
        return instance

    instance = DBTourInstance(
        tour_id=tour.id,
        instance_date=date_str,
        start_time=start_time,
        current_attendants=0,
        status="active",
        is_exclusive=1 if exclusive else 0,
    )
    db.add(instance)
    db.flush()
    logger.info(f"Tour instance created: tour={tour.id}, date={date_str}, time={start_time}")
    return instance


def _find_locked_instance(
    db: Session,
    tour: DBTour,
    date_str: str,
    start_time: str,
    exclusive: bool,
) -> Optional[DBTourInstance]:
    query = db.query(DBTourInstance).filter(
        DBTourInstance.tour_id == tour.id,
        DBTourInstance.instance_date == date_str,
        DBTourInstance.status == "active",
    )
    # Exclusive tours run once per day; any start time joins the same instance
    if not exclusive:
        query = query.filter(DBTourInstance.start_time == start_time)

    return query.with_for_update().first()

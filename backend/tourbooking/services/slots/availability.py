# backend/tourbooking/services/slots/availability.py
"""
Tour availability for a specific date.

Resolves the tour, the holiday calendar and the instance ledger, then
hands plain values to the engine. Read-only: nothing is reserved here.
The order flow re-validates capacity under a row lock before writing,
so a slot reported here may be gone by the time a booking commits.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from ...errors import TourNotFound
from .config import BookingConfig, get_booking_config, normalize_time_str
from .engine import SlotOutcome, evaluate_slots
from .ledger import (
    get_tour,
    is_holiday,
    list_instances_for_date,
    to_instance_info,
    to_tour_info,
)

logger = logging.getLogger(__name__)


def check_slot_availability(
    db: Session,
    target_date: date,
    tour_id: int,
    config: BookingConfig | None = None,
) -> SlotOutcome:
    """
    Calculate available start times for a tour on a date.

    Raises:
        TourNotFound: tour_id does not resolve to an active tour.

    Returns:
        SlotOutcome (times + reason when empty).
    """
    config = config or get_booking_config()

    # Step 1: Get tour
    tour = get_tour(db, tour_id)
    if not tour or not tour.is_active:
        raise TourNotFound(tour_id)

    # Step 2: Holiday blackout, short-circuit before the ledger query
    if is_holiday(db, target_date):
        outcome = evaluate_slots(to_tour_info(tour), [], True, config)
    else:
        # Step 3: All instances on the date, of every tour
        instances = [to_instance_info(i) for i in list_instances_for_date(db, target_date)]
        outcome = evaluate_slots(to_tour_info(tour), instances, False, config)

    logger.debug(
        f"Slots for tour={tour_id} date={target_date.isoformat()}: "
        f"{len(outcome.times)} available"
        + (f" ({outcome.reason.value})" if outcome.reason else "")
    )
    return outcome


def get_available_slots(
    db: Session,
    target_date: date,
    tour_id: int,
    config: BookingConfig | None = None,
) -> list[str]:
    """Ordered list of bookable "HH:MM:SS" start times. Empty = no slots."""
    return list(check_slot_availability(db, target_date, tour_id, config).times)


def is_slot_available(
    db: Session,
    target_date: date,
    tour_id: int,
    time_str: str,
    config: BookingConfig | None = None,
) -> bool:
    """Whether a given start time ("HH:MM" or "HH:MM:SS") is bookable."""
    return normalize_time_str(time_str) in get_available_slots(db, target_date, tour_id, config)

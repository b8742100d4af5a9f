# backend/tourbooking/services/slots/ledger.py
"""
Database lookups consumed by the slot engine.

- holiday lookup:   is_holiday(date)
- tour catalog:     get_tour(tour_id)
- instance ledger:  list_instances_for_date(date), joined with the tour
"""

from datetime import date

from sqlalchemy.orm import Session, joinedload

from ...models.generated import Holidays, TourInstances, Tours
from .engine import InstanceInfo, TourInfo


def is_holiday(db: Session, target_date: date) -> bool:
    """Whether target_date is a blackout date."""
    return (
        db.query(Holidays.id)
        .filter(Holidays.holiday_date == target_date.isoformat())
        .first()
        is not None
    )


def get_tour(db: Session, tour_id: int) -> Tours | None:
    """Get tour by ID."""
    return db.get(Tours, tour_id)


def list_instances_for_date(db: Session, target_date: date) -> list[TourInstances]:
    """Get active instances of every tour on target_date, with their tour loaded."""
    return (
        db.query(TourInstances)
        .options(joinedload(TourInstances.tour))
        .filter(
            TourInstances.instance_date == target_date.isoformat(),
            TourInstances.status == "active",
        )
        .order_by(TourInstances.start_time, TourInstances.id)
        .all()
    )


def to_tour_info(tour: Tours) -> TourInfo:
    return TourInfo(
        id=tour.id,
        tour_type=tour.tour_type,
        earliest_hour=tour.earliest_hour,
        latest_hour=tour.latest_hour,
        duration_minutes=tour.duration_minutes,
        max_attendants=tour.max_attendants,
        buffer_minutes=tour.buffer_minutes,
    )


def to_instance_info(instance: TourInstances) -> InstanceInfo:
    return InstanceInfo(
        tour_id=instance.tour_id,
        start_time=instance.start_time,
        current_attendants=instance.current_attendants,
        tour=to_tour_info(instance.tour),
    )

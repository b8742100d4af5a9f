# backend/tourbooking/routers/tours.py
"""
Tours API endpoints.

GET /tours/slots                - bookable start times (plain list)
GET /tours/{id}/availability    - start times with reason and instance capacity
"""

from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import TourNotFound
from ..models.generated import Tours as DBTours
from ..schemas.slots import InstanceCapacity, TourAvailabilityResponse
from ..schemas.tours import TourRead
from ..services.slots import check_slot_availability, get_available_slots, get_booking_config
from ..services.slots.ledger import list_instances_for_date

router = APIRouter(prefix="/tours", tags=["tours"])


@router.get("/", response_model=list[TourRead])
def list_tours(db: Session = Depends(get_db)):
    return (
        db.query(DBTours)
        .filter(DBTours.is_active == 1)
        .order_by(DBTours.id)
        .all()
    )


@router.get("/slots", response_model=list[str])
def get_tour_slots(
    tour_id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Available start times ("HH:MM:SS") for a tour on a date."""
    try:
        return get_available_slots(db, target_date, tour_id, get_booking_config())
    except TourNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{id}", response_model=TourRead)
def get_tour(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBTours, id)
    if not obj or not obj.is_active:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/{id}/availability", response_model=TourAvailabilityResponse)
def get_tour_availability(
    id: int,
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Available start times with the reason when empty, plus this tour's instances."""
    try:
        outcome = check_slot_availability(db, target_date, id, get_booking_config())
    except TourNotFound as e:
        raise HTTPException(status_code=404, detail=e.message)

    instances = [
        InstanceCapacity(
            start_time=inst.start_time,
            current_attendants=inst.current_attendants,
            max_attendants=inst.tour.max_attendants,
            remaining=max(inst.tour.max_attendants - inst.current_attendants, 0),
        )
        for inst in list_instances_for_date(db, target_date)
        if inst.tour_id == id
    ]

    return TourAvailabilityResponse(
        tour_id=id,
        date=target_date,
        available_times=list(outcome.times),
        reason=outcome.reason.value if outcome.reason else None,
        instances=instances,
    )

# backend/tourbooking/schemas/slots.py
"""
Pydantic schemas for slots API.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class InstanceCapacity(BaseModel):
    """Existing instance of the tour on the requested date."""
    start_time: str  # "HH:MM:SS"
    current_attendants: int
    max_attendants: int
    remaining: int

    model_config = {"from_attributes": True}


class TourAvailabilityResponse(BaseModel):
    """Available start times plus the reason when there are none."""
    tour_id: int
    date: date
    available_times: list[str]
    reason: Optional[str] = Field(
        None,
        description="holiday / day_locked / fully_booked / no_capacity; null when times are available",
    )
    instances: list[InstanceCapacity] = []

    model_config = {"from_attributes": True}

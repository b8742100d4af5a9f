# backend/tourbooking/schemas/tours.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class TourRead(BaseModel):
    id: int

    name: str
    description: Optional[str] = None
    location: Optional[str] = None
    tour_type: str

    base_price: float
    min_attendants: int
    max_attendants: int

    duration_minutes: int
    buffer_minutes: Optional[int] = None
    earliest_hour: str
    latest_hour: str

    is_active: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

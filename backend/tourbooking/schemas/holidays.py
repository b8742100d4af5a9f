# backend/tourbooking/schemas/holidays.py

from datetime import date
from typing import Optional
from pydantic import BaseModel


class HolidayCreate(BaseModel):
    holiday_date: date
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class HolidayRead(BaseModel):
    id: int
    holiday_date: date
    description: Optional[str] = None

    model_config = {"from_attributes": True}

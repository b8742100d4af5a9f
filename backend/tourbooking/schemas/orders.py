# backend/tourbooking/schemas/orders.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


class OrderCreate(BaseModel):
    tour_id: int = Field(gt=0)
    date: date
    time: str = Field(description="Start time in H:MM, HH:MM or HH:MM:SS format")
    attendees_count: int = Field(ge=1)

    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: Optional[str] = Field(None, max_length=50)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time format."""
        if not _TIME_RE.match(v):
            raise ValueError("Time must be in HH:MM or HH:MM:SS (24-hour) format")
        return v

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Customer name is required")
        return v

    @field_validator("customer_email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.lower()


class OrderRead(BaseModel):
    id: int
    order_number: str
    tour_instance_id: int

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None

    attendees_count: int
    total_amount: float
    status: str

    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ExpireOrdersResponse(BaseModel):
    expired: int
    errors: int

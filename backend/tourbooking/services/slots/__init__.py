# backend/tourbooking/services/slots/__init__.py
"""
Slot availability module.

engine:       pure decision rules (holiday, day-lock, buffer collisions)
ledger:       database lookups feeding the engine
availability: query entry points used by routers and the order flow
"""

from .config import BookingConfig, get_booking_config
from .engine import (
    InstanceInfo,
    SlotOutcome,
    TourInfo,
    UnavailableReason,
    evaluate_slots,
)
from .availability import (
    check_slot_availability,
    get_available_slots,
    is_slot_available,
)

__all__ = [
    "BookingConfig",
    "get_booking_config",
    "InstanceInfo",
    "SlotOutcome",
    "TourInfo",
    "UnavailableReason",
    "evaluate_slots",
    "check_slot_availability",
    "get_available_slots",
    "is_slot_available",
]

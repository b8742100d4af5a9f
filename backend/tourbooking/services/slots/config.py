# backend/tourbooking/services/slots/config.py
"""
Booking configuration for slots calculation.
"""

from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class BookingConfig:
    """
    Configuration for the slot availability engine.

    Attributes:
        slot_step_minutes: Candidate grid step in minutes (15/30/60)
        default_buffer_minutes: Buffer used when a tour has none configured
        exclusive_tour_types: Tour types that lock the whole day
        exclusive_requires_empty_day: Policy switch; when set, an exclusive
            tour cannot be scheduled on a date that already has any instance
    """
    slot_step_minutes: int = 30  # 15 / 30 / 60
    default_buffer_minutes: int = 60
    exclusive_tour_types: frozenset[str] = frozenset({"Special", "option_3"})
    exclusive_requires_empty_day: bool = False

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes not in (15, 30, 60):
            raise ValueError(f"slot_step_minutes must be 15, 30, or 60, got {self.slot_step_minutes}")
        if self.default_buffer_minutes < 0:
            raise ValueError(f"default_buffer_minutes must be >= 0, got {self.default_buffer_minutes}")

    def is_exclusive(self, tour_type: str) -> bool:
        return tour_type in self.exclusive_tour_types


@lru_cache
def get_booking_config() -> BookingConfig:
    """Get booking configuration (singleton), built from settings."""
    from ...config import settings

    return BookingConfig(
        slot_step_minutes=settings.slot_step_minutes,
        default_buffer_minutes=settings.default_buffer_minutes,
        exclusive_requires_empty_day=settings.exclusive_requires_empty_day,
    )


# ── Time helpers ─────────────────────────────────────────────────────────


def time_str_to_minutes(time_str: str) -> int:
    """Convert "HH:MM" or "HH:MM:SS" to minutes since midnight (seconds dropped)."""
    parts = time_str.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time string: {time_str!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Invalid time string: {time_str!r}")
    return hour * 60 + minute


def minutes_to_time_str(minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM:SS"."""
    hour, minute = divmod(minutes, 60)
    return f"{hour:02d}:{minute:02d}:00"


def normalize_time_str(time_str: str) -> str:
    """"9:30" / "09:30" / "09:30:00" → "09:30:00"."""
    return minutes_to_time_str(time_str_to_minutes(time_str))

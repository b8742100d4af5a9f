# backend/tourbooking/services/slots/engine.py
"""
Slot decision rules for a single tour on a single date.

Pure functions over plain values; no database access. Rules, in order:

1. Holiday       → nothing is bookable.
2. Day-lock      → an exclusive (Special / option_3) instance on the date
                   owns the whole day. Only that instance can be joined,
                   and only while it has free places.
3. Candidates    → earliest_hour .. latest_hour inclusive, fixed step.
4. Collisions    → every instance on the date blocks the open window
                   (start − (duration + buffer), start + (duration + buffer)).
                   Exact start of a same-tour instance = join, allowed
                   while the instance is not full.

Times are "HH:MM:SS" strings on the way in and out, minutes internally.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .config import BookingConfig, minutes_to_time_str, time_str_to_minutes


class UnavailableReason(str, Enum):
    HOLIDAY = "holiday"
    DAY_LOCKED = "day_locked"       # exclusive instance of another tour, or policy
    FULLY_BOOKED = "fully_booked"   # day-locking instance of this tour is full
    NO_CAPACITY = "no_capacity"     # every candidate collides or is full


@dataclass(frozen=True)
class TourInfo:
    id: int
    tour_type: str
    earliest_hour: str
    latest_hour: str
    duration_minutes: int
    max_attendants: int
    buffer_minutes: Optional[int] = None


@dataclass(frozen=True)
class InstanceInfo:
    tour_id: int
    start_time: str
    current_attendants: int
    tour: TourInfo

    @property
    def is_full(self) -> bool:
        return self.current_attendants >= self.tour.max_attendants

    @property
    def remaining(self) -> int:
        return max(self.tour.max_attendants - self.current_attendants, 0)


@dataclass(frozen=True)
class SlotOutcome:
    times: tuple[str, ...]
    reason: Optional[UnavailableReason] = None

    @property
    def available(self) -> bool:
        return bool(self.times)


def evaluate_slots(
    tour: TourInfo,
    instances: Sequence[InstanceInfo],
    is_holiday: bool,
    config: BookingConfig,
) -> SlotOutcome:
    """
    Decide bookable start times for `tour`.

    Args:
        tour: Requested tour
        instances: All active instances on the date, of every tour
        is_holiday: Whether the date is a blackout date
        config: Engine configuration

    Returns:
        SlotOutcome with times in increasing order; `reason` is set
        only when no time is available.
    """
    # Step 1: Holiday blackout
    if is_holiday:
        return SlotOutcome((), UnavailableReason.HOLIDAY)

    # Step 2: Day-lock by an existing exclusive instance
    locking = find_day_lock(instances, config)
    if locking is not None:
        if locking.tour_id != tour.id:
            return SlotOutcome((), UnavailableReason.DAY_LOCKED)
        if locking.is_full:
            return SlotOutcome((), UnavailableReason.FULLY_BOOKED)
        return SlotOutcome((locking.start_time,))

    if (
        config.exclusive_requires_empty_day
        and config.is_exclusive(tour.tour_type)
        and instances
    ):
        return SlotOutcome((), UnavailableReason.DAY_LOCKED)

    # Step 3 + 4: Candidates minus collisions
    times = tuple(
        minutes_to_time_str(candidate)
        for candidate in generate_candidate_times(tour, config)
        if _is_candidate_free(candidate, tour.id, instances, config)
    )
    if not times:
        return SlotOutcome((), UnavailableReason.NO_CAPACITY)
    return SlotOutcome(times)


def find_day_lock(
    instances: Sequence[InstanceInfo],
    config: BookingConfig,
) -> Optional[InstanceInfo]:
    """First exclusive-type instance on the date, if any."""
    for instance in instances:
        if config.is_exclusive(instance.tour.tour_type):
            return instance
    return None


def generate_candidate_times(tour: TourInfo, config: BookingConfig) -> list[int]:
    """Candidate start minutes from earliest_hour to latest_hour inclusive."""
    start = time_str_to_minutes(tour.earliest_hour)
    end = time_str_to_minutes(tour.latest_hour)
    return list(range(start, end + 1, config.slot_step_minutes))


def collision_window(instance: InstanceInfo, config: BookingConfig) -> tuple[int, int]:
    """
    Exclusion window of an instance in minutes: (lower, upper), open interval.

    Example: start 11:00, duration 60, buffer 60 → (09:00, 13:00).
    """
    buffer = instance.tour.buffer_minutes
    if buffer is None:
        buffer = config.default_buffer_minutes
    offset = instance.tour.duration_minutes + buffer
    start = time_str_to_minutes(instance.start_time)
    return start - offset, start + offset


def _is_candidate_free(
    candidate: int,
    tour_id: int,
    instances: Sequence[InstanceInfo],
    config: BookingConfig,
) -> bool:
    blocked = False
    for instance in instances:
        lower, upper = collision_window(instance, config)
        if not (lower < candidate < upper):
            continue
        if instance.tour_id == tour_id and candidate == time_str_to_minutes(instance.start_time):
            # Join of an existing instance: its capacity decides
            return not instance.is_full
        blocked = True
    return not blocked

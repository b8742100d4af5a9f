# backend/tourbooking/errors.py
"""
Domain errors raised by the service layer.

Routers translate these into HTTP responses. "No slots" outcomes are
not errors: they are returned as empty results with a reason.
"""


class BookingError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingError):
    pass


class TourNotFound(NotFoundError):
    def __init__(self, tour_id: int):
        super().__init__(f"Tour {tour_id} not found")
        self.tour_id = tour_id


class OrderNotFound(NotFoundError):
    def __init__(self, order_number: str):
        super().__init__(f"Order {order_number} not found")
        self.order_number = order_number


class BookingRejected(BookingError):
    """Request violates a tour booking rule (min attendants, weekday, hours)."""


class SlotUnavailable(BookingError):
    """Requested start time is not among the available slots."""


class InsufficientCapacity(BookingError):
    def __init__(self, available: int):
        super().__init__(f"Not enough capacity. Only {available} places available.")
        self.available = available


class BookingConflict(BookingError):
    """Concurrent write hit a uniqueness constraint."""

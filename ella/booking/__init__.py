"""Booking package exports."""

from .base import BookingCreator, BookingResult, FinalizedBooking
from .memory import InMemoryBookingCreator

__all__ = [
    "BookingCreator",
    "BookingResult",
    "FinalizedBooking",
    "InMemoryBookingCreator",
]

"""In-process booking creator used by default and in tests."""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Any

from ella.booking.base import BookingCreator, BookingResult, FinalizedBooking

logger = logging.getLogger("ella.booking")

REQUIRED_FIELDS = ("serviceType", "date", "totalAmount")


class InMemoryBookingCreator(BookingCreator):
    """Store booking records in a list, numbering them bkg001, bkg002, ..."""

    def __init__(self, prefix: str = "bkg", padding: int = 3) -> None:
        self._prefix = prefix
        self._padding = padding
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._records: list[dict[str, Any]] = []

    @property
    def records(self) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._records)

    async def create(self, booking: FinalizedBooking) -> BookingResult:
        payload = booking.to_payload()
        missing = [key for key in REQUIRED_FIELDS if payload.get(key) is None]
        if missing:
            logger.warning("Rejected booking missing %s", ", ".join(missing))
            return BookingResult(
                success=False,
                detail=f"Missing required booking fields: {', '.join(missing)}",
            )

        with self._lock:
            booking_id = f"{self._prefix}{next(self._counter):0{self._padding}d}"
            record = {"id": booking_id, **payload}
            self._records.append(record)

        logger.info("Booking %s created for %s", booking_id, payload["serviceType"])
        return BookingResult(success=True, booking_id=booking_id)

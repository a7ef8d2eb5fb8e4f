"""Booking handoff contract between the dialogue and booking storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from ella.dialogue.types import Draft
from ella.pricing import PriceBreakdown


@dataclass(frozen=True, slots=True)
class FinalizedBooking:
    """A confirmed draft together with its computed totals."""

    draft: Draft
    totals: PriceBreakdown

    def to_dict(self) -> dict[str, Any]:
        return {"draft": self.draft.to_dict(), "totals": self.totals.to_dict()}

    def to_payload(self) -> dict[str, Any]:
        """Flatten into the record shape the bookings store expects."""

        draft = self.draft
        is_guest = draft.account_type != "login"
        quantities = dict(draft.room_quantities or {})
        return {
            "guestName": draft.name if is_guest else None,
            "guestEmail": draft.email if is_guest else None,
            "guestPhone": draft.phone if is_guest else None,
            "serviceType": draft.service_type,
            "propertyType": draft.property_type,
            "bedrooms": draft.bedrooms or 0,
            "bathrooms": draft.bathrooms or 0,
            "rooms": {room: quantities.get(room, 1) for room in draft.rooms},
            "addOns": [
                {"name": add_on.name, "price": add_on.price} for add_on in draft.add_ons
            ],
            "date": draft.date,
            "time": draft.time,
            "frequency": draft.frequency or "One-time",
            "specialInstructions": draft.special_instructions or "",
            "hasPet": bool(draft.has_pet),
            "petDetails": {"types": list(draft.selected_pets), "present": bool(draft.pet_present)},
            "paymentMethod": draft.payment_method,
            "tipAmount": self.totals.tip,
            "totalAmount": self.totals.total,
            "status": "PENDING",
        }


@dataclass(slots=True)
class BookingResult:
    """Outcome reported by a booking creator."""

    success: bool
    booking_id: str | None = None
    detail: str = ""


class BookingCreator(ABC):
    """Persists confirmed bookings on behalf of the dialogue."""

    @abstractmethod
    async def create(self, booking: FinalizedBooking) -> BookingResult:
        """Persist ``booking``. May raise; callers treat failures as non-fatal."""

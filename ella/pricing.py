"""Booking price computation.

Everything here is a pure function of the draft it is given: no I/O and no
hidden state, so the same draft always prices the same way.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ella.dialogue.types import Draft

FREQUENCY_DISCOUNTS: dict[str, float] = {
    "weekly": 0.10,
    "bi-weekly": 0.05,
    "monthly": 0.15,
}

TIP_PRESETS: tuple[int, ...] = (10, 15, 20)


@dataclass(frozen=True, slots=True)
class PriceBreakdown:
    base_price: float
    add_ons_total: float
    discount: float
    tip: float
    total: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def discount_rate(frequency: str | None) -> float:
    """Return the discount rate for a cleaning cadence (0.0 for one-time or unknown)."""

    if not frequency:
        return 0.0
    return FREQUENCY_DISCOUNTS.get(frequency.strip().lower(), 0.0)


def tip_for_percent(service_price: float | None, percent: int) -> float:
    """Tip presets are a percentage of the undiscounted service price."""

    return (service_price or 0) * percent / 100


def compute_total(draft: Draft) -> PriceBreakdown:
    base_price = draft.service_price or 0
    if base_price < 0:
        raise ValueError(f"service price cannot be negative: {base_price}")

    add_ons_total = sum(add_on.price for add_on in draft.add_ons)
    subtotal = base_price + add_ons_total
    discount = subtotal * discount_rate(draft.frequency)
    tip = draft.tip_amount or 0

    return PriceBreakdown(
        base_price=base_price,
        add_ons_total=add_ons_total,
        discount=discount,
        tip=tip,
        total=subtotal - discount + tip,
    )

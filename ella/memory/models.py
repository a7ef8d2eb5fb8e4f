"""Dataclasses representing transcript messages and their attachments."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class QuickReply:
    """Pre-canned reply: ``label`` is displayed, ``value`` is what gets matched."""

    label: str
    value: str


@dataclass(frozen=True, slots=True)
class ServiceCard:
    name: str
    description: str
    price: float
    duration: str


@dataclass(frozen=True, slots=True)
class BookingSummary:
    service: str
    date: str
    time: str
    property: str
    total: float


@dataclass(frozen=True, slots=True)
class Message:
    """Single transcript entry. Never mutated once appended."""

    id: int
    role: Role
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    quick_replies: tuple[QuickReply, ...] = ()
    service_card: ServiceCard | None = None
    booking_summary: BookingSummary | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
            "quick_replies": [{"label": qr.label, "value": qr.value} for qr in self.quick_replies],
            "service_card": _attachment_dict(self.service_card),
            "booking_summary": _attachment_dict(self.booking_summary),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        card = data.get("service_card")
        summary = data.get("booking_summary")
        return cls(
            id=int(data["id"]),
            role=Role(data["role"]),
            text=data["text"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            quick_replies=tuple(QuickReply(**qr) for qr in data.get("quick_replies") or ()),
            service_card=ServiceCard(**card) if card else None,
            booking_summary=BookingSummary(**summary) if summary else None,
        )


def _attachment_dict(attachment: ServiceCard | BookingSummary | None) -> dict[str, Any] | None:
    if attachment is None:
        return None
    return asdict(attachment)

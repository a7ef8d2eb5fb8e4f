"""Dialogue enums and immutable data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Mapping

from ella.memory.models import BookingSummary, QuickReply, ServiceCard


class Step(str, Enum):
    """Conversation stages, declared in flow order."""

    IDLE = "idle"
    ACCOUNT = "account"
    LOGIN = "login"
    SERVICE = "service"
    PROPERTY_TYPE = "property-type"
    BEDROOMS = "bedrooms"
    BATHROOMS = "bathrooms"
    ROOMS = "rooms"
    ROOM_QUANTITIES = "room-quantities"
    ADDONS = "addons"
    DATE = "date"
    TIME = "time"
    FREQUENCY = "frequency"
    PETS = "pets"
    PET_SELECTION = "pet-selection"
    PET_PRESENT = "pet-present"
    SPECIAL_INSTRUCTIONS = "special-instructions"
    PAYMENT = "payment"
    TIP = "tip"
    CONFIRM = "confirm"


class Intent(str, Enum):
    """What a single user input means at the step it was received in."""

    # idle
    BOOK = "book"
    QUESTION = "question"
    PRICING = "pricing"
    AVAILABILITY = "availability"
    CANCELLATION_POLICY = "cancellation_policy"
    HOURS = "hours"
    PRODUCTS = "products"

    # account
    LOGIN = "login"
    CREATE_ACCOUNT = "create_account"
    GUEST = "guest"

    # service
    STANDARD_CLEANING = "standard_cleaning"
    DEEP_CLEANING = "deep_cleaning"
    MOVE_CLEANING = "move_cleaning"

    # add-ons
    ADD_WINDOWS = "add_windows"
    ADD_FRIDGE = "add_fridge"
    ADD_OVEN = "add_oven"
    ADD_LAUNDRY = "add_laundry"

    # date / time
    TOMORROW = "tomorrow"
    THIS_WEEKEND = "this_weekend"
    NEXT_WEEK = "next_week"
    SPECIFIC_DATE = "specific_date"
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"

    # frequency
    ONE_TIME = "one_time"
    BI_WEEKLY = "bi_weekly"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    # tip
    TIP_10 = "tip_10"
    TIP_15 = "tip_15"
    TIP_20 = "tip_20"

    # shared
    DONE = "done"
    YES = "yes"
    NO = "no"
    CONFIRM = "confirm"
    MAKE_CHANGES = "make_changes"
    NUMBER = "number"
    FREE_TEXT = "free_text"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class AddOn:
    name: str
    price: float


@dataclass(frozen=True, slots=True)
class Draft:
    """Booking data accumulated across a conversation.

    Instances are never mutated; reducers build a new draft with
    ``dataclasses.replace``. Collections are tuples so that a draft handed to
    a caller cannot be changed behind the session's back.
    """

    account_type: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    password: str | None = None
    service_type: str | None = None
    service_price: float | None = None
    property_type: str | None = None
    bedrooms: int | None = None
    bathrooms: float | None = None
    rooms: tuple[str, ...] = ()
    room_quantities: Mapping[str, int] | None = None
    current_room_for_quantity: str | None = None
    add_ons: tuple[AddOn, ...] = ()
    date: str | None = None
    time: str | None = None
    frequency: str | None = None
    has_pet: bool | None = None
    selected_pets: tuple[str, ...] = ()
    pet_present: bool | None = None
    special_instructions: str | None = None
    payment_method: str | None = None
    tip_amount: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["rooms"] = list(self.rooms)
        quantities = self.room_quantities
        data["room_quantities"] = dict(quantities) if quantities is not None else None
        data["add_ons"] = [{"name": add_on.name, "price": add_on.price} for add_on in self.add_ons]
        data["selected_pets"] = list(self.selected_pets)
        return data


@dataclass(frozen=True, slots=True)
class ConversationState:
    step: Step = Step.IDLE
    draft: Draft = field(default_factory=Draft)


@dataclass(frozen=True, slots=True)
class Reply:
    """Outbound assistant content produced by one transition."""

    text: str
    quick_replies: tuple[QuickReply, ...] = ()
    service_card: ServiceCard | None = None
    booking_summary: BookingSummary | None = None

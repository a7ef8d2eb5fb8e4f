"""Fixed service catalogue, canned replies and quick-reply sets."""

from __future__ import annotations

from dataclasses import dataclass

from ella.dialogue.types import AddOn, Intent
from ella.memory.models import QuickReply, ServiceCard
from ella.pricing import TIP_PRESETS, tip_for_percent


@dataclass(frozen=True, slots=True)
class Service:
    name: str
    price: float
    duration: str
    description: str
    confirmation: str

    def card(self) -> ServiceCard:
        return ServiceCard(
            name=self.name,
            description=self.description,
            price=self.price,
            duration=self.duration,
        )


SERVICES: dict[Intent, Service] = {
    Intent.STANDARD_CLEANING: Service(
        name="Standard Cleaning",
        price=89,
        duration="2 hrs",
        description="Routine dusting, vacuuming, mopping, kitchen and bathroom wipe-down.",
        confirmation="Perfect choice! Standard Cleaning selected.",
    ),
    Intent.DEEP_CLEANING: Service(
        name="Deep Cleaning",
        price=159,
        duration="3-4 hrs",
        description="Top-to-bottom clean including baseboards, fixtures and built-up grime.",
        confirmation="Excellent! Deep Cleaning selected.",
    ),
    Intent.MOVE_CLEANING: Service(
        name="Move In/Out Cleaning",
        price=249,
        duration="5-6 hrs",
        description="Empty-home clean inside cabinets, closets and appliances.",
        confirmation="Great choice! Move In/Out Cleaning selected.",
    ),
}

ADD_ONS: dict[Intent, AddOn] = {
    Intent.ADD_WINDOWS: AddOn(name="Inside Windows", price=35),
    Intent.ADD_FRIDGE: AddOn(name="Inside Fridge", price=25),
    Intent.ADD_OVEN: AddOn(name="Inside Oven", price=25),
    Intent.ADD_LAUNDRY: AddOn(name="Laundry", price=30),
}

TIME_SLOTS: dict[Intent, str] = {
    Intent.MORNING: "9:00 AM",
    Intent.AFTERNOON: "1:00 PM",
    Intent.EVENING: "5:00 PM",
}

FREQUENCIES: dict[Intent, str] = {
    Intent.ONE_TIME: "One-time",
    Intent.BI_WEEKLY: "Bi-weekly",
    Intent.WEEKLY: "Weekly",
    Intent.MONTHLY: "Monthly",
}

TIP_PERCENTS: dict[Intent, int] = {
    Intent.TIP_10: 10,
    Intent.TIP_15: 15,
    Intent.TIP_20: 20,
}

# Rooms that get a follow-up "how many?" question, compared case-insensitively.
QUANTIFIED_ROOMS = ("kitchen", "living room")

PASSWORD_MASK = "••••••••"

# -- Quick-reply sets -------------------------------------------------------

GREETING_REPLIES = (
    QuickReply("🏠 Book a Cleaning", "book"),
    QuickReply("💬 Ask a Question", "question"),
    QuickReply("📅 Check Availability", "availability"),
    QuickReply("💰 Get a Quote", "quote"),
)

RESTART_REPLIES = (
    QuickReply("🏠 Book a Cleaning", "book"),
    QuickReply("💬 Ask a Question", "question"),
)

FALLBACK_REPLIES = (
    QuickReply("🏠 Start Booking", "book"),
    QuickReply("💬 Ask Question", "question"),
)

HELP_REPLIES = (
    QuickReply("🏠 Book a Cleaning", "book"),
    QuickReply("💰 Get Pricing", "pricing"),
    QuickReply("📅 Check Availability", "availability"),
)

QUESTION_REPLIES = (
    QuickReply("💰 Pricing Info", "pricing"),
    QuickReply("⏰ Service Hours", "hours"),
    QuickReply("🧴 Products Used", "products"),
    QuickReply("🔄 Cancellation Policy", "cancellation"),
)

ACCOUNT_REPLIES = (
    QuickReply("✅ Yes, I have an account", "login"),
    QuickReply("🆕 No, create account", "create account"),
    QuickReply("👤 Continue as guest", "guest"),
)

SERVICE_REPLIES = tuple(
    QuickReply(f"{icon} {label} - ${service.price:g}", value)
    for (icon, label, value), service in zip(
        (
            ("🧹", "Standard Cleaning", "standard cleaning"),
            ("✨", "Deep Cleaning", "deep cleaning"),
            ("🏠", "Move In/Out", "move in out"),
        ),
        SERVICES.values(),
    )
)

PROPERTY_REPLIES = (
    QuickReply("🏠 House", "house"),
    QuickReply("🏢 Apartment", "apartment"),
    QuickReply("🏗️ Condo", "condo"),
    QuickReply("🏪 Office", "office"),
)

BEDROOM_REPLIES = (
    QuickReply("Studio", "0"),
    QuickReply("1 Bedroom", "1"),
    QuickReply("2 Bedrooms", "2"),
    QuickReply("3 Bedrooms", "3"),
    QuickReply("4+ Bedrooms", "4"),
)

BATHROOM_REPLIES = (
    QuickReply("1 Bathroom", "1 bathroom"),
    QuickReply("1.5 Bathrooms", "1.5 bathrooms"),
    QuickReply("2 Bathrooms", "2 bathrooms"),
    QuickReply("2.5 Bathrooms", "2.5 bathrooms"),
    QuickReply("3+ Bathrooms", "3 bathrooms"),
)

ROOM_REPLIES = (
    QuickReply("🍳 Kitchen", "kitchen"),
    QuickReply("🛋️ Living Room", "living room"),
    QuickReply("🛏️ Bedroom", "bedroom"),
    QuickReply("🚿 Bathroom", "bathroom"),
    QuickReply("✅ Done selecting", "done rooms"),
)

QUANTITY_REPLIES = (
    QuickReply("1", "1"),
    QuickReply("2", "2"),
    QuickReply("3", "3"),
)

_ADD_ON_CHOICES = (
    QuickReply("🪟 Inside Windows - $35", "windows"),
    QuickReply("❄️ Inside Fridge - $25", "fridge"),
    QuickReply("🔥 Inside Oven - $25", "oven"),
    QuickReply("🧺 Laundry - $30", "laundry"),
)

ADD_ON_REPLIES = _ADD_ON_CHOICES + (QuickReply("✅ No add-ons", "no addons"),)
MORE_ADD_ON_REPLIES = _ADD_ON_CHOICES + (QuickReply("✅ Done with add-ons", "done addons"),)

DATE_REPLIES = (
    QuickReply("📅 Tomorrow", "tomorrow"),
    QuickReply("📅 This Weekend", "this weekend"),
    QuickReply("📅 Next Week", "next week"),
    QuickReply("📆 Specific Date", "specific date"),
)

TIME_REPLIES = (
    QuickReply("🌅 Morning (8-11 AM)", "morning"),
    QuickReply("☀️ Afternoon (12-3 PM)", "afternoon"),
    QuickReply("🌆 Evening (4-7 PM)", "evening"),
)

FREQUENCY_REPLIES = (
    QuickReply("🔁 One-time only", "one-time"),
    QuickReply("📅 Weekly (10% off)", "weekly"),
    QuickReply("📅 Bi-weekly (5% off)", "bi-weekly"),
    QuickReply("📅 Monthly (15% off)", "monthly"),
)

PET_REPLIES = (
    QuickReply("🐕 Yes, I have pets", "yes pets"),
    QuickReply("🚫 No pets", "no pets"),
)

PET_TYPE_REPLIES = (
    QuickReply("🐕 Dog", "dog"),
    QuickReply("🐈 Cat", "cat"),
    QuickReply("🐦 Bird", "bird"),
    QuickReply("🐠 Fish", "fish"),
    QuickReply("✅ Done selecting", "done pets"),
)

PET_PRESENT_REPLIES = (
    QuickReply("✅ Yes, they will be home", "pets present"),
    QuickReply("🚫 No, they will be away", "pets away"),
)

INSTRUCTION_REPLIES = (QuickReply("✅ No special instructions", "no instructions"),)

PAYMENT_REPLIES = (
    QuickReply("💳 Credit Card", "credit card"),
    QuickReply("💳 Debit Card", "debit card"),
    QuickReply("💰 Apple Pay", "apple pay"),
    QuickReply("💰 Google Pay", "google pay"),
)

CONFIRM_REPLIES = (
    QuickReply("✅ Confirm & Pay", "confirm payment"),
    QuickReply("✏️ Make Changes", "make changes"),
)

BOOKED_REPLIES = (
    QuickReply("📱 View Dashboard", "dashboard"),
    QuickReply("📅 Book Another", "book another"),
    QuickReply("💬 Ask a Question", "question"),
)


def tip_replies(service_price: float | None) -> tuple[QuickReply, ...]:
    presets = tuple(
        QuickReply(
            f"⭐ {percent}% (${tip_for_percent(service_price, percent):.0f})", f"tip {percent}"
        )
        for percent in TIP_PRESETS
    )
    return presets + (QuickReply("🚫 No tip", "no tip"),)


# -- Canned answers ---------------------------------------------------------

GREETING = "Hi! I'm Ella, your AI cleaning assistant. 👋 How can I help you today?"

NOT_UNDERSTOOD = (
    "I'm not sure I understood that. Could you try again or use one of the quick replies?"
)

PRICING_TEXT = (
    "Our pricing is transparent and competitive:\n\n"
    "• Standard Cleaning: $89 (2 hrs)\n"
    "• Deep Cleaning: $159 (3-4 hrs)\n"
    "• Move In/Out: $249 (5-6 hrs)\n\n"
    "All services include eco-friendly products and satisfaction guarantee! 💚"
)

AVAILABILITY_TEXT = (
    "We're available 7 days a week, 8 AM - 8 PM! 🗓️ Most time slots are available "
    "within 24-48 hours. Would you like to book a cleaning?"
)

CANCELLATION_TEXT = (
    "Our cancellation policy is fair and flexible:\n\n"
    "• Free cancellation up to 24 hours before service\n"
    "• 50% charge for cancellations within 24 hours\n"
    "• 100% charge for no-shows\n\n"
    "We want to make sure you're completely satisfied! 😊"
)

HOURS_TEXT = (
    "We're here for you 7 days a week!\n\n"
    "⏰ Service Hours: 8:00 AM - 8:00 PM\n"
    "📞 Customer Support: 8:00 AM - 10:00 PM\n\n"
    "Flexible scheduling to fit your busy life! 🌟"
)

PRODUCTS_TEXT = (
    "We use only eco-friendly, non-toxic cleaning products! 🌿\n\n"
    "✅ Safe for kids & pets\n"
    "✅ Environmentally friendly\n"
    "✅ Highly effective\n\n"
    "Your health and the planet matter to us! 💚"
)

HELP_TEXT = (
    "I'm here to help! You can ask me about our services, pricing, availability, "
    "or start booking a cleaning. What would you like to do?"
)

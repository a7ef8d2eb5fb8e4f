"""Booking dialogue state machine.

``DialogueMachine.advance`` maps ``(state, user text)`` to the next state and
exactly one assistant reply. It never mutates its inputs: each step has a
reducer that receives the current draft and returns a new ``Transition``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable

from ella.booking.base import FinalizedBooking
from ella.dialogue import catalog
from ella.dialogue.classifier import classify, parse_bathrooms, parse_count
from ella.dialogue.types import ConversationState, Draft, Intent, Reply, Step
from ella.memory.models import BookingSummary, QuickReply
from ella.pricing import PriceBreakdown, compute_total, tip_for_percent

logger = logging.getLogger("ella.dialogue")

Reducer = Callable[[Draft, str, Intent], "Transition"]


@dataclass(frozen=True, slots=True)
class Transition:
    state: ConversationState
    reply: Reply
    intent: Intent
    completed: FinalizedBooking | None = None


def _capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _amount(value: float) -> str:
    """Render whole amounts without decimals and fractional ones with two places."""

    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


class DialogueMachine:
    """Deterministic booking conversation driven by keyword intents."""

    def __init__(
        self,
        business_name: str = "Sparkleville",
        specific_date_placeholder: str = "December 10, 2025",
    ) -> None:
        self.business_name = business_name
        self.specific_date_placeholder = specific_date_placeholder
        self._reducers: dict[Step, Reducer] = {
            Step.IDLE: self._idle,
            Step.ACCOUNT: self._account,
            Step.LOGIN: self._login,
            Step.SERVICE: self._service,
            Step.PROPERTY_TYPE: self._property_type,
            Step.BEDROOMS: self._bedrooms,
            Step.BATHROOMS: self._bathrooms,
            Step.ROOMS: self._rooms,
            Step.ROOM_QUANTITIES: self._room_quantities,
            Step.ADDONS: self._addons,
            Step.DATE: self._date,
            Step.TIME: self._time,
            Step.FREQUENCY: self._frequency,
            Step.PETS: self._pets,
            Step.PET_SELECTION: self._pet_selection,
            Step.PET_PRESENT: self._pet_present,
            Step.SPECIAL_INSTRUCTIONS: self._special_instructions,
            Step.PAYMENT: self._payment,
            Step.TIP: self._tip,
            Step.CONFIRM: self._confirm,
        }

    def greeting(self) -> Reply:
        return Reply(catalog.GREETING, catalog.GREETING_REPLIES)

    def advance(self, state: ConversationState, text: str) -> Transition:
        text = text.strip()
        reducer = self._reducers.get(state.step)
        if reducer is None:
            logger.warning("No reducer for step %s; answering with fallback", state.step)
            return Transition(
                state=state,
                reply=Reply(catalog.NOT_UNDERSTOOD, catalog.FALLBACK_REPLIES),
                intent=Intent.UNKNOWN,
            )
        if not text:
            return self.fallback(state)

        intent = classify(state.step, text)
        transition = reducer(state.draft, text, intent)
        logger.debug(
            "Dialogue %s -> %s (intent=%s)",
            state.step.value,
            transition.state.step.value,
            intent.value,
        )
        return transition

    def fallback(self, state: ConversationState) -> Transition:
        """Stay on the current step and ask again."""

        return self._not_understood(state.step, state.draft)

    @staticmethod
    def expects_secret(state: ConversationState) -> bool:
        """True when the next input at ``state`` is a password."""

        if state.step is not Step.LOGIN:
            return False
        draft = state.draft
        if draft.account_type == "create":
            return bool(draft.name and draft.email and draft.phone)
        return bool(draft.email)

    def prompt_replies(self, step: Step, draft: Draft) -> tuple[QuickReply, ...]:
        """Quick replies offered while waiting for input at ``step``."""

        if step is Step.TIP:
            return catalog.tip_replies(draft.service_price)
        if step is Step.ADDONS and draft.add_ons:
            return catalog.MORE_ADD_ON_REPLIES
        return _STEP_REPLIES.get(step, catalog.FALLBACK_REPLIES)

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _go(step: Step, draft: Draft, reply: Reply, intent: Intent) -> Transition:
        state = ConversationState(step=step, draft=draft)
        return Transition(state=state, reply=reply, intent=intent)

    def _not_understood(
        self, step: Step, draft: Draft, text: str = catalog.NOT_UNDERSTOOD
    ) -> Transition:
        reply = Reply(text, self.prompt_replies(step, draft))
        return self._go(step, draft, reply, Intent.UNKNOWN)

    # -- reducers ----------------------------------------------------------

    def _idle(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.BOOK:
            reply = Reply(
                "Perfect! Let's get you scheduled for a sparkling clean space! ✨ "
                "First, do you have an account with us?",
                catalog.ACCOUNT_REPLIES,
            )
            return self._go(Step.ACCOUNT, draft, reply, intent)

        book = QuickReply("📅 Book Now", "book")
        book_cleaning = QuickReply("📅 Book Cleaning", "book")
        more_questions = QuickReply("💬 More Questions", "question")
        answers = {
            Intent.QUESTION: Reply(
                "I'm here to help! What would you like to know?",
                catalog.QUESTION_REPLIES,
            ),
            Intent.PRICING: Reply(catalog.PRICING_TEXT, (book, more_questions)),
            Intent.AVAILABILITY: Reply(
                catalog.AVAILABILITY_TEXT,
                (
                    QuickReply("✅ Yes, Book Now", "book"),
                    QuickReply("📅 Check Specific Date", "check date"),
                ),
            ),
            Intent.CANCELLATION_POLICY: Reply(
                catalog.CANCELLATION_TEXT,
                (book_cleaning, more_questions),
            ),
            Intent.HOURS: Reply(
                catalog.HOURS_TEXT,
                (book, QuickReply("💬 Ask Another Question", "question")),
            ),
            Intent.PRODUCTS: Reply(
                catalog.PRODUCTS_TEXT,
                (book_cleaning, QuickReply("💬 More Info", "question")),
            ),
        }
        reply = answers.get(intent, Reply(catalog.HELP_TEXT, catalog.HELP_REPLIES))
        return self._go(Step.IDLE, draft, reply, intent)

    def _account(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.LOGIN:
            reply = Reply("Great! Please enter your email address:")
            return self._go(Step.LOGIN, replace(draft, account_type="login"), reply, intent)
        if intent is Intent.CREATE_ACCOUNT:
            reply = Reply("Awesome! Let's create your account. What's your full name?")
            return self._go(Step.LOGIN, replace(draft, account_type="create"), reply, intent)
        if intent is Intent.GUEST:
            reply = Reply(
                "No problem! What type of cleaning service do you need?",
                catalog.SERVICE_REPLIES,
            )
            return self._go(Step.SERVICE, replace(draft, account_type="guest"), reply, intent)
        return self._not_understood(Step.ACCOUNT, draft)

    def _login(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if draft.account_type == "create":
            if not draft.name:
                reply = Reply(f"Nice to meet you, {text}! 😊 What's your email address?")
                return self._go(Step.LOGIN, replace(draft, name=text), reply, intent)
            if not draft.email:
                reply = Reply("Great! What's your phone number?")
                return self._go(Step.LOGIN, replace(draft, email=text), reply, intent)
            if not draft.phone:
                reply = Reply("Perfect! Create a password for your account:")
                return self._go(Step.LOGIN, replace(draft, phone=text), reply, intent)
            reply = Reply(
                "🎉 Account created successfully! Now, what type of cleaning service do you need?",
                catalog.SERVICE_REPLIES,
            )
            draft = replace(draft, password=catalog.PASSWORD_MASK)
            return self._go(Step.SERVICE, draft, reply, intent)

        if not draft.email:
            reply = Reply("Thanks! Now enter your password:")
            return self._go(Step.LOGIN, replace(draft, email=text), reply, intent)
        reply = Reply(
            "✅ Logged in successfully! Welcome back! What type of cleaning service do you need?",
            catalog.SERVICE_REPLIES,
        )
        draft = replace(draft, password=catalog.PASSWORD_MASK)
        return self._go(Step.SERVICE, draft, reply, intent)

    def _service(self, draft: Draft, text: str, intent: Intent) -> Transition:
        service = catalog.SERVICES.get(intent)
        if service is None:
            return self._not_understood(Step.SERVICE, draft)

        reply = Reply(
            f"{service.confirmation} What type of property is this?",
            catalog.PROPERTY_REPLIES,
            service_card=service.card(),
        )
        draft = replace(draft, service_type=service.name, service_price=service.price)
        return self._go(Step.PROPERTY_TYPE, draft, reply, intent)

    def _property_type(self, draft: Draft, text: str, intent: Intent) -> Transition:
        reply = Reply("Got it! How many bedrooms?", catalog.BEDROOM_REPLIES)
        draft = replace(draft, property_type=_capitalize(text))
        return self._go(Step.BEDROOMS, draft, reply, intent)

    def _bedrooms(self, draft: Draft, text: str, intent: Intent) -> Transition:
        bedrooms = parse_count(text)
        if bedrooms is None:
            return self._not_understood(
                Step.BEDROOMS, draft, "Sorry, I need a number. How many bedrooms?"
            )
        reply = Reply("Perfect! How many bathrooms?", catalog.BATHROOM_REPLIES)
        return self._go(Step.BATHROOMS, replace(draft, bedrooms=bedrooms), reply, intent)

    def _bathrooms(self, draft: Draft, text: str, intent: Intent) -> Transition:
        bathrooms = parse_bathrooms(text)
        if bathrooms is None:
            return self._not_understood(
                Step.BATHROOMS, draft, "Sorry, I need a number. How many bathrooms?"
            )
        reply = Reply(
            "Great! Which rooms would you like cleaned? (Select all that apply)",
            catalog.ROOM_REPLIES,
        )
        draft = replace(draft, bathrooms=bathrooms, rooms=())
        return self._go(Step.ROOMS, draft, reply, intent)

    def _rooms(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.DONE:
            needing = [room for room in draft.rooms if room.lower() in catalog.QUANTIFIED_ROOMS]
            if needing and draft.room_quantities is None:
                reply = Reply(f"How many {needing[0]}s do you have?", catalog.QUANTITY_REPLIES)
                draft = replace(draft, room_quantities={}, current_room_for_quantity=needing[0])
                return self._go(Step.ROOM_QUANTITIES, draft, reply, intent)
            return self._to_addons(draft, intent)

        room = _capitalize(text.lower())
        if room not in draft.rooms:
            draft = replace(draft, rooms=draft.rooms + (room,))
        reply = Reply(
            f'{room} added! Select more rooms or click "Done selecting"',
            catalog.ROOM_REPLIES,
        )
        return self._go(Step.ROOMS, draft, reply, intent)

    def _room_quantities(self, draft: Draft, text: str, intent: Intent) -> Transition:
        current = draft.current_room_for_quantity
        quantity = parse_count(text)
        if quantity is None or current is None:
            return self._not_understood(
                Step.ROOM_QUANTITIES,
                draft,
                f"Sorry, I need a number. How many {current}s do you have?",
            )

        quantities = {**(draft.room_quantities or {}), current: quantity}
        remaining = [
            room for room in draft.rooms
            if room.lower() in catalog.QUANTIFIED_ROOMS and room not in quantities
        ]
        if remaining:
            reply = Reply(
                f"Got it! How many {remaining[0]}s do you have?",
                catalog.QUANTITY_REPLIES,
            )
            draft = replace(
                draft, room_quantities=quantities, current_room_for_quantity=remaining[0]
            )
            return self._go(Step.ROOM_QUANTITIES, draft, reply, intent)

        draft = replace(draft, room_quantities=quantities, current_room_for_quantity=None)
        return self._to_addons(draft, intent)

    def _to_addons(self, draft: Draft, intent: Intent) -> Transition:
        reply = Reply(
            "Perfect! Would you like to add any extra services?",
            catalog.ADD_ON_REPLIES,
        )
        return self._go(Step.ADDONS, replace(draft, add_ons=()), reply, intent)

    def _addons(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.DONE:
            reply = Reply(
                "Great! When would you like your cleaning scheduled?",
                catalog.DATE_REPLIES,
            )
            return self._go(Step.DATE, draft, reply, intent)

        add_on = catalog.ADD_ONS.get(intent)
        if add_on is None:
            return self._not_understood(Step.ADDONS, draft)

        if all(existing.name != add_on.name for existing in draft.add_ons):
            draft = replace(draft, add_ons=draft.add_ons + (add_on,))
        reply = Reply(
            f"{add_on.name} added! Add more or continue to scheduling:",
            catalog.MORE_ADD_ON_REPLIES,
        )
        return self._go(Step.ADDONS, draft, reply, intent)

    def _date(self, draft: Draft, text: str, intent: Intent) -> Transition:
        dates = {
            Intent.TOMORROW: "Tomorrow",
            Intent.THIS_WEEKEND: "This Saturday",
            Intent.NEXT_WEEK: "Next Monday",
            Intent.SPECIFIC_DATE: self.specific_date_placeholder,
        }
        date = dates.get(intent, text)
        reply = Reply(f"Perfect! What time works best on {date}?", catalog.TIME_REPLIES)
        return self._go(Step.TIME, replace(draft, date=date), reply, intent)

    def _time(self, draft: Draft, text: str, intent: Intent) -> Transition:
        time = catalog.TIME_SLOTS.get(intent, text)
        reply = Reply("Great! How often would you like this service?", catalog.FREQUENCY_REPLIES)
        return self._go(Step.FREQUENCY, replace(draft, time=time), reply, intent)

    def _frequency(self, draft: Draft, text: str, intent: Intent) -> Transition:
        frequency = catalog.FREQUENCIES.get(intent, draft.frequency)
        reply = Reply("Perfect! Do you have any pets?", catalog.PET_REPLIES)
        return self._go(Step.PETS, replace(draft, frequency=frequency), reply, intent)

    def _pets(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.NO:
            reply = Reply(
                "Got it! Any special instructions for our cleaner?",
                catalog.INSTRUCTION_REPLIES,
            )
            draft = replace(draft, has_pet=False)
            return self._go(Step.SPECIAL_INSTRUCTIONS, draft, reply, intent)
        reply = Reply(
            "Great! What type of pets do you have? (You can select multiple)",
            catalog.PET_TYPE_REPLIES,
        )
        draft = replace(draft, has_pet=True, selected_pets=())
        return self._go(Step.PET_SELECTION, draft, reply, intent)

    def _pet_selection(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.DONE:
            reply = Reply(
                "Will your pets be present during the cleaning?",
                catalog.PET_PRESENT_REPLIES,
            )
            return self._go(Step.PET_PRESENT, draft, reply, intent)

        pet = _capitalize(text.lower())
        if pet not in draft.selected_pets:
            draft = replace(draft, selected_pets=draft.selected_pets + (pet,))
        reply = Reply(
            f'{pet} noted! Select more or click "Done selecting"',
            catalog.PET_TYPE_REPLIES,
        )
        return self._go(Step.PET_SELECTION, draft, reply, intent)

    def _pet_present(self, draft: Draft, text: str, intent: Intent) -> Transition:
        reply = Reply(
            "Perfect! Any special instructions for our cleaner?",
            catalog.INSTRUCTION_REPLIES,
        )
        draft = replace(draft, pet_present=intent is Intent.YES)
        return self._go(Step.SPECIAL_INSTRUCTIONS, draft, reply, intent)

    def _special_instructions(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is not Intent.NO:
            draft = replace(draft, special_instructions=text)
        reply = Reply("Almost done! How would you like to pay?", catalog.PAYMENT_REPLIES)
        return self._go(Step.PAYMENT, draft, reply, intent)

    def _payment(self, draft: Draft, text: str, intent: Intent) -> Transition:
        draft = replace(draft, payment_method=text)
        reply = Reply(
            "Great! Would you like to add a tip for your cleaner?",
            catalog.tip_replies(draft.service_price),
        )
        return self._go(Step.TIP, draft, reply, intent)

    def _tip(self, draft: Draft, text: str, intent: Intent) -> Transition:
        percent = catalog.TIP_PERCENTS.get(intent)
        tip = tip_for_percent(draft.service_price, percent) if percent else 0
        draft = replace(draft, tip_amount=tip)
        totals = compute_total(draft)

        reply = Reply(
            self._summary_text(draft, totals),
            catalog.CONFIRM_REPLIES,
            booking_summary=BookingSummary(
                service=draft.service_type or "",
                date=draft.date or "",
                time=draft.time or "",
                property=draft.property_type or "",
                total=totals.total,
            ),
        )
        return self._go(Step.CONFIRM, draft, reply, intent)

    def _confirm(self, draft: Draft, text: str, intent: Intent) -> Transition:
        if intent is Intent.CONFIRM:
            reply = Reply(
                "🎊 Booking confirmed! Your payment has been processed. You'll receive a "
                "confirmation email shortly with all the details.\n\n"
                f"Thank you for choosing {self.business_name}! ✨",
                catalog.BOOKED_REPLIES,
            )
            completed = FinalizedBooking(draft=draft, totals=compute_total(draft))
            return Transition(
                state=ConversationState(), reply=reply, intent=intent, completed=completed
            )

        reply = Reply(
            "No problem! What would you like to change? Let's start over from the beginning.",
            catalog.RESTART_REPLIES,
        )
        return Transition(state=ConversationState(), reply=reply, intent=intent)

    @staticmethod
    def _summary_text(draft: Draft, totals: PriceBreakdown) -> str:
        lines = [
            "🎉 Perfect! Here's your booking summary:",
            "",
            f"📋 Service: {draft.service_type}",
            f"🏠 Property: {draft.property_type}",
            f"🛏️ {draft.bedrooms} bed, {draft.bathrooms or 0:g} bath",
            f"📅 Date: {draft.date}",
            f"⏰ Time: {draft.time}",
            f"🔁 Frequency: {draft.frequency or 'One-time'}",
        ]
        if draft.add_ons:
            lines += ["", "➕ Add-ons:"]
            lines += [
                f"  • {add_on.name} - ${_amount(add_on.price)}" for add_on in draft.add_ons
            ]

        lines += ["", f"💰 Base Price: ${_amount(totals.base_price)}"]
        if totals.add_ons_total > 0:
            lines.append(f"💰 Add-ons: ${_amount(totals.add_ons_total)}")
        if totals.discount > 0:
            lines.append(f"💚 Discount: -${totals.discount:.2f}")
        if totals.tip > 0:
            lines.append(f"⭐ Tip: ${totals.tip:.2f}")
        lines += ["", f"💳 TOTAL: ${totals.total:.2f}"]
        return "\n".join(lines)


_STEP_REPLIES: dict[Step, tuple[QuickReply, ...]] = {
    Step.IDLE: catalog.RESTART_REPLIES,
    Step.ACCOUNT: catalog.ACCOUNT_REPLIES,
    Step.LOGIN: (),
    Step.SERVICE: catalog.SERVICE_REPLIES,
    Step.PROPERTY_TYPE: catalog.PROPERTY_REPLIES,
    Step.BEDROOMS: catalog.BEDROOM_REPLIES,
    Step.BATHROOMS: catalog.BATHROOM_REPLIES,
    Step.ROOMS: catalog.ROOM_REPLIES,
    Step.ROOM_QUANTITIES: catalog.QUANTITY_REPLIES,
    Step.ADDONS: catalog.ADD_ON_REPLIES,
    Step.DATE: catalog.DATE_REPLIES,
    Step.TIME: catalog.TIME_REPLIES,
    Step.FREQUENCY: catalog.FREQUENCY_REPLIES,
    Step.PETS: catalog.PET_REPLIES,
    Step.PET_SELECTION: catalog.PET_TYPE_REPLIES,
    Step.PET_PRESENT: catalog.PET_PRESENT_REPLIES,
    Step.SPECIAL_INSTRUCTIONS: catalog.INSTRUCTION_REPLIES,
    Step.PAYMENT: catalog.PAYMENT_REPLIES,
    Step.CONFIRM: catalog.CONFIRM_REPLIES,
}

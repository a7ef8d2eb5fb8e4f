import random

import pytest

from ella.dialogue import catalog
from ella.dialogue.machine import DialogueMachine
from ella.dialogue.types import AddOn, ConversationState, Draft, Step


def walk(machine, inputs, state=None):
    state = state or ConversationState()
    transition = None
    for text in inputs:
        transition = machine.advance(state, text)
        state = transition.state
    return transition


def at(step, **fields):
    return ConversationState(step=step, draft=Draft(**fields))


def test_book_from_idle_asks_about_account(machine):
    transition = machine.advance(ConversationState(), "book")

    assert transition.state.step is Step.ACCOUNT
    assert len(transition.reply.quick_replies) == 3
    assert transition.reply.quick_replies == catalog.ACCOUNT_REPLIES


def test_selecting_deep_cleaning_sets_service_and_card(machine):
    transition = machine.advance(at(Step.SERVICE, account_type="guest"), "deep cleaning")

    assert transition.state.step is Step.PROPERTY_TYPE
    assert transition.state.draft.service_type == "Deep Cleaning"
    assert transition.state.draft.service_price == 159
    assert transition.reply.service_card.name == "Deep Cleaning"
    assert transition.reply.service_card.price == 159


def test_kitchen_and_living_room_are_counted_before_addons(machine):
    state = at(Step.ROOMS, service_type="Standard Cleaning", service_price=89)

    transition = walk(machine, ["kitchen", "living room", "done rooms"], state)
    assert transition.state.step is Step.ROOM_QUANTITIES
    assert transition.state.draft.current_room_for_quantity == "Kitchen"
    assert transition.reply.text == "How many Kitchens do you have?"

    transition = machine.advance(transition.state, "2")
    assert transition.state.step is Step.ROOM_QUANTITIES
    assert transition.state.draft.current_room_for_quantity == "Living room"

    transition = machine.advance(transition.state, "1")
    assert transition.state.step is Step.ADDONS
    assert dict(transition.state.draft.room_quantities) == {"Kitchen": 2, "Living room": 1}
    assert transition.state.draft.current_room_for_quantity is None


def test_rooms_without_counted_rooms_go_straight_to_addons(machine):
    transition = walk(machine, ["bedroom", "bedroom", "done"], at(Step.ROOMS))

    assert transition.state.step is Step.ADDONS
    assert transition.state.draft.rooms == ("Bedroom",)
    assert transition.state.draft.room_quantities is None


def test_zero_room_quantity_is_accepted(machine):
    state = at(Step.ROOMS)
    transition = walk(machine, ["kitchen", "living room", "done rooms", "0"], state)

    assert transition.state.step is Step.ROOM_QUANTITIES
    assert transition.state.draft.current_room_for_quantity == "Living room"
    assert transition.state.draft.room_quantities == {"Kitchen": 0}


def test_make_changes_resets_to_idle(machine):
    state = at(Step.CONFIRM, service_type="Standard Cleaning", service_price=89, date="Tomorrow")

    transition = machine.advance(state, "make changes")

    assert transition.state == ConversationState()
    assert transition.state.draft == Draft()
    assert transition.reply.quick_replies == catalog.RESTART_REPLIES
    assert transition.completed is None


def test_confirm_finalizes_booking_and_resets(machine):
    state = at(
        Step.CONFIRM,
        service_type="Deep Cleaning",
        service_price=159,
        add_ons=(AddOn("Inside Windows", 35),),
        frequency="Weekly",
        date="Tomorrow",
    )

    transition = machine.advance(state, "confirm payment")

    assert transition.state == ConversationState()
    assert transition.completed is not None
    assert transition.completed.draft == state.draft
    assert transition.completed.totals.total == pytest.approx(174.6)
    assert "Thank you for choosing Sparkleville!" in transition.reply.text
    assert transition.reply.quick_replies == catalog.BOOKED_REPLIES


def test_unrecognised_account_choice_reprompts(machine):
    state = at(Step.ACCOUNT)

    transition = machine.advance(state, "maybe later")

    assert transition.state == state
    assert transition.reply.text == catalog.NOT_UNDERSTOOD
    assert transition.reply.quick_replies == catalog.ACCOUNT_REPLIES


def test_unknown_service_keeps_step(machine):
    transition = machine.advance(at(Step.SERVICE), "window washing")

    assert transition.state.step is Step.SERVICE
    assert transition.state.draft.service_type is None
    assert transition.reply.quick_replies == catalog.SERVICE_REPLIES


@pytest.mark.parametrize(
    "step, text",
    [
        (Step.BEDROOMS, "a few"),
        (Step.BATHROOMS, "several"),
    ],
)
def test_malformed_numbers_are_rejected_in_place(machine, step, text):
    state = at(step, service_type="Standard Cleaning", service_price=89, property_type="House")

    transition = machine.advance(state, text)

    assert transition.state == state
    assert transition.reply.text.startswith("Sorry, I need a number.")


def test_malformed_room_quantity_keeps_current_room(machine):
    state = walk(machine, ["kitchen", "done rooms"], at(Step.ROOMS)).state

    transition = machine.advance(state, "lots")

    assert transition.state == state
    assert "Kitchens" in transition.reply.text


def test_blank_input_is_not_understood(machine):
    transition = machine.advance(ConversationState(), "   ")

    assert transition.state == ConversationState()
    assert transition.reply.text == catalog.NOT_UNDERSTOOD


def test_idle_answers_questions_without_leaving_idle(machine):
    transition = machine.advance(ConversationState(), "What's your cancellation policy?")

    assert transition.state.step is Step.IDLE
    assert transition.reply.text == catalog.CANCELLATION_TEXT

    transition = machine.advance(ConversationState(), "hmm")
    assert transition.state.step is Step.IDLE
    assert transition.reply.text == catalog.HELP_TEXT


def test_create_account_collects_fields_and_masks_password(machine):
    transition = walk(
        machine,
        ["book", "create account", "Jane Doe", "jane@example.com", "555-0100", "hunter2"],
    )

    draft = transition.state.draft
    assert transition.state.step is Step.SERVICE
    assert draft.account_type == "create"
    assert (draft.name, draft.email, draft.phone) == ("Jane Doe", "jane@example.com", "555-0100")
    assert draft.password == catalog.PASSWORD_MASK
    assert "hunter2" not in str(draft.to_dict())


def test_login_asks_for_email_then_password(machine):
    transition = walk(machine, ["book", "login"])
    assert transition.state.step is Step.LOGIN
    assert transition.reply.text == "Great! Please enter your email address:"

    transition = walk(machine, ["sam@example.com", "secret"], transition.state)
    assert transition.state.step is Step.SERVICE
    assert transition.state.draft.email == "sam@example.com"
    assert transition.state.draft.password == catalog.PASSWORD_MASK


def test_add_ons_are_unique_and_unknown_ones_ignored(machine):
    transition = walk(machine, ["windows", "windows", "balcony"], at(Step.ADDONS))

    assert transition.state.step is Step.ADDONS
    assert transition.state.draft.add_ons == (AddOn("Inside Windows", 35),)
    assert transition.reply.text == catalog.NOT_UNDERSTOOD
    assert transition.reply.quick_replies == catalog.MORE_ADD_ON_REPLIES


def test_specific_date_uses_configured_placeholder():
    machine = DialogueMachine(specific_date_placeholder="January 5, 2026")

    transition = machine.advance(at(Step.DATE), "specific date")
    assert transition.state.draft.date == "January 5, 2026"

    transition = machine.advance(at(Step.DATE), "June 3")
    assert transition.state.draft.date == "June 3"


def test_no_pets_skips_pet_questions(machine):
    transition = machine.advance(at(Step.PETS), "no pets")

    assert transition.state.step is Step.SPECIAL_INSTRUCTIONS
    assert transition.state.draft.has_pet is False


def test_no_special_instructions_are_not_stored(machine):
    transition = machine.advance(at(Step.SPECIAL_INSTRUCTIONS), "no instructions")

    assert transition.state.step is Step.PAYMENT
    assert transition.state.draft.special_instructions is None


def test_tip_summary_uses_updated_draft(machine):
    state = at(
        Step.TIP,
        service_type="Deep Cleaning",
        service_price=159,
        property_type="House",
        bedrooms=3,
        bathrooms=2.5,
        add_ons=(AddOn("Inside Windows", 35),),
        date="Tomorrow",
        time="9:00 AM",
        frequency="Weekly",
        payment_method="Credit Card",
    )

    transition = machine.advance(state, "tip 15")

    assert transition.state.step is Step.CONFIRM
    assert transition.state.draft.tip_amount == pytest.approx(23.85)
    assert "⭐ Tip: $23.85" in transition.reply.text
    assert "💚 Discount: -$19.40" in transition.reply.text
    assert "💳 TOTAL: $198.45" in transition.reply.text
    assert "🛏️ 3 bed, 2.5 bath" in transition.reply.text
    assert transition.reply.booking_summary.total == pytest.approx(198.45)
    assert transition.reply.quick_replies == catalog.CONFIRM_REPLIES


def test_payment_offers_tip_amounts_for_selected_service(machine):
    transition = machine.advance(at(Step.PAYMENT, service_price=159), "Credit Card")

    labels = [reply.label for reply in transition.reply.quick_replies]
    assert transition.state.draft.payment_method == "Credit Card"
    assert labels == ["⭐ 10% ($16)", "⭐ 15% ($24)", "⭐ 20% ($32)", "🚫 No tip"]


def test_guest_walkthrough(machine, guest_walkthrough):
    state = ConversationState()
    steps = []
    completed = None
    for text in guest_walkthrough["inputs"]:
        transition = machine.advance(state, text)
        state = transition.state
        steps.append(state.step.value)
        completed = completed or transition.completed

    assert steps == guest_walkthrough["expected_steps"]
    assert completed is not None
    booked = completed.draft
    assert booked.account_type == "guest"
    assert booked.rooms == ("Kitchen", "Living room", "Bedroom")
    assert booked.selected_pets == ("Dog",)
    assert booked.pet_present is True
    assert booked.special_instructions == "Please use the side door"
    assert booked.tip_amount == 0
    assert completed.totals.total == pytest.approx(174.6)


def test_advance_never_mutates_input_state(machine):
    state = at(Step.ROOMS, rooms=("Kitchen",))

    machine.advance(state, "bathroom")

    assert state.draft.rooms == ("Kitchen",)
    assert state.step is Step.ROOMS


ALLOWED_MOVES = {
    Step.IDLE: {Step.IDLE, Step.ACCOUNT},
    Step.ACCOUNT: {Step.ACCOUNT, Step.LOGIN, Step.SERVICE},
    Step.LOGIN: {Step.LOGIN, Step.SERVICE},
    Step.SERVICE: {Step.SERVICE, Step.PROPERTY_TYPE},
    Step.PROPERTY_TYPE: {Step.BEDROOMS},
    Step.BEDROOMS: {Step.BEDROOMS, Step.BATHROOMS},
    Step.BATHROOMS: {Step.BATHROOMS, Step.ROOMS},
    Step.ROOMS: {Step.ROOMS, Step.ROOM_QUANTITIES, Step.ADDONS},
    Step.ROOM_QUANTITIES: {Step.ROOM_QUANTITIES, Step.ADDONS},
    Step.ADDONS: {Step.ADDONS, Step.DATE},
    Step.DATE: {Step.TIME},
    Step.TIME: {Step.FREQUENCY},
    Step.FREQUENCY: {Step.PETS},
    Step.PETS: {Step.PET_SELECTION, Step.SPECIAL_INSTRUCTIONS},
    Step.PET_SELECTION: {Step.PET_SELECTION, Step.PET_PRESENT},
    Step.PET_PRESENT: {Step.SPECIAL_INSTRUCTIONS},
    Step.SPECIAL_INSTRUCTIONS: {Step.PAYMENT},
    Step.PAYMENT: {Step.TIP},
    Step.TIP: {Step.CONFIRM},
    Step.CONFIRM: {Step.IDLE},
}


def test_random_walk_only_takes_declared_moves(machine):
    replies = {
        reply.value
        for name in dir(catalog)
        if name.endswith("_REPLIES")
        for reply in getattr(catalog, name)
    }
    extra = {"", "blorble", "42", "-1", "1.5", "confirm", "make changes", "no", "yes", "done"}
    vocabulary = sorted(replies | extra)
    rng = random.Random(20240611)
    state = ConversationState()
    visited = {state.step}
    moves = set()

    for _ in range(5000):
        text = rng.choice(vocabulary)
        transition = machine.advance(state, text)
        if not text:
            assert transition.state == state
        else:
            assert transition.state.step in ALLOWED_MOVES[state.step], (state.step, text)
            moves.add((state.step, transition.state.step))
        assert transition.reply.text
        state = transition.state
        visited.add(state.step)

    assert visited == set(Step)
    assert (Step.CONFIRM, Step.IDLE) in moves
    assert (Step.ROOMS, Step.ROOM_QUANTITIES) in moves


def test_expects_secret_only_for_password_prompt(machine):
    state = walk(machine, ["book", "login"]).state
    assert not machine.expects_secret(state)

    state = machine.advance(state, "sam@example.com").state
    assert machine.expects_secret(state)

    state = walk(machine, ["book", "create account", "Jane", "jane@example.com"]).state
    assert not machine.expects_secret(state)
    state = machine.advance(state, "555-0100").state
    assert machine.expects_secret(state)

"""Keyword intent classifier for the booking dialogue.

Each step owns an ordered tuple of rules. Input is lower-cased and a rule
matches when any of its keywords is a substring of the input. The first
matching rule wins, so declaration order is how ambiguous inputs (for
example "bi-weekly", which also contains "weekly") are resolved.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from ella.dialogue.types import Intent, Step


@dataclass(frozen=True, slots=True)
class Rule:
    keywords: tuple[str, ...]
    intent: Intent

    def matches(self, text_lower: str) -> bool:
        return any(keyword in text_lower for keyword in self.keywords)


RULES: dict[Step, tuple[Rule, ...]] = {
    Step.IDLE: (
        Rule(("book",), Intent.BOOK),
        Rule(("question", "help"), Intent.QUESTION),
        Rule(("pricing", "price", "quote"), Intent.PRICING),
        Rule(("availability", "available"), Intent.AVAILABILITY),
        Rule(("cancellation",), Intent.CANCELLATION_POLICY),
        Rule(("hours",), Intent.HOURS),
        Rule(("products", "product"), Intent.PRODUCTS),
    ),
    Step.ACCOUNT: (
        Rule(("login", "yes"), Intent.LOGIN),
        Rule(("create", "new"), Intent.CREATE_ACCOUNT),
        Rule(("guest",), Intent.GUEST),
    ),
    Step.SERVICE: (
        Rule(("standard",), Intent.STANDARD_CLEANING),
        Rule(("deep",), Intent.DEEP_CLEANING),
        Rule(("move",), Intent.MOVE_CLEANING),
    ),
    Step.ROOMS: (Rule(("done",), Intent.DONE),),
    Step.ADDONS: (
        Rule(("no addons", "done addons"), Intent.DONE),
        Rule(("window",), Intent.ADD_WINDOWS),
        Rule(("fridge",), Intent.ADD_FRIDGE),
        Rule(("oven",), Intent.ADD_OVEN),
        Rule(("laundry",), Intent.ADD_LAUNDRY),
    ),
    Step.DATE: (
        Rule(("tomorrow",), Intent.TOMORROW),
        Rule(("weekend",), Intent.THIS_WEEKEND),
        Rule(("next week",), Intent.NEXT_WEEK),
        Rule(("specific",), Intent.SPECIFIC_DATE),
    ),
    Step.TIME: (
        Rule(("morning",), Intent.MORNING),
        Rule(("afternoon",), Intent.AFTERNOON),
        Rule(("evening",), Intent.EVENING),
    ),
    Step.FREQUENCY: (
        Rule(("one-time", "one time"), Intent.ONE_TIME),
        Rule(("bi-weekly", "biweekly"), Intent.BI_WEEKLY),
        Rule(("weekly",), Intent.WEEKLY),
        Rule(("monthly",), Intent.MONTHLY),
    ),
    Step.PETS: (Rule(("no",), Intent.NO),),
    Step.PET_SELECTION: (Rule(("done",), Intent.DONE),),
    Step.PET_PRESENT: (Rule(("present", "yes"), Intent.YES),),
    Step.SPECIAL_INSTRUCTIONS: (Rule(("no",), Intent.NO),),
    Step.TIP: (
        Rule(("no",), Intent.NO),
        Rule(("10",), Intent.TIP_10),
        Rule(("15",), Intent.TIP_15),
        Rule(("20",), Intent.TIP_20),
    ),
    Step.CONFIRM: (Rule(("confirm",), Intent.CONFIRM),),
}

# Intent used when no rule of the step matches.
FALLBACKS: dict[Step, Intent] = {
    Step.IDLE: Intent.UNKNOWN,
    Step.ACCOUNT: Intent.UNKNOWN,
    Step.LOGIN: Intent.FREE_TEXT,
    Step.SERVICE: Intent.UNKNOWN,
    Step.PROPERTY_TYPE: Intent.FREE_TEXT,
    Step.ROOMS: Intent.FREE_TEXT,
    Step.ADDONS: Intent.UNKNOWN,
    Step.DATE: Intent.FREE_TEXT,
    Step.TIME: Intent.FREE_TEXT,
    Step.FREQUENCY: Intent.FREE_TEXT,
    Step.PETS: Intent.YES,
    Step.PET_SELECTION: Intent.FREE_TEXT,
    Step.PET_PRESENT: Intent.NO,
    Step.SPECIAL_INSTRUCTIONS: Intent.FREE_TEXT,
    Step.PAYMENT: Intent.FREE_TEXT,
    Step.TIP: Intent.NO,
    Step.CONFIRM: Intent.MAKE_CHANGES,
}

_LEADING_INT = re.compile(r"^\s*(\d+)")


def parse_count(text: str) -> int | None:
    """Return the leading non-negative integer of ``text``, or None."""

    match = _LEADING_INT.match(text)
    if not match:
        return None
    return int(match.group(1))


def parse_bathrooms(text: str) -> float | None:
    """Parse the first whitespace-separated token as a bathroom count (halves allowed)."""

    tokens = text.strip().split()
    if not tokens:
        return None
    try:
        value = float(tokens[0].rstrip("+"))
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def matching_intents(step: Step, text: str) -> list[Intent]:
    """Every rule intent of ``step`` that ``text`` triggers, in declaration order."""

    lower = text.lower()
    return [rule.intent for rule in RULES.get(step, ()) if rule.matches(lower)]


def classify(step: Step, text: str) -> Intent:
    """Resolve ``text`` to a single intent for ``step``; first matching rule wins."""

    if step is Step.BEDROOMS or step is Step.ROOM_QUANTITIES:
        return Intent.NUMBER if parse_count(text) is not None else Intent.UNKNOWN
    if step is Step.BATHROOMS:
        return Intent.NUMBER if parse_bathrooms(text) is not None else Intent.UNKNOWN

    lower = text.lower()
    for rule in RULES.get(step, ()):
        if rule.matches(lower):
            return rule.intent
    return FALLBACKS.get(step, Intent.UNKNOWN)

"""Keyword classification of free-text replies.

Matching is plain case-insensitive substring search, checked in priority
order; the first rule that fires wins.
"""

from enum import Enum
from typing import Optional

from clinic_booking.schemas.booking_schema import Offering
from clinic_booking.utils import contains_any

# (keywords in the message, fragment expected in the catalog slug)
REASON_RULES: list[tuple[list[str], str]] = [
    (["follow", "follow-up"], "follow"),
    (["physical", "exam"], "physical"),
    (["specialist"], "specialist"),
]
DEFAULT_SLUG_KEYWORD = "general"

OFFERING_NAMES = [
    "General Consultation",
    "Follow-up",
    "Physical Exam",
    "Specialist Consultation",
]

CANCEL_KEYWORDS = ["no", "cancel"]
CONFIRM_KEYWORDS = ["yes", "confirm", "ok"]


class ConfirmationReply(str, Enum):
    CANCEL = "cancel"
    CONFIRM = "confirm"
    UNCLEAR = "unclear"


def classify_reason(message: str) -> str:
    """Return the slug keyword for the offering the caller asked for.

    Falls back to general consultation when nothing else matches.
    """
    for keywords, slug_keyword in REASON_RULES:
        if contains_any(message, keywords):
            return slug_keyword
    return DEFAULT_SLUG_KEYWORD


def find_offering(offerings: list[Offering], slug_keyword: str) -> Optional[Offering]:
    """First catalog entry whose slug contains the keyword, if any."""
    for offering in offerings:
        if slug_keyword in offering.slug:
            return offering
    return None


def classify_confirmation(message: str) -> ConfirmationReply:
    """Cancellation words are checked before confirmation words.

    "I don't know" therefore cancels, and "book it" confirms (via "ok").
    """
    if contains_any(message, CANCEL_KEYWORDS):
        return ConfirmationReply.CANCEL
    if contains_any(message, CONFIRM_KEYWORDS):
        return ConfirmationReply.CONFIRM
    return ConfirmationReply.UNCLEAR

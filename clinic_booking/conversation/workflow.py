"""
Workflow engine for the appointment booking conversation.

One call to ``process_message`` is one conversational turn: load (or create)
the session, dispatch on its state to a handler, commit whatever new
(state, data) pair the handler produced, and return the reply text.

Handlers never touch the store themselves. They return a ``Turn`` and the
engine validates the move against the transition table before committing,
so a turn either fully applies or leaves the session exactly as it was.
"""

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from clinic_booking.config import settings
from clinic_booking.conversation.intents import (
    OFFERING_NAMES,
    ConfirmationReply,
    classify_confirmation,
    classify_reason,
    find_offering,
)
from clinic_booking.conversation.session_store import InMemorySessionStore, SessionStore
from clinic_booking.conversation.state_machine import validate_transition
from clinic_booking.logging_context import get_session_logger, session_context
from clinic_booking.schemas.booking_schema import BookingRequest, Slot
from clinic_booking.schemas.session_schema import Session, SessionData, SessionState
from clinic_booking.tools.provider import ProviderError, SchedulingProvider
from clinic_booking.tools.time_utils import format_slot, parse_date, parse_vague_time

logger = get_session_logger(__name__)

GREETING = (
    "Hello! I'm your AI appointment assistant. How can I help you today? "
    "(e.g., 'I need a general consultation')"
)
ALREADY_BOOKED = "You already have a booking. Start a new chat to book another."
FALLBACK = "I'm not sure what to do. Let's start over."
PROVIDER_UNAVAILABLE = (
    "I'm having trouble reaching our scheduling system right now. "
    "Please try again in a moment."
)
BOOKING_ERROR = "There was an error booking your appointment. Please try again later."
BOOKING_REASON = "Booked via AI Agent"

_LEADING_INT = re.compile(r"\s*([+-]?\d{1,9})(?!\d)")


@dataclass(frozen=True)
class Turn:
    """Reply for one message plus the (state, data) to commit, if any."""
    reply: str
    next_state: Optional[SessionState] = None
    data: Optional[SessionData] = None


Handler = Callable[[Session, str], Awaitable[Turn]]


class WorkflowEngine:
    """
    Conversational booking state machine.

    The session store and scheduling provider are injected; time zone,
    suggestion count and session TTL default to the loaded settings.
    Messages for the same session are serialized by a per-session lock.
    """

    def __init__(
        self,
        provider: SchedulingProvider,
        store: Optional[SessionStore] = None,
        tz: Optional[tzinfo] = None,
        max_suggestions: Optional[int] = None,
        session_ttl: Optional[timedelta] = None,
    ) -> None:
        self._provider = provider
        self._store = store if store is not None else InMemorySessionStore()
        self._tz = tz or ZoneInfo(settings.clinic.timezone)
        self._max_suggestions = max_suggestions or settings.clinic.max_slot_suggestions
        if session_ttl is None and settings.session.ttl_minutes > 0:
            session_ttl = timedelta(minutes=settings.session.ttl_minutes)
        self._session_ttl = session_ttl
        self._locks: dict[str, asyncio.Lock] = {}
        self._handlers: dict[SessionState, Handler] = {
            SessionState.INIT: self._handle_greeting,
            SessionState.AWAITING_REASON: self._handle_reason,
            SessionState.AWAITING_DATE: self._handle_date,
            SessionState.SELECTING_SLOT: self._handle_slot_selection,
            SessionState.AWAITING_NAME: self._handle_name,
            SessionState.AWAITING_EMAIL: self._handle_email,
            SessionState.AWAITING_CONFIRMATION: self._handle_confirmation,
        }

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def provider(self) -> SchedulingProvider:
        return self._provider

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #

    async def process_message(self, session_id: str, message: str) -> str:
        """Handle one caller message and return the assistant's reply.

        Never raises: anything the handlers do not recover from is logged
        and answered with the fallback reply, leaving the session as it was.
        """
        with session_context(session_id):
            self._expire_idle_sessions()
            lock = self._locks.setdefault(session_id, asyncio.Lock())
            async with lock:
                try:
                    return await self._process(session_id, message)
                except Exception:
                    logger.exception("Unhandled error while processing message")
                    return FALLBACK

    async def _process(self, session_id: str, message: str) -> str:
        session = self._store.get(session_id)
        if session is None:
            # The first message only opens the conversation; its text is discarded.
            session = self._store.create(session_id)
            return self._apply(session, await self._handle_greeting(session, message))

        if session.state == SessionState.COMPLETED:
            return ALREADY_BOOKED

        handler = self._handlers.get(session.state)
        if handler is None:
            logger.warning("No handler for state %r", session.state)
            return FALLBACK

        try:
            turn = await handler(session, message)
        except ProviderError:
            logger.exception("Scheduling provider failed in state %s", session.state.value)
            return PROVIDER_UNAVAILABLE

        return self._apply(session, turn)

    def _apply(self, session: Session, turn: Turn) -> str:
        if turn.next_state is not None:
            validate_transition(session.state, turn.next_state)
            data = turn.data if turn.data is not None else session.data
            self._store.update(session.id, state=turn.next_state, data=data)
        return turn.reply

    def _expire_idle_sessions(self) -> None:
        if self._session_ttl is None:
            return
        # A held lock means that session is mid-turn and must survive the sweep.
        busy = {sid for sid, lock in self._locks.items() if lock.locked()}
        for sid in self._store.sweep(self._session_ttl, keep=busy):
            self._locks.pop(sid, None)

    def _local(self, moment: datetime) -> datetime:
        return moment.astimezone(self._tz) if moment.tzinfo is not None else moment

    def _format(self, slot: Slot) -> str:
        return format_slot(slot.start_time, self._tz)

    # ------------------------------------------------------------------ #
    # State handlers
    # ------------------------------------------------------------------ #

    async def _handle_greeting(self, session: Session, message: str) -> Turn:
        # INIT after a cancellation lands here too, so the caller's next
        # message is swallowed exactly like a brand-new session's first one.
        return Turn(GREETING, SessionState.AWAITING_REASON, session.data)

    async def _handle_reason(self, session: Session, message: str) -> Turn:
        slug_keyword = classify_reason(message)
        offerings = await self._provider.list_offerings()
        offering = find_offering(offerings, slug_keyword)

        if offering is None:
            logger.info("No catalog entry matches '%s' (%d offerings)", slug_keyword, len(offerings))
            return Turn(
                "I couldn't determine the appointment type. We offer: "
                f"{', '.join(OFFERING_NAMES[:-1])}, and {OFFERING_NAMES[-1]}. "
                "Which one would you like?"
            )

        return Turn(
            f"Okay, a {offering.name} ({offering.duration} mins). When would you like to "
            "come in? (e.g., 'Tomorrow morning', 'Next Monday')",
            SessionState.AWAITING_DATE,
            session.data.with_updates(reason=message, appointment_type=offering),
        )

    async def _handle_date(self, session: Session, message: str) -> Turn:
        today = datetime.now(self._tz).date()
        day = parse_date(message, today)
        time_range = parse_vague_time(message)

        if day is None:
            return Turn(
                "I didn't catch the date. Please say something like 'Tomorrow', "
                "'Monday', or a specific date."
            )

        offering = session.data.appointment_type
        slots = await self._provider.get_availability(day, offering.duration)
        if not slots:
            logger.info("No availability on %s for %s", day, offering.slug)
            return Turn(
                "I'm sorry, I don't see any openings for that day. Could you try another date?"
            )

        if time_range is not None:
            slots = [s for s in slots if time_range.contains(self._local(s.start_time).hour)]

        suggestions = tuple(slots[: self._max_suggestions])
        if not suggestions:
            return Turn(
                "I have openings that day, but not in that specific time range. "
                "Would you like to see other times?"
            )

        options = "\n".join(f"{i}. {self._format(s)}" for i, s in enumerate(suggestions, start=1))
        return Turn(
            f"Here are some available times:\n{options}\n\n"
            f"Please reply with the number (1-{len(suggestions)}) of the slot you want.",
            SessionState.SELECTING_SLOT,
            session.data.with_updates(
                available_slots=suggestions,
                preferred_date=day,
                preferred_time_range=time_range,
            ),
        )

    async def _handle_slot_selection(self, session: Session, message: str) -> Turn:
        slots = session.data.available_slots
        match = _LEADING_INT.match(message)
        index = int(match.group(1)) - 1 if match else -1

        if not 0 <= index < len(slots):
            return Turn("Please select a valid number from the list.")

        return Turn(
            "Great choice. To finalize, may I have your full name?",
            SessionState.AWAITING_NAME,
            session.data.with_updates(selected_slot=slots[index]),
        )

    async def _handle_name(self, session: Session, message: str) -> Turn:
        return Turn(
            "Thanks. And your email address?",
            SessionState.AWAITING_EMAIL,
            session.data.with_updates(name=message),
        )

    async def _handle_email(self, session: Session, message: str) -> Turn:
        if "@" not in message:
            return Turn("That doesn't look like a valid email. Please try again.")

        data = session.data.with_updates(email=message)
        summary = (
            "Booking Summary:\n"
            f"- Type: {data.appointment_type.name}\n"
            f"- Time: {self._format(data.selected_slot)}\n"
            f"- Patient: {data.name}\n"
            f"- Email: {data.email}\n"
            "\n"
            "Should I go ahead and book this? (Yes/No)"
        )
        return Turn(summary, SessionState.AWAITING_CONFIRMATION, data)

    async def _handle_confirmation(self, session: Session, message: str) -> Turn:
        decision = classify_confirmation(message)

        if decision == ConfirmationReply.CANCEL:
            logger.info("Booking cancelled by caller")
            return Turn(
                "Booking cancelled. Let me know if you want to start over.",
                SessionState.INIT,
                SessionData(),
            )

        if decision == ConfirmationReply.UNCLEAR:
            return Turn("Please confirm with 'Yes' or 'No'.")

        data = session.data
        request = BookingRequest(
            offering_id=data.appointment_type.id,
            start_time=data.selected_slot.start_time,
            name=data.name,
            email=data.email,
            reason=BOOKING_REASON,
        )
        try:
            confirmation = await self._provider.create_appointment(request)
        except Exception:
            logger.exception("Appointment creation failed")
            return Turn(BOOKING_ERROR)

        logger.info("Appointment confirmed (%s mode)", confirmation.method)
        if confirmation.method == "link":
            reply = (
                "✅ Appointment Confirmed!\n\n"
                f"Please complete your booking here: {confirmation.booking_url}"
            )
        else:
            start = confirmation.start_time or data.selected_slot.start_time
            reply = (
                "✅ Appointment Confirmed!\n\n"
                f"📅 Date: {format_slot(start, self._tz)}\n"
                f"🩺 Type: {confirmation.offering_name or data.appointment_type.name}\n"
                f"📍 Location: {confirmation.location or settings.clinic.location}"
            )
        return Turn(reply, SessionState.COMPLETED, data)

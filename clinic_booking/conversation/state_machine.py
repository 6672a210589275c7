"""
Allowed state transitions for the booking conversation.

The workflow engine decides *which* state comes next from the caller's
text; this module decides whether that move is legal. Every commit is
checked against the table, so a handler bug that would skip a step or
move backwards fails loudly instead of corrupting a session.

Usage:
    validate_transition(SessionState.AWAITING_NAME, SessionState.AWAITING_EMAIL)
    assert valid_next_states(SessionState.COMPLETED) == []
"""

import logging
from dataclasses import dataclass

from clinic_booking.schemas.session_schema import SessionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid state transition."""
    from_state: SessionState
    to_state: SessionState
    label: str


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


TRANSITIONS: list[Transition] = [
    # --- Greeting (fresh session, or the restart after a cancellation) ---
    Transition(SessionState.INIT, SessionState.AWAITING_REASON, "greeted"),

    # --- Booking flow ---
    Transition(SessionState.AWAITING_REASON, SessionState.AWAITING_DATE, "offering_selected"),
    Transition(SessionState.AWAITING_DATE, SessionState.SELECTING_SLOT, "slots_offered"),
    Transition(SessionState.SELECTING_SLOT, SessionState.AWAITING_NAME, "slot_selected"),
    Transition(SessionState.AWAITING_NAME, SessionState.AWAITING_EMAIL, "name_recorded"),
    Transition(SessionState.AWAITING_EMAIL, SessionState.AWAITING_CONFIRMATION, "email_recorded"),

    # --- Confirmation gate ---
    Transition(SessionState.AWAITING_CONFIRMATION, SessionState.COMPLETED, "booked"),
    Transition(SessionState.AWAITING_CONFIRMATION, SessionState.INIT, "cancelled"),
]


def validate_transition(from_state: SessionState, to_state: SessionState) -> Transition:
    """
    Look up the transition between two states.

    Returns:
        The matching Transition.

    Raises:
        InvalidTransitionError: If the table has no such edge.
    """
    for t in TRANSITIONS:
        if t.from_state == from_state and t.to_state == to_state:
            logger.debug(
                "State transition: %s -> %s (%s)",
                from_state.value, to_state.value, t.label,
            )
            return t

    valid = [s.value for s in valid_next_states(from_state)]
    raise InvalidTransitionError(
        f"No valid transition from '{from_state.value}' "
        f"to '{to_state.value}'. Valid next states: {valid}"
    )


def valid_next_states(state: SessionState) -> list[SessionState]:
    """Return all states reachable in one step from ``state``."""
    return [t.to_state for t in TRANSITIONS if t.from_state == state]


def is_terminal(state: SessionState) -> bool:
    """A booked conversation accepts no further input."""
    return not valid_next_states(state)

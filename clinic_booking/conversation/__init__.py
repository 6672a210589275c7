from clinic_booking.conversation.session_store import InMemorySessionStore, SessionStore
from clinic_booking.conversation.state_machine import (
    InvalidTransitionError,
    validate_transition,
    valid_next_states,
)
from clinic_booking.conversation.workflow import WorkflowEngine

__all__ = [
    "WorkflowEngine",
    "SessionStore",
    "InMemorySessionStore",
    "InvalidTransitionError",
    "validate_transition",
    "valid_next_states",
]

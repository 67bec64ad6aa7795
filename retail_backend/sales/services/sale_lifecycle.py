"""
FOLIO LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for a folio (the group of sale lines of one checkout).

    active -> cancelled   (terminal)

DESIGN PRINCIPLES:
- No database writes
- No stock mutation
- No side effects
- Single source of truth
"""

FOLIO_ACTIVE = "active"
FOLIO_CANCELLED = "cancelled"

# ============================================================
# DOMAIN ERRORS
# ============================================================


class FolioLifecycleError(Exception):
    pass


class InvalidFolioTransitionError(FolioLifecycleError):
    pass


# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    FOLIO_CANCELLED,
}

ALLOWED_TRANSITIONS = {
    FOLIO_ACTIVE: {
        FOLIO_CANCELLED,
    },
}


# ============================================================
# DOMAIN RULES
# ============================================================


def folio_state(lines) -> str:
    """A folio is cancelled once every one of its lines is flagged."""
    lines = list(lines)
    if lines and all(line.is_cancelled for line in lines):
        return FOLIO_CANCELLED
    return FOLIO_ACTIVE


def can_transition(*, from_state: str, to_state: str) -> bool:
    if from_state in TERMINAL_STATES:
        return False

    return to_state in ALLOWED_TRANSITIONS.get(from_state, set())


def validate_transition(*, folio: str, from_state: str, to_state: str):
    if not can_transition(from_state=from_state, to_state=to_state):
        raise InvalidFolioTransitionError(
            f"Folio {folio} cannot transition from '{from_state}' to '{to_state}'"
        )


def assert_editable(*, folio: str, state: str):
    if state in TERMINAL_STATES:
        raise InvalidFolioTransitionError(f"Folio {folio} is {state} and cannot be edited")

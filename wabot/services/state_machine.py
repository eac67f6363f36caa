from enum import Enum


class RegistrationState(str, Enum):
    NEW = "new"
    HAS_NAME = "has_name"
    COMPLETE = "complete"


VALID_TRANSITIONS = {
    RegistrationState.NEW: [RegistrationState.HAS_NAME, RegistrationState.COMPLETE],
    RegistrationState.HAS_NAME: [RegistrationState.COMPLETE],
    RegistrationState.COMPLETE: [],
}


class InvalidTransitionError(Exception):
    def __init__(self, from_state: RegistrationState, to_state: RegistrationState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid transition: {from_state.value} -> {to_state.value}")


def get_registration_state(user) -> RegistrationState:
    """Derive the onboarding state from the stored profile fields."""
    if not user.name:
        return RegistrationState.NEW
    if not user.email:
        return RegistrationState.HAS_NAME
    return RegistrationState.COMPLETE


def can_transition(from_state: RegistrationState, to_state: RegistrationState) -> bool:
    """Check if transition is valid."""
    allowed = VALID_TRANSITIONS.get(from_state, [])
    return to_state in allowed


def transition(from_state: RegistrationState, to_state: RegistrationState) -> RegistrationState:
    """Perform state transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_state, to_state):
        raise InvalidTransitionError(from_state, to_state)
    return to_state


def record_name(current_state: RegistrationState) -> RegistrationState:
    """Name captured, email still missing."""
    return transition(current_state, RegistrationState.HAS_NAME)


def complete(current_state: RegistrationState) -> RegistrationState:
    """Both name and email captured."""
    return transition(current_state, RegistrationState.COMPLETE)

"""Per-item animation lifecycle transition rules."""

from app.domain.animation import ItemState

_TERMINAL_STATES: set[ItemState] = {
    ItemState.SUCCEEDED,
    ItemState.FAILED,
    ItemState.TIMED_OUT,
    ItemState.ABANDONED,
}

_ALLOWED_TRANSITIONS: dict[ItemState, set[ItemState]] = {
    ItemState.NOT_STARTED: {ItemState.SUBMITTED, ItemState.FAILED, ItemState.ABANDONED},
    ItemState.SUBMITTED: {ItemState.POLLING, ItemState.FAILED, ItemState.ABANDONED},
    ItemState.POLLING: {
        ItemState.POLLING,
        ItemState.SUCCEEDED,
        ItemState.FAILED,
        ItemState.TIMED_OUT,
        ItemState.ABANDONED,
    },
    ItemState.SUCCEEDED: set(),
    ItemState.FAILED: set(),
    ItemState.TIMED_OUT: set(),
    ItemState.ABANDONED: set(),
}


class InvalidItemTransition(RuntimeError):
    """Raised when the orchestrator attempts a transition the lifecycle forbids."""

    def __init__(self, current: ItemState, attempted: ItemState) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(f"Invalid item transition {current.value} -> {attempted.value}")


def is_terminal(state: ItemState) -> bool:
    return state in _TERMINAL_STATES


def allowed_next_states(state: ItemState) -> list[ItemState]:
    """Return deterministically ordered allowed successors for a state."""
    return sorted(_ALLOWED_TRANSITIONS.get(state, set()), key=lambda s: s.value)


def ensure_item_transition(old_state: ItemState, new_state: ItemState) -> None:
    if new_state not in _ALLOWED_TRANSITIONS.get(old_state, set()):
        raise InvalidItemTransition(old_state, new_state)


class ItemLifecycle:
    """Tracks one item's state and poll attempts through a single batch pass."""

    __slots__ = ("item_id", "state", "attempts")

    def __init__(self, item_id: str) -> None:
        self.item_id = item_id
        self.state = ItemState.NOT_STARTED
        self.attempts = 0

    def advance(self, new_state: ItemState) -> None:
        ensure_item_transition(self.state, new_state)
        self.state = new_state

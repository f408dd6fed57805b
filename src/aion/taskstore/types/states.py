from a2a.types import TaskState

__all__ = [
    "TERMINAL_STATES",
    "TERMINAL_STATE_VALUES",
    "is_terminal_state",
]

TERMINAL_STATES: frozenset[TaskState] = frozenset({
    TaskState.completed,
    TaskState.canceled,
    TaskState.failed,
    TaskState.rejected,
})

# Wire form as persisted in the ``status_state`` column
TERMINAL_STATE_VALUES: frozenset[str] = frozenset(state.value for state in TERMINAL_STATES)


def is_terminal_state(state: TaskState | str | None) -> bool:
    """Check whether a task state (enum or wire value) is in the terminal set"""
    if state is None:
        return False
    if isinstance(state, TaskState):
        return state in TERMINAL_STATES
    return state in TERMINAL_STATE_VALUES

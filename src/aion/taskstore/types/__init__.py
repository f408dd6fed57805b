from .entities import TaskRecord
from .states import TERMINAL_STATES, TERMINAL_STATE_VALUES, is_terminal_state

__all__ = [
    "TaskRecord",
    "TERMINAL_STATES",
    "TERMINAL_STATE_VALUES",
    "is_terminal_state",
]

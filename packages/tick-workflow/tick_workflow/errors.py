"""Exceptions raised by the workflow engine."""
from __future__ import annotations

from typing import Any


class WorkflowError(Exception):
    """Raised when an event targets a state the specification does not declare."""


class NoTransitionAllowed(Exception):
    """Raised when no event variant matches the name and guards in the current state."""


class WorkflowDefinitionError(Exception):
    """Raised on malformed declarations (duplicate state, event outside a state)."""


class TransitionHalted(Exception):
    """Raised by ``halt_now`` to abort a transition immediately."""

    def __init__(self, halted_because: Any = None) -> None:
        self.halted_because = halted_because
        if halted_because is None:
            super().__init__()
        else:
            super().__init__(halted_because)

"""Per-invocation transition state."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tick_workflow.errors import TransitionHalted


@dataclass
class TransitionContext:
    """Halt flags for a single ``process_event`` call.

    Hooks and actions halt the transition through this object. The engine
    resets it before the before-transition hook and checks it after that
    hook and after the action.
    """

    halted: bool = False
    halted_because: Any = None

    def reset(self) -> None:
        self.halted = False
        self.halted_because = None

    def halt(self, reason: Any = None) -> None:
        """Mark the transition halted; the engine stops at its next checkpoint."""
        self.halted_because = reason
        self.halted = True

    def halt_now(self, reason: Any = None) -> None:
        """Mark the transition halted and raise TransitionHalted."""
        self.halt(reason)
        raise TransitionHalted(reason)

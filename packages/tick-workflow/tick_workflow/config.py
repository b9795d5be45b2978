"""Workflow configuration dataclass."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WorkflowConfig:
    """Immutable per-class configuration for workflow objects.

    Attributes:
        column: Attribute name the default persistence stores the state in.
        method_callbacks: Fall back to ``<event>``, ``on_<state>_entry`` and
            ``on_<state>_exit`` methods when no inline action or hook is set.
    """

    column: str = "workflow_state"
    method_callbacks: bool = True

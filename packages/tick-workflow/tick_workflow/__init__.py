"""tick-workflow - Declarative finite state machines for plain Python objects."""
from __future__ import annotations

from tick_workflow.config import WorkflowConfig
from tick_workflow.context import TransitionContext
from tick_workflow.engine import current_state, find_callback, process_event
from tick_workflow.errors import (
    NoTransitionAllowed,
    TransitionHalted,
    WorkflowDefinitionError,
    WorkflowError,
)
from tick_workflow.persistence import (
    AttributePersistence,
    MappingPersistence,
    MemoryPersistence,
    StatePersistence,
    with_state,
    without_state,
)
from tick_workflow.specification import Specification, SpecificationBuilder
from tick_workflow.types import EventCollection, EventDef, StateDef
from tick_workflow.workflow import Workflow

__all__ = [
    "Workflow",
    "WorkflowConfig",
    "Specification",
    "SpecificationBuilder",
    "StateDef",
    "EventDef",
    "EventCollection",
    "TransitionContext",
    "StatePersistence",
    "MemoryPersistence",
    "AttributePersistence",
    "MappingPersistence",
    "with_state",
    "without_state",
    "current_state",
    "process_event",
    "find_callback",
    "WorkflowError",
    "NoTransitionAllowed",
    "TransitionHalted",
    "WorkflowDefinitionError",
]

"""Specification - the immutable description of a state machine."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from tick_workflow.errors import WorkflowDefinitionError
from tick_workflow.types import (
    Action,
    EntryHook,
    ErrorHook,
    EventCollection,
    EventDef,
    ExitHook,
    Guard,
    StateDef,
    TransitionHook,
)


@dataclass(frozen=True, eq=False)
class Specification:
    """States keyed by name plus the global transition hooks.

    ``initial_state`` is used when nothing has been persisted yet, or when
    the persisted value names no declared state. A specification with no
    states is valid; its ``initial_state`` is ``None``.
    """

    states: Mapping[str, StateDef] = field(default_factory=dict)
    initial_state: StateDef | None = None
    before_transition: TransitionHook | None = None
    after_transition: TransitionHook | None = None
    on_transition: TransitionHook | None = None
    on_error: ErrorHook | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "states", MappingProxyType(dict(self.states)))
        if self.initial_state is None and self.states:
            object.__setattr__(self, "initial_state", next(iter(self.states.values())))

    def state(self, name: str) -> StateDef | None:
        """Look up a state by name."""
        return self.states.get(name)

    def event_names(self) -> list[str]:
        """Distinct event names across all states, declaration order."""
        names: dict[str, None] = {}
        for state in self.states.values():
            for name in state.events.names():
                names[name] = None
        return list(names)


class SpecificationBuilder:
    """Fluent declaration of a Specification.

    Events attach to the most recently opened state::

        spec = (
            SpecificationBuilder()
            .state("draft")
            .event("submit", transitions_to="submitted")
            .state("submitted")
            .build()
        )

    The first declared state is the initial one unless ``initial`` names
    another.
    """

    def __init__(self) -> None:
        self._states: dict[str, dict[str, Any]] = {}
        self._current: str | None = None
        self._initial: str | None = None
        self._hooks: dict[str, Any] = {}

    def state(
        self,
        name: str,
        on_entry: EntryHook | None = None,
        on_exit: ExitHook | None = None,
    ) -> SpecificationBuilder:
        if name in self._states:
            raise WorkflowDefinitionError(f"State {name!r} is already declared")
        self._states[name] = {"on_entry": on_entry, "on_exit": on_exit, "events": []}
        self._current = name
        return self

    def event(
        self,
        name: str,
        transitions_to: str,
        guard: Guard | None = None,
        action: Action | None = None,
        meta: dict[str, Any] | None = None,
    ) -> SpecificationBuilder:
        if self._current is None:
            raise WorkflowDefinitionError(
                f"Event {name!r} must be declared inside a state"
            )
        self._states[self._current]["events"].append(
            EventDef(
                name=name,
                transitions_to=transitions_to,
                guard=guard,
                action=action,
                meta=dict(meta or {}),
            )
        )
        return self

    def initial(self, name: str) -> SpecificationBuilder:
        self._initial = name
        return self

    def before_transition(self, fn: TransitionHook) -> SpecificationBuilder:
        self._hooks["before_transition"] = fn
        return self

    def after_transition(self, fn: TransitionHook) -> SpecificationBuilder:
        self._hooks["after_transition"] = fn
        return self

    def on_transition(self, fn: TransitionHook) -> SpecificationBuilder:
        self._hooks["on_transition"] = fn
        return self

    def on_error(self, fn: ErrorHook) -> SpecificationBuilder:
        self._hooks["on_error"] = fn
        return self

    def build(self) -> Specification:
        states = {
            name: StateDef(
                name=name,
                on_entry=decl["on_entry"],
                on_exit=decl["on_exit"],
                events=EventCollection(tuple(decl["events"])),
            )
            for name, decl in self._states.items()
        }
        initial = None
        if self._initial is not None:
            initial = states.get(self._initial)
            if initial is None:
                raise WorkflowDefinitionError(
                    f"Initial state {self._initial!r} is not a declared state"
                )
        return Specification(states=states, initial_state=initial, **self._hooks)

"""Core data types for workflow specifications."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterator, Mapping

# Inline callables always receive the owning object first.
Guard = Callable[..., Any]  # (obj, *args) -> truthy
Action = Callable[..., Any]  # (obj, *args) -> result
EntryHook = Callable[..., None]  # (obj, from_name, event, *args)
ExitHook = Callable[..., None]  # (obj, to_name, event, *args)
TransitionHook = Callable[..., None]  # (obj, from_name, to_name, event, *args)
ErrorHook = Callable[..., None]  # (obj, error, from_name, to_name, event, *args)


@dataclass(frozen=True)
class EventDef:
    """One variant of an event. Several variants may share a name within a state."""

    name: str
    transitions_to: str  # validated when fired, not when declared
    guard: Guard | None = None  # None means always applicable
    action: Action | None = None
    meta: Mapping[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "meta", MappingProxyType(dict(self.meta)))

    def applies(self, obj: Any, *args: Any) -> bool:
        if self.guard is None:
            return True
        return bool(self.guard(obj, *args))


class EventCollection:
    """Event variants of one state, in declaration order."""

    __slots__ = ("_events",)

    def __init__(self, events: tuple[EventDef, ...] = ()) -> None:
        self._events = tuple(events)

    def first_applicable(self, name: str, obj: Any, *args: Any) -> EventDef | None:
        """First variant named ``name`` whose guard passes. Stops at the first match."""
        for event in self._events:
            if event.name == name and event.applies(obj, *args):
                return event
        return None

    def names(self) -> list[str]:
        """Distinct event names, first declaration order."""
        return list(dict.fromkeys(event.name for event in self._events))

    def flat(self) -> list[EventDef]:
        return list(self._events)

    def __contains__(self, name: object) -> bool:
        return any(event.name == name for event in self._events)

    def __iter__(self) -> Iterator[EventDef]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"EventCollection({list(self._events)!r})"


@dataclass(frozen=True)
class StateDef:
    """A named state with optional inline entry/exit hooks."""

    name: str
    on_entry: EntryHook | None = None
    on_exit: ExitHook | None = None
    events: EventCollection = field(default_factory=EventCollection, compare=False)

    def __str__(self) -> str:
        return self.name

"""State persistence collaborators and state-based filters."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, MutableMapping, Protocol

if TYPE_CHECKING:
    from tick_workflow.workflow import Workflow


class StatePersistence(Protocol):
    """Where the engine loads the current state name from and stores the new one."""

    def load_state(self) -> str | None: ...

    def persist_state(self, new_state: str) -> Any: ...


class MemoryPersistence:
    """Keeps the state name in a plain field. No durability."""

    def __init__(self, state: str | None = None) -> None:
        self.state = state

    def load_state(self) -> str | None:
        return self.state

    def persist_state(self, new_state: str) -> str:
        self.state = new_state
        return new_state


class AttributePersistence:
    """Reads and writes a named attribute on an arbitrary object."""

    def __init__(self, obj: Any, column: str = "workflow_state") -> None:
        self.obj = obj
        self.column = column

    def load_state(self) -> str | None:
        return getattr(self.obj, self.column, None)

    def persist_state(self, new_state: str) -> str:
        setattr(self.obj, self.column, new_state)
        return new_state


class MappingPersistence:
    """Reads and writes one key of a dict-like record (a row, a document)."""

    def __init__(
        self, record: MutableMapping[str, Any], column: str = "workflow_state"
    ) -> None:
        self.record = record
        self.column = column

    def load_state(self) -> str | None:
        return self.record.get(self.column)

    def persist_state(self, new_state: str) -> str:
        self.record[self.column] = new_state
        return new_state


def with_state(objects: Iterable[Workflow], state: str) -> list[Workflow]:
    """Objects whose current state is ``state``."""
    return [obj for obj in objects if _state_name(obj) == state]


def without_state(objects: Iterable[Workflow], state: str) -> list[Workflow]:
    """Objects whose current state is anything but ``state``."""
    return [obj for obj in objects if _state_name(obj) != state]


def _state_name(obj: Workflow) -> str | None:
    current = obj.current_state
    return current.name if current is not None else None

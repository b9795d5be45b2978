"""Workflow mixin - binds a Specification to an owning class."""
from __future__ import annotations

from typing import Any, Callable, ClassVar

from tick_workflow.config import WorkflowConfig
from tick_workflow.context import TransitionContext
from tick_workflow.engine import current_state, process_event
from tick_workflow.errors import WorkflowError
from tick_workflow.persistence import AttributePersistence
from tick_workflow.specification import Specification
from tick_workflow.types import StateDef

# Class attribute recording the method names generated for that class.
_GENERATED = "_workflow_generated"


class Workflow:
    """Mixin that drives instances through a declared Specification.

    Declare the machine as a class attribute, or later with
    ``declare_workflow``::

        class Article(Workflow):
            workflow_spec = spec

    For every state ``s`` the class gains ``is_s()``; for every event ``e``
    it gains ``trigger_e(*args)`` and ``can_e()``. Declaring again, on the
    same class or a subclass, replaces the previous specification and its
    generated methods wholesale.

    The current state is stored in the attribute named by
    ``workflow_config.column``. Override ``load_state`` and
    ``persist_state`` to store it elsewhere.
    """

    workflow_spec: ClassVar[Specification | None] = None
    workflow_config: ClassVar[WorkflowConfig] = WorkflowConfig()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        spec = cls.__dict__.get("workflow_spec")
        if spec is not None:
            _assign_workflow(cls, spec)

    @classmethod
    def declare_workflow(cls, spec: Specification) -> None:
        """Replace this class's specification and regenerate its methods."""
        _assign_workflow(cls, spec)

    # --- State ---

    @property
    def spec(self) -> Specification | None:
        """The instance's own specification if set, else the class one."""
        return self.__dict__.get("workflow_spec", type(self).workflow_spec)

    @property
    def current_state(self) -> StateDef | None:
        spec = self.spec
        if spec is None:
            return None
        return current_state(spec, self)

    def load_state(self) -> str | None:
        return AttributePersistence(self, self.workflow_config.column).load_state()

    def persist_state(self, new_state: str) -> Any:
        return AttributePersistence(self, self.workflow_config.column).persist_state(
            new_state
        )

    def write_initial_state(self) -> None:
        """Store the current (possibly initial) state name explicitly."""
        state = self.current_state
        if state is not None:
            self.persist_state(state.name)

    # --- Transitions ---

    def process_event(self, name: str, *args: Any) -> Any:
        """Fire event ``name``. Returns False if a hook or action halted it."""
        spec = self.spec
        if spec is None:
            raise WorkflowError(
                f"No workflow specification declared for {type(self).__name__}"
            )
        last = self._last_context()
        context = TransitionContext(last.halted, last.halted_because)
        active = self.__dict__.setdefault("_workflow_active", [])
        active.append(context)
        try:
            return process_event(
                self,
                spec,
                name,
                *args,
                persistence=self,
                context=context,
                method_callbacks=self.workflow_config.method_callbacks,
            )
        finally:
            active.pop()
            self.__dict__["_workflow_last"] = context

    def halt(self, reason: Any = None) -> None:
        """Halt the running transition; it returns False at the next checkpoint."""
        self._target_context().halt(reason)

    def halt_now(self, reason: Any = None) -> None:
        """Halt the running transition and raise TransitionHalted."""
        self._target_context().halt_now(reason)

    @property
    def halted(self) -> bool:
        """True if the last transition was halted."""
        return self._last_context().halted

    @property
    def halted_because(self) -> Any:
        """Reason given to the last ``halt`` or ``halt_now``."""
        return self._last_context().halted_because

    def _last_context(self) -> TransitionContext:
        return self.__dict__.get("_workflow_last") or TransitionContext()

    def _target_context(self) -> TransitionContext:
        active = self.__dict__.get("_workflow_active")
        if active:
            return active[-1]
        return self.__dict__.setdefault("_workflow_last", TransitionContext())


class _Removed:
    """Hides a generated method inherited from a replaced specification."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, obj: Any, owner: type | None = None) -> Any:
        owner_name = owner.__name__ if owner is not None else type(obj).__name__
        raise AttributeError(f"{owner_name!r} object has no attribute {self.name!r}")


def _assign_workflow(cls: type, spec: Specification) -> None:
    for attr in cls.__dict__.get(_GENERATED, ()):
        if attr in cls.__dict__:
            delattr(cls, attr)

    methods: dict[str, Callable[..., Any]] = {}
    for state_name in spec.states:
        methods[f"is_{state_name}"] = _state_predicate(state_name)
    for event_name in spec.event_names():
        methods[f"trigger_{event_name}"] = _event_trigger(event_name)
        methods[f"can_{event_name}"] = _event_check(event_name)

    inherited: set[str] = set()
    for base in cls.__mro__[1:]:
        inherited.update(vars(base).get(_GENERATED, ()))
    for attr in sorted(inherited - set(methods)):
        setattr(cls, attr, _Removed(attr))

    for attr, fn in methods.items():
        setattr(cls, attr, fn)
    cls.workflow_spec = spec
    setattr(cls, _GENERATED, tuple(methods) + tuple(sorted(inherited - set(methods))))


def _state_predicate(state_name: str) -> Callable[[Workflow], bool]:
    def predicate(self: Workflow) -> bool:
        state = self.current_state
        return state is not None and state.name == state_name

    predicate.__name__ = f"is_{state_name}"
    return predicate


def _event_trigger(event_name: str) -> Callable[..., Any]:
    def trigger(self: Workflow, *args: Any) -> Any:
        return self.process_event(event_name, *args)

    trigger.__name__ = f"trigger_{event_name}"
    return trigger


def _event_check(event_name: str) -> Callable[[Workflow], bool]:
    # Guards see no call arguments here.
    def check(self: Workflow) -> bool:
        state = self.current_state
        if state is None:
            return False
        return state.events.first_applicable(event_name, self) is not None

    check.__name__ = f"can_{event_name}"
    return check

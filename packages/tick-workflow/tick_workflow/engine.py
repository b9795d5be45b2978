"""Transition engine - runs one event against an owning object."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from tick_workflow.errors import NoTransitionAllowed, WorkflowError

if TYPE_CHECKING:
    from tick_workflow.context import TransitionContext
    from tick_workflow.persistence import StatePersistence
    from tick_workflow.specification import Specification
    from tick_workflow.types import EventDef, StateDef, TransitionHook

logger = logging.getLogger(__name__)


def current_state(spec: Specification, persistence: StatePersistence) -> StateDef | None:
    """Persisted state if it is declared, otherwise the initial state. Never raises."""
    loaded = persistence.load_state()
    if loaded:
        state = spec.states.get(str(loaded))
        if state is not None:
            return state
        logger.debug("Persisted state %r is not declared, using initial state", loaded)
    return spec.initial_state


def find_callback(obj: Any, name: str) -> Callable[..., Any] | None:
    """Resolve a method callback by name.

    Lookup order:
    1. ``name`` as a public callable attribute
    2. ``_name`` defined anywhere in the class hierarchy
    3. ``__name`` (mangled) defined on the object's own class, parents ignored
    """
    cls = type(obj)
    if not name.startswith("_"):
        attr = getattr(obj, name, None)
        if callable(attr):
            return attr

    protected = f"_{name}"
    if any(protected in vars(klass) for klass in cls.__mro__):
        attr = getattr(obj, protected, None)
        if callable(attr):
            return attr

    private = f"_{cls.__name__.lstrip('_')}__{name}"
    if private in vars(cls):
        attr = getattr(obj, private, None)
        if callable(attr):
            return attr
    return None


def process_event(
    obj: Any,
    spec: Specification,
    name: str,
    *args: Any,
    persistence: StatePersistence,
    context: TransitionContext,
    method_callbacks: bool = True,
) -> Any:
    """Fire event ``name`` on ``obj``.

    Protocol order:
    1. Resolve the first applicable event variant (NoTransitionAllowed if none)
    2. Reset halt flags, validate the target state (WorkflowError if undeclared)
    3. before_transition -- stop if halted
    4. Action (inline, else ``<event>`` method) -- errors go to on_error if set,
       which halts; otherwise they propagate
    5. Stop if halted
    6. on_transition, exit hook of the old state
    7. Persist the new state name
    8. Entry hook of the new state, after_transition

    Returns the action's result, or the persistence result when the action
    returned None. Returns False when halted.
    """
    from_state = current_state(spec, persistence)
    event = None
    if from_state is not None:
        event = from_state.events.first_applicable(name, obj, *args)
    if event is None:
        raise NoTransitionAllowed(
            f"There is no event {name} defined for the {from_state} state"
        )

    context.reset()
    to_state = _check_transition(spec, event)
    logger.debug("Event %s: %s -> %s", name, from_state.name, to_state.name)

    _run_transition_hook(spec.before_transition, obj, from_state, to_state, name, args)
    if context.halted:
        logger.debug("Event %s halted before transition: %r", name, context.halted_because)
        return False

    result = None
    try:
        result = _run_action(obj, event, args, method_callbacks)
    except Exception as error:
        if spec.on_error is None:
            raise
        logger.warning("Event %s action failed, handled by on_error: %s", name, error)
        spec.on_error(obj, error, from_state.name, to_state.name, name, *args)
        context.halt(str(error))

    if context.halted:
        logger.debug("Event %s halted: %r", name, context.halted_because)
        return False

    _run_transition_hook(spec.on_transition, obj, from_state, to_state, name, args)
    _run_on_exit(obj, from_state, to_state, name, args, method_callbacks)

    persisted = persistence.persist_state(to_state.name)

    _run_on_entry(obj, to_state, from_state, name, args, method_callbacks)
    _run_transition_hook(spec.after_transition, obj, from_state, to_state, name, args)

    logger.debug("Event %s completed: now in %s", name, to_state.name)
    return persisted if result is None else result


def _check_transition(spec: Specification, event: EventDef) -> StateDef:
    to_state = spec.states.get(event.transitions_to)
    if to_state is None:
        raise WorkflowError(
            f"Event[{event.name}]'s transitions_to[{event.transitions_to}] "
            "is not a declared state."
        )
    return to_state


def _run_transition_hook(
    hook: TransitionHook | None,
    obj: Any,
    from_state: StateDef,
    to_state: StateDef,
    event: str,
    args: tuple[Any, ...],
) -> None:
    if hook is not None:
        hook(obj, from_state.name, to_state.name, event, *args)


def _run_action(
    obj: Any, event: EventDef, args: tuple[Any, ...], method_callbacks: bool
) -> Any:
    if event.action is not None:
        return event.action(obj, *args)
    if method_callbacks:
        callback = find_callback(obj, event.name)
        if callback is not None:
            return callback(*args)
    return None


def _run_on_exit(
    obj: Any,
    state: StateDef,
    new_state: StateDef,
    event: str,
    args: tuple[Any, ...],
    method_callbacks: bool,
) -> None:
    if state.on_exit is not None:
        state.on_exit(obj, new_state.name, event, *args)
    elif method_callbacks:
        callback = find_callback(obj, f"on_{state.name}_exit")
        if callback is not None:
            callback(new_state, event, *args)


def _run_on_entry(
    obj: Any,
    state: StateDef,
    prior_state: StateDef,
    event: str,
    args: tuple[Any, ...],
    method_callbacks: bool,
) -> None:
    if state.on_entry is not None:
        state.on_entry(obj, prior_state.name, event, *args)
    elif method_callbacks:
        callback = find_callback(obj, f"on_{state.name}_entry")
        if callback is not None:
            callback(prior_state, event, *args)

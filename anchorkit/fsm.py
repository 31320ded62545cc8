"""A small table-driven finite state machine."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

__all__ = ["State", "Event", "Transition", "Fsm"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class State:
    """A named FSM state."""

    name: str


@dataclass(frozen=True)
class Event:
    """A named FSM event."""

    name: str


@dataclass(frozen=True)
class Transition:
    """Moves the machine from one state to another when an event arrives."""

    from_state: State
    to_state: State
    event: Event


StateHandler = Callable[["Fsm", State], None]


class Fsm:
    """A state machine driven by a fixed list of transitions.

    The first transition whose source state and event match is taken. The exit
    handler runs for the old state, then the enter handler for the new one.
    Events raised from within a handler are dropped.
    """

    def __init__(
        self,
        transitions: Iterable[Transition],
        initial_state: State,
        on_state_enter: StateHandler | None = None,
        on_state_exit: StateHandler | None = None,
    ) -> None:
        self.transitions: tuple[Transition, ...] = tuple(transitions)
        self.initial_state = initial_state
        self.on_state_enter: StateHandler | None = on_state_enter
        self.on_state_exit: StateHandler | None = on_state_exit
        self._state = initial_state
        self._in_transition = False

    @property
    def state(self) -> State:
        """The current state."""
        return self._state

    @property
    def in_transition(self) -> bool:
        """Whether a transition's handlers are currently running."""
        return self._in_transition

    def process_event(self, event: Event) -> bool:
        """Apply an event; return True if a transition was executed."""
        if self._in_transition:
            _log.error("Attempting to process event from handler, dropping event")
            return False
        transition = next(
            (
                t
                for t in self.transitions
                if t.from_state == self._state and t.event == event
            ),
            None,
        )
        if transition is None:
            _log.debug(
                "Ignoring event with no defined transition (state=%s, event=%s)",
                self._state.name,
                event.name,
            )
            return False
        _log.info(
            "Executing transition from %s to %s (event=%s)",
            transition.from_state.name,
            transition.to_state.name,
            event.name,
        )
        self._in_transition = True
        try:
            if self.on_state_exit is not None:
                self.on_state_exit(self, self._state)
            self._state = transition.to_state
            if self.on_state_enter is not None:
                self.on_state_enter(self, self._state)
        finally:
            self._in_transition = False
        return True
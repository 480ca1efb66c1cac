"""The boot sequence: boot screen, then login, then the desktop."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from enum import Enum

from redcore.scheduler import Process, ProcessState


class BootState(Enum):
    BOOTSCREEN = "bootscreen"
    LOGIN = "login"
    DESKTOP = "desktop"


class BootStateMachine:
    """Starts the process for each boot stage once the previous one stops.

    ``launchers`` maps every state to a function that starts its process.
    """

    def __init__(self, launchers: Mapping[BootState, Callable[[], Process]]) -> None:
        missing = [state for state in BootState if state not in launchers]
        if missing:
            raise ValueError(f"no launcher for {', '.join(s.name for s in missing)}")
        self.launchers = dict(launchers)
        self.current_state: BootState | None = None
        self.current_proc: Process | None = None

    def initialize(self) -> None:
        self._advance(BootState.BOOTSCREEN)

    def eval_state(self) -> BootState:
        """Advance when the current stage's process has stopped; return the state."""
        if self.current_proc is None or self.current_state is None:
            raise RuntimeError("boot state machine has not been initialized")
        if self.current_proc.state == ProcessState.STOPPED:
            self._advance(self._next_state())
        assert self.current_state is not None
        return self.current_state

    def _advance(self, state: BootState) -> None:
        self.current_proc = self.launchers[state]()
        self.current_state = state

    def _next_state(self) -> BootState:
        if self.current_state is BootState.LOGIN:
            return BootState.DESKTOP
        return BootState.LOGIN
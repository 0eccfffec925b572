"""Engine run state and its guarded transitions."""

import threading
from enum import Enum

import structlog

from tradeloop.errors import EngineAlreadyRunningError

logger = structlog.get_logger(__name__)


class RunState(str, Enum):
    """Lifecycle state of the trading engine."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


# Allowed transitions. A stopped engine may be started again from scratch.
TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.NOT_STARTED: frozenset({RunState.RUNNING}),
    RunState.RUNNING: frozenset({RunState.STOPPED}),
    RunState.STOPPED: frozenset({RunState.RUNNING}),
}


class RunStateGuard:
    """Holds the run state and serialises every read and transition.

    Safe to use from any thread: start/stop transitions and reads are
    linearizable, so two concurrent starts cannot both succeed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = RunState.NOT_STARTED

    @property
    def state(self) -> RunState:
        with self._lock:
            return self._state

    @property
    def is_running(self) -> bool:
        return self.state == RunState.RUNNING

    def try_transition(self, target: RunState) -> bool:
        """Move to ``target`` if the transition table allows it."""
        with self._lock:
            if target not in TRANSITIONS[self._state]:
                return False
            logger.debug("run_state_transition", old=self._state.value, new=target.value)
            self._state = target
            return True

    def transition(self, target: RunState) -> None:
        """Move to ``target`` or raise.

        Raises:
            EngineAlreadyRunningError: target is RUNNING and the engine already runs.
            RuntimeError: any other transition the table does not allow.
        """
        with self._lock:
            current = self._state
            if target in TRANSITIONS[current]:
                logger.debug("run_state_transition", old=current.value, new=target.value)
                self._state = target
                return
        if current == RunState.RUNNING and target == RunState.RUNNING:
            raise EngineAlreadyRunningError(
                "Cannot start Trading Engine because it is already running!"
            )
        raise RuntimeError(
            f"Illegal engine state transition: {current.value} -> {target.value}"
        )

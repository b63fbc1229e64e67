"""Supervise the QEMU child until it exits or is killed.

The supervisor is a small state machine::

    RUNNING --exited--> EXITED
    RUNNING --terminating--> GRACE_WAIT --exited--> EXITED
                                        --timeout--> kill --> KILLED

RUNNING polls the child with a short timeout and rechecks the termination
flag between polls. Once termination is requested the child gets one grace
period to exit on its own before it is killed.
"""

import logging
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from uefi_run.errors import SupervisorError

log = logging.getLogger(__name__)


class ChildState(Enum):
    RUNNING = "running"
    GRACE_WAIT = "grace_wait"
    EXITED = "exited"
    KILLED = "killed"


TERMINAL_STATES = frozenset({ChildState.EXITED, ChildState.KILLED})


@dataclass(frozen=True)
class SupervisorTimeouts:
    """Wait bounds, in seconds."""

    poll_interval: float = 0.5
    grace_period: float = 1.0
    kill_timeout: float = 1.0


@dataclass(frozen=True)
class SupervisionResult:
    state: ChildState
    returncode: int | None


def describe_exit(returncode: int) -> str | None:
    """Return a user-facing message for an unsuccessful QEMU exit, or None."""
    if returncode == 0:
        return None
    if returncode > 0:
        return f"qemu exited with status {returncode}"
    try:
        name = signal.Signals(-returncode).name
    except ValueError:
        name = str(-returncode)
    return f"qemu exited unsuccessfully (signal {name})"


class Supervisor:
    """Own a running QEMU process until it reaches a terminal state."""

    def __init__(
        self,
        child: subprocess.Popen,
        terminating: threading.Event,
        timeouts: SupervisorTimeouts | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self._child = child
        self._terminating = terminating
        self._timeouts = timeouts or SupervisorTimeouts()
        self._stream = stream if stream is not None else sys.stderr
        self.state = ChildState.RUNNING

    def supervise(self) -> SupervisionResult:
        """Drive the state machine to a terminal state and return the outcome."""
        steps = {
            ChildState.RUNNING: self._poll,
            ChildState.GRACE_WAIT: self._grace_wait,
        }
        while self.state not in TERMINAL_STATES:
            next_state = steps[self.state]()
            if next_state is not self.state:
                log.debug(
                    "qemu pid %s: %s -> %s",
                    self._child.pid,
                    self.state.value,
                    next_state.value,
                )
            self.state = next_state
        return SupervisionResult(self.state, self._child.returncode)

    def _poll(self) -> ChildState:
        if self._wait(self._timeouts.poll_interval):
            return ChildState.EXITED
        if self._terminating.is_set():
            print("uefi-run terminating...", file=self._stream, flush=True)
            return ChildState.GRACE_WAIT
        return ChildState.RUNNING

    def _grace_wait(self) -> ChildState:
        if self._wait(self._timeouts.grace_period):
            return ChildState.EXITED
        self._kill()
        if not self._wait(self._timeouts.kill_timeout):
            raise SupervisorError(
                f"qemu (pid {self._child.pid}) did not exit after being killed"
            )
        return ChildState.KILLED

    def _kill(self) -> None:
        log.debug("killing qemu pid %s", self._child.pid)
        try:
            self._child.kill()
        except ProcessLookupError:
            # Exited between the last wait and the kill.
            log.debug("qemu pid %s already gone", self._child.pid)
        except OSError as e:
            raise SupervisorError(f"Not able to kill qemu (pid {self._child.pid}): {e}") from e

    def _wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; return whether the child has exited."""
        try:
            returncode = self._child.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return False
        except OSError as e:
            raise SupervisorError(f"Failed to wait on qemu (pid {self._child.pid}): {e}") from e
        message = describe_exit(returncode)
        if message:
            print(message, file=self._stream, flush=True)
        return True

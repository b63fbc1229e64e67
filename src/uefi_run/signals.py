"""Termination signal handling."""

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

TERMINATION_SIGNALS = tuple(
    getattr(signal, name)
    for name in ("SIGINT", "SIGTERM", "SIGHUP")
    if hasattr(signal, name)
)


@contextmanager
def termination_flag(signals: tuple[int, ...] = TERMINATION_SIGNALS) -> Iterator[threading.Event]:
    """Yield an event that is set when a termination signal arrives.

    The handlers only set the event, so the main thread keeps control and
    unwinds normally. Previous handlers are restored on exit. Must be called
    from the main thread.
    """
    terminating = threading.Event()

    def _on_signal(_signum, _frame):
        terminating.set()

    previous = {signum: signal.signal(signum, _on_signal) for signum in signals}
    try:
        yield terminating
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

"""SIGINT handling with escalation on a repeated interrupt."""

import os
import signal
import sys
import threading
from typing import Callable, Optional, TextIO

from testlauncher.core.state import LauncherState


INTERRUPT_NOTICE = "\nExiting... Interrupt again to exit immediately.\n"


class InterruptTrap:
    """SIGINT handler that asks the run to stop, then aborts on a second signal.

    The first interrupt sets ``state.wants_to_quit`` and prints a notice; the
    execution engine polls the flag and stops at its next opportunity. An
    interrupt that arrives while the flag is still set terminates the process
    with status 1 without running any cleanup.
    """

    def __init__(
        self,
        state: LauncherState,
        err: Optional[TextIO] = None,
        exit_fn: Callable[[int], None] = os._exit,
    ):
        self.state = state
        self.err = err
        self.exit_fn = exit_fn

    def __call__(self, signum, frame) -> None:
        if self.state.wants_to_quit:
            self.exit_fn(1)
            return

        self.state.wants_to_quit = True
        stream = self.err if self.err is not None else sys.stderr
        try:
            stream.write(INTERRUPT_NOTICE)
            stream.flush()
        except (OSError, ValueError, RuntimeError):
            # Closed, broken, or mid-write in the interrupted frame; the flag
            # is what matters.
            pass


def install_interrupt_trap(
    state: LauncherState,
    err: Optional[TextIO] = None,
    exit_fn: Callable[[int], None] = os._exit,
) -> bool:
    """Install the SIGINT trap for the current run.

    Returns:
        True if the handler was installed, False when called off the main
        thread, where Python does not allow signal handlers to be set.
    """
    if threading.current_thread() is not threading.main_thread():
        return False

    signal.signal(signal.SIGINT, InterruptTrap(state, err, exit_fn))
    return True

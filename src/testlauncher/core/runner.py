"""Test run orchestration."""

import atexit
import os
import sys
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, TextIO

import httpx

from testlauncher.config import ConfigurationOptions
from testlauncher.core.interrupt import install_interrupt_trap
from testlauncher.core.output import resolve_output_stream
from testlauncher.core.selector import ExecutionBackendSelector
from testlauncher.core.state import LauncherState, state as process_state


@dataclass(frozen=True)
class RunRequest:
    """Arguments and streams for one run."""

    arguments: tuple[str, ...]
    err: TextIO
    out: Optional[TextIO] = None


class Runner:
    """Turns a command line into a completed run with a 0/1 exit status."""

    def __init__(
        self,
        state: Optional[LauncherState] = None,
        exit_fn: Callable[[int], None] = os._exit,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the runner.

        Args:
            state: Launcher state to use (default: the process-wide state)
            exit_fn: Called to terminate the process on a non-zero autorun
                status or a second interrupt
            transport: Optional httpx transport for remote runs
        """
        self.state = state if state is not None else process_state
        self.exit_fn = exit_fn
        self.transport = transport

    def autorun(self) -> None:
        """Register an exit hook that runs the suite.

        Does nothing if autorun was disabled, the hook is already installed,
        or this process is serving remote runs on a loopback address.

        Unhandled exceptions are detected through a wrapper around
        ``sys.excepthook``. A host that replaces the hook after this call
        (e.g. ``rich.traceback.install()``) hides crashes from it, and the
        suite will then run after a crash.

        A failing run ends the process with ``os._exit(status)``: raising
        SystemExit inside an atexit handler does not change the exit code.
        Exit handlers registered before ``autorun()`` (``logging.shutdown``
        among them) are therefore skipped when the suite fails.
        """
        if self.state.autorun_disabled or self.state.autorun_installed:
            return
        if self.state.running_in_remote_server():
            return

        self._record_unhandled_errors()
        atexit.register(self._at_exit)
        self.state.mark_autorun_installed()

    def disable_autorun(self) -> None:
        self.state.disable_autorun()

    def _record_unhandled_errors(self) -> None:
        previous_hook = sys.excepthook

        def excepthook(exc_type, exc_value, exc_traceback):
            self.state.last_error = exc_value
            previous_hook(exc_type, exc_value, exc_traceback)

        sys.excepthook = excepthook

    def _should_autorun(self) -> bool:
        error = self.state.last_error
        if error is None:
            return True
        return isinstance(error, SystemExit) and error.code in (None, 0)

    def _at_exit(self) -> None:
        # Let the interpreter die quietly if it is exiting because of an
        # unhandled exception.
        if not self._should_autorun():
            return

        status = self.run(sys.argv[1:], sys.stderr, sys.stdout)
        if status != 0:
            for stream in (sys.stdout, sys.stderr):
                stream.flush()
            self.exit_fn(status)

    def run(self, args: Sequence[str], err: Optional[TextIO] = None, out: Optional[TextIO] = None) -> int:
        """Run a test suite.

        This is used by the command line and by autorun, and is available to
        any other automation tool. It can be called several times in one
        process. The configuration file is re-read on every call, but modules
        already imported by earlier runs are not reloaded; reload them
        yourself if a run depends on them changing.

        Args:
            args: Command-line arguments
            err: Error stream (default: sys.stderr)
            out: Output stream (default: sys.stdout)

        Returns:
            Exit status: 0 on success, 1 on failure
        """
        request = RunRequest(arguments=tuple(args), err=err if err is not None else sys.stderr, out=out)
        try:
            install_interrupt_trap(self.state, request.err, self.exit_fn)
            config = ConfigurationOptions(request.arguments).parse_options()
            stream = resolve_output_stream(config, request.err, request.out)
            selector = ExecutionBackendSelector(self.state, transport=self.transport)
            status = selector.execute(config, request.err, stream)
            return 0 if status == 0 else 1
        finally:
            self.state.reset()


default_runner = Runner()

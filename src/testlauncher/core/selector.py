"""Choose between local and remote execution."""

from typing import Optional, TextIO

import httpx

from testlauncher.config import RunConfiguration
from testlauncher.core.executor import LocalCommandLine
from testlauncher.core.state import LauncherState
from testlauncher.remote.client import (
    RemoteCommandLine,
    RemoteConnectionUnavailable,
    RemoteSuccess,
)


FALLBACK_NOTICE = "No remote server is running. Running in local process instead ...\n"


class ExecutionBackendSelector:
    """Runs a configuration remotely or locally.

    A remote run that cannot connect falls back to local execution. Every
    other remote failure is raised unchanged.
    """

    def __init__(self, state: LauncherState, transport: Optional[httpx.BaseTransport] = None):
        self.state = state
        self.transport = transport

    def execute(self, config: RunConfiguration, err: TextIO, out: TextIO) -> int:
        """Execute the run and return its exit status (0 or 1)."""
        try:
            if config.remote:
                outcome = RemoteCommandLine(config, transport=self.transport).attempt(err, out)
                if isinstance(outcome, RemoteSuccess):
                    return 0 if outcome.status == 0 else 1
                if not isinstance(outcome, RemoteConnectionUnavailable):
                    raise outcome.error
                err.write(FALLBACK_NOTICE)
                if config.verbose:
                    err.write(f"Could not connect to {config.remote_url}: {outcome.reason}\n")

            return LocalCommandLine(config, self.state).run(err, out)
        finally:
            self.state.reset()

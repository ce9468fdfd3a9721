"""Process-wide launcher state."""

import re
from typing import Optional


LOOPBACK_URI = re.compile(r"^https?://(127\.0\.0\.1|localhost):")


class LauncherState:
    """Flags shared by the runner, the interrupt trap and the execution engine.

    One instance lives for the whole process (``state`` below). Components
    receive it explicitly so tests can work with a private instance.

    ``wants_to_quit`` is written from the SIGINT handler, so it stays a plain
    attribute: assigning a bool needs no lock.
    """

    def __init__(self) -> None:
        self._autorun_disabled = False
        self._autorun_installed = False
        self.wants_to_quit = False
        self.last_error: Optional[BaseException] = None
        self.server_uri: Optional[str] = None

    @property
    def autorun_disabled(self) -> bool:
        return self._autorun_disabled

    def disable_autorun(self) -> None:
        self._autorun_disabled = True

    @property
    def autorun_installed(self) -> bool:
        return self._autorun_installed

    def mark_autorun_installed(self) -> None:
        self._autorun_installed = True

    @property
    def cancellation_requested(self) -> bool:
        return self.wants_to_quit

    def request_cancel(self) -> None:
        self.wants_to_quit = True

    def running_in_remote_server(self) -> bool:
        """Check if this process is serving remote runs on a loopback address."""
        if not self.server_uri:
            return False
        return bool(LOOPBACK_URI.match(self.server_uri))

    def reset(self) -> None:
        """Clear transient run state so the next run starts clean."""
        self.wants_to_quit = False


state = LauncherState()

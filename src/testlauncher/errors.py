"""Exceptions raised by TestLauncher."""


class LauncherError(Exception):
    """Base class for launcher errors."""

    pass


class ExecutionError(LauncherError):
    """Raised when the test command cannot be executed."""

    pass


class RemoteUnavailableError(LauncherError):
    """Raised when no remote launcher server accepts the connection."""

    pass

"""Remote execution client and server."""

from testlauncher.remote.client import (
    RemoteCommandLine,
    RemoteConnectionUnavailable,
    RemoteFailure,
    RemoteSuccess,
)

__all__ = ["RemoteCommandLine", "RemoteConnectionUnavailable", "RemoteFailure", "RemoteSuccess"]

"""Client for a remote launcher server."""

from dataclasses import dataclass
from typing import Optional, TextIO, Union

import httpx

from testlauncher.config import RunConfiguration
from testlauncher.errors import RemoteUnavailableError


@dataclass(frozen=True)
class RemoteSuccess:
    """The server completed the run."""

    status: int


@dataclass(frozen=True)
class RemoteConnectionUnavailable:
    """No server accepted the connection."""

    reason: str = ""


@dataclass(frozen=True)
class RemoteFailure:
    """The run could not be completed remotely for any other reason."""

    error: BaseException


RemoteOutcome = Union[RemoteSuccess, RemoteConnectionUnavailable, RemoteFailure]


class RemoteCommandLine:
    """Sends a run to a launcher server and relays its output."""

    def __init__(
        self,
        config: RunConfiguration,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the remote command line.

        Args:
            config: Options for this run; ``argv`` is forwarded to the server
            transport: Optional httpx transport, used instead of the network
        """
        self.config = config
        self.base_url = config.remote_url
        self.transport = transport

    def _client(self) -> httpx.Client:
        # Connecting should fail fast; the run itself may take a long time.
        timeout = httpx.Timeout(self.config.remote_timeout, connect=5.0)
        return httpx.Client(base_url=self.base_url, timeout=timeout, transport=self.transport)

    def attempt(self, err: TextIO, out: TextIO) -> RemoteOutcome:
        """Try to run remotely and classify the result."""
        try:
            with self._client() as client:
                response = client.post("/run", json={"argv": list(self.config.argv)})
                response.raise_for_status()
                data = response.json()
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            return RemoteConnectionUnavailable(reason=str(e))
        except Exception as e:
            return RemoteFailure(error=e)

        output = data.get("output", "")
        if output:
            out.write(output)
            out.flush()

        return RemoteSuccess(status=int(data.get("status", 1)))

    def run(self, err: TextIO, out: TextIO) -> int:
        """Run remotely.

        Raises:
            RemoteUnavailableError: If no server is listening
        """
        outcome = self.attempt(err, out)
        if isinstance(outcome, RemoteSuccess):
            return outcome.status
        if isinstance(outcome, RemoteConnectionUnavailable):
            raise RemoteUnavailableError(f"No remote server at {self.base_url}: {outcome.reason}")
        raise outcome.error

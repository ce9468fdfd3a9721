"""HTTP server that runs suites on behalf of remote launchers."""

import io
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import click
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from testlauncher import __version__
from testlauncher.config import DEFAULT_REMOTE_PORT, ConfigurationOptions
from testlauncher.core.selector import ExecutionBackendSelector
from testlauncher.core.state import LauncherState, state as process_state


HELP_NOT_SUPPORTED = "--help is not supported for remote runs"


class RunPayload(BaseModel):
    """Body of a POST /run request."""

    argv: list[str] = Field(default_factory=list)


def create_app(state: Optional[LauncherState] = None) -> FastAPI:
    """Create the launcher server app.

    Runs requested over HTTP always execute locally in this process; a
    ``--remote`` flag in the forwarded arguments is ignored.
    """
    state = state if state is not None else process_state
    app = FastAPI(title="TestLauncher Server", version=__version__)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/run")
    def run(payload: RunPayload) -> Any:
        if "--help" in payload.argv:
            return JSONResponse(status_code=400, content={"error": HELP_NOT_SUPPORTED})
        try:
            config = ConfigurationOptions(payload.argv).parse_options()
        except click.exceptions.Exit:
            return JSONResponse(status_code=400, content={"error": HELP_NOT_SUPPORTED})
        except (click.ClickException, ValidationError, FileNotFoundError) as e:
            return JSONResponse(status_code=400, content={"error": str(e)})

        config = config.model_copy(update={"remote": False})
        err = io.StringIO()
        out = io.StringIO()
        status = ExecutionBackendSelector(state).execute(config, err, out)
        return {"status": status, "output": out.getvalue() + err.getvalue()}

    return app


@contextmanager
def serving(state: LauncherState, host: str, port: int) -> Iterator[str]:
    """Mark this process as a launcher server for the duration of the block."""
    state.server_uri = f"http://{host}:{port}"
    try:
        yield state.server_uri
    finally:
        state.server_uri = None


def serve(
    host: str = "127.0.0.1",
    port: int = DEFAULT_REMOTE_PORT,
    state: Optional[LauncherState] = None,
    log_level: str = "info",
) -> None:
    """Serve remote runs until interrupted."""
    import uvicorn

    state = state if state is not None else process_state
    with serving(state, host, port):
        uvicorn.run(create_app(state), host=host, port=port, log_level=log_level)

"""Tests for backend selection."""

import io
from unittest.mock import patch

import httpx
import pytest

from testlauncher.config import RunConfiguration
from testlauncher.core.selector import FALLBACK_NOTICE, ExecutionBackendSelector
from testlauncher.errors import ExecutionError


def refusing_transport() -> httpx.MockTransport:
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


class TestExecutionBackendSelector:
    """Tests for ExecutionBackendSelector."""

    def test_local_when_remote_disabled(self, state, python_command):
        """Test local execution is used by default."""
        config = RunConfiguration(command=python_command("print('local run')"))
        err = io.StringIO()
        out = io.StringIO()

        status = ExecutionBackendSelector(state).execute(config, err, out)

        assert status == 0
        assert "local run" in out.getvalue()
        assert err.getvalue() == ""

    def test_remote_success(self, state):
        """Test the remote status is returned when the server runs the suite."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"status": 0, "output": "ok\n"}))
        config = RunConfiguration(remote=True, command="nonexistentcommand123")
        out = io.StringIO()

        status = ExecutionBackendSelector(state, transport=transport).execute(config, io.StringIO(), out)

        assert status == 0
        assert out.getvalue() == "ok\n"

    def test_remote_status_is_normalised(self, state):
        """Test a non-zero remote status becomes 1."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"status": 7, "output": ""}))
        config = RunConfiguration(remote=True)

        status = ExecutionBackendSelector(state, transport=transport).execute(config, io.StringIO(), io.StringIO())

        assert status == 1

    def test_falls_back_to_local(self, state, python_command):
        """Test an unreachable server falls back to local with one notice."""
        config = RunConfiguration(remote=True, command=python_command("print('local run')"))
        err = io.StringIO()
        out = io.StringIO()

        status = ExecutionBackendSelector(state, transport=refusing_transport()).execute(config, err, out)

        assert status == 0
        assert err.getvalue() == FALLBACK_NOTICE
        assert err.getvalue() == "No remote server is running. Running in local process instead ...\n"
        assert "local run" in out.getvalue()

    def test_fallback_returns_local_failure(self, state, python_command):
        """Test the local status is returned after falling back."""
        config = RunConfiguration(remote=True, command=python_command("raise SystemExit(1)"))

        status = ExecutionBackendSelector(state, transport=refusing_transport()).execute(
            config, io.StringIO(), io.StringIO()
        )

        assert status == 1

    def test_other_remote_failures_propagate(self, state):
        """Test remote errors other than connection failures are raised."""
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        config = RunConfiguration(remote=True)
        err = io.StringIO()

        with patch("testlauncher.core.selector.LocalCommandLine") as local:
            with pytest.raises(httpx.HTTPStatusError):
                ExecutionBackendSelector(state, transport=transport).execute(config, err, io.StringIO())

        local.assert_not_called()
        assert err.getvalue() == ""

    def test_resets_state_after_success(self, state, python_command):
        """Test the indicator is cleared after a run."""
        config = RunConfiguration(command=python_command("pass"))
        state.request_cancel()

        ExecutionBackendSelector(state).execute(config, io.StringIO(), io.StringIO())

        assert state.wants_to_quit is False

    def test_resets_state_after_error(self, state):
        """Test the indicator is cleared even when execution raises."""
        config = RunConfiguration(command="nonexistentcommand123")
        state.request_cancel()

        with pytest.raises(ExecutionError):
            ExecutionBackendSelector(state).execute(config, io.StringIO(), io.StringIO())

        assert state.wants_to_quit is False

    def test_connect_timeout_falls_back_to_local(self, state, python_command):
        """Test a host that never answers the connection falls back to local."""
        def handler(request):
            raise httpx.ConnectTimeout("timed out connecting", request=request)

        config = RunConfiguration(remote=True, command=python_command("print('local run')"))
        err = io.StringIO()
        out = io.StringIO()

        status = ExecutionBackendSelector(state, transport=httpx.MockTransport(handler)).execute(config, err, out)

        assert status == 0
        assert err.getvalue() == FALLBACK_NOTICE
        assert "local run" in out.getvalue()

    def test_read_timeout_propagates(self, state):
        """Test a timeout after connecting is not treated as unavailable."""
        def handler(request):
            raise httpx.ReadTimeout("timed out reading", request=request)

        config = RunConfiguration(remote=True)

        with pytest.raises(httpx.ReadTimeout):
            ExecutionBackendSelector(state, transport=httpx.MockTransport(handler)).execute(
                config, io.StringIO(), io.StringIO()
            )

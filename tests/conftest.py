"""Shared fixtures for TestLauncher tests."""

import shlex
import signal
import sys

import pytest

from testlauncher.core.state import LauncherState


def _python_command(code: str) -> str:
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


@pytest.fixture(autouse=True)
def restore_sigint():
    """Put back the SIGINT handler a test may have replaced."""
    previous = signal.getsignal(signal.SIGINT)
    yield
    signal.signal(signal.SIGINT, previous)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test from an empty directory so no config file is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def state():
    """Create a fresh launcher state."""
    return LauncherState()


@pytest.fixture
def python_command():
    """Build a --command value that runs a Python snippet."""
    return _python_command

"""Core run orchestration functionality."""

from testlauncher.core.runner import Runner, RunRequest
from testlauncher.core.selector import ExecutionBackendSelector
from testlauncher.core.state import LauncherState

__all__ = ["Runner", "RunRequest", "ExecutionBackendSelector", "LauncherState"]

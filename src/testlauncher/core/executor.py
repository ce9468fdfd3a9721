"""Local test command execution.

This module runs the configured test command in a subprocess, streams its
output to the caller's stream, and stops the command when the run is
cancelled.
"""

import os
import shlex
import subprocess
from pathlib import Path
from typing import Optional, TextIO

from testlauncher.config import RunConfiguration
from testlauncher.core.state import LauncherState
from testlauncher.errors import ExecutionError


TERMINATE_GRACE_SECONDS = 5


class LocalCommandLine:
    """Runs the test command in a child process of this one."""

    def __init__(self, config: RunConfiguration, state: LauncherState):
        """Initialize the local command line.

        Args:
            config: Options for this run
            state: Launcher state holding the cancellation indicator
        """
        self.config = config
        self.state = state

    def build_command(self) -> list[str]:
        """Build the argument list for the test command."""
        cmd = shlex.split(self.config.command)
        cmd.extend(self.config.args)

        if self.config.fail_fast and "pytest" in self.config.command.lower() and "-x" not in cmd:
            cmd.append("-x")

        cmd.extend(self.config.paths)
        return cmd

    def run(self, err: TextIO, out: TextIO) -> int:
        """Execute the test command.

        Output from the command (stdout and stderr combined) is written to
        ``out`` line by line. Between lines the cancellation indicator is
        checked; once set, the child process is terminated.

        Returns:
            0 if the command exited successfully, 1 otherwise

        Raises:
            ExecutionError: If the command cannot be started
        """
        cmd = self.build_command()
        env = {**os.environ, **self.config.environment}

        if self.config.verbose:
            err.write(f"Running: {shlex.join(cmd)}\n")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                cwd=Path(self.config.working_directory),
                env=env,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ExecutionError(f"Error executing test command: {e}") from e

        with process:
            for line in process.stdout:
                out.write(line)
                if self.state.wants_to_quit:
                    self._stop(process)
                    break
            out.flush()
            return_code = process.wait()

        return 0 if return_code == 0 else 1

    def _stop(self, process: subprocess.Popen) -> Optional[int]:
        """Terminate the child, killing it if it ignores the request."""
        if process.poll() is not None:
            return process.returncode

        process.terminate()
        try:
            return process.wait(timeout=TERMINATE_GRACE_SECONDS)
        except subprocess.TimeoutExpired:
            process.kill()
            return process.wait()

"""
TestLauncher - turn a command line into a completed test run.

This package provides tools to:
- Run a test command and report a 0/1 exit status
- Stop a run gracefully on Ctrl-C, or immediately on a second Ctrl-C
- Delegate runs to a remote launcher server, falling back to local execution
- Run automatically when the host process exits normally
"""

__version__ = "0.1.0"
__author__ = "TestLauncher Team"


def run(args, err=None, out=None) -> int:
    """Run a test suite with the default launcher. See ``Runner.run``."""
    from testlauncher.core.runner import default_runner

    return default_runner.run(args, err, out)


def autorun() -> None:
    """Run the suite when the interpreter exits normally."""
    from testlauncher.core.runner import default_runner

    default_runner.autorun()


def disable_autorun() -> None:
    """Suppress autorun registration for the rest of this process."""
    from testlauncher.core.runner import default_runner

    default_runner.disable_autorun()

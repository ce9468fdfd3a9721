"""Output stream selection."""

import os
import sys
from typing import Optional, TextIO

from testlauncher.config import RunConfiguration


WINDOWS_COLOR_WARNING = (
    "Color output on Windows is supported with one of these installed:\n"
    "* colorama (pip install testlauncher[windows])\n"
    "* ANSICON 1.31 or later (https://github.com/adoxa/ansicon)\n"
    "But neither one could be found, so this may get messy...\n"
)


def windows_os() -> bool:
    return os.name == "nt"


def needs_ansi_translation(config: RunConfiguration) -> bool:
    """Check if ANSI escapes must be translated for the Windows console."""
    return config.color and windows_os() and not os.environ.get("ANSICON")


def resolve_output_stream(config: RunConfiguration, err: TextIO, out: Optional[TextIO] = None) -> TextIO:
    """Return the stream run output should be written to.

    An explicit stream other than ``sys.stdout`` is used as-is. Otherwise
    output goes to ``sys.stdout``, wrapped with colorama when colour was
    requested on a Windows console without ANSICON. If colorama is missing a
    warning is written to ``err`` and plain stdout is used.
    """
    if out is not None and out is not sys.stdout:
        return out

    if needs_ansi_translation(config):
        try:
            from colorama import AnsiToWin32

            return AnsiToWin32(sys.stdout).stream
        except ImportError:
            err.write(WINDOWS_COLOR_WARNING)

    return sys.stdout

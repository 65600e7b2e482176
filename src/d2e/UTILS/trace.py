"""
Shell-style trace lines for commands about to run.
"""
import sys
from typing import Optional, TextIO

from ..MODELS.command import Invocation

TRACE_PREFIX = "+ "


def trace(invocation: Invocation, stream: Optional[TextIO] = None) -> None:
    """
    Writes `+ program arg...` to stdout.

    The stream is flushed so the line lands before any output of the child process.
    """
    print(f"{TRACE_PREFIX}{invocation}", file=stream or sys.stdout, flush=True)

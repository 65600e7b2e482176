"""
Descriptors for external process invocations.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class CommandKind(str, Enum):
    """Semantic kind of an invocation, used to pick its failure policy."""

    VERSION = "version"
    INFO = "info"
    LOGIN = "login"
    PULL = "pull"
    CACHE_PULL = "cache-pull"
    TAG = "tag"
    PUSH = "push"
    REMOVE_IMAGE = "rmi"
    PRUNE = "prune"
    BUILD = "build"
    DAEMON = "daemon"


@dataclass(frozen=True)
class Invocation:
    """
    A fully-formed external process call.

    `stdin` is written to the process standard input when set; it never
    appears in `argv` or in the string form.
    """

    program: str
    args: Tuple[str, ...]
    kind: CommandKind
    stdin: Optional[str] = None

    @property
    def argv(self) -> List[str]:
        return [self.program, *self.args]

    @property
    def target(self) -> Optional[str]:
        """Last argument, i.e. the image reference for pull/push/rmi commands."""
        return self.args[-1] if self.args else None

    def __str__(self) -> str:
        return " ".join(self.argv)

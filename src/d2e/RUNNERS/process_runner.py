# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Execution of docker invocations, either blocking with inherited streams or
detached in the background.
"""
import subprocess
from typing import List, Optional

from ..MODELS.command import Invocation
from ..UTILS.trace import trace


class CommandFailedError(RuntimeError):
    """
    Raised when an invocation exits non-zero or cannot be started.
    """

    def __init__(self, invocation: Invocation, returncode: Optional[int] = None, reason: str = ""):
        self.invocation = invocation
        self.returncode = returncode
        super().__init__(reason or f"exit status {returncode}")


class ProcessRunner:
    """
    Runs external processes for the pipeline.
    """

    def __init__(self):
        # Background processes are referenced only so they are not reaped
        # while still running. Nothing waits on them.
        self._background: List[subprocess.Popen] = []

    def run(self, invocation: Invocation) -> None:
        """
        Runs an invocation to completion. Standard output and error are
        inherited from this process; `stdin` is piped when set.

        Args:
            invocation (Invocation): The command to run.

        Raises:
            CommandFailedError: On a non-zero exit status or when the program cannot be started.
        """
        try:
            result = subprocess.run(
                invocation.argv,
                input=invocation.stdin,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except OSError as e:
            raise CommandFailedError(invocation, reason=str(e)) from e

        if result.returncode != 0:
            raise CommandFailedError(invocation, result.returncode)

    def succeeds(self, invocation: Invocation) -> bool:
        """
        Runs an invocation with its output discarded.

        Returns:
            bool: True if the process exited with status 0.
        """
        try:
            result = subprocess.run(
                invocation.argv,
                input=invocation.stdin,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                text=True,
                shell=False,
            )
        except OSError:
            return False
        return result.returncode == 0

    def start_background(self, invocation: Invocation, debug: bool = False) -> None:
        """
        Starts an invocation without waiting for it. Its exit status is never checked.

        Args:
            invocation (Invocation): The command to start.
            debug (bool): Pass the process output through and trace the command.
                Output is discarded otherwise.
        """
        stdout = None
        stderr = None
        if debug:
            trace(invocation)
        else:
            stdout = subprocess.DEVNULL
            stderr = subprocess.DEVNULL

        try:
            process = subprocess.Popen(
                invocation.argv,
                stdout=stdout,
                stderr=stderr,
                shell=False,
            )
        except OSError as e:
            # Surfaces later through the readiness poll and failing commands.
            print(f"Failed to start {invocation.program}: {e}")
            return
        self._background.append(process)

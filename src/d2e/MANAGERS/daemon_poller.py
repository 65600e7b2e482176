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
Readiness polling for the docker daemon.
"""
import time
from typing import Callable, Optional

from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_fixed

from ..BUILDERS.command_builder import CommandBuilder
from ..RUNNERS.process_runner import ProcessRunner

DEFAULT_ATTEMPTS = 15
DEFAULT_INTERVAL = 1.0


class DaemonReadinessPoller:
    """
    Repeats `docker info` until it succeeds or the attempts run out.
    Running out of attempts is not an error: the caller carries on and later
    commands fail on their own if the daemon never came up.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        builder: CommandBuilder,
        attempts: int = DEFAULT_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initializes the poller.

        :param runner: Runner used for the status probe.
        :param builder: Builder producing the info probe.
        :param attempts: Maximum number of probes.
        :param interval: Seconds to wait between probes.
        :param sleep: Sleep function, replaceable in tests.
        """
        self.runner = runner
        self.builder = builder
        self.attempts = attempts
        self.interval = interval
        self.sleep = sleep or time.sleep

    def _probe(self) -> bool:
        return self.runner.succeeds(self.builder.info())

    def wait(self) -> bool:
        """
        Blocks until the daemon answers or all attempts have failed.

        :return: True if the daemon answered.
        """
        retrying = Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_fixed(self.interval),
            retry=retry_if_result(lambda ready: not ready),
            retry_error_callback=lambda retry_state: False,
            sleep=self.sleep,
        )
        return retrying(self._probe)

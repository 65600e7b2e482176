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
Orchestration of one pipeline run: daemon start, readiness wait, login, and
the pull, tag, push and cleanup batch.
"""
from typing import List, Optional

from ..BUILDERS.command_builder import CommandBuilder
from ..MODELS.command import CommandKind, Invocation
from ..MODELS.plugin_config import RunConfig
from ..RUNNERS.process_runner import CommandFailedError, ProcessRunner
from ..UTILS.trace import trace
from .daemon_poller import DaemonReadinessPoller


class AuthenticationError(RuntimeError):
    """Raised when the registry login fails."""


class PipelineOrchestrator:
    """
    Runs the commands of one pipeline invocation strictly in order, stopping
    at the first fatal failure.
    """

    def __init__(self,
                 config: RunConfig,
                 runner: Optional[ProcessRunner] = None,
                 builder: Optional[CommandBuilder] = None,
                 poller: Optional[DaemonReadinessPoller] = None):
        """
        Initializes the orchestrator.

        :param config: The run configuration.
        :param runner: Process runner. Defaults to a fresh ProcessRunner.
        :param builder: Command builder. Defaults to the standard docker paths.
        :param poller: Readiness poller. Defaults to 15 attempts one second apart.
        """
        self.config = config
        self.runner = runner or ProcessRunner()
        self.builder = builder or CommandBuilder()
        self.poller = poller or DaemonReadinessPoller(self.runner, self.builder)

    def run(self) -> None:
        """
        Executes the pipeline.

        :raises AuthenticationError: If the registry login fails.
        :raises CommandFailedError: If any other required command fails.
        """
        if not self.config.daemon.disabled:
            self.runner.start_background(
                self.builder.daemon(self.config.daemon),
                debug=self.config.daemon.debug,
            )

        # Exhausting the poll is not fatal; later commands fail on their own.
        self.poller.wait()

        self.login()
        self.execute(self.plan())

    def login(self) -> None:
        """
        Logs in to the registry, or announces guest mode when no password is set.
        """
        login = self.config.login
        if not login.password:
            print("Registry credentials not provided. Guest mode enabled.")
            return

        try:
            self.runner.run(self.builder.login(login))
        except CommandFailedError as e:
            raise AuthenticationError(f"Error authenticating: {e}") from e

    def plan(self) -> List[Invocation]:
        """
        Builds the ordered batch: version, info, pull, then tag and push for
        each tag, then image removal and prune when cleanup is enabled.

        :return: The invocations to execute.
        """
        config = self.config
        registry = config.daemon.registry
        commands = [
            self.builder.version(),
            self.builder.info(),
            self.builder.pull(config.pull),
        ]

        for tag in config.tags:
            commands.append(self.builder.tag(config.pull, tag, registry))
            if not config.dry_run:
                commands.append(self.builder.push(config.pull, tag, registry))

        if config.cleanup:
            commands.append(self.builder.remove_image(config.pull))
            commands.append(self.builder.prune())

        return commands

    def execute(self, commands: List[Invocation]) -> None:
        """
        Runs each command in turn, tracing it first. A failed cache pull is
        reported and skipped; any other failure aborts the batch.

        :param commands: The invocations to execute.
        :raises CommandFailedError: On the first failure that is not a cache pull.
        """
        for command in commands:
            trace(command)
            try:
                self.runner.run(command)
            except CommandFailedError:
                if command.kind is not CommandKind.CACHE_PULL:
                    raise
                print(f"Could not pull cache-from image {command.target}. Ignoring...")

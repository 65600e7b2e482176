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
Builders for docker command line invocations.
Every method is free of side effects and returns an Invocation descriptor.
"""
from datetime import datetime, timezone
from typing import List, Optional

from ..MODELS.command import CommandKind, Invocation
from ..MODELS.plugin_config import BuildConfig, DaemonConfig, LoginConfig, PullConfig
from .proxy_args import PROXY_KEYS, ProxyArgumentAugmenter

DOCKER_EXE = "/usr/local/bin/docker"
DOCKERD_EXE = "/usr/local/bin/dockerd"

LABEL_SCHEMA_PREFIX = "org.label-schema."
LABEL_SCHEMA_VERSION = "1.0"


def image_reference(pull: PullConfig) -> str:
    """The immutable source reference, `repo@sha`."""
    return f"{pull.repo}@{pull.sha}"


def destination_reference(pull: PullConfig, tag: str, registry: str) -> str:
    """
    The tag/push target, `registry/repo:tag`.

    The registry prefix is unconditional: an empty registry yields `/repo:tag`.
    """
    return f"{registry}/{pull.repo}:{tag}"


class CommandBuilder:
    """
    Translates configuration values into docker and dockerd invocations.
    """

    def __init__(self,
                 docker_exe: str = DOCKER_EXE,
                 dockerd_exe: str = DOCKERD_EXE,
                 augmenter: Optional[ProxyArgumentAugmenter] = None):
        """
        :param docker_exe: Path to the docker client.
        :param dockerd_exe: Path to the docker daemon.
        :param augmenter: Proxy argument augmenter used by build commands.
        """
        self.docker_exe = docker_exe
        self.dockerd_exe = dockerd_exe
        self.augmenter = augmenter or ProxyArgumentAugmenter()

    def _docker(self, kind: CommandKind, *args: str, stdin: Optional[str] = None) -> Invocation:
        return Invocation(program=self.docker_exe, args=tuple(args), kind=kind, stdin=stdin)

    def version(self) -> Invocation:
        return self._docker(CommandKind.VERSION, "version")

    def info(self) -> Invocation:
        return self._docker(CommandKind.INFO, "info")

    def login(self, login: LoginConfig) -> Invocation:
        """
        Creates the login command. The password is delivered on standard input
        and never appears among the arguments.
        """
        args = ["login", "-u", login.username, "--password-stdin"]
        if login.email:
            args.extend(["-e", login.email])
        args.append(login.registry)
        return self._docker(CommandKind.LOGIN, *args, stdin=login.password)

    def pull(self, pull: PullConfig) -> Invocation:
        # Digest syntax is not validated; a bad digest fails in docker itself.
        return self._docker(CommandKind.PULL, "pull", image_reference(pull))

    def cache_pull(self, image: str) -> Invocation:
        """Pull of a cache source image. Its failure is tolerated by the orchestrator."""
        return self._docker(CommandKind.CACHE_PULL, "pull", image)

    def tag(self, pull: PullConfig, tag: str, registry: str) -> Invocation:
        return self._docker(
            CommandKind.TAG,
            "tag",
            image_reference(pull),
            destination_reference(pull, tag, registry),
        )

    def push(self, pull: PullConfig, tag: str, registry: str) -> Invocation:
        return self._docker(CommandKind.PUSH, "push", destination_reference(pull, tag, registry))

    def remove_image(self, pull: PullConfig) -> Invocation:
        return self._docker(CommandKind.REMOVE_IMAGE, "rmi", image_reference(pull))

    def prune(self) -> Invocation:
        return self._docker(CommandKind.PRUNE, "system", "prune", "-f")

    def build(self, build: BuildConfig, now: Optional[datetime] = None) -> Invocation:
        """
        Creates the build command, including the label-schema labels and
        build arguments derived from the environment.

        :param build: Build parameters.
        :param now: Build timestamp. Defaults to the current UTC time.
        """
        args: List[str] = [
            "build",
            "--rm=true",
            "-f", build.dockerfile,
            "-t", build.name,
        ]
        if build.squash:
            args.append("--squash")
        if build.compress:
            args.append("--compress")
        if build.pull:
            args.append("--pull=true")
        if build.no_cache:
            args.append("--no-cache")
        for image in build.cache_from:
            args.extend(["--cache-from", image])

        build_args = self.augmenter.augment(build.args, PROXY_KEYS)
        build_args = self.augmenter.augment(build_args, build.args_env)
        for arg in build_args:
            args.extend(["--build-arg", arg])

        for host in build.add_host:
            args.extend(["--add-host", host])
        if build.target:
            args.extend(["--target", build.target])

        for label in self.label_schema(build, now):
            args.extend(["--label", f"{LABEL_SCHEMA_PREFIX}{label}"])
        # Caller labels are expected as pre-formatted key=value strings.
        for label in build.labels:
            args.extend(["--label", label])

        args.append(build.context)
        return self._docker(CommandKind.BUILD, *args)

    def build_batch(self, build: BuildConfig, now: Optional[datetime] = None) -> List[Invocation]:
        """Cache source pulls followed by the build itself."""
        commands = [self.cache_pull(image) for image in build.cache_from]
        commands.append(self.build(build, now))
        return commands

    @staticmethod
    def label_schema(build: BuildConfig, now: Optional[datetime] = None) -> List[str]:
        """
        Returns the label-schema entries (without prefix) for a build.
        """
        now = now or datetime.now(timezone.utc)
        labels = [
            f"schema-version={LABEL_SCHEMA_VERSION}",
            f"build-date={format_timestamp(now)}",
            f"vcs-ref={build.name}",
            f"vcs-url={build.remote}",
        ]
        labels.extend(build.label_schema)
        return labels

    def daemon(self, daemon: DaemonConfig) -> Invocation:
        """
        Creates the dockerd command. Flags whose values are empty or false
        are left out entirely.
        """
        args: List[str] = []
        if daemon.storage_path:
            args.extend(["--data-root", daemon.storage_path])
        if daemon.storage_driver:
            args.extend(["-s", daemon.storage_driver])
        if daemon.insecure and daemon.registry:
            args.extend(["--insecure-registry", daemon.registry])
        if daemon.ipv6:
            args.append("--ipv6")
        if daemon.mirror:
            args.extend(["--registry-mirror", daemon.mirror])
        if daemon.bip:
            args.extend(["--bip", daemon.bip])
        for dns in daemon.dns:
            args.extend(["--dns", dns])
        for dns_search in daemon.dns_search:
            args.extend(["--dns-search", dns_search])
        if daemon.mtu:
            args.extend(["--mtu", daemon.mtu])
        if daemon.experimental:
            args.append("--experimental")
        return Invocation(program=self.dockerd_exe, args=tuple(args), kind=CommandKind.DAEMON)


def format_timestamp(moment: datetime) -> str:
    """
    Formats a timestamp as RFC 3339 with second precision, using `Z` for UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat(timespec="seconds").replace("+00:00", "Z")

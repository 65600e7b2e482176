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
Unit tests for the command builder.
"""
from datetime import datetime, timezone

import pytest
from d2e.BUILDERS.command_builder import (
    CommandBuilder,
    destination_reference,
    format_timestamp,
    image_reference,
)
from d2e.BUILDERS.proxy_args import ProxyArgumentAugmenter
from d2e.MODELS.command import CommandKind
from d2e.MODELS.plugin_config import BuildConfig, DaemonConfig, LoginConfig, PullConfig

REGISTRY = "1234.dkr.ecr.region.amazonaws.com"


@pytest.fixture
def builder():
    return CommandBuilder("docker", "dockerd", augmenter=ProxyArgumentAugmenter({}))


@pytest.fixture
def pull():
    return PullConfig(repo="acct/img", sha="sha256:abc")


class TestReferences:
    """Tests for image reference formatting."""

    def test_image_reference(self, pull):
        assert image_reference(pull) == "acct/img@sha256:abc"

    def test_destination_reference(self, pull):
        assert destination_reference(pull, "v1", REGISTRY) == f"{REGISTRY}/acct/img:v1"

    def test_destination_keeps_leading_slash_without_registry(self, pull):
        assert destination_reference(pull, "v1", "") == "/acct/img:v1"

    def test_malformed_digest_passed_through(self, builder):
        cmd = builder.pull(PullConfig(repo="acct/img", sha="not a digest"))
        assert cmd.args == ("pull", "acct/img@not a digest")


class TestImageCommands:
    """Tests for the pull, tag, push and cleanup commands."""

    def test_probes(self, builder):
        assert builder.version().argv == ["docker", "version"]
        assert builder.version().kind == CommandKind.VERSION
        assert builder.info().argv == ["docker", "info"]
        assert builder.info().kind == CommandKind.INFO

    def test_pull(self, builder, pull):
        cmd = builder.pull(pull)
        assert cmd.argv == ["docker", "pull", "acct/img@sha256:abc"]
        assert cmd.kind == CommandKind.PULL

    def test_cache_pull(self, builder):
        cmd = builder.cache_pull("acct/cache:latest")
        assert cmd.argv == ["docker", "pull", "acct/cache:latest"]
        assert cmd.kind == CommandKind.CACHE_PULL

    def test_tag(self, builder, pull):
        cmd = builder.tag(pull, "v1", REGISTRY)
        assert cmd.argv == ["docker", "tag", "acct/img@sha256:abc", f"{REGISTRY}/acct/img:v1"]
        assert cmd.kind == CommandKind.TAG

    def test_push(self, builder, pull):
        cmd = builder.push(pull, "v1", REGISTRY)
        assert cmd.argv == ["docker", "push", f"{REGISTRY}/acct/img:v1"]
        assert cmd.kind == CommandKind.PUSH

    def test_remove_image(self, builder, pull):
        cmd = builder.remove_image(pull)
        assert cmd.argv == ["docker", "rmi", "acct/img@sha256:abc"]
        assert cmd.kind == CommandKind.REMOVE_IMAGE

    def test_prune(self, builder):
        cmd = builder.prune()
        assert cmd.argv == ["docker", "system", "prune", "-f"]
        assert cmd.kind == CommandKind.PRUNE

    def test_str_is_space_joined(self, builder, pull):
        assert str(builder.pull(pull)) == "docker pull acct/img@sha256:abc"


class TestLogin:
    """Tests for the login command."""

    def test_login_pipes_password(self, builder):
        login = LoginConfig(registry=REGISTRY, username="AWS", password="s3cret")
        cmd = builder.login(login)
        assert cmd.argv == ["docker", "login", "-u", "AWS", "--password-stdin", REGISTRY]
        assert cmd.stdin == "s3cret"
        assert cmd.kind == CommandKind.LOGIN

    def test_login_with_email(self, builder):
        login = LoginConfig(registry=REGISTRY, username="AWS", password="s3cret", email="ci@example.com")
        cmd = builder.login(login)
        assert cmd.args == ("login", "-u", "AWS", "--password-stdin", "-e", "ci@example.com", REGISTRY)
        assert "s3cret" not in cmd.argv


class TestDaemon:
    """Tests for the dockerd command."""

    def test_defaults(self, builder):
        cmd = builder.daemon(DaemonConfig())
        assert cmd.argv == ["dockerd", "--data-root", "/var/lib/docker"]
        assert cmd.kind == CommandKind.DAEMON

    def test_all_flags(self, builder):
        daemon = DaemonConfig(
            registry="registry.local",
            mirror="https://mirror.local",
            insecure=True,
            storage_driver="overlay2",
            storage_path="/data",
            bip="172.17.0.1/16",
            dns=["8.8.8.8", "1.1.1.1"],
            dns_search=["corp.local"],
            mtu="1400",
            ipv6=True,
            experimental=True,
        )
        cmd = builder.daemon(daemon)
        assert cmd.args == (
            "--data-root", "/data",
            "-s", "overlay2",
            "--insecure-registry", "registry.local",
            "--ipv6",
            "--registry-mirror", "https://mirror.local",
            "--bip", "172.17.0.1/16",
            "--dns", "8.8.8.8",
            "--dns", "1.1.1.1",
            "--dns-search", "corp.local",
            "--mtu", "1400",
            "--experimental",
        )

    def test_insecure_requires_registry(self, builder):
        cmd = builder.daemon(DaemonConfig(insecure=True))
        assert "--insecure-registry" not in cmd.args

    def test_empty_storage_path_omitted(self, builder):
        cmd = builder.daemon(DaemonConfig(storage_path=""))
        assert cmd.args == ()


class TestBuild:
    """Tests for the build command."""

    NOW = datetime(2024, 5, 1, 12, 30, 0, tzinfo=timezone.utc)

    def test_minimal_build(self, builder):
        build = BuildConfig(name="abc123", remote="https://git.local/repo.git")
        cmd = builder.build(build, now=self.NOW)
        assert cmd.kind == CommandKind.BUILD
        assert cmd.args == (
            "build", "--rm=true", "-f", "Dockerfile", "-t", "abc123",
            "--label", "org.label-schema.schema-version=1.0",
            "--label", "org.label-schema.build-date=2024-05-01T12:30:00Z",
            "--label", "org.label-schema.vcs-ref=abc123",
            "--label", "org.label-schema.vcs-url=https://git.local/repo.git",
            ".",
        )

    def test_options(self, builder):
        build = BuildConfig(
            name="abc123",
            context="app",
            squash=True,
            compress=True,
            pull=True,
            no_cache=True,
            cache_from=["acct/cache:latest"],
            args=["FOO=bar"],
            add_host=["db:10.0.0.2"],
            target="release",
        )
        args = builder.build(build, now=self.NOW).args
        assert args[-1] == "app"
        for flag in ("--squash", "--compress", "--pull=true", "--no-cache"):
            assert flag in args
        assert args[args.index("--cache-from") + 1] == "acct/cache:latest"
        assert args[args.index("--build-arg") + 1] == "FOO=bar"
        assert args[args.index("--add-host") + 1] == "db:10.0.0.2"
        assert args[args.index("--target") + 1] == "release"

    def test_caller_labels_follow_schema(self, builder):
        build = BuildConfig(name="n", label_schema=["vendor=acme"], labels=["team=ci"])
        args = list(builder.build(build, now=self.NOW).args)
        labels = [args[i + 1] for i, a in enumerate(args) if a == "--label"]
        assert labels[-2:] == ["org.label-schema.vendor=acme", "team=ci"]

    def test_proxy_args_from_environment(self):
        builder = CommandBuilder("docker", "dockerd",
                                 augmenter=ProxyArgumentAugmenter({"HTTP_PROXY": "http://proxy:3128"}))
        args = list(builder.build(BuildConfig(name="n"), now=self.NOW).args)
        build_args = [args[i + 1] for i, a in enumerate(args) if a == "--build-arg"]
        assert build_args == ["http_proxy=http://proxy:3128", "HTTP_PROXY=http://proxy:3128"]

    def test_args_env(self):
        builder = CommandBuilder("docker", "dockerd", augmenter=ProxyArgumentAugmenter({"GIT_SHA": "abc"}))
        args = list(builder.build(BuildConfig(name="n", args_env=["GIT_SHA"]), now=self.NOW).args)
        build_args = [args[i + 1] for i, a in enumerate(args) if a == "--build-arg"]
        assert build_args == ["GIT_SHA=abc", "GIT_SHA=abc"]

    def test_build_batch_pulls_cache_sources_first(self, builder):
        build = BuildConfig(name="n", cache_from=["a:1", "b:2"])
        kinds = [cmd.kind for cmd in builder.build_batch(build, now=self.NOW)]
        assert kinds == [CommandKind.CACHE_PULL, CommandKind.CACHE_PULL, CommandKind.BUILD]

    def test_format_timestamp_naive_is_utc(self):
        assert format_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05Z"

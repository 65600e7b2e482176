"""
Command Line Interface for D2E.
"""
import click
from ..PARSERS.env_parser import EnvParser
from ..BUILDERS.command_builder import CommandBuilder, DOCKER_EXE, DOCKERD_EXE
from ..BUILDERS.proxy_args import ProxyArgumentAugmenter
from ..MANAGERS.pipeline_orchestrator import AuthenticationError, PipelineOrchestrator
from ..MODELS.plugin_config import DEFAULT_STORAGE_PATH, DaemonConfig, LoginConfig, PullConfig, RunConfig
from ..RUNNERS.process_runner import CommandFailedError


def _split_list(ctx, param, value):
    return EnvParser.parse_list(value)


def _load_env_file(ctx, param, value):
    # Eager, so variables from the file are visible to the options below.
    if value:
        EnvParser.load_env_file(value)
    return value


@click.command()
@click.option('--env-file', envvar='PLUGIN_ENV_FILE', is_eager=True, expose_value=False,
              callback=_load_env_file, type=click.Path(dir_okay=False), help='Source environment values from a .env file')
@click.option('--repo', envvar='PLUGIN_REPO', required=True, help='Source repository, e.g. account/image')
@click.option('--sha', envvar='PLUGIN_SHA', required=True, help='Content digest of the source image')
@click.option('--tags', envvar=['PLUGIN_TAGS', 'PLUGIN_TAG'], default='latest', callback=_split_list,
              help='Comma separated destination tags')
@click.option('--registry', envvar=['PLUGIN_REGISTRY', 'DOCKER_REGISTRY'], default='',
              help='Destination registry, also used for login')
@click.option('--username', envvar=['PLUGIN_USERNAME', 'DOCKER_USERNAME'], default='', help='Registry username')
@click.option('--password', envvar=['PLUGIN_PASSWORD', 'DOCKER_PASSWORD'], default='', help='Registry password')
@click.option('--email', envvar=['PLUGIN_EMAIL', 'DOCKER_EMAIL'], default=None, help='Registry email')
@click.option('--dry-run', envvar='PLUGIN_DRY_RUN', is_flag=True, help='Tag but do not push')
@click.option('--cleanup/--no-cleanup', envvar='PLUGIN_PURGE', default=True,
              help='Remove the image and prune after pushing')
@click.option('--mirror', envvar='PLUGIN_MIRROR', default='', help='Registry mirror for the daemon')
@click.option('--insecure', envvar='PLUGIN_INSECURE', is_flag=True, help='Allow an insecure registry')
@click.option('--storage-driver', envvar='PLUGIN_STORAGE_DRIVER', default='', help='Daemon storage driver')
@click.option('--storage-path', envvar='PLUGIN_STORAGE_PATH', default=DEFAULT_STORAGE_PATH, help='Daemon data root')
@click.option('--daemon-off', envvar='PLUGIN_DAEMON_OFF', is_flag=True, help='Do not start the docker daemon')
@click.option('--debug', envvar=['PLUGIN_DEBUG', 'DOCKER_LAUNCH_DEBUG'], is_flag=True,
              help='Show daemon output')
@click.option('--bip', envvar='PLUGIN_BIP', default='', help='Daemon network bridge address')
@click.option('--dns', envvar='PLUGIN_CUSTOM_DNS', default='', callback=_split_list,
              help='Comma separated DNS servers')
@click.option('--dns-search', envvar='PLUGIN_CUSTOM_DNS_SEARCH', default='', callback=_split_list,
              help='Comma separated DNS search domains')
@click.option('--mtu', envvar='PLUGIN_MTU', default='', help='Daemon MTU')
@click.option('--ipv6', envvar='PLUGIN_IPV6', is_flag=True, help='Enable IPv6 networking')
@click.option('--experimental', envvar='PLUGIN_EXPERIMENTAL', is_flag=True, help='Enable experimental daemon features')
@click.option('--docker-exe', envvar='DOCKER_EXE', default=DOCKER_EXE, help='Path to the docker client')
@click.option('--dockerd-exe', envvar='DOCKERD_EXE', default=DOCKERD_EXE, help='Path to the docker daemon')
def cli(repo, sha, tags, registry, username, password, email, dry_run, cleanup,
        mirror, insecure, storage_driver, storage_path, daemon_off, debug,
        bip, dns, dns_search, mtu, ipv6, experimental, docker_exe, dockerd_exe):
    """
    D2E - pull an image by digest, tag it and push it to a registry.
    """
    config = RunConfig(
        login=LoginConfig(registry=registry, username=username, password=password, email=email),
        pull=PullConfig(repo=repo, sha=sha),
        daemon=DaemonConfig(
            registry=registry,
            mirror=mirror,
            insecure=insecure,
            storage_driver=storage_driver,
            storage_path=storage_path,
            disabled=daemon_off,
            debug=debug,
            bip=bip,
            dns=dns,
            dns_search=dns_search,
            mtu=mtu,
            ipv6=ipv6,
            experimental=experimental,
        ),
        tags=tags,
        dry_run=dry_run,
        cleanup=cleanup,
    )
    builder = CommandBuilder(docker_exe, dockerd_exe, augmenter=ProxyArgumentAugmenter())

    try:
        PipelineOrchestrator(config, builder=builder).run()
    except (AuthenticationError, CommandFailedError) as e:
        raise click.ClickException(str(e)) from e


def main():
    """
    Main entry point for the CLI.
    """
    cli()


if __name__ == '__main__':
    main()

"""
Models for the pipeline step configuration: daemon, login, pull, build and the
top-level run definition.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

DEFAULT_STORAGE_PATH = "/var/lib/docker"


class DaemonConfig(BaseModel):
    """
    Parameters for the docker daemon started by the step.
    When disabled, the daemon is assumed to be managed externally.
    """
    registry: str = ""
    mirror: str = ""
    insecure: bool = False
    storage_driver: str = ""
    storage_path: str = DEFAULT_STORAGE_PATH
    disabled: bool = False
    debug: bool = False
    bip: str = ""
    dns: List[str] = []
    dns_search: List[str] = []
    mtu: str = ""
    ipv6: bool = False
    experimental: bool = False


class LoginConfig(BaseModel):
    """
    Registry credentials. An empty password means guest mode.
    """
    registry: str = ""
    username: str = ""
    password: str = ""
    email: Optional[str] = None


class PullConfig(BaseModel):
    """
    Identifies one immutable source image by repository and content digest.
    """
    repo: str
    sha: str


class BuildConfig(BaseModel):
    """
    Parameters for an image build.
    """
    remote: str = ""
    name: str = ""
    dockerfile: str = "Dockerfile"
    context: str = "."
    tags: List[str] = []
    args: List[str] = []
    args_env: List[str] = []
    target: str = ""
    squash: bool = False
    pull: bool = False
    compress: bool = False
    no_cache: bool = False
    cache_from: List[str] = []
    add_host: List[str] = []
    label_schema: List[str] = []
    labels: List[str] = []


class RunConfig(BaseModel):
    """
    A single pipeline execution: pull by digest, tag, push, optionally clean up.
    """
    login: LoginConfig = Field(default_factory=LoginConfig)
    pull: PullConfig
    daemon: DaemonConfig = Field(default_factory=DaemonConfig)
    tags: List[str] = []
    dry_run: bool = False
    cleanup: bool = False

"""
Configuration for a single dvm invocation.

A Config is built once per process from (highest priority first):
1. Explicit command line values
2. Environment variables (DVM_DIR, SHELL, GITHUB_TOKEN, DVM_SILENT, DOCKER_VERSION, PATH)
3. Optional YAML settings file at <dvm_dir>/config.yml
4. Defaults

It is immutable and handed to every component explicitly.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Mapping

import yaml

from .common import InvalidArgument, InvalidOperation
from .environment import Platform, detect_platform

logger = logging.getLogger(__name__)


DEFAULT_DVM_DIR = os.path.join("~", ".dvm")
CONFIG_FILE_NAME = "config.yml"

DEFAULT_MIRROR_URL = "https://get.docker.com/builds"
DEFAULT_EXPERIMENTAL_MIRROR_URL = "https://experimental.docker.com/builds"
DEFAULT_RELEASE_URL = "https://download.getcarina.com/dvm"
DEFAULT_TIMEOUT_SECONDS = 30

SHELL_FORMATS = ("sh", "powershell", "cmd")
SCRIPT_EXTENSIONS = {
    "sh": "sh",
    "powershell": "ps1",
    "cmd": "cmd",
}

TRUTHY = {"1", "true", "yes", "on"}


def normalize_shell(value: str | None) -> str:
    """
    Map a --shell / $SHELL value onto a supported script format.

    $SHELL usually holds a path such as /bin/zsh, so only the basename is
    considered. Anything that is not powershell or cmd gets POSIX syntax.

    Args:
        value: Raw shell setting (may be a path, may be empty)

    Returns:
        One of 'sh', 'powershell', 'cmd'
    """
    if not value:
        return "sh"

    name = os.path.basename(value.strip().replace("\\", "/")).lower()
    if name.endswith(".exe"):
        name = name[:-len(".exe")]

    if name in ("powershell", "pwsh"):
        return "powershell"
    if name == "cmd":
        return "cmd"
    return "sh"


@dataclass(frozen=True)
class Settings:
    """
    Settings that may be overridden from the YAML settings file.

    Attributes:
        mirror_url: Base URL for released Docker client builds
        experimental_mirror_url: Base URL for experimental builds
        release_url: Base URL for dvm-helper releases (self upgrade)
        timeout_seconds: Timeout for every network request
    """
    mirror_url: str = DEFAULT_MIRROR_URL
    experimental_mirror_url: str = DEFAULT_EXPERIMENTAL_MIRROR_URL
    release_url: str = DEFAULT_RELEASE_URL
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        """Validate settings after initialization."""
        for name in ("mirror_url", "experimental_mirror_url", "release_url"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.startswith(("http://", "https://")):
                raise ValueError(f"Invalid {name}: {value!r}. Must be an http(s) URL")

        if not isinstance(self.timeout_seconds, int) or not 1 <= self.timeout_seconds <= 600:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 600"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Settings:
        """Create Settings from dictionary."""
        unknown = set(data) - {"mirror_url", "experimental_mirror_url", "release_url", "timeout_seconds"}
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        return Settings(
            mirror_url=data.get("mirror_url", DEFAULT_MIRROR_URL).rstrip("/"),
            experimental_mirror_url=data.get(
                "experimental_mirror_url", DEFAULT_EXPERIMENTAL_MIRROR_URL
            ).rstrip("/"),
            release_url=data.get("release_url", DEFAULT_RELEASE_URL).rstrip("/"),
            timeout_seconds=data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for one dvm invocation.

    Attributes:
        dvm_dir: Managed root directory
        shell: Script format for emitted PATH changes ('sh', 'powershell', 'cmd')
        debug: Print debug information
        silent: Suppress non-error output
        github_token: GitHub personal access token (raises API rate limit)
        docker_version: $DOCKER_VERSION fallback for install/use
        path: PATH of the invoking shell
        self_path: Path of the running dvm-helper executable
        color: Color the active entry of `dvm list` ($DVM_COLOR)
        platform: Detected OS/architecture
        settings: Settings from the YAML file (or defaults)
    """
    dvm_dir: str
    shell: str = "sh"
    debug: bool = False
    silent: bool = False
    github_token: str = ""
    docker_version: str = ""
    path: str = ""
    self_path: str = ""
    color: bool = True
    platform: Platform = field(default_factory=detect_platform)
    settings: Settings = field(default_factory=Settings)

    def __post_init__(self):
        """Validate config after initialization."""
        if not self.dvm_dir:
            raise ValueError("dvm_dir must not be empty")

        if self.shell not in SHELL_FORMATS:
            raise ValueError(
                f"Invalid shell: {self.shell}. "
                f"Must be one of: {', '.join(SHELL_FORMATS)}"
            )

    @property
    def bin_root(self) -> str:
        """Managed bin root holding one directory per installed version."""
        return os.path.join(self.dvm_dir, "bin", "docker")

    @property
    def alias_dir(self) -> str:
        return os.path.join(self.dvm_dir, "alias")

    @property
    def binary_name(self) -> str:
        return self.platform.binary_name("docker")

    @property
    def output_script_path(self) -> str:
        """Script the shell wrapper sources after every invocation."""
        return os.path.join(self.dvm_dir, ".tmp", "dvm-output." + SCRIPT_EXTENSIONS[self.shell])

    def version_dir(self, version: str) -> str:
        return os.path.join(self.bin_root, version)

    def alias_path(self, alias: str) -> str:
        return os.path.join(self.alias_dir, alias)


def _load_yaml(file_path: str) -> dict[str, Any]:
    """
    Load YAML settings file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed settings dictionary ({} for an empty file)

    Raises:
        InvalidArgument: If the file cannot be read or is not a mapping
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise InvalidArgument(f"Unable to read settings file {file_path}.", e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgument(f"Settings file {file_path} must contain a mapping.")
    return data


def load_settings(dvm_dir: str) -> Settings:
    """
    Load settings from <dvm_dir>/config.yml, defaults when absent.

    Raises:
        InvalidArgument: If the settings file exists but is invalid
    """
    file_path = os.path.join(dvm_dir, CONFIG_FILE_NAME)
    if not os.path.exists(file_path):
        return Settings()

    logger.debug(f"Loading settings from: {file_path}")
    data = _load_yaml(file_path)
    try:
        return Settings.from_dict(data)
    except (ValueError, TypeError, AttributeError) as e:
        raise InvalidArgument(f"Invalid settings file {file_path}: {e}", e) from e


def load_config(
    dvm_dir: str | None = None,
    shell: str | None = None,
    github_token: str | None = None,
    debug: bool = False,
    silent: bool | None = None,
    environ: Mapping[str, str] | None = None,
    self_path: str | None = None,
    platform: Platform | None = None,
) -> Config:
    """
    Build the configuration for this invocation.

    Explicit arguments win over environment variables, which win over defaults.

    Args:
        dvm_dir: --dvm-dir value
        shell: --shell value
        github_token: --github-token value
        debug: --debug flag
        silent: --silent flag (None falls back to $DVM_SILENT)
        environ: Environment mapping (defaults to os.environ)
        self_path: Path of the running executable (defaults to sys.argv[0])
        platform: Platform override (detected if None)

    Returns:
        Immutable Config

    Raises:
        InvalidArgument: If the settings file is invalid
        InvalidOperation: If the platform is not supported
    """
    if environ is None:
        environ = os.environ

    root = dvm_dir or environ.get("DVM_DIR") or DEFAULT_DVM_DIR
    root = os.path.abspath(os.path.expanduser(root))

    if silent is None:
        silent = environ.get("DVM_SILENT", "").strip().lower() in TRUTHY

    if platform is None:
        try:
            platform = detect_platform()
        except ValueError as e:
            raise InvalidOperation(str(e), e) from e

    return Config(
        dvm_dir=root,
        shell=normalize_shell(shell if shell is not None else environ.get("SHELL", "")),
        debug=debug,
        silent=bool(silent),
        github_token=github_token or environ.get("GITHUB_TOKEN", ""),
        docker_version=environ.get("DOCKER_VERSION", "").strip(),
        path=environ.get("PATH", ""),
        self_path=self_path or os.path.realpath(sys.argv[0]),
        color=environ.get("DVM_COLOR", "1").strip().lower() in TRUTHY,
        platform=platform,
        settings=load_settings(root),
    )

"""
dvm-helper - Docker Version Manager.

Installs multiple Docker client versions side by side and switches the
active one in the current shell by rewriting PATH.

Modules:
- Foundation: config, environment, logging, error taxonomy
- Remote: GitHub tag/release queries, checksum-verified downloads
- Core: alias store, version resolution, install management, PATH activation
- Self upgrade: verify-then-replace with rollback
"""

__version__ = "0.1.0"
__commit__ = "unknown"

VERSION = __version__

from .common import (
    RET_CODE_SUCCESS,
    RET_CODE_RUNTIME_ERROR,
    RET_CODE_INVALID_OPERATION,
    RET_CODE_INVALID_ARGUMENT,
    SYSTEM,
    EXPERIMENTAL,
    DvmError,
    InvalidArgument,
    InvalidOperation,
    DvmRuntimeError,
    ChecksumError,
)
from .environment import Platform, detect_platform
from .config import Config, Settings, load_config, normalize_shell
from .detection import VersionProbe, DockerVersionProbe, find_binary
from .aliases import AliasStore
from .collectors import GitHubClient, RemoteCatalog, NetworkError, compare_versions
from .download import Downloader
from .activation import SearchPath, PathActivator
from .resolver import Resolution, VersionResolver
from .installer import InstallManager
from .upgrade import BinaryInstaller, SelfUpgrader
from .manager import DockerVersionManager
from .logging_config import setup_logging

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Errors
    "RET_CODE_SUCCESS",
    "RET_CODE_RUNTIME_ERROR",
    "RET_CODE_INVALID_OPERATION",
    "RET_CODE_INVALID_ARGUMENT",
    "SYSTEM",
    "EXPERIMENTAL",
    "DvmError",
    "InvalidArgument",
    "InvalidOperation",
    "DvmRuntimeError",
    "ChecksumError",
    # Foundation
    "Platform",
    "detect_platform",
    "Config",
    "Settings",
    "load_config",
    "normalize_shell",
    # Remote
    "GitHubClient",
    "RemoteCatalog",
    "NetworkError",
    "compare_versions",
    "Downloader",
    # Core
    "VersionProbe",
    "DockerVersionProbe",
    "find_binary",
    "AliasStore",
    "SearchPath",
    "PathActivator",
    "Resolution",
    "VersionResolver",
    "InstallManager",
    # Self upgrade
    "BinaryInstaller",
    "SelfUpgrader",
    # Façade
    "DockerVersionManager",
    # Logging
    "setup_logging",
]

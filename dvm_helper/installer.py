"""
Installation and removal of Docker client versions.

Each version lives in <dvm_dir>/bin/docker/<version>/docker[.exe]; the
directory existing is what "installed" means. The experimental channel
is re-downloaded on every install.
"""

from __future__ import annotations

import fnmatch
import glob
import logging
import os
import shutil

from .activation import PathActivator
from .collectors import RemoteCatalog
from .common import (
    EXPERIMENTAL,
    SYSTEM,
    DvmRuntimeError,
    InvalidArgument,
    InvalidOperation,
    is_plain_name,
    require_plain_name,
)
from .config import Config
from .download import Downloader

logger = logging.getLogger(__name__)


class InstallManager:
    """Make resolved versions present locally, or remove them."""

    def __init__(
        self,
        config: Config,
        catalog: RemoteCatalog,
        downloader: Downloader,
        activator: PathActivator,
    ):
        self.config = config
        self.catalog = catalog
        self.downloader = downloader
        self.activator = activator

    def build_download_url(self, version: str) -> str:
        """
        Mirror URL of a Docker client build.

        Example: https://get.docker.com/builds/Linux/x86_64/docker-1.10.0
        """
        settings = self.config.settings
        platform = self.config.platform
        mirror_url = settings.mirror_url

        if version == EXPERIMENTAL:
            mirror_url = settings.experimental_mirror_url
            version = "latest"

        return f"{mirror_url}/{platform.os_name}/{platform.arch}/docker-{version}{platform.binary_ext}"

    def binary_path(self, version: str) -> str:
        return os.path.join(self.config.version_dir(version), self.config.binary_name)

    def is_installed(self, version: str) -> bool:
        return is_plain_name(version) and os.path.isdir(self.config.version_dir(version))

    def install(self, version: str) -> str:
        """
        Download a version unless it is already present.

        The caller activates the returned version afterwards.

        Args:
            version: Version to install; empty falls back to $DOCKER_VERSION

        Returns:
            The installed version

        Raises:
            InvalidArgument: If no version is given and $DOCKER_VERSION is unset,
                or the version is not a plain name
            InvalidOperation: If the version is not published upstream
            DvmRuntimeError: If removal, download or checksum verification fails
        """
        version = (version or "").strip() or self.config.docker_version
        if not version:
            raise InvalidArgument(
                "The install command requires that a version is specified "
                "or the DOCKER_VERSION environment variable is set."
            )
        require_plain_name(version, "version")

        if not self.catalog.version_exists(version):
            raise InvalidOperation(
                f"Version {version} not found - try `dvm ls-remote` to browse available versions."
            )

        version_dir = self.config.version_dir(version)

        if version == EXPERIMENTAL and os.path.exists(version_dir):
            # Always install the latest experimental build
            try:
                shutil.rmtree(version_dir)
            except OSError as e:
                raise DvmRuntimeError(
                    f"Unable to remove experimental version at {version_dir}.", e
                ) from e

        if os.path.exists(version_dir):
            logger.warning(f"{version} is already installed")
            return version

        logger.info(f"Installing {version}...")

        url = self.build_download_url(version)
        binary_path = self.binary_path(version)
        try:
            self.downloader.download_with_checksum(url, binary_path)
        except DvmRuntimeError:
            _remove_empty_dir(version_dir)
            raise

        logger.debug(f"Installed Docker {version} to {binary_path}.")
        return version

    def ensure_installed(self, version: str) -> None:
        if self.is_installed(version):
            return

        logger.info(f"{version} is not installed. Installing now...")
        self.install(version)

    def uninstall(self, version: str) -> None:
        """
        Remove an installed version.

        Raises:
            InvalidArgument: If no version is given or it is not a plain name
            InvalidOperation: If the version is the active one
            DvmRuntimeError: If the directory cannot be removed
        """
        if not version:
            raise InvalidArgument("The uninstall command requires that a version is specified.")
        require_plain_name(version, "version")

        if version in (self.activator.active_version(), self.activator.current()):
            raise InvalidOperation("Cannot uninstall the currently active Docker version.")

        version_dir = self.config.version_dir(version)
        if not os.path.exists(version_dir):
            logger.warning(f"{version} is not installed.")
            return

        try:
            shutil.rmtree(version_dir)
        except OSError as e:
            raise DvmRuntimeError(
                f"Unable to uninstall Docker version {version} located in {version_dir}.", e
            ) from e

        logger.info(f"Uninstalled Docker {version}.")

    def list_installed(self, pattern: str = "*") -> list[str]:
        """
        Installed versions matching a shell glob, sorted as strings.

        The experimental install is labelled 'experimental (<version>)' and
        the system client is listed as 'system (<version>)' when the pattern
        matches 'system'.
        """
        pattern = pattern or "*"
        results = []

        for version_dir in glob.glob(self.config.version_dir(pattern)):
            if not os.path.isdir(version_dir):
                continue
            version = os.path.basename(version_dir)

            if version == EXPERIMENTAL:
                experimental_version = self.activator.probe.probe(self.binary_path(EXPERIMENTAL))
                if experimental_version is None:
                    logger.debug(f"Unable to get version of installed experimental version at {version_dir}.")
                    continue
                version = f"experimental ({experimental_version})"

            results.append(version)

        if fnmatch.fnmatchcase(SYSTEM, pattern):
            system_version = self.activator.system_version()
            if system_version is not None:
                results.append(f"system ({system_version})")

        return sorted(results)


def _remove_empty_dir(path: str) -> None:
    try:
        os.rmdir(path)
    except OSError:
        pass

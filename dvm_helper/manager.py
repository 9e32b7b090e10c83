"""
Command façade wiring the dvm components together.

One DockerVersionManager is built per invocation from a Config; every
dvm command maps onto one method.
"""

from __future__ import annotations

import logging

from . import __version__
from .activation import PathActivator
from .aliases import AliasStore
from .collectors import GitHubClient, RemoteCatalog
from .config import Config
from .detection import DockerVersionProbe, VersionProbe
from .download import Downloader
from .installer import InstallManager
from .render import format_alias_list, format_version_list
from .resolver import VersionResolver
from .upgrade import BinaryInstaller, SelfUpgrader

logger = logging.getLogger(__name__)


class DockerVersionManager:
    """Install, activate and inspect Docker client versions."""

    def __init__(
        self,
        config: Config,
        probe: VersionProbe | None = None,
        downloader: Downloader | None = None,
        client: GitHubClient | None = None,
        current_version: str = __version__,
    ):
        self.config = config
        self.probe = probe or DockerVersionProbe()
        self.downloader = downloader or Downloader(timeout=config.settings.timeout_seconds)

        self.activator = PathActivator(config, self.probe)
        self.catalog = RemoteCatalog(config, client)
        self.installer = InstallManager(config, self.catalog, self.downloader, self.activator)
        self.aliases = AliasStore(config, self.installer.is_installed)
        self.resolver = VersionResolver(config, self.aliases, self.activator)
        self.upgrader = SelfUpgrader(
            config, self.catalog, BinaryInstaller(self.downloader), current_version
        )

    def install(self, version: str = "") -> None:
        installed = self.installer.install(version)
        self.use(installed)

    def uninstall(self, version: str) -> None:
        self.installer.uninstall(version)

    def use(self, version: str = "") -> None:
        resolution = self.resolver.resolve(version)

        if resolution.is_system:
            self.activator.deactivate()
            logger.info(f"Now using system version of Docker: {resolution.system_version}")
            return

        self.installer.ensure_installed(resolution.version)
        self.activator.use(resolution.version)
        logger.info(f"Now using Docker {resolution.version}")

    def deactivate(self) -> None:
        self.activator.deactivate()

    def current(self) -> str | None:
        label = self.activator.current()
        if label is None:
            logger.warning("N/A")
        else:
            logger.info(label)
        return label

    def which(self) -> str | None:
        path = self.activator.which()
        if path is not None:
            logger.info(path)
        return path

    def alias(self, alias: str, version: str) -> None:
        self.aliases.create(alias, version)

    def unalias(self, alias: str) -> None:
        self.aliases.remove(alias)

    def list_aliases(self) -> dict[str, str]:
        aliases = self.aliases.list()
        for line in format_alias_list(aliases):
            logger.info(line)
        return aliases

    def list(self, pattern: str = "") -> list[str]:
        """Installed versions whose name starts with the glob pattern."""
        versions = self.installer.list_installed((pattern or "") + "*")
        current = self.activator.current()
        for line in format_version_list(versions, current, self.config.color):
            logger.info(line)
        return versions

    def list_remote(self, pattern: str = "") -> list[str]:
        versions = self.catalog.get_available_versions(pattern)
        for version in versions:
            logger.info(version)
        return versions

    def upgrade(self, check_only: bool = False, version: str = "") -> bool:
        return self.upgrader.upgrade(check_only=check_only, version=version)

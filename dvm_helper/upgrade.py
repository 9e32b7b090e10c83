"""
Self upgrade of dvm-helper with verification and rollback.

The running executable is backed up, the new release is downloaded and
checksum-verified next to it, then swapped in with a single rename. Any
failure restores the backup so the original executable stays usable.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass

from .collectors import RemoteCatalog
from .common import DvmRuntimeError
from .config import Config
from .download import Downloader, discard_file, file_checksum

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpgradeBackup:
    """
    Backup of the executable before it is replaced.

    Attributes:
        binary_path: Path of the executable that was backed up
        backup_path: Temp directory containing the backup
        checksum: SHA256 checksum of the backed up executable
    """
    binary_path: str
    backup_path: str
    checksum: str

    @property
    def backup_file(self) -> str:
        return os.path.join(self.backup_path, os.path.basename(self.binary_path))


def create_upgrade_backup(binary_path: str) -> UpgradeBackup:
    """
    Copy an executable into a fresh temp directory.

    Raises:
        OSError: If backup creation fails
    """
    backup_dir = tempfile.mkdtemp(prefix="dvm_upgrade_backup_")
    logger.debug(f"Creating backup in: {backup_dir}")

    checksum = file_checksum(binary_path)
    shutil.copy2(binary_path, os.path.join(backup_dir, os.path.basename(binary_path)))

    return UpgradeBackup(
        binary_path=binary_path,
        backup_path=backup_dir,
        checksum=checksum,
    )


def restore_from_backup(backup: UpgradeBackup) -> bool:
    """
    Put the backed up executable back in place.

    Returns:
        True if restore succeeded, False otherwise
    """
    try:
        actual_checksum = file_checksum(backup.backup_file)
        if actual_checksum != backup.checksum:
            logger.debug(f"Backup checksum mismatch! Expected: {backup.checksum}, got: {actual_checksum}")
            return False

        shutil.copy2(backup.backup_file, backup.binary_path)
        logger.debug(f"Restored {backup.binary_path} from backup")
        return True
    except OSError as e:
        logger.debug(f"Restore failed: {e}")
        return False


def cleanup_backup(backup: UpgradeBackup) -> None:
    try:
        if os.path.exists(backup.backup_path):
            shutil.rmtree(backup.backup_path)
            logger.debug(f"Cleaned up backup: {backup.backup_path}")
    except OSError as e:
        logger.debug(f"Failed to cleanup backup: {e}")


class BinaryInstaller:
    """Atomically replace an executable with a verified download."""

    def __init__(self, downloader: Downloader):
        self.downloader = downloader

    def replace(self, url: str, target: str) -> None:
        """
        Replace target with the binary at url.

        The download is verified before the swap. On failure target is
        restored from backup and the error is re-raised.

        Raises:
            DvmRuntimeError: If backup, download, verification or swap fails
        """
        try:
            backup = create_upgrade_backup(target)
        except OSError as e:
            raise DvmRuntimeError(f"Unable to back up {target} before upgrading.", e) from e

        staged = target + ".new"
        try:
            self.downloader.download_with_checksum(url, staged)
            os.replace(staged, target)
        except (OSError, DvmRuntimeError) as e:
            discard_file(staged)
            if restore_from_backup(backup):
                cleanup_backup(backup)
            else:
                logger.error(f"Rollback failed, a copy of the previous version is in {backup.backup_path}")
            if isinstance(e, DvmRuntimeError):
                raise
            raise DvmRuntimeError(f"Unable to upgrade {target}.", e) from e

        cleanup_backup(backup)


class SelfUpgrader:
    """Compare the running dvm-helper with the latest release and upgrade it."""

    def __init__(
        self,
        config: Config,
        catalog: RemoteCatalog,
        installer: BinaryInstaller,
        current_version: str,
    ):
        self.config = config
        self.catalog = catalog
        self.installer = installer
        self.current_version = current_version

    def build_release_url(self, version: str) -> str:
        """
        Download URL of a dvm-helper release.

        Example: https://download.getcarina.com/dvm/0.4.0/linux/x86_64/dvm-helper
        """
        platform = self.config.platform
        return "/".join([
            self.config.settings.release_url,
            version,
            platform.release_os,
            platform.arch,
            platform.binary_name("dvm-helper"),
        ])

    def upgrade(self, check_only: bool = False, version: str = "") -> bool:
        """
        Upgrade dvm-helper.

        Args:
            check_only: Only report whether a newer release exists
            version: Install this version instead of the latest release

        Returns:
            True if the executable was replaced

        Raises:
            DvmRuntimeError: If the replacement fails (the original is kept)
        """
        if version and version == self.current_version:
            logger.warning(f"dvm {version} is already installed.")
            return False

        if not version:
            should_upgrade, latest_version = self.catalog.is_upgrade_available(self.current_version)
            if not should_upgrade:
                logger.info("The latest version of dvm is already installed.")
                return False
            version = latest_version

        if check_only:
            logger.info(f"dvm {version} is available. Run `dvm upgrade` to install the latest version.")
            return False

        logger.info(f"Upgrading to dvm {version}...")
        self.installer.replace(self.build_release_url(version), self.config.self_path)
        logger.info(f"Upgraded to dvm {version}.")
        return True

"""
Alias persistence.

Each alias is a file under <dvm_dir>/alias named after the alias and
holding one version string. Lookup is a single indirection: the stored
value is never itself resolved as an alias.
"""

from __future__ import annotations

import logging
import os
from typing import Callable

from .common import DvmRuntimeError, InvalidArgument, is_plain_name, require_plain_name
from .config import Config

logger = logging.getLogger(__name__)


class AliasStore:
    """Create, remove and look up version aliases."""

    def __init__(self, config: Config, is_installed: Callable[[str], bool]):
        """
        Args:
            config: Invocation configuration
            is_installed: Predicate telling whether a version is installed
        """
        self.config = config
        self.is_installed = is_installed

    def exists(self, alias: str) -> bool:
        return is_plain_name(alias) and os.path.isfile(self.config.alias_path(alias))

    def get(self, alias: str) -> str | None:
        """
        Return the version an alias points at, or None if it is not an alias.

        Raises:
            DvmRuntimeError: If the alias file exists but cannot be read as text
        """
        if not self.exists(alias):
            return None

        alias_path = self.config.alias_path(alias)
        try:
            with open(alias_path, "r", encoding="utf-8") as f:
                return f.read().strip()
        except (OSError, UnicodeDecodeError) as e:
            raise DvmRuntimeError(f"Unable to read alias {alias} at {alias_path}.", e) from e

    def create(self, alias: str, version: str) -> None:
        """
        Point an alias at an installed version, replacing any previous target.

        Raises:
            InvalidArgument: If either argument is empty or not a plain name, or the version is not installed
            DvmRuntimeError: If the alias file cannot be written
        """
        if not alias or not version:
            raise InvalidArgument("The alias command requires both an alias name and a version.")

        require_plain_name(alias, "alias")
        require_plain_name(version, "version")

        if not self.is_installed(version):
            raise InvalidArgument(f"The aliased version, {version}, is not installed.")

        alias_path = self.config.alias_path(alias)
        if os.path.exists(alias_path):
            logger.debug("Overwriting existing alias.")

        try:
            os.makedirs(self.config.alias_dir, exist_ok=True)
            with open(alias_path, "w", encoding="utf-8") as f:
                f.write(version)
        except OSError as e:
            raise DvmRuntimeError(f"Unable to write alias {alias} at {alias_path}.", e) from e

        logger.info(f"Aliased {alias} to {version}.")

    def remove(self, alias: str) -> None:
        """
        Delete an alias. A missing alias is only a warning.

        Raises:
            InvalidArgument: If no alias name is given or it is not a plain name
            DvmRuntimeError: If the alias file cannot be removed
        """
        if not alias:
            raise InvalidArgument("The unalias command requires an alias name.")

        require_plain_name(alias, "alias")

        if not self.exists(alias):
            logger.warning(f"{alias} is not an alias.")
            return

        alias_path = self.config.alias_path(alias)
        try:
            os.remove(alias_path)
        except OSError as e:
            raise DvmRuntimeError(f"Unable to remove alias {alias} at {alias_path}.", e) from e

        logger.info(f"Removed alias {alias}")

    def list(self) -> dict[str, str]:
        """
        All readable aliases, sorted by name.

        Unreadable records are skipped.
        """
        try:
            names = sorted(os.listdir(self.config.alias_dir))
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.debug(f"Unable to list aliases in {self.config.alias_dir}: {e}")
            return {}

        results: dict[str, str] = {}
        for name in names:
            alias_path = self.config.alias_path(name)
            if not os.path.isfile(alias_path):
                continue
            try:
                with open(alias_path, "r", encoding="utf-8") as f:
                    results[name] = f.read().strip()
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Excluding alias {name}: {e}")
                continue

        return results

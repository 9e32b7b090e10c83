"""
Turn the version token typed by the user into something activatable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .activation import PathActivator
from .aliases import AliasStore
from .common import SYSTEM, InvalidArgument, InvalidOperation
from .config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    A resolved version token.

    Attributes:
        version: Concrete version, 'experimental' or 'system'
        alias: Alias the version was reached through, if any
        system_binary: Path of the system client (system only)
        system_version: Probed version of the system client (system only)
    """
    version: str
    alias: str | None = None
    system_binary: str | None = None
    system_version: str | None = None

    @property
    def is_system(self) -> bool:
        return self.version == SYSTEM


class VersionResolver:
    """Resolve tokens through $DOCKER_VERSION, 'system' and one level of aliases."""

    def __init__(self, config: Config, aliases: AliasStore, activator: PathActivator):
        self.config = config
        self.aliases = aliases
        self.activator = activator

    def resolve(self, token: str, command: str = "use") -> Resolution:
        """
        Resolve a version token.

        Args:
            token: Raw version token, may be empty
            command: Command name used in error messages

        Raises:
            InvalidArgument: If neither token nor $DOCKER_VERSION is set
            InvalidOperation: If 'system' is requested but no system client exists
        """
        token = (token or "").strip() or self.config.docker_version
        if not token:
            raise InvalidArgument(
                f"The {command} command requires that a version is specified "
                "or the DOCKER_VERSION environment variable is set."
            )

        if token == SYSTEM:
            binary = self.activator.system_binary()
            version = self.activator.probe.probe(binary) if binary else None
            if binary is None or version is None:
                raise InvalidOperation("System version of Docker not found.")
            return Resolution(SYSTEM, system_binary=binary, system_version=version)

        target = self.aliases.get(token)
        if target:
            # Single indirection: the target is never looked up as an alias again
            logger.debug(f"Using alias: {token} -> {target}")
            return Resolution(target, alias=token)

        return Resolution(token)

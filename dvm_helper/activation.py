"""
PATH activation.

The session PATH is held as an ordered tuple of entries. Entries that live
under the managed bin root (<dvm_dir>/bin/docker) are recognised by
comparing path segments, never by substring matching, so separators and
case rules of the platform are respected. Every change is written to a
script (sh, PowerShell or cmd syntax) that the dvm shell wrapper sources.
"""

from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import PurePath

from .common import EXPERIMENTAL, DvmRuntimeError
from .config import Config
from .detection import VersionProbe, find_binary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchPath:
    """
    An immutable, ordered PATH.

    Attributes:
        entries: PATH entries in lookup order
        separator: Entry separator used when rendering
    """
    entries: tuple[str, ...] = ()
    separator: str = os.pathsep

    @classmethod
    def parse(cls, value: str, separator: str = os.pathsep) -> SearchPath:
        if not value:
            return cls((), separator)
        return cls(tuple(value.split(separator)), separator)

    def render(self) -> str:
        return self.separator.join(self.entries)

    def __str__(self) -> str:
        return self.render()


def path_segments(entry: str) -> tuple[str, ...]:
    """Normalized segments of a filesystem path, case-folded where the platform ignores case."""
    return PurePath(os.path.normcase(os.path.normpath(os.path.abspath(entry)))).parts


def is_under(entry: str, root: str) -> bool:
    """True when entry is root itself or lies below it."""
    if not entry:
        return False
    entry_parts = path_segments(entry)
    root_parts = path_segments(root)
    return entry_parts[:len(root_parts)] == root_parts


def format_script(shell: str, path: str) -> str:
    """
    PATH assignment in the syntax of a script format.

    Args:
        shell: 'sh', 'powershell' or 'cmd'
        path: Rendered PATH value
    """
    if shell == "powershell":
        return "$env:PATH='{}'\n".format(path.replace("'", "''"))
    if shell == "cmd":
        return f'SET "PATH={path}"\n'
    return f"export PATH={shlex.quote(path)}\n"


class PathActivator:
    """Rewrite the session PATH and report which Docker client it exposes."""

    def __init__(self, config: Config, probe: VersionProbe):
        self.config = config
        self.probe = probe
        self.search_path = SearchPath.parse(config.path)

    def is_managed(self, entry: str) -> bool:
        return is_under(entry, self.config.bin_root)

    def remove_previous(self, path: SearchPath) -> SearchPath:
        """Drop every managed entry, keeping the order of the rest."""
        kept = tuple(entry for entry in path.entries if not self.is_managed(entry))
        return SearchPath(kept, path.separator)

    def prepend(self, path: SearchPath, version_dir: str) -> SearchPath:
        return SearchPath((version_dir,) + path.entries, path.separator)

    def use(self, version: str) -> str:
        """
        Expose an installed version first on PATH.

        Returns:
            Path of the emitted script
        """
        cleaned = self.remove_previous(self.search_path)
        self.search_path = self.prepend(cleaned, self.config.version_dir(version))
        return self.emit()

    def deactivate(self) -> str:
        """Remove all managed entries from PATH."""
        self.search_path = self.remove_previous(self.search_path)
        return self.emit()

    def emit(self) -> str:
        """
        Write the current PATH as a script for the shell wrapper.

        Returns:
            Path of the written script

        Raises:
            DvmRuntimeError: If the script cannot be written
        """
        script_path = self.config.output_script_path
        contents = format_script(self.config.shell, self.search_path.render())
        try:
            os.makedirs(os.path.dirname(script_path), exist_ok=True)
            with open(script_path, "w", encoding="utf-8") as f:
                f.write(contents)
        except OSError as e:
            raise DvmRuntimeError(f"Unable to write PATH script to {script_path}.", e) from e

        logger.debug(f"Wrote {script_path}: {contents.strip()}")
        return script_path

    def system_binary(self) -> str | None:
        """Docker client found once all managed entries are removed from PATH."""
        system_path = self.remove_previous(self.search_path)
        return find_binary(self.config.binary_name, system_path.render())

    def system_version(self) -> str | None:
        binary = self.system_binary()
        if binary is None:
            return None
        return self.probe.probe(binary)

    def experimental_binary(self) -> str:
        return os.path.join(self.config.version_dir(EXPERIMENTAL), self.config.binary_name)

    def which(self) -> str | None:
        """Docker client resolvable on the session PATH."""
        return find_binary(self.config.binary_name, self.search_path.render())

    def active_version(self) -> str | None:
        """Name of the managed version directory holding the active client, if any."""
        current_path = self.which()
        if current_path is None or not self.is_managed(current_path):
            return None

        root_parts = path_segments(self.config.bin_root)
        current_parts = PurePath(os.path.abspath(current_path)).parts
        if len(current_parts) <= len(root_parts) + 1:
            return None
        return current_parts[len(root_parts)]

    def current(self) -> str | None:
        """
        Label of the active Docker client.

        Returns:
            'system (<v>)', 'experimental (<v>)', the probed version of a
            pinned install, or None when no client is found or it does not
            report a parsable version.
        """
        current_path = self.which()
        if current_path is None:
            return None

        version = self.probe.probe(current_path)
        if version is None:
            return None

        system_binary = self.system_binary()
        if system_binary is not None and _same_path(current_path, system_binary):
            return f"system ({version})"

        if _same_path(current_path, self.experimental_binary()):
            return f"experimental ({version})"

        return version


def _same_path(a: str, b: str) -> bool:
    return path_segments(a) == path_segments(b)

"""
Platform detection for download URLs and binary names.

Docker publishes client builds per operating system and architecture:
- OS names are capitalized (``Linux``, ``Darwin``, ``Windows``)
- architectures are ``x86_64`` or ``i386``
- Windows binaries carry an ``.exe`` extension
"""

from __future__ import annotations

import platform as _platform
from dataclasses import dataclass


OS_NAMES = {
    "linux": "Linux",
    "darwin": "Darwin",
    "windows": "Windows",
}

ARCH_NAMES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "i386": "i386",
    "i686": "i386",
    "x86": "i386",
}


@dataclass(frozen=True)
class Platform:
    """
    Detected platform information.

    Attributes:
        os_name: Docker OS name ('Linux', 'Darwin' or 'Windows')
        arch: Docker architecture name ('x86_64' or 'i386')
        binary_ext: Executable file extension ('' or '.exe')
    """
    os_name: str
    arch: str
    binary_ext: str = ""

    @property
    def is_windows(self) -> bool:
        return self.os_name == "Windows"

    @property
    def release_os(self) -> str:
        """Lowercase OS name used by dvm release downloads."""
        return self.os_name.lower()

    def binary_name(self, name: str = "docker") -> str:
        return name + self.binary_ext

    def __str__(self) -> str:
        return f"{self.os_name}/{self.arch}"


def detect_platform(system: str | None = None, machine: str | None = None) -> Platform:
    """
    Detect the current platform.

    Args:
        system: Override for platform.system() (testing)
        machine: Override for platform.machine() (testing)

    Returns:
        Platform for the running interpreter

    Raises:
        ValueError: If the operating system is not supported
    """
    system = (system if system is not None else _platform.system()).lower()
    machine = (machine if machine is not None else _platform.machine()).lower()

    if system not in OS_NAMES:
        raise ValueError(
            f"Unsupported operating system: {system}. "
            f"Must be one of: {', '.join(sorted(OS_NAMES))}"
        )

    os_name = OS_NAMES[system]
    # Unknown machines fall back to 64-bit, the only build published for most releases
    arch = ARCH_NAMES.get(machine, "x86_64")
    binary_ext = ".exe" if os_name == "Windows" else ""

    return Platform(os_name=os_name, arch=arch, binary_ext=binary_ext)

"""
Output formatting for version listings.
"""

import sys


# ANSI color codes
GREEN = "\033[32m"
RESET = "\033[0m"

CURRENT_MARKER = "->"


def colorize(text: str, color: str, enabled: bool = True) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code
        enabled: Color setting from the configuration ($DVM_COLOR)

    Returns:
        Colored text, or plain text if colors are disabled or stdout is not a terminal
    """
    if not enabled or not text or not sys.stdout.isatty():
        return text
    return f"{color}{text}{RESET}"


def format_version_list(versions: list[str], current: str | None, use_color: bool = True) -> list[str]:
    """Lines for ``dvm list``: the active version is marked with an arrow."""
    lines = []
    for version in versions:
        if current is not None and version == current:
            lines.append(colorize(f"{CURRENT_MARKER}\t{version}", GREEN, use_color))
        else:
            lines.append(f"\t{version}")
    return lines


def format_alias_list(aliases: dict[str, str]) -> list[str]:
    return [f"\t{alias} -> {version}" for alias, version in aliases.items()]

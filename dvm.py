#!/usr/bin/env python3
"""
Docker Version Manager - manage multiple versions of the Docker client.

The dvm shell wrapper calls this helper and then sources the script it
writes to <dvm_dir>/.tmp/dvm-output.<ext> to apply PATH changes.

Usage:
    dvm.py install [<version>]      # Install a Docker version ($DOCKER_VERSION if omitted)
    dvm.py use [<version>]          # Use a version, 'system' or 'experimental'
    dvm.py list [<pattern>]         # List installed versions
    dvm.py list-remote [<pattern>]  # List available versions
    dvm.py upgrade [--check]        # Upgrade dvm itself
"""

import argparse
import sys

from dvm_helper import __commit__, __version__
from dvm_helper.common import RET_CODE_INTERRUPTED, RET_CODE_SUCCESS, DvmError
from dvm_helper.config import load_config
from dvm_helper.logging_config import setup_logging
from dvm_helper.manager import DockerVersionManager


def cmd_install(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.install(args.version)
    return RET_CODE_SUCCESS


def cmd_uninstall(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.uninstall(args.version)
    return RET_CODE_SUCCESS


def cmd_use(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.use(args.version)
    return RET_CODE_SUCCESS


def cmd_deactivate(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.deactivate()
    return RET_CODE_SUCCESS


def cmd_current(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.current()
    return RET_CODE_SUCCESS


def cmd_which(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.which()
    return RET_CODE_SUCCESS


def cmd_alias(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.alias(args.alias, args.version)
    return RET_CODE_SUCCESS


def cmd_unalias(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.unalias(args.alias)
    return RET_CODE_SUCCESS


def cmd_list(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.list(args.pattern)
    return RET_CODE_SUCCESS


def cmd_list_remote(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.list_remote(args.pattern)
    return RET_CODE_SUCCESS


def cmd_list_alias(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.list_aliases()
    return RET_CODE_SUCCESS


def cmd_upgrade(dvm: DockerVersionManager, args: argparse.Namespace) -> int:
    dvm.upgrade(check_only=args.check, version=args.upgrade_version)
    return RET_CODE_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dvm",
        description="Docker Version Manager - Manage multiple versions of the Docker client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__} ({__commit__})",
    )
    parser.add_argument(
        "--github-token",
        help="Increase the github api rate limit by specifying your github personal access token "
             "(default: $GITHUB_TOKEN)",
    )
    parser.add_argument(
        "--dvm-dir",
        help="Specify an alternate DVM home directory (default: $DVM_DIR or ~/.dvm)",
    )
    parser.add_argument(
        "--shell",
        help="Specify the shell format in which environment variables should be output, "
             "e.g. powershell, cmd or sh/bash. Defaults to sh/bash (default: $SHELL)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print additional debug information",
    )
    parser.add_argument(
        "--silent",
        action="store_true",
        default=None,
        help="Suppress output. Errors will still be displayed (default: $DVM_SILENT)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    subparsers.required = True

    p = subparsers.add_parser("install", aliases=["i"], help="Install a Docker version, using $DOCKER_VERSION if the version is not specified")
    p.add_argument("version", nargs="?", default="")
    p.set_defaults(func=cmd_install)

    p = subparsers.add_parser("uninstall", help="Uninstall a Docker version")
    p.add_argument("version", nargs="?", default="")
    p.set_defaults(func=cmd_uninstall)

    p = subparsers.add_parser("use", help="Use a Docker version, 'system' or 'experimental', using $DOCKER_VERSION if the version is not specified")
    p.add_argument("version", nargs="?", default="")
    p.set_defaults(func=cmd_use)

    p = subparsers.add_parser("deactivate", help="Undo the effects of `dvm` on current shell")
    p.set_defaults(func=cmd_deactivate)

    p = subparsers.add_parser("current", help="Print the current Docker version")
    p.set_defaults(func=cmd_current)

    p = subparsers.add_parser("which", help="Print the path to the current Docker version")
    p.set_defaults(func=cmd_which)

    p = subparsers.add_parser("alias", help="Create an alias to a Docker version")
    p.add_argument("alias", nargs="?", default="")
    p.add_argument("version", nargs="?", default="")
    p.set_defaults(func=cmd_alias)

    p = subparsers.add_parser("unalias", help="Remove a Docker version alias")
    p.add_argument("alias", nargs="?", default="")
    p.set_defaults(func=cmd_unalias)

    p = subparsers.add_parser("list", aliases=["ls"], help="List installed Docker versions")
    p.add_argument("pattern", nargs="?", default="")
    p.set_defaults(func=cmd_list)

    p = subparsers.add_parser("list-remote", aliases=["ls-remote"], help="List available Docker versions")
    p.add_argument("pattern", nargs="?", default="")
    p.set_defaults(func=cmd_list_remote)

    p = subparsers.add_parser("list-alias", aliases=["ls-alias"], help="List Docker version aliases")
    p.set_defaults(func=cmd_list_alias)

    p = subparsers.add_parser("upgrade", help="Upgrade dvm to the latest release")
    p.add_argument(
        "--check",
        action="store_true",
        help="Checks if an newer version of dvm is available, but does not perform the upgrade",
    )
    p.add_argument(
        "--version",
        dest="upgrade_version",
        default="",
        help="Upgrade to the specified version",
    )
    p.set_defaults(func=cmd_upgrade)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the dvm helper."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(debug=args.debug, silent=bool(args.silent))

    try:
        config = load_config(
            dvm_dir=args.dvm_dir,
            shell=args.shell,
            github_token=args.github_token,
            debug=args.debug,
            silent=args.silent,
        )
        if config.silent and not args.silent:
            # $DVM_SILENT is only known once the config is loaded
            logger = setup_logging(debug=config.debug, silent=True)

        dvm = DockerVersionManager(config)
        return args.func(dvm, args)
    except DvmError as e:
        logger.error(e.message)
        if args.debug and e.detail is not None:
            logger.error(str(e.detail))
        return e.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return RET_CODE_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())

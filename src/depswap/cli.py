from __future__ import annotations  # Python 3.6+ compatibility

"""depswap CLI - scoped, crash-safe dependency installs for one package"""
import argparse
import json
import logging
import subprocess
import sys
from contextlib import nullcontext
from pathlib import Path

from .common_utils import format_process_output, print_header, safe_print
from .config import ConfigError, ConfigManager
from .i18n import SUPPORTED_LANGUAGES, _, setup_i18n
from .lockmanager import ManifestLockManager
from .manifest import MANIFEST_FILENAME, ManifestError, PackageManifest
from .npm_install import backup_path_for, npm_install_dependencies, recover_manifest
from .specifiers import InvalidSpecifierError


def _get_version():
    from . import __version__

    return __version__


def create_parser():
    """Creates and configures the argument parser."""
    epilog_parts = [
        _("🛠️ Examples:"),
        _("  depswap install lodash@^4.17.0 left-pad"),
        _("  depswap install --client yarn --mutex network:42424 react@18"),
        _("  depswap install typescript -- --no-audit --prefer-offline"),
        _("  depswap recover --manifest packages/app/package.json"),
        _("  depswap config set registry https://registry.example.com/"),
    ]
    parser = argparse.ArgumentParser(
        prog="depswap",
        description=_("📦 Install just the dependencies you name, leaving package.json as it was"),
        formatter_class=argparse.RawTextHelpFormatter,
        epilog="\n".join(epilog_parts),
    )
    parser.add_argument(
        "-v", "--version", action="version", version=_("%(prog)s {}").format(_get_version())
    )
    parser.add_argument(
        "--lang",
        metavar="CODE",
        help=_("Override the display language for this command (e.g., es, de, ja)"),
    )
    parser.add_argument(
        "--verbose",
        "-V",
        action="store_true",
        help=_("Enable verbose output for detailed debugging"),
    )
    parser.add_argument("--config", metavar="FILE", help=_("Use this config file"))
    subparsers = parser.add_subparsers(dest="command", help=_("Available commands:"))

    install_parser = subparsers.add_parser(
        "install", help=_("Install the named dependencies into one package")
    )
    install_parser.add_argument(
        "specs",
        nargs="+",
        help=_('Dependencies to install (e.g., "lodash", "react@^18", "@scope/pkg@1.2.3")'),
    )
    _add_manifest_argument(install_parser)
    install_parser.add_argument(
        "--root", metavar="DIR", help=_("Workspace root (defaults to the package directory)")
    )
    install_parser.add_argument("--client", dest="npm_client", help=_("npm, yarn, ..."))
    install_parser.add_argument("--registry", help=_("Registry URL passed to the client"))
    install_parser.add_argument(
        "--global-style",
        dest="npm_global_style",
        action="store_true",
        default=None,
        help=_("Install with npm --global-style (forces the npm client)"),
    )
    install_parser.add_argument("--mutex", help=_("yarn --mutex value"))
    install_parser.add_argument(
        "--stdio", choices=["pipe", "inherit"], help=_("Capture or stream client output")
    )
    install_parser.add_argument(
        "--sub-command", dest="sub_command", help=_("Client subcommand (default: install)")
    )
    install_parser.add_argument(
        "--no-lock",
        dest="lock",
        action="store_false",
        help=_("Don't serialize against other depswap installs of the same package"),
    )

    recover_parser = subparsers.add_parser(
        "recover", help=_("Restore a manifest left behind by an interrupted install")
    )
    _add_manifest_argument(recover_parser)

    config_parser = subparsers.add_parser("config", help=_("View or edit configuration"))
    config_subparsers = config_parser.add_subparsers(dest="config_command", required=True)
    config_subparsers.add_parser("view", help=_("Show the current configuration"))
    set_parser = config_subparsers.add_parser("set", help=_("Set a configuration value"))
    set_parser.add_argument("key")
    set_parser.add_argument("value")
    return parser


def _add_manifest_argument(subparser):
    subparser.add_argument(
        "--manifest",
        metavar="PATH",
        default=MANIFEST_FILENAME,
        help=_("Manifest to operate on (default: ./package.json)"),
    )


def _split_client_args(argv):
    """Everything after a bare ``--`` goes verbatim to the package manager."""
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index + 1 :]
    return argv, []


def handle_install(args, config_manager, client_args) -> int:
    manifest_path = Path(args.manifest)
    try:
        pkg = PackageManifest.load(manifest_path, root_path=args.root)
        install_config = config_manager.to_install_config(
            npm_client=args.npm_client,
            registry=args.registry,
            npm_global_style=args.npm_global_style,
            mutex=args.mutex,
            stdio=args.stdio,
            sub_command=args.sub_command,
            npm_client_args=client_args or None,
        )
    except (ManifestError, ConfigError) as e:
        safe_print(_("❌ {}").format(e), file=sys.stderr)
        return 1

    print_header(_("Installing {} into {}").format(", ".join(args.specs), pkg.name or pkg.location))

    if args.lock and config_manager.get("serialize_installs", True):
        lock_manager = ManifestLockManager(config_manager.get("lock_dir"))
        guard = lock_manager.acquire_lock(
            pkg.manifest_location, timeout=float(config_manager.get("lock_timeout", 300.0))
        )
    else:
        guard = nullcontext()

    try:
        with guard:
            results = npm_install_dependencies(pkg, args.specs, install_config)
    except subprocess.CalledProcessError as e:
        safe_print(
            _("❌ {} exited with code {}").format(" ".join(map(str, e.cmd)), e.returncode),
            file=sys.stderr,
        )
        stderr = format_process_output(e.stderr).strip()
        if stderr:
            safe_print(stderr, file=sys.stderr)
        return 1
    except InvalidSpecifierError as e:
        safe_print(_("❌ {}").format(e), file=sys.stderr)
        return 1
    except (OSError, TimeoutError) as e:
        safe_print(_("❌ Could not install: {}").format(e), file=sys.stderr)
        return 1

    safe_print(_("✅ Installed {} dependencies, manifest restored.").format(len(args.specs)))
    for result in results:
        if result.passed:
            continue
        safe_print(_("⚠️  npm {} reported issues, see:").format(result.name))
        for report in result.reports:
            safe_print(f"   - {report}")
    return 0


def handle_recover(args) -> int:
    manifest_path = Path(args.manifest)
    if recover_manifest(manifest_path):
        safe_print(_("✅ Restored {} from {}").format(manifest_path, backup_path_for(manifest_path)))
        return 0
    safe_print(_("ℹ️  No backup found for {}, nothing to recover.").format(manifest_path))
    return 1


def handle_config(args, config_manager) -> int:
    if args.config_command == "view":
        safe_print(_("⚙️  Config file: {}").format(config_manager.config_path))
        safe_print(json.dumps(config_manager.config, indent=2))
        return 0
    try:
        config_manager.set(args.key, args.value)
    except ConfigError as e:
        safe_print(_("❌ {}").format(e), file=sys.stderr)
        return 1
    if args.key == "language" and args.value not in SUPPORTED_LANGUAGES:
        safe_print(_("⚠️  No translations for '{}' yet, messages stay in English.").format(args.value))
    safe_print(_("✅ {} set to {}").format(args.key, config_manager.get(args.key)))
    return 0


def main(argv=None):
    """Main application entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    argv, client_args = _split_client_args(argv)

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    try:
        config_manager = ConfigManager(config_path=args.config)
    except ConfigError as e:
        safe_print(_("❌ {}").format(e), file=sys.stderr)
        return 1

    setup_i18n(args.lang or config_manager.get("language"))

    if args.command == "install":
        return handle_install(args, config_manager, client_args)
    if args.command == "recover":
        return handle_recover(args)
    if args.command == "config":
        return handle_config(args, config_manager)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())

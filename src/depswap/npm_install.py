"""
Scoped, crash-safe dependency installs.

``npm_install_dependencies`` installs only the requested dependencies of a
package. The real manifest is moved aside to ``<manifest>.lerna_backup``, a
filtered manifest is written in its place, the package manager runs against
it, and the original is moved back no matter how the install ends. If the
process is terminated during that window an exit hook puts it back.
"""

import errno
import logging
import os
from pathlib import Path
from typing import Iterable, List, Tuple

from . import child_process
from .config import InstallConfig
from .exit_hooks import on_exit
from .manifest import write_manifest
from .probes import ProbeResult, run_post_install_probes
from .transform import transform_manifest

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".lerna_backup"


def backup_path_for(manifest_location) -> Path:
    return Path(f"{manifest_location}{BACKUP_SUFFIX}")


def build_install_command(config: InstallConfig) -> Tuple[str, List[str]]:
    """Returns ``(cmd, args)`` for the configured client and options."""
    args = [config.sub_command]
    cmd = config.npm_client or "npm"

    if config.npm_global_style:
        cmd = "npm"
        args.append("--global-style")

    if cmd == "yarn" and config.mutex:
        args.extend(["--mutex", config.mutex])

    if cmd == "yarn":
        args.append("--non-interactive")

    if config.npm_client_args:
        args.extend(config.npm_client_args)

    return cmd, args


def npm_install(pkg, config: InstallConfig):
    """
    Runs the package manager against ``pkg``'s manifest as it is on disk.

    Raises :class:`subprocess.CalledProcessError` when the client fails.
    """
    opts = child_process.get_exec_opts(pkg, config.registry)
    cmd, args = build_install_command(config)

    # potential override, e.g. "inherit" in root-only bootstrap
    opts.stdio = config.stdio

    # env sentinels so lifecycle scripts don't recurse into us
    opts.env["LERNA_EXEC_PATH"] = str(pkg.location)
    opts.env["LERNA_ROOT_PATH"] = str(pkg.root_path)

    logger.debug("npmInstall %s %s", cmd, args)
    return child_process.exec_command(cmd, args, opts)


class ManifestSwap:
    """
    Moves a manifest aside for the duration of a ``with`` block.

    Entering renames the manifest to its backup path and arms an exit hook;
    leaving (or the hook, if the process is terminated first) renames it
    back. The restore happens at most once. Exceptions from the block are
    never swallowed.
    """

    def __init__(self, manifest_location):
        self.manifest_location = Path(manifest_location)
        self.backup_location = backup_path_for(manifest_location)
        self._unregister = None
        self._restored = False
        self._restore_depth = 0

    def __enter__(self):
        logger.debug("backup %s", self.manifest_location)
        # a leftover backup is the only copy of a manifest an earlier run never restored
        if self.backup_location.exists():
            raise FileExistsError(
                errno.EEXIST,
                "Backup from an interrupted install exists, run 'depswap recover' first",
                str(self.backup_location),
            )
        # a failure here leaves nothing to undo
        os.replace(self.manifest_location, self.backup_location)
        self._restored = False
        # if we die we need to be sure to put things back the way we found them
        self._unregister = on_exit(self.restore)
        return self

    def restore(self):
        """Moves the backup over the manifest. Synchronous so it can run on exit."""
        if self._restored:
            return
        logger.debug("cleanup %s", self.manifest_location)
        self._restore_depth += 1
        try:
            os.replace(self.backup_location, self.manifest_location)
        except FileNotFoundError:
            # re-entered from a signal handler after the outer call already moved it back
            if self._restore_depth == 1 or self.backup_location.exists():
                raise
        finally:
            self._restore_depth -= 1
        self._restored = True

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            self.restore()
        finally:
            if self._unregister is not None:
                self._unregister()
                self._unregister = None
        return False


def npm_install_dependencies(
    pkg, dependencies: Iterable[str], config: InstallConfig
) -> List[ProbeResult]:
    """
    Installs only ``dependencies`` into ``pkg`` and restores its manifest.

    Returns the post-install probe results (empty when there was nothing to
    install). A failing install is re-raised once the manifest is back.
    """
    dependencies = list(dependencies or [])
    logger.debug("npmInstallDependencies %s %s", pkg.name, dependencies)

    # Nothing to do if we weren't given any deps.
    if not dependencies:
        logger.info("npmInstallDependencies: no dependencies to install")
        return []

    with ManifestSwap(pkg.manifest_location):
        # mutate a clone of the manifest with our new versions
        temp_json = transform_manifest(pkg, dependencies)
        logger.debug("writing tempJson %s", temp_json)

        # write out our temporary cooked up manifest and then install
        write_manifest(pkg.manifest_location, temp_json)
        npm_install(pkg, config)

        # probes look at the temporary manifest, so they run before the restore
        return run_post_install_probes(pkg, config.registry)


def recover_manifest(manifest_location) -> bool:
    """
    Puts back a backup left by a process that died before restoring it.

    Returns False when there is no backup. Only call this when no install is
    running for ``manifest_location``.
    """
    backup = backup_path_for(manifest_location)
    if not backup.exists():
        return False
    logger.info("restoring %s from %s", manifest_location, backup)
    os.replace(backup, manifest_location)
    return True

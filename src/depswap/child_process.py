"""
Runs package-manager commands for a package.

``exec_command`` is the single place a subprocess is launched; everything
else builds the command line and the :class:`ExecOptions` handed to it.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

STDIO_MODES = ("pipe", "inherit")


@dataclass
class ExecOptions:
    """Working directory, extra environment and stdio mode for one command."""

    cwd: Optional[str] = None
    env: Dict[str, str] = field(default_factory=dict)
    stdio: str = "pipe"


def get_exec_opts(pkg, registry: Optional[str] = None) -> ExecOptions:
    """Options for running a package-manager command inside ``pkg``."""
    env = {}
    if pkg.name:
        env["LERNA_PACKAGE_NAME"] = pkg.name
    if registry:
        env["npm_config_registry"] = registry
    logger.debug("getExecOpts %s %s", pkg.location, registry)
    return ExecOptions(cwd=str(pkg.location), env=env)


def exec_command(cmd: str, args: List[str], opts: ExecOptions) -> subprocess.CompletedProcess:
    """
    Runs ``cmd args...`` and waits for it to exit.

    With ``stdio="pipe"`` output is captured as text; with ``"inherit"`` it
    streams to our own stdout/stderr. A non-zero exit raises
    :class:`subprocess.CalledProcessError` carrying whatever was captured.
    """
    if opts.stdio not in STDIO_MODES:
        raise ValueError(f"Unknown stdio mode {opts.stdio!r}, expected one of {STDIO_MODES}")

    env = os.environ.copy()
    env.update(opts.env)
    # npm/yarn are .cmd shims on Windows, resolve them against the child's PATH
    executable = shutil.which(cmd, path=env.get("PATH")) or cmd
    capture = opts.stdio == "pipe"

    logger.debug("exec %s %s (cwd=%s)", cmd, args, opts.cwd)
    return subprocess.run(
        [executable] + list(args),
        cwd=opts.cwd,
        env=env,
        capture_output=capture,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=True,
    )

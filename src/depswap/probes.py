"""
Best-effort diagnostics run after a successful scoped install.

Each probe runs one npm command inside the package. A probe never raises for
a failing command: its only effect on failure is a set of report files
written beside the package, plus a snapshot of the manifest that was live
at the time (``<manifest>.lerna-edited.json``). The returned
:class:`ProbeResult` records what happened and where the reports went.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from . import child_process
from .common_utils import format_process_output

logger = logging.getLogger(__name__)

PROBE_CLIENT = "npm"
AUDIT_ARGS = ["audit", "--parseable"]
OUTDATED_ARGS = ["outdated"]

AUDIT_FIXES_FILENAME = "lerna-audit-fixes.txt"
AUDIT_ERR_FILENAME = "lerna-audit-err.txt"
OUTDATED_FIXES_FILENAME = "lerna-outdated-fixes.txt"
EDITED_MANIFEST_SUFFIX = ".lerna-edited.json"


@dataclass
class ProbeResult:
    """Outcome of one probe. ``passed`` is False when reports were written."""

    name: str
    passed: bool
    reports: List[Path] = field(default_factory=list)


def edited_manifest_path(pkg) -> Path:
    return Path(f"{pkg.manifest_location}{EDITED_MANIFEST_SUFFIX}")


def _run_probe(pkg, args, registry) -> Optional[subprocess.CalledProcessError]:
    """Runs ``npm args`` for ``pkg``; returns the failure instead of raising it."""
    opts = child_process.get_exec_opts(pkg, registry)
    try:
        child_process.exec_command(PROBE_CLIENT, args, opts)
    except subprocess.CalledProcessError as e:
        return e
    except OSError as e:
        # npm itself could not be started; record it like any other failure
        return subprocess.CalledProcessError(-1, [PROBE_CLIENT] + args, output="", stderr=str(e))
    return None


def _write_reports(pkg, probe_name, reports) -> List[Path]:
    """
    Writes ``{filename: text}`` into the package directory and snapshots the
    live manifest. Returns the paths written; I/O errors are logged, not raised.
    """
    written = []
    try:
        for filename, text in reports.items():
            path = Path(pkg.location) / filename
            path.write_text(text, encoding="utf-8")
            written.append(path)
        snapshot = edited_manifest_path(pkg)
        shutil.copyfile(pkg.manifest_location, snapshot)
        written.append(snapshot)
    except OSError as e:
        logger.warning("could not write %s reports for %s: %s", probe_name, pkg.name, e)
    return written


def run_audit_probe(pkg, registry=None) -> ProbeResult:
    """
    Runs ``npm audit --parseable``. Never raises for audit findings.

    On a non-zero exit writes ``lerna-audit-fixes.txt`` (stdout) and
    ``lerna-audit-err.txt`` (stderr) into the package directory and snapshots
    the current manifest.
    """
    failure = _run_probe(pkg, AUDIT_ARGS, registry)
    if failure is None:
        return ProbeResult("audit", passed=True)

    written = _write_reports(
        pkg,
        "audit",
        {
            AUDIT_FIXES_FILENAME: format_process_output(failure.stdout),
            AUDIT_ERR_FILENAME: format_process_output(failure.stderr),
        },
    )
    logger.debug("npm audit exited %s for %s", failure.returncode, pkg.name)
    return ProbeResult("audit", passed=False, reports=written)


def run_outdated_probe(pkg, registry=None) -> ProbeResult:
    """
    Runs ``npm outdated``. Never raises for outdated packages.

    On a non-zero exit writes ``lerna-outdated-fixes.txt`` (stdout) into the
    package directory and snapshots the current manifest.
    """
    failure = _run_probe(pkg, OUTDATED_ARGS, registry)
    if failure is None:
        return ProbeResult("outdated", passed=True)

    written = _write_reports(
        pkg, "outdated", {OUTDATED_FIXES_FILENAME: format_process_output(failure.stdout)}
    )
    logger.debug("npm outdated exited %s for %s", failure.returncode, pkg.name)
    return ProbeResult("outdated", passed=False, reports=written)


def run_post_install_probes(pkg, registry=None) -> List[ProbeResult]:
    """Runs the audit probe, then the outdated probe."""
    return [run_audit_probe(pkg, registry), run_outdated_probe(pkg, registry)]

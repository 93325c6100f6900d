import json
import subprocess
from pathlib import Path

import pytest

from depswap import child_process
from depswap.manifest import PackageManifest


@pytest.fixture
def make_package(tmp_path):
    """Writes ``data`` as package.json under tmp_path/<dirname> and loads it."""

    def _make(data, dirname="pkg", root_path=None):
        location = tmp_path / dirname
        location.mkdir(parents=True, exist_ok=True)
        manifest = location / "package.json"
        manifest.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        return PackageManifest.load(manifest, root_path=root_path)

    return _make


class FakeExec:
    """Stands in for exec_command, recording calls and the manifest seen by each."""

    def __init__(self):
        self.calls = []
        self.failures = {}

    def fail(self, subcommand, returncode=1, stdout="", stderr=""):
        self.failures[subcommand] = (returncode, stdout, stderr)

    def __call__(self, cmd, args, opts):
        manifest = Path(opts.cwd) / "package.json"
        seen = json.loads(manifest.read_text(encoding="utf-8")) if manifest.exists() else None
        self.calls.append({"cmd": cmd, "args": list(args), "opts": opts, "manifest": seen})
        if args and args[0] in self.failures:
            returncode, stdout, stderr = self.failures[args[0]]
            raise subprocess.CalledProcessError(
                returncode, [cmd] + list(args), output=stdout, stderr=stderr
            )
        return subprocess.CompletedProcess([cmd] + list(args), 0, stdout="", stderr="")

    def subcommands(self):
        return [call["args"][0] for call in self.calls]


@pytest.fixture
def fake_exec(monkeypatch):
    fake = FakeExec()
    monkeypatch.setattr(child_process, "exec_command", fake)
    return fake

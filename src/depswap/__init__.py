"""
depswap: scoped, crash-safe dependency installs

Installs an explicit list of dependencies into one package by temporarily
swapping a filtered manifest in place of its package.json, then putting the
original back, even if the process is killed half way.
"""
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

# On Python >= 3.11, use the built-in `tomllib`; older interpreters use `tomli`.
try:
    import tomllib
except ModuleNotFoundError:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

__version__ = "0.0.0"  # fallback default

_pkg_name = "depswap"

try:
    __version__ = version(_pkg_name)
except PackageNotFoundError:
    # Likely running from source → try pyproject.toml
    if tomllib is not None:
        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with pyproject_path.open("rb") as f:
                __version__ = tomllib.load(f)["project"]["version"]

from .config import ConfigManager, InstallConfig
from .manifest import PackageManifest
from .npm_install import (
    ManifestSwap,
    build_install_command,
    npm_install,
    npm_install_dependencies,
    recover_manifest,
)
from .probes import ProbeResult
from .transform import transform_manifest

__all__ = [
    "ConfigManager",
    "InstallConfig",
    "ManifestSwap",
    "PackageManifest",
    "ProbeResult",
    "build_install_command",
    "npm_install",
    "npm_install_dependencies",
    "recover_manifest",
    "transform_manifest",
]

"""
Package manifest (``package.json``) model and read/write primitives.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"

# Collections mapping name -> range
MAPPED_DEPENDENCY_TYPES = ("dependencies", "devDependencies", "optionalDependencies")
# Collections listing names only
BUNDLED_DEPENDENCY_TYPES = ("bundledDependencies", "bundleDependencies")
# Keys sorted on write, mirroring the package writer npm tooling uses
SORTED_ON_WRITE = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)


class ManifestError(Exception):
    """Raised when a manifest cannot be read or is not a JSON object."""

    def __init__(self, path, message):
        super().__init__(f"{path}: {message}")
        self.path = path


class PackageManifest:
    """
    One package on disk: its parsed manifest plus where it lives.

    ``location`` is the package directory, ``manifest_location`` the manifest
    file inside it and ``root_path`` the root of the surrounding workspace.
    """

    def __init__(self, pkg: Dict[str, Any], location, root_path=None, manifest_location=None):
        self.location = Path(location)
        self.root_path = Path(root_path) if root_path is not None else self.location
        self.manifest_location = (
            Path(manifest_location)
            if manifest_location is not None
            else self.location / MANIFEST_FILENAME
        )
        self._pkg = pkg

    @classmethod
    def load(cls, manifest_location, root_path=None) -> "PackageManifest":
        manifest_location = Path(manifest_location)
        pkg = read_manifest(manifest_location)
        return cls(
            pkg,
            manifest_location.parent,
            root_path=root_path,
            manifest_location=manifest_location,
        )

    @property
    def name(self) -> Optional[str]:
        return self._pkg.get("name")

    @property
    def version(self) -> Optional[str]:
        return self._pkg.get("version")

    @property
    def scripts(self) -> Dict[str, str]:
        return self._pkg.get("scripts") or {}

    @property
    def dependencies(self) -> Optional[Dict[str, str]]:
        return self._pkg.get("dependencies")

    @property
    def dev_dependencies(self) -> Optional[Dict[str, str]]:
        return self._pkg.get("devDependencies")

    @property
    def optional_dependencies(self) -> Optional[Dict[str, str]]:
        return self._pkg.get("optionalDependencies")

    @property
    def bundled_dependencies(self) -> Optional[List[str]]:
        return self._pkg.get("bundledDependencies", self._pkg.get("bundleDependencies"))

    def get(self, key, default=None):
        return self._pkg.get(key, default)

    def to_json(self) -> Dict[str, Any]:
        """Returns a deep copy of the raw manifest document."""
        return copy.deepcopy(self._pkg)

    def __repr__(self):
        return f"PackageManifest(name={self.name!r}, location={str(self.location)!r})"


def read_manifest(path) -> Dict[str, Any]:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ManifestError(path, "manifest not found")
    except json.JSONDecodeError as e:
        raise ManifestError(path, f"invalid JSON ({e})")
    if not isinstance(data, dict):
        raise ManifestError(path, "manifest must be a JSON object")
    return data


def normalize_manifest(data: Dict[str, Any]) -> Dict[str, Any]:
    """Sorts the keys of every name -> range collection, leaving other fields alone."""
    normalized = dict(data)
    for dep_type in SORTED_ON_WRITE:
        collection = normalized.get(dep_type)
        if isinstance(collection, dict):
            normalized[dep_type] = {name: collection[name] for name in sorted(collection)}
    return normalized


def write_manifest(path, data: Dict[str, Any], normalize: bool = True) -> None:
    """
    Serializes ``data`` to ``path`` as 2-space indented JSON with a trailing newline.
    """
    path = Path(path)
    if normalize:
        data = normalize_manifest(data)
    logger.debug("writing manifest %s", path)
    text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())

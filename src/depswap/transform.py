"""
Builds the temporary manifest used for a scoped install.

The requested specifiers are turned into a consumption map (name -> range).
Each dependency collection is filtered against it in priority order; a name
is kept in the first collection that claims it and removed from the map, so
later collections cannot claim it again. Whatever is left in the map at the
end is hoisted into ``dependencies``.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from .manifest import BUNDLED_DEPENDENCY_TYPES, MAPPED_DEPENDENCY_TYPES
from .specifiers import resolve_specifier

logger = logging.getLogger(__name__)


def build_dependency_map(dependencies: Iterable[str], where=None) -> Dict[str, str]:
    """Resolves specifiers to ``{name: range}``; a repeated name keeps the last range."""
    dep_map = {}
    for dep in dependencies:
        name, version_range = resolve_specifier(dep, where)
        dep_map[name] = version_range
    return dep_map


def filter_mapped_collection(
    collection: Dict[str, str], remaining: Dict[str, str]
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Keeps only requested names, pinned to the requested range.

    Returns the filtered collection and the names not yet claimed.
    """
    kept = {}
    remaining = dict(remaining)
    for dep_name in collection:
        if dep_name in remaining:
            # overwrite version to ensure it's always present (and accurate)
            kept[dep_name] = remaining.pop(dep_name)
    return kept, remaining


def filter_bundled_collection(
    collection: List[str], remaining: Dict[str, str]
) -> Tuple[List[str], Dict[str, str]]:
    """Same as :func:`filter_mapped_collection` for name-only (bundled) lists."""
    kept = []
    remaining = dict(remaining)
    for dep_name in collection:
        if dep_name in remaining:
            kept.append(dep_name)
            del remaining[dep_name]
    return kept, remaining


def transform_manifest(pkg, dependencies: Iterable[str]) -> dict:
    """
    Returns a new manifest document restricted to ``dependencies``.

    ``pkg`` is left untouched. Lifecycle scripts are removed so nothing runs
    during the install; local and duplicate dependencies are filtered out.
    """
    json_doc = pkg.to_json()
    remaining = build_dependency_map(dependencies, getattr(pkg, "location", None))

    # don't run lifecycle scripts
    json_doc.pop("scripts", None)

    for dep_type in MAPPED_DEPENDENCY_TYPES:
        collection = json_doc.get(dep_type)
        if isinstance(collection, dict) and collection:
            json_doc[dep_type], remaining = filter_mapped_collection(collection, remaining)

    for dep_type in BUNDLED_DEPENDENCY_TYPES:
        collection = json_doc.get(dep_type)
        # "bundleDependencies": true means "bundle everything"; leave it alone
        if isinstance(collection, list) and collection:
            json_doc[dep_type], remaining = filter_bundled_collection(collection, remaining)

    # add all leftovers (root hoisted)
    if remaining:
        if not json_doc.get("dependencies"):
            # TODO: version the hoisted entries instead of discarding them after install
            json_doc["dependencies"] = {}
        for dep_name, version_range in remaining.items():
            json_doc["dependencies"][dep_name] = version_range
        logger.debug("hoisted %s into dependencies", sorted(remaining))

    return json_doc

"""
Dependency specifier resolution.

A specifier is what a caller hands us on the command line: ``name``,
``name@range`` or ``@scope/name@range``. Everything after the separating
``@`` is kept verbatim, so aliases (``alias@npm:real@^1``) and protocol
ranges (``local@file:../local``) survive untouched.
"""

import re
from typing import Optional, Tuple

DEFAULT_RANGE = "*"

# npm package names: optional @scope/ prefix, no whitespace, no further slashes
_NAME_RE = re.compile(r"^(?:@[^\s/@]+/)?[^\s/@]+$")
_NAMELESS_PREFIXES = (".", "/", "~", "file:", "git+", "git:", "http:", "https:", "github:")


class InvalidSpecifierError(ValueError):
    """Raised when a specifier does not name a package."""


def resolve_specifier(raw: str, where: Optional[str] = None) -> Tuple[str, str]:
    """
    Resolve a raw specifier to its ``(name, range)`` pair.

    ``where`` is the directory relative specs would be resolved against; it
    only appears in error messages since ranges are passed through as-is.
    """
    spec = (raw or "").strip()
    if not spec or spec.startswith(_NAMELESS_PREFIXES):
        raise InvalidSpecifierError(_describe(raw, where))

    # the leading "@" of a scoped name is part of the name
    split_at = spec.find("@", 1)
    if split_at == -1:
        name, raw_range = spec, ""
    else:
        name, raw_range = spec[:split_at], spec[split_at + 1 :].strip()

    if not _NAME_RE.match(name):
        raise InvalidSpecifierError(_describe(raw, where))

    return name, raw_range or DEFAULT_RANGE


def _describe(raw, where):
    message = f"Specifier {raw!r} does not name a package"
    if where:
        message += f" (resolving from {where})"
    return message

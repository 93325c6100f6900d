from __future__ import annotations  # Python 3.6+ compatibility

import sys

# Keep a reference to the original, built-in print function
_builtin_print = print


def safe_print(*args, **kwargs):
    """
    Ultra-robust print: Handles Windows encoding issues and prevents shell crashes.
    Detects non-UTF8 sessions (like cp1252) and strips emojis to prevent mojibake.
    """
    if "flush" not in kwargs:
        kwargs["flush"] = True
    try:
        _builtin_print(*args, **kwargs)
    except UnicodeEncodeError:
        try:
            safe_args = []
            stream = kwargs.get("file") or sys.stdout
            encoding = getattr(stream, "encoding", None) or "utf-8"
            for arg in args:
                if isinstance(arg, str):
                    # If shell is not UTF-8, strip problematic symbols
                    if sys.platform == "win32" and encoding.lower() not in [
                        "utf-8",
                        "utf8",
                    ]:
                        import unicodedata

                        arg = "".join(
                            (c if ord(c) < 128 or unicodedata.category(c)[0] != "S" else "?")
                            for c in arg
                        )
                    safe_args.append(arg.encode(encoding, "replace").decode(encoding))
                else:
                    safe_args.append(arg)
            _builtin_print(*safe_args, **kwargs)
        except Exception:
            _builtin_print("[depswap: Encoding Error - Shell might not support UTF-8]", flush=True)


def print_header(title):
    """Prints a consistent, pretty header."""
    # Lazy import to avoid circular import
    from depswap.i18n import _

    safe_print("\n" + "=" * 60)
    safe_print(_("  📦 {}").format(title))
    safe_print("=" * 60)


def format_process_output(output) -> str:
    """Normalizes captured subprocess output (None, bytes or str) to text."""
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output

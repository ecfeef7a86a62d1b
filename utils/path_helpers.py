import os

from config import FORBIDDEN_CHARS, PLACEHOLDER_SEGMENT


def sanitize(name: str) -> str:
    """Return ``name`` as a single path segment valid on Windows, macOS and Linux.

    Forbidden characters are dropped, a leading or trailing ``.`` becomes ``_``
    and an empty result becomes ``PLACEHOLDER_SEGMENT``.
    """
    cleaned = "".join(c for c in (name or "") if c not in FORBIDDEN_CHARS)
    if cleaned.startswith("."):
        cleaned = "_" + cleaned[1:]
    if cleaned.endswith("."):
        cleaned = cleaned[:-1] + "_"
    return cleaned or PLACEHOLDER_SEGMENT


def ensure_long_path(path: str) -> str:
    if os.name == "nt":
        path = os.path.abspath(path)
        if not path.startswith("\\\\?\\"):
            path = "\\\\?\\" + os.path.normpath(path)
    return path


def same_path(a: str, b: str) -> bool:
    """Return True if ``a`` and ``b`` name the same location."""
    return os.path.normpath(os.path.abspath(a)) == os.path.normpath(os.path.abspath(b))

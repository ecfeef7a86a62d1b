import os
import json

CONFIG_PATH = os.path.expanduser("~/.music_organizer_config.json")

# Audio containers the tag reader understands.
SUPPORTED_EXTS = {".m4a", ".mp3", ".m4b", ".m4p", ".m4v"}
MP4_EXTS = {".m4a", ".m4b", ".m4p", ".m4v"}

# Songs without any artist attribution land here, under the output root.
UNKNOWN_DIR_NAME = "unknown"

# Album names equal to "<title> - single" (case-insensitive) mark a single.
SINGLE_SUFFIX = " - single"

# Characters stripped from every path segment.
FORBIDDEN_CHARS = '<>:"/\\|?*'

# Returned by sanitize() when nothing usable is left.
PLACEHOLDER_SEGMENT = "_"

DEFAULTS = {
    "verbose": False,
    "copy": False,
    "assume_yes": False,
    "log_file": None,
}


def load_config(path: str | None = None):
    """Load configuration from ``path`` (``CONFIG_PATH`` by default).

    Missing keys are filled from ``DEFAULTS``. Returns the defaults if the file
    does not exist or can't be read.
    """
    path = path or CONFIG_PATH
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
        if not isinstance(cfg, dict):
            return dict(DEFAULTS)
        for key, value in DEFAULTS.items():
            cfg.setdefault(key, value)
        return cfg
    except (OSError, ValueError):
        return dict(DEFAULTS)


def save_config(cfg: dict, path: str | None = None) -> None:
    """Write ``cfg`` to ``path`` (``CONFIG_PATH`` by default) as JSON."""
    with open(path or CONFIG_PATH, "w", encoding="utf-8") as f:
        json.dump(cfg, f, indent=2)

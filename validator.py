# validator.py

import os


class InvalidMusicDirError(ValueError):
    """Raised when the music directory to scan can't be used."""


def validate_music_dir(path):
    """
    Check that ``path`` names an existing, readable directory.
    Return (True, []) if valid, or (False, [errors]) if not.
    """
    errors = []
    if not path:
        errors.append("No music directory given.")
        return False, errors

    if not os.path.exists(path):
        errors.append(f"Not a valid music dir path: {path}")
        errors.append("  • The path does not exist.")
    elif not os.path.isdir(path):
        errors.append(f"Not a valid music dir path: {path}")
        errors.append("  • The path is not a directory.")
    elif not os.access(path, os.R_OK | os.X_OK):
        errors.append(f"Not a valid music dir path: {path}")
        errors.append("  • The directory is not readable.")

    return not errors, errors


def canonical_music_dir(path):
    """Return the canonical absolute form of ``path`` or raise InvalidMusicDirError."""
    valid, errors = validate_music_dir(path)
    if not valid:
        raise InvalidMusicDirError("\n".join(errors))
    return os.path.realpath(path)

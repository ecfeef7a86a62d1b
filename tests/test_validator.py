import os

import pytest

from validator import InvalidMusicDirError, canonical_music_dir, validate_music_dir


def test_existing_directory_is_valid(tmp_path):
    assert validate_music_dir(str(tmp_path)) == (True, [])


@pytest.mark.parametrize("name, reason", [("nope", "does not exist"), ("file.mp3", "not a directory")])
def test_invalid_paths_explain_why(tmp_path, name, reason):
    (tmp_path / "file.mp3").write_bytes(b"")

    ok, errors = validate_music_dir(str(tmp_path / name))

    assert not ok
    assert errors[0] == f"Not a valid music dir path: {tmp_path / name}"
    assert reason in errors[1]


def test_empty_path_is_invalid():
    assert validate_music_dir("") == (False, ["No music directory given."])


def test_canonical_dir_resolves_symlinks(tmp_path):
    real = tmp_path / "real"
    real.mkdir()
    link = tmp_path / "link"
    link.symlink_to(real, target_is_directory=True)

    assert canonical_music_dir(str(link)) == os.path.realpath(str(real))

    with pytest.raises(InvalidMusicDirError):
        canonical_music_dir(str(tmp_path / "missing"))

import os

import pytest
from mutagen.id3 import APIC, ID3, TALB, TIT2, TPE1, TPE2, TPOS, TRCK

from utils.audio_metadata_reader import Metadata


def _as_list(value):
    return value if isinstance(value, list) else [value]


def write_mp3(path, *, artist=None, album_artist=None, album=None, title=None,
              track=None, disc=None, cover=False, payload=b""):
    """Create ``path`` with a real ID3 tag in front of a dummy audio payload."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"\xff\xfb\x90\x00" + payload + b"\x00" * 64)
    tags = ID3()
    if artist is not None:
        tags.add(TPE1(encoding=3, text=_as_list(artist)))
    if album_artist is not None:
        tags.add(TPE2(encoding=3, text=_as_list(album_artist)))
    if album is not None:
        tags.add(TALB(encoding=3, text=[album]))
    if title is not None:
        tags.add(TIT2(encoding=3, text=[title]))
    if track is not None:
        tags.add(TRCK(encoding=3, text=[str(track)]))
    if disc is not None:
        tags.add(TPOS(encoding=3, text=[str(disc)]))
    if cover:
        tags.add(APIC(encoding=3, mime="image/png", type=3, desc="cover", data=b"\x89PNG"))
    if len(tags):
        tags.save(str(path))
    return path


@pytest.fixture
def mp3_factory():
    return write_mp3


@pytest.fixture
def fake_reader():
    """Build a tag reader answering from ``{basename: Metadata}``."""

    def make(mapping):
        def reader(path):
            return mapping.get(os.path.basename(path), Metadata())

        return reader

    return make


@pytest.fixture
def touch():
    def make(path, content=b"audio"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    return make

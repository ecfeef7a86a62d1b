"""Shared helpers for reading the tag fields the organizer groups by."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from mutagen.id3 import ID3, ID3NoHeaderError
from mutagen.mp4 import MP4

from config import MP4_EXTS
from utils.path_helpers import ensure_long_path

logger = logging.getLogger(__name__)


@dataclass
class Metadata:
    """Raw tag values for one file. The zero value means "nothing usable"."""

    track_number: Optional[int] = None
    total_tracks: Optional[int] = None
    disc_number: Optional[int] = None
    total_discs: Optional[int] = None
    artists: List[str] = field(default_factory=list)
    release_artists: List[str] = field(default_factory=list)
    release: Optional[str] = None
    title: Optional[str] = None
    has_artwork: bool = False

    def release_artist_names(self) -> Optional[List[str]]:
        """Names the release is filed under: album artists, else track artists."""
        if self.release_artists:
            return self.release_artists
        if self.artists:
            return self.artists
        return None

    def song_artist_names(self) -> Optional[List[str]]:
        """Names credited on the track itself: track artists, else album artists."""
        if self.artists:
            return self.artists
        if self.release_artists:
            return self.release_artists
        return None


def _nonzero(value: object) -> Optional[int]:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return number or None


def _split_part_of_set(text: Optional[str]) -> Tuple[Optional[int], Optional[int]]:
    """Parse ``"3/12"`` style values into ``(3, 12)``."""
    if not text:
        return None, None
    number, _, total = text.partition("/")
    return _nonzero(number), _nonzero(total) if total else None


def _id3_values(frame) -> List[str]:
    if frame is None:
        return []
    values = []
    for item in frame.text:
        # v2.3 tags written by some tools keep NUL-joined multi-values in one string
        values.extend(part for part in str(item).split("\x00") if part)
    return values


def _id3_first(frame) -> Optional[str]:
    if frame is None or not frame.text:
        return None
    return str(frame.text[0])


def metadata_from_id3(tags) -> Metadata:
    """Build :class:`Metadata` from a mutagen ``ID3`` tag."""
    track, total_tracks = _split_part_of_set(_id3_first(tags.get("TRCK")))
    disc, total_discs = _split_part_of_set(_id3_first(tags.get("TPOS")))
    return Metadata(
        track_number=track,
        total_tracks=total_tracks,
        disc_number=disc,
        total_discs=total_discs,
        artists=_id3_values(tags.get("TPE1")),
        release_artists=_id3_values(tags.get("TPE2")),
        release=_id3_first(tags.get("TALB")),
        title=_id3_first(tags.get("TIT2")),
        has_artwork=bool(tags.getall("APIC")),
    )


def _mp4_strings(value) -> List[str]:
    return [str(v) for v in value or [] if v]


def _mp4_first(value) -> Optional[str]:
    return str(value[0]) if value else None


def _mp4_pair(value) -> Tuple[Optional[int], Optional[int]]:
    if not value:
        return None, None
    pair = value[0]
    if not isinstance(pair, tuple):
        return _nonzero(pair), None
    number = pair[0] if len(pair) > 0 else None
    total = pair[1] if len(pair) > 1 else None
    return _nonzero(number), _nonzero(total)


def metadata_from_mp4(tags) -> Metadata:
    """Build :class:`Metadata` from MP4 atoms (a mapping of atom name to values)."""
    tags = tags or {}
    track, total_tracks = _mp4_pair(tags.get("trkn"))
    disc, total_discs = _mp4_pair(tags.get("disk"))
    return Metadata(
        track_number=track,
        total_tracks=total_tracks,
        disc_number=disc,
        total_discs=total_discs,
        artists=_mp4_strings(tags.get("\xa9ART")),
        release_artists=_mp4_strings(tags.get("aART")),
        release=_mp4_first(tags.get("\xa9alb")),
        title=_mp4_first(tags.get("\xa9nam")),
        has_artwork=bool(tags.get("covr")),
    )


def _read_id3(path: str) -> Metadata:
    return metadata_from_id3(ID3(ensure_long_path(path)))


def _read_mp4(path: str) -> Metadata:
    return metadata_from_mp4(MP4(ensure_long_path(path)).tags)


READERS: Dict[str, Callable[[str], Metadata]] = {".mp3": _read_id3}
READERS.update({ext: _read_mp4 for ext in MP4_EXTS})


def read_metadata(path: str) -> Metadata:
    """Return the tags of ``path``; an empty :class:`Metadata` if none can be read."""
    reader = READERS.get(os.path.splitext(path)[1].lower())
    if reader is None:
        return Metadata()
    try:
        return reader(path)
    except ID3NoHeaderError:
        logger.debug("No ID3 tag in %s", path)
    except Exception as exc:  # mutagen raises a variety of errors on damaged files
        logger.warning("Could not read tags from %s: %s", path, exc)
    return Metadata()

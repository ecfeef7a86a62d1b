"""Song / Album / Artist hierarchy built by the indexer."""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from utils.audio_metadata_reader import Metadata


@dataclass(frozen=True)
class Song:
    """One indexed audio file."""

    path: str
    track_number: Optional[int] = None
    total_tracks: Optional[int] = None
    disc_number: Optional[int] = None
    total_discs: Optional[int] = None
    release_artists: Tuple[str, ...] = ()
    artists: Tuple[str, ...] = ()
    release: str = ""
    title: str = ""
    has_artwork: bool = False

    @classmethod
    def from_metadata(cls, path: str, meta: Metadata) -> "Song":
        return cls(
            path=path,
            track_number=meta.track_number,
            total_tracks=meta.total_tracks,
            disc_number=meta.disc_number,
            total_discs=meta.total_discs,
            release_artists=tuple(meta.release_artists),
            artists=tuple(meta.artists),
            release=meta.release or "",
            title=meta.title or "",
            has_artwork=meta.has_artwork,
        )

    def artists_str(self) -> str:
        return ", ".join(self.artists)

    def release_artists_str(self) -> str:
        return ", ".join(self.release_artists)

    def credited_artist(self) -> str:
        """Artist credited on the track: track artists, else album artists."""
        return self.artists_str() or self.release_artists_str()


@dataclass
class Album:
    name: str
    songs: List[int] = field(default_factory=list)


@dataclass
class Artist:
    name: str
    albums: List[Album] = field(default_factory=list)
    # former names of artists merged into this one
    aliases: Set[str] = field(default_factory=set, compare=False, repr=False)

    def is_similar(self, other: "Artist") -> bool:
        """Names differ only in letter case."""
        return self.name != other.name and self.name.lower() == other.name.lower()

    def add_song(self, album_name: str, index: int) -> None:
        """File ``index`` under the album named exactly ``album_name``."""
        for album in self.albums:
            if album.name == album_name:
                album.songs.append(index)
                return
        self.albums.append(Album(album_name, [index]))

    def absorb(self, other: "Artist") -> None:
        """Move every album of ``other`` here, combining same-named albums."""
        self.aliases |= {other.name} | other.aliases
        for album in other.albums:
            for index in album.songs:
                self.add_song(album.name, index)
        other.albums = []

    def credit_for(self, song: Song) -> str:
        """Name to credit ``song`` with, following any merge this artist went through."""
        credited = song.credited_artist()
        return self.name if credited in self.aliases else credited


def insert_song(artists: List[Artist], artist_name: str, album_name: str, index: int) -> None:
    """Add song ``index`` to the exact-name artist/album, creating either as needed."""
    for artist in artists:
        if artist.name == artist_name:
            artist.add_song(album_name, index)
            return
    artists.append(Artist(artist_name, [Album(album_name, [index])]))


@dataclass
class LibraryIndex:
    """Result of a scan: all songs plus the hierarchy referencing them by index."""

    songs: List[Song] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)
    unknown: List[int] = field(default_factory=list)

    def placed_indices(self) -> List[int]:
        placed = [i for artist in self.artists for album in artist.albums for i in album.songs]
        return placed + list(self.unknown)

    def assert_partition(self) -> None:
        """Raise ``AssertionError`` unless every song is placed exactly once."""
        counts = Counter(self.placed_indices())
        duplicated = sorted(i for i, n in counts.items() if n > 1)
        missing = sorted(set(range(len(self.songs))) - set(counts))
        stray = sorted(set(counts) - set(range(len(self.songs))))
        if duplicated or missing or stray:
            raise AssertionError(
                f"hierarchy broken: duplicated={duplicated} missing={missing} stray={stray}"
            )

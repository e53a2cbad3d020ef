"""
Catalog data model.

Raw rows carry exactly what the media index returned (every field nullable,
sentinel "unknown" text already mapped to None). Catalog entities are the
cleaned, id-assigned records handed to callers; ``to_dict()`` renders the
camelCase wire shape.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RecordKind(str, Enum):
    """The three record kinds exposed by the media index."""

    TRACKS = "tracks"
    ALBUMS = "albums"
    ARTISTS = "artists"


@dataclass(frozen=True)
class TrackRow:
    id: int
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    album_id: Optional[int] = None
    artist_id: Optional[int] = None
    duration_ms: Optional[int] = None
    source_path: Optional[str] = None
    relative_path: Optional[str] = None
    is_music: bool = True


@dataclass(frozen=True)
class AlbumRow:
    id: int
    title: Optional[str] = None
    artist: Optional[str] = None
    num_songs: Optional[int] = None
    year: Optional[Any] = None  # stored loosely by some indexes; parsed by the normalizer


@dataclass(frozen=True)
class ArtistRow:
    id: int
    name: Optional[str] = None
    num_tracks: Optional[int] = None
    num_albums: Optional[int] = None


@dataclass
class Track:
    id: str
    title: str
    artist: str
    album: str
    album_id: str
    artist_id: str
    duration_seconds: int
    source_path: str
    content_reference: str
    cover_reference: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "album": self.album,
            "albumId": self.album_id,
            "artistId": self.artist_id,
            "durationSeconds": self.duration_seconds,
            "sourcePath": self.source_path,
            "contentReference": self.content_reference,
            "coverReference": self.cover_reference,
        }


@dataclass
class Album:
    id: str
    title: str
    artist: str
    cover_reference: str
    year: int = 0
    num_songs: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "coverReference": self.cover_reference,
            "year": self.year,
            "numSongs": self.num_songs,
        }


@dataclass
class Artist:
    id: str
    name: str
    num_tracks: int = 0
    num_albums: int = 0
    image: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "numTracks": self.num_tracks,
            "numAlbums": self.num_albums,
            "image": self.image,
        }


@dataclass
class Catalog:
    """Aggregate result of one full scan.

    The three collections are populated independently; track album/artist
    ids are opaque foreign keys and are not checked against the other two
    collections.
    """

    tracks: List[Track] = field(default_factory=list)
    albums: List[Album] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracks": [t.to_dict() for t in self.tracks],
            "albums": [a.to_dict() for a in self.albums],
            "artists": [a.to_dict() for a in self.artists],
        }


@dataclass
class FolderScanResult:
    tracks: List[Track]
    folder_label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tracks": [t.to_dict() for t in self.tracks],
            "folder": self.folder_label,
        }

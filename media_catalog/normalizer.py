"""
Metadata Normalizer - Turns raw index rows into clean catalog records

Missing text gets fixed fallback strings, durations are converted to whole
seconds, and playable/artwork references are derived from the row's ids.
None of the data anomalies handled here are errors.
"""
import logging
from typing import Optional, Union

from media_catalog.identifiers import assign_id
from media_catalog.models import (
    Album,
    AlbumRow,
    Artist,
    ArtistRow,
    RecordKind,
    Track,
    TrackRow,
)

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


def text_or_fallback(value: Optional[str], fallback: str) -> str:
    """Return value, or fallback when it is absent or blank."""
    if value is None:
        return fallback
    text = str(value)
    return text if text.strip() else fallback


def ms_to_seconds(duration_ms: Optional[int]) -> int:
    """Whole seconds by truncating division: 185342 -> 185, 999 -> 0."""
    if duration_ms is None or duration_ms < 0:
        return 0
    return int(duration_ms) // 1000


def parse_year(value) -> int:
    """Parse a year value; absent or unparsable years become 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    try:
        year = int(str(value).strip())
    except ValueError:
        try:
            # "1999.0" style values written by loose taggers
            year = int(float(str(value).strip()))
        except (ValueError, OverflowError):
            logger.debug(f"Unparsable year {value!r}, using 0")
            return 0
    return max(year, 0)


def _count(value: Optional[int]) -> int:
    if value is None or value < 0:
        return 0
    return int(value)


def _link_id(value: Optional[int]) -> int:
    if value is None or value < 0:
        return 0
    return value


class MetadataNormalizer:
    """
    Normalizes raw rows of any record kind.

    Args:
        content_base: base reference for playable content; a track's
            reference is ``content_base/<index id>``
        artwork_base: base reference for album artwork; the reference is
            ``artwork_base/<album id>`` and is not checked for existence
    """

    def __init__(self, content_base: str, artwork_base: str):
        self.content_base = content_base.rstrip("/")
        self.artwork_base = artwork_base.rstrip("/")

    def content_reference(self, index_id: int) -> str:
        return f"{self.content_base}/{index_id}"

    def artwork_reference(self, album_id: int) -> str:
        return f"{self.artwork_base}/{album_id}"

    def normalize(
        self,
        raw_row: Union[TrackRow, AlbumRow, ArtistRow],
        kind: RecordKind,
    ) -> Union[Track, Album, Artist]:
        kind = RecordKind(kind)
        if kind is RecordKind.TRACKS:
            return self.normalize_track(raw_row)
        if kind is RecordKind.ALBUMS:
            return self.normalize_album(raw_row)
        return self.normalize_artist(raw_row)

    def normalize_track(self, row: TrackRow) -> Track:
        # Missing or negative album/artist links are reported as 0
        album_id = _link_id(row.album_id)
        artist_id = _link_id(row.artist_id)
        return Track(
            id=assign_id(row.id, RecordKind.TRACKS),
            title=text_or_fallback(row.title, UNKNOWN_TITLE),
            artist=text_or_fallback(row.artist, UNKNOWN_ARTIST),
            album=text_or_fallback(row.album, UNKNOWN_ALBUM),
            album_id=assign_id(album_id, RecordKind.ALBUMS),
            artist_id=assign_id(artist_id, RecordKind.ARTISTS),
            duration_seconds=ms_to_seconds(row.duration_ms),
            source_path=row.source_path or "",
            content_reference=self.content_reference(row.id),
            cover_reference=self.artwork_reference(album_id),
        )

    def normalize_album(self, row: AlbumRow) -> Album:
        return Album(
            id=assign_id(row.id, RecordKind.ALBUMS),
            title=text_or_fallback(row.title, UNKNOWN_ALBUM),
            artist=text_or_fallback(row.artist, UNKNOWN_ARTIST),
            cover_reference=self.artwork_reference(row.id),
            year=parse_year(row.year),
            num_songs=_count(row.num_songs),
        )

    def normalize_artist(self, row: ArtistRow) -> Artist:
        return Artist(
            id=assign_id(row.id, RecordKind.ARTISTS),
            name=text_or_fallback(row.name, UNKNOWN_ARTIST),
            num_tracks=_count(row.num_tracks),
            num_albums=_count(row.num_albums),
            image="",  # the index exposes no artist imagery
        )

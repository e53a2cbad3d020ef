"""
Media Index Client - Queries a media index for tracks, albums and artists

The index is modelled as a capability (``MediaIndex.query``) so the SQLite
implementation used in production and the in-memory fixture used in tests are
interchangeable. Both hand back raw rows with nullable fields; the index's
"<unknown>" sentinel is converted to None here and nowhere else.
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import ContextManager, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from media_catalog.errors import IndexUnavailable
from media_catalog.models import AlbumRow, ArtistRow, RecordKind, TrackRow

logger = logging.getLogger(__name__)

UNKNOWN_SENTINEL = "<unknown>"

RawRow = Union[TrackRow, AlbumRow, ArtistRow]

INDEX_SCHEMA = """
CREATE TABLE IF NOT EXISTS audio_media (
    id INTEGER PRIMARY KEY,
    title TEXT,
    artist TEXT,
    album TEXT,
    album_id INTEGER,
    artist_id INTEGER,
    duration_ms INTEGER,
    file_path TEXT,
    relative_path TEXT,
    is_music INTEGER NOT NULL DEFAULT 1
);
CREATE TABLE IF NOT EXISTS audio_albums (
    id INTEGER PRIMARY KEY,
    album TEXT,
    artist TEXT,
    number_of_songs INTEGER,
    first_year
);
CREATE TABLE IF NOT EXISTS audio_artists (
    id INTEGER PRIMARY KEY,
    artist TEXT,
    number_of_tracks INTEGER,
    number_of_albums INTEGER
);
"""

_BASE_QUERIES = {
    RecordKind.TRACKS: (
        "SELECT id, title, artist, album, album_id, artist_id, duration_ms, "
        "file_path, relative_path, is_music FROM audio_media WHERE is_music != 0"
    ),
    RecordKind.ALBUMS: (
        "SELECT id, album, artist, number_of_songs, first_year FROM audio_albums"
    ),
    RecordKind.ARTISTS: (
        "SELECT id, artist, number_of_tracks, number_of_albums FROM audio_artists"
    ),
}

_SORT_KEYS = {
    RecordKind.TRACKS: "title",
    RecordKind.ALBUMS: "album",
    RecordKind.ARTISTS: "artist",
}

_FETCH_SIZE = 500


def strip_sentinel(value: Optional[str]) -> Optional[str]:
    """Map the index's "unknown" sentinel to an explicit None."""
    if value is None or value == UNKNOWN_SENTINEL:
        return None
    return value


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def ensure_index_schema(conn: sqlite3.Connection) -> None:
    """Create the media index tables if they are missing."""
    conn.executescript(INDEX_SCHEMA)
    conn.commit()


@dataclass(frozen=True)
class TrackPathFilter:
    """
    Folder-scope predicate for track queries.

    Matches when the label occurs anywhere in the raw source path or in the
    relative-path field. Plain case-sensitive substring containment: "Pop"
    also matches ".../Popular/...".
    """

    label: str

    def matches(self, source_path: Optional[str], relative_path: Optional[str]) -> bool:
        return any(
            path is not None and self.label in path
            for path in (source_path, relative_path)
        )


class MediaIndex(ABC):
    """Read-only access to the media index, one query per record kind."""

    @abstractmethod
    def query(
        self,
        kind: RecordKind,
        row_filter: Optional[TrackPathFilter] = None,
    ) -> ContextManager[Iterator[RawRow]]:
        """
        Open a query and yield an iterator of raw rows.

        Tracks are limited to music-classified entries; ``row_filter`` further
        narrows tracks by path and is ignored for other kinds. Rows come back
        ascending by title (tracks, albums) or name (artists). The underlying
        handle is released when the context exits, however it exits.

        Raises:
            IndexUnavailable: the index cannot be reached or the query faults
        """


def _as_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class SQLiteMediaIndex(MediaIndex):
    """Media index backed by a SQLite database laid out like a platform media store."""

    def __init__(self, db_path: Union[str, Path], timeout: float = 30.0):
        self.db_path = Path(db_path)
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        if not self.db_path.exists():
            raise IndexUnavailable(f"Media index not found: {self.db_path}")
        try:
            # Read-only: scans never write to the index
            conn = sqlite3.connect(
                f"{self.db_path.resolve().as_uri()}?mode=ro",
                uri=True,
                timeout=self.timeout,
            )
        except sqlite3.Error as e:
            raise IndexUnavailable(f"Cannot open media index {self.db_path}: {e}", cause=e) from e
        conn.row_factory = sqlite3.Row
        # Badly tagged files can store invalid UTF-8; keep the row, replace the bytes
        conn.text_factory = _decode_text
        return conn

    @staticmethod
    def _build_sql(kind: RecordKind, row_filter: Optional[TrackPathFilter]) -> Tuple[str, List[str]]:
        sql = _BASE_QUERIES[kind]
        params: List[str] = []
        if kind is RecordKind.TRACKS and row_filter is not None:
            # instr() is case-sensitive and treats % and _ literally, unlike LIKE
            sql += " AND (instr(file_path, ?) > 0 OR instr(relative_path, ?) > 0)"
            params = [row_filter.label, row_filter.label]
        # Sentinel rows sort like NULLs, matching what callers see after strip_sentinel
        sort_col = _SORT_KEYS[kind]
        sql += f" ORDER BY NULLIF({sort_col}, '{UNKNOWN_SENTINEL}') ASC, id ASC"
        return sql, params

    @staticmethod
    def _to_row(kind: RecordKind, row: sqlite3.Row) -> RawRow:
        if kind is RecordKind.TRACKS:
            return TrackRow(
                id=row["id"],
                title=strip_sentinel(row["title"]),
                artist=strip_sentinel(row["artist"]),
                album=strip_sentinel(row["album"]),
                album_id=_as_int(row["album_id"]),
                artist_id=_as_int(row["artist_id"]),
                duration_ms=_as_int(row["duration_ms"]),
                source_path=row["file_path"],
                relative_path=row["relative_path"],
                is_music=bool(row["is_music"]),
            )
        if kind is RecordKind.ALBUMS:
            return AlbumRow(
                id=row["id"],
                title=strip_sentinel(row["album"]),
                artist=strip_sentinel(row["artist"]),
                num_songs=_as_int(row["number_of_songs"]),
                year=row["first_year"],
            )
        return ArtistRow(
            id=row["id"],
            name=strip_sentinel(row["artist"]),
            num_tracks=_as_int(row["number_of_tracks"]),
            num_albums=_as_int(row["number_of_albums"]),
        )

    def _iter_rows(self, kind: RecordKind, cursor: sqlite3.Cursor) -> Iterator[RawRow]:
        while True:
            try:
                batch = cursor.fetchmany(_FETCH_SIZE)
            except sqlite3.Error as e:
                raise IndexUnavailable(f"Reading {kind.value} from media index failed: {e}", cause=e) from e
            if not batch:
                return
            for row in batch:
                yield self._to_row(kind, row)

    @contextmanager
    def query(
        self,
        kind: RecordKind,
        row_filter: Optional[TrackPathFilter] = None,
    ) -> Iterator[Iterator[RawRow]]:
        kind = RecordKind(kind)
        sql, params = self._build_sql(kind, row_filter)
        conn = self._connect()
        cursor = None
        try:
            try:
                cursor = conn.execute(sql, params)
            except sqlite3.Error as e:
                raise IndexUnavailable(f"{kind.value} query failed: {e}", cause=e) from e
            logger.debug(f"Opened {kind.value} query on {self.db_path.name}")
            yield self._iter_rows(kind, cursor)
        finally:
            if cursor is not None:
                cursor.close()
            conn.close()


class InMemoryMediaIndex(MediaIndex):
    """
    Deterministic in-memory index for tests and demos.

    Applies the same classification, path filtering, ordering and sentinel
    handling as the SQLite index. ``failures`` makes queries for the given
    kinds raise, and ``open_handles`` counts queries not yet released.
    """

    def __init__(
        self,
        tracks: Sequence[TrackRow] = (),
        albums: Sequence[AlbumRow] = (),
        artists: Sequence[ArtistRow] = (),
        failures: Optional[Dict[RecordKind, Exception]] = None,
    ):
        self._rows: Dict[RecordKind, List[RawRow]] = {
            RecordKind.TRACKS: list(tracks),
            RecordKind.ALBUMS: list(albums),
            RecordKind.ARTISTS: list(artists),
        }
        self.failures = dict(failures or {})
        self.queries: List[Tuple[RecordKind, Optional[TrackPathFilter]]] = []
        self.open_handles = 0
        self._lock = threading.Lock()

    @staticmethod
    def _clean(row: RawRow) -> RawRow:
        if isinstance(row, TrackRow):
            return replace(
                row,
                title=strip_sentinel(row.title),
                artist=strip_sentinel(row.artist),
                album=strip_sentinel(row.album),
            )
        if isinstance(row, AlbumRow):
            return replace(row, title=strip_sentinel(row.title), artist=strip_sentinel(row.artist))
        return replace(row, name=strip_sentinel(row.name))

    def _select(self, kind: RecordKind, row_filter: Optional[TrackPathFilter]) -> List[RawRow]:
        rows = self._rows[kind]
        if kind is RecordKind.TRACKS:
            rows = [r for r in rows if r.is_music]
            if row_filter is not None:
                rows = [r for r in rows if row_filter.matches(r.source_path, r.relative_path)]
        rows = [self._clean(r) for r in rows]
        sort_attr = "name" if kind is RecordKind.ARTISTS else "title"

        def sort_key(row):
            value = getattr(row, sort_attr)
            # NULLs first, like SQLite
            return (value is not None, value or "", row.id)

        return sorted(rows, key=sort_key)

    @contextmanager
    def query(
        self,
        kind: RecordKind,
        row_filter: Optional[TrackPathFilter] = None,
    ) -> Iterator[Iterator[RawRow]]:
        kind = RecordKind(kind)
        with self._lock:
            self.queries.append((kind, row_filter))
        failure = self.failures.get(kind)
        if failure is not None:
            if isinstance(failure, IndexUnavailable):
                raise failure
            raise IndexUnavailable(f"{kind.value} query failed: {failure}", cause=failure) from failure
        with self._lock:
            self.open_handles += 1
        try:
            yield iter(self._select(kind, row_filter))
        finally:
            with self._lock:
                self.open_handles -= 1

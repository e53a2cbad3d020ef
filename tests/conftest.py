"""Test configuration and fixtures."""

import logging
import sqlite3
import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from media_catalog.media_index import InMemoryMediaIndex, ensure_index_schema
from media_catalog.models import AlbumRow, ArtistRow, TrackRow
from media_catalog.normalizer import MetadataNormalizer

CONTENT_BASE = "content://media/external/audio/media"
ARTWORK_BASE = "content://media/external/audio/albumart"


def sample_tracks():
    return [
        TrackRow(
            id=11, title="Tidal", artist="Low Tide", album="Shorelines",
            album_id=3, artist_id=7, duration_ms=185342,
            source_path="/storage/emulated/0/Music/MyTracks/tidal.mp3",
            relative_path="Music/MyTracks/",
        ),
        TrackRow(
            id=12, title="Anchor", artist="<unknown>", album=None,
            album_id=4, artist_id=8, duration_ms=999,
            source_path="/storage/emulated/0/Download/anchor.mp3",
            relative_path="Download/",
        ),
        TrackRow(
            id=13, title=None, artist="Low Tide", album="Shorelines",
            album_id=3, artist_id=7, duration_ms=240000,
            source_path="/storage/emulated/0/Music/MyTracks/untitled.flac",
            relative_path="Music/MyTracks/",
        ),
        TrackRow(
            id=14, title="Ringtone", artist="Phone", album="System",
            album_id=5, artist_id=9, duration_ms=3000,
            source_path="/system/media/ringtone.ogg",
            relative_path="Ringtones/",
            is_music=False,
        ),
    ]


def sample_albums():
    return [
        AlbumRow(id=3, title="Shorelines", artist="Low Tide", num_songs=2, year="2019"),
        AlbumRow(id=4, title="<unknown>", artist=None, num_songs=1, year="n/a"),
    ]


def sample_artists():
    return [
        ArtistRow(id=7, name="Low Tide", num_tracks=2, num_albums=1),
        ArtistRow(id=8, name="<unknown>", num_tracks=1, num_albums=1),
    ]


def populate_index(db_path: Path, tracks=(), albums=(), artists=()) -> Path:
    """Write rows into a SQLite media index."""
    conn = sqlite3.connect(db_path)
    ensure_index_schema(conn)
    conn.executemany(
        "INSERT INTO audio_media (id, title, artist, album, album_id, artist_id, duration_ms, "
        "file_path, relative_path, is_music) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        [
            (t.id, t.title, t.artist, t.album, t.album_id, t.artist_id, t.duration_ms,
             t.source_path, t.relative_path, int(t.is_music))
            for t in tracks
        ],
    )
    conn.executemany(
        "INSERT INTO audio_albums (id, album, artist, number_of_songs, first_year) VALUES (?, ?, ?, ?, ?)",
        [(a.id, a.title, a.artist, a.num_songs, a.year) for a in albums],
    )
    conn.executemany(
        "INSERT INTO audio_artists (id, artist, number_of_tracks, number_of_albums) VALUES (?, ?, ?, ?)",
        [(a.id, a.name, a.num_tracks, a.num_albums) for a in artists],
    )
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture()
def normalizer():
    return MetadataNormalizer(CONTENT_BASE, ARTWORK_BASE)


@pytest.fixture()
def memory_index():
    return InMemoryMediaIndex(
        tracks=sample_tracks(),
        albums=sample_albums(),
        artists=sample_artists(),
    )


@pytest.fixture()
def sqlite_index_path(tmp_path):
    return populate_index(
        tmp_path / "media_index.db",
        tracks=sample_tracks(),
        albums=sample_albums(),
        artists=sample_artists(),
    )


@pytest.fixture()
def config_path(tmp_path, sqlite_index_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "index:\n"
        f"  database_path: {sqlite_index_path}\n"
        "scan:\n"
        "  parallel: true\n"
        "  max_workers: 3\n"
    )
    return cfg


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging so tests stay isolated."""
    from media_catalog import logging_utils

    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if getattr(handler, logging_utils._HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()
    logging_utils._logging_configured = False
    logging_utils.set_run_id(None)

import pytest

from media_catalog.models import AlbumRow, ArtistRow, RecordKind, TrackRow
from media_catalog.normalizer import (
    UNKNOWN_ALBUM,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
    ms_to_seconds,
    parse_year,
    text_or_fallback,
)


class TestDurationConversion:
    """Milliseconds are truncated to whole seconds, never rounded."""

    def test_truncates(self):
        assert ms_to_seconds(185342) == 185

    def test_sub_second_is_zero(self):
        assert ms_to_seconds(999) == 0

    def test_just_below_next_second(self):
        assert ms_to_seconds(1999) == 1

    def test_missing_or_negative_is_zero(self):
        assert ms_to_seconds(None) == 0
        assert ms_to_seconds(-500) == 0


class TestYearParsing:

    @pytest.mark.parametrize("value,expected", [
        (2019, 2019),
        ("2019", 2019),
        (" 1987 ", 1987),
        ("1999.0", 1999),
        (None, 0),
        ("", 0),
        ("n/a", 0),
        (-3, 0),
    ])
    def test_parse_year(self, value, expected):
        assert parse_year(value) == expected


def test_text_fallback_for_blank_values():
    assert text_or_fallback(None, "X") == "X"
    assert text_or_fallback("   ", "X") == "X"
    assert text_or_fallback("Real", "X") == "Real"


def test_track_fallbacks(normalizer):
    track = normalizer.normalize(TrackRow(id=1, album_id=2, artist_id=3), RecordKind.TRACKS)
    assert track.title == UNKNOWN_TITLE == "Unknown"
    assert track.artist == UNKNOWN_ARTIST == "Unknown Artist"
    assert track.album == UNKNOWN_ALBUM == "Unknown Album"
    assert track.source_path == ""


def test_track_fields_and_references(normalizer):
    row = TrackRow(
        id=42, title="Song", artist="Band", album="Record",
        album_id=9, artist_id=5, duration_ms=185342, source_path="/music/song.mp3",
    )
    track = normalizer.normalize(row, RecordKind.TRACKS)

    assert track.id == "t_42"
    assert track.album_id == "a_9"
    assert track.artist_id == "ar_5"
    assert track.duration_seconds == 185
    assert track.content_reference == "content://media/external/audio/media/42"
    assert track.cover_reference == "content://media/external/audio/albumart/9"
    assert track.to_dict()["durationSeconds"] == 185


def test_content_reference_is_stable(normalizer):
    row = TrackRow(id=77, album_id=1, artist_id=1)
    first = normalizer.normalize_track(row)
    second = normalizer.normalize_track(row)
    assert first.content_reference == second.content_reference


def test_track_missing_links_default_to_zero(normalizer):
    track = normalizer.normalize_track(TrackRow(id=1))
    assert track.album_id == "a_0"
    assert track.artist_id == "ar_0"
    assert track.cover_reference.endswith("/0")


def test_album_normalization(normalizer):
    album = normalizer.normalize(
        AlbumRow(id=3, title=None, artist=None, num_songs=None, year="unknown"),
        RecordKind.ALBUMS,
    )
    assert album.id == "a_3"
    assert album.title == "Unknown Album"
    assert album.artist == "Unknown Artist"
    assert album.year == 0
    assert album.num_songs == 0
    assert album.cover_reference == "content://media/external/audio/albumart/3"


def test_artist_normalization(normalizer):
    artist = normalizer.normalize(ArtistRow(id=8, name=None, num_tracks=4, num_albums=-1), RecordKind.ARTISTS)
    assert artist.to_dict() == {
        "id": "ar_8",
        "name": "Unknown Artist",
        "numTracks": 4,
        "numAlbums": 0,
        "image": "",
    }


def test_base_references_trailing_slash_is_ignored():
    from media_catalog.normalizer import MetadataNormalizer

    normalizer = MetadataNormalizer("content://base/", "content://art/")
    track = normalizer.normalize_track(TrackRow(id=1, album_id=2))
    assert track.content_reference == "content://base/1"
    assert track.cover_reference == "content://art/2"


def test_negative_links_treated_as_missing(normalizer):
    track = normalizer.normalize_track(TrackRow(id=5, album_id=-1, artist_id=-7))
    assert track.album_id == "a_0"
    assert track.artist_id == "ar_0"
    assert track.cover_reference == "content://media/external/audio/albumart/0"
